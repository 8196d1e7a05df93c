"""Renderer adapter: interactive Plotly HTML (pie, bubble, force).

Each frame becomes one standalone HTML page.  Hovering a slice, bubble
or node shows the cluster detail line.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import plotly.graph_objects as go
from plotly.colors import sample_colorscale

from clusterview.domain.models import ClusterSummary, RenderFrame, ViewMode
from clusterview.ports.renderer import RendererPort
from clusterview.services.clusterer import format_detail

log = logging.getLogger(__name__)

COLORSCALE = "Spectral"
_GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


def _colours(n: int) -> list[str]:
    if n == 0:
        return []
    return sample_colorscale(COLORSCALE, [i / max(1, n - 1) for i in range(n)])


def bubble_radius(weight: float) -> float:
    return math.sqrt(max(0.0, weight) * 200) + 20


# ── Figures ─────────────────────────────────────────────────────────────────


def make_pie_figure(frame: RenderFrame) -> go.Figure:
    clusters = frame.clusters
    fig = go.Figure(go.Pie(
        ids=[c.id for c in clusters],
        labels=[f"{c.id} ({c.size})" for c in clusters],
        values=[c.weight for c in clusters],
        sort=False,
        marker=dict(colors=_colours(len(clusters)), line=dict(width=1, color="#0f172a")),
        hovertext=[format_detail(c) for c in clusters],
        hoverinfo="text",
        textinfo="label",
        textfont=dict(size=10),
    ))
    return fig


def bubble_positions(clusters: list[ClusterSummary]) -> np.ndarray:
    """Deterministic golden-angle spiral, spaced by the largest bubble."""
    n = len(clusters)
    if n == 0:
        return np.zeros((0, 2))
    spacing = 2 * max(bubble_radius(c.weight) for c in clusters)
    i = np.arange(n)
    r = spacing * np.sqrt(i) * 0.75
    theta = i * _GOLDEN_ANGLE
    return np.column_stack([r * np.cos(theta), r * np.sin(theta)])


def make_bubble_figure(frame: RenderFrame) -> go.Figure:
    clusters = frame.clusters
    pos = bubble_positions(clusters)
    radii = [bubble_radius(c.weight) for c in clusters]

    fig = go.Figure(go.Scatter(
        x=pos[:, 0].tolist(), y=pos[:, 1].tolist(),
        mode="markers+text",
        marker=dict(size=[2 * r for r in radii], sizemode="diameter",
                    color=_colours(len(clusters)),
                    line=dict(width=1, color="#0f172a"), opacity=0.92),
        text=[f"{c.id} ({c.size})" for c in clusters],
        textfont=dict(size=10),
        hovertext=[format_detail(c) for c in clusters],
        hoverinfo="text",
        name="clusters",
    ))
    fig.update_layout(
        xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        yaxis=dict(showgrid=False, zeroline=False, showticklabels=False,
                   scaleanchor="x"),
        plot_bgcolor="white",
    )
    return fig


def make_force_figure(frame: RenderFrame, *, seed: int = 42) -> go.Figure:
    import networkx as nx

    G = nx.Graph()
    for c in frame.clusters:
        G.add_node(c.id)
    for link in frame.links:
        G.add_edge(link.source, link.target, weight=link.weight)

    pos = nx.spring_layout(G, seed=seed, weight="weight") if len(G) else {}

    traces: list[go.Scatter] = []
    for link in frame.links:
        x0, y0 = pos[link.source]
        x1, y1 = pos[link.target]
        traces.append(go.Scatter(
            x=[x0, x1], y=[y0, y1], mode="lines",
            line=dict(width=1 + 3 * min(1.0, link.weight),
                      color=sample_colorscale(COLORSCALE, [min(1.0, link.weight)])[0]),
            hoverinfo="text",
            hovertext=f"{link.source} ↔ {link.target}: {link.weight:.2f}",
            showlegend=False,
        ))

    clusters = frame.clusters
    traces.append(go.Scatter(
        x=[float(pos[c.id][0]) for c in clusters],
        y=[float(pos[c.id][1]) for c in clusters],
        mode="markers+text",
        marker=dict(size=[max(18, min(50, 12 + c.size * 3)) for c in clusters],
                    color=_colours(len(clusters)),
                    line=dict(width=1.5, color="white"), opacity=0.92),
        text=[c.id for c in clusters],
        textposition="top center",
        textfont=dict(size=9, color="#333"),
        hovertext=[format_detail(c) for c in clusters],
        hoverinfo="text",
        name="clusters",
    ))

    fig = go.Figure(data=traces)
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        plot_bgcolor="white",
    )
    return fig


_FIGURE_BUILDERS = {
    ViewMode.PIE: make_pie_figure,
    ViewMode.BUBBLE: make_bubble_figure,
    ViewMode.FORCE: make_force_figure,
}


def make_figure(frame: RenderFrame) -> go.Figure:
    fig = _FIGURE_BUILDERS[frame.view](frame)
    fig.update_layout(
        title=dict(
            text=f"Clusters — {frame.view.value} view<br>"
                 f"<sup>threshold {frame.threshold:.2f} · {len(frame.clusters)} clusters</sup>",
            font=dict(size=18),
        ),
        margin=dict(l=20, r=20, t=80, b=20),
    )
    return fig


# ── Adapter ─────────────────────────────────────────────────────────────────


class PlotlyRenderer(RendererPort):
    """Render frames to a standalone Plotly HTML page."""

    def __init__(self, out_path: str | Path | None = None, *, height: int = 700):
        self._out_path = Path(out_path) if out_path else None
        self._height = height

    def render(self, frame: RenderFrame) -> str:
        if not frame.clusters:
            html = _empty_html(frame)
        else:
            fig = make_figure(frame)
            fig.update_layout(height=self._height)
            body = fig.to_html(full_html=False, include_plotlyjs=False)
            html = _page(frame, body)

        if self._out_path is not None:
            self._out_path.parent.mkdir(parents=True, exist_ok=True)
            self._out_path.write_text(html, encoding="utf-8")
            log.info(
                "Rendered %s view (%d clusters) → %s",
                frame.view.value, len(frame.clusters), self._out_path,
            )
        return html


def _page(frame: RenderFrame, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>Clusters — {frame.view.value}</title>
<script src="https://cdn.plot.ly/plotly-2.35.2.min.js"></script>
<style>
  body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; background: #fafafa; }}
  .desc {{ margin: 4px 20px 10px; color: #777; font-size: 13px; }}
  .panel {{ padding: 10px 20px; }}
</style>
</head>
<body>
<p class="desc">
  View: <b>{frame.view.value}</b> &nbsp; threshold: <b>{frame.threshold:.2f}</b>
  &nbsp; clusters: <b>{len(frame.clusters)}</b>
  &nbsp; total weight: <b>{frame.total_weight:.2f}</b>
</p>
<div class="panel">{body}</div>
</body>
</html>"""


def _empty_html(frame: RenderFrame) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"/><title>Clusters — No Data</title>
<style>body{{font-family:'Segoe UI',system-ui,sans-serif;display:flex;
align-items:center;justify-content:center;height:100vh;margin:0;
background:#fafafa;color:#555;}}
.box{{text-align:center;}}</style></head>
<body><div class="box"><h2>Clusters</h2>
<p>No clusters with positive weight at threshold {frame.threshold:.2f}.</p></div></body></html>"""
