"""View controller: threshold/view state, re-clustering, edits.

Every trigger (threshold change, view switch, weight edit, load) runs
the clusterer from scratch against the controller's ``GraphState`` and
hands the resulting frame to the renderer.  Nothing is cached except the
last frame, which backs selection lookups.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from clusterview.domain.models import (
    EditTarget,
    GraphState,
    RenderFrame,
    ViewMode,
    clamp_threshold,
    slider_to_threshold,
)
from clusterview.ports.classifier import GroupClassifierPort
from clusterview.ports.renderer import RendererPort
from clusterview.services.clusterer import cluster, cluster_links, format_detail, summarize
from clusterview.services.ingestion import build_graph, load_graph

log = logging.getLogger(__name__)


class ViewController:
    """Owns the session graph and the ``{threshold, view}`` state."""

    def __init__(
        self,
        renderer: RendererPort,
        *,
        classifier: GroupClassifierPort | None = None,
        threshold: float = 0.5,
        view: ViewMode | str = ViewMode.PIE,
        state: GraphState | None = None,
    ):
        self._renderer = renderer
        self._classifier = classifier
        self._threshold = clamp_threshold(threshold)
        self._view = _coerce_view(view)
        self._state = state
        self._last_frame: RenderFrame | None = None
        self._last_output: str | None = None

    # ── state ──

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def view(self) -> ViewMode:
        return self._view

    @property
    def loaded(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> GraphState | None:
        return self._state

    @property
    def last_frame(self) -> RenderFrame | None:
        return self._last_frame

    @property
    def last_output(self) -> str | None:
        """What the renderer returned for the last frame."""
        return self._last_output

    def load(self, state: GraphState) -> RenderFrame | None:
        self._state = state
        log.info(
            "Loaded graph: %d nodes, %d edges", len(state.nodes), len(state.edges)
        )
        return self.render()

    def load_document(self, document: str | Path | dict[str, Any]) -> RenderFrame | None:
        """Ingest a document (path or parsed dict) with the configured classifier."""
        if self._classifier is None:
            raise RuntimeError("No classifier configured for ingestion")
        if isinstance(document, dict):
            return self.load(build_graph(document, self._classifier))
        return self.load(load_graph(document, self._classifier))

    # ── triggers ──

    def set_threshold(self, value: float) -> RenderFrame | None:
        self._threshold = clamp_threshold(value)
        return self.render()

    def set_slider(self, position: float) -> RenderFrame | None:
        return self.set_threshold(slider_to_threshold(position))

    def set_view(self, view: ViewMode | str) -> RenderFrame | None:
        self._view = _coerce_view(view)
        return self.render()

    def render(self) -> RenderFrame | None:
        """Re-cluster and draw; a no-op until a graph is loaded."""
        if self._state is None:
            return None

        clusters = cluster(
            self._state.nodes,
            self._state.edges,
            self._threshold,
            group_order=self._state.group_order,
        )
        frame = RenderFrame(
            clusters=[summarize(c) for c in clusters],
            view=self._view,
            threshold=self._threshold,
            links=cluster_links(clusters, self._state.edges),
        )
        self._last_output = self._renderer.render(frame)
        self._last_frame = frame
        log.debug(
            "Rendered %s view: %d clusters at threshold %.3f",
            self._view.value, len(frame.clusters), self._threshold,
        )
        return frame

    # ── selection / editing ──

    def select(self, cluster_id: str) -> str | None:
        """Detail text for a cluster of the last frame."""
        if self._last_frame is None:
            return None
        for summary in self._last_frame.clusters:
            if summary.id == cluster_id:
                return format_detail(summary)
        return None

    def edit_target(self, assoc_id: str) -> EditTarget | None:
        """The id and current weight to pre-fill an editor with."""
        if self._state is None:
            return None
        matched = self._state.edges_matching(assoc_id)
        if matched:
            return EditTarget(id=str(assoc_id), weight=matched[0].weight, kind="edge")
        if self._last_frame is not None:
            for summary in self._last_frame.clusters:
                if summary.id == assoc_id:
                    return EditTarget(id=summary.id, weight=summary.weight, kind="cluster")
        return None

    def apply_edit(self, assoc_id: str, weight: float) -> int:
        """Set the weight of every edge matching *assoc_id*, then re-render.

        *assoc_id* is either an edge's stable id or its ``source->target``
        key.  The weight is trusted; editors validate it.  Returns the
        number of edges changed.
        """
        if self._state is None:
            return 0

        updated = 0
        for edge in self._state.edges_matching(assoc_id):
            edge.weight = weight
            updated += 1

        if updated:
            log.info("Edited %d edge(s) %s -> %.2f", updated, assoc_id, weight)
        else:
            log.warning("No edge matches %r; weight unchanged", assoc_id)
        self.render()
        return updated

    # ── export ──

    def export_snapshot(self) -> dict[str, Any]:
        """The current document, edits included, for a local download."""
        if self._state is None:
            raise RuntimeError("No data loaded")

        links = []
        for e in self._state.edges:
            rec: dict[str, Any] = {}
            if e.id is not None:
                rec["id"] = e.id
            rec.update(source=e.source, target=e.target, weight=e.weight)
            links.append(rec)

        return {
            "nodes": [
                {"id": n.id, "label": n.label, "group": n.group}
                for n in self._state.nodes
            ],
            "links": links,
        }


def _coerce_view(view: ViewMode | str) -> ViewMode:
    try:
        return ViewMode(view)
    except ValueError:
        choices = ", ".join(m.value for m in ViewMode)
        raise ValueError(f"Unknown view mode: {view!r} (expected one of {choices})") from None
