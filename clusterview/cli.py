"""clusterview command-line interface."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from clusterview.domain.models import ViewMode, granularity_hint
from clusterview.services.ingestion import DocumentError


@click.group()
@click.option("--config", "-c", default="config.yaml", envvar="CLUSTERVIEW_CONFIG",
              show_envvar=True, help="Path to config YAML.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """clusterview: threshold clustering of weighted item graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _controller(ctx: click.Context, document: str):
    """Config-wired controller that draws nothing; commands only read its state."""
    from clusterview.config import build_controller, build_renderer

    try:
        return build_controller(
            ctx.obj["config"], document=document,
            renderer=build_renderer({"adapter": "none"}),
        )
    except (DocumentError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc


_threshold_option = click.option(
    "--threshold", "-t", type=float, default=None,
    help="Minimum link weight (clamped to 0–0.96). Defaults to the config value.",
)


@main.command()
@click.argument("document", type=click.Path(exists=True))
@_threshold_option
@click.option("--slider", "-s", type=click.FloatRange(0, 1), default=None,
              help="Slider position 0–1, mapped onto the threshold range.")
@click.pass_context
def clusters(ctx: click.Context, document: str, threshold: float | None,
             slider: float | None) -> None:
    """List the visible clusters of DOCUMENT."""
    controller = _controller(ctx, document)
    if slider is not None:
        frame = controller.set_slider(slider)
        click.echo(f"Granularity: {granularity_hint(slider)}")
    elif threshold is not None:
        frame = controller.set_threshold(threshold)
    else:
        frame = controller.last_frame

    click.echo(f"Threshold {frame.threshold:.2f}: {len(frame.clusters)} clusters\n")
    for c in frame.clusters:
        click.echo(f"  {c.id:<24} {c.size:>4} items   weight {c.weight:.2f}")


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.argument("cluster_id")
@_threshold_option
@click.pass_context
def detail(ctx: click.Context, document: str, cluster_id: str,
           threshold: float | None) -> None:
    """Show the detail line for CLUSTER_ID."""
    controller = _controller(ctx, document)
    if threshold is not None:
        controller.set_threshold(threshold)

    text = controller.select(cluster_id)
    if text is None:
        raise click.ClickException(f"No visible cluster: {cluster_id}")
    click.echo(text)


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.option("--view", "view", default=None,
              type=click.Choice([m.value for m in ViewMode]),
              help="Chart type. Defaults to the config value.")
@_threshold_option
@click.option("--output", "-o", default="data/clusters.html", help="Output HTML path.")
@click.pass_context
def render(ctx: click.Context, document: str, view: str | None,
           threshold: float | None, output: str) -> None:
    """Render DOCUMENT as an interactive HTML chart."""
    from clusterview.adapters.renderers.plotly_renderer import PlotlyRenderer
    from clusterview.services.controller import ViewController

    base = _controller(ctx, document)
    controller = ViewController(
        PlotlyRenderer(out_path=output),
        threshold=base.threshold if threshold is None else threshold,
        view=view or base.view,
        state=base.state,
    )
    frame = controller.render()
    click.echo(
        f"Rendered {frame.view.value} view ({len(frame.clusters)} clusters) → "
        f"{Path(output).resolve()}"
    )


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.argument("assoc_id")
@click.argument("weight", type=click.FloatRange(0, 1))
@_threshold_option
@click.option("--output", "-o", default=None,
              help="Where to write the edited document. Defaults to <DOCUMENT>.edited.json.")
@click.pass_context
def edit(ctx: click.Context, document: str, assoc_id: str, weight: float,
         threshold: float | None, output: str | None) -> None:
    """Set the WEIGHT of link ASSOC_ID (id or 'source->target')."""
    controller = _controller(ctx, document)
    if threshold is not None:
        controller.set_threshold(threshold)

    target = controller.edit_target(assoc_id)
    if target is None or target.kind != "edge":
        raise click.ClickException(f"No link matches: {assoc_id}")

    updated = controller.apply_edit(assoc_id, weight)
    click.echo(f"Updated {updated} link(s): {target.weight:.2f} → {weight:.2f}")

    out = Path(output) if output else Path(document).with_suffix(".edited.json")
    out.write_text(json.dumps(controller.export_snapshot(), indent=2), encoding="utf-8")
    click.echo(f"Saved → {out}")

    frame = controller.last_frame
    for c in frame.clusters:
        click.echo(f"  {c.id:<24} {c.size:>4} items   weight {c.weight:.2f}")


@main.command()
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", default=None, type=int, help="Bind port.")
@click.option("--document", "-d", default=None, type=click.Path(exists=True),
              help="Document to load at startup.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None,
          document: str | None) -> None:
    """Start the HTTP API (slider, view switch, editor, export)."""
    import os

    import uvicorn

    # The server reads these at startup; .env never overrides them.
    os.environ["CLUSTERVIEW_CONFIG"] = ctx.obj["config"]
    if document:
        os.environ["CLUSTERVIEW_DOCUMENT"] = document

    uvicorn.run(
        "clusterview.api_server:app",
        host=host or os.environ.get("CLUSTERVIEW_HOST", "127.0.0.1"),
        port=port or int(os.environ.get("CLUSTERVIEW_PORT", "8000")),
        log_level="info",
    )


if __name__ == "__main__":
    main()
