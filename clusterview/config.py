"""Configuration loading and adapter factory.

Reads a YAML config file and instantiates the correct adapter
for each port, then wires them into a ViewController.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Walk up from this file (clusterview/config.py) to the project root and load .env.
# Variables already in the environment (e.g. set by `clusterview serve`) win.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env", override=False)

from clusterview.domain.models import RenderFrame
from clusterview.ports.classifier import GroupClassifierPort
from clusterview.ports.renderer import RendererPort
from clusterview.services.controller import ViewController

log = logging.getLogger(__name__)


def load_config(path: str = "config.yaml") -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(p) as f:
        return yaml.safe_load(f) or {}


# ── Adapter factories ──


def build_classifier(cfg: dict[str, Any]) -> GroupClassifierPort:
    adapter = cfg.get("adapter", "keyword")

    if adapter == "keyword":
        from clusterview.adapters.classifiers.keyword import KeywordClassifier
        return KeywordClassifier.from_config(cfg)

    elif adapter == "single":
        from clusterview.adapters.classifiers.single import SingleGroupClassifier
        return SingleGroupClassifier(group=cfg.get("group", "All"))

    raise ValueError(f"Unknown classifier adapter: {adapter}")


def build_renderer(cfg: dict[str, Any], *, config_dir: str = ".") -> RendererPort:
    adapter = cfg.get("adapter", "plotly")

    if adapter == "plotly":
        from clusterview.adapters.renderers.plotly_renderer import PlotlyRenderer
        output = cfg.get("output")
        resolved = str((Path(config_dir) / output).resolve()) if output else None
        return PlotlyRenderer(out_path=resolved, height=cfg.get("height", 700))

    elif adapter == "none":

        class _NullRenderer(RendererPort):
            """Draws nothing; used headless and in tests."""

            def render(self, frame: RenderFrame) -> str:
                return ""

        return _NullRenderer()

    raise ValueError(f"Unknown renderer adapter: {adapter}")


# ── Top-level builder ──


def build_controller(
    config_path: str = "config.yaml",
    document: str | None = None,
    *,
    renderer: RendererPort | None = None,
) -> ViewController:
    """Load config, wire adapters, and optionally load a document.

    An explicit *renderer* replaces the configured one.
    """
    cfg = load_config(config_path)
    config_parent = str(Path(config_path).resolve().parent)

    log.info("  → building classifier …")
    classifier = build_classifier(cfg.get("classifier", {}))
    log.info("  ✓ classifier ready (%d groups)", len(classifier.groups))

    if renderer is None:
        log.info("  → building renderer …")
        renderer = build_renderer(cfg.get("renderer", {}), config_dir=config_parent)
        log.info("  ✓ renderer ready")

    view_cfg = cfg.get("view", {})
    controller = ViewController(
        renderer,
        classifier=classifier,
        threshold=view_cfg.get("threshold", 0.5),
        view=view_cfg.get("mode", "pie"),
    )

    if document:
        log.info("  → loading document %s …", document)
        controller.load_document(document)
    return controller
