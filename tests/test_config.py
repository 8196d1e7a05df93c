"""Tests for config loading and adapter factories."""

import pytest

from clusterview.adapters.classifiers.keyword import KeywordClassifier
from clusterview.adapters.classifiers.single import SingleGroupClassifier
from clusterview.adapters.renderers.plotly_renderer import PlotlyRenderer
from clusterview.config import (
    build_classifier,
    build_controller,
    build_renderer,
    load_config,
)
from clusterview.domain.models import ViewMode
from tests.conftest import RecordingRenderer


class TestLoadConfig:
    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_empty_file(self, tmp_path):
        p = tmp_path / "empty.yaml"
        p.write_text("", encoding="utf-8")
        assert load_config(str(p)) == {}

    def test_reads_yaml(self, config_file):
        cfg = load_config(str(config_file))
        assert cfg["renderer"]["adapter"] == "none"
        assert cfg["view"]["threshold"] == 0.5


class TestFactories:
    def test_classifiers(self):
        assert isinstance(build_classifier({}), KeywordClassifier)
        single = build_classifier({"adapter": "single", "group": "Stuff"})
        assert isinstance(single, SingleGroupClassifier)
        assert single.groups == ["Stuff"]

    def test_unknown_classifier(self):
        with pytest.raises(ValueError, match="Unknown classifier"):
            build_classifier({"adapter": "llm"})

    def test_plotly_renderer_resolves_output(self, tmp_path):
        renderer = build_renderer({"output": "out/c.html"}, config_dir=str(tmp_path))
        assert isinstance(renderer, PlotlyRenderer)

    def test_none_renderer(self):
        renderer = build_renderer({"adapter": "none"})
        assert renderer.render(None) == ""

    def test_unknown_renderer(self):
        with pytest.raises(ValueError, match="Unknown renderer"):
            build_renderer({"adapter": "svg"})


class TestBuildController:
    def test_without_document(self, config_file):
        ctl = build_controller(str(config_file))
        assert not ctl.loaded
        assert ctl.threshold == 0.5
        assert ctl.view is ViewMode.PIE

    def test_with_document(self, config_file, document_file):
        ctl = build_controller(str(config_file), document=str(document_file))
        assert ctl.loaded
        assert ctl.last_frame is not None
        # n2-n3 at 0.4 stays split; the lone Custom node has no weight
        assert [c.id for c in ctl.last_frame.clusters] == ["Food • 1", "Food • 2"]

    def test_view_settings(self, tmp_path):
        cfg = tmp_path / "c.yaml"
        cfg.write_text(
            "renderer:\n  adapter: none\nview:\n  mode: force\n  threshold: 2\n",
            encoding="utf-8",
        )
        ctl = build_controller(str(cfg))
        assert ctl.view is ViewMode.FORCE
        assert ctl.threshold == 0.96

    def test_explicit_renderer_replaces_configured(self, tmp_path, document_file):
        cfg = tmp_path / "c.yaml"
        cfg.write_text("renderer:\n  adapter: plotly\n  output: configured.html\n", encoding="utf-8")
        renderer = RecordingRenderer()

        ctl = build_controller(str(cfg), document=str(document_file), renderer=renderer)

        assert len(renderer.frames) == 1
        assert ctl.last_output == "<frame pie 2>"
        assert not (tmp_path / "configured.html").exists()
