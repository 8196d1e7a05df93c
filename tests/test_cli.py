"""Tests for the click CLI."""

import json

import pytest
from click.testing import CliRunner

from clusterview.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def plotly_config_file(tmp_path):
    cfg = tmp_path / "plotly.yaml"
    cfg.write_text(
        "renderer:\n"
        "  adapter: plotly\n"
        "  output: configured.html\n",
        encoding="utf-8",
    )
    return cfg


def _invoke(runner, config_file, *args):
    return runner.invoke(main, ["-c", str(config_file), *args])


class TestClusters:
    def test_lists_clusters(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "clusters", str(document_file))

        assert result.exit_code == 0, result.output
        assert "Threshold 0.50: 2 clusters" in result.output
        assert "Food • 1" in result.output

    def test_threshold_option(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "clusters", str(document_file), "-t", "0.3")

        assert result.exit_code == 0, result.output
        assert "Threshold 0.30: 1 clusters" in result.output

    def test_slider_option(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "clusters", str(document_file), "-s", "0")

        assert result.exit_code == 0, result.output
        assert "Granularity: coarse" in result.output

    def test_bad_document(self, runner, config_file, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"nodes": [{"label": "x"}]}', encoding="utf-8")
        result = _invoke(runner, config_file, "clusters", str(bad))

        assert result.exit_code != 0
        assert "missing 'id'" in result.output


class TestDetail:
    def test_detail(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "detail", str(document_file), "Food • 1")

        assert result.exit_code == 0, result.output
        assert "Food • 1  total link weight: 0.90  items: apple, bread" in result.output

    def test_unknown_cluster(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "detail", str(document_file), "Nope")
        assert result.exit_code != 0


class TestRender:
    def test_writes_html(self, runner, config_file, document_file, tmp_path):
        out = tmp_path / "chart.html"
        result = _invoke(
            runner, config_file, "render", str(document_file),
            "--view", "bubble", "-o", str(out),
        )

        assert result.exit_code == 0, result.output
        assert "Rendered bubble view (2 clusters)" in result.output
        assert out.exists()

    def test_only_writes_requested_output(
        self, runner, plotly_config_file, document_file, tmp_path
    ):
        out = tmp_path / "chart.html"
        result = _invoke(
            runner, plotly_config_file, "render", str(document_file), "-o", str(out),
        )

        assert result.exit_code == 0, result.output
        assert out.exists()
        assert not (tmp_path / "configured.html").exists()


class TestNoSideEffects:
    @pytest.mark.parametrize(
        "args",
        [
            ["clusters", "{doc}"],
            ["detail", "{doc}", "Food • 1"],
            ["edit", "{doc}", "l1", "0.2"],
        ],
    )
    def test_read_commands_skip_configured_renderer(
        self, runner, plotly_config_file, document_file, tmp_path, args
    ):
        argv = [a.format(doc=document_file) for a in args]
        result = _invoke(runner, plotly_config_file, *argv)

        assert result.exit_code == 0, result.output
        assert not (tmp_path / "configured.html").exists()


class TestEdit:
    def test_edit_writes_snapshot(self, runner, config_file, document_file, tmp_path):
        out = tmp_path / "edited.json"
        result = _invoke(
            runner, config_file, "edit", str(document_file), "n2->n3", "0.9", "-o", str(out),
        )

        assert result.exit_code == 0, result.output
        assert "Updated 1 link(s): 0.40 → 0.90" in result.output
        snap = json.loads(out.read_text(encoding="utf-8"))
        assert snap["links"][1]["weight"] == 0.9
        assert "Food " in result.output

    def test_default_output_beside_document(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "edit", str(document_file), "l1", "0.1")

        assert result.exit_code == 0, result.output
        assert document_file.with_suffix(".edited.json").exists()

    def test_weight_out_of_range(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "edit", str(document_file), "l1", "1.5")
        assert result.exit_code != 0

    def test_unknown_link(self, runner, config_file, document_file):
        result = _invoke(runner, config_file, "edit", str(document_file), "zzz", "0.5")
        assert result.exit_code != 0
        assert "No link matches" in result.output


class TestServe:
    @pytest.fixture
    def uvicorn_calls(self, monkeypatch):
        import os

        import uvicorn

        calls = []

        def fake_run(app, **kwargs):
            calls.append({
                "app": app,
                "config": os.environ.get("CLUSTERVIEW_CONFIG"),
                "document": os.environ.get("CLUSTERVIEW_DOCUMENT"),
                **kwargs,
            })

        monkeypatch.setattr(uvicorn, "run", fake_run)
        return calls

    def test_options_override_environment(
        self, runner, monkeypatch, uvicorn_calls, config_file, document_file
    ):
        monkeypatch.setenv("CLUSTERVIEW_CONFIG", "stale.yaml")
        monkeypatch.setenv("CLUSTERVIEW_DOCUMENT", "stale.json")

        result = _invoke(
            runner, config_file, "serve", "-d", str(document_file),
            "--host", "0.0.0.0", "--port", "9001",
        )

        assert result.exit_code == 0, result.output
        [call] = uvicorn_calls
        assert call["app"] == "clusterview.api_server:app"
        assert call["config"] == str(config_file)
        assert call["document"] == str(document_file)
        assert (call["host"], call["port"]) == ("0.0.0.0", 9001)

    def test_config_from_environment(self, runner, monkeypatch, uvicorn_calls, config_file):
        monkeypatch.setenv("CLUSTERVIEW_CONFIG", str(config_file))

        result = runner.invoke(main, ["serve"])

        assert result.exit_code == 0, result.output
        assert uvicorn_calls[0]["config"] == str(config_file)
