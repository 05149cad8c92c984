"""Tests for the monitor CLI script."""

import json
import sys

import pytest

from scripts.monitor_cli import build_parser, load_settings, main


def _run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["monitor_cli.py", *argv])
    main()


class TestSettings:
    def test_flags_override(self):
        args = build_parser().parse_args([
            "--heart-rate", "110", "--pathology", "stemi", "--artifacts", "none", "--seed", "4",
        ])
        settings = load_settings(args)
        assert settings.session.heart_rate == 110.0
        assert settings.session.pathology == "stemi"
        assert settings.simulator.artifact_preset == "none"
        assert settings.simulator.seed == 4

    def test_unknown_pathology_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--pathology", "torsades"])


class TestMain:
    def test_prints_detections(self, monkeypatch, capsys):
        _run_cli(monkeypatch, "--seconds", "10", "--artifacts", "none", "--noise-level", "0", "--seed", "1")
        out = capsys.readouterr().out
        assert "normal" in out

    def test_too_short_run(self, monkeypatch, capsys):
        _run_cli(monkeypatch, "--seconds", "1", "--seed", "1")
        assert "No detection" in capsys.readouterr().out

    def test_json_output(self, monkeypatch, capsys):
        _run_cli(
            monkeypatch, "--seconds", "10", "--artifacts", "none", "--noise-level", "0", "--json",
        )
        lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
        assert lines
        assert json.loads(lines[-1])["detection"]["type"] == "normal"

    def test_report_and_plot(self, monkeypatch, capsys, tmp_path):
        png = tmp_path / "strip.png"
        _run_cli(
            monkeypatch, "--seconds", "10", "--artifacts", "none", "--noise-level", "0",
            "--report", "--plot", str(png),
        )
        out = capsys.readouterr().out
        assert "CLINICAL ECG REPORT" in out
        assert png.exists()
