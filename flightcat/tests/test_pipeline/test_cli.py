"""Tests for CLI commands."""

import json
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from flightcat.cli import main
from flightcat.config.loader import load_config
from flightcat.ingest.awc_parser import parse_metar
from flightcat.reporting.health_checker import HealthChecker
from flightcat.storage import metar_repo
from flightcat.storage.database import connect, run_migrations


@pytest.fixture
def paths(tmp_path: Path) -> dict:
    config_path = tmp_path / "test.yaml"
    config_path.write_text("")
    return {"config": str(config_path), "db": str(tmp_path / "test.db")}


def _run(paths: dict, *args: str) -> int:
    return main(["--config", paths["config"], "--db", paths["db"], *args])


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        result = main([])
        assert result == 1

    def test_config_show(self, paths, capsys):
        assert _run(paths, "config", "show") == 0
        captured = capsys.readouterr()
        assert "four-tier" in captured.out
        assert "LOWW" in captured.out

    def test_config_set_persists(self, paths, capsys):
        result = _run(paths, "config", "set", "ops.fetch_interval_minutes=15")
        assert result == 0
        assert "15" in capsys.readouterr().out
        assert load_config(paths["config"]).ops.fetch_interval_minutes == 15

    def test_config_set_bad_format(self, paths, capsys):
        assert _run(paths, "config", "set", "ops.fetch_interval_minutes") == 1

    def test_config_set_invalid_value(self, paths, capsys):
        assert _run(paths, "config", "set", "classification.scheme=three-tier") == 1
        assert "Error" in capsys.readouterr().out

    def test_invalid_config_file(self, paths, capsys):
        Path(paths["config"]).write_text("ops:\n  bogus: 1\n")
        assert _run(paths, "config", "show") == 1
        assert "Invalid config" in capsys.readouterr().out

    def test_pause_resume(self, paths, capsys):
        assert _run(paths, "pause") == 0
        assert "paused" in capsys.readouterr().out.lower()

        assert _run(paths, "resume") == 0
        assert "resumed" in capsys.readouterr().out.lower()

    def test_status(self, paths, capsys):
        assert _run(paths, "status") == 0
        captured = capsys.readouterr()
        assert "Paused: False" in captured.out
        assert "ICAO" in captured.out
        assert "LOWL" in captured.out

    def test_fetch(self, paths):
        with patch("flightcat.cli.FetchPipeline") as MockPipeline:
            MockPipeline.return_value.run.return_value = MagicMock(errors=[])
            assert _run(paths, "fetch", "--force") == 0
        MockPipeline.return_value.run.assert_called_once_with(force=True)

    def test_fetch_with_errors(self, paths):
        with patch("flightcat.cli.FetchPipeline") as MockPipeline:
            MockPipeline.return_value.run.return_value = MagicMock(errors=["boom"])
            assert _run(paths, "fetch") == 1

    def test_history(self, paths, metar_json, capsys):
        raw = {**metar_json, "obsTime": int(time.time()) - 1800}
        conn = connect(paths["db"])
        run_migrations(conn)
        metar_repo.store_metar(conn, int(time.time()), parse_metar(raw), 2500, json.dumps(raw))
        conn.close()

        assert _run(paths, "history", "loww") == 0
        out = capsys.readouterr().out
        assert "LOWW METARs" in out
        assert "1 reports" in out
        assert "ceiling 2500ft" in out

    def test_history_taf_empty(self, paths, capsys):
        assert _run(paths, "history", "LOWW", "--taf", "--hours", "6") == 0
        assert "0 points" in capsys.readouterr().out

    def test_verify_empty(self, paths, capsys):
        assert _run(paths, "verify", "LOWW") == 0
        assert "Compared: 0" in capsys.readouterr().out

    def test_health(self, paths, capsys):
        with patch.object(HealthChecker, "_check_provider", return_value=True):
            assert _run(paths, "health") == 0
        out = capsys.readouterr().out
        assert "Provider: OK" in out
        assert "Last run: never" in out
        assert "LOWW" in out

    def test_daemon_status(self, paths):
        with patch("flightcat.daemon.daemon_status", return_value=1) as status:
            assert _run(paths, "daemon", "--status") == 1
        status.assert_called_once()

    def test_daemon_stop(self, paths):
        with patch("flightcat.daemon.stop_daemon", return_value=0) as stop:
            assert _run(paths, "daemon", "--stop") == 0
        stop.assert_called_once()
