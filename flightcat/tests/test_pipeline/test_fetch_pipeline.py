"""Tests for the fetch pipeline with a mocked fetcher."""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from flightcat.config.schema import AirportConfig, FlightcatConfig
from flightcat.ingest.awc_parser import parse_metar, parse_taf
from flightcat.ingest.weather_fetcher import FetchedMetar, FetchedTaf
from flightcat.pipeline.fetch_pipeline import FetchPipeline, build_fetcher
from flightcat.storage import state_repo
from flightcat.storage.database import connect, run_migrations

T0 = 1717200000
H = 3600
NOW = T0 + 6 * H


@pytest.fixture
def config() -> FlightcatConfig:
    return FlightcatConfig(
        airports=[AirportConfig(icao="LOWW"), AirportConfig(icao="LOWS")]
    )


@pytest.fixture
def fetcher(metar_json, taf_json) -> MagicMock:
    mock = MagicMock()
    mock.fetch_metars.return_value = {
        "LOWW": FetchedMetar(parse_metar(metar_json), metar_json)
    }
    mock.fetch_tafs.return_value = {
        "LOWW": FetchedTaf(parse_taf(taf_json), taf_json)
    }
    return mock


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "test.db")


def _open(db_path: str):
    conn = connect(db_path)
    run_migrations(conn)
    return conn


class TestFetchPipeline:
    def test_stores_and_summarizes(self, config, fetcher, db_path):
        summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)

        assert summary.errors == []
        assert summary.airports_requested == 2
        assert (summary.metars_fetched, summary.metars_stored) == (1, 1)
        assert (summary.tafs_fetched, summary.tafs_stored) == (1, 1)
        assert summary.category_counts == {"MVFR": 1, "NODATA": 1}
        assert summary.gust_warnings == ["LOWW"]
        assert summary.overlap_warnings == 0
        assert summary.metar_airports == ["LOWW"]
        assert summary.taf_airports == ["LOWW"]

    def test_persists_rows_and_run(self, config, fetcher, db_path):
        summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)

        conn = _open(db_path)
        metar = conn.execute("SELECT * FROM metar_observations").fetchone()
        assert metar["ceiling"] == 2500
        assert metar["fetch_time"] == NOW
        taf = conn.execute("SELECT * FROM taf_snapshots").fetchone()
        assert (taf["cat_now"], taf["cat_4h"], taf["cat_8h"]) == ("VFR", "IFR", "LIFR")
        run = state_repo.get_run(conn, summary.run_id)
        assert run["status"] == "completed"
        assert run["metars_stored"] == 1
        assert run["config_hash"]
        conn.close()

    def test_refetch_is_idempotent(self, config, fetcher, db_path):
        FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)
        summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW + 600)

        assert summary.metars_fetched == 1
        assert summary.metars_stored == 0
        assert summary.tafs_stored == 0

    def test_requests_enabled_airports(self, config, fetcher, db_path):
        FetchPipeline(config, db_path, fetcher=fetcher).run(force=True, now=NOW)
        fetcher.fetch_metars.assert_called_once_with(["LOWW", "LOWS"], force=True)
        fetcher.fetch_tafs.assert_called_once_with(["LOWW", "LOWS"], force=True)

    def test_paused_aborts(self, config, fetcher, db_path):
        conn = _open(db_path)
        state_repo.set_system_state(conn, "paused", "true")
        conn.close()

        summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)

        assert summary.errors == ["System paused"]
        fetcher.fetch_metars.assert_not_called()
        conn = _open(db_path)
        assert state_repo.get_run(conn, summary.run_id)["status"] == "aborted"
        conn.close()

    def test_failure_recorded(self, config, fetcher, db_path):
        fetcher.fetch_metars.side_effect = RuntimeError("boom")

        summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)

        assert summary.errors == ["boom"]
        conn = _open(db_path)
        run = state_repo.get_run(conn, summary.run_id)
        assert run["status"] == "failed"
        assert run["error_message"] == "boom"
        conn.close()

    def test_overlapping_base_periods_logged(self, config, fetcher, taf_json, db_path, caplog):
        taf_json["fcsts"][2]["timeFrom"] = T0 + 11 * H
        fetcher.fetch_tafs.return_value = {
            "LOWW": FetchedTaf(parse_taf(taf_json), taf_json)
        }

        with caplog.at_level(logging.WARNING, logger="flightcat.pipeline.fetch_pipeline"):
            summary = FetchPipeline(config, db_path, fetcher=fetcher).run(now=NOW)

        assert summary.overlap_warnings == 1
        assert "overlap" in caplog.text


class TestBuildFetcher:
    def test_uses_config(self):
        config = FlightcatConfig(
            provider={"base_url": "https://awc.test", "batch_size": 10},
            ops={"cache_ttl_seconds": 30},
        )
        fetcher = build_fetcher(config)
        assert fetcher.batch_size == 10
        assert fetcher.cache_ttl == 30
        assert fetcher.client.base_url == "https://awc.test"
