"""Shared test fixtures."""

import sqlite3
from pathlib import Path

import pytest
import yaml

from flightcat.config.defaults import DEFAULT_AIRPORTS
from flightcat.config.schema import FlightcatConfig
from flightcat.storage.database import connect, run_migrations

# 2024-06-01T00:00:00Z
DAY_START = 1717200000
HOUR = 3600


@pytest.fixture
def tmp_db(tmp_path: Path) -> sqlite3.Connection:
    """A migrated temporary SQLite database."""
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def default_config() -> FlightcatConfig:
    """Return default FlightcatConfig with the default airports."""
    return FlightcatConfig(airports=DEFAULT_AIRPORTS)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "classification": {"scheme": "four-tier", "gust_warning_kt": 25},
        "ops": {"cache_ttl_seconds": 60},
        "airports": [{"icao": "loww", "name": "Wien-Schwechat", "major": True}],
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def metar_json() -> dict:
    """Provider METAR object for LOWW at 06:20Z: MVFR under a 2500 ft ceiling."""
    return {
        "icaoId": "LOWW",
        "reportTime": "2024-06-01T06:20:00.000Z",
        "obsTime": DAY_START + 6 * HOUR + 20 * 60,
        "fltCat": "MVFR",
        "clouds": [
            {"cover": "FEW", "base": 1200},
            {"cover": "BKN", "base": 2500},
        ],
        "visib": "6+",
        "wdir": 290,
        "wspd": 14,
        "wgst": 26,
        "temp": 17.0,
        "dewp": 11.0,
        "altim": 1013.0,
        "wxString": None,
        "rawOb": "METAR LOWW 010620Z 29014G26KT 9999 FEW012 BKN025 17/11 Q1013",
    }


@pytest.fixture
def taf_json() -> dict:
    """Provider TAF object valid for the whole day.

    Base VFR (ceiling 5000 ft) until 12Z, then VFR (ceiling 4000 ft).
    BECMG from 10Z to a ceiling of 800 ft, TEMPO 14-16Z with 1/2 SM.
    """
    return {
        "icaoId": "LOWW",
        "issueTime": "2024-05-31T23:00:00.000Z",
        "validTimeFrom": DAY_START,
        "validTimeTo": DAY_START + 24 * HOUR,
        "rawTAF": "TAF LOWW 312300Z 0100/0124 27010KT CAVOK",
        "fcsts": [
            {
                "timeFrom": DAY_START,
                "timeTo": DAY_START + 12 * HOUR,
                "fcstChange": None,
                "clouds": [{"cover": "BKN", "base": 5000}],
                "visib": "6+",
                "wdir": 270,
                "wspd": 10,
                "wgst": None,
            },
            {
                "timeFrom": DAY_START + 10 * HOUR,
                "timeTo": DAY_START + 11 * HOUR,
                "timeBec": DAY_START + 11 * HOUR,
                "fcstChange": "BECMG",
                "clouds": [{"cover": "OVC", "base": 800}],
                "wdir": 310,
                "wspd": 15,
            },
            {
                "timeFrom": DAY_START + 12 * HOUR,
                "timeTo": DAY_START + 24 * HOUR,
                "fcstChange": None,
                "clouds": [{"cover": "BKN", "base": 4000}],
                "visib": "6+",
                "wdir": 300,
                "wspd": 8,
            },
            {
                "timeFrom": DAY_START + 14 * HOUR,
                "timeTo": DAY_START + 16 * HOUR,
                "fcstChange": "TEMPO",
                "clouds": [{"cover": "BKN", "base": 600}],
                "visib": "1/2",
                "wspd": 20,
                "wgst": 35,
                "wxString": "+TSRA",
            },
        ],
    }
