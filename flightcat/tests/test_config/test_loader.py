"""Tests for config loading, snapshot persistence, and get/set."""

import sqlite3
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from flightcat.config.defaults import DEFAULT_AIRPORTS
from flightcat.config.loader import (
    config_hash,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
    snapshot_config,
)
from flightcat.config.schema import FlightcatConfig
from flightcat.forecast.classifier import SchemeName


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.classification.gust_warning_kt == 25
        assert config.ops.cache_ttl_seconds == 60
        assert config.ops.fetch_interval_minutes == 30

    def test_explicit_airports_not_overridden(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.enabled_icaos == ["LOWW"]

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.classification.scheme == SchemeName.FOUR_TIER
        assert len(config.airports) == len(DEFAULT_AIRPORTS)
        assert config.airports[0].icao == "LOWW"

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nope.yaml")
        assert config.enabled_icaos == ["LOWW", "LOWS", "LOWG", "LOWI", "LOWK", "LOWL"]

    def test_invalid_yaml_values(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        with open(path, "w") as f:
            yaml.dump({"classification": {"scheme": "three-tier"}}, f)
        with pytest.raises(ValidationError):
            load_config(path)

    def test_shipped_config(self):
        config = load_config(Path(__file__).parents[3] / "ops" / "configs" / "default.yaml")
        assert len(config.airports) == 6
        assert config.airports[0].name == "Wien-Schwechat"


class TestConfigHash:
    def test_deterministic(self):
        c1 = FlightcatConfig(airports=DEFAULT_AIRPORTS)
        c2 = FlightcatConfig(airports=DEFAULT_AIRPORTS)
        assert config_hash(c1) == config_hash(c2)

    def test_different_config_different_hash(self):
        c1 = FlightcatConfig(airports=DEFAULT_AIRPORTS)
        c2 = FlightcatConfig(airports=[])
        assert config_hash(c1) != config_hash(c2)


class TestSnapshotConfig:
    def test_persists_to_db(self, default_config: FlightcatConfig, tmp_db: sqlite3.Connection):
        h = snapshot_config(default_config, tmp_db)
        row = tmp_db.execute(
            "SELECT config_json FROM config_snapshots WHERE config_hash = ?", (h,)
        ).fetchone()
        assert row is not None

    def test_idempotent(self, default_config: FlightcatConfig, tmp_db: sqlite3.Connection):
        h1 = snapshot_config(default_config, tmp_db)
        h2 = snapshot_config(default_config, tmp_db)
        assert h1 == h2
        count = tmp_db.execute("SELECT COUNT(*) FROM config_snapshots").fetchone()[0]
        assert count == 1


class TestGetConfigValue:
    def test_dotted_key(self, default_config: FlightcatConfig):
        assert get_config_value(default_config, "ops.cache_ttl_seconds") == 120

    def test_list_index(self, default_config: FlightcatConfig):
        assert get_config_value(default_config, "airports.2.icao") == "LOWG"

    def test_invalid_key(self, default_config: FlightcatConfig):
        with pytest.raises((KeyError, AttributeError)):
            get_config_value(default_config, "nonexistent.key")


class TestSetConfigValue:
    def test_set_and_revalidate(self, default_config: FlightcatConfig):
        new_config = set_config_value(default_config, "classification.gust_warning_kt", 30)
        assert new_config.classification.gust_warning_kt == 30
        assert default_config.classification.gust_warning_kt == 20

    def test_string_coercion(self, default_config: FlightcatConfig):
        new_config = set_config_value(default_config, "ops.fetch_interval_minutes", "15")
        assert new_config.ops.fetch_interval_minutes == 15
        new_config = set_config_value(default_config, "provider.timeout_seconds", "12.5")
        assert new_config.provider.timeout_seconds == 12.5

    def test_bool_coercion(self, default_config: FlightcatConfig):
        new_config = set_config_value(default_config, "airports.1.enabled", "false")
        assert "LOWS" not in new_config.enabled_icaos

    def test_scheme(self, default_config: FlightcatConfig):
        new_config = set_config_value(default_config, "classification.scheme", "two-tier")
        assert new_config.classification.scheme == SchemeName.TWO_TIER

    def test_invalid_value_raises(self, default_config: FlightcatConfig):
        with pytest.raises(ValidationError):
            set_config_value(default_config, "ops.cache_ttl_seconds", -1)


class TestSaveConfig:
    def test_round_trip(self, default_config: FlightcatConfig, tmp_path: Path):
        path = tmp_path / "saved.yaml"
        changed = set_config_value(default_config, "classification.scheme", "two-tier")
        save_config(changed, path)
        assert load_config(path) == changed
