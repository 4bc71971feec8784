"""YAML config loader with snapshot persistence and runtime get/set."""

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from flightcat.config.defaults import DEFAULT_AIRPORTS
from flightcat.config.schema import FlightcatConfig


def load_config(path: str | Path) -> FlightcatConfig:
    """Load and validate config from a YAML file.

    A missing file behaves like an empty one. If no airports are specified,
    injects DEFAULT_AIRPORTS.
    """
    path = Path(path)
    raw: dict = {}
    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    if "airports" not in raw or not raw["airports"]:
        raw["airports"] = [a.model_dump() for a in DEFAULT_AIRPORTS]

    return FlightcatConfig(**raw)


def config_hash(config: FlightcatConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def snapshot_config(config: FlightcatConfig, db: Any) -> str:
    """Persist a config snapshot to the database if it changed. Returns the hash."""
    h = config_hash(config)
    cursor = db.execute(
        "SELECT 1 FROM config_snapshots WHERE config_hash = ?", (h,)
    )
    if cursor.fetchone() is None:
        db.execute(
            "INSERT INTO config_snapshots (config_hash, config_json, created_at) "
            "VALUES (?, ?, CURRENT_TIMESTAMP)",
            (h, config.model_dump_json()),
        )
        db.commit()
    return h


def get_config_value(config: FlightcatConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'ops.cache_ttl_seconds'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: FlightcatConfig, dotted_key: str, value: Any) -> FlightcatConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new FlightcatConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[int(part)] if isinstance(target, list) else target[part]
    old_value = target.get(parts[-1])
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.strip().lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return FlightcatConfig(**data)


def save_config(config: FlightcatConfig, path: str | Path) -> None:
    """Write the config back as YAML."""
    with open(path, "w") as f:
        yaml.dump(
            json.loads(config.model_dump_json()),
            f,
            default_flow_style=False,
            sort_keys=False,
        )
