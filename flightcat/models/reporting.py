"""Reporting and operational health models."""

from dataclasses import dataclass, field


@dataclass
class RunSummary:
    run_id: str
    airports_requested: int = 0
    metars_fetched: int = 0
    metars_stored: int = 0
    tafs_fetched: int = 0
    tafs_stored: int = 0
    metar_airports: list[str] = field(default_factory=list)
    taf_airports: list[str] = field(default_factory=list)
    category_counts: dict[str, int] = field(default_factory=dict)
    gust_warnings: list[str] = field(default_factory=list)
    overlap_warnings: int = 0
    duration_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AirportStatus:
    icao_id: str
    name: str
    observed: str | None
    forecast: dict[str, str | None]
    trend: str | None
    max_gust: int
    gust_warning: bool


@dataclass(frozen=True)
class HealthStatus:
    db_connected: bool
    provider_reachable: bool
    last_run_age_minutes: float | None
    stale_metars: list[str]
    expired_tafs: list[str]
    paused: bool
