"""Read-only JSON API: provider passthrough with caching, outlooks, history."""

import logging
import sqlite3
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from flightcat.config.loader import load_config
from flightcat.config.schema import AirportConfig, FlightcatConfig
from flightcat.forecast import outlook
from flightcat.forecast.classifier import get_scheme
from flightcat.history.reconstruction import metar_history, snapshot_history, taf_history
from flightcat.ingest.weather_fetcher import ProviderError, WeatherFetcher
from flightcat.models.common import HOUR, epoch_now
from flightcat.pipeline.fetch_pipeline import build_fetcher
from flightcat.reporting.health_checker import HealthChecker
from flightcat.reporting.status_tracker import StatusTracker, build_status
from flightcat.storage.database import connect, run_migrations

logger = logging.getLogger(__name__)

DB_PATH = Path("data") / "flightcat.db"
CONFIG_PATH = Path("ops") / "configs" / "default.yaml"


def _split_ids(ids: str) -> list[str]:
    codes = [c.strip().upper() for c in ids.split(",") if c.strip()]
    if not codes:
        raise HTTPException(400, "Missing ids parameter")
    return codes


def create_app(
    config: FlightcatConfig,
    db_path: str | Path = DB_PATH,
    fetcher: WeatherFetcher | None = None,
) -> FastAPI:
    app = FastAPI(title="Flight Category Monitor", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    weather = fetcher or build_fetcher(config)
    scheme = get_scheme(config.classification.scheme)

    def _conn() -> sqlite3.Connection:
        conn = connect(db_path)
        run_migrations(conn)
        return conn

    def _airport(icao: str) -> AirportConfig:
        for airport in config.airports:
            if airport.icao == icao:
                return airport
        return AirportConfig(icao=icao)

    # ── Provider passthrough ────────────────────────────────────

    @app.get("/api/metar")
    def get_metar(ids: str = ""):
        """Raw provider METAR objects for a comma-separated list of codes."""
        codes = _split_ids(ids)
        try:
            fetched = weather.fetch_metars(codes, strict=True)
        except ProviderError:
            raise HTTPException(502, "Failed to fetch METAR data")
        return [f.raw for f in fetched.values()]

    @app.get("/api/taf")
    def get_taf(ids: str = ""):
        """Raw provider TAF objects for a comma-separated list of codes."""
        codes = _split_ids(ids)
        try:
            fetched = weather.fetch_tafs(codes, strict=True)
        except ProviderError:
            raise HTTPException(502, "Failed to fetch TAF data")
        return [f.raw for f in fetched.values()]

    # ── Stored data ─────────────────────────────────────────────

    @app.get("/api/outlook/{icao}")
    def get_outlook(icao: str):
        """Current category, horizon categories, trend and gusts for one airport."""
        icao = icao.upper()
        now = epoch_now()
        conn = _conn()
        try:
            tracker = StatusTracker(conn, config)
            metar = tracker.latest_metar(icao)
            taf = tracker.latest_taf(icao)
        finally:
            conn.close()
        if metar is None and taf is None:
            raise HTTPException(404, f"No data for {icao}")

        status = build_status(_airport(icao), metar, taf, now, config)
        items = outlook.forecast_outlook(
            taf, now, config.classification.gust_warning_kt, scheme
        )
        return {
            **asdict(status),
            "outlook": [asdict(item) for item in items],
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/api/history/{icao}")
    def get_history(icao: str, hours: int = Query(default=24, ge=1, le=24 * 14)):
        """Observed series, reconstructed TAF series and stored snapshots."""
        icao = icao.upper()
        end = epoch_now()
        start = end - hours * HOUR
        step = config.ops.history_step_minutes * 60
        conn = _conn()
        try:
            metars = metar_history(conn, icao, start, end)
            tafs = taf_history(conn, icao, start, end, step=step, scheme=scheme)
            snapshots = snapshot_history(conn, icao, start, end)
        finally:
            conn.close()
        if not metars and not tafs and not snapshots:
            raise HTTPException(404, f"No history for {icao}")
        return {
            "icao_id": icao,
            "start": start,
            "end": end,
            "metars": [asdict(p) for p in metars],
            "tafs": [asdict(p) for p in tafs],
            "snapshots": snapshots,
        }

    @app.get("/api/health")
    def get_health():
        conn = _conn()
        try:
            status = HealthChecker(conn, config).check()
        finally:
            conn.close()
        return asdict(status)

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(load_config(CONFIG_PATH)), host="0.0.0.0", port=5556)
