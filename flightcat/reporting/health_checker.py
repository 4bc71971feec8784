"""Health checker: DB connectivity, provider reachability, data freshness."""

import logging
import sqlite3
from datetime import UTC, datetime

import httpx

from flightcat.config.schema import FlightcatConfig
from flightcat.ingest.staleness import is_metar_stale, is_taf_expired
from flightcat.models.reporting import HealthStatus
from flightcat.storage import metar_repo, state_repo, taf_repo

logger = logging.getLogger(__name__)


class HealthChecker:
    def __init__(self, conn: sqlite3.Connection, config: FlightcatConfig):
        self.conn = conn
        self.config = config

    def check(self, now: datetime | None = None) -> HealthStatus:
        if now is None:
            now = datetime.now(UTC)
        stale, expired = self._freshness(now)
        return HealthStatus(
            db_connected=self._check_db(),
            provider_reachable=self._check_provider(),
            last_run_age_minutes=self._last_run_age_minutes(now),
            stale_metars=stale,
            expired_tafs=expired,
            paused=state_repo.is_paused(self.conn),
        )

    def _check_db(self) -> bool:
        try:
            self.conn.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False

    def _check_provider(self) -> bool:
        try:
            resp = httpx.get(
                self.config.provider.base_url,
                headers={"User-Agent": self.config.provider.user_agent},
                timeout=10.0,
            )
            return resp.status_code < 500
        except httpx.HTTPError as e:
            logger.warning("Provider unreachable: %s", e)
            return False

    def _freshness(self, now: datetime) -> tuple[list[str], list[str]]:
        stale: list[str] = []
        expired: list[str] = []
        max_age = self.config.ops.metar_max_age_minutes
        for icao in self.config.enabled_icaos:
            metar = metar_repo.get_latest_metar(self.conn, icao)
            if metar is None or is_metar_stale(metar["report_time"], max_age, now):
                stale.append(icao)
            taf = taf_repo.get_latest_taf(self.conn, icao)
            if taf is None or is_taf_expired(taf["valid_to"], now):
                expired.append(icao)
        return stale, expired

    def _last_run_age_minutes(self, now: datetime) -> float | None:
        run = state_repo.get_latest_run(self.conn)
        if run is None:
            return None
        completed = run.get("completed_at")
        if completed is None:
            return None
        try:
            end = datetime.fromisoformat(completed)
            if end.tzinfo is None:
                end = end.replace(tzinfo=UTC)
            return (now - end).total_seconds() / 60
        except (ValueError, TypeError):
            return None
