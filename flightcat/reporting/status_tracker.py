"""Status tracker: current and forecast categories per configured airport."""

import json
import sqlite3

from flightcat.config.schema import AirportConfig, FlightcatConfig
from flightcat.forecast import outlook
from flightcat.forecast.classifier import get_scheme
from flightcat.history.reconstruction import taf_from_row
from flightcat.ingest.awc_parser import parse_metar
from flightcat.models.reporting import AirportStatus
from flightcat.models.weather import Metar, TafDocument
from flightcat.storage import metar_repo, taf_repo


def build_status(
    airport: AirportConfig,
    metar: Metar | None,
    taf: TafDocument | None,
    now: int,
    config: FlightcatConfig,
) -> AirportStatus:
    scheme = get_scheme(config.classification.scheme)
    threshold = config.classification.gust_warning_kt
    observed = outlook.metar_category(metar, scheme)
    forecast: dict[str, str | None] = {}
    for horizon in outlook.OUTLOOK_HORIZONS:
        cat = outlook.display_category(metar, taf, horizon, now, scheme)
        forecast[horizon] = cat.value if cat else None
    gust = outlook.max_gust(metar, taf, now)
    return AirportStatus(
        icao_id=airport.icao,
        name=airport.name,
        observed=observed.value if observed else None,
        forecast=forecast,
        trend=outlook.trend(metar, taf, outlook.CURRENT, now, scheme),
        max_gust=gust,
        gust_warning=gust >= threshold,
    )


class StatusTracker:
    def __init__(self, conn: sqlite3.Connection, config: FlightcatConfig):
        self.conn = conn
        self.config = config

    def latest_metar(self, icao_id: str) -> Metar | None:
        row = metar_repo.get_latest_metar(self.conn, icao_id)
        if row is None:
            return None
        try:
            raw = json.loads(row["raw_json"])
        except (TypeError, ValueError):
            return None
        return parse_metar(raw) if isinstance(raw, dict) else None

    def latest_taf(self, icao_id: str) -> TafDocument | None:
        row = taf_repo.get_latest_taf(self.conn, icao_id)
        if row is None:
            return None
        return taf_from_row(row)

    def current(self, now: int) -> list[AirportStatus]:
        return [
            build_status(
                airport,
                self.latest_metar(airport.icao),
                self.latest_taf(airport.icao),
                now,
                self.config,
            )
            for airport in self.config.airports
            if airport.enabled
        ]
