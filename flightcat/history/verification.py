"""Forecast verification: stored TAF categories against observed METARs."""

import json
import logging
import sqlite3

from flightcat.forecast.classifier import FOUR_TIER, ClassificationScheme
from flightcat.forecast.outlook import metar_category
from flightcat.forecast.taf_engine import category_at
from flightcat.history.reconstruction import taf_from_row, taf_in_authority
from flightcat.ingest.awc_parser import parse_metar
from flightcat.models.category import FlightCategory, compare_categories
from flightcat.models.snapshot import VerificationPoint, VerificationSummary
from flightcat.models.weather import TafDocument
from flightcat.storage import metar_repo, taf_repo

logger = logging.getLogger(__name__)


def _observed(row: dict, scheme: ClassificationScheme) -> FlightCategory | None:
    try:
        raw = json.loads(row["raw_json"])
    except (TypeError, ValueError):
        return FlightCategory.parse(row["flt_cat"])
    metar = parse_metar(raw) if isinstance(raw, dict) else None
    if metar is None:
        return FlightCategory.parse(row["flt_cat"])
    return metar_category(metar, scheme)


def verify_forecasts(
    conn: sqlite3.Connection,
    icao_id: str,
    start: int,
    end: int,
    scheme: ClassificationScheme = FOUR_TIER,
) -> VerificationSummary:
    """Compare every observation in [start, end) with the TAF in authority then."""
    summary = VerificationSummary(icao_id=icao_id)
    tafs = taf_repo.get_tafs_for_range(conn, icao_id, start, end)
    parsed: dict[int, TafDocument | None] = {}

    for row in metar_repo.get_metars(conn, icao_id, start, end):
        obs_time = row["obs_time"]
        taf_row = taf_in_authority(tafs, obs_time)
        forecast = None
        if taf_row is not None:
            if taf_row["id"] not in parsed:
                parsed[taf_row["id"]] = taf_from_row(taf_row)
            forecast = category_at(parsed[taf_row["id"]], obs_time, scheme)

        observed = _observed(row, scheme)
        result = compare_categories(observed, forecast)
        summary.points.append(
            VerificationPoint(
                icao_id=icao_id,
                obs_time=obs_time,
                observed=observed,
                forecast=forecast,
                result=result,
            )
        )
        if result is not None:
            summary.counts[result] = summary.counts.get(result, 0) + 1

    logger.debug(
        "Verified %d observations for %s (%d compared)",
        len(summary.points), icao_id, summary.compared,
    )
    return summary
