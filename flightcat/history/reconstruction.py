"""Time series reconstruction from stored snapshots.

TAF series are re-expanded from the stored documents: each document holds
authority from its own fetch time until the next stored document's fetch
time, never beyond its validity window, and is evaluated at fixed ticks
inside that window.
"""

import json
import logging
import sqlite3
from bisect import bisect_right

from flightcat.forecast.classifier import FOUR_TIER, ClassificationScheme
from flightcat.forecast.taf_engine import category_at, weather_at
from flightcat.ingest.awc_parser import parse_taf
from flightcat.models.category import FlightCategory
from flightcat.models.common import HOUR
from flightcat.models.snapshot import MetarPoint, TafPoint
from flightcat.models.weather import TafDocument
from flightcat.storage import metar_repo, taf_repo

logger = logging.getLogger(__name__)


def taf_from_row(row: dict) -> TafDocument | None:
    """Rebuild the stored document; None when the stored JSON is unusable."""
    try:
        raw = json.loads(row["raw_json"])
    except (TypeError, ValueError):
        logger.warning("Unreadable TAF JSON in snapshot row %s", row.get("id"))
        return None
    if not isinstance(raw, dict):
        return None
    return parse_taf(raw)


def metar_history(
    conn: sqlite3.Connection, icao_id: str, start: int, end: int
) -> list[MetarPoint]:
    return [
        MetarPoint(
            icao_id=row["icao_id"],
            report_time=row["report_time"],
            obs_time=row["obs_time"],
            flt_cat=FlightCategory.parse(row["flt_cat"]),
            ceiling=row["ceiling"],
            visib=row["visib"],
            wspd=row["wspd"],
            wgst=row["wgst"],
        )
        for row in metar_repo.get_metars(conn, icao_id, start, end)
    ]


def snapshot_history(
    conn: sqlite3.Connection, icao_id: str, start: int, end: int
) -> list[dict]:
    """Stored fixed-horizon categories for documents fetched in [start, end)."""
    return [
        {
            "fetch_time": row["fetch_time"],
            "valid_from": row["valid_from"],
            "valid_to": row["valid_to"],
            "now": row["cat_now"],
            "2h": row["cat_2h"],
            "4h": row["cat_4h"],
            "8h": row["cat_8h"],
            "24h": row["cat_24h"],
        }
        for row in taf_repo.get_tafs_for_range(conn, icao_id, start, end)
        if start <= row["fetch_time"] < end
    ]


def authority_windows(
    rows: list[dict], start: int, end: int
) -> list[tuple[dict, int, int]]:
    """(row, window_start, window_end) for rows ordered by fetch time.

    Empty windows are dropped.
    """
    windows = []
    for i, row in enumerate(rows):
        next_fetch = rows[i + 1]["fetch_time"] if i + 1 < len(rows) else end
        win_start = max(row["fetch_time"], start, row["valid_from"])
        win_end = min(next_fetch, end, row["valid_to"])
        if win_start < win_end:
            windows.append((row, win_start, win_end))
    return windows


def tick_times(win_start: int, win_end: int, step: int = HOUR) -> list[int]:
    """Multiples of step within [win_start, win_end)."""
    first = -(-win_start // step) * step
    return list(range(first, win_end, step))


def expand_taf(
    taf: TafDocument,
    fetch_time: int,
    win_start: int,
    win_end: int,
    step: int = HOUR,
    scheme: ClassificationScheme = FOUR_TIER,
) -> list[TafPoint]:
    """Evaluate one document at every tick of its authority window."""
    return [
        TafPoint(
            icao_id=taf.icao_id,
            time=t,
            category=category_at(taf, t, scheme),
            weather=weather_at(taf, t),
            fetch_time=fetch_time,
        )
        for t in tick_times(win_start, win_end, step)
    ]


def taf_history(
    conn: sqlite3.Connection,
    icao_id: str,
    start: int,
    end: int,
    step: int = HOUR,
    scheme: ClassificationScheme = FOUR_TIER,
) -> list[TafPoint]:
    rows = taf_repo.get_tafs_for_range(conn, icao_id, start, end)
    points: list[TafPoint] = []
    for row, win_start, win_end in authority_windows(rows, start, end):
        taf = taf_from_row(row)
        if taf is None:
            continue
        points.extend(expand_taf(taf, row["fetch_time"], win_start, win_end, step, scheme))
    return points


def taf_in_authority(rows: list[dict], t: int) -> dict | None:
    """The last row fetched at or before t, from rows ordered by fetch time."""
    idx = bisect_right([r["fetch_time"] for r in rows], t)
    if idx == 0:
        return None
    return rows[idx - 1]
