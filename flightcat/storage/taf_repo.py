"""Repository for TAF documents and their fixed-horizon snapshots."""

import sqlite3

from flightcat.models.snapshot import TafSnapshot
from flightcat.models.weather import TafDocument


def store_taf(
    conn: sqlite3.Connection,
    fetch_time: int,
    taf: TafDocument,
    snapshot: TafSnapshot,
    raw_json: str,
) -> int | None:
    """Persist a TAF with its snapshot. Returns the row id, or None if already stored.

    Keyed by (icao_id, valid_from); the first fetch of a document wins.
    """
    cats = snapshot.as_dict()
    cursor = conn.execute(
        "INSERT OR IGNORE INTO taf_snapshots "
        "(icao_id, fetch_time, valid_from, valid_to, issue_time, "
        "cat_now, cat_2h, cat_4h, cat_8h, cat_24h, raw_json) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            taf.icao_id,
            fetch_time,
            taf.valid_time_from,
            taf.valid_time_to,
            taf.issue_time,
            cats["now"],
            cats["2h"],
            cats["4h"],
            cats["8h"],
            cats["24h"],
            raw_json,
        ),
    )
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return cursor.lastrowid


def get_latest_taf(conn: sqlite3.Connection, icao_id: str) -> dict | None:
    """Get the most recently fetched TAF for an airport."""
    row = conn.execute(
        "SELECT * FROM taf_snapshots WHERE icao_id = ? "
        "ORDER BY fetch_time DESC, id DESC LIMIT 1",
        (icao_id,),
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def get_latest_snapshots(conn: sqlite3.Connection) -> list[dict]:
    """Latest TAF snapshot per airport."""
    rows = conn.execute(
        "SELECT * FROM taf_snapshots WHERE id IN ("
        "  SELECT MAX(id) FROM taf_snapshots GROUP BY icao_id"
        ") ORDER BY icao_id"
    ).fetchall()
    return [dict(r) for r in rows]


def get_tafs_for_range(
    conn: sqlite3.Connection, icao_id: str, start: int, end: int
) -> list[dict]:
    """Documents that may hold authority within [start, end), by fetch time.

    Includes the last document fetched at or before start, since it is in
    authority at the start of the range until the next fetch.
    """
    rows = conn.execute(
        "SELECT * FROM taf_snapshots WHERE icao_id = ? AND fetch_time < ? "
        "AND fetch_time >= COALESCE("
        "  (SELECT MAX(fetch_time) FROM taf_snapshots "
        "   WHERE icao_id = ? AND fetch_time <= ?), 0) "
        "ORDER BY fetch_time, id",
        (icao_id, end, icao_id, start),
    ).fetchall()
    return [dict(r) for r in rows]
