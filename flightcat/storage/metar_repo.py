"""Repository for METAR observation snapshots."""

import sqlite3

from flightcat.forecast.ceiling import lowest_cloud_base
from flightcat.models.weather import Metar


def store_metar(
    conn: sqlite3.Connection,
    fetch_time: int,
    metar: Metar,
    ceiling: int | None,
    raw_json: str,
) -> int | None:
    """Persist an observation. Returns the row id, or None if already stored.

    Keyed by (icao_id, report_time): refetching an unchanged report is a no-op.
    """
    cursor = conn.execute(
        "INSERT OR IGNORE INTO metar_observations "
        "(icao_id, report_time, obs_time, fetch_time, flt_cat, ceiling, "
        "lowest_cloud_base, visib, wdir, wspd, wgst, temp, dewp, altim, "
        "wx_string, raw_ob, raw_json) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            metar.icao_id,
            metar.report_time,
            metar.obs_time,
            fetch_time,
            metar.flt_cat.value if metar.flt_cat else None,
            ceiling,
            lowest_cloud_base(metar.clouds),
            str(metar.visib) if metar.visib is not None else None,
            metar.wdir,
            metar.wspd,
            metar.wgst,
            metar.temp,
            metar.dewp,
            metar.altim,
            metar.wx_string,
            metar.raw_ob,
            raw_json,
        ),
    )
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return cursor.lastrowid


def get_latest_metar(conn: sqlite3.Connection, icao_id: str) -> dict | None:
    """Get the most recent observation for an airport."""
    row = conn.execute(
        "SELECT * FROM metar_observations WHERE icao_id = ? "
        "ORDER BY obs_time DESC, id DESC LIMIT 1",
        (icao_id,),
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def get_metars(
    conn: sqlite3.Connection, icao_id: str, start: int, end: int
) -> list[dict]:
    """Observations with start <= obs_time < end, oldest first."""
    rows = conn.execute(
        "SELECT * FROM metar_observations "
        "WHERE icao_id = ? AND obs_time >= ? AND obs_time < ? "
        "ORDER BY obs_time",
        (icao_id, start, end),
    ).fetchall()
    return [dict(r) for r in rows]
