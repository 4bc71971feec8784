"""Initial schema: observation and forecast snapshots plus operational tables."""

import sqlite3

DDL = [
    # METAR observations, one row per (airport, report time)
    """
    CREATE TABLE IF NOT EXISTS metar_observations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        icao_id TEXT NOT NULL,
        report_time TEXT NOT NULL,
        obs_time INTEGER,
        fetch_time INTEGER NOT NULL,
        flt_cat TEXT,
        ceiling INTEGER,
        lowest_cloud_base INTEGER,
        visib TEXT,
        wdir INTEGER,
        wspd INTEGER,
        wgst INTEGER,
        temp REAL,
        dewp REAL,
        altim REAL,
        wx_string TEXT,
        raw_ob TEXT NOT NULL DEFAULT '',
        raw_json TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(icao_id, report_time)
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_metar_icao_obs "
        "ON metar_observations(icao_id, obs_time)"
    ),

    # TAF documents with categories precomputed at fetch time
    """
    CREATE TABLE IF NOT EXISTS taf_snapshots (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        icao_id TEXT NOT NULL,
        fetch_time INTEGER NOT NULL,
        valid_from INTEGER NOT NULL,
        valid_to INTEGER NOT NULL,
        issue_time TEXT,
        cat_now TEXT,
        cat_2h TEXT,
        cat_4h TEXT,
        cat_8h TEXT,
        cat_24h TEXT,
        raw_json TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(icao_id, valid_from)
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_taf_icao_fetch "
        "ON taf_snapshots(icao_id, fetch_time)"
    ),

    # Config snapshots
    """
    CREATE TABLE IF NOT EXISTS config_snapshots (
        config_hash TEXT PRIMARY KEY,
        config_json TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,

    # System state
    """
    CREATE TABLE IF NOT EXISTS system_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "INSERT OR IGNORE INTO system_state (key, value) VALUES ('paused', 'false')",

    # Fetch run log
    """
    CREATE TABLE IF NOT EXISTS runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        run_id TEXT UNIQUE NOT NULL,
        config_hash TEXT,
        started_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        completed_at TEXT,
        status TEXT NOT NULL DEFAULT 'running',
        airports_requested INTEGER NOT NULL DEFAULT 0,
        metars_fetched INTEGER NOT NULL DEFAULT 0,
        metars_stored INTEGER NOT NULL DEFAULT 0,
        tafs_fetched INTEGER NOT NULL DEFAULT 0,
        tafs_stored INTEGER NOT NULL DEFAULT 0,
        summary_json TEXT,
        error_message TEXT
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
