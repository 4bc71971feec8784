"""Repository for system state and fetch run tracking."""

import sqlite3

# --- System state ---

def get_system_state(conn: sqlite3.Connection, key: str) -> str | None:
    """Get a system state value."""
    row = conn.execute(
        "SELECT value FROM system_state WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_system_state(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Set a system state value."""
    conn.execute(
        "INSERT INTO system_state (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()


def is_paused(conn: sqlite3.Connection) -> bool:
    return get_system_state(conn, "paused") == "true"


# --- Runs ---

def create_run(
    conn: sqlite3.Connection, run_id: str, config_hash: str | None = None
) -> None:
    """Record the start of a fetch run."""
    conn.execute(
        "INSERT INTO runs (run_id, config_hash) VALUES (?, ?)",
        (run_id, config_hash),
    )
    conn.commit()


def complete_run(
    conn: sqlite3.Connection,
    run_id: str,
    status: str,
    summary_json: str | None = None,
    error_message: str | None = None,
    **metrics: int | float | None,
) -> None:
    """Record run completion with metrics."""
    sets = ["completed_at = CURRENT_TIMESTAMP", "status = ?"]
    params: list = [status]

    if summary_json is not None:
        sets.append("summary_json = ?")
        params.append(summary_json)
    if error_message is not None:
        sets.append("error_message = ?")
        params.append(error_message)
    for key, val in metrics.items():
        if val is not None:
            sets.append(f"{key} = ?")
            params.append(val)

    params.append(run_id)
    conn.execute(f"UPDATE runs SET {', '.join(sets)} WHERE run_id = ?", params)
    conn.commit()


def get_latest_run(conn: sqlite3.Connection) -> dict | None:
    """Get the most recent run."""
    row = conn.execute(
        "SELECT * FROM runs ORDER BY started_at DESC, id DESC LIMIT 1"
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def get_run(conn: sqlite3.Connection, run_id: str) -> dict | None:
    """Get a specific run by ID."""
    row = conn.execute(
        "SELECT * FROM runs WHERE run_id = ?", (run_id,)
    ).fetchone()
    if row is None:
        return None
    return dict(row)
