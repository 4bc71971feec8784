"""SQLite connection manager with WAL mode and migration support."""

import importlib
import logging
import sqlite3
from pathlib import Path

MIGRATIONS_PACKAGE = "flightcat.storage.migrations"
MEMORY = ":memory:"

logger = logging.getLogger(__name__)


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a connection with WAL mode, foreign keys and dict-like rows.

    The parent directory of a file database is created on first use.
    """
    if str(db_path) != MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply pending v###_*.py migrations in name order; returns those applied."""
    conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_versions ("
        "  version TEXT PRIMARY KEY,"
        "  applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
        ")"
    )
    conn.commit()

    applied = {
        row[0]
        for row in conn.execute("SELECT version FROM schema_versions").fetchall()
    }

    newly_applied = []
    for name in _discover_migrations():
        if name in applied:
            continue
        mod = importlib.import_module(f"{MIGRATIONS_PACKAGE}.{name}")
        mod.up(conn)
        conn.execute("INSERT INTO schema_versions (version) VALUES (?)", (name,))
        conn.commit()
        newly_applied.append(name)
        logger.info("Applied migration %s", name)

    return newly_applied


def table_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table'"
    ).fetchall()
    return {r[0] for r in rows}


def _discover_migrations() -> list[str]:
    migrations_dir = Path(__file__).parent / "migrations"
    return sorted(p.stem for p in migrations_dir.glob("v[0-9]*_*.py"))
