"""Metadata index schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Any


def init_database(db_path: str) -> None:
    """
    Initialize database and create tables if they don't exist.

    Args:
        db_path: Filesystem path of the SQLite database
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS fragments (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                type TEXT NOT NULL,
                size INTEGER NOT NULL DEFAULT 0,
                created TEXT NOT NULL,
                updated TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS orphaned_blobs (
                owner_id TEXT NOT NULL,
                id TEXT NOT NULL,
                recorded_at TEXT NOT NULL,
                last_error TEXT,
                PRIMARY KEY(owner_id, id)
            )
        """)

        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_fragments_owner_id ON fragments(owner_id, id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_fragments_owner_created ON fragments(owner_id, created)
        """)

        conn.commit()


@contextmanager
def get_db_connection(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[dict]:
    """
    Convert a sqlite3.Row into a plain dict.
    """
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


def get_row_value(row: sqlite3.Row, column: str, default: Any = None) -> Any:
    """
    Read one column from a row, returning default when missing or NULL.
    """
    if column not in row.keys():
        return default
    value = row[column]
    return default if value is None else value
