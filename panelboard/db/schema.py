"""
SQLite schema definition and initialization for Panelboard.

This module defines the database schema for persisting:
- Panels (named dashboard regions)
- Widgets (ordered content cards owned by a panel)
- Notes (free-standing sticky notes)
"""

import sqlite3
from pathlib import Path

# SQL schema definition
SCHEMA_SQL = """
-- Panels are replaced wholesale on every save
CREATE TABLE IF NOT EXISTS panels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    panel_key TEXT UNIQUE NOT NULL,         -- Stable slug, e.g. 'left'
    title TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Widgets belong to exactly one panel and die with it
CREATE TABLE IF NOT EXISTS widgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    widget_id INTEGER NOT NULL,             -- Client-generated identifier
    panel_key TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT,
    color TEXT DEFAULT '#00d563',
    widget_order INTEGER DEFAULT 0,         -- 0-based position within the panel
    is_large BOOLEAN DEFAULT FALSE,
    is_small BOOLEAN DEFAULT FALSE,
    grid_area TEXT,                         -- 'r1 / c1 / r2 / c2', NULL if unplaced
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

    FOREIGN KEY (panel_key) REFERENCES panels(panel_key) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    note TEXT NOT NULL,
    color TEXT NOT NULL,
    user TEXT NOT NULL,
    time TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Indices for common queries
CREATE INDEX IF NOT EXISTS idx_widgets_panel ON widgets(panel_key, widget_order);
CREATE INDEX IF NOT EXISTS idx_notes_time ON notes(time);
"""


def init_database(db_path: Path) -> sqlite3.Connection:
    """
    Initialize SQLite database with schema.

    Creates the database file if it doesn't exist and applies the schema.
    Uses WAL mode for better concurrent read performance.

    Args:
        db_path: Path to the SQLite database file

    Returns:
        sqlite3.Connection: Database connection
    """
    db_path = Path(db_path)

    # Ensure parent directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    conn.executescript(SCHEMA_SQL)
    conn.commit()

    return conn


def get_connection(db_path: Path) -> sqlite3.Connection:
    """
    Get a database connection.

    Transactions are managed explicitly by callers (isolation_level=None),
    so every write path issues its own BEGIN/COMMIT/ROLLBACK.

    Args:
        db_path: Path to the SQLite database file

    Returns:
        sqlite3.Connection: Database connection with row factory set
    """
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def check_connection(db_path: Path) -> None:
    """
    Run a trivial query against the database.

    Raises:
        sqlite3.Error: If the database cannot be reached
    """
    conn = get_connection(db_path)
    try:
        conn.execute("SELECT 1").fetchone()
    finally:
        conn.close()
