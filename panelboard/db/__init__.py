"""
Database module for Panelboard.

Provides SQLite-based persistence for panels, widgets and notes.
"""

from panelboard.db.schema import init_database, get_connection, check_connection
from panelboard.db.repository import (
    Note,
    NoteRepository,
    PanelRepository,
)

__all__ = [
    "init_database",
    "get_connection",
    "check_connection",
    "Note",
    "NoteRepository",
    "PanelRepository",
]
