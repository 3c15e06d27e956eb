"""
Repository classes for database CRUD operations.

This module provides repository pattern implementations for:
- Panels and their widgets (full-replace layout store)
- Notes (sticky notes)
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from panelboard.db.schema import get_connection
from panelboard.exceptions import LayoutStoreError, PanelNotFoundError
from panelboard.layouts.models import (
    DEFAULT_WIDGET_COLOR,
    GridPosition,
    LayoutSnapshot,
    PanelData,
    Widget,
    WidgetSize,
)
from panelboard.layouts.serializer import check_unique_widget_ids

logger = logging.getLogger(__name__)


@dataclass
class Note:
    """Note entity."""

    id: int
    note: str
    color: str
    user: str
    time: datetime

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "note": self.note,
            "color": self.color,
            "user": self.user,
            "time": str(self.time) if self.time is not None else None,
        }


class PanelRepository:
    """
    Layout store for panels and widgets.

    Writes use full-replace semantics: save_panels() deletes every row and
    reinserts the submitted layout inside one transaction, so the stored
    layout is always exactly one client's complete submission.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        conn = get_connection(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def get_all_panels(self) -> LayoutSnapshot:
        """
        Get every panel with its widgets.

        Panels are ordered by key, widgets by their stored order.

        Raises:
            LayoutStoreError: If any query fails; no partial result is returned
        """
        try:
            with self._get_conn() as conn:
                panel_rows = conn.execute(
                    "SELECT panel_key, title FROM panels ORDER BY panel_key"
                ).fetchall()

                result: LayoutSnapshot = {}
                for row in panel_rows:
                    result[row["panel_key"]] = PanelData(
                        title=row["title"],
                        widgets=self._fetch_widgets(conn, row["panel_key"]),
                    )
        except sqlite3.Error as e:
            logger.exception("Error fetching panels")
            raise LayoutStoreError("Failed to fetch panels") from e

        return result

    def get_panel(self, panel_key: str) -> PanelData:
        """
        Get a single panel with its widgets.

        Raises:
            PanelNotFoundError: If no panel has this key
            LayoutStoreError: If a query fails
        """
        try:
            with self._get_conn() as conn:
                row = conn.execute(
                    "SELECT panel_key, title FROM panels WHERE panel_key = ?",
                    (panel_key,),
                ).fetchone()

                if row is None:
                    raise PanelNotFoundError(panel_key)

                return PanelData(
                    title=row["title"],
                    widgets=self._fetch_widgets(conn, panel_key),
                )
        except sqlite3.Error as e:
            logger.exception("Error fetching panel %s", panel_key)
            raise LayoutStoreError("Failed to fetch panel") from e

    def save_panels(self, snapshot: LayoutSnapshot) -> None:
        """
        Atomically replace the stored layout.

        Widgets are deleted before panels because of the foreign key, then
        each panel and its widgets are inserted in input order. A widget's
        stored order is its 0-based index in the panel's list. Any failure
        rolls the whole transaction back.

        Args:
            snapshot: The complete desired layout; empty clears the store

        Raises:
            LayoutValidationError: If a widget id appears more than once
            LayoutStoreError: If the transaction fails (store left unchanged)
        """
        check_unique_widget_ids(snapshot)

        try:
            with self._get_conn() as conn:
                conn.execute("BEGIN")
                try:
                    conn.execute("DELETE FROM widgets")
                    conn.execute("DELETE FROM panels")

                    for panel_key, panel in snapshot.items():
                        conn.execute(
                            "INSERT INTO panels (panel_key, title) VALUES (?, ?)",
                            (panel_key, panel.title),
                        )
                        for order, widget in enumerate(panel.widgets):
                            self._insert_widget(conn, panel_key, order, widget)

                    conn.execute("COMMIT")
                except Exception:
                    conn.execute("ROLLBACK")
                    logger.warning("Panel save rolled back")
                    raise
        except Exception as e:
            # sqlite3 raises OverflowError, not sqlite3.Error, for out-of-range integers
            logger.exception("Error saving panels")
            raise LayoutStoreError("Failed to save panels") from e

        logger.info(
            "Panels saved successfully (%d panels, %d widgets)",
            len(snapshot),
            sum(len(p.widgets) for p in snapshot.values()),
        )

    def delete_panel(self, panel_key: str) -> bool:
        """Delete a panel; its widgets cascade."""
        try:
            with self._get_conn() as conn:
                cursor = conn.execute(
                    "DELETE FROM panels WHERE panel_key = ?", (panel_key,)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.exception("Error deleting panel %s", panel_key)
            raise LayoutStoreError("Failed to delete panel") from e

    def _insert_widget(
        self,
        conn: sqlite3.Connection,
        panel_key: str,
        order: int,
        widget: Widget,
    ) -> None:
        conn.execute(
            """
            INSERT INTO widgets
            (widget_id, panel_key, title, content, color, widget_order,
             is_large, is_small, grid_area)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                widget.id,
                panel_key,
                widget.title,
                widget.content or "",
                widget.color or DEFAULT_WIDGET_COLOR,
                order,
                widget.size.is_large,
                widget.size.is_small,
                str(widget.position) if widget.position is not None else None,
            ),
        )

    def _fetch_widgets(self, conn: sqlite3.Connection, panel_key: str) -> List[Widget]:
        rows = conn.execute(
            "SELECT * FROM widgets WHERE panel_key = ? ORDER BY widget_order",
            (panel_key,),
        ).fetchall()
        return [self._row_to_widget(row) for row in rows]

    def _row_to_widget(self, row: sqlite3.Row) -> Widget:
        """Convert database row to Widget object."""
        position = None
        if row["grid_area"]:
            try:
                position = GridPosition.parse(row["grid_area"])
            except ValueError:
                logger.warning(
                    "Ignoring malformed grid_area %r for widget %s",
                    row["grid_area"], row["widget_id"],
                )

        return Widget(
            id=row["widget_id"],
            title=row["title"],
            content=row["content"] or "",
            color=row["color"] or DEFAULT_WIDGET_COLOR,
            size=WidgetSize.from_flags(bool(row["is_large"]), bool(row["is_small"])),
            position=position,
        )


class NoteRepository:
    """CRUD operations for notes."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        conn = get_connection(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def create(self, note: str, color: str, user: str) -> Note:
        """Create a new note."""
        with self._get_conn() as conn:
            cursor = conn.execute(
                "INSERT INTO notes (note, color, user) VALUES (?, ?, ?)",
                (note, color, user),
            )
            note_id = cursor.lastrowid

        return self.get_by_id(note_id)

    def get_by_id(self, note_id: int) -> Optional[Note]:
        """Get a note by ID."""
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM notes WHERE id = ?", (note_id,)
            ).fetchone()

        if row is None:
            return None

        return self._row_to_note(row)

    def get_all(self) -> List[Note]:
        """Get all notes, newest first."""
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM notes ORDER BY time DESC, id DESC"
            ).fetchall()

        return [self._row_to_note(row) for row in rows]

    def update(self, note_id: int, note: str, color: str, user: str) -> bool:
        """Update a note's text, color and author."""
        with self._get_conn() as conn:
            cursor = conn.execute(
                "UPDATE notes SET note = ?, color = ?, user = ? WHERE id = ?",
                (note, color, user, note_id),
            )
            return cursor.rowcount > 0

    def delete(self, note_id: int) -> bool:
        """Delete a note."""
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM notes WHERE id = ?", (note_id,)
            )
            return cursor.rowcount > 0

    def _row_to_note(self, row: sqlite3.Row) -> Note:
        """Convert database row to Note object."""
        return Note(
            id=row["id"],
            note=row["note"],
            color=row["color"],
            user=row["user"],
            time=row["time"],
        )
