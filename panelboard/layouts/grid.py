"""
Grid placement engine for dashboard widgets.

Keeps a non-overlapping assignment of widgets to rectangles on a fixed-size
grid and implements the interactive move/resize rules. The engine has no UI
dependency: callers feed it pointer cells as (row, col) tuples and render the
resulting GridPositions however they like.

Placement failures during drag or resize are recovered here (the widget keeps
its previous position) and logged. Only an explicit add on a full grid raises.
"""

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np

from panelboard.exceptions import NoSpaceAvailable
from panelboard.layouts.models import GridPosition, LayoutSnapshot, Widget, WidgetSize
from panelboard.layouts.serializer import check_unique_widget_ids
from panelboard.layouts.serializer import deserialize_layout as _deserialize_layout
from panelboard.layouts.serializer import serialize_layout as _serialize_layout

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 8
DEFAULT_COLS = 6
DEFAULT_WIDGET_WIDTH = 2
DEFAULT_WIDGET_HEIGHT = 2

RESIZE_DIRECTIONS = ("se", "s", "e")

Cell = Tuple[int, int]


class InteractionKind(str, Enum):
    DRAG = "drag"
    RESIZE = "resize"


@dataclass
class Interaction:
    """The single active drag or resize, with the position to revert to."""

    widget_id: int
    kind: InteractionKind
    origin: GridPosition
    direction: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "widget_id": self.widget_id,
            "kind": self.kind.value,
            "origin": str(self.origin),
            "direction": self.direction,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Interaction":
        return cls(
            widget_id=int(data["widget_id"]),
            kind=InteractionKind(data["kind"]),
            origin=GridPosition.parse(data["origin"]),
            direction=data.get("direction"),
        )


class GridPlacementEngine:
    """
    Non-overlapping placement of widgets on a rows x cols grid.

    Args:
        rows: Number of grid rows
        cols: Number of grid columns
        min_span: Minimum rows and columns a resized widget must keep
    """

    def __init__(
        self,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        min_span: int = 1,
    ):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {cols}x{rows}")
        if min_span < 1:
            raise ValueError(f"min_span must be at least 1, got {min_span}")

        self.rows = rows
        self.cols = cols
        self.min_span = min_span
        self._panels: LayoutSnapshot = {}
        self._interaction: Optional[Interaction] = None

    @classmethod
    def from_snapshot(
        cls,
        payload: Dict[str, Any],
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        min_span: int = 1,
    ) -> "GridPlacementEngine":
        """Create an engine and load a wire document into it."""
        engine = cls(rows=rows, cols=cols, min_span=min_span)
        engine.deserialize_layout(payload)
        return engine

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def panels(self) -> LayoutSnapshot:
        return self._panels

    @property
    def interaction(self) -> Optional[Interaction]:
        return self._interaction

    def iter_widgets(self) -> Iterator[Tuple[str, Widget]]:
        """Yield (panel_key, widget) pairs in layout order."""
        for panel_key, panel in self._panels.items():
            for widget in panel.widgets:
                yield panel_key, widget

    def get_widget(self, widget_id: int) -> Widget:
        for _, widget in self.iter_widgets():
            if widget.id == widget_id:
                return widget
        raise KeyError(f"Unknown widget: {widget_id}")

    def placed_positions(self) -> Dict[int, GridPosition]:
        return {
            widget.id: widget.position
            for _, widget in self.iter_widgets()
            if widget.position is not None
        }

    def occupancy(self) -> np.ndarray:
        """Boolean (rows, cols) map of cells covered by placed widgets."""
        grid = np.zeros((self.rows, self.cols), dtype=bool)
        for position in self.placed_positions().values():
            grid[
                position.start_row - 1:position.end_row - 1,
                position.start_col - 1:position.end_col - 1,
            ] = True
        return grid

    # -------------------------------------------------------------------------
    # Placement queries
    # -------------------------------------------------------------------------

    def find_next_available_position(
        self,
        width: int = DEFAULT_WIDGET_WIDTH,
        height: int = DEFAULT_WIDGET_HEIGHT,
    ) -> Optional[GridPosition]:
        """
        Find the first free width x height rectangle.

        Anchors are scanned row-major (smallest row, then smallest column), so
        the result is fully determined by the set of occupied rectangles.

        Returns:
            The free position, or None if the grid has no room
        """
        if width < 1 or height < 1:
            raise ValueError(f"Widget size must be at least 1x1, got {width}x{height}")
        if width > self.cols or height > self.rows:
            return None

        occupied = self.occupancy()
        for row in range(1, self.rows - height + 2):
            for col in range(1, self.cols - width + 2):
                if not occupied[row - 1:row - 1 + height, col - 1:col - 1 + width].any():
                    return GridPosition.from_anchor(row, col, width, height)
        return None

    def is_position_available(
        self,
        candidate: GridPosition,
        excluding: Optional[int] = None,
    ) -> bool:
        """
        Check that candidate fits the grid and overlaps no placed widget.

        Args:
            candidate: Region to test
            excluding: Widget id to ignore, used when a widget is validated
                against its own current position
        """
        if not candidate.fits(self.rows, self.cols):
            return False
        for widget_id, position in self.placed_positions().items():
            if widget_id == excluding:
                continue
            if candidate.overlaps(position):
                return False
        return True

    def default_footprint(self, widget: Widget) -> Tuple[int, int]:
        """(width, height) used when a widget is auto-placed."""
        if widget.size is WidgetSize.LARGE:
            width, height = self.cols, DEFAULT_WIDGET_HEIGHT
        elif widget.size is WidgetSize.SMALL:
            width, height = DEFAULT_WIDGET_WIDTH, 1
        else:
            width, height = DEFAULT_WIDGET_WIDTH, DEFAULT_WIDGET_HEIGHT
        return min(width, self.cols), min(height, self.rows)

    # -------------------------------------------------------------------------
    # Adding and removing widgets
    # -------------------------------------------------------------------------

    def add_widget(
        self,
        panel_key: str,
        widget: Widget,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> GridPosition:
        """
        Append a widget to a panel and place it at the next free position.

        Raises:
            KeyError: If the panel does not exist
            ValueError: If a widget with the same id already exists
            NoSpaceAvailable: If the grid has no room; the layout is unchanged
        """
        panel = self._panels[panel_key]
        if widget.id in {w.id for _, w in self.iter_widgets()}:
            raise ValueError(f"Widget id already in use: {widget.id}")

        default_width, default_height = self.default_footprint(widget)
        width = width or default_width
        height = height or default_height

        position = self.find_next_available_position(width, height)
        if position is None:
            logger.warning(
                "No space for widget %s (%dx%d) in panel %s", widget.id, width, height, panel_key
            )
            raise NoSpaceAvailable(width, height)

        widget.position = position
        panel.widgets.append(widget)
        logger.debug("Placed widget %s at %s", widget.id, position)
        return position

    def remove_widget(self, widget_id: int) -> Widget:
        """Remove a widget from its panel and free its cells."""
        for panel in self._panels.values():
            for index, widget in enumerate(panel.widgets):
                if widget.id == widget_id:
                    del panel.widgets[index]
                    if self._interaction and self._interaction.widget_id == widget_id:
                        self._interaction = None
                    return widget
        raise KeyError(f"Unknown widget: {widget_id}")

    # -------------------------------------------------------------------------
    # Drag / resize state machine
    # -------------------------------------------------------------------------

    def begin_drag(self, widget_id: int) -> bool:
        """Enter Dragging for a widget. False if another interaction is active."""
        return self._begin(widget_id, InteractionKind.DRAG)

    def begin_resize(self, widget_id: int, direction: str = "se") -> bool:
        """Enter Resizing for a widget. False if another interaction is active."""
        _check_direction(direction)
        return self._begin(widget_id, InteractionKind.RESIZE, direction)

    def resume_interaction(self, interaction: Interaction) -> bool:
        """Restore an interaction saved with Interaction.to_dict()."""
        if self._interaction is not None:
            logger.info("Cannot resume %s of widget %s: another interaction is active",
                        interaction.kind.value, interaction.widget_id)
            return False
        widget = self.get_widget(interaction.widget_id)
        if widget.position != interaction.origin:
            logger.info("Stale %s for widget %s dropped", interaction.kind.value, widget.id)
            return False
        self._interaction = interaction
        return True

    def cancel_interaction(self) -> None:
        """Leave Dragging/Resizing without moving anything."""
        self._interaction = None

    def finalize_drag(self, widget_id: int, pointer_cell: Cell) -> Optional[GridPosition]:
        """
        Drop a widget with its top-left corner at pointer_cell.

        The widget keeps its size and the anchor is clamped so the widget
        stays inside the grid. If the target overlaps another widget the drop
        is rejected and the widget stays where it was.

        Returns:
            The widget's position after the drop
        """
        widget = self.get_widget(widget_id)
        if not self._claim(widget, InteractionKind.DRAG):
            return widget.position

        origin = self._interaction.origin
        try:
            row, col = _check_cell(pointer_cell)
            row = min(max(row, 1), self.rows - origin.height + 1)
            col = min(max(col, 1), self.cols - origin.width + 1)
            candidate = GridPosition.from_anchor(row, col, origin.width, origin.height)

            if self.is_position_available(candidate, excluding=widget_id):
                widget.position = candidate
                logger.debug("Moved widget %s from %s to %s", widget_id, origin, candidate)
            else:
                widget.position = origin
                logger.warning(
                    "Rejected drop of widget %s at %s; reverted to %s", widget_id, candidate, origin
                )
            return widget.position
        finally:
            self._interaction = None

    def finalize_resize(
        self,
        widget_id: int,
        pointer_cell: Cell,
        direction: Optional[str] = None,
    ) -> Optional[GridPosition]:
        """
        Resize a widget so that pointer_cell becomes its last covered cell.

        Only the edges implied by direction move: "se" moves the bottom and
        right edges, "s" the bottom edge, "e" the right edge. The top-left
        corner never moves.

        Returns:
            The widget's position after the resize
        """
        if direction is None:
            active = self._interaction
            direction = active.direction if active and active.direction else "se"
        _check_direction(direction)

        widget = self.get_widget(widget_id)
        if not self._claim(widget, InteractionKind.RESIZE, direction):
            return widget.position

        origin = self._interaction.origin
        try:
            row, col = _check_cell(pointer_cell)
            row = min(max(row, 1), self.rows)
            col = min(max(col, 1), self.cols)

            end_row, end_col = origin.end_row, origin.end_col
            if direction in ("se", "s"):
                end_row = min(max(row + 1, origin.start_row + self.min_span), self.rows + 1)
            if direction in ("se", "e"):
                end_col = min(max(col + 1, origin.start_col + self.min_span), self.cols + 1)
            candidate = GridPosition(origin.start_row, origin.start_col, end_row, end_col)

            if (
                candidate.height >= self.min_span
                and candidate.width >= self.min_span
                and self.is_position_available(candidate, excluding=widget_id)
            ):
                widget.position = candidate
                logger.debug("Resized widget %s from %s to %s", widget_id, origin, candidate)
            else:
                widget.position = origin
                logger.warning(
                    "Rejected resize of widget %s to %s; kept %s", widget_id, candidate, origin
                )
            return widget.position
        finally:
            self._interaction = None

    def _begin(
        self,
        widget_id: int,
        kind: InteractionKind,
        direction: Optional[str] = None,
    ) -> bool:
        widget = self.get_widget(widget_id)
        if widget.position is None:
            logger.info("Widget %s is not placed; cannot %s", widget_id, kind.value)
            return False
        if self._interaction is not None:
            logger.info(
                "Ignoring %s of widget %s: widget %s is already in %s",
                kind.value, widget_id, self._interaction.widget_id, self._interaction.kind.value,
            )
            return False
        self._interaction = Interaction(widget_id, kind, widget.position, direction)
        return True

    def _claim(
        self,
        widget: Widget,
        kind: InteractionKind,
        direction: Optional[str] = None,
    ) -> bool:
        # No active interaction: treat finalize as a one-shot begin + finalize
        if self._interaction is None:
            return self._begin(widget.id, kind, direction)
        if self._interaction.widget_id != widget.id or self._interaction.kind is not kind:
            logger.info(
                "Ignoring %s of widget %s: widget %s is already in %s",
                kind.value, widget.id, self._interaction.widget_id, self._interaction.kind.value,
            )
            return False
        return True

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def serialize_layout(self) -> Dict[str, Any]:
        """Current layout, positions included, in the wire format."""
        return _serialize_layout(self._panels)

    def deserialize_layout(self, payload: Dict[str, Any]) -> None:
        """Replace the engine state with a wire document."""
        self.load_snapshot(_deserialize_layout(payload))

    def load_snapshot(self, snapshot: LayoutSnapshot) -> None:
        """
        Replace the engine state with a layout snapshot.

        Stored positions are kept when they fit and do not collide with an
        earlier widget. Everything else is auto-placed in layout order; if
        the grid is full the widget is left unplaced.

        Raises:
            LayoutValidationError: If a widget id appears more than once; the
                engine state is left unchanged
        """
        check_unique_widget_ids(snapshot)

        self._panels = copy.deepcopy(snapshot)
        self._interaction = None

        pending = []
        accepted: Dict[int, GridPosition] = {}
        for _, widget in self.iter_widgets():
            position = widget.position
            if position is not None and position.fits(self.rows, self.cols) and not any(
                position.overlaps(other) for other in accepted.values()
            ):
                accepted[widget.id] = position
                continue
            if position is not None:
                logger.warning("Stored position %s of widget %s is invalid; re-placing",
                               position, widget.id)
            widget.position = None
            pending.append(widget)

        for widget in pending:
            width, height = self.default_footprint(widget)
            widget.position = self.find_next_available_position(width, height)
            if widget.position is None:
                logger.warning("No space to place widget %s; left unplaced", widget.id)


def _check_direction(direction: str) -> None:
    if direction not in RESIZE_DIRECTIONS:
        raise ValueError(
            f"Invalid resize direction {direction!r}; expected one of {', '.join(RESIZE_DIRECTIONS)}"
        )


def _check_cell(cell: Cell) -> Cell:
    row, col = cell
    if isinstance(row, bool) or isinstance(col, bool) or not isinstance(row, int) or not isinstance(col, int):
        raise ValueError(f"Pointer cell must be a pair of integers, got {cell!r}")
    return row, col
