"""
Dashboard grid component using dash-draggable.

Widgets are laid out on a draggable grid with the same number of columns as
the placement engine. The grid never compacts or pushes widgets aside; every
drop or resize it reports is handed back to the engine, which either accepts
the new rectangle or keeps the old one.
"""

from typing import Any, Dict, List, Optional

import dash_draggable
from dash import html

from panelboard.components.dashboard.panel import create_empty_placeholder, create_widget_card
from panelboard.layouts.grid import GridPlacementEngine
from panelboard.layouts.models import Widget

ROW_HEIGHT = 90
BREAKPOINT = "lg"
ITEM_PREFIX = "widget-"


def create_dashboard_grid(engine: GridPlacementEngine, customize: bool = False) -> html.Div:
    """
    Create the draggable grid for the engine's current layout.

    Args:
        engine: Placement engine holding panels and positions
        customize: Allow dragging and resizing, and show widget controls

    Returns:
        Div containing the draggable grid
    """
    if not engine.panels:
        return create_empty_placeholder()

    children = []
    items = []
    for _, widget in engine.iter_widgets():
        if widget.position is None:
            continue
        items.append(position_to_layout_item(widget, engine.min_span))
        children.append(html.Div(
            create_widget_card(widget, customize=customize),
            id=layout_item_id(widget.id),
        ))

    return html.Div([
        dash_draggable.ResponsiveGridLayout(
            id="dashboard-grid",
            children=children,
            layouts={BREAKPOINT: items},
            breakpoints={BREAKPOINT: 0},
            cols={BREAKPOINT: engine.cols},
            rowHeight=ROW_HEIGHT,
            isDraggable=bool(customize),
            isResizable=bool(customize),
            draggableHandle=".widget-drag-handle",
            compactType=None,
            preventCollision=True,
            margin=[10, 10],
        ),
    ], id="dashboard-container", style={"minHeight": f"{engine.rows * (ROW_HEIGHT + 10)}px"})


def layout_item_id(widget_id: int) -> str:
    return f"{ITEM_PREFIX}{widget_id}"


def position_to_layout_item(widget: Widget, min_span: int = 1) -> Dict[str, Any]:
    """
    Grid item dict for a placed widget.

    Grid items use 0-based x/y with a width and height; GridPositions are
    1-based with exclusive ends.
    """
    position = widget.position
    return {
        "i": layout_item_id(widget.id),
        "x": position.start_col - 1,
        "y": position.start_row - 1,
        "w": position.width,
        "h": position.height,
        "minW": min_span,
        "minH": min_span,
    }


def apply_grid_layout(engine: GridPlacementEngine, layouts: Optional[Dict[str, List]]) -> bool:
    """
    Feed the grid's reported layout into the engine.

    A changed width or height is a resize from the bottom/right edges; a
    changed corner with the same size is a drop. Items for unknown or
    unplaced widgets are ignored. The engine decides whether each change
    sticks, so afterwards the caller re-renders from the engine's positions.

    Returns:
        True if any item differed from the engine's layout
    """
    items = (layouts or {}).get(BREAKPOINT) or []
    placed = engine.placed_positions()
    changed = False

    for item in items:
        widget_id = _widget_id(item.get("i"))
        current = placed.get(widget_id)
        if current is None:
            continue

        x, y, w, h = (item.get(k) for k in ("x", "y", "w", "h"))
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in (x, y, w, h)):
            continue

        if w != current.width or h != current.height:
            changed = True
            if w != current.width and h != current.height:
                direction = "se"
            elif h != current.height:
                direction = "s"
            else:
                direction = "e"
            engine.finalize_resize(widget_id, (y + h, x + w), direction)
        elif x != current.start_col - 1 or y != current.start_row - 1:
            changed = True
            engine.finalize_drag(widget_id, (y + 1, x + 1))

    return changed


def _widget_id(item_id: Any) -> Optional[int]:
    if not isinstance(item_id, str) or not item_id.startswith(ITEM_PREFIX):
        return None
    try:
        return int(item_id[len(ITEM_PREFIX):])
    except ValueError:
        return None


def count_unplaced(engine: GridPlacementEngine) -> int:
    """Number of widgets that did not fit on the grid."""
    return sum(1 for _, w in engine.iter_widgets() if w.position is None)
