"""
Layout management for Panelboard.

This package handles:
- The panel/widget data model and grid positions
- Layout serialization (JSON wire format, file export/import)
- Grid placement (non-overlapping widget arrangement, drag/resize)
- Layout templates and center panel row grouping
"""

from panelboard.layouts.models import (
    DEFAULT_WIDGET_COLOR,
    GridPosition,
    LayoutSnapshot,
    PanelData,
    Widget,
    WidgetSize,
)
from panelboard.layouts.serializer import (
    serialize_layout,
    deserialize_layout,
    widget_to_wire,
    widget_from_wire,
    panel_to_wire,
    save_layout_to_file,
    load_layout_from_file,
)
from panelboard.layouts.grid import GridPlacementEngine, Interaction, InteractionKind
from panelboard.layouts.templates import (
    CENTER_PANEL_KEY,
    get_default_panels,
    get_template_layouts,
    generate_layout_from_template,
    group_center_widgets,
)

__all__ = [
    "DEFAULT_WIDGET_COLOR",
    "GridPosition",
    "LayoutSnapshot",
    "PanelData",
    "Widget",
    "WidgetSize",
    "serialize_layout",
    "deserialize_layout",
    "widget_to_wire",
    "widget_from_wire",
    "panel_to_wire",
    "save_layout_to_file",
    "load_layout_from_file",
    "GridPlacementEngine",
    "Interaction",
    "InteractionKind",
    "CENTER_PANEL_KEY",
    "get_default_panels",
    "get_template_layouts",
    "generate_layout_from_template",
    "group_center_widgets",
]
