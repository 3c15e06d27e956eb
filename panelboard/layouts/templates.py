"""
Predefined layout templates and the center panel row grouping.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from panelboard.layouts.models import (
    DEFAULT_WIDGET_COLOR,
    LayoutSnapshot,
    PanelData,
    Widget,
    WidgetSize,
)

CENTER_PANEL_KEY = "center"


def get_template_layouts() -> Dict[str, Dict[str, Any]]:
    """
    Get available layout templates.

    Returns:
        Dict of template_name -> template config
    """
    return {
        "empty": {
            "name": "Empty Layout",
            "description": "Start with a blank dashboard",
            "panels": {},
        },
        "classic": {
            "name": "Classic Three Columns",
            "description": "Projects, today's focus and life stuff",
            "panels": {
                "left": {
                    "title": "My Projects",
                    "widgets": [
                        ("Current Work", "standard"),
                        ("Side Projects", "standard"),
                        ("Ideas & Notes", "standard"),
                        ("Learning Goals", "standard"),
                    ],
                },
                "center": {
                    "title": "Today's Focus",
                    "widgets": [
                        ("Priority Tasks", "large"),
                        ("Deadlines", "small"),
                        ("Quick Notes", "small"),
                        ("Weekly Progress", "standard"),
                    ],
                },
                "right": {
                    "title": "Life Stuff",
                    "widgets": [
                        ("Calendar", "standard"),
                        ("Reminders", "standard"),
                        ("Habits Tracker", "standard"),
                        ("Random Thoughts", "standard"),
                    ],
                },
            },
        },
    }


def generate_layout_from_template(template_name: str) -> LayoutSnapshot:
    """
    Generate a layout snapshot from a template.

    Widget ids are numbered from 1 in layout order. Unknown template names
    fall back to the empty layout.

    Args:
        template_name: Name of the template to use

    Returns:
        Layout snapshot without grid positions
    """
    templates = get_template_layouts()
    template = templates.get(template_name, templates["empty"])

    snapshot: LayoutSnapshot = {}
    next_id = 1
    for panel_key, panel_def in template["panels"].items():
        widgets = []
        for title, size in panel_def["widgets"]:
            widgets.append(Widget(
                id=next_id,
                title=title,
                content="",
                color=DEFAULT_WIDGET_COLOR,
                size=WidgetSize(size),
            ))
            next_id += 1
        snapshot[panel_key] = PanelData(title=panel_def["title"], widgets=widgets)

    return snapshot


def get_default_panels() -> LayoutSnapshot:
    """Starter layout used when the store holds no panels."""
    return generate_layout_from_template("classic")


@dataclass
class WidgetRow:
    """One rendered row of the center panel."""

    kind: str  # 'large', 'small' or 'standard'
    widgets: List[Widget] = field(default_factory=list)


def group_center_widgets(widgets: List[Widget]) -> List[WidgetRow]:
    """
    Group a panel's widgets into rendered rows.

    A large widget gets its own full-width row. Small widgets share a single
    row, opened where the first small widget appears, as long as there is
    more than one of them. Everything else is a standalone row.
    """
    n_small = sum(1 for w in widgets if w.size is WidgetSize.SMALL)

    rows: List[WidgetRow] = []
    small_row = None
    for widget in widgets:
        if widget.size is WidgetSize.LARGE:
            rows.append(WidgetRow("large", [widget]))
        elif widget.size is WidgetSize.SMALL and n_small > 1:
            if small_row is None:
                small_row = WidgetRow("small")
                rows.append(small_row)
            small_row.widgets.append(widget)
        else:
            rows.append(WidgetRow("standard", [widget]))

    return rows
