"""
Panel and widget card components.

Widget cards are shared by the interactive grid and the classic panel view.
In customize mode each card carries edit and remove controls, and its title
row is the handle for dragging it around the grid.
"""

from typing import Dict, List, Optional

import dash_mantine_components as dmc
from dash import dcc, html
from dash_iconify import DashIconify

from panelboard.layouts.models import DEFAULT_WIDGET_COLOR, PanelData, Widget
from panelboard.layouts.templates import CENTER_PANEL_KEY, group_center_widgets


def create_widget_card(
    widget: Widget,
    extra_class: str = "",
    customize: bool = False,
    style: Optional[Dict] = None,
) -> html.Div:
    """
    Create a card for a single widget.

    Args:
        widget: Widget to display
        extra_class: Extra CSS class ('large-widget', 'small-widget')
        customize: Show the interactive controls
        style: Extra style for the wrapper (e.g. a fixed height)

    Returns:
        Card wrapped in a div keyed by widget id
    """
    color = widget.color or DEFAULT_WIDGET_COLOR
    wrapper_style = {"height": "100%", **(style or {})}

    return html.Div(
        dmc.Paper(
            [
                create_widget_header(widget, customize),
                html.Div(
                    dcc.Markdown(widget.content or ""),
                    className="widget-content",
                    style={
                        "padding": "8px",
                        "overflow": "auto",
                        "flex": 1,
                        "borderTop": f"1px solid {color}",
                    },
                ),
            ],
            withBorder=True,
            radius="md",
            style={
                "height": "100%",
                "display": "flex",
                "flexDirection": "column",
                "overflow": "hidden",
                "borderColor": color,
            },
        ),
        id={"type": "widget-card", "index": widget.id},
        className=f"widget {extra_class}".strip(),
        style=wrapper_style,
    )


def create_widget_header(widget: Widget, customize: bool) -> dmc.Group:
    """Title row of a widget card, with controls in customize mode."""
    children = [dmc.Text(widget.title, size="sm", fw=500, truncate=True, style={"flex": 1})]

    if customize:
        children.append(dmc.Group(
            [
                dmc.ActionIcon(
                    DashIconify(icon="tabler:pencil", width=16),
                    id={"type": "widget-edit-btn", "index": widget.id},
                    variant="subtle",
                    size="sm",
                    color="gray",
                ),
                dmc.ActionIcon(
                    DashIconify(icon="tabler:x", width=16),
                    id={"type": "widget-remove-btn", "index": widget.id},
                    variant="subtle",
                    size="sm",
                    color="red",
                ),
            ],
            gap=4,
        ))

    return dmc.Group(
        children,
        justify="space-between",
        p="xs",
        className="widget-drag-handle",
        style={"flexShrink": 0, "cursor": "move" if customize else "default"},
    )


def create_panel(panel_key: str, panel: PanelData, customize: bool = False) -> dmc.Paper:
    """
    Create a panel column for the classic view.

    The center panel groups its widgets into large, shared small and
    standard rows; other panels stack their widgets in order.
    """
    if panel_key == CENTER_PANEL_KEY:
        body = _center_panel_rows(panel.widgets, customize)
    else:
        body = [create_widget_card(w, customize=customize, style={"height": "160px"}) for w in panel.widgets]

    return dmc.Paper(
        [
            dmc.Group(
                [
                    dmc.Title(panel.title, order=4),
                    dmc.Badge(f"{len(panel.widgets)} widgets", variant="light", color="gray"),
                ],
                justify="space-between",
                mb="sm",
            ),
            dmc.Stack(body, gap="sm", className="widget-container"),
        ],
        id={"type": "panel-section", "index": panel_key},
        className=f"{panel_key}-section",
        withBorder=True,
        radius="md",
        p="md",
        style={"flex": 1, "minWidth": "260px"},
    )


def _center_panel_rows(widgets: List[Widget], customize: bool) -> List:
    children = []
    for row in group_center_widgets(widgets):
        if row.kind == "large":
            children.append(create_widget_card(
                row.widgets[0], "large-widget", customize, style={"height": "240px"},
            ))
        elif row.kind == "small":
            children.append(dmc.SimpleGrid(
                [create_widget_card(w, "small-widget", customize, style={"height": "120px"})
                 for w in row.widgets],
                cols=len(row.widgets),
                spacing="sm",
                className="widget-row",
            ))
        else:
            children.append(create_widget_card(row.widgets[0], customize=customize, style={"height": "160px"}))
    return children


def create_panel_columns(panels: Dict[str, PanelData], customize: bool = False) -> dmc.Group:
    """Lay out every panel side by side."""
    if not panels:
        return create_empty_placeholder()

    return dmc.Group(
        [create_panel(key, panel, customize) for key, panel in panels.items()],
        align="flex-start",
        grow=True,
        gap="md",
    )


def create_empty_placeholder() -> dmc.Center:
    """
    Create a placeholder for an empty dashboard.

    Returns:
        Centered placeholder message
    """
    return dmc.Center(
        dmc.Stack(
            [
                DashIconify(
                    icon="tabler:layout-dashboard",
                    width=48,
                    color="var(--mantine-color-dimmed)",
                ),
                dmc.Text("No panels yet", size="sm", c="dimmed"),
                dmc.Text(
                    "Seed a layout from the command line or POST one to /api/panels",
                    size="xs",
                    c="dimmed",
                ),
            ],
            align="center",
            gap="xs",
        ),
        style={"height": "300px"},
    )
