"""
Dashboard toolbar component.

Provides controls for adding widgets, switching views, and saving or
reloading the layout.
"""

from typing import Dict

import dash_mantine_components as dmc
from dash import html
from dash_iconify import DashIconify


def create_toolbar(panel_titles: Dict[str, str]) -> dmc.Group:
    """
    Create the dashboard toolbar.

    Args:
        panel_titles: Dict of panel_key -> title, one "add widget" entry each

    Returns:
        Group component with toolbar controls
    """
    add_items = [
        dmc.MenuItem(
            title,
            id={"type": "add-widget-btn", "panel": panel_key},
            leftSection=DashIconify(icon="tabler:square-plus", width=16),
        )
        for panel_key, title in panel_titles.items()
    ]

    return dmc.Group(
        [
            # Left side: add widget menu and view switch
            dmc.Group(
                [
                    dmc.Menu(
                        [
                            dmc.MenuTarget(
                                dmc.Button(
                                    "Add Widget",
                                    leftSection=DashIconify(icon="tabler:plus", width=16),
                                    variant="light",
                                    disabled=not add_items,
                                )
                            ),
                            dmc.MenuDropdown(
                                [dmc.MenuLabel("Add to panel"), *add_items]
                            ),
                        ],
                        position="bottom-start",
                    ),
                    dmc.SegmentedControl(
                        id="view-mode",
                        value="grid",
                        data=[
                            {"value": "grid", "label": "Grid"},
                            {"value": "panels", "label": "Panels"},
                        ],
                        size="sm",
                    ),
                    html.Div(id="layout-hint"),
                ],
                gap="sm",
            ),

            # Right side: layout controls
            dmc.Group(
                [
                    dmc.Button(
                        "Save Layout",
                        id="save-layout-btn",
                        leftSection=DashIconify(icon="tabler:device-floppy", width=16),
                        variant="outline",
                        size="sm",
                    ),
                    dmc.Menu(
                        [
                            dmc.MenuTarget(
                                dmc.ActionIcon(
                                    DashIconify(icon="tabler:dots-vertical", width=16),
                                    variant="subtle",
                                    size="lg",
                                )
                            ),
                            dmc.MenuDropdown(
                                [
                                    dmc.MenuItem(
                                        "Reload Saved Layout",
                                        id="reload-layout-btn",
                                        leftSection=DashIconify(icon="tabler:refresh", width=16),
                                    ),
                                    dmc.MenuItem(
                                        "Reset to Default",
                                        id="reset-layout-btn",
                                        leftSection=DashIconify(icon="tabler:restore", width=16),
                                        color="red",
                                    ),
                                ]
                            ),
                        ],
                        position="bottom-end",
                    ),
                ],
                gap="xs",
            ),
        ],
        justify="space-between",
        mb="md",
    )
