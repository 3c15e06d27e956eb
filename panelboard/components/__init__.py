"""
UI components for Panelboard.

This package contains the Dash/Mantine components used in the application:
- dashboard: Widget grid, panel columns and toolbar
- modals: Dialog for editing a widget
"""

# Dashboard components
from panelboard.components.dashboard import (
    create_dashboard_grid,
    create_panel,
    create_panel_columns,
    create_toolbar,
    create_widget_card,
)

# Modals
from panelboard.components.modals import create_edit_widget_modal

__all__ = [
    # Dashboard
    "create_dashboard_grid",
    "create_panel",
    "create_panel_columns",
    "create_toolbar",
    "create_widget_card",
    # Modals
    "create_edit_widget_modal",
]
