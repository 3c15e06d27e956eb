"""
Dashboard components for Panelboard.

Provides the main dashboard area with:
- Draggable, resizable widget grid
- Classic panel columns
- Dashboard toolbar
"""

from panelboard.components.dashboard.grid import create_dashboard_grid
from panelboard.components.dashboard.panel import (
    create_panel,
    create_panel_columns,
    create_widget_card,
)
from panelboard.components.dashboard.toolbar import create_toolbar

__all__ = [
    "create_dashboard_grid",
    "create_panel",
    "create_panel_columns",
    "create_widget_card",
    "create_toolbar",
]
