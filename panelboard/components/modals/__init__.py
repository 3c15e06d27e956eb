"""
Modal components for Panelboard.
"""

from panelboard.components.modals.edit_widget import create_edit_widget_modal

__all__ = ["create_edit_widget_modal"]
