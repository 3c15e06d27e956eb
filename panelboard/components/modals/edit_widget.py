"""
Edit widget modal component.
"""

import dash_mantine_components as dmc
from dash import dcc
from dash_iconify import DashIconify

from panelboard.layouts.models import DEFAULT_WIDGET_COLOR, WidgetSize

SWATCHES = ["#00d563", "#228be6", "#fab005", "#fa5252", "#7950f2", "#868e96"]


def create_edit_widget_modal() -> dmc.Modal:
    """
    Create modal for editing a widget's title, content, color and size.

    Returns:
        Modal component
    """
    return dmc.Modal(
        id="edit-widget-modal",
        title=dmc.Group([
            DashIconify(icon="tabler:pencil", width=20),
            dmc.Text("Edit Widget", fw=500),
        ]),
        children=[
            dmc.Stack([
                dmc.TextInput(
                    id="edit-widget-title",
                    label="Title",
                    placeholder="Widget title",
                    value="",
                ),
                dmc.Textarea(
                    id="edit-widget-content",
                    label="Content",
                    placeholder="Widget content (Markdown)",
                    autosize=True,
                    minRows=3,
                ),
                dmc.ColorInput(
                    id="edit-widget-color",
                    label="Color",
                    value=DEFAULT_WIDGET_COLOR,
                    format="hex",
                    swatches=SWATCHES,
                ),
                dmc.Select(
                    id="edit-widget-size",
                    label="Size",
                    value=WidgetSize.STANDARD.value,
                    data=[
                        {"value": WidgetSize.STANDARD.value, "label": "Standard"},
                        {"value": WidgetSize.LARGE.value, "label": "Large (own row)"},
                        {"value": WidgetSize.SMALL.value, "label": "Small (shared row)"},
                    ],
                ),
                dmc.Group([
                    dmc.Button(
                        "Cancel",
                        id="edit-widget-cancel-btn",
                        variant="light",
                        color="gray",
                    ),
                    dmc.Button(
                        "Apply",
                        id="edit-widget-confirm-btn",
                        leftSection=DashIconify(icon="tabler:check", width=16),
                    ),
                ], justify="flex-end"),

                dcc.Store(id="edit-widget-store", data={"widget_id": None}),
            ], gap="md"),
        ],
        opened=False,
    )
