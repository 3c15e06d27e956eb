"""
Dash application factory for Panelboard.

This module creates and configures the main Dash application with:
- Mantine UI components
- Interactive widget grid and classic panel view
- State management stores
- Callback registration
- The JSON API blueprint on the underlying Flask server
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

import dash_mantine_components as dmc
from dash import ALL, Dash, Input, Output, State, ctx, dcc, html, no_update
from dash.exceptions import PreventUpdate
from dash_iconify import DashIconify

from panelboard.api import register_api
from panelboard.components.dashboard import (
    create_dashboard_grid,
    create_panel_columns,
    create_toolbar,
)
from panelboard.components.dashboard.grid import apply_grid_layout, count_unplaced
from panelboard.components.modals import create_edit_widget_modal
from panelboard.config import Config
from panelboard.db.repository import NoteRepository, PanelRepository
from panelboard.db.schema import init_database
from panelboard.exceptions import LayoutStoreError, LayoutValidationError, NoSpaceAvailable
from panelboard.layouts.grid import GridPlacementEngine
from panelboard.layouts.models import DEFAULT_WIDGET_COLOR, Widget, WidgetSize
from panelboard.layouts.serializer import COLOR_RE, deserialize_layout
from panelboard.layouts.templates import get_default_panels

logger = logging.getLogger(__name__)


def create_app(
    config: Config,
    panel_repo: Optional[PanelRepository] = None,
    note_repo: Optional[NoteRepository] = None,
) -> Dash:
    """
    Create and configure the Dash application.

    Repositories default to ones backed by config.db_path; pass your own to
    share them with other code or to substitute them in tests.
    """
    app = Dash(
        __name__,
        suppress_callback_exceptions=True,
        title="Panelboard",
        update_title=None,
    )

    init_database(config.db_path).close()
    panel_repo = panel_repo or PanelRepository(config.db_path)
    note_repo = note_repo or NoteRepository(config.db_path)

    # Store references for callbacks (use Flask server config, not Dash config)
    app.server.config["app_config"] = config
    register_api(app.server, panel_repo, note_repo, cors_origins=config.cors_origins)

    # Rebuilt on every page load so a refresh shows the saved layout
    app.layout = lambda: create_layout(config, load_engine_from_db(config, panel_repo))

    register_callbacks(app)

    return app


def create_engine(config: Config, payload: Optional[Dict] = None) -> GridPlacementEngine:
    """Build a placement engine sized from config, optionally loading a wire document."""
    engine = GridPlacementEngine(
        rows=config.grid_rows,
        cols=config.grid_cols,
        min_span=config.min_widget_span,
    )
    if payload is not None:
        engine.deserialize_layout(payload)
    return engine


def load_engine_from_db(config: Config, panel_repo: PanelRepository) -> GridPlacementEngine:
    """Load the saved layout, falling back to the default panels."""
    engine = create_engine(config)
    snapshot = None
    try:
        snapshot = panel_repo.get_all_panels()
    except LayoutStoreError as e:
        logger.warning("Could not load panels from database, using defaults: %s", e)

    if not snapshot:
        logger.info("No saved panels found, loading defaults")
        snapshot = get_default_panels()

    engine.load_snapshot(snapshot)
    return engine


def create_layout(config: Config, engine: GridPlacementEngine) -> dmc.MantineProvider:
    """Create the main application layout."""
    panel_titles = {key: panel.title for key, panel in engine.panels.items()}

    return dmc.MantineProvider(
        id="mantine-provider",
        forceColorScheme=config.theme,
        theme={
            "fontFamily": "Inter, -apple-system, BlinkMacSystemFont, sans-serif",
            "primaryColor": "green",
            "components": {
                "Button": {"defaultProps": {"radius": "md"}},
                "Paper": {"defaultProps": {"radius": "md"}},
            },
        },
        children=[
            # Notification system
            dmc.NotificationProvider(position="top-right"),
            html.Div(id="notifications-container"),

            # Global state stores
            dcc.Store(
                id="layout-store",
                storage_type="memory",
                data=engine.serialize_layout(),
            ),
            dcc.Interval(id="clock-interval", interval=1000),

            # Modals
            create_edit_widget_modal(),

            # Main layout
            dmc.AppShell(
                id="app-shell",
                children=[
                    dmc.AppShellHeader(create_header()),
                    dmc.AppShellMain(
                        children=[
                            create_toolbar(panel_titles),
                            html.Div(
                                id="dashboard-wrapper",
                                children=create_dashboard_grid(engine),
                            ),
                        ],
                    ),
                ],
                header={"height": 60},
                padding="md",
            ),
        ],
    )


def create_header():
    """Create the header content."""
    return dmc.Group(
        [
            dmc.Group(
                [
                    DashIconify(icon="tabler:layout-dashboard", width=28, color="var(--mantine-color-green-6)"),
                    dmc.Title("Panelboard", order=3),
                ],
                gap="xs",
            ),
            dmc.Group(
                [
                    dmc.Text(id="current-time", size="sm", c="dimmed", children=format_clock(datetime.now())),
                    dmc.Switch(id="customize-switch", label="Customize", checked=False, size="sm"),
                ],
                gap="lg",
            ),
        ],
        justify="space-between",
        h="100%",
        px="md",
    )


def format_clock(now: datetime) -> str:
    """Clock text shown in the header, e.g. 'Mon, Oct 19 14:05'."""
    return now.strftime("%a, %b %d %H:%M")


def create_notification(title: str, message: str, color: str = "blue", icon: str = "tabler:check") -> dmc.Notification:
    """Create a notification component."""
    return dmc.Notification(
        title=title,
        message=message,
        color=color,
        icon=DashIconify(icon=icon),
        action="show",
        autoClose=4000,
    )


def new_widget_id() -> int:
    """Client-style widget id: milliseconds since the epoch."""
    return int(time.time() * 1000)


# =============================================================================
# CALLBACKS
# =============================================================================

def register_callbacks(app: Dash):
    """Register all Dash callbacks."""

    def engine_from_store(layout_data: Dict[str, Any]) -> GridPlacementEngine:
        config: Config = app.server.config["app_config"]
        return create_engine(config, layout_data)

    def triggered_value() -> Any:
        # Pattern-matching inputs also fire when new components are rendered
        if not ctx.triggered or not ctx.triggered[0]["value"]:
            raise PreventUpdate
        return ctx.triggered[0]["value"]

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------
    @app.callback(
        Output("current-time", "children"),
        Input("clock-interval", "n_intervals"),
    )
    def update_clock(_):
        return format_clock(datetime.now())

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------
    @app.callback(
        Output("dashboard-wrapper", "children"),
        Output("layout-hint", "children"),
        Input("layout-store", "data"),
        Input("customize-switch", "checked"),
        Input("view-mode", "value"),
    )
    def render_dashboard(layout_data, customize, view_mode):
        """Render the grid or the panel columns from the layout store."""
        engine = engine_from_store(layout_data)

        hint = None
        unplaced = count_unplaced(engine)
        if unplaced:
            hint = dmc.Badge(f"{unplaced} widgets do not fit the grid; see Panels view", color="orange")

        if view_mode == "panels":
            return create_panel_columns(engine.panels, customize=bool(customize)), hint
        return create_dashboard_grid(engine, customize=bool(customize)), hint

    # -------------------------------------------------------------------------
    # Move / resize
    # -------------------------------------------------------------------------
    @app.callback(
        Output("layout-store", "data", allow_duplicate=True),
        Input("dashboard-grid", "layouts"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def apply_grid_changes(layouts, layout_data):
        """
        Commit a drop or resize reported by the grid.

        Rejected changes leave the engine's positions untouched; storing them
        re-renders the grid, which snaps the widget back.
        """
        engine = engine_from_store(layout_data)
        if not apply_grid_layout(engine, layouts):
            raise PreventUpdate
        return engine.serialize_layout()

    # -------------------------------------------------------------------------
    # Add / remove widgets
    # -------------------------------------------------------------------------
    @app.callback(
        Output("layout-store", "data", allow_duplicate=True),
        Output("notifications-container", "children", allow_duplicate=True),
        Input({"type": "add-widget-btn", "panel": ALL}, "n_clicks"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def add_widget(n_clicks, layout_data):
        """Append a new widget to a panel at the next free grid position."""
        triggered_value()
        triggered = ctx.triggered_id
        if not triggered:
            raise PreventUpdate

        engine = engine_from_store(layout_data)
        widget = Widget(id=new_widget_id(), title="New Widget", content="", color=DEFAULT_WIDGET_COLOR)
        try:
            engine.add_widget(triggered["panel"], widget)
        except NoSpaceAvailable as e:
            notification = create_notification(
                "No space available",
                f"{e}. Remove or shrink a widget first.",
                color="red",
                icon="tabler:alert-circle",
            )
            return no_update, notification
        except KeyError:
            raise PreventUpdate

        return engine.serialize_layout(), no_update

    @app.callback(
        Output("layout-store", "data", allow_duplicate=True),
        Input({"type": "widget-remove-btn", "index": ALL}, "n_clicks"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def remove_widget(n_clicks, layout_data):
        """Remove a widget and free its cells."""
        triggered_value()
        triggered = ctx.triggered_id
        if not triggered:
            raise PreventUpdate

        engine = engine_from_store(layout_data)
        try:
            engine.remove_widget(triggered["index"])
        except KeyError:
            raise PreventUpdate
        return engine.serialize_layout()

    # -------------------------------------------------------------------------
    # Edit widget
    # -------------------------------------------------------------------------
    @app.callback(
        Output("edit-widget-modal", "opened"),
        Output("edit-widget-store", "data"),
        Output("edit-widget-title", "value"),
        Output("edit-widget-content", "value"),
        Output("edit-widget-color", "value"),
        Output("edit-widget-size", "value"),
        Input({"type": "widget-edit-btn", "index": ALL}, "n_clicks"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def open_edit_modal(n_clicks, layout_data):
        """Open the edit modal pre-filled with the widget's fields."""
        triggered_value()
        triggered = ctx.triggered_id
        if not triggered:
            raise PreventUpdate

        engine = engine_from_store(layout_data)
        try:
            widget = engine.get_widget(triggered["index"])
        except KeyError:
            raise PreventUpdate

        return True, {"widget_id": widget.id}, widget.title, widget.content, widget.color, widget.size.value

    @app.callback(
        Output("edit-widget-modal", "opened", allow_duplicate=True),
        Input("edit-widget-cancel-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def close_edit_modal(n_clicks):
        return False

    @app.callback(
        Output("layout-store", "data", allow_duplicate=True),
        Output("edit-widget-modal", "opened", allow_duplicate=True),
        Output("notifications-container", "children", allow_duplicate=True),
        Input("edit-widget-confirm-btn", "n_clicks"),
        State("edit-widget-store", "data"),
        State("edit-widget-title", "value"),
        State("edit-widget-content", "value"),
        State("edit-widget-color", "value"),
        State("edit-widget-size", "value"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def apply_widget_edit(n_clicks, edit_data, title, content, color, size, layout_data):
        """Write the modal's fields back into the layout."""
        if not n_clicks or not edit_data or edit_data.get("widget_id") is None:
            raise PreventUpdate

        if not title or not title.strip():
            return no_update, no_update, create_notification(
                "Invalid widget", "Title is required", color="red", icon="tabler:alert-circle",
            )
        if not color or not COLOR_RE.match(color):
            return no_update, no_update, create_notification(
                "Invalid widget", f"Color must look like #RRGGBB, got {color!r}",
                color="red", icon="tabler:alert-circle",
            )

        engine = engine_from_store(layout_data)
        try:
            widget = engine.get_widget(edit_data["widget_id"])
        except KeyError:
            return no_update, False, no_update

        widget.title = title.strip()
        widget.content = content or ""
        widget.color = color
        widget.size = WidgetSize(size or WidgetSize.STANDARD.value)

        return engine.serialize_layout(), False, no_update

    # -------------------------------------------------------------------------
    # Save / reload
    # -------------------------------------------------------------------------
    @app.callback(
        Output("notifications-container", "children", allow_duplicate=True),
        Input("save-layout-btn", "n_clicks"),
        State("layout-store", "data"),
        prevent_initial_call=True,
    )
    def save_layout(n_clicks, layout_data):
        """
        Persist the whole layout through the store.

        On failure the in-memory layout is kept as is; the user just gets a
        notification and can retry.
        """
        if not n_clicks:
            raise PreventUpdate

        panel_repo: PanelRepository = app.server.config["panel_repo"]
        try:
            panel_repo.save_panels(deserialize_layout(layout_data))
        except (LayoutStoreError, LayoutValidationError) as e:
            logger.error("Failed to save layout: %s", e)
            return create_notification(
                "Save failed",
                f"Failed to save settings. {e}",
                color="red",
                icon="tabler:alert-circle",
            )

        return create_notification(
            "Layout saved",
            "Settings saved successfully!",
            color="green",
        )

    @app.callback(
        Output("layout-store", "data", allow_duplicate=True),
        Output("notifications-container", "children", allow_duplicate=True),
        Input("reload-layout-btn", "n_clicks"),
        Input("reset-layout-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def reload_layout(reload_clicks, reset_clicks):
        """Replace the in-memory layout with the saved one or the defaults."""
        triggered_value()
        config: Config = app.server.config["app_config"]

        if ctx.triggered_id == "reset-layout-btn":
            engine = create_engine(config)
            engine.load_snapshot(get_default_panels())
            message = "Default layout restored. Save to keep it."
        else:
            engine = load_engine_from_db(config, app.server.config["panel_repo"])
            message = "Saved layout reloaded."

        notification = create_notification("Layout loaded", message, icon="tabler:refresh")
        return engine.serialize_layout(), notification
