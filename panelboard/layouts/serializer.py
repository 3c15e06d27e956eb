"""
Layout serializer for the JSON wire format.

Converts between layout snapshots and the documents exchanged with clients:

    {"panels": {<panel_key>: {"title": str, "widgets": [
        {"id": int, "title": str, "content": str, "color": "#RRGGBB",
         "large": bool, "small": bool, "position": "r1 / c1 / r2 / c2"}
    ]}}}

"position" is only present for widgets placed on the grid.
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from panelboard.exceptions import LayoutValidationError
from panelboard.layouts.models import (
    DEFAULT_WIDGET_COLOR,
    GridPosition,
    LayoutSnapshot,
    PanelData,
    Widget,
    WidgetSize,
)


LAYOUT_VERSION = "1.0"

PANEL_KEY_RE = re.compile(r"^[A-Za-z0-9_-]{1,50}$")
COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

# Ids travel as JSON numbers, so they must stay exact in a double.
MAX_WIDGET_ID = 2 ** 53 - 1


def widget_to_wire(widget: Widget) -> Dict[str, Any]:
    """Convert a Widget to its wire dict."""
    data = {
        "id": widget.id,
        "title": widget.title,
        "content": widget.content,
        "color": widget.color,
        "large": widget.size.is_large,
        "small": widget.size.is_small,
    }
    if widget.position is not None:
        data["position"] = str(widget.position)
    return data


def widget_from_wire(data: Any) -> Widget:
    """
    Build a Widget from its wire dict.

    Missing content and color fall back to defaults; everything else is
    checked strictly.

    Raises:
        LayoutValidationError: If a required field is missing or malformed
    """
    if not isinstance(data, dict):
        raise LayoutValidationError("Widget must be an object")

    widget_id = data.get("id")
    if isinstance(widget_id, bool) or not isinstance(widget_id, int):
        raise LayoutValidationError(f"Widget id must be an integer, got {widget_id!r}")
    if not 0 <= widget_id <= MAX_WIDGET_ID:
        raise LayoutValidationError(f"Widget id out of range: {widget_id}")

    title = data.get("title")
    if not isinstance(title, str):
        raise LayoutValidationError(f"Widget {widget_id}: title is required")

    content = data.get("content")
    if content is None:
        content = ""
    elif not isinstance(content, str):
        raise LayoutValidationError(f"Widget {widget_id}: content must be a string")

    color = data.get("color") or DEFAULT_WIDGET_COLOR
    if not isinstance(color, str) or not COLOR_RE.match(color):
        raise LayoutValidationError(f"Widget {widget_id}: invalid color {color!r}")

    position = None
    raw_position = data.get("position")
    if raw_position is not None:
        try:
            position = GridPosition.parse(raw_position)
        except ValueError as e:
            raise LayoutValidationError(f"Widget {widget_id}: {e}") from e

    return Widget(
        id=widget_id,
        title=title,
        content=content,
        color=color,
        size=WidgetSize.from_flags(bool(data.get("large")), bool(data.get("small"))),
        position=position,
    )


def panel_to_wire(panel: PanelData) -> Dict[str, Any]:
    """Convert a PanelData to its wire dict."""
    return {
        "title": panel.title,
        "widgets": [widget_to_wire(w) for w in panel.widgets],
    }


def panel_from_wire(panel_key: str, data: Any) -> PanelData:
    """Build a PanelData from its wire dict, validating the key too."""
    if not isinstance(panel_key, str) or not PANEL_KEY_RE.match(panel_key):
        raise LayoutValidationError(f"Invalid panel key: {panel_key!r}")
    if not isinstance(data, dict):
        raise LayoutValidationError(f"Panel {panel_key}: must be an object")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise LayoutValidationError(f"Panel {panel_key}: title is required")

    widgets = data.get("widgets", [])
    if not isinstance(widgets, list):
        raise LayoutValidationError(f"Panel {panel_key}: widgets must be a list")

    return PanelData(title=title, widgets=[widget_from_wire(w) for w in widgets])


def serialize_layout(snapshot: LayoutSnapshot) -> Dict[str, Any]:
    """
    Serialize a layout snapshot to the wire document.

    Args:
        snapshot: Dict of panel_key -> PanelData

    Returns:
        JSON-serializable dict with a single "panels" key
    """
    return {
        "panels": {key: panel_to_wire(panel) for key, panel in snapshot.items()},
    }


def deserialize_layout(payload: Any) -> LayoutSnapshot:
    """
    Deserialize and validate a wire document.

    Args:
        payload: Dict with a "panels" mapping

    Returns:
        Layout snapshot preserving panel and widget order

    Raises:
        LayoutValidationError: If the document is malformed or widget ids repeat
    """
    if not isinstance(payload, dict):
        raise LayoutValidationError("Request body must be a JSON object")

    panels = payload.get("panels")
    if not isinstance(panels, dict):
        raise LayoutValidationError("Missing 'panels' object")

    snapshot: LayoutSnapshot = {
        panel_key: panel_from_wire(panel_key, panel_data)
        for panel_key, panel_data in panels.items()
    }
    check_unique_widget_ids(snapshot)
    return snapshot


def check_unique_widget_ids(snapshot: LayoutSnapshot) -> None:
    """Raise LayoutValidationError if any widget id appears twice in the snapshot."""
    seen = set()
    for panel in snapshot.values():
        for widget in panel.widgets:
            if widget.id in seen:
                raise LayoutValidationError(f"Duplicate widget id: {widget.id}")
            seen.add(widget.id)


def save_layout_to_file(
    snapshot: LayoutSnapshot,
    filepath: Path,
) -> None:
    """
    Save a layout snapshot to a JSON file.

    Args:
        snapshot: Layout snapshot to export
        filepath: Path to save the file
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    document = {
        "version": LAYOUT_VERSION,
        "exported_at": datetime.now().isoformat(),
        **serialize_layout(snapshot),
    }

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)


def load_layout_from_file(filepath: Path) -> LayoutSnapshot:
    """
    Load a layout snapshot from a JSON file.

    Args:
        filepath: Path to the layout file

    Returns:
        Deserialized layout snapshot

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
        LayoutValidationError: If the version is incompatible or the layout is invalid
    """
    filepath = Path(filepath)

    with open(filepath, "r", encoding="utf-8") as f:
        document = json.load(f)

    _check_version(document.get("version") if isinstance(document, dict) else None)
    return deserialize_layout(document)


def _check_version(version: Optional[str]) -> None:
    # Plain API exports carry no version; treat them as current
    if version is None:
        return
    major_version = str(version).split(".")[0]
    if major_version != LAYOUT_VERSION.split(".")[0]:
        raise LayoutValidationError(
            f"Incompatible layout version: {version}. "
            f"Expected version {LAYOUT_VERSION.split('.')[0]}.x"
        )
