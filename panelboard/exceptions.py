"""
Exception types shared by the store, the serializer and the grid engine.
"""


class LayoutValidationError(ValueError):
    """Raised when a layout snapshot or widget fails validation."""


class PanelNotFoundError(LookupError):
    """Raised when a panel key does not exist in the store."""

    def __init__(self, panel_key: str):
        super().__init__(f"Panel not found: {panel_key}")
        self.panel_key = panel_key


class LayoutStoreError(RuntimeError):
    """Raised when a read or write against the layout store fails."""


class PlacementError(RuntimeError):
    """Base class for grid placement failures."""


class NoSpaceAvailable(PlacementError):
    """Raised when no free rectangle of the requested size exists."""

    def __init__(self, width: int, height: int):
        super().__init__(f"No space available for a {width}x{height} widget")
        self.width = width
        self.height = height
