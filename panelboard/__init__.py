"""
Panelboard - Personal dashboard of panels and widgets.

A local web app that keeps named panels of widgets in SQLite, arranges them
on a non-overlapping placement grid, and exposes the layout over a small
JSON API.
"""

__version__ = "0.1.0"

from panelboard.config import Config

__all__ = ["Config", "__version__"]
