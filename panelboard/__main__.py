"""
Entry point for running Panelboard as a module.

Usage:
    python -m panelboard serve --port 8050
"""

from panelboard.cli import app

if __name__ == "__main__":
    app()
