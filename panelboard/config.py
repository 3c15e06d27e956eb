"""
Configuration management for Panelboard.

This module defines the Config dataclass that holds all application settings.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "PANELBOARD_"
DEFAULT_CORS_ORIGINS = ("http://localhost:3067", "http://127.0.0.1:3067")


@dataclass
class Config:
    """
    Application configuration.

    Attributes:
        db_path: Path to SQLite database for layout persistence
        host: Host address to bind the server
        port: Port number for the server
        debug: Enable debug mode with hot reloading
        grid_rows: Rows of the interactive widget grid
        grid_cols: Columns of the interactive widget grid
        min_widget_span: Minimum rows/columns a widget keeps when resized
        log_level: Logging level name ('DEBUG', 'INFO', ...)
        log_file: Optional file to mirror log output to
        theme: Default theme ('light' or 'dark')
        cors_origins: Origins allowed to call the JSON API from a browser
    """

    db_path: Path = field(default_factory=lambda: Path.cwd() / "panelboard.db")
    host: str = "127.0.0.1"
    port: int = 8050
    debug: bool = False

    # Grid settings
    grid_rows: int = 8
    grid_cols: int = 6
    min_widget_span: int = 1

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # UI settings
    theme: str = "light"  # 'light' or 'dark'

    # API
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    def __post_init__(self):
        """Validate and normalize settings."""
        self.db_path = Path(self.db_path).resolve()
        if self.log_file is not None:
            self.log_file = Path(self.log_file).resolve()

        # The default widget footprint is 2x2
        if self.grid_rows < 2 or self.grid_cols < 2:
            raise ValueError(
                f"Grid must be at least 2x2, got {self.grid_cols}x{self.grid_rows}"
            )
        if self.min_widget_span < 1:
            raise ValueError(f"min_widget_span must be at least 1: {self.min_widget_span}")

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.theme not in ("light", "dark"):
            raise ValueError(f"Theme must be 'light' or 'dark': {self.theme}")

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """
        Build a config from PANELBOARD_* environment variables.

        A .env file in the working directory is loaded first. Keyword
        arguments that are not None take precedence over the environment.
        """
        load_dotenv()

        values = {}
        env_fields = {
            "db_path": str,
            "host": str,
            "port": int,
            "debug": _parse_bool,
            "grid_rows": int,
            "grid_cols": int,
            "min_widget_span": int,
            "log_level": str,
            "log_file": str,
            "theme": str,
            "cors_origins": _parse_list,
        }
        for name, convert in env_fields.items():
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = convert(raw)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return {
            "db_path": str(self.db_path),
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "grid_rows": self.grid_rows,
            "grid_cols": self.grid_cols,
            "min_widget_span": self.min_widget_span,
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
            "theme": self.theme,
            "cors_origins": list(self.cors_origins),
        }


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
