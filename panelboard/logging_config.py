"""
Logging Configuration
Sets up the package logger for the application.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configures the logger for the 'panelboard' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG or "DEBUG")
        log_file: Optional path to save logs to a file.

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("panelboard")
    logger.setLevel(level)

    # Clear handlers to avoid duplicate logs when the dev server reloads
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = RichHandler(rich_tracebacks=True, show_path=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        ))
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.debug("Logging initialized.")
    return logger
