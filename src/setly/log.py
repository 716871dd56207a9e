"""
Shared logging configuration for all setly modules.

Provides Rich-based logging with program name prefixes.
"""
import logging

from rich.logging import RichHandler

from setly.config import AppConfig


def init_logging(program_name: str, color: str = "dim cyan", level: str = None):
    """
    Configure Rich logging with process/thread info and program name.

    Args:
        program_name: Name of the program (e.g., "cli", "store")
        color: Rich color for PID/TID display (e.g., "dim cyan", "dim magenta")
        level: Level name; defaults to AppConfig.LOG_LEVEL

    Returns:
        logging.Logger named "setly.<program_name>"
    """
    # Pad program name to 8 characters for alignment
    padded_name = f"{program_name:<8}"
    level_name = (level or AppConfig.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=f"[bold]{padded_name}[/bold] [{color}][PID: %(process)d TID: %(thread)d][/{color}] %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(markup=True, rich_tracebacks=True)],
        force=True,
    )

    logger = logging.getLogger(f"setly.{program_name}")
    logger.debug(f"Logging initialized for {program_name}")

    return logger
