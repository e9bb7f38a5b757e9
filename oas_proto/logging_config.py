"""Logging setup shared by the CLI and the generation engine."""

import logging

from rich.logging import RichHandler

_LOGGING_CONFIGURED = False


def setup_logging(level: str | int = logging.WARNING) -> None:
    """Configure root logging with a rich handler.

    Args:
        level: Logging level name or number.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        logging.getLogger("oas_proto").setLevel(level)
        return

    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    logging.getLogger("oas_proto").setLevel(level)
    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
