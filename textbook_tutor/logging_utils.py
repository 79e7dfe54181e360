"""Logging setup: standard-library loggers rendered with rich."""

import logging

from rich.logging import RichHandler

from textbook_tutor.config import LOG_LEVEL

_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Attach a RichHandler to the root logger.

    Safe to call more than once; only the first call installs the handler.

    Args:
        level: Log level name (defaults to LOG_LEVEL from config)
    """
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Chatty third-party loggers
    for name in ("httpx", "chromadb", "sentence_transformers"):
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
