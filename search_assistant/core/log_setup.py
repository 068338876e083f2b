"""Logging setup. Modules log through logging.getLogger(__name__)."""

import logging

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "primp")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup and quiet chatty client libraries."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
