"""Logging setup shared by the API process and the CLI."""

import logging

from swing_events.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore", "telegram", "urllib3")


def setup_logging(level: str | None = None):
    """Configure the root logger once per process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
