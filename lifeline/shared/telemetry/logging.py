"""Process-wide logging setup and logger lookup."""

import logging
import sys

from lifeline.core.config import get_settings

# Transport loggers that would otherwise echo signed requests and auth traffic.
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "google.auth", "google.resumable_media")


def setup_logging() -> None:
    """Configure the root logger once, at application startup.

    DEBUG when settings.debug is set, INFO otherwise, written to stdout.
    SDK transport loggers are held at WARNING.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; call as get_logger(__name__)."""
    return logging.getLogger(name)
