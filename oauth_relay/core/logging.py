"""
Logging utilities for the relay.

Provides a consistent logging format and keeps chatty client libraries from
echoing request lines that carry OAuth parameters.
"""

import logging
import sys

_QUIET_LOGGERS = ("httpx", "httpcore", "botocore", "boto3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
