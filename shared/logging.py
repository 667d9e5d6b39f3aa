"""
Logging setup for the Hackboard backend.

Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler once at startup.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as "DEBUG" or "INFO". Unknown names fall
            back to INFO.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)

    # httpx logs every request at INFO, which drowns out our own messages
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))
