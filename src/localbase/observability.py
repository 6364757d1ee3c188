"""
Localbase - Logging setup for scripts and dev tooling.

Library modules only create `logging.getLogger(__name__)` loggers; this is
the one place that configures handlers.
"""

import logging
import sys

from localbase.config import settings


def setup_logging(level: str | None = None, verbose: bool = False) -> None:
    """
    Configure root logging with the project format.

    Args:
        level: Log level name; defaults to settings.log_level
        verbose: Shortcut for DEBUG (shows compiled SQL)
    """
    if verbose:
        level = "DEBUG"
    level = level or settings.log_level

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Hosted client is chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
