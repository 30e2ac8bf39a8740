"""Process-wide logging setup for command-line entry points."""

import logging
from pathlib import Path
from typing import Optional

from pacebench.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging from settings.

    Logs go to stderr, and also to ``settings.LOG_FILE`` when it is set.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    else:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        format=settings.LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Request-level chatter from the HTTP client is rarely useful in a load test
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
