"""
NoteMe — Logging Configuration
===============================

What:  One place that configures the root logger for both entry points
       (the API under uvicorn and the `noteme-build` command).
Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
"""

import logging
import sys

from noteme.config import settings


def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, and by the site builder CLI.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # httpx logs every outbound request at INFO; the store client logs its own summary
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
