"""Logging configuration."""

from __future__ import annotations

import logging
import sys

from .config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure process-wide logging for the directory service."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from the HTTP server
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
