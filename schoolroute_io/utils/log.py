"""Logging helpers for the schoolroute_io package."""

# Module responsibilities:
# - Hand out loggers scoped under the application logger so spreadsheet
#   parsing shares the same rotating file + console handlers.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from schoolroute.core.logger import get_logger as core_get_logger


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the ``io`` namespace.
        log_dir: Optional override for the logging directory on first use.

    Returns:
        Logger scoped under ``schoolroute.io``.
    """

    return core_get_logger(log_dir).getChild(f"io.{name}")
