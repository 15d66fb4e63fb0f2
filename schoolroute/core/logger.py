from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


LOG_LEVEL_ENV = "SCHOOLROUTE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3

_LOGGER: logging.Logger | None = None


def _default_log_dir() -> Path:
    env = os.getenv("SCHOOLROUTE_ROOT")
    base = Path(env) if env else Path.home() / "SchoolRoute"
    return base.expanduser() / "logs"


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, else *default*."""

    if not name:
        return default
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else default


def get_logger(log_dir: Path | None = None, *, level: str | None = None) -> logging.Logger:
    """Return the application logger writing to <root>/logs/app.log and stdout.

    The handlers are attached on the first call only; *log_dir* is ignored
    afterwards. The level comes from *level*, or on first use from
    ``$SCHOOLROUTE_LOG_LEVEL``; passing *level* later re-applies it.
    """
    global _LOGGER
    if _LOGGER is not None:
        if level is not None:
            _LOGGER.setLevel(level_from_name(level, _LOGGER.level))
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _default_log_dir()
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("schoolroute")
    logger.setLevel(level_from_name(level or os.getenv(LOG_LEVEL_ENV)))
    logger.propagate = False

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    file_handler = RotatingFileHandler(
        base / "app.log", maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger
