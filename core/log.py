"""
core/log.py -- Process-wide logging setup.

Every module logs through a named stdlib logger ("movielist.<layer>"); this
module only decides where records go. Call configure_logging() once, from the
API lifespan or the CLI entry point.

Handlers:
  console       -- always on, same format as the request log lines.
  error.log     -- ERROR and above from every logger (only when LOG_DIR is set).
  combined.log  -- everything at the configured level (only when LOG_DIR is set).
  auth.log      -- the "movielist.audit" logger only (only when LOG_DIR is set).

Layer rule: no imports from api/, auth/, movies/, or sessions/.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

AUDIT_LOGGER = "movielist.audit"


def _add_file_handler(logger: logging.Logger, path: Path, level: int = logging.NOTSET) -> None:
    """Attach a FileHandler for path unless logger already writes there."""
    target = os.path.abspath(path)
    if any(getattr(h, "baseFilename", None) == target for h in logger.handlers):
        return
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def configure_logging(settings: Settings) -> None:
    """Install console and (optionally) file handlers.

    Safe to call more than once: basicConfig is a no-op when the root logger
    already has handlers, and each log file is attached at most once.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    if not settings.log_dir:
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    _add_file_handler(root, log_dir / "error.log", logging.ERROR)
    _add_file_handler(root, log_dir / "combined.log")
    _add_file_handler(logging.getLogger(AUDIT_LOGGER), log_dir / "auth.log")
