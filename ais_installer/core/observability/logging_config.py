"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Every record goes to stdout and to the installer log file with a
timestamp and level, so a failed run leaves the same trail on the
terminal and on disk.

Levels are resolved in precedence order:
    --debug  >  --verbose / command default  >  AIS_INSTALL_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import sys

# ── Format strings ──────────────────────────────────────────────

# Console and file share one format: timestamped and leveled
_FMT = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# DEBUG level — add file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> str | None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to the installer log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.

    Returns:
        The log file actually in use, or None when it could not be opened.
    """
    numeric_level = _parse_level(level)
    fmt = _FMT_DEBUG if numeric_level <= logging.DEBUG else _FMT
    formatter = logging.Formatter(fmt, datefmt=_DATEFMT)

    # ── Console handler (stdout) ────────────────────────────────
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(numeric_level)
    console.setFormatter(formatter)

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(console)

    effective_level = numeric_level
    active_log_file: str | None = None

    # ── File handler ────────────────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.setLevel(effective_level)
            logging.getLogger(__name__).warning(
                "Cannot open log file %s (%s) — logging to stdout only", log_file, e
            )
        else:
            fh.setLevel(file_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)
            effective_level = min(effective_level, file_level)
            active_log_file = log_file

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False
    return active_log_file

def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
