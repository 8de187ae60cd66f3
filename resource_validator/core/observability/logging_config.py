"""
Logging configuration for the resource-validator CLI.

main.py calls ``setup_logging`` exactly once. Library code only ever
does ``logger = logging.getLogger(__name__)`` and leaves handler setup
to whoever embeds it.

Console level, highest priority first:
    --debug / --verbose / --quiet  >  $RV_LOG_LEVEL  >  WARNING

$RV_LOG_FILE adds a file sink; $RV_LOG_FILE_LEVEL sets its own level.
The violation sink logs under ``resource_validator.violations`` and
goes through the same handlers.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "RV_LOG_LEVEL"
LOG_FILE_ENV = "RV_LOG_FILE"
LOG_FILE_LEVEL_ENV = "RV_LOG_FILE_LEVEL"

DEFAULT_LEVEL = "WARNING"

# (max level, format): first tier whose max level >= the console level wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s"),
    (logging.INFO, "%(asctime)s %(levelname)-7s %(message)s"),
    (logging.CRITICAL, "%(levelname)s: %(message)s"),
)
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s"

_CONSOLE_DATEFMT = "%H:%M:%S"
_FILE_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name from CLI flags, else $RV_LOG_LEVEL, else WARNING."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL)


def _console_format(level: int) -> str:
    for max_level, fmt in _CONSOLE_FORMATS:
        if level <= max_level:
            return fmt
    return _CONSOLE_FORMATS[-1][1]


def setup_logging(
    level: str = DEFAULT_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """(Re)configure the root logger: a stderr handler plus an optional file.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Append log records to this path as well.
        log_file_level: Level for ``log_file``; the console level if omitted.
    """
    console_level = _parse_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(console_level)
    handler.setFormatter(logging.Formatter(_console_format(console_level), _CONSOLE_DATEFMT))
    handlers: list[logging.Handler] = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(_parse_level(log_file_level) if log_file_level else console_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _FILE_DATEFMT))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers.clear()
    for h in handlers:
        root.addHandler(h)
    # The root must let through whatever the most verbose handler wants.
    root.setLevel(min(h.level for h in handlers))

    # A closed stderr (pipes, test runners) must not crash the run.
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → logging constant; WARNING for empty or unknown names."""
    resolved = logging.getLevelName(level.upper()) if level else None
    return resolved if isinstance(resolved, int) else logging.WARNING
