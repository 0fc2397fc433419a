# pricewatch/config/logging_config.py

"""Logging for pricewatch CLI runs.

Every invocation gets its own UTC-stamped file under ``Settings.LOGS_DIR``
(``run_20261019_093012.log``, or ``run_20261019_093012_watch.log`` when
the sub-command is known).  Timestamps inside the file are UTC as well,
matching what the store records.  Only the newest
``Settings.LOG_RETENTION`` run logs are kept.

The stderr threshold comes from ``PRICEWATCH_LOG_LEVEL`` (default
WARNING); ``verbose`` lowers it to INFO for one run.
"""

import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

from pricewatch.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)sZ %(levelname)-8s [%(name)s %(funcName)s:%(lineno)d] %(message)s"
)
_STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_LOGGER_NAME = "pricewatch"

logger = logging.getLogger("pricewatch.config")


def _console_level(verbose: bool) -> int:
    if verbose:
        return logging.INFO
    level = logging.getLevelName(Settings.LOG_LEVEL)
    return level if isinstance(level, int) else logging.WARNING


def _prune_old_logs(current: Path, keep: int) -> list[Path]:
    """Delete all but the *keep* newest run logs; return what was removed.

    *current* always counts as one of the kept logs.
    """
    older = sorted(
        (p for p in current.parent.glob("run_*.log") if p != current),
        reverse=True,
    )
    stale = older[max(keep - 1, 0):]
    removed: list[Path] = []
    for path in stale:
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not prune old log %s: %s", path, exc)
            continue
        removed.append(path)
    return removed


def setup_logging(verbose: bool = False, command: str | None = None) -> Path:
    """Attach the per-run file and stderr handlers to ``pricewatch``.

    Calling again in the same process keeps the existing handlers, only
    re-applies the stderr level, and returns the file already in use.
    """
    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    existing = [
        h for h in root_logger.handlers if isinstance(h, logging.FileHandler)
    ]
    if existing:
        for handler in root_logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(_console_level(verbose))
        return Path(existing[0].baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    suffix = f"_{command}" if command else ""
    log_file = logs_dir / f"run_{stamp}{suffix}.log"

    file_formatter = logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    file_formatter.converter = time.gmtime
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level(verbose))
    console_handler.setFormatter(logging.Formatter(_STDERR_FORMAT))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    removed = _prune_old_logs(log_file, Settings.LOG_RETENTION)
    root_logger.debug(
        "Run log %s opened (%d old logs pruned)", log_file, len(removed),
    )
    return log_file
