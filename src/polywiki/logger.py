"""Logging configuration for polywiki."""

import datetime
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_FILE = "~/.config/polywiki/logs/polywiki.log"
MAX_LOG_FILE_BYTES = 5 * 1024 * 1024  # 5 MiB per rotated file.
LOG_BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LIBRARIES = ("urllib3", "requests", "markdown_it", "charset_normalizer")
_ROLLED_LOG_PATHS: set[Path] = set()


def _archive_existing_log_file(log_path: Path) -> None:
    """Move a previous run's log aside to a timestamped name, once per process."""
    resolved_path = log_path.resolve()
    if resolved_path in _ROLLED_LOG_PATHS:
        return
    _ROLLED_LOG_PATHS.add(resolved_path)
    if not log_path.exists() or log_path.stat().st_size == 0:
        return
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    archived_path = log_path.parent / f"{timestamp}_{log_path.name}"
    suffix = 1
    while archived_path.exists():
        archived_path = log_path.parent / f"{timestamp}_{suffix}_{log_path.name}"
        suffix += 1
    log_path.rename(archived_path)


def setup_logging(
    level_name: str = "INFO", log_file: Optional[Union[str, Path]] = None
) -> Optional[Path]:
    """Route root logging into a rotating file; returns the file in use."""
    if not log_file:
        return None
    level = getattr(logging, level_name.upper(), logging.INFO)
    log_path = Path(log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _archive_existing_log_file(log_path)

    root = logging.getLogger()
    root.setLevel(level)

    handler = RotatingFileHandler(
        log_path,
        mode="a",
        maxBytes=MAX_LOG_FILE_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Re-initialisation replaces handlers instead of stacking them.
    for existing_handler in list(root.handlers):
        root.removeHandler(existing_handler)
        existing_handler.close()
    root.addHandler(handler)

    for lib in NOISY_LIBRARIES:
        logging.getLogger(lib).setLevel(logging.WARNING)
    return log_path
