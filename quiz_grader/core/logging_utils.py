from __future__ import annotations

import logging
import shutil
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .settings import env_int

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _rotation_settings() -> tuple[int, int, int]:
    max_bytes = env_int("QUIZ_GRADER_LOG_MAX_BYTES", 5 * 1024 * 1024)
    max_age_hours = env_int("QUIZ_GRADER_LOG_MAX_AGE_HOURS", 24)
    max_files = env_int("QUIZ_GRADER_LOG_MAX_FILES", 5)
    return max_bytes, max_age_hours, max_files


def _needs_rotation(path: Path, now: datetime, max_bytes: int, max_age_hours: int) -> bool:
    try:
        stat = path.stat()
    except FileNotFoundError:
        return False
    if max_bytes > 0 and stat.st_size >= max_bytes:
        return True
    if max_age_hours > 0:
        mtime = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return (now - mtime).total_seconds() >= max_age_hours * 3600
    return False


def _prune_rotated(path: Path, keep: int) -> None:
    rotated = sorted(
        path.parent.glob(f"{path.stem}.*{path.suffix}"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for old in rotated[keep:]:
        old.unlink(missing_ok=True)


def rotate_log_if_needed(path: Path) -> Optional[Path]:
    """Move ``path`` aside when it is too large or too old.

    Returns the rotated file's path, or None when nothing was rotated.
    """
    max_bytes, max_age_hours, max_files = _rotation_settings()
    if max_bytes <= 0 and max_age_hours <= 0:
        return None
    if not path.is_file():
        return None

    now = datetime.now(timezone.utc)
    if not _needs_rotation(path, now, max_bytes, max_age_hours):
        return None

    rotated_path = path.with_name(f"{path.stem}.{now.strftime('%Y%m%d-%H%M%S')}{path.suffix}")
    shutil.move(str(path), str(rotated_path))
    if max_files > 0:
        _prune_rotated(path, max_files)
    return rotated_path


def configure_logging(
    level: Union[int, str] = "INFO", log_file: Optional[Path] = None
) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the ``quiz_grader`` logger."""
    logger = logging.getLogger("quiz_grader")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotate_log_if_needed(log_file)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
