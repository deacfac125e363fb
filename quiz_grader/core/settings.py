from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .question_bank import QuestionBank, default_question_bank, load_question_bank

DEFAULT_QUIZ_LIMIT = 12


def _env_str(name: str) -> str:
    return os.environ.get(name, "").strip()


def env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = _env_str(name).lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    return default


@dataclass(frozen=True)
class Settings:
    bank_path: Optional[Path] = None
    quiz_limit: int = DEFAULT_QUIZ_LIMIT
    expose_answers: bool = True
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def load_bank(self) -> QuestionBank:
        if self.bank_path is None:
            return default_question_bank()
        return load_question_bank(self.bank_path)


def get_settings() -> Settings:
    bank_path = _env_str("QUIZ_GRADER_BANK_PATH")
    log_file = _env_str("QUIZ_GRADER_LOG_FILE")
    origins = tuple(
        origin.strip()
        for origin in _env_str("QUIZ_GRADER_CORS_ORIGINS").split(",")
        if origin.strip()
    )
    return Settings(
        bank_path=Path(bank_path) if bank_path else None,
        quiz_limit=env_int("QUIZ_GRADER_QUIZ_LIMIT", DEFAULT_QUIZ_LIMIT),
        expose_answers=env_bool("QUIZ_GRADER_EXPOSE_ANSWERS", True),
        cors_origins=origins or ("*",),
        log_level=_env_str("QUIZ_GRADER_LOG_LEVEL").upper() or "INFO",
        log_file=Path(log_file) if log_file else None,
    )
