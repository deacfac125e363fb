"""Immutable question bank with lookup by question id."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from .types import InvalidQuestionError, Question

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = Path(__file__).parent.parent / "data" / "questions.yaml"


class QuestionBank:
    """Ordered, read-only collection of questions.

    The id index is built once here; nothing mutates the bank afterwards,
    so a single instance can be shared by every request.
    """

    def __init__(self, questions: Iterable[Question]):
        self._questions: tuple[Question, ...] = tuple(questions)
        self._by_id: dict[Any, Question] = {}
        for question in self._questions:
            if question.id in self._by_id:
                raise InvalidQuestionError(f"duplicate question id {question.id!r}")
            self._by_id[question.id] = question

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "QuestionBank":
        return cls(Question.from_record(record) for record in records)

    def all(self) -> tuple[Question, ...]:
        return self._questions

    def by_id(self, question_id: Any) -> Optional[Question]:
        # bool hashes like 0/1, so keep True from resolving question 1
        if isinstance(question_id, bool):
            return None
        try:
            return self._by_id.get(question_id)
        except TypeError:
            # unhashable ids (lists, dicts) never match a question
            return None

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return self.by_id(question_id) is not None

    def __repr__(self) -> str:
        return f"QuestionBank({len(self)} questions)"


def load_question_bank(path: Path) -> QuestionBank:
    """Load a bank from a YAML or JSON file.

    The file holds either a list of question records or a mapping with a
    ``questions`` list.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise InvalidQuestionError(f"{path} does not contain a list of questions")
    bank = QuestionBank.from_records(data)
    logger.info("loaded %d questions from %s", len(bank), path)
    return bank


@lru_cache(maxsize=None)
def default_question_bank() -> QuestionBank:
    """The bank bundled with the package."""
    return load_question_bank(DEFAULT_BANK_PATH)
