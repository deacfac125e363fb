from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

from .question_bank import QuestionBank
from .types import Answer, GradingResult, Question, QuestionKind, QuestionResult

logger = logging.getLogger(__name__)


def _is_index(value: Any) -> bool:
    # JSON numbers: 2.0 is the same number as 2, but true is not 1
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _check_single_choice(question: Question, value: Any) -> bool:
    return _is_index(value) and value == question.correct_index


def _check_multi_choice(question: Question, value: Any) -> bool:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return False
    if len(value) != len(question.correct_indexes):
        return False
    if not all(_is_index(v) for v in value):
        return False
    return set(value) == question.correct_indexes


def _normalize_text(text: str) -> str:
    return text.strip().lower()


def _check_text(question: Question, value: Any) -> bool:
    if not isinstance(value, str) or not question.correct_text:
        return False
    return _normalize_text(value) == _normalize_text(question.correct_text)


_CHECKERS: dict[QuestionKind, Callable[[Question, Any], bool]] = {
    QuestionKind.SINGLE_CHOICE: _check_single_choice,
    QuestionKind.MULTI_CHOICE: _check_multi_choice,
    QuestionKind.TEXT: _check_text,
}


def is_correct(question: Question, value: Any) -> bool:
    """Return the verdict for one submitted value against ``question``."""
    return _CHECKERS[question.kind](question, value)


def grade(answers: Iterable[Answer], bank: QuestionBank) -> GradingResult:
    """Grade ``answers`` in submission order against ``bank``.

    Unknown ids and values whose shape doesn't fit the question kind are
    graded as incorrect; nothing here raises for Answer-shaped input.
    ``total`` is always the bank size, whatever was submitted.
    """
    results: list[QuestionResult] = []
    score = 0
    for answer in answers:
        question = bank.by_id(answer.id)
        correct = question is not None and is_correct(question, answer.value)
        if correct:
            score += 1
        results.append(QuestionResult(id=answer.id, correct=correct))

    logger.debug("graded %d answers: %d/%d", len(results), score, len(bank))
    return GradingResult(score=score, total=len(bank), per_question=results)


def grade_payload(raw_answers: Iterable[dict[str, Any]], bank: QuestionBank) -> GradingResult:
    """Grade wire answers (``{"id": ..., "value": ...}`` dicts)."""
    return grade([Answer.from_record(a) for a in raw_answers], bank)
