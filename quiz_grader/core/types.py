from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

QuestionId = Union[int, str]
AnswerValue = Union[int, str, list[int]]

PASS_PERCENTAGE = 70


class QuizGraderError(Exception):
    """Base class for errors raised by quiz_grader."""


class InvalidQuestionError(QuizGraderError, ValueError):
    """A question record breaks the bank invariants."""


class QuestionKind(str, Enum):
    # values are the wire spelling of the record's ``type`` field
    TEXT = "text"
    SINGLE_CHOICE = "radio"
    MULTI_CHOICE = "checkbox"


@dataclass(frozen=True)
class Question:
    id: QuestionId
    kind: QuestionKind
    prompt: str
    choices: tuple[str, ...] = ()
    correct_index: Union[int, None] = None
    correct_indexes: Union[frozenset[int], None] = None
    correct_text: Union[str, None] = None

    def __post_init__(self) -> None:
        # frozen, so normalised fields go through object.__setattr__
        if isinstance(self.id, bool) or not isinstance(self.id, (int, str)):
            raise InvalidQuestionError(f"question id must be a string or integer, got {self.id!r}")
        try:
            object.__setattr__(self, "kind", QuestionKind(self.kind))
        except ValueError as exc:
            raise InvalidQuestionError(
                f"question {self.id!r} has unknown type {self.kind!r}"
            ) from exc
        if not isinstance(self.prompt, str):
            raise InvalidQuestionError(f"question {self.id!r} prompt must be a string")

        choices = () if self.choices is None else self.choices
        if not isinstance(choices, (list, tuple)) or not all(isinstance(c, str) for c in choices):
            raise InvalidQuestionError(f"question {self.id!r} choices must be a list of strings")
        object.__setattr__(self, "choices", tuple(choices))

        populated = [
            name
            for name in ("correct_index", "correct_indexes", "correct_text")
            if getattr(self, name) is not None
        ]
        expected = {
            QuestionKind.SINGLE_CHOICE: "correct_index",
            QuestionKind.MULTI_CHOICE: "correct_indexes",
            QuestionKind.TEXT: "correct_text",
        }[self.kind]
        if populated != [expected]:
            raise InvalidQuestionError(
                f"question {self.id!r} ({self.kind.value}) must define only {expected}, "
                f"found {populated or 'none'}"
            )

        if self.kind is QuestionKind.TEXT:
            if self.choices:
                raise InvalidQuestionError(f"text question {self.id!r} cannot have choices")
            if not isinstance(self.correct_text, str):
                raise InvalidQuestionError(f"question {self.id!r} correctText must be a string")
            return

        if not self.choices:
            raise InvalidQuestionError(f"question {self.id!r} needs at least one choice")
        if self.kind is QuestionKind.SINGLE_CHOICE:
            indexes: Any = [self.correct_index]
        else:
            if not isinstance(self.correct_indexes, (list, tuple, set, frozenset)):
                raise InvalidQuestionError(
                    f"question {self.id!r} correctIndexes must be a list of integers"
                )
            indexes = list(self.correct_indexes)
        for index in indexes:
            if isinstance(index, bool) or not isinstance(index, int):
                raise InvalidQuestionError(f"question {self.id!r} has non-integer index {index!r}")
            if not 0 <= index < len(self.choices):
                raise InvalidQuestionError(
                    f"question {self.id!r} index {index} is out of range for "
                    f"{len(self.choices)} choices"
                )
        if self.kind is QuestionKind.MULTI_CHOICE:
            if len(set(indexes)) != len(indexes):
                raise InvalidQuestionError(
                    f"question {self.id!r} repeats an index in correctIndexes"
                )
            object.__setattr__(self, "correct_indexes", frozenset(indexes))

    @property
    def correct_answer(self) -> Union[int, frozenset[int], str]:
        if self.kind is QuestionKind.SINGLE_CHOICE:
            return self.correct_index
        if self.kind is QuestionKind.MULTI_CHOICE:
            return self.correct_indexes
        return self.correct_text

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Question":
        """Build a question from its wire record (``type``/``question``/``correct*`` keys)."""
        if not isinstance(record, dict):
            raise InvalidQuestionError(f"question record must be a mapping, got {record!r}")
        missing = [key for key in ("id", "type", "question") if key not in record]
        if missing:
            raise InvalidQuestionError(
                f"question record {record.get('id')!r} is missing {', '.join(missing)}"
            )
        return cls(
            id=record["id"],
            kind=record["type"],
            prompt=record["question"],
            choices=record.get("choices") or (),
            correct_index=record.get("correctIndex"),
            correct_indexes=record.get("correctIndexes"),
            correct_text=record.get("correctText"),
        )

    def to_record(self, include_answer: bool = True) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "question": self.prompt,
        }
        if self.choices:
            record["choices"] = list(self.choices)
        if include_answer:
            if self.kind is QuestionKind.SINGLE_CHOICE:
                record["correctIndex"] = self.correct_index
            elif self.kind is QuestionKind.MULTI_CHOICE:
                record["correctIndexes"] = sorted(self.correct_indexes)
            else:
                record["correctText"] = self.correct_text
        return record


@dataclass(frozen=True)
class Answer:
    id: Any
    value: Any

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Answer":
        return cls(id=record["id"], value=record["value"])


@dataclass(frozen=True)
class QuestionResult:
    id: Any
    correct: bool


@dataclass
class GradingResult:
    score: int
    total: int
    per_question: list[QuestionResult] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        # half-up, so 12.5 reports as 13
        return math.floor(self.score / self.total * 100 + 0.5)

    @property
    def passed(self) -> bool:
        return self.percentage >= PASS_PERCENTAGE

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "total": self.total,
            "results": [{"id": r.id, "correct": r.correct} for r in self.per_question],
        }
