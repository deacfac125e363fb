from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.grader import grade
from ..core.question_bank import QuestionBank
from ..core.settings import Settings, get_settings
from ..core.types import Answer

logger = logging.getLogger(__name__)

INVALID_JSON = "Invalid JSON payload"
INVALID_PAYLOAD = 'Invalid payload. Expected { "answers": [...] }'
INVALID_ANSWER = 'Each answer must have "id" and "value" fields'


class AnswerPayload(BaseModel):
    # Any keeps submitted values exactly as sent; the grader decides on shape
    id: Any
    value: Any


class GradeRequest(BaseModel):
    answers: list[AnswerPayload]


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _validation_message(exc: RequestValidationError) -> str:
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return INVALID_JSON
    for err in exc.errors():
        loc = err.get("loc", ())
        # ("body", "answers", <index>, ...) points inside one answer entry
        if len(loc) >= 3 and loc[1] == "answers" and isinstance(loc[2], int):
            return INVALID_ANSWER
    return INVALID_PAYLOAD


def create_app(settings: Optional[Settings] = None, bank: Optional[QuestionBank] = None) -> FastAPI:
    settings = settings or get_settings()
    bank = bank if bank is not None else settings.load_bank()

    app = FastAPI(title="Quiz Grader")
    app.state.settings = settings
    app.state.bank = bank

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    @app.exception_handler(RequestValidationError)
    async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.warning("rejected %s %s: %s", request.method, request.url.path, message)
        return _error(message, 400)

    @app.get("/health")
    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/quiz")
    def get_quiz() -> Any:
        try:
            questions = bank.all()[: max(settings.quiz_limit, 0)]
            records = [q.to_record(include_answer=settings.expose_answers) for q in questions]
        except Exception:
            logger.exception("failed to fetch quiz data")
            return _error("Failed to fetch quiz data", 500)
        return {"questions": records, "total": len(records)}

    @app.post("/api/grade")
    def grade_answers(req: GradeRequest) -> Any:
        try:
            answers = [Answer(id=a.id, value=a.value) for a in req.answers]
            result = grade(answers, bank)
        except Exception:
            logger.exception("failed to grade quiz")
            return _error("Failed to grade quiz", 500)
        logger.info("graded submission: %d/%d", result.score, result.total)
        return result.to_dict()

    return app

