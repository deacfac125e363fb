from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..api.app import create_app
from ..core.grader import grade_payload
from ..core.logging_utils import configure_logging
from ..core.question_bank import QuestionBank, load_question_bank
from ..core.settings import get_settings
from ..core.types import InvalidQuestionError

app = typer.Typer()


def _load_bank(bank: Optional[Path]) -> QuestionBank:
    """Load the --bank file, or the configured bank; exit 1 when it is unusable."""
    try:
        if bank is not None:
            return load_question_bank(bank)
        return get_settings().load_bank()
    except (OSError, yaml.YAMLError, InvalidQuestionError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


def _read_answers(path: Path) -> list[dict[str, Any]]:
    """Read an answers file: a list of answers or ``{"answers": [...]}``."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("answers")
    if not isinstance(data, list):
        raise ValueError('Expected a list of answers or { "answers": [...] }')
    for answer in data:
        if not isinstance(answer, dict) or "id" not in answer or "value" not in answer:
            raise ValueError('Each answer must have "id" and "value" fields')
    return data


@app.command("questions")
def list_questions(bank: Optional[Path] = None) -> None:
    """List the questions in the bank."""
    question_bank = _load_bank(bank)
    for question in question_bank:
        typer.echo(f"[{question.id}] ({question.kind.value}) {question.prompt}")
        for idx, choice in enumerate(question.choices):
            typer.echo(f"    {idx}. {choice}")
    typer.echo(f"{len(question_bank)} question(s)")


@app.command("grade")
def grade_file(answers_file: Path, bank: Optional[Path] = None) -> None:
    """Grade an answers file (JSON or YAML) and print the result."""
    question_bank = _load_bank(bank)
    try:
        answers = _read_answers(answers_file)
    except (OSError, yaml.YAMLError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    result = grade_payload(answers, question_bank)
    typer.echo(json.dumps(result.to_dict(), indent=2))
    status = "passed" if result.passed else "not passed"
    typer.echo(f"Score: {result.score}/{result.total} ({result.percentage}%) - {status}")


@app.command("check-bank")
def check_bank(path: Path) -> None:
    """Validate a question bank file."""
    try:
        question_bank = load_question_bank(path)
    except (OSError, yaml.YAMLError, InvalidQuestionError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ {path} holds {len(question_bank)} valid question(s)")


@app.command("serve")
def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the quiz API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    uvicorn.run(create_app(settings, bank=_load_bank(settings.bank_path)), host=host, port=port)


if __name__ == "__main__":
    app()
