import json
import sys
from pathlib import Path

import yaml
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from quiz_grader.cli.main import app

runner = CliRunner()


def _write_bank(tmp_path: Path) -> Path:
    bank = {
        "questions": [
            {"id": "Q1", "type": "radio", "question": "Pick one:", "choices": ["A", "B"], "correctIndex": 1},
            {"id": "Q2", "type": "text", "question": "Say CPU:", "correctText": "CPU"},
        ]
    }
    path = tmp_path / "bank.yaml"
    path.write_text(yaml.safe_dump(bank), encoding="utf-8")
    return path


def test_questions_lists_bank(tmp_path):
    bank_path = _write_bank(tmp_path)
    result = runner.invoke(app, ["questions", "--bank", str(bank_path)])
    assert result.exit_code == 0
    assert "[Q1] (radio) Pick one:" in result.output
    assert "1. B" in result.output
    assert "2 question(s)" in result.output


def test_questions_defaults_to_bundled_bank(monkeypatch):
    monkeypatch.delenv("QUIZ_GRADER_BANK_PATH", raising=False)
    result = runner.invoke(app, ["questions"])
    assert result.exit_code == 0
    assert "12 question(s)" in result.output


def test_grade_answers_file(tmp_path):
    bank_path = _write_bank(tmp_path)
    answers_path = tmp_path / "answers.json"
    answers_path.write_text(
        json.dumps({"answers": [{"id": "Q1", "value": 1}, {"id": "Q2", "value": " cpu"}]}),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["grade", str(answers_path), "--bank", str(bank_path)])
    assert result.exit_code == 0
    assert '"score": 2' in result.output
    assert "Score: 2/2 (100%) - passed" in result.output


def test_grade_uses_bank_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("QUIZ_GRADER_BANK_PATH", str(_write_bank(tmp_path)))
    answers_path = tmp_path / "answers.yaml"
    answers_path.write_text(yaml.safe_dump([{"id": "Q1", "value": 0}]), encoding="utf-8")
    result = runner.invoke(app, ["grade", str(answers_path)])
    assert result.exit_code == 0
    assert "Score: 0/2 (0%) - not passed" in result.output


def test_grade_rejects_malformed_answers(tmp_path):
    answers_path = tmp_path / "answers.json"
    answers_path.write_text(json.dumps({"answers": [{"id": "Q1"}]}), encoding="utf-8")
    result = runner.invoke(app, ["grade", str(answers_path)])
    assert result.exit_code == 1


def test_check_bank(tmp_path):
    result = runner.invoke(app, ["check-bank", str(_write_bank(tmp_path))])
    assert result.exit_code == 0
    assert "2 valid question(s)" in result.output

    bad = tmp_path / "bad.yaml"
    bad.write_text(
        yaml.safe_dump([{"id": 1, "type": "radio", "question": "?", "choices": ["a"], "correctIndex": 3}]),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["check-bank", str(bad)])
    assert result.exit_code == 1


def _write_bad_bank(tmp_path: Path) -> Path:
    bad = tmp_path / "bad.yaml"
    bad.write_text(
        yaml.safe_dump([{"id": 1, "type": "radio", "question": "?", "choices": ["a"], "correctIndex": 3}]),
        encoding="utf-8",
    )
    return bad


def test_grade_reports_invalid_bank(tmp_path):
    answers_path = tmp_path / "answers.json"
    answers_path.write_text(json.dumps([{"id": 1, "value": 0}]), encoding="utf-8")
    result = runner.invoke(app, ["grade", str(answers_path), "--bank", str(_write_bad_bank(tmp_path))])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "out of range" in result.output


def test_questions_reports_missing_bank(tmp_path):
    result = runner.invoke(app, ["questions", "--bank", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_questions_reports_invalid_bank_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("QUIZ_GRADER_BANK_PATH", str(_write_bad_bank(tmp_path)))
    result = runner.invoke(app, ["questions"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
