from unittest.mock import MagicMock

import pytest

from services.tool_engine import customer_plan, launch_diagnostic
from services.tool_engine.loader import load_tool_config_data
from services.tool_engine.models import InvalidAnswerError, LaunchDiagnosticResult
from services.tool_engine.runner import QuestionnaireRunner

HIGHEST = [
    ("progress", "ready"),
    ("time_available", "substantial"),
    ("motivation", "financial-freedom"),
    ("obstacles", "marketing"),
    ("experience", "successful"),
    ("deadline", "urgent"),
    ("support", "cofounder"),
]


@pytest.fixture
def runner(tool_engine):
    return QuestionnaireRunner(tool_engine.get_tool(launch_diagnostic.TOOL_SLUG), launch_diagnostic.evaluate)


def _complete(runner):
    result = None
    for question_id, value in HIGHEST:
        runner.set_answer(question_id, value)
        result = runner.advance()
    return result


def test_runner_starts_at_first_question(runner):
    assert runner.step == 1
    assert runner.total_steps == 7
    assert runner.progress == 14
    assert runner.current_question.id == "progress"
    assert not runner.can_advance
    assert not runner.is_complete


def test_advance_refused_without_answer(runner):
    """An unanswered question keeps the runner where it is."""
    assert runner.advance() is None
    assert runner.step == 1


def test_advance_moves_one_step(runner):
    runner.set_answer("progress", "mvp")
    assert runner.can_advance
    assert runner.advance() is None
    assert runner.step == 2
    assert runner.current_question.id == "time_available"


def test_set_answer_unknown_option(runner):
    with pytest.raises(InvalidAnswerError, match="not an option"):
        runner.set_answer("progress", "half-done")


def test_set_answer_unknown_question(runner):
    with pytest.raises(InvalidAnswerError, match="Unknown question"):
        runner.set_answer("favourite_colour", "blue")


def test_last_advance_evaluates(runner):
    result = _complete(runner)

    assert isinstance(result, LaunchDiagnosticResult)
    assert result.percentage == 100
    assert runner.result is result
    assert runner.is_complete
    assert runner.step == 8
    assert runner.progress == 100
    assert runner.current_question is None
    assert not runner.can_advance


def test_retreat_from_completion_clears_result(runner):
    _complete(runner)
    assert runner.retreat() is True
    assert runner.result is None
    assert runner.step == 7
    assert runner.answers.choice("support") == "cofounder"


def test_changing_answer_after_completion_reopens_last_step(runner, tool_engine):
    """A stale result never outlives the answers it was computed from."""
    first_options = [(q.id, q.options[0].value) for q in runner.config.questions]
    for question_id, value in first_options:
        runner.set_answer(question_id, value)
        runner.advance()
    assert runner.result.percentage == 31

    runner.set_answer("progress", "ready")

    assert runner.result is None
    assert not runner.is_complete
    assert runner.step == runner.total_steps
    result = runner.advance()
    assert result == tool_engine.evaluate(launch_diagnostic.TOOL_SLUG, runner.answers.to_raw())
    assert result.percentage == 46


def test_invalid_answer_after_completion_keeps_result(runner):
    result = _complete(runner)
    with pytest.raises(InvalidAnswerError):
        runner.set_answer("progress", "half-done")
    assert runner.result is result
    assert runner.is_complete


def test_optional_question_can_be_skipped():
    config = load_tool_config_data({
        "slug": "tiny-tool",
        "name": "Tiny Tool",
        "description": "One required and one optional question.",
        "questions": [
            {"id": "stage", "prompt": "Stage?", "kind": "choice",
             "options": [{"value": "idea", "label": "Idea", "weight": 1}]},
            {"id": "notes", "prompt": "Anything else?", "kind": "text", "required": False, "min_length": 5},
        ],
        "bands": [{"min_percentage": 0, "label": "Only"}],
    })
    evaluate = MagicMock()
    optional_runner = QuestionnaireRunner(config, evaluate)

    assert not optional_runner.can_advance
    optional_runner.set_answer("stage", "idea")
    optional_runner.advance()

    assert optional_runner.current_question.id == "notes"
    assert optional_runner.can_advance
    assert optional_runner.advance() is evaluate.return_value
    evaluate.assert_called_once_with(config, optional_runner.answers)


def test_retreat_keeps_answers(runner):
    runner.set_answer("progress", "mvp")
    runner.advance()
    assert runner.retreat() is True
    assert runner.step == 1
    assert runner.answers.choice("progress") == "mvp"
    assert runner.can_advance


def test_retreat_at_first_step(runner):
    assert runner.retreat() is False
    assert runner.step == 1


def test_text_question_needs_min_length(tool_engine):
    config = tool_engine.get_tool(customer_plan.TOOL_SLUG)
    text_runner = QuestionnaireRunner(config, customer_plan.evaluate)
    text_runner.step = config.questions.index(config.question("project_description")) + 1

    text_runner.set_answer("project_description", "an app")
    assert not text_runner.can_advance
    text_runner.set_answer("project_description", "A time tracker for freelance designers")
    assert text_runner.can_advance


def test_text_answer_must_not_be_blank(tool_engine):
    config = tool_engine.get_tool(customer_plan.TOOL_SLUG)
    text_runner = QuestionnaireRunner(config, customer_plan.evaluate)
    with pytest.raises(InvalidAnswerError, match="must not be empty"):
        text_runner.set_answer("project_description", "   ")
