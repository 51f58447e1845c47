# services/tool_engine/runner.py
# Step-by-step questionnaire state for one user session. Local state only.

import logging
from typing import Callable, Optional

from . import rules
from .models import (
    AnswerRecord,
    ChoiceAnswer,
    InvalidAnswerError,
    Question,
    ScoringResult,
    TextAnswer,
    ToolConfig,
)

logger = logging.getLogger(__name__)

Evaluator = Callable[[ToolConfig, AnswerRecord], ScoringResult]


class QuestionnaireRunner:
    """
    Walks a user through a tool's questions one at a time.

    ``step`` is 1-based; step N+1 (N = number of questions) means the
    questionnaire is complete and ``result`` holds the evaluation.
    """

    def __init__(self, config: ToolConfig, evaluate: Evaluator):
        if not config.questions:
            raise ValueError(f"Tool '{config.slug}' has no questions to run")
        self.config = config
        self._evaluate = evaluate
        self.step = 1
        self.answers = AnswerRecord()
        self.result: Optional[ScoringResult] = None

    @property
    def total_steps(self) -> int:
        return len(self.config.questions)

    @property
    def is_complete(self) -> bool:
        return self.step > self.total_steps

    @property
    def current_question(self) -> Optional[Question]:
        if self.is_complete:
            return None
        return self.config.questions[self.step - 1]

    @property
    def progress(self) -> int:
        shown = min(self.step, self.total_steps)
        return int(rules.round_half_up(shown / self.total_steps * 100))

    def set_answer(self, question_id: str, value: str) -> None:
        """
        Records (or overwrites) the answer for one question. Changing an
        answer after completion drops the result and reopens the last step.
        """
        question = self.config.question(question_id)
        if question is None:
            raise InvalidAnswerError(f"Unknown question '{question_id}' for tool '{self.config.slug}'")

        if question.kind == "choice":
            if value not in question.option_values():
                raise InvalidAnswerError(
                    f"'{value}' is not an option of question '{question_id}' (tool '{self.config.slug}')"
                )
            self.answers.answers[question_id] = ChoiceAnswer(value=value)
        else:
            if not isinstance(value, str) or not value.strip():
                raise InvalidAnswerError(f"Text answer for question '{question_id}' must not be empty")
            self.answers.answers[question_id] = TextAnswer(text=value)

        if self.is_complete:
            self.result = None
            self.step = self.total_steps

    def _is_answered(self, question: Question) -> bool:
        answer = self.answers.get(question.id)
        if answer is None:
            return False
        if isinstance(answer, TextAnswer):
            return len(answer.text.strip()) >= max(question.min_length, 1)
        return bool(answer.value)

    @property
    def can_advance(self) -> bool:
        question = self.current_question
        if question is None:
            return False
        return not question.required or self._is_answered(question)

    def advance(self) -> Optional[ScoringResult]:
        """
        Moves to the next question. On the last question this evaluates the
        answers instead and returns the result. A refused advance leaves the
        state untouched and returns None.
        """
        if not self.can_advance:
            return None
        if self.step == self.total_steps:
            self.result = self._evaluate(self.config, self.answers)
            self.step += 1
            logger.debug(f"Questionnaire '{self.config.slug}' completed with band '{self.result.band}'")
            return self.result
        self.step += 1
        return None

    def retreat(self) -> bool:
        """Steps back one question. Answers are kept."""
        if self.step <= 1:
            return False
        if self.is_complete:
            self.result = None
        self.step -= 1
        return True
