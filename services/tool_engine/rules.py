# services/tool_engine/rules.py
# Shared arithmetic for the self-assessment tools. Everything here is pure:
# no clock, no randomness, no I/O.

import math
from dataclasses import dataclass, field
from typing import Dict, List

from .models import AnswerRecord, Band, ChoiceAnswer, Question, TextTrigger, ToolConfig


@dataclass(frozen=True)
class TriggerOutcome:
    """Flags and adjustments produced by the free-text checks."""
    red_flags: List[str] = field(default_factory=list)
    green_flags: List[str] = field(default_factory=list)
    score_adjustment: float = 0.0
    metric_adjustments: Dict[str, float] = field(default_factory=dict)
    fired: List[str] = field(default_factory=list)


def round_half_up(value: float, digits: int = 0) -> float:
    """Rounds .5 away from zero for positives, unlike the built-in banker's round."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def option_weight(question: Question, answers: AnswerRecord) -> float:
    """Weight of the selected option; 0 when unanswered, free-text or undeclared."""
    answer = answers.get(question.id)
    if not isinstance(answer, ChoiceAnswer):
        return 0.0
    for option in question.options:
        if option.value == answer.value:
            return option.weight
    return 0.0


def question_weights(config: ToolConfig, answers: AnswerRecord) -> Dict[str, float]:
    return {
        question.id: option_weight(question, answers)
        for question in config.questions
        if question.kind == "choice"
    }


def raw_score(config: ToolConfig, answers: AnswerRecord) -> float:
    return sum(question_weights(config, answers).values())


def max_score(config: ToolConfig) -> float:
    return sum(question.max_weight() for question in config.questions if question.kind == "choice")


def to_percentage(raw: float, maximum: float) -> int:
    if maximum <= 0:
        return 0
    return int(clamp(round_half_up(raw / maximum * 100), 0, 100))


def select_band(bands: List[Band], percentage: float) -> Band:
    """
    Bands are ordered highest threshold first. A percentage equal to a
    threshold belongs to that (higher) band.
    """
    for band in bands:
        if percentage >= band.min_percentage:
            return band
    return bands[-1]


def trigger_fires(trigger: TextTrigger, text: str) -> bool:
    haystack = text.lower()
    return any(phrase.lower() in haystack for phrase in trigger.phrases)


def match_triggers(triggers: List[TextTrigger], answers: AnswerRecord) -> TriggerOutcome:
    red_flags: List[str] = []
    green_flags: List[str] = []
    fired: List[str] = []
    score_adjustment = 0.0
    metric_adjustments: Dict[str, float] = {}

    for trigger in triggers:
        text = answers.text(trigger.question_id)
        if not text or not trigger_fires(trigger, text):
            continue
        fired.append(trigger.id)
        if trigger.flag_kind == "green":
            green_flags.append(trigger.flag)
        else:
            red_flags.append(trigger.flag)
        score_adjustment += trigger.score_adjustment
        for metric, delta in trigger.metric_adjustments.items():
            metric_adjustments[metric] = metric_adjustments.get(metric, 0.0) + delta

    return TriggerOutcome(
        red_flags=red_flags,
        green_flags=green_flags,
        score_adjustment=score_adjustment,
        metric_adjustments=metric_adjustments,
        fired=fired,
    )


def adjusted_percentage(config: ToolConfig, answers: AnswerRecord, outcome: TriggerOutcome) -> int:
    """Weighted percentage after the free-text adjustments are folded into the raw score."""
    return to_percentage(raw_score(config, answers) + outcome.score_adjustment, max_score(config))
