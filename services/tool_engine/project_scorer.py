# services/tool_engine/project_scorer.py
# "Will anyone pay for this?" scorer for side project ideas.

import logging
from typing import Dict, List

from . import rules
from .models import AnswerRecord, ProjectScorerResult, ToolConfig

logger = logging.getLogger(__name__)

TOOL_SLUG = "project-scorer"


def _founder_fit(config: ToolConfig, answers: AnswerRecord) -> int:
    """
    Founder fit is derived, not asked: a detailed unique advantage,
    a realistic weekly time budget and manageable technical complexity.
    """
    extras = config.extras
    has_advantage = len(answers.text("unique_advantage").strip()) > extras.get("unique_advantage_min_length", 50)
    has_time = answers.choice("time_commitment") in extras.get("realistic_time", [])
    has_complexity = answers.choice("technical_complexity") in extras.get("managed_complexity", [])

    if has_advantage and has_time and has_complexity:
        return 10
    if has_advantage and (has_time or has_complexity):
        return 7
    if has_advantage or has_time or has_complexity:
        return 4
    return 2


def _dimension_scores(config: ToolConfig, answers: AnswerRecord) -> Dict[str, float]:
    weights = rules.question_weights(config, answers)
    return {
        "market_potential": weights.get("market_size", 0.0),
        "competition_risk": weights.get("competition_level", 0.0),
        "acquisition_difficulty": weights.get("acquisition_strategy", 0.0),
        "founder_fit": float(_founder_fit(config, answers)),
    }


def _weighted_breakdown(config: ToolConfig, dimensions: Dict[str, float]) -> Dict[str, float]:
    dimension_weights = config.extras.get("dimension_weights", {})
    return {
        name: rules.round_half_up(value * dimension_weights.get(name, 0.0), 1)
        for name, value in dimensions.items()
    }


def _acquisition_difficulty(config: ToolConfig, answers: AnswerRecord, outcome: rules.TriggerOutcome) -> float:
    # Higher is worse: a clear acquisition strategy (weight 10) starts at 1.
    acquisition = rules.option_weight(config.question("acquisition_strategy"), answers)
    difficulty = 11 - acquisition
    adjustments = config.extras.get("difficulty_solution_adjustments", {})
    difficulty += adjustments.get(answers.choice("current_solution"), 0)
    difficulty += outcome.metric_adjustments.get("customer_acquisition_difficulty", 0.0)
    return rules.clamp(difficulty, config.score_bounds.min, config.score_bounds.max)


def _weekly_hours_viability(config: ToolConfig, answers: AnswerRecord, outcome: rules.TriggerOutcome) -> float:
    extras = config.extras
    viability = extras.get("viability_time_base", {}).get(answers.choice("time_commitment"), config.score_bounds.min)
    viability += extras.get("viability_complexity_adjustments", {}).get(answers.choice("technical_complexity"), 0)
    viability += outcome.metric_adjustments.get("weekly_hours_viability", 0.0)
    return rules.clamp(viability, config.score_bounds.min, config.score_bounds.max)


def _time_to_first_customer(config: ToolConfig, difficulty: float) -> str:
    table = config.extras.get("time_to_first_customer", [])
    if not table:
        return ""
    for row in table:
        if difficulty <= row["max_difficulty"]:
            return row["label"]
    return table[-1]["label"]


def _marketing_channels(config: ToolConfig, answers: AnswerRecord) -> List[str]:
    extras = config.extras
    limit = extras.get("max_marketing_channels", 3)
    target = answers.text("target_customer").lower()

    channels: List[str] = []
    for entry in extras.get("marketing_channels", []):
        if not any(keyword.lower() in target for keyword in entry["keywords"]):
            continue
        for channel in entry["channels"]:
            if channel not in channels:
                channels.append(channel)
    if not channels:
        channels = list(extras.get("default_marketing_channels", []))
    return channels[:limit]


def _choice_flags(config: ToolConfig, answers: AnswerRecord):
    red_flags, green_flags = [], []
    for question_id, flags in config.extras.get("choice_flags", {}).items():
        entry = flags.get(answers.choice(question_id))
        if not entry:
            continue
        if entry["kind"] == "green":
            green_flags.append(entry["flag"])
        else:
            red_flags.append(entry["flag"])
    return red_flags, green_flags


def _specific_target_flag(config: ToolConfig, answers: AnswerRecord, outcome: rules.TriggerOutcome) -> List[str]:
    specific = config.extras.get("specific_target")
    if not specific:
        return []
    broad_fired = any(
        trigger.id in outcome.fired and trigger.flag_kind == "red"
        for trigger in config.text_triggers
        if trigger.question_id == "target_customer"
    )
    if broad_fired or len(answers.text("target_customer").strip()) < specific.get("min_length", 0):
        return []
    return [specific["flag"]]


def evaluate(config: ToolConfig, answers: AnswerRecord) -> ProjectScorerResult:
    outcome = rules.match_triggers(config.text_triggers, answers)
    percentage = rules.adjusted_percentage(config, answers, outcome)

    dimensions = _dimension_scores(config, answers)
    breakdown = _weighted_breakdown(config, dimensions)
    score = rules.clamp(
        rules.round_half_up(sum(breakdown.values()), 1), config.score_bounds.min, config.score_bounds.max
    )
    # The verdict follows the weighted 0-10 total; bands are declared on that scale times ten.
    band = rules.select_band(config.bands, rules.round_half_up(score * 10))

    red_flags = list(outcome.red_flags)
    green_flags: List[str] = []
    choice_red, choice_green = _choice_flags(config, answers)
    red_flags.extend(choice_red)
    green_flags.extend(choice_green)
    green_flags.extend(outcome.green_flags)
    green_flags.extend(_specific_target_flag(config, answers, outcome))

    recommendations: List[str] = []
    for rule in config.extras.get("dimension_flags", []):
        if dimensions.get(rule["dimension"], 0.0) <= rule["max_score"]:
            red_flags.append(rule["red_flag"])
            recommendations.append(rule["recommendation"])
    recommendations.extend(band.recommendations)

    difficulty = _acquisition_difficulty(config, answers, outcome)
    viability = _weekly_hours_viability(config, answers, outcome)

    logger.debug(f"Project scorer: score={score} percentage={percentage} verdict='{band.label}' triggers={outcome.fired}")

    return ProjectScorerResult(
        tool=config.slug,
        score=score,
        percentage=percentage,
        band=band.label,
        tags=[band.label] + outcome.fired,
        insights=list(band.insights),
        recommendations=recommendations,
        red_flags=red_flags,
        green_flags=green_flags,
        breakdown=breakdown,
        verdict=band.label,
        verdict_reason=band.reason or "",
        customer_acquisition_difficulty=difficulty,
        weekly_hours_viability=viability,
        time_to_first_customer=_time_to_first_customer(config, difficulty),
        marketing_channels=_marketing_channels(config, answers),
    )
