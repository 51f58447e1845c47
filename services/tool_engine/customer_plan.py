# services/tool_engine/customer_plan.py
# "This week's customer plan": picks a weekly plan from time and energy,
# and scores momentum from the weighted answers.

from typing import Any, Dict

from . import rules
from .models import AnswerRecord, CustomerPlanResult, ToolConfig, WeeklyPlan

TOOL_SLUG = "customer-plan"


def plan_key(config: ToolConfig, answers: AnswerRecord) -> str:
    """
    Plans are keyed '<time>-<energy>'. Energy aliases collapse onto the
    plan table (urgent counts as high); unknown keys use the default plan.
    """
    extras = config.extras
    time_key = answers.choice("time_available") or ""
    energy_key = answers.choice("energy_level") or ""
    energy_key = extras.get("energy_aliases", {}).get(energy_key, energy_key)
    key = f"{time_key}-{energy_key}"
    if key in extras.get("plans", {}):
        return key
    return extras["default_plan"]


def select_plan(config: ToolConfig, answers: AnswerRecord) -> WeeklyPlan:
    plan: Dict[str, Any] = config.extras["plans"][plan_key(config, answers)]
    return WeeklyPlan(focus=plan["focus"], tasks=list(plan["tasks"]), reasoning=plan["reasoning"])


def evaluate(config: ToolConfig, answers: AnswerRecord) -> CustomerPlanResult:
    outcome = rules.match_triggers(config.text_triggers, answers)
    breakdown = rules.question_weights(config, answers)
    raw = sum(breakdown.values()) + outcome.score_adjustment
    percentage = rules.to_percentage(raw, rules.max_score(config))
    band = rules.select_band(config.bands, percentage)

    weekly_plan = select_plan(config, answers)
    stage = answers.choice("project_stage") or ""
    stage_tips = list(config.extras.get("stage_tips", {}).get(stage, []))

    return CustomerPlanResult(
        tool=config.slug,
        score=rules.clamp(raw, config.score_bounds.min, config.score_bounds.max),
        percentage=percentage,
        band=band.label,
        tags=[band.label, weekly_plan.focus] + outcome.fired,
        insights=[weekly_plan.reasoning] + list(band.insights),
        recommendations=list(weekly_plan.tasks) + list(band.recommendations),
        red_flags=list(outcome.red_flags),
        green_flags=list(outcome.green_flags),
        breakdown=breakdown,
        weekly_plan=weekly_plan,
        stage_tips=stage_tips,
        next_week_prep=list(config.extras.get("next_week_prep", [])),
        customization={
            "project_stage": stage,
            "time_available": answers.choice("time_available") or "",
            "energy_level": answers.choice("energy_level") or "",
            "challenge": answers.choice("biggest_challenge") or "",
        },
    )
