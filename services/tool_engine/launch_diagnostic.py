# services/tool_engine/launch_diagnostic.py
# "Will I ever launch?" diagnostic: a plain weighted sum mapped onto probability bands.

from . import rules
from .models import AnswerRecord, LaunchDiagnosticResult, ToolConfig

TOOL_SLUG = "launch-diagnostic"


def evaluate(config: ToolConfig, answers: AnswerRecord) -> LaunchDiagnosticResult:
    outcome = rules.match_triggers(config.text_triggers, answers)
    breakdown = rules.question_weights(config, answers)
    raw = sum(breakdown.values()) + outcome.score_adjustment
    percentage = rules.to_percentage(raw, rules.max_score(config))
    band = rules.select_band(config.bands, percentage)

    return LaunchDiagnosticResult(
        tool=config.slug,
        score=rules.clamp(raw, config.score_bounds.min, config.score_bounds.max),
        percentage=percentage,
        band=band.label,
        tags=[band.label] + outcome.fired,
        insights=list(band.insights),
        recommendations=list(band.recommendations),
        red_flags=list(outcome.red_flags),
        green_flags=list(outcome.green_flags),
        breakdown=breakdown,
        probability=band.label,
    )
