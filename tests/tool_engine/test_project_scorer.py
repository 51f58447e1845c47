import pytest

from services.tool_engine import project_scorer
from services.tool_engine.models import AnswerRecord, ProjectScorerResult

SPECIFIC_TARGET = "freelance React developers managing 3+ client projects"


@pytest.fixture
def config(tool_engine):
    return tool_engine.get_tool(project_scorer.TOOL_SLUG)


@pytest.fixture
def strong_answers():
    return {
        "project_description": "Invoice tracker that chases late payments for freelance developers",
        "target_customer": SPECIFIC_TARGET,
        "current_solution": "competitor",
        "market_size": "large",
        "competition_level": "none",
        "acquisition_strategy": "clear",
        "unique_advantage": "I freelanced for eight years and wrote invoicing scripts for thirty clients",
        "time_commitment": "plenty",
        "technical_complexity": "low",
    }


@pytest.fixture
def weak_answers():
    return {
        "project_description": "A social network for people who like apps",
        "target_customer": "Everyone with a phone",
        "current_solution": "nothing",
        "market_size": "niche",
        "competition_level": "saturated",
        "acquisition_strategy": "none",
        "unique_advantage": "I like apps",
        "time_commitment": "minimal",
        "technical_complexity": "very-high",
    }


def _evaluate(config, raw) -> ProjectScorerResult:
    return project_scorer.evaluate(config, AnswerRecord.from_raw(config, raw))


def test_strong_project_builds(config, strong_answers):
    """Best answers with a specific target customer give the top verdict."""
    result = _evaluate(config, strong_answers)

    assert result.percentage == 100
    assert result.verdict == "Build this"
    assert result.band == "Build this"
    assert result.tags == ["Build this"]
    assert result.score == pytest.approx(10.0)
    assert result.breakdown == {
        "market_potential": 3.0,
        "competition_risk": 2.5,
        "acquisition_difficulty": 2.5,
        "founder_fit": 2.0,
    }
    assert result.red_flags == []
    assert "Specific target customer makes your first 10 sales much easier to find" in result.green_flags
    assert "Customers already pay for a solution, so the problem is real" in result.green_flags
    assert result.recommendations == ["Line up 10 potential customers before writing more code"]


def test_strong_project_metrics(config, strong_answers):
    result = _evaluate(config, strong_answers)

    assert result.customer_acquisition_difficulty == 1
    assert result.weekly_hours_viability == 10
    assert result.time_to_first_customer == "2-4 weeks"
    assert result.marketing_channels == ["Hacker News", "Dev.to", "GitHub"]


def test_weak_project_runs_away(config, weak_answers):
    """Worst answers plus a broad customer and a crowded idea land in the bottom band."""
    result = _evaluate(config, weak_answers)

    # 12 of 60 points, minus 3 for "everyone" and 2 for "social network"
    assert result.percentage == 12
    assert result.verdict == "Run away"
    assert result.verdict_reason.startswith("Too many risk factors")
    assert result.tags == ["Run away", "broad-target-customer", "crowded-idea"]
    assert result.score == pytest.approx(2.0)
    assert result.customer_acquisition_difficulty == 10
    assert result.weekly_hours_viability == 1
    assert result.time_to_first_customer == "3-6 months"
    assert result.marketing_channels == ["Reddit communities", "Cold email", "Content marketing"]


def test_weak_project_flags_every_dimension(config, weak_answers):
    result = _evaluate(config, weak_answers)

    assert result.red_flags[0].startswith("\"Everyone\" is not a customer")
    assert "Small or unclear market size may limit growth potential" in result.red_flags
    assert "High competition will make customer acquisition expensive and difficult" in result.red_flags
    assert "Unclear customer acquisition strategy is a major risk factor" in result.red_flags
    assert "Limited time or unclear unique advantage may hinder success" in result.red_flags
    assert result.recommendations[:4] == [
        "Research market size more thoroughly before investing significant time",
        "Find a specific niche or unique angle to differentiate from competitors",
        "Validate your customer acquisition channels before building the product",
        "Focus on projects that leverage your specific expertise and skills",
    ]
    assert result.green_flags == []


def test_broad_target_lowers_score(config, strong_answers):
    """Saying 'everyone' costs points and suppresses the specific-target flag."""
    strong_answers["target_customer"] = "Everyone who sends invoices"
    result = _evaluate(config, strong_answers)

    assert result.percentage == 95
    assert "broad-target-customer" in result.tags
    assert "Specific target customer makes your first 10 sales much easier to find" not in result.green_flags
    # 1 from the clear strategy, -1 for an existing competitor, +3 for the broad target
    assert result.customer_acquisition_difficulty == 3


@pytest.mark.parametrize("choices, score, verdict, first_insight", [
    (
        dict(current_solution="nothing", market_size="large", competition_level="none",
             acquisition_strategy="clear", time_commitment="minimal", technical_complexity="very-high"),
        8.4, "Build this", "Strong project with good market potential and manageable risks",
    ),
    (
        dict(current_solution="competitor", market_size="large", competition_level="many",
             acquisition_strategy="unclear", time_commitment="adequate", technical_complexity="very-high"),
        6.1, "Pivot the idea", "Decent project but with some areas that need attention",
    ),
    (
        dict(current_solution="competitor", market_size="small", competition_level="many",
             acquisition_strategy="unclear", time_commitment="minimal", technical_complexity="high"),
        3.9, "Run away", "High-risk project that may struggle to generate revenue",
    ),
])
def test_verdict_follows_weighted_score(config, strong_answers, choices, score, verdict, first_insight):
    """Verdict, insights and recommendations track the 0-10 total (>= 8 build, >= 6 pivot)."""
    strong_answers.update(choices, unique_advantage="I have built two apps")
    result = _evaluate(config, strong_answers)

    assert result.score == pytest.approx(score)
    assert result.verdict == verdict
    assert result.band == verdict
    assert result.insights[0] == first_insight


def test_verdict_independent_of_percentage(config, strong_answers):
    """A middling percentage can still be a strong project and vice versa."""
    strong = dict(strong_answers, unique_advantage="I have built two apps", current_solution="nothing",
                  market_size="large", competition_level="none", acquisition_strategy="clear",
                  time_commitment="minimal", technical_complexity="very-high")
    weak = dict(strong_answers, unique_advantage="I have built two apps", current_solution="competitor",
                market_size="small", competition_level="many", acquisition_strategy="unclear",
                time_commitment="minimal", technical_complexity="high")

    strong_result = _evaluate(config, strong)
    weak_result = _evaluate(config, weak)

    # 36 and 29 of 60 points
    assert strong_result.percentage == 60
    assert strong_result.verdict == "Build this"
    assert weak_result.percentage == 48
    assert weak_result.verdict == "Run away"


def test_score_clamped_to_declared_bounds(config):
    """With nothing answered the weighted total is 0.4, below the tool's lower bound of 1."""
    result = _evaluate(config, {})
    assert result.score == pytest.approx(config.score_bounds.min)


def test_worst_choices_without_triggers(config, weak_answers):
    weak_answers["project_description"] = "A habit tracker for night shift nurses"
    weak_answers["target_customer"] = "night shift nurses in large hospitals"
    result = _evaluate(config, weak_answers)

    assert result.percentage == 20
    assert result.verdict == "Run away"


@pytest.mark.parametrize("advantage, time, complexity, expected", [
    ("x" * 60, "plenty", "low", 2.0),
    ("x" * 60, "adequate", "high", 1.4),
    ("x" * 60, "minimal", "very-high", 0.8),
    ("short", "plenty", "very-high", 0.8),
    ("short", "minimal", "very-high", 0.4),
])
def test_founder_fit_levels(config, strong_answers, advantage, time, complexity, expected):
    """Founder fit is 10, 7, 4 or 2 depending on advantage, time and complexity, weighted by 0.2."""
    strong_answers.update(unique_advantage=advantage, time_commitment=time, technical_complexity=complexity)
    result = _evaluate(config, strong_answers)
    assert result.breakdown["founder_fit"] == pytest.approx(expected)


def test_marketing_channels_capped_at_three(config, strong_answers):
    strong_answers["target_customer"] = "freelance designers and agency founders"
    result = _evaluate(config, strong_answers)
    assert result.marketing_channels == ["Dribbble", "Designer News", "LinkedIn"]


def test_empty_answers_do_not_raise(config):
    result = _evaluate(config, {})

    assert result.percentage == 0
    assert result.verdict == "Run away"
    assert result.customer_acquisition_difficulty == 10
    assert result.weekly_hours_viability == 1
    assert 0 <= result.score <= 10


def test_everyone_and_nothing_harder_to_acquire(config, strong_answers):
    """A broad target with no existing solution is harder to sell to than a niche paying for a competitor."""
    broad = dict(strong_answers, target_customer="everyone", current_solution="nothing")
    niche = dict(strong_answers, target_customer=SPECIFIC_TARGET, current_solution="competitor")

    broad_result = _evaluate(config, broad)
    niche_result = _evaluate(config, niche)

    assert any("\"Everyone\" is not a customer" in flag for flag in broad_result.red_flags)
    assert broad_result.customer_acquisition_difficulty > niche_result.customer_acquisition_difficulty


@pytest.mark.parametrize("target", ["EVERYONE", "Everyone", "everyone"])
def test_broad_target_any_case(config, strong_answers, target):
    strong_answers["target_customer"] = target
    result = _evaluate(config, strong_answers)
    assert result.percentage == 95
    assert "broad-target-customer" in result.tags


def test_evaluation_is_deterministic(config, weak_answers):
    assert _evaluate(config, weak_answers) == _evaluate(config, weak_answers)
