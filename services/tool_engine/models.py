from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Dict, Any, Literal, Optional, Union


class AnswerOption(BaseModel):
    value: str
    label: str
    weight: float = 0.0


class Question(BaseModel):
    id: str
    prompt: str
    kind: Literal["choice", "text"]
    required: bool = True
    options: List[AnswerOption] = Field(default_factory=list)
    min_length: int = 1 # Only meaningful for text questions
    placeholder: Optional[str] = None

    def option_values(self) -> List[str]:
        return [option.value for option in self.options]

    def max_weight(self) -> float:
        if not self.options:
            return 0.0
        return max(option.weight for option in self.options)


class Band(BaseModel):
    min_percentage: int = Field(ge=0, le=100)
    label: str
    reason: Optional[str] = None
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class TextTrigger(BaseModel):
    id: str
    question_id: str
    phrases: List[str]
    flag: str
    flag_kind: Literal["red", "green"] = "red"
    score_adjustment: float = 0.0
    metric_adjustments: Dict[str, float] = Field(default_factory=dict)


class ScoreBounds(BaseModel):
    min: float = 1.0
    max: float = 10.0


class ToolConfig(BaseModel):
    slug: str
    name: str
    description: str
    version: str = "1.0.0"
    time_to_complete: Optional[str] = None
    questions: List[Question]
    bands: List[Band]
    text_triggers: List[TextTrigger] = Field(default_factory=list)
    score_bounds: ScoreBounds = Field(default_factory=ScoreBounds)
    extras: Dict[str, Any] = Field(default_factory=dict) # Tool-specific tables (plans, tips, channel maps)

    def question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


# --- Answers ---

class ChoiceAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["choice"] = "choice"
    value: str


class TextAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


Answer = Annotated[Union[ChoiceAnswer, TextAnswer], Field(discriminator="kind")]


class AnswerRecord(BaseModel):
    """Answers collected for one questionnaire session, keyed by question id."""
    answers: Dict[str, Answer] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, config: ToolConfig, raw_answers: Dict[str, Any]) -> "AnswerRecord":
        """
        Builds a typed record from a flat {question_id: str} mapping.
        Unknown question ids and blank values are dropped; the kind of each
        answer comes from the question definition, not from the payload.
        """
        record = cls()
        for question in config.questions:
            raw_value = raw_answers.get(question.id)
            if raw_value is None:
                continue
            text_value = str(raw_value)
            if not text_value.strip():
                continue
            if question.kind == "text":
                record.answers[question.id] = TextAnswer(text=text_value)
            else:
                record.answers[question.id] = ChoiceAnswer(value=text_value.strip())
        return record

    def get(self, question_id: str) -> Optional[Union[ChoiceAnswer, TextAnswer]]:
        return self.answers.get(question_id)

    def choice(self, question_id: str) -> Optional[str]:
        answer = self.answers.get(question_id)
        if isinstance(answer, ChoiceAnswer):
            return answer.value
        return None

    def text(self, question_id: str) -> str:
        answer = self.answers.get(question_id)
        if isinstance(answer, TextAnswer):
            return answer.text
        return ""

    def to_raw(self) -> Dict[str, str]:
        return {
            qid: (answer.value if isinstance(answer, ChoiceAnswer) else answer.text)
            for qid, answer in self.answers.items()
        }


# --- Results ---

class ScoringResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tool: str
    score: float
    percentage: int = Field(ge=0, le=100)
    band: str
    tags: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    green_flags: List[str] = Field(default_factory=list)
    breakdown: Dict[str, float] = Field(default_factory=dict)


class ProjectScorerResult(ScoringResult):
    verdict: str
    verdict_reason: str
    customer_acquisition_difficulty: float
    weekly_hours_viability: float
    time_to_first_customer: str
    marketing_channels: List[str] = Field(default_factory=list)


class LaunchDiagnosticResult(ScoringResult):
    probability: str


class WeeklyPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    focus: str
    tasks: List[str]
    reasoning: str


class CustomerPlanResult(ScoringResult):
    weekly_plan: WeeklyPlan
    stage_tips: List[str] = Field(default_factory=list)
    next_week_prep: List[str] = Field(default_factory=list)
    customization: Dict[str, str] = Field(default_factory=dict)


# Custom Error Classes
class ToolConfigurationError(ValueError):
    """Raised when a tool rule table fails validation."""
    pass

class UnknownToolError(LookupError):
    """Raised when no tool is registered under the requested slug."""
    pass

class InvalidAnswerError(ValueError):
    """Raised for answers the UI could never have produced (unknown question or option)."""
    pass
