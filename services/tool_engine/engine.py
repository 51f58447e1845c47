import logging
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from . import customer_plan, launch_diagnostic, project_scorer
from .loader import load_tool_configs
from .models import AnswerRecord, ScoringResult, ToolConfig, ToolConfigurationError, UnknownToolError
from .runner import QuestionnaireRunner

logger = logging.getLogger(__name__)

Evaluator = Callable[[ToolConfig, AnswerRecord], ScoringResult]

EVALUATORS: Dict[str, Evaluator] = {
    project_scorer.TOOL_SLUG: project_scorer.evaluate,
    launch_diagnostic.TOOL_SLUG: launch_diagnostic.evaluate,
    customer_plan.TOOL_SLUG: customer_plan.evaluate,
}


class ToolEngine:
    """
    Loads the tool rule tables and evaluates answers against them.
    """
    def __init__(self, config_dir: str = "assets/tools", evaluators: Dict[str, Evaluator] = None):
        """
        Args:
            config_dir: Directory holding one <slug>.yml rule table per tool.
            evaluators: slug -> evaluate(config, answers) mapping. Defaults to the built-in tools.
        """
        self.config_dir = Path(config_dir)
        evaluators = evaluators if evaluators is not None else EVALUATORS
        self._registry: Dict[str, Tuple[ToolConfig, Evaluator]] = {}

        for config in load_tool_configs(str(self.config_dir)):
            if config.slug in self._registry:
                raise ToolConfigurationError(f"Duplicate tool slug '{config.slug}' in {config_dir}")
            evaluator = evaluators.get(config.slug)
            if evaluator is None:
                raise ToolConfigurationError(f"No evaluator registered for tool '{config.slug}'")
            self._registry[config.slug] = (config, evaluator)

        logger.info(f"Tool engine ready with {len(self._registry)} tools: {sorted(self._registry)}")

    def list_tools(self) -> List[ToolConfig]:
        return [config for config, _ in self._registry.values()]

    def get_tool(self, slug: str) -> ToolConfig:
        return self._lookup(slug)[0]

    def _lookup(self, slug: str) -> Tuple[ToolConfig, Evaluator]:
        try:
            return self._registry[slug]
        except KeyError:
            raise UnknownToolError(f"Unknown tool '{slug}'") from None

    def evaluate(self, slug: str, raw_answers: Dict[str, Any]) -> ScoringResult:
        """Scores a complete set of flat answers in one call."""
        config, evaluator = self._lookup(slug)
        answers = AnswerRecord.from_raw(config, raw_answers)
        return evaluator(config, answers)

    def new_runner(self, slug: str) -> QuestionnaireRunner:
        config, evaluator = self._lookup(slug)
        return QuestionnaireRunner(config, evaluator)


class SessionNotFoundError(LookupError):
    """Raised when a questionnaire session id is unknown or belongs to another tool."""
    pass


class SessionStore:
    """
    In-memory questionnaire sessions, one runner per session id.
    The least recently used sessions are dropped once ``max_sessions`` is reached.
    """
    def __init__(self, engine: ToolEngine, max_sessions: int = 1000):
        self.engine = engine
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, Tuple[str, QuestionnaireRunner]]" = OrderedDict()

    def create(self, slug: str) -> Tuple[str, QuestionnaireRunner]:
        runner = self.engine.new_runner(slug)
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = (slug, runner)
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug(f"Evicted questionnaire session {evicted}")
        return session_id, runner

    def get(self, slug: str, session_id: str) -> QuestionnaireRunner:
        entry = self._sessions.get(session_id)
        if entry is None or entry[0] != slug:
            raise SessionNotFoundError(f"Unknown session '{session_id}' for tool '{slug}'")
        self._sessions.move_to_end(session_id)
        return entry[1]

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
