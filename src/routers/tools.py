from fastapi import APIRouter, HTTPException, Depends, status
from typing import Any, Dict, List
import logging

from services.tool_engine.engine import SessionNotFoundError, SessionStore, ToolEngine
from services.tool_engine.models import InvalidAnswerError, UnknownToolError
from services.tool_engine.runner import QuestionnaireRunner
from src.analytics.service import AnalyticsService
from src.backend.client import BackendError, BackendUnavailableError
from src.dependencies import get_analytics_service, get_session_store, get_tool_engine
from src.schemas.tools import AnswerRequest, EvaluateRequest, SessionState, ToolDetail, ToolSummary

router = APIRouter()
logger = logging.getLogger(__name__)


def _session_state(session_id: str, slug: str, runner: QuestionnaireRunner) -> SessionState:
    return SessionState(
        session_id=session_id,
        tool=slug,
        step=runner.step,
        total_steps=runner.total_steps,
        progress=runner.progress,
        can_advance=runner.can_advance,
        is_complete=runner.is_complete,
        current_question=runner.current_question,
        answers=runner.answers.to_raw(),
        result=runner.result.model_dump() if runner.result else None,
    )


def _get_runner(store: SessionStore, slug: str, session_id: str) -> QuestionnaireRunner:
    try:
        return store.get(slug, session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/tools", response_model=List[ToolSummary])
async def list_tools(engine: ToolEngine = Depends(get_tool_engine)):
    return [ToolSummary.from_config(config) for config in engine.list_tools()]


@router.get("/tools/{slug}", response_model=ToolDetail)
async def get_tool(slug: str, engine: ToolEngine = Depends(get_tool_engine)):
    try:
        return ToolDetail.from_config(engine.get_tool(slug))
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/tools/{slug}/evaluate")
async def evaluate_tool(
    slug: str,
    request: EvaluateRequest,
    engine: ToolEngine = Depends(get_tool_engine),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """
    Scores a full set of answers in one call. When an email is given the
    usage is recorded; recording failures never affect the response.
    """
    try:
        result = engine.evaluate(slug, request.answers)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if request.email:
        try:
            await analytics.track_tool_usage(request.email, slug, inputs=request.answers)
        except (BackendError, BackendUnavailableError) as e:
            logger.error(f"Failed to record tool usage for '{slug}': {e}")

    logger.info(f"Tool '{slug}' evaluated: band='{result.band}' percentage={result.percentage}")
    return result.model_dump()


@router.post("/tools/{slug}/sessions", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def start_session(slug: str, store: SessionStore = Depends(get_session_store)):
    try:
        session_id, runner = store.create(slug)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _session_state(session_id, slug, runner)


@router.get("/tools/{slug}/sessions/{session_id}", response_model=SessionState)
async def get_session(slug: str, session_id: str, store: SessionStore = Depends(get_session_store)):
    return _session_state(session_id, slug, _get_runner(store, slug, session_id))


@router.put("/tools/{slug}/sessions/{session_id}/answers/{question_id}", response_model=SessionState)
async def set_answer(
    slug: str,
    session_id: str,
    question_id: str,
    answer: AnswerRequest,
    store: SessionStore = Depends(get_session_store),
):
    runner = _get_runner(store, slug, session_id)
    try:
        runner.set_answer(question_id, answer.value)
    except InvalidAnswerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_state(session_id, slug, runner)


@router.post("/tools/{slug}/sessions/{session_id}/advance", response_model=SessionState)
async def advance_session(slug: str, session_id: str, store: SessionStore = Depends(get_session_store)):
    runner = _get_runner(store, slug, session_id)
    runner.advance()
    return _session_state(session_id, slug, runner)


@router.post("/tools/{slug}/sessions/{session_id}/retreat", response_model=SessionState)
async def retreat_session(slug: str, session_id: str, store: SessionStore = Depends(get_session_store)):
    runner = _get_runner(store, slug, session_id)
    runner.retreat()
    return _session_state(session_id, slug, runner)
