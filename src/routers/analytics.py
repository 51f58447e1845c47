from fastapi import APIRouter, Depends, status
from typing import Any, Dict
import logging

from src.analytics.service import AnalyticsService
from src.backend.client import BackendError, BackendUnavailableError
from src.core.errors import backend_http_error
from src.dependencies import get_analytics_service
from src.schemas.analytics import ContentInteractionRequest, EventAccepted, EventRequest

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/events", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
async def track_event(event: EventRequest, analytics: AnalyticsService = Depends(get_analytics_service)):
    """
    Records a site event. Visitors without an identifier get a fresh
    anonymous one, which the client should send back on later events.
    """
    try:
        user_identifier = await analytics.track_event(
            event.event_type, event.content_type, event.content_id, event.user_identifier, event.metadata
        )
    except (BackendError, BackendUnavailableError) as e:
        raise backend_http_error(e)
    return EventAccepted(user_identifier=user_identifier)


@router.post("/content-feedback", status_code=status.HTTP_201_CREATED)
async def content_feedback(
    interaction: ContentInteractionRequest,
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    try:
        return await analytics.track_content_interaction(interaction.model_dump(exclude_none=True))
    except (BackendError, BackendUnavailableError) as e:
        raise backend_http_error(e)
