from fastapi import APIRouter, HTTPException, Depends, status
import logging

from src.backend.client import BackendError, BackendUnavailableError
from src.core.errors import backend_http_error
from src.dependencies import get_newsletter_service
from src.newsletter.service import AlreadySubscribedError, NewsletterService
from src.schemas.newsletter import SignupRequest, Subscriber

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/newsletter/subscribe", response_model=Subscriber, status_code=status.HTTP_201_CREATED)
async def subscribe(signup: SignupRequest, newsletter: NewsletterService = Depends(get_newsletter_service)):
    try:
        return await newsletter.subscribe(signup)
    except AlreadySubscribedError:
        raise HTTPException(status_code=409, detail="This email is already subscribed.")
    except (BackendError, BackendUnavailableError) as e:
        raise backend_http_error(e)
