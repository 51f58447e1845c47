import logging

from fastapi import HTTPException, status

from src.backend.client import BackendError, BackendUnavailableError

logger = logging.getLogger(__name__)


def backend_http_error(exc: Exception) -> HTTPException:
    """Maps backend failures onto the status codes the API reports for them."""
    if isinstance(exc, BackendUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Content backend is unavailable.")
    if isinstance(exc, BackendError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Content backend returned an error.")
    logger.exception(f"Unexpected error: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error.")
