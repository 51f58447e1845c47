# src/middleware/auth.py
import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from config.settings import AppSettings, app_settings

_log = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"

# auto_error=False means it returns None if the header is missing, instead of raising
admin_token_scheme = APIKeyHeader(name=ADMIN_TOKEN_HEADER, auto_error=False, description="Back-office access token.")


def get_app_settings() -> AppSettings:
    return app_settings


async def require_admin(
    token: Optional[str] = Security(admin_token_scheme),
    settings: AppSettings = Depends(get_app_settings),
) -> None:
    """
    Guards the back-office routes. The header is compared in constant time
    with the configured token; with no token configured the routes are off.
    """
    if not settings.admin_token:
        _log.error("Admin route requested but APP_ADMIN_TOKEN is not configured.")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Admin access is not configured.")
    if not token or not secrets.compare_digest(token.encode(), settings.admin_token.encode()):
        _log.warning("Admin auth failed: missing or invalid token.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token.")
