"""Shared API dependencies."""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from swing_events.config import settings
from swing_events.engine.router import EventProcessor

bearer_scheme = HTTPBearer(auto_error=False)


def require_api_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Admin endpoints need the configured bearer token; none configured means closed."""
    if (
        not settings.api_token
        or credentials is None
        or not secrets.compare_digest(credentials.credentials, settings.api_token)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API token",
        )


def require_push_token(token: str | None = None) -> None:
    """Event ingress checks ?token= when a push token is configured."""
    if not settings.push_token:
        return
    if token is None or not secrets.compare_digest(token, settings.push_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid push token",
        )


def get_processor(request: Request) -> EventProcessor:
    """The processor built during startup."""
    processor = getattr(request.app.state, "processor", None)
    if processor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Event processor not initialised",
        )
    return processor
