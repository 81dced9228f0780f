"""FastAPI dependency utilities."""

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.security import roles_from_token, user_id_from_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

SERVICE_ROLE = "service"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="認証が必要です",
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_user_id(token: str) -> str:
    """Resolve the authenticated user identifier for the provided token."""

    try:
        return user_id_from_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Return the user id carried by the bearer token."""

    return resolve_user_id(token)


def get_current_roles(token: str = Depends(oauth2_scheme)) -> frozenset[str]:
    try:
        return roles_from_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc


def get_notification_publisher(request: Request) -> NotificationPublisher:
    """Return the publisher constructed for this process at startup."""

    return request.app.state.notification_publisher


def get_session_factory(request: Request) -> Callable[[], Session]:
    """Return the factory used by work that needs its own session."""

    return request.app.state.session_factory
