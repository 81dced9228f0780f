"""JWT helpers shared with the external authentication provider."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import get_settings

ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign ``data`` the way the auth provider does; used by tools and tests."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def user_id_from_token(token: str) -> str:
    """Return the ``sub`` claim identifying the authenticated user."""

    subject = decode_access_token(token).get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("Token does not identify a user")
    return subject


def roles_from_token(token: str) -> frozenset[str]:
    """Return the ``roles`` claim; trusted integrations carry ``service``."""

    roles = decode_access_token(token).get("roles") or ()
    if isinstance(roles, str):
        roles = (roles,)
    return frozenset(str(role) for role in roles)
