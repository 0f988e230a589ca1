"""Request dependencies shared by the API routers."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutriplus.containers import AppContainer
from nutriplus.domain.errors import ValidationError
from nutriplus.services.sessions import UserSession

_BEARER_PREFIX = "bearer "


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the app."""
    return request.app.state.container


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the bearer token from the Authorization header."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return token


async def require_session(
    request: Request, authorization: str | None = Header(default=None)
) -> UserSession:
    """Resolve the caller's session or reject the request."""
    container = get_container(request)
    session = await container.session_service.resolve(bearer_token(authorization))
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return session


def resolve_timezone(session: UserSession, tz: str | None) -> str:
    """Return the request timezone, falling back to the session default."""
    if not tz:
        return session.timezone
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {tz}", "tz") from exc
    return tz


def upgrade_required() -> JSONResponse:
    """Response for a write refused because the trial has ended."""
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content={"status": "upgrade_required"},
    )
