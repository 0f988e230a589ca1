"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutriplus.api.dependencies import (
    bearer_token,
    get_container,
    require_session,
    resolve_timezone,
)
from nutriplus.api.goals import router as goals_router
from nutriplus.api.meals import router as meals_router
from nutriplus.api.recipes import router as recipes_router
from nutriplus.api.serializers import (
    serialize_bucket,
    serialize_entitlement,
    serialize_goals,
    serialize_meal,
    serialize_notification,
    serialize_progress,
    serialize_totals,
)
from nutriplus.app_logging import configure_logging
from nutriplus.containers import AppContainer
from nutriplus.domain.errors import CollaboratorError, StoreError, ValidationError
from nutriplus.domain.stats import SeriesMode
from nutriplus.services.goals import progress_for
from nutriplus.services.sessions import UserSession


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(meals_router)
    app.include_router(goals_router)
    app.include_router(recipes_router)

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "field": exc.field},
        )

    @app.exception_handler(CollaboratorError)
    async def collaborator_error(
        request: Request, exc: CollaboratorError
    ) -> JSONResponse:
        logger.warning("Collaborator failed on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": exc.message, "retry": True},
        )

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failed on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/me")
    async def me(
        session: UserSession = Depends(require_session),
    ) -> dict[str, object]:
        """Return the caller's identity and entitlement."""
        identity = session.identity
        return {
            "user_id": identity.user_id,
            "display_name": identity.display_name,
            "email": identity.email,
            "entitlement": serialize_entitlement(session.entitlement.state),
            "needs_onboarding": session.goals.needs_onboarding,
        }

    @app.get("/dashboard")
    async def dashboard(
        request: Request,
        day: date | None = None,
        tz: str | None = None,
        session: UserSession = Depends(require_session),
    ) -> dict[str, object]:
        """Return a local day's totals, goal progress and meals."""
        stats_service = get_container(request).stats_service
        summary = stats_service.get_day(
            session.ledger.all(), resolve_timezone(session, tz), day=day
        )
        goals = session.goals.goals
        return {
            "day": summary.day.isoformat(),
            "totals": serialize_totals(summary.totals),
            "goals": serialize_goals(goals),
            "progress": {
                macro: serialize_progress(value)
                for macro, value in progress_for(summary.totals, goals).items()
            },
            "meals": [serialize_meal(record) for record in reversed(summary.meals)],
            "needs_onboarding": session.goals.needs_onboarding,
            "entitlement": serialize_entitlement(session.entitlement.state),
        }

    @app.get("/series")
    async def chart_series(
        request: Request,
        mode: SeriesMode = SeriesMode.DAYS,
        tz: str | None = None,
        session: UserSession = Depends(require_session),
    ) -> dict[str, object]:
        """Return the calorie chart buckets, oldest first."""
        stats_service = get_container(request).stats_service
        buckets = stats_service.get_series(
            session.ledger.all(), mode, resolve_timezone(session, tz)
        )
        return {
            "mode": mode.value,
            "buckets": [serialize_bucket(bucket) for bucket in buckets],
        }

    @app.get("/history")
    async def history(
        day: date,
        tz: str | None = None,
        session: UserSession = Depends(require_session),
    ) -> dict[str, object]:
        """Return the meals of a local day, newest first."""
        tz_info = ZoneInfo(resolve_timezone(session, tz))
        records = session.ledger.for_day(day, tz_info)
        return {
            "day": day.isoformat(),
            "meals": [serialize_meal(record) for record in reversed(records)],
        }

    @app.get("/notifications")
    async def notifications(
        session: UserSession = Depends(require_session),
    ) -> dict[str, object]:
        """Drain the caller's pending notifications."""
        return {
            "notifications": [
                serialize_notification(notification)
                for notification in session.notifier.drain()
            ]
        }

    @app.post("/subscription/refresh")
    async def refresh_subscription(
        request: Request, token: str = Depends(bearer_token)
    ) -> dict[str, object]:
        """Re-read identity after a purchase and reload stored data."""
        session_service = get_container(request).session_service
        session = await session_service.activate_subscription(token)
        if session is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        return {"entitlement": serialize_entitlement(session.entitlement.state)}

    @app.post("/logout")
    async def logout(
        request: Request, session: UserSession = Depends(require_session)
    ) -> dict[str, str]:
        """Drop the caller's local state."""
        get_container(request).session_service.close(session.identity.user_id)
        return {"status": "ok"}

    return app
