"""Goal settings endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from nutriplus.api.dependencies import get_container, require_session, upgrade_required
from nutriplus.api.schemas import GoalsPayload
from nutriplus.api.serializers import serialize_goals
from nutriplus.domain.goals import ONBOARDING_SUGGESTED_GOALS, MacroGoals
from nutriplus.services.sessions import UserSession

router = APIRouter(tags=["goals"])


@router.get("/goals")
async def get_goals(
    session: UserSession = Depends(require_session),
) -> dict[str, object]:
    """Return the active goals and whether first-run setup is pending."""
    return {
        "goals": serialize_goals(session.goals.goals),
        "needs_onboarding": session.goals.needs_onboarding,
        "suggested": serialize_goals(ONBOARDING_SUGGESTED_GOALS),
    }


@router.put("/goals", response_model=None)
async def update_goals(
    payload: GoalsPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
):
    """Replace the goal set from the settings screen."""
    return _update(payload, request, background_tasks, session, onboarding=False)


@router.post("/onboarding/goals", response_model=None)
async def complete_onboarding(
    payload: GoalsPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
):
    """Store the first goal set."""
    return _update(payload, request, background_tasks, session, onboarding=True)


def _update(
    payload: GoalsPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession,
    onboarding: bool,
):
    goals = MacroGoals(
        calories=payload.calories,
        protein=payload.protein,
        carbs=payload.carbs,
        fat=payload.fat,
    )
    change = session.goals.update(goals, onboarding=onboarding)
    if change is None:
        return upgrade_required()
    container = get_container(request)
    background_tasks.add_task(
        container.goal_service.commit,
        session.identity.user_id,
        session.goals,
        change,
        session.notifier,
    )
    return {"goals": serialize_goals(goals)}
