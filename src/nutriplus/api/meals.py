"""Meal logging endpoints."""

import base64
import binascii
import re

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from nutriplus.api.dependencies import get_container, require_session, upgrade_required
from nutriplus.api.schemas import AnalyzeRequest, MealCreate
from nutriplus.api.serializers import serialize_meal
from nutriplus.domain.errors import ValidationError
from nutriplus.domain.meals import MealRecord
from nutriplus.domain.recipes import Recipe
from nutriplus.services.meals import meal_from_recipe
from nutriplus.services.sessions import UserSession

router = APIRouter(prefix="/meals", tags=["meals"])

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=None)
async def add_meal(
    payload: MealCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
):
    """Log a meal optimistically and confirm it in the background."""
    record = MealRecord.create(
        name=payload.name,
        calories=payload.calories,
        protein=payload.protein,
        carbs=payload.carbs,
        fat=payload.fat,
        portion=payload.portion,
        image_url=payload.image_url,
        ingredients=payload.ingredients,
    )
    return _stage_add(request, background_tasks, session, record)


@router.post(
    "/from-recipe", status_code=status.HTTP_201_CREATED, response_model=None
)
async def add_recipe_meal(
    recipe: Recipe,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
):
    """Log one serving of a recipe."""
    return _stage_add(request, background_tasks, session, meal_from_recipe(recipe))


@router.post("/analyze")
async def analyze_meal(
    payload: AnalyzeRequest,
    request: Request,
    session: UserSession = Depends(require_session),
) -> dict[str, object]:
    """Estimate nutrition for a meal photo without logging it."""
    container = get_container(request)
    result = await container.vision_service.analyze(_decode_image(payload.image))
    return {"analysis": result.model_dump()}


@router.delete("/{meal_id}")
async def delete_meal(
    meal_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
) -> dict[str, object]:
    """Remove a meal optimistically and confirm it in the background."""
    container = get_container(request)
    mutation = container.meal_log_service.stage_remove(session, meal_id)
    if mutation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    background_tasks.add_task(container.meal_log_service.commit, session, mutation)
    return {"status": "removed", "meal_id": meal_id}


def _stage_add(
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession,
    record: MealRecord,
):
    container = get_container(request)
    mutation = container.meal_log_service.stage_add(session, record)
    if mutation is None:
        return upgrade_required()
    background_tasks.add_task(container.meal_log_service.commit, session, mutation)
    return {"meal": serialize_meal(mutation.record)}


def _decode_image(raw: str) -> bytes:
    cleaned = _DATA_URL_PREFIX.sub("", raw.strip())
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image must be base64 encoded", "image") from exc
