"""Recipe search and favorites endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from nutriplus.api.dependencies import get_container, require_session, upgrade_required
from nutriplus.api.schemas import RecipeSearchRequest
from nutriplus.api.serializers import serialize_recipe
from nutriplus.domain.recipes import Recipe
from nutriplus.services.recipes import is_saved
from nutriplus.services.sessions import UserSession

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/search")
async def search_recipes(
    payload: RecipeSearchRequest,
    request: Request,
    session: UserSession = Depends(require_session),
) -> dict[str, object]:
    """Suggest recipes for an ingredient list."""
    container = get_container(request)
    recipes = await container.recipe_service.search(payload.ingredients)
    return {
        "recipes": [
            {**serialize_recipe(recipe), "saved": is_saved(session, recipe.name)}
            for recipe in recipes
        ]
    }


@router.get("/saved")
async def saved_recipes(
    session: UserSession = Depends(require_session),
) -> dict[str, object]:
    """Return the saved recipes."""
    return {"recipes": [serialize_recipe(recipe) for recipe in session.saved_recipes]}


@router.post("/saved/toggle", response_model=None)
async def toggle_saved_recipe(
    recipe: Recipe,
    request: Request,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_session),
):
    """Save a recipe, or unsave it when a recipe with that name is saved."""
    container = get_container(request)
    toggle = container.recipe_service.stage_toggle(session, recipe)
    if toggle is None:
        return upgrade_required()
    background_tasks.add_task(container.recipe_service.commit, session, toggle)
    return {"name": recipe.name, "saved": toggle.saved}
