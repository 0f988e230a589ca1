"""Recipe suggestions and saved recipes."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError as PydanticValidationError

from nutriplus.domain.errors import CollaboratorError, StoreError, ValidationError
from nutriplus.domain.recipes import Recipe, RecipeSuggestions
from nutriplus.services.notifications import NotificationKind
from nutriplus.services.vision import NutritionModelClient

if TYPE_CHECKING:
    from nutriplus.services.sessions import UserSession

_RECIPE_PROPERTIES: dict[str, object] = {
    "name": {"type": "string"},
    "description": {"type": "string"},
    "time_to_cook": {"type": "string"},
    "difficulty": {"type": "string"},
    "calories": {"type": "number", "minimum": 0},
    "protein": {"type": "number", "minimum": 0},
    "carbs": {"type": "number", "minimum": 0},
    "fat": {"type": "number", "minimum": 0},
    "ingredients": {"type": "array", "items": {"type": "string"}},
    "instructions": {"type": "array", "items": {"type": "string"}},
}

RECIPES_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "recipes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": _RECIPE_PROPERTIES,
                "required": list(_RECIPE_PROPERTIES),
                "additionalProperties": False,
            },
        }
    },
    "required": ["recipes"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class SavedRecipeRepository(Protocol):
    """Persistence interface for saved recipes."""

    def list_recipes(self, user_id: str) -> list[Recipe]:
        """Return saved recipes of a user."""

    def save_recipe(self, user_id: str, recipe: Recipe) -> None:
        """Persist a saved recipe."""

    def delete_recipe(self, user_id: str, name: str) -> None:
        """Delete a saved recipe by name."""


@dataclass(frozen=True)
class RecipeToggle:
    """A locally applied save/unsave awaiting store confirmation."""

    recipe: Recipe
    saved: bool
    index: int


@dataclass
class RecipeService:
    """Recipe search and the saved-recipe list."""

    client: NutritionModelClient
    repository: SavedRecipeRepository
    model: str
    reasoning_effort: str | None
    store: bool
    suggestion_count: int = 3

    async def search(self, ingredients: str) -> list[Recipe]:
        """Suggest recipes built mainly from the given ingredients."""
        query = ingredients.strip()
        if not query:
            raise ValidationError("Ingredients are required", "ingredients")
        prompt = (
            f"Suggest {self.suggestion_count} healthy fitness recipes that mainly "
            f"use these ingredients: {query}. You may add common pantry "
            "ingredients to complete a recipe. Include step-by-step "
            "instructions and macros per serving."
        )
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=prompt,
            schema=RECIPES_SCHEMA,
            schema_name="recipe_suggestions",
        )
        try:
            return RecipeSuggestions.model_validate(raw).recipes
        except PydanticValidationError as exc:
            _logger.warning("Discarding malformed recipe suggestions: %s", exc)
            raise CollaboratorError("Could not find recipes.") from exc

    def load(self, user_id: str) -> list[Recipe]:
        """Return stored saved recipes for a user."""
        return self.repository.list_recipes(user_id)

    def stage_toggle(
        self, session: "UserSession", recipe: Recipe
    ) -> RecipeToggle | None:
        """Save or unsave a recipe locally; recipes are matched by name."""
        if not session.entitlement.guard():
            return None
        for index, saved in enumerate(session.saved_recipes):
            if saved.name == recipe.name:
                session.saved_recipes.pop(index)
                return RecipeToggle(recipe=saved, saved=False, index=index)
        session.saved_recipes.append(recipe)
        return RecipeToggle(
            recipe=recipe, saved=True, index=len(session.saved_recipes) - 1
        )

    async def commit(self, session: "UserSession", toggle: RecipeToggle) -> bool:
        """Confirm a toggle with the store, undoing it on failure."""
        user_id = session.identity.user_id
        try:
            if toggle.saved:
                await asyncio.to_thread(
                    self.repository.save_recipe, user_id, toggle.recipe
                )
            else:
                await asyncio.to_thread(
                    self.repository.delete_recipe, user_id, toggle.recipe.name
                )
        except StoreError:
            _logger.exception("Failed to toggle saved recipe %s", toggle.recipe.name)
            _undo(session, toggle)
            session.notifier.notify(NotificationKind.ERROR, "Could not update recipes.")
            return False
        message = "Recipe saved." if toggle.saved else "Recipe removed from favorites."
        session.notifier.notify(NotificationKind.SUCCESS, message)
        return True

    async def toggle_saved(self, session: "UserSession", recipe: Recipe) -> bool:
        """Stage and confirm a save/unsave."""
        toggle = self.stage_toggle(session, recipe)
        if toggle is None:
            return False
        return await self.commit(session, toggle)


def is_saved(session: "UserSession", recipe_name: str) -> bool:
    """Return True when a recipe with that name is saved."""
    return any(recipe.name == recipe_name for recipe in session.saved_recipes)


def _undo(session: "UserSession", toggle: RecipeToggle) -> None:
    names = [recipe.name for recipe in session.saved_recipes]
    if toggle.saved:
        if toggle.recipe.name in names:
            session.saved_recipes.pop(names.index(toggle.recipe.name))
    elif toggle.recipe.name not in names:
        position = min(toggle.index, len(session.saved_recipes))
        session.saved_recipes.insert(position, toggle.recipe)
