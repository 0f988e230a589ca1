"""Supabase repository for saved recipes."""

from dataclasses import dataclass

from supabase import Client

from nutriplus.adapters.supabase_errors import store_call
from nutriplus.domain.errors import StoreError
from nutriplus.domain.recipes import Recipe
from nutriplus.services.recipes import SavedRecipeRepository


@dataclass
class SupabaseSavedRecipeRepository(SavedRecipeRepository):
    """Supabase implementation for the saved_recipes table."""

    client: Client

    def list_recipes(self, user_id: str) -> list[Recipe]:
        """Return a user's saved recipes."""
        with store_call("load saved recipes"):
            response = (
                self.client.table("saved_recipes")
                .select("*")
                .eq("user_id", user_id)
                .execute()
            )
        return [_parse_row(row) for row in response.data or []]

    def save_recipe(self, user_id: str, recipe: Recipe) -> None:
        """Insert a saved recipe row."""
        with store_call("save recipe"):
            response = (
                self.client.table("saved_recipes")
                .insert(
                    {
                        "user_id": user_id,
                        "name": recipe.name,
                        "description": recipe.description,
                        "time_to_cook": recipe.time_to_cook,
                        "difficulty": recipe.difficulty,
                        "calories": recipe.calories,
                        "protein": recipe.protein,
                        "carbs": recipe.carbs,
                        "fat": recipe.fat,
                        "ingredients": recipe.ingredients,
                        "instructions": recipe.instructions,
                    }
                )
                .execute()
            )
        if not response.data:
            raise StoreError("Failed to save recipe")

    def delete_recipe(self, user_id: str, name: str) -> None:
        """Delete a saved recipe by name."""
        with store_call("delete recipe"):
            self.client.table("saved_recipes").delete().eq("user_id", user_id).eq(
                "name", name
            ).execute()


def _parse_row(row: dict[str, object]) -> Recipe:
    return Recipe(
        name=str(row.get("name", "")),
        description=str(row.get("description") or ""),
        time_to_cook=str(row.get("time_to_cook") or ""),
        difficulty=str(row.get("difficulty") or ""),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        ingredients=list(row.get("ingredients") or []),
        instructions=list(row.get("instructions") or []),
    )
