"""Models for recipe suggestions and saved recipes."""

from pydantic import BaseModel, ConfigDict, Field


class Recipe(BaseModel):
    """Recipe with macros per serving."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    description: str
    time_to_cook: str = Field(alias="timeToCook")
    difficulty: str
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    ingredients: list[str]
    instructions: list[str]


class RecipeSuggestions(BaseModel):
    """Structured output wrapper for recipe suggestions."""

    recipes: list[Recipe]
