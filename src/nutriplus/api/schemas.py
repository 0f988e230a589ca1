"""Request bodies accepted by the API."""

from pydantic import BaseModel, Field


class MealCreate(BaseModel):
    """Manually entered or analysis-confirmed meal."""

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    portion: str | None = None
    image_url: str | None = None
    ingredients: list[str] = Field(default_factory=list)


class GoalsPayload(BaseModel):
    """Full replacement goal set."""

    calories: float
    protein: float
    carbs: float
    fat: float


class AnalyzeRequest(BaseModel):
    """Meal photo as base64, optionally wrapped in a data URL."""

    image: str


class RecipeSearchRequest(BaseModel):
    """Free-text ingredient list."""

    ingredients: str
