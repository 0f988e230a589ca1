"""Models for image nutrition estimates."""

from pydantic import BaseModel, ConfigDict, Field


class AnalysisResult(BaseModel):
    """Nutrition estimate for a photographed dish."""

    model_config = ConfigDict(populate_by_name=True)

    food_name: str = Field(alias="foodName", min_length=1)
    portion: str
    description: str = ""
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    ingredients: list[str]
