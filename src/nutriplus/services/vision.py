"""Photo nutrition estimation using LLMs."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from nutriplus.domain.errors import CollaboratorError, ValidationError
from nutriplus.domain.vision import AnalysisResult

ANALYSIS_PROMPT = (
    "Analyze this food image. Identify the dish, estimate the portion size "
    "(for example 200 g, 1 plate, 2 slices) and estimate calories, protein, "
    "carbs and fat in grams for that specific portion. "
    "List the ingredients you can identify."
)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "food_name": {"type": "string"},
        "portion": {"type": "string"},
        "description": {"type": "string"},
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "ingredients": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "food_name",
        "portion",
        "description",
        "calories",
        "protein",
        "carbs",
        "fat",
        "ingredients",
    ],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class NutritionModelClient(Protocol):
    """Interface for structured LLM output, optionally with an image."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return structured output matching the schema."""


@dataclass
class VisionService:
    """Turns a meal photo into a validated nutrition estimate."""

    client: NutritionModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes) -> AnalysisResult:
        """Estimate nutrition for an image, or raise CollaboratorError."""
        if not image_bytes:
            raise ValidationError("Image is empty", "image")
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=ANALYSIS_PROMPT,
            schema=ANALYSIS_SCHEMA,
            schema_name="meal_analysis",
            image_data_url=to_data_url(image_bytes),
        )
        try:
            return AnalysisResult.model_validate(raw)
        except PydanticValidationError as exc:
            _logger.warning("Discarding malformed analysis: %s", exc)
            raise CollaboratorError("Could not analyze the image.") from exc


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
