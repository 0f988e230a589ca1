"""Domain models for meal logging."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from nutriplus.domain.errors import ValidationError

MACRO_FIELDS = ("calories", "protein", "carbs", "fat")


def new_meal_id() -> str:
    """Return a fresh identifier that round-trips through the store."""
    return str(uuid4())


@dataclass(frozen=True)
class MealRecord:
    """A logged meal. Immutable once created."""

    id: str
    name: str
    timestamp: datetime
    calories: float
    protein: float
    carbs: float
    fat: float
    portion: str | None = None
    image_url: str | None = None
    ingredients: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        name: str,
        calories: float,
        protein: float,
        carbs: float,
        fat: float,
        portion: str | None = None,
        image_url: str | None = None,
        ingredients: Iterable[str] = (),
        timestamp: datetime | None = None,
        meal_id: str | None = None,
    ) -> "MealRecord":
        """Validate input and build a record, assigning an id and timestamp."""
        cleaned_name = name.strip()
        if not cleaned_name:
            raise ValidationError("Meal name is required", field="name")
        macros = {
            "calories": calories,
            "protein": protein,
            "carbs": carbs,
            "fat": fat,
        }
        for key, value in macros.items():
            if value < 0:
                raise ValidationError(f"{key} must not be negative", field=key)
        logged_at = timestamp or datetime.now(tz=UTC)
        if logged_at.tzinfo is None:
            raise ValidationError("Meal timestamp must be timezone-aware", "timestamp")
        return cls(
            id=meal_id or new_meal_id(),
            name=cleaned_name,
            timestamp=logged_at.astimezone(UTC),
            calories=float(calories),
            protein=float(protein),
            carbs=float(carbs),
            fat=float(fat),
            portion=portion,
            image_url=image_url,
            ingredients=tuple(ingredients),
        )
