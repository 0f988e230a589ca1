"""Domain models for macro goals and progress."""

from dataclasses import dataclass

from nutriplus.domain.errors import ValidationError


@dataclass(frozen=True)
class MacroGoals:
    """Daily macro targets. A calories target of zero means "not configured"."""

    calories: float
    protein: float
    carbs: float
    fat: float

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbs", "fat"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} goal must not be negative", name)

    @property
    def is_configured(self) -> bool:
        """Return True once first-run setup has stored a calories target."""
        return self.calories != 0

    def as_dict(self) -> dict[str, float]:
        """Return the goals in the store's JSON shape."""
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> "MacroGoals":
        """Parse a goals payload, treating missing or negative fields as zero."""
        return cls(
            calories=max(0.0, float(raw.get("calories") or 0)),
            protein=max(0.0, float(raw.get("protein") or 0)),
            carbs=max(0.0, float(raw.get("carbs") or 0)),
            fat=max(0.0, float(raw.get("fat") or 0)),
        )


DEFAULT_GOALS = MacroGoals(calories=0, protein=0, carbs=0, fat=0)
ONBOARDING_SUGGESTED_GOALS = MacroGoals(calories=2000, protein=150, carbs=250, fat=70)


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one macro against its target."""

    current: float
    target: float
    percent: int
    over_target: bool

    @property
    def display_percent(self) -> int:
        """Percent capped at 100 for progress bars."""
        return min(100, self.percent)

    @property
    def label(self) -> str:
        """Uncapped percent for text, marked when the target is exceeded."""
        if self.over_target:
            return f"{self.percent}% (exceeded)"
        return f"{self.percent}%"
