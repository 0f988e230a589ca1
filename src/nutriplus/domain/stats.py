"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SeriesMode(str, Enum):
    """Chart period for calorie series."""

    DAYS = "days"
    WEEKS = "weeks"


@dataclass(frozen=True)
class MacroTotals:
    """Summed macros for a period."""

    calories: float
    protein: float
    carbs: float
    fat: float


ZERO_TOTALS = MacroTotals(calories=0.0, protein=0.0, carbs=0.0, fat=0.0)


@dataclass(frozen=True)
class Bucket:
    """Calories summed over the half-open span [start, end)."""

    label: str
    start: datetime
    end: datetime
    calories: float
