"""In-memory meal ledger, the local source of truth for nutrition history."""

import logging
from collections.abc import Iterator
from datetime import date, tzinfo

from nutriplus.domain.errors import ValidationError
from nutriplus.domain.meals import MealRecord

_logger = logging.getLogger(__name__)


class MealLedger:
    """Ordered collection of meal records with unique identifiers.

    Every record carries the sequence number it was first logged under, so a
    removed record can be put back among its old neighbours even after other
    records around it have changed. Records are always kept in sequence order.
    """

    def __init__(self, records: list[MealRecord] | None = None) -> None:
        self._records: list[MealRecord] = []
        self._sequences: dict[str, int] = {}
        self._next_sequence = 0
        for record in records or []:
            self.add(record)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, meal_id: object) -> bool:
        return any(record.id == meal_id for record in self._records)

    def all(self) -> Iterator[MealRecord]:
        """Iterate records in insertion order; each call starts over."""
        yield from tuple(self._records)

    def get(self, meal_id: str) -> MealRecord | None:
        """Return a record by id, if present."""
        for record in self._records:
            if record.id == meal_id:
                return record
        return None

    def index_of(self, meal_id: str) -> int | None:
        """Return the position of a record, if present."""
        for index, record in enumerate(self._records):
            if record.id == meal_id:
                return index
        return None

    def add(self, record: MealRecord) -> None:
        """Append a record."""
        if record.id in self:
            raise ValidationError(f"Meal {record.id} is already logged", "id")
        self._records.append(record)
        self._assign_sequence(record.id)

    def sequence_of(self, meal_id: str) -> int | None:
        """Return the sequence number a meal was logged under, if known."""
        return self._sequences.get(meal_id)

    def reinsert(self, record: MealRecord, sequence: int) -> None:
        """Put a removed record back before the first record logged after it."""
        if record.id in self:
            raise ValidationError(f"Meal {record.id} is already logged", "id")
        position = len(self._records)
        for index, current in enumerate(self._records):
            if self._sequences[current.id] > sequence:
                position = index
                break
        self._records.insert(position, record)
        self._sequences[record.id] = sequence

    def remove(self, meal_id: str) -> MealRecord | None:
        """Remove a record and return it, or None when it is not logged."""
        index = self.index_of(meal_id)
        if index is None:
            _logger.info("Meal %s not in ledger; nothing to remove", meal_id)
            return None
        return self._records.pop(index)

    def snapshot(self) -> tuple[MealRecord, ...]:
        """Return an immutable copy of the current contents."""
        return tuple(self._records)

    def restore(self, snapshot: tuple[MealRecord, ...]) -> None:
        """Replace the contents with a previous snapshot."""
        self._records = list(snapshot)
        for record in self._records:
            if record.id not in self._sequences:
                self._assign_sequence(record.id)

    def for_day(self, day: date, tz: tzinfo) -> list[MealRecord]:
        """Return the records logged on a local calendar day."""
        return [
            record
            for record in self._records
            if record.timestamp.astimezone(tz).date() == day
        ]

    def _assign_sequence(self, meal_id: str) -> None:
        self._sequences[meal_id] = self._next_sequence
        self._next_sequence += 1
