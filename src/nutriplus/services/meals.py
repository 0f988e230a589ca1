"""Meal logging with optimistic local updates."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from nutriplus.domain.errors import StoreError
from nutriplus.domain.meals import MealRecord
from nutriplus.domain.recipes import Recipe
from nutriplus.domain.vision import AnalysisResult
from nutriplus.services.notifications import NotificationKind

if TYPE_CHECKING:
    from nutriplus.services.sessions import UserSession

RECIPE_PORTION = "1 serving"

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def list_meals(self, user_id: str) -> list[MealRecord]:
        """Return all meals of a user."""

    def create_meal(self, user_id: str, record: MealRecord) -> None:
        """Persist a meal under its own id."""

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Delete a meal by id."""


class MealMutationKind(str, Enum):
    """Kind of ledger change."""

    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class MealMutation:
    """A ledger change applied locally and awaiting store confirmation."""

    kind: MealMutationKind
    record: MealRecord
    sequence: int


@dataclass
class MealLogService:
    """Applies meal changes to the ledger first, then confirms with the store."""

    repository: MealRepository

    def load(self, user_id: str) -> list[MealRecord]:
        """Return stored meals for a user."""
        return self.repository.list_meals(user_id)

    def stage_add(
        self, session: "UserSession", record: MealRecord
    ) -> MealMutation | None:
        """Append a meal locally, or return None when the write is refused."""
        if not session.entitlement.guard():
            return None
        session.ledger.add(record)
        session.notifier.notify(NotificationKind.SUCCESS, "Meal added.")
        return MealMutation(
            kind=MealMutationKind.ADD,
            record=record,
            sequence=session.ledger.sequence_of(record.id),
        )

    def stage_remove(
        self, session: "UserSession", meal_id: str
    ) -> MealMutation | None:
        """Remove a meal locally, or return None when it is not logged."""
        sequence = session.ledger.sequence_of(meal_id)
        record = session.ledger.remove(meal_id)
        if record is None or sequence is None:
            return None
        return MealMutation(
            kind=MealMutationKind.REMOVE, record=record, sequence=sequence
        )

    async def commit(self, session: "UserSession", mutation: MealMutation) -> bool:
        """Confirm a staged change, applying its inverse if the store fails."""
        user_id = session.identity.user_id
        try:
            if mutation.kind is MealMutationKind.ADD:
                await asyncio.to_thread(
                    self.repository.create_meal, user_id, mutation.record
                )
            else:
                await asyncio.to_thread(
                    self.repository.delete_meal, user_id, mutation.record.id
                )
        except StoreError:
            _logger.exception(
                "Failed to %s meal %s", mutation.kind.value, mutation.record.id
            )
            _rollback(session, mutation)
            message = (
                "Could not save meal."
                if mutation.kind is MealMutationKind.ADD
                else "Could not delete meal."
            )
            session.notifier.notify(NotificationKind.ERROR, message)
            return False
        if mutation.kind is MealMutationKind.REMOVE:
            session.notifier.notify(NotificationKind.SUCCESS, "Meal removed.")
        return True

    async def add_meal(self, session: "UserSession", record: MealRecord) -> bool:
        """Stage and confirm a new meal."""
        mutation = self.stage_add(session, record)
        if mutation is None:
            return False
        return await self.commit(session, mutation)

    async def remove_meal(self, session: "UserSession", meal_id: str) -> bool:
        """Stage and confirm a meal deletion."""
        mutation = self.stage_remove(session, meal_id)
        if mutation is None:
            return False
        return await self.commit(session, mutation)


def meal_from_analysis(
    result: AnalysisResult, image_url: str | None = None
) -> MealRecord:
    """Build a meal from a photo analysis."""
    return MealRecord.create(
        name=result.food_name,
        calories=result.calories,
        protein=result.protein,
        carbs=result.carbs,
        fat=result.fat,
        portion=result.portion,
        image_url=image_url,
        ingredients=result.ingredients,
    )


def meal_from_recipe(recipe: Recipe) -> MealRecord:
    """Build a one-serving meal from a recipe."""
    return MealRecord.create(
        name=recipe.name,
        calories=recipe.calories,
        protein=recipe.protein,
        carbs=recipe.carbs,
        fat=recipe.fat,
        portion=RECIPE_PORTION,
        ingredients=recipe.ingredients,
    )


def _rollback(session: "UserSession", mutation: MealMutation) -> None:
    if mutation.kind is MealMutationKind.ADD:
        session.ledger.remove(mutation.record.id)
    elif mutation.record.id not in session.ledger:
        session.ledger.reinsert(mutation.record, mutation.sequence)
