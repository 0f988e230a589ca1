"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutriplus.adapters.supabase_errors import store_call
from nutriplus.domain.errors import StoreError
from nutriplus.domain.meals import MealRecord
from nutriplus.services.meals import MealRepository


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for the meals table."""

    client: Client

    def list_meals(self, user_id: str) -> list[MealRecord]:
        """Return a user's meals in logging order."""
        with store_call("load meals"):
            response = (
                self.client.table("meals")
                .select("*")
                .eq("user_id", user_id)
                .order("timestamp", desc=False)
                .execute()
            )
        return [_parse_row(row) for row in response.data or []]

    def create_meal(self, user_id: str, record: MealRecord) -> None:
        """Insert a meal under the id assigned locally."""
        with store_call("save meal"):
            response = (
                self.client.table("meals")
                .insert(
                    {
                        "id": record.id,
                        "user_id": user_id,
                        "name": record.name,
                        "timestamp": record.timestamp.isoformat(),
                        "calories": record.calories,
                        "protein": record.protein,
                        "carbs": record.carbs,
                        "fat": record.fat,
                        "portion": record.portion,
                        "image_url": record.image_url,
                        "ingredients": list(record.ingredients),
                    }
                )
                .execute()
            )
        if not response.data:
            raise StoreError("Failed to save meal")

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Delete a meal owned by the user."""
        with store_call("delete meal"):
            self.client.table("meals").delete().eq("id", meal_id).eq(
                "user_id", user_id
            ).execute()


def _parse_row(row: dict[str, object]) -> MealRecord:
    timestamp_raw = row.get("timestamp")
    timestamp = (
        datetime.fromisoformat(timestamp_raw)
        if isinstance(timestamp_raw, str) and timestamp_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return MealRecord(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        timestamp=timestamp.astimezone(UTC),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        portion=row.get("portion"),
        image_url=row.get("image_url"),
        ingredients=tuple(row.get("ingredients") or ()),
    )
