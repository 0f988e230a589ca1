"""JSON shapes returned by the API."""

from nutriplus.domain.entitlement import EntitlementState
from nutriplus.domain.goals import MacroGoals, MacroProgress
from nutriplus.domain.meals import MealRecord
from nutriplus.domain.recipes import Recipe
from nutriplus.domain.stats import Bucket, MacroTotals
from nutriplus.services.notifications import Notification


def serialize_meal(record: MealRecord) -> dict[str, object]:
    return {
        "id": record.id,
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


def serialize_totals(totals: MacroTotals) -> dict[str, float]:
    return {
        "calories": totals.calories,
        "protein": totals.protein,
        "carbs": totals.carbs,
        "fat": totals.fat,
    }


def serialize_goals(goals: MacroGoals) -> dict[str, float]:
    return goals.as_dict()


def serialize_progress(progress: MacroProgress | None) -> dict[str, object] | None:
    if progress is None:
        return None
    return {
        "current": progress.current,
        "target": progress.target,
        "percent": progress.percent,
        "display_percent": progress.display_percent,
        "over_target": progress.over_target,
        "label": progress.label,
    }


def serialize_bucket(bucket: Bucket) -> dict[str, object]:
    return {
        "label": bucket.label,
        "start": bucket.start.isoformat(),
        "end": bucket.end.isoformat(),
        "calories": bucket.calories,
    }


def serialize_entitlement(state: EntitlementState) -> dict[str, object]:
    return {
        "tag": state.tag.value,
        "trial_days_remaining": state.trial_days_remaining,
        "locked": state.is_locked,
    }


def serialize_recipe(recipe: Recipe) -> dict[str, object]:
    return recipe.model_dump()


def serialize_notification(notification: Notification) -> dict[str, object]:
    return {
        "kind": notification.kind.value,
        "message": notification.message,
        "created_at": notification.created_at.isoformat(),
    }
