"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutriplus.adapters.openai_nutrition_client import OpenAINutritionClient
from nutriplus.adapters.supabase_identity_provider import SupabaseIdentityProvider
from nutriplus.adapters.supabase_meal_repository import SupabaseMealRepository
from nutriplus.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutriplus.adapters.supabase_saved_recipe_repository import (
    SupabaseSavedRecipeRepository,
)
from nutriplus.config import Settings
from nutriplus.services.goals import GoalService
from nutriplus.services.meals import MealLogService
from nutriplus.services.recipes import RecipeService
from nutriplus.services.sessions import SessionService
from nutriplus.services.stats import StatsService, get_locale
from nutriplus.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    meal_log_service: MealLogService
    goal_service: GoalService
    recipe_service: RecipeService
    vision_service: VisionService
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    openai_client = OpenAINutritionClient.create(resolved_settings.openai_api_key)
    meal_log_service = MealLogService(SupabaseMealRepository(supabase_client))
    goal_service = GoalService(SupabaseProfileRepository(supabase_client))
    recipe_service = RecipeService(
        client=openai_client,
        repository=SupabaseSavedRecipeRepository(supabase_client),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    session_service = SessionService(
        identity_provider=SupabaseIdentityProvider(supabase_client),
        meal_log_service=meal_log_service,
        goal_service=goal_service,
        recipe_service=recipe_service,
        default_timezone=resolved_settings.default_timezone,
        trial_days=resolved_settings.trial_days,
        onboarding_bypasses_lock=resolved_settings.onboarding_bypasses_lock,
        notification_limit=resolved_settings.notification_limit,
    )
    stats_service = StatsService(locale=get_locale(resolved_settings.locale))

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        meal_log_service=meal_log_service,
        goal_service=goal_service,
        recipe_service=recipe_service,
        vision_service=vision_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
