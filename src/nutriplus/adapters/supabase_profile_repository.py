"""Supabase repository for user profiles."""

import logging
from dataclasses import dataclass

from supabase import Client

from nutriplus.adapters.supabase_errors import store_call
from nutriplus.domain.goals import MacroGoals
from nutriplus.services.goals import ProfileRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for goals stored on the profile row."""

    client: Client

    def get_goals(self, user_id: str) -> MacroGoals | None:
        """Return the stored goals for a user."""
        with store_call("load goals"):
            response = (
                self.client.table("profiles")
                .select("goals")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        goals = response.data[0].get("goals")
        if not isinstance(goals, dict):
            return None
        negative = sorted(
            name
            for name, value in goals.items()
            if isinstance(value, int | float) and value < 0
        )
        if negative:
            _logger.warning(
                "Stored goals for user %s have negative %s; treating them as zero",
                user_id,
                ", ".join(negative),
            )
        return MacroGoals.from_dict(goals)

    def update_goals(self, user_id: str, goals: MacroGoals) -> None:
        """Replace the goals on the user's profile."""
        with store_call("save goals"):
            self.client.table("profiles").update({"goals": goals.as_dict()}).eq(
                "id", user_id
            ).execute()
