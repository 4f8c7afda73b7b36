"""
application.services.session_starter - Opens a meal-planning session.

Either takes the calorie budget and dietary preference from the caller, or
derives them from the surrounding application's profile and today's food
log (target calories minus what was already logged, never below zero).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import ProfileUnavailable
from meal_assistant.domain.models import FoodLogEntry, Message
from meal_assistant.domain.ports import ProfileSourcePort

logger = logging.getLogger(__name__)

GREETING = (
    "Great! You have {calories} calories remaining for today. "
    "How can I help you with meal planning?"
)


def remaining_calories(target: float, entries: list[FoodLogEntry]) -> int:
    """Target minus consumed calories, clamped at zero."""
    consumed = sum(entry.calories for entry in entries)
    return max(int(round(target - consumed)), 0)


class SessionStarter:
    """Creates sessions and seeds them with the opening assistant message."""

    def __init__(
        self,
        profile_source: Optional[ProfileSourcePort] = None,
        today: Callable[[], date] = date.today,
    ):
        self._profile_source = profile_source
        self._today = today

    @property
    def can_load_profile(self) -> bool:
        return self._profile_source is not None

    def start(self, remaining: int, dietary_preference: str = "") -> Session:
        """Open a session from explicit values."""
        if remaining < 0:
            raise ValueError("remaining calories cannot be negative")
        session = Session(
            remaining_calories=remaining,
            dietary_preference=(dietary_preference or "").strip(),
        )
        session.append(Message.assistant(GREETING.format(calories=remaining)))
        logger.info(
            "Started session %s (remaining=%d, preference=%r)",
            session.session_id, remaining, session.dietary_preference,
        )
        return session

    async def start_from_profile(self, access_token: str) -> Session:
        """Open a session from the user's profile and today's food log.

        Raises:
            ProfileUnavailable: if no profile source is configured or it fails.
        """
        if self._profile_source is None:
            raise ProfileUnavailable("No profile source is configured")

        profile = await self._profile_source.get_profile(access_token)
        entries = await self._profile_source.get_food_log(access_token, self._today())
        remaining = remaining_calories(profile.target_calories, entries)
        logger.info(
            "Loaded profile: target=%d, %d food log entries, remaining=%d",
            profile.target_calories, len(entries), remaining,
        )
        return self.start(remaining, profile.dietary_preference)
