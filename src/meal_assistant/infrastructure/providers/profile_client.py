"""
infrastructure.providers.profile_client - HTTP client for the diet-tracking app.

Implements ProfileSourcePort against the surrounding application's
/api/user-data and /api/user-food-log endpoints, forwarding the caller's
bearer token. Token issuance and validation belong to that application.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import requests

from meal_assistant.domain.exceptions import ProfileUnavailable
from meal_assistant.domain.models import FoodLogEntry, UserProfile
from meal_assistant.infrastructure.providers.http import JSONGetter

logger = logging.getLogger(__name__)


class ProfileClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._http = JSONGetter(
            "Profile API", error=ProfileUnavailable, timeout=timeout, session=session,
        )

    async def get_profile(self, access_token: str) -> UserProfile:
        data = await self._http.get(
            f"{self._base_url}/api/user-data", headers=_auth(access_token),
        )
        if not isinstance(data, dict) or data.get("target_calories") is None:
            raise ProfileUnavailable("User profile has no target_calories")

        try:
            target = int(float(data["target_calories"]))
        except (TypeError, ValueError) as e:
            raise ProfileUnavailable(
                f"Invalid target_calories in user profile: {data['target_calories']!r}"
            ) from e

        return UserProfile(
            target_calories=target,
            dietary_preference=data.get("dietary_preferences") or "",
            goal=data.get("goal") or "",
        )

    async def get_food_log(self, access_token: str, day: date) -> list[FoodLogEntry]:
        data = await self._http.get(
            f"{self._base_url}/api/user-food-log",
            params={"date": day.isoformat()},
            headers=_auth(access_token),
        )
        if not isinstance(data, list):
            raise ProfileUnavailable("Food log response is not a list")

        entries = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning("Skipping malformed food log entry: %r", item)
                continue
            try:
                calories = float(item.get("calories") or 0)
            except (TypeError, ValueError):
                logger.warning("Skipping food log entry with invalid calories: %r", item)
                continue
            entries.append(FoodLogEntry(
                food_name=item.get("food_name", ""),
                calories=calories,
                meal_type=item.get("meal_type", ""),
            ))
        return entries


def _auth(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}
