"""
infrastructure.providers.spoonacular - Spoonacular recipe API client.

Implements RecipeProviderPort (structural typing, no explicit inheritance).
Every failure surfaces as ToolUnavailable (or ToolTimeout) so the tools can
decide whether to degrade or propagate.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import requests

from meal_assistant.domain.exceptions import (
    MisconfiguredCredential,
    ToolTimeout,
    ToolUnavailable,
)
from meal_assistant.domain.models import Nutrient, RecipeDetails, RecipeHit
from meal_assistant.infrastructure.providers.http import JSONGetter

logger = logging.getLogger(__name__)


class SpoonacularClient:
    """Recipe search, nutrition and instructions from api.spoonacular.com."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.spoonacular.com",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise MisconfiguredCredential(
                "Spoonacular API key not set. Set SPOONACULAR_API_KEY in your environment."
            )
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http = JSONGetter(
            "Spoonacular API",
            error=ToolUnavailable,
            timeout_error=ToolTimeout,
            timeout=timeout,
            session=session,
        )

    async def find_by_ingredients(
        self, ingredients: list[str], number: int = 5,
    ) -> list[RecipeHit]:
        data = await self._get(
            "/recipes/findByIngredients",
            ingredients=",".join(ingredients),
            number=number,
        )
        if not isinstance(data, list):
            raise ToolUnavailable("Spoonacular API returned an unexpected response shape")

        try:
            hits = [
                RecipeHit(
                    recipe_id=int(item["id"]),
                    title=item.get("title", ""),
                    missing_ingredients=[
                        ing.get("name", "") for ing in item.get("missedIngredients") or []
                    ],
                )
                for item in data
                if "id" in item
            ]
        except (TypeError, ValueError, AttributeError) as e:
            raise ToolUnavailable("Spoonacular API returned malformed recipe results") from e
        logger.info("findByIngredients(%s): %d hit(s)", ", ".join(ingredients), len(hits))
        return hits

    async def complex_search(
        self,
        query: str,
        *,
        cuisine: Optional[str] = None,
        diet: Optional[str] = None,
        intolerances: Optional[str] = None,
        exclude_ingredients: Optional[list[str]] = None,
        number: int = 5,
    ) -> list[RecipeHit]:
        params: dict[str, Any] = {"query": query, "number": number}
        if cuisine:
            params["cuisine"] = cuisine
        if diet:
            params["diet"] = diet
        if intolerances:
            params["intolerances"] = intolerances
        if exclude_ingredients:
            params["excludeIngredients"] = ",".join(exclude_ingredients)

        data = await self._get("/recipes/complexSearch", **params)
        results = data.get("results") if isinstance(data, dict) else None
        if results is None:
            raise ToolUnavailable("Spoonacular API returned an unexpected response shape")

        try:
            hits = [
                RecipeHit(recipe_id=int(item["id"]), title=item.get("title", ""))
                for item in results
                if "id" in item
            ]
        except (TypeError, ValueError, AttributeError) as e:
            raise ToolUnavailable("Spoonacular API returned malformed recipe results") from e
        logger.info("complexSearch(%r): %d hit(s)", query, len(hits))
        return hits

    async def get_information(self, recipe_id: int) -> RecipeDetails:
        data = await self._get(f"/recipes/{recipe_id}/information", includeNutrition="true")
        if not isinstance(data, dict):
            raise ToolUnavailable("Spoonacular API returned an unexpected response shape")

        nutrition = data.get("nutrition")
        if nutrition is not None and not isinstance(nutrition, dict):
            raise ToolUnavailable("Spoonacular API returned malformed nutrition data")

        nutrients: dict[str, Nutrient] = {}
        for item in (nutrition or {}).get("nutrients") or []:
            nutrient = _parse_nutrient(item)
            if nutrient is None:
                logger.warning("Skipping malformed nutrient for recipe %d: %r", recipe_id, item)
                continue
            nutrients[nutrient.name] = nutrient

        return RecipeDetails(
            recipe_id=recipe_id,
            nutrients=nutrients,
            ready_in_minutes=_positive_int(data.get("readyInMinutes")),
            servings=_positive_int(data.get("servings")),
        )

    async def get_instructions(self, recipe_id: int) -> list[str]:
        data = await self._get(f"/recipes/{recipe_id}/analyzedInstructions")
        if not isinstance(data, list):
            raise ToolUnavailable("Spoonacular API returned an unexpected response shape")
        if not data:
            return []
        # Only the first instruction block, as the provider lists the main recipe first
        block = data[0]
        if not isinstance(block, dict):
            raise ToolUnavailable("Spoonacular API returned malformed instructions")
        return [
            step["step"].strip()
            for step in block.get("steps") or []
            if isinstance(step, dict) and isinstance(step.get("step"), str) and step["step"].strip()
        ]

    async def _get(self, path: str, **params: Any) -> Any:
        return await self._http.get(
            self._base_url + path, params={"apiKey": self._api_key, **params},
        )


def _parse_nutrient(item: Any) -> Optional[Nutrient]:
    """One nutrition entry, or None when the name or amount is unusable."""
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    amount = item.get("amount")
    if not name or not isinstance(name, str) or amount is None or isinstance(amount, bool):
        return None
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return Nutrient(name=name, amount=value, unit=str(item.get("unit") or ""))


def _positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None
