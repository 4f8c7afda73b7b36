"""
agent.tools.restaurants - Restaurant search over a web search provider.

Calorie figures are scraped from result snippets with a regular expression.
They are labeled as unverified estimates in the output and must never be
presented as exact nutrition data.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import EmptyResult
from meal_assistant.domain.models import RestaurantHit, SearchHit
from meal_assistant.domain.ports import WebSearchPort
from meal_assistant.agent.tools.base import (
    BaseTool,
    RestaurantSearchInput,
    ToolKind,
    ToolResult,
)

logger = logging.getLogger(__name__)

_CALORIE_PATTERN = re.compile(r"(\d+)\s*calories?", re.IGNORECASE)
_WEBSITE_SUFFIX = re.compile(r"[|] Website.*$")

MAX_RESTAURANTS = 5

DISCLAIMER = (
    "Note: Calorie information may not be available for all restaurants. "
    "Figures above are unverified estimates taken from search snippets; please "
    "check with the restaurant for accurate and up-to-date nutritional information."
)


def extract_calorie_estimate(snippet: str) -> Optional[int]:
    """First integer immediately followed by "calorie(s)", or None."""
    match = _CALORIE_PATTERN.search(snippet or "")
    return int(match.group(1)) if match else None


def to_restaurant_hit(hit: SearchHit) -> RestaurantHit:
    title = _WEBSITE_SUFFIX.sub("", hit.title).strip()
    first_sentence = (hit.snippet or "").split(". ")[0].strip()
    return RestaurantHit(
        title=title,
        snippet=first_sentence,
        calorie_estimate=extract_calorie_estimate(hit.snippet),
    )


class RestaurantSearchTool(BaseTool):
    """Search restaurants, menus and any calorie figures mentioned online."""

    kind = ToolKind.RESTAURANT_SEARCH
    description = (
        "Search for restaurants, including menu and calorie information when "
        "available. Input is a restaurant name or cuisine type; include the "
        "user's dietary requirement (e.g. 'halal') in the query when relevant. "
        "Use when the user wants to eat out."
    )
    args_schema = RestaurantSearchInput

    def __init__(self, search: WebSearchPort, location: str = "Singapore"):
        self._search = search
        self._location = location

    async def execute(self, session: Session, args: RestaurantSearchInput) -> ToolResult:  # type: ignore[override]
        where = f" {self._location}" if self._location else ""
        query = f"{args.query} restaurant{where} menu calories"
        # Provider errors propagate: this call fails, sibling tools still run.
        hits = await self._search.search(query, num=MAX_RESTAURANTS)
        if not hits:
            raise EmptyResult(
                f"I couldn't find any restaurants for '{args.query}'. "
                "Would you like to try a different cuisine or restaurant name?"
            )

        restaurants = [to_restaurant_hit(h) for h in hits[:MAX_RESTAURANTS]]
        logger.info(
            "Restaurant search '%s': %d result(s), %d with a calorie estimate",
            args.query, len(restaurants),
            sum(1 for r in restaurants if r.calorie_estimate is not None),
        )

        heading = f"Information about \"{args.query}\" restaurants"
        if self._location:
            heading += f" in {self._location}"
        lines = [heading + ":", ""]
        for i, restaurant in enumerate(restaurants, start=1):
            lines.append(f"{i}. {restaurant.title}")
            if restaurant.snippet:
                lines.append(f"   {restaurant.snippet}")
            if restaurant.calorie_estimate is not None:
                lines.append(
                    f"   Calorie info found (unverified estimate): "
                    f"approximately {restaurant.calorie_estimate} calories"
                )
            lines.append("")
        lines.append(DISCLAIMER)
        return ToolResult(output="\n".join(lines))
