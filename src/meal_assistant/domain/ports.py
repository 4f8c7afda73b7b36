"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Tools and services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, runtime_checkable

from meal_assistant.domain.models import (
    FoodLogEntry,
    RecipeDetails,
    RecipeHit,
    SearchHit,
    UserProfile,
)


# ---------------------------------------------------------------------------
# External lookup ports
# ---------------------------------------------------------------------------

@runtime_checkable
class RecipeProviderPort(Protocol):
    """Recipe search, detail and instructions lookups keyed by provider id.

    Implementations raise ToolUnavailable (or ToolTimeout) on failure.
    """

    async def find_by_ingredients(
        self, ingredients: list[str], number: int = 5,
    ) -> list[RecipeHit]: ...

    async def complex_search(
        self,
        query: str,
        *,
        cuisine: Optional[str] = None,
        diet: Optional[str] = None,
        intolerances: Optional[str] = None,
        exclude_ingredients: Optional[list[str]] = None,
        number: int = 5,
    ) -> list[RecipeHit]: ...

    async def get_information(self, recipe_id: int) -> RecipeDetails: ...

    async def get_instructions(self, recipe_id: int) -> list[str]: ...


@runtime_checkable
class WebSearchPort(Protocol):
    """Keyword web search returning titles and snippets."""

    async def search(self, query: str, num: int = 5) -> list[SearchHit]: ...


# ---------------------------------------------------------------------------
# Surrounding-application ports
# ---------------------------------------------------------------------------

@runtime_checkable
class ProfileSourcePort(Protocol):
    """User profile and daily food log of the surrounding application.

    Implementations raise ProfileUnavailable on failure.
    """

    async def get_profile(self, access_token: str) -> UserProfile: ...

    async def get_food_log(
        self, access_token: str, day: date,
    ) -> list[FoodLogEntry]: ...
