"""
domain.models - Value objects for the meal assistant.

These are immutable data containers with no business logic and no
dependencies on infrastructure (no LangChain, no requests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """One entry of the conversation transcript. Immutable once appended."""
    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(role=Role.ASSISTANT, content=content)


class TurnState(str, Enum):
    """Where a session is inside the orchestrator's turn cycle."""
    AWAITING_USER_INPUT = "awaiting_user_input"
    TOOL_EXECUTION = "tool_execution"
    SYNTHESIZING = "synthesizing"
    RESPONDED = "responded"


# ---------------------------------------------------------------------------
# Recipe provider results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecipeHit:
    """A single search result from the recipe provider."""
    recipe_id: int
    title: str
    missing_ingredients: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Nutrient:
    name: str
    amount: float
    unit: str

    def __str__(self) -> str:
        return f"{self.amount:g} {self.unit}"


@dataclass(frozen=True)
class RecipeDetails:
    """Nutrition and preparation summary of one recipe.

    Missing provider fields stay None and are rendered as "Not available".
    """
    recipe_id: int
    nutrients: dict[str, Nutrient] = field(default_factory=dict)
    ready_in_minutes: Optional[int] = None
    servings: Optional[int] = None

    def nutrient(self, name: str) -> Optional[Nutrient]:
        return self.nutrients.get(name)


# ---------------------------------------------------------------------------
# Web search results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchHit:
    title: str
    snippet: str
    link: str = ""


@dataclass(frozen=True)
class RestaurantHit:
    """A restaurant search result.

    calorie_estimate is scraped from the snippet text and is advisory only.
    """
    title: str
    snippet: str
    calorie_estimate: Optional[int] = None


# ---------------------------------------------------------------------------
# Profile / food log (collaborators of the session start-up)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserProfile:
    target_calories: int
    dietary_preference: str = ""
    goal: str = ""


@dataclass(frozen=True)
class FoodLogEntry:
    food_name: str
    calories: float
    meal_type: str = ""
