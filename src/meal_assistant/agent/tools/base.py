"""
agent.tools.base - Tool kinds, typed argument records and the result container.

The catalog is closed: ToolKind enumerates every tool, and each kind owns a
Pydantic argument model that is validated before the tool runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from meal_assistant.application.candidates import MAX_CANDIDATES, CandidateSet
from meal_assistant.application.context import Session


class ToolKind(str, Enum):
    """The six lookup tools. Values are the names the model sees."""
    FIND_BY_INGREDIENTS = "find-recipes-by-ingredients"
    COMPLEX_SEARCH = "complex-recipe-search"
    HALAL_SEARCH = "halal-recipe-search"
    RECIPE_INFORMATION = "get-recipe-information"
    RECIPE_INSTRUCTIONS = "get-recipe-instructions"
    RESTAURANT_SEARCH = "restaurant-search"

    @property
    def is_search(self) -> bool:
        return self in _SEARCH_KINDS


_SEARCH_KINDS = frozenset({
    ToolKind.FIND_BY_INGREDIENTS,
    ToolKind.COMPLEX_SEARCH,
    ToolKind.HALAL_SEARCH,
})


# ---------------------------------------------------------------------------
# Argument records
# ---------------------------------------------------------------------------

class FindByIngredientsInput(BaseModel):
    """Input schema for find-recipes-by-ingredients."""
    ingredients: str = Field(
        min_length=1,
        description="Comma-separated list of ingredients the user has, e.g. 'chicken, rice, garlic'.",
    )

    @property
    def ingredient_list(self) -> list[str]:
        return [item.strip() for item in self.ingredients.split(",") if item.strip()]


class RecipeSearchInput(BaseModel):
    """Input schema for complex-recipe-search and halal-recipe-search."""
    query: str = Field(min_length=1, description="Dish or meal to search for, e.g. 'chicken rice'.")
    cuisine: Optional[str] = Field(default=None, description="Optional cuisine, e.g. 'indian'.")
    diet: Optional[str] = Field(default=None, description="Optional diet, e.g. 'vegetarian'.")
    intolerances: Optional[str] = Field(
        default=None, description="Optional comma-separated intolerances, e.g. 'gluten, dairy'.",
    )
    number: int = Field(
        default=MAX_CANDIDATES, ge=1, le=MAX_CANDIDATES,
        description="How many recipes to return (1-5).",
    )

    @field_validator("cuisine", "diet", "intolerances", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class RecipeReferenceInput(BaseModel):
    """Input schema for get-recipe-information and get-recipe-instructions."""
    reference: str = Field(
        min_length=1,
        description=(
            "The number (1-5) or exact name of a recipe from the most recent "
            "search results shown to the user."
        ),
    )

    @field_validator("reference", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        if isinstance(v, int):
            return str(v)
        return v


class RestaurantSearchInput(BaseModel):
    """Input schema for restaurant-search."""
    query: str = Field(
        min_length=1,
        description="Restaurant name or cuisine type, including any dietary requirement, e.g. 'halal korean'.",
    )


# ---------------------------------------------------------------------------
# Result container and base class
# ---------------------------------------------------------------------------

@dataclass
class ToolResult:
    """Result returned by a tool execution.

    output:      Text fed to the synthesis pass.
    candidates:  Set by search tools on success. The registry writes it into
                 session.last_candidates, replacing whatever was there.
    """
    output: str
    candidates: Optional[CandidateSet] = None


class BaseTool(ABC):
    """Abstract base for all agent tools."""

    kind: ToolKind
    description: str
    args_schema: type[BaseModel]

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    async def execute(self, session: Session, args: BaseModel) -> ToolResult:
        """Execute the tool with validated arguments for one session."""
        ...

    def to_openai_schema(self) -> dict:
        """Function-calling schema accepted by BaseChatModel.bind_tools()."""
        parameters = self.args_schema.model_json_schema()
        parameters.pop("title", None)
        parameters.pop("description", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }
