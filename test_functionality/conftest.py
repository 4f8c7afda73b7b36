"""test_functionality/conftest.py

Shared fakes and fixtures: a scripted chat model, in-memory recipe and web
search providers, and a fully populated tool registry.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Union

import pytest
from langchain_core.messages import AIMessage, BaseMessage

from meal_assistant.application.context import Session
from meal_assistant.domain.models import Nutrient, RecipeDetails, RecipeHit, SearchHit
from meal_assistant.agent.tools.recipes import (
    ComplexSearchTool,
    FindByIngredientsTool,
    HalalSearchTool,
    RecipeInformationTool,
    RecipeInstructionsTool,
)
from meal_assistant.agent.tools.registry import ToolRegistry
from meal_assistant.agent.tools.restaurants import RestaurantSearchTool

Scripted = Union[AIMessage, Exception, Callable[[list[BaseMessage]], AIMessage]]


# ---------------------------------------------------------------------------
# Chat model
# ---------------------------------------------------------------------------

class FakeChatModel:
    """Returns scripted responses in order and records every call.

    A scripted entry may be an AIMessage, an exception to raise, or a
    callable receiving the message list (used to echo tool results).
    """

    def __init__(self, responses: list[Scripted]):
        self._responses = list(responses)
        self.calls: list[list[BaseMessage]] = []
        self.bound_tools: list[dict] = []
        self.delay: float = 0.0

    def bind_tools(self, tools: list[dict], **kwargs: Any) -> FakeChatModel:
        self.bound_tools = list(tools)
        return self

    async def ainvoke(self, messages: list[BaseMessage], **kwargs: Any) -> AIMessage:
        self.calls.append(list(messages))
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self._responses:
            raise AssertionError("FakeChatModel ran out of scripted responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(messages)
        return response

    @property
    def bound_names(self) -> list[str]:
        return [t["function"]["name"] for t in self.bound_tools]


def tool_call(name: str, args: Any, call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


def tool_calls(*calls: tuple[str, dict]) -> AIMessage:
    return AIMessage(
        content="",
        tool_calls=[
            {"name": name, "args": args, "id": f"call_{i}"}
            for i, (name, args) in enumerate(calls, start=1)
        ],
    )


def echo_synthesis(messages: list[BaseMessage]) -> AIMessage:
    """Synthesis stand-in: repeats the tool results it was given."""
    return AIMessage(content="Summary:\n" + str(messages[-1].content))


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

FIVE_HITS = [
    RecipeHit(recipe_id=101, title="Hainanese Chicken Rice"),
    RecipeHit(recipe_id=102, title="Chicken Biryani"),
    RecipeHit(recipe_id=103, title="Nasi Lemak"),
    RecipeHit(recipe_id=104, title="Chicken Satay"),
    RecipeHit(recipe_id=105, title="Claypot Rice"),
]

BIRYANI_DETAILS = RecipeDetails(
    recipe_id=102,
    nutrients={
        "Calories": Nutrient("Calories", 450.0, "kcal"),
        "Protein": Nutrient("Protein", 32.5, "g"),
        "Fat": Nutrient("Fat", 14.0, "g"),
        "Carbohydrates": Nutrient("Carbohydrates", 48.0, "g"),
    },
    ready_in_minutes=45,
    servings=4,
)


class FakeRecipeProvider:
    """In-memory RecipeProviderPort. Set *_error to make a method raise."""

    def __init__(self):
        self.ingredient_hits: list[RecipeHit] = list(FIVE_HITS)
        self.search_hits: list[RecipeHit] = list(FIVE_HITS)
        self.details: dict[int, RecipeDetails] = {102: BIRYANI_DETAILS}
        self.steps: dict[int, list[str]] = {
            102: ["Marinate the chicken.", "Par-boil the rice.", "Layer and steam."],
        }
        self.search_error: Optional[Exception] = None
        self.ingredients_error: Optional[Exception] = None
        self.information_error: Optional[Exception] = None
        self.instructions_error: Optional[Exception] = None
        self.search_delay: float = 0.0
        self.calls: list[tuple[str, dict]] = []

    async def find_by_ingredients(self, ingredients, number=5):
        self.calls.append(("find_by_ingredients", {"ingredients": ingredients, "number": number}))
        if self.ingredients_error:
            raise self.ingredients_error
        return self.ingredient_hits[:number]

    async def complex_search(
        self, query, *, cuisine=None, diet=None, intolerances=None,
        exclude_ingredients=None, number=5,
    ):
        self.calls.append(("complex_search", {
            "query": query, "cuisine": cuisine, "diet": diet,
            "intolerances": intolerances, "exclude_ingredients": exclude_ingredients,
            "number": number,
        }))
        if self.search_delay:
            await asyncio.sleep(self.search_delay)
        if self.search_error:
            raise self.search_error
        return self.search_hits[:number]

    async def get_information(self, recipe_id):
        self.calls.append(("get_information", {"recipe_id": recipe_id}))
        if self.information_error:
            raise self.information_error
        return self.details.get(recipe_id, RecipeDetails(recipe_id=recipe_id))

    async def get_instructions(self, recipe_id):
        self.calls.append(("get_instructions", {"recipe_id": recipe_id}))
        if self.instructions_error:
            raise self.instructions_error
        return self.steps.get(recipe_id, [])

    def called(self, method: str) -> list[dict]:
        return [kwargs for name, kwargs in self.calls if name == method]


class FakeWebSearch:
    def __init__(self, hits: Optional[list[SearchHit]] = None):
        self.hits = hits if hits is not None else [
            SearchHit(
                title="Tian Tian Chicken Rice | Website",
                snippet="Famous hawker stall. A plate has about 600 calories. Open daily.",
            ),
            SearchHit(title="Zam Zam", snippet="Murtabak since 1908. Halal certified."),
        ]
        self.error: Optional[Exception] = None
        self.queries: list[str] = []

    async def search(self, query, num=5):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.hits[:num]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def provider() -> FakeRecipeProvider:
    return FakeRecipeProvider()


@pytest.fixture
def web_search() -> FakeWebSearch:
    return FakeWebSearch()


@pytest.fixture
def registry(provider, web_search) -> ToolRegistry:
    return ToolRegistry([
        FindByIngredientsTool(provider),
        ComplexSearchTool(provider),
        HalalSearchTool(provider),
        RecipeInformationTool(provider),
        RecipeInstructionsTool(provider),
        RestaurantSearchTool(web_search, location="Singapore"),
    ])


@pytest.fixture
def session() -> Session:
    return Session(remaining_calories=1800, dietary_preference="")


@pytest.fixture
def halal_session() -> Session:
    return Session(remaining_calories=1800, dietary_preference="halal")


def run(coro):
    """Drive a coroutine from a plain pytest function."""
    return asyncio.run(coro)
