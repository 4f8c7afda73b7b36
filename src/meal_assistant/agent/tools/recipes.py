"""
agent.tools.recipes - Recipe search, detail and instructions tools.

Search tools number their results 1..N and hand them back as a CandidateSet;
detail and instructions tools resolve the user's reference against
session.last_candidates before calling the provider.
"""

from __future__ import annotations

import logging

from meal_assistant.application.candidates import Candidate, CandidateSet
from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import EmptyResult, ToolUnavailable
from meal_assistant.domain.models import RecipeDetails, RecipeHit
from meal_assistant.domain.ports import RecipeProviderPort
from meal_assistant.agent.tools.base import (
    BaseTool,
    FindByIngredientsInput,
    RecipeReferenceInput,
    RecipeSearchInput,
    ToolKind,
    ToolResult,
)

logger = logging.getLogger(__name__)

# Applied as a provider-side exclusion only; returned ingredient lists are
# not checked again on our side.
HALAL_EXCLUSIONS: tuple[str, ...] = ("pork", "lard", "alcohol", "wine", "beer")

NOT_AVAILABLE = "Not available"
_CHOOSE_PROMPT = "\nPlease choose a recipe by its number or name."


# ---------------------------------------------------------------------------
# Search tools
# ---------------------------------------------------------------------------

class FindByIngredientsTool(BaseTool):
    """Find recipes that use the ingredients the user already has."""

    kind = ToolKind.FIND_BY_INGREDIENTS
    description = (
        "Find recipes based on available ingredients. "
        "Use when the user lists ingredients they have at home."
    )
    args_schema = FindByIngredientsInput

    def __init__(self, provider: RecipeProviderPort):
        self._provider = provider

    async def execute(self, session: Session, args: FindByIngredientsInput) -> ToolResult:  # type: ignore[override]
        hits = await self._provider.find_by_ingredients(args.ingredient_list, number=5)
        if not hits:
            raise EmptyResult(
                f"I couldn't find any recipes using {args.ingredients}. "
                "Would you like to try different ingredients, or search by dish or cuisine instead?"
            )

        candidates = CandidateSet.from_hits(hits)
        lines = ["Here are some recipes based on your ingredients:", ""]
        for candidate, hit in zip(candidates, hits):
            lines.append(f"{candidate.number}. {candidate.title}")
            missing = ", ".join(hit.missing_ingredients) or "none"
            lines.append(f"   Missing ingredients: {missing}")
            lines.append("")
        lines.append(_CHOOSE_PROMPT.strip())
        return ToolResult(output="\n".join(lines), candidates=candidates)


class ComplexSearchTool(BaseTool):
    """Keyword search with optional cuisine, diet and intolerance filters."""

    kind = ToolKind.COMPLEX_SEARCH
    description = (
        "Search for recipes by dish name or keywords with optional cuisine, diet "
        "and intolerances filters. Use for cuisine preferences or a specific meal."
    )
    args_schema = RecipeSearchInput

    def __init__(self, provider: RecipeProviderPort):
        self._provider = provider

    async def execute(self, session: Session, args: RecipeSearchInput) -> ToolResult:  # type: ignore[override]
        hits = await self._provider.complex_search(
            args.query,
            cuisine=args.cuisine,
            diet=args.diet,
            intolerances=args.intolerances,
            number=args.number,
        )
        if not hits:
            raise EmptyResult(
                f"I couldn't find any recipes for '{args.query}'"
                f"{_filters_phrase(args)}. "
                "Would you like to try a different cuisine or type of dish?"
            )
        return _numbered_result(_search_heading("", args), hits, args.number)


class HalalSearchTool(BaseTool):
    """Complex search with the halal exclusion list sent to the provider."""

    kind = ToolKind.HALAL_SEARCH
    description = (
        "Search for halal recipes by dish name or keywords with optional cuisine, "
        "diet and intolerances filters. Always use this instead of "
        "complex-recipe-search when the user eats halal."
    )
    args_schema = RecipeSearchInput

    def __init__(self, provider: RecipeProviderPort):
        self._provider = provider

    async def execute(self, session: Session, args: RecipeSearchInput) -> ToolResult:  # type: ignore[override]
        hits = await self._provider.complex_search(
            args.query,
            cuisine=args.cuisine,
            diet=args.diet,
            intolerances=args.intolerances,
            exclude_ingredients=list(HALAL_EXCLUSIONS),
            number=args.number,
        )
        if not hits:
            raise EmptyResult(
                "I'm sorry, I couldn't find any halal recipes matching your criteria. "
                "Would you like to try a different cuisine or type of dish?"
            )
        return _numbered_result(_search_heading("halal", args), hits, args.number)


# ---------------------------------------------------------------------------
# Detail tools
# ---------------------------------------------------------------------------

class RecipeInformationTool(BaseTool):
    """Nutrition, preparation time and servings of a previously listed recipe."""

    kind = ToolKind.RECIPE_INFORMATION
    description = (
        "Get calories, protein, fat, carbs, preparation time and servings for a "
        "recipe from the previous search results. Input is the recipe number "
        "(1-5) or its exact name. Use it to check whether a recipe fits the "
        "user's remaining calories."
    )
    args_schema = RecipeReferenceInput

    def __init__(self, provider: RecipeProviderPort):
        self._provider = provider

    async def execute(self, session: Session, args: RecipeReferenceInput) -> ToolResult:  # type: ignore[override]
        candidate = session.last_candidates.resolve(args.reference)

        try:
            details = await self._provider.get_information(candidate.external_id)
            notice = ""
        except ToolUnavailable as exc:
            logger.warning(
                "Recipe information unavailable for %d (%s): %s",
                candidate.external_id, candidate.title, exc,
            )
            details = RecipeDetails(recipe_id=candidate.external_id)
            notice = f"\n(The recipe provider could not be reached: {exc})"

        return ToolResult(output=format_recipe_information(candidate, details) + notice)


class RecipeInstructionsTool(BaseTool):
    """Step-by-step instructions of a previously listed recipe."""

    kind = ToolKind.RECIPE_INSTRUCTIONS
    description = (
        "Get step-by-step cooking instructions for a recipe from the previous "
        "search results. Input is the recipe number (1-5) or its exact name. "
        "Use once the user has chosen a recipe to cook."
    )
    args_schema = RecipeReferenceInput

    def __init__(self, provider: RecipeProviderPort):
        self._provider = provider

    async def execute(self, session: Session, args: RecipeReferenceInput) -> ToolResult:  # type: ignore[override]
        candidate = session.last_candidates.resolve(args.reference)

        lines = [f"Recipe Instructions for {candidate.title}:", ""]
        try:
            steps = await self._provider.get_instructions(candidate.external_id)
        except ToolUnavailable as exc:
            logger.warning(
                "Recipe instructions unavailable for %d (%s): %s",
                candidate.external_id, candidate.title, exc,
            )
            lines.append("Instructions: Not available")
            lines.append(f"(The recipe provider could not be reached: {exc})")
            return ToolResult(output="\n".join(lines))

        if steps:
            lines.extend(f"{i}. {step}" for i, step in enumerate(steps, start=1))
        else:
            lines.append("No instructions available for this recipe.")
        return ToolResult(output="\n".join(lines))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_recipe_information(candidate: Candidate, details: RecipeDetails) -> str:
    def nutrient(name: str) -> str:
        value = details.nutrient(name)
        return str(value) if value is not None else NOT_AVAILABLE

    prep = (
        f"{details.ready_in_minutes} minutes"
        if details.ready_in_minutes else NOT_AVAILABLE
    )
    servings = str(details.servings) if details.servings else NOT_AVAILABLE
    return "\n".join([
        f"Recipe Information for {candidate.title}:",
        "",
        f"Calories: {nutrient('Calories')}",
        f"Protein: {nutrient('Protein')}",
        f"Fat: {nutrient('Fat')}",
        f"Carbs: {nutrient('Carbohydrates')}",
        f"Preparation Time: {prep}",
        f"Servings: {servings}",
    ])


def _numbered_result(heading: str, hits: list[RecipeHit], limit: int) -> ToolResult:
    candidates = CandidateSet.from_hits(hits[:limit])
    lines = [heading, ""]
    lines.extend(f"{c.number}. {c.title}" for c in candidates)
    lines.append(_CHOOSE_PROMPT)
    return ToolResult(output="\n".join(lines), candidates=candidates)


def _search_heading(label: str, args: RecipeSearchInput) -> str:
    words = ["Here are some"]
    if label:
        words.append(label)
    if args.cuisine:
        words.append(args.cuisine)
    words.append(f"recipes for '{args.query}'")
    return " ".join(words) + _filters_phrase(args) + ":"


def _filters_phrase(args: RecipeSearchInput) -> str:
    parts = []
    if args.diet:
        parts.append(f"suitable for a {args.diet} diet")
    if args.intolerances:
        parts.append(f"without {args.intolerances}")
    return (" " + " ".join(parts)) if parts else ""
