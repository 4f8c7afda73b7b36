"""
agent.prompt - System directive and synthesis prompt for the meal assistant.

The directive embeds the session's calorie budget and dietary preference and
names the keyword-search tool that matches that preference.
"""

from __future__ import annotations

from meal_assistant.application.context import Session
from meal_assistant.agent.tools.base import ToolKind


def build_system_prompt(session: Session, location: str = "Singapore") -> str:
    """Build the system directive for one session.

    Args:
        session:  Supplies remaining calories and dietary preference.
        location: Where restaurant searches are run.

    Returns:
        The directive text sent as the first (system) message of every pass.
    """
    preference = session.dietary_preference or "none stated"
    keyword_search = (
        ToolKind.HALAL_SEARCH if session.is_halal else ToolKind.COMPLEX_SEARCH
    ).value
    where = f" in {location}" if location else ""
    diet_in_query = (
        f' including "{session.dietary_preference}" in the query'
        if session.dietary_preference else ""
    )

    return f"""You are a helpful meal planning assistant. The user has {session.remaining_calories} calories left for the day and their dietary preference is {preference}.
Always consider their dietary preference in your recommendations.

Follow these steps:
1. Ask if they want to cook or eat out today.

If they want to cook:
2. Ask if they have specific ingredients, a cuisine preference, or a meal in mind.
3. Use the appropriate tool based on their response:
   - {ToolKind.FIND_BY_INGREDIENTS.value} for specific ingredients
   - {keyword_search} for cuisine preferences or specific meals
4. Use {ToolKind.RECIPE_INFORMATION.value} to check if recipes fit their calorie needs. Refer to recipes by the number or exact name shown in the last search results.
5. If a recipe doesn't fit, suggest adjusting portions or finding alternatives.
6. Once they choose a recipe, use {ToolKind.RECIPE_INSTRUCTIONS.value} for cooking steps.
7. If any of the tools fail, say so briefly and answer based on what the tools did return.

If they want to eat out:
2. Ask for their preferred cuisine or restaurant type.
3. Use {ToolKind.RESTAURANT_SEARCH.value} to find restaurants{where}{diet_in_query}.
4. Suggest options and ask for their choice.
5. If applicable, emphasize restaurants that cater to their dietary preference.
6. Calorie figures from restaurant search are unverified estimates; say so.

Additional instructions:
- Be attentive to requests for new suggestions or alternatives. If the user asks for different options, use the appropriate tool to find new recipes or restaurants.
- Always be concise and relevant in your responses.
- Ask for clarification if the user's request is unclear.
- Do not invent information, recipes, nutrition values or instructions. Only use data from the provided tools.
- If unsure about dietary compliance, recommend the user to verify with the restaurant or check ingredients carefully.
- Keep track of the conversation context and refer back to previous suggestions or requests when appropriate.

Remember, your goal is to help the user find suitable meal options that fit their dietary preferences and calorie needs, whether they're cooking at home or eating out."""


def build_synthesis_prompt(tool_outputs: list[tuple[str, str]]) -> str:
    """Ask the model to turn raw tool outputs into one grounded answer."""
    sections = "\n\n".join(f"{name}: {output}" for name, output in tool_outputs)
    return (
        "Based on these tool results, provide a summary and recommendation for "
        "the user. Use only facts that appear in the results. If a result is an "
        "error or a question, pass that on to the user in plain words.\n\n"
        f"{sections}"
    )
