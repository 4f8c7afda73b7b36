"""
Run the Meal Assistant REST API.

Usage:
    python run_api.py

Environment variables (full list in meal_assistant/infrastructure/config.py):
    LLM_PROVIDER             "groq", "openai" or "ollama" (default: groq)
    GROQ_API_KEY             Required when LLM_PROVIDER=groq
    OPENAI_API_KEY           Required when LLM_PROVIDER=openai
    SPOONACULAR_API_KEY      Required: recipe search, nutrition, instructions
    GOOGLE_SEARCH_API_KEY    Required: restaurant search
    GOOGLE_SEARCH_ENGINE_ID  Required: restaurant search
    PROFILE_API_BASE_URL     Optional: diet-tracking app for calorie budgets
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "meal_assistant.adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
