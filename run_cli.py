"""
Run the Meal Assistant CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    chat    Interactive meal-planning chat
    ask     One-shot question in a fresh session
    tools   List the lookup tools

Examples:
    python run_cli.py chat --calories 1800 --diet halal
    python run_cli.py ask "I have chicken, rice and garlic" --calories 900
"""

from meal_assistant.adapters.cli.main import app

if __name__ == "__main__":
    app()
