"""
adapters.cli.main - CLI adapter for the meal assistant.

Mirrors src/meal_assistant/adapters/rest/ but for terminal use. Uses the same
ServiceFactory, SessionStarter and Orchestrator as the REST API so all
behaviour is identical.

Commands
--------
  chat    Interactive meal-planning chat
  ask     One-shot question (a fresh session per call)
  tools   List the lookup tools the assistant can call

Usage
-----
  meal-assistant chat --calories 1800 --diet halal
  meal-assistant chat --token <bearer token>        # budget from the diet-tracking app
  meal-assistant ask "I want chicken rice" --calories 900
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from meal_assistant import __version__
from meal_assistant.application.context import Session
from meal_assistant.application.services.session_starter import SessionStarter
from meal_assistant.domain.exceptions import MisconfiguredCredential, ProfileUnavailable
from meal_assistant.factory import ServiceFactory
from meal_assistant.infrastructure.config import Settings, configure_logging

console = Console()
app = typer.Typer(
    help="Meal Assistant CLI",
    add_completion=False,
    no_args_is_help=True,
)

_EXIT_WORDS = ("exit", "quit", "q", "bye")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _make_factory() -> ServiceFactory:
    """Create and initialize a ServiceFactory, exiting cleanly on missing keys."""
    config = Settings.from_env()
    configure_logging("WARNING" if config.log_level.upper() == "INFO" else config.log_level)
    factory = ServiceFactory(config)
    try:
        factory.initialize()
    except MisconfiguredCredential as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    return factory


async def _open_session(
    starter: SessionStarter,
    calories: Optional[int],
    diet: str,
    token: Optional[str],
) -> Session:
    if calories is not None:
        return starter.start(calories, diet)
    if token:
        try:
            return await starter.start_from_profile(token)
        except ProfileUnavailable as exc:
            console.print(f"[bold red]Could not load your profile:[/bold red] {exc}")
            raise typer.Exit(code=1)
    console.print(
        "[bold red]No calorie budget.[/bold red] "
        "Pass [bold]--calories[/bold], or [bold]--token[/bold] with PROFILE_API_BASE_URL set."
    )
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"meal-assistant v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def chat(
    calories: Optional[int] = typer.Option(None, "--calories", "-c", min=0, help="Calories left for today."),
    diet: str = typer.Option("", "--diet", "-d", help="Dietary preference, e.g. halal or vegan."),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token for the diet-tracking app."),
) -> None:
    """Start an interactive meal-planning chat."""
    factory = _make_factory()

    async def _run() -> None:
        session = await _open_session(factory.create_session_starter(), calories, diet, token)
        orchestrator = factory.create_orchestrator()

        console.print(Panel(
            f"[bold]Meal Assistant[/bold]\n"
            f"Calories left: [bold]{session.remaining_calories}[/bold]   "
            f"Preference: [bold]{session.dietary_preference or 'none'}[/bold]\n"
            "Type your message, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))
        console.print(Panel(Markdown(session.history[-1].content), title="Assistant", border_style="green"))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[dim]Goodbye![/dim]")
                break

            if user_input.strip().lower() in _EXIT_WORDS:
                console.print("[dim]Goodbye![/dim]")
                break

            if not user_input.strip():
                continue

            with console.status("[bold cyan]Thinking…", spinner="dots"):
                outcome = await orchestrator.handle_turn(user_input, session)

            if outcome.tool_runs:
                used = ", ".join(run.name for run in outcome.tool_runs)
                console.print(f"[dim]tools: {used}[/dim]")
            border = "red" if outcome.model_failed else ("yellow" if outcome.degraded else "green")
            console.print()
            console.print(Panel(Markdown(outcome.reply), title="Assistant", border_style=border))

    asyncio.run(_run())


@app.command()
def ask(
    message: str = typer.Argument(..., help="Your meal or recipe question."),
    calories: Optional[int] = typer.Option(None, "--calories", "-c", min=0, help="Calories left for today."),
    diet: str = typer.Option("", "--diet", "-d", help="Dietary preference, e.g. halal or vegan."),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token for the diet-tracking app."),
) -> None:
    """Ask a one-shot question in a fresh session."""
    factory = _make_factory()

    async def _run() -> None:
        session = await _open_session(factory.create_session_starter(), calories, diet, token)
        with console.status("[bold cyan]Thinking…", spinner="dots"):
            outcome = await factory.create_orchestrator().handle_turn(message, session)
        console.print(Panel(Markdown(outcome.reply), title="Assistant", border_style="green"))

    asyncio.run(_run())


@app.command()
def tools() -> None:
    """List the lookup tools available to the assistant."""
    factory = _make_factory()
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Tool", style="cyan")
    table.add_column("Description")
    for tool in factory.create_tool_registry().all():
        table.add_row(tool.name, tool.description)
    console.print(Panel(table, title="Tools", border_style="blue"))


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Meal Assistant CLI"""


if __name__ == "__main__":
    app()
