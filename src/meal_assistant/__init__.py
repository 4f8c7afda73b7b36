"""
meal_assistant - Tool-augmented conversational meal planning.

Layers (imports only point downwards):
    domain/          value objects, exceptions, ports
    application/     session state, candidate set, session start-up
    agent/           tools, registry, prompt, orchestrator
    infrastructure/  config, LLM builder, HTTP providers, session store
    adapters/        REST (FastAPI) and CLI (typer)
"""

__version__ = "0.3.0"
