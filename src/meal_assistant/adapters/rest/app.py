"""
FastAPI application: REST adapter for the meal assistant.

Usage:
    python run_api.py

Or directly:
    uvicorn meal_assistant.adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meal_assistant import __version__
from meal_assistant.adapters.rest.dependencies import set_factory
from meal_assistant.adapters.rest.routers import sessions
from meal_assistant.factory import ServiceFactory
from meal_assistant.infrastructure.config import Settings, configure_logging


def create_app(factory: Optional[ServiceFactory] = None) -> FastAPI:
    """Build the app. Without a factory, one is created from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active = factory
        if active is None:
            config = Settings.from_env()
            configure_logging(config.log_level)
            active = ServiceFactory(config)
            active.initialize()
        set_factory(active)
        yield
        set_factory(None)

    app = FastAPI(
        title="Meal Assistant",
        version=__version__,
        description="Tool-augmented meal planning chat grounded in recipe and restaurant lookups.",
        lifespan=lifespan,
    )

    # CORS is permissive; tighten allow_origins for production deployments
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(sessions.router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
