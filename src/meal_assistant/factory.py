"""
factory - Composition root for the meal assistant.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get fully configured
services.

Usage:
    from meal_assistant.factory import ServiceFactory
    from meal_assistant.infrastructure.config import Settings

    factory = ServiceFactory(Settings.from_env())
    factory.initialize()  # one-time startup, fails fast on missing API keys

    session = factory.create_session_starter().start(1800, "halal")
    outcome = await factory.create_orchestrator().handle_turn("chicken rice", session)
"""

from __future__ import annotations

import logging
from typing import Optional

from langchain_core.language_models import BaseChatModel

from meal_assistant.infrastructure.config import Settings
from meal_assistant.infrastructure.llm.llm_builder import build_chat_model
from meal_assistant.infrastructure.persistence.session_store import InMemorySessionStore
from meal_assistant.infrastructure.providers.google_search import GoogleSearchClient
from meal_assistant.infrastructure.providers.profile_client import ProfileClient
from meal_assistant.infrastructure.providers.spoonacular import SpoonacularClient
from meal_assistant.domain.ports import ProfileSourcePort, RecipeProviderPort, WebSearchPort
from meal_assistant.application.services.session_starter import SessionStarter
from meal_assistant.agent.orchestrator import Orchestrator
from meal_assistant.agent.tools.recipes import (
    ComplexSearchTool,
    FindByIngredientsTool,
    HalalSearchTool,
    RecipeInformationTool,
    RecipeInstructionsTool,
)
from meal_assistant.agent.tools.registry import ToolRegistry
from meal_assistant.agent.tools.restaurants import RestaurantSearchTool

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root. Wires all dependencies together.

    Call initialize() once at startup, then create services as needed.
    Collaborators may be passed in explicitly (tests, alternative providers);
    anything not passed is built from Settings.
    """

    def __init__(
        self,
        config: Settings,
        *,
        llm: Optional[BaseChatModel] = None,
        recipe_provider: Optional[RecipeProviderPort] = None,
        web_search: Optional[WebSearchPort] = None,
        profile_source: Optional[ProfileSourcePort] = None,
    ):
        self._config = config
        self._llm = llm
        self._recipe_provider = recipe_provider
        self._web_search = web_search
        self._profile_source = profile_source
        self._registry: Optional[ToolRegistry] = None
        self._session_store = InMemorySessionStore()
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def session_store(self) -> InMemorySessionStore:
        return self._session_store

    def initialize(self) -> None:
        """One-time startup: build the shared clients, registry and model.

        Raises:
            MisconfiguredCredential: if a required API key is missing.
        """
        logger.info("Initializing ServiceFactory (llm_provider=%s)...", self._config.llm_provider)

        if self._recipe_provider is None:
            self._recipe_provider = SpoonacularClient(
                api_key=self._config.require_spoonacular(),
                base_url=self._config.spoonacular_base_url,
                timeout=self._config.http_timeout_seconds,
            )
        if self._web_search is None:
            api_key, engine_id = self._config.require_google_search()
            self._web_search = GoogleSearchClient(
                api_key=api_key,
                engine_id=engine_id,
                url=self._config.google_search_url,
                timeout=self._config.http_timeout_seconds,
            )
        if self._profile_source is None and self._config.profile_api_base_url:
            self._profile_source = ProfileClient(
                base_url=self._config.profile_api_base_url,
                timeout=self._config.http_timeout_seconds,
            )
        if self._llm is None:
            self._llm = self._build_llm()

        self._registry = self._build_registry()
        self._initialized = True
        logger.info("ServiceFactory ready (%d tools)", len(self._registry.all()))

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_tool_registry(self) -> ToolRegistry:
        """Return the shared, read-only tool registry."""
        self._ensure_initialized()
        return self._registry

    def create_orchestrator(self) -> Orchestrator:
        """Create an Orchestrator. It holds no session state, so one can serve many sessions."""
        self._ensure_initialized()
        return Orchestrator(
            llm=self._llm,
            tools=self._registry,
            location=self._config.restaurant_search_location,
            tool_timeout=self._config.tool_timeout_seconds,
            model_timeout=self._config.model_timeout_seconds,
            history_window=self._config.history_max_messages,
        )

    def create_session_starter(self) -> SessionStarter:
        self._ensure_initialized()
        return SessionStarter(profile_source=self._profile_source)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_registry(self) -> ToolRegistry:
        recipes = self._recipe_provider
        return ToolRegistry([
            FindByIngredientsTool(recipes),
            ComplexSearchTool(recipes),
            HalalSearchTool(recipes),
            RecipeInformationTool(recipes),
            RecipeInstructionsTool(recipes),
            RestaurantSearchTool(
                self._web_search, location=self._config.restaurant_search_location,
            ),
        ])

    def _build_llm(self) -> BaseChatModel:
        """Build the chat model for the orchestrator."""
        return build_chat_model(
            provider=self._config.llm_provider,
            model=self._config.active_llm_model,
            temperature=self._config.llm_temperature,
            ollama_base_url=self._config.ollama_base_url,
            openai_api_key=self._config.openai_api_key,
            groq_api_key=self._config.groq_api_key,
            max_tokens=self._config.llm_max_tokens,
            timeout=self._config.model_timeout_seconds,
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call factory.initialize() first."
            )
