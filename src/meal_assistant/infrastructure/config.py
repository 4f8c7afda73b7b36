"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from environment or passed
explicitly in tests. Credentials are checked by require_* helpers, which the
composition root calls once at start-up so a missing key fails fast instead
of on the first tool call.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from meal_assistant.domain.exceptions import MisconfiguredCredential


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the meal assistant.

    No module-level globals; construct via from_env() or pass explicitly
    in tests.
    """

    # ── Centralized LLM Provider ────────────────────────────────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "groq"

    # Model names; only the one matching llm_provider is used.
    llm_model_ollama: str = "llama3.2"
    llm_model_openai: str = "gpt-4.1-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000

    # Connection details
    ollama_base_url: str = "http://localhost:11434/"
    groq_api_key: str = ""
    openai_api_key: str = ""

    # ── External lookups ────────────────────────────────────────
    spoonacular_api_key: str = ""
    spoonacular_base_url: str = "https://api.spoonacular.com"
    google_search_api_key: str = ""
    google_search_engine_id: str = ""
    google_search_url: str = "https://www.googleapis.com/customsearch/v1"
    restaurant_search_location: str = "Singapore"

    # Surrounding diet-tracking app (user profile + food log). Empty disables it.
    profile_api_base_url: str = ""

    # ── Time budgets (seconds) ──────────────────────────────────
    http_timeout_seconds: float = 10.0
    tool_timeout_seconds: float = 20.0
    model_timeout_seconds: float = 60.0

    # Number of past messages sent to the model with every pass
    history_max_messages: int = 50

    log_level: str = "INFO"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        return self.llm_model_ollama

    def require_spoonacular(self) -> str:
        if not self.spoonacular_api_key:
            raise MisconfiguredCredential(
                "Spoonacular API key not set. Set SPOONACULAR_API_KEY in your environment."
            )
        return self.spoonacular_api_key

    def require_google_search(self) -> tuple[str, str]:
        if not self.google_search_api_key or not self.google_search_engine_id:
            raise MisconfiguredCredential(
                "Google API key or CSE ID not set. Set GOOGLE_SEARCH_API_KEY and "
                "GOOGLE_SEARCH_ENGINE_ID in your environment."
            )
        return self.google_search_api_key, self.google_search_engine_id

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from environment variables (and a .env file if present)."""
        from dotenv import load_dotenv
        load_dotenv()

        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "groq").lower().strip(),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4.1-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1000")),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),

            spoonacular_api_key=os.getenv("SPOONACULAR_API_KEY", ""),
            spoonacular_base_url=os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com"),
            google_search_api_key=os.getenv("GOOGLE_SEARCH_API_KEY", ""),
            google_search_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID", ""),
            restaurant_search_location=os.getenv("RESTAURANT_SEARCH_LOCATION", "Singapore"),
            profile_api_base_url=os.getenv("PROFILE_API_BASE_URL", ""),

            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
            tool_timeout_seconds=float(os.getenv("TOOL_TIMEOUT_SECONDS", "20")),
            model_timeout_seconds=float(os.getenv("MODEL_TIMEOUT_SECONDS", "60")),
            history_max_messages=int(os.getenv("HISTORY_MAX_MESSAGES", "50")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for an adapter process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
