"""
infrastructure.llm.llm_builder - Centralized chat-model construction.

The orchestrator needs a tool-calling chat model, so every provider returns a
BaseChatModel. The provider is controlled by the LLM_PROVIDER setting.

Supported providers:
    - "openai"  → langchain_openai.ChatOpenAI
    - "groq"    → langchain_groq.ChatGroq
    - "ollama"  → langchain_ollama.ChatOllama
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel

from meal_assistant.domain.exceptions import MisconfiguredCredential

logger = logging.getLogger(__name__)


def build_chat_model(
    *,
    provider: str,
    model: str,
    temperature: float = 0.7,
    ollama_base_url: str = "http://localhost:11434/",
    openai_api_key: str = "",
    groq_api_key: str = "",
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> BaseChatModel:
    """Build a chat model for the given provider.

    Args:
        provider: One of "openai", "groq", "ollama".
        model: Model name for the selected provider.
        temperature: Sampling temperature.
        ollama_base_url: Ollama server URL (only used when provider="ollama").
        openai_api_key: API key for OpenAI.
        groq_api_key: API key for Groq.
        max_tokens: Maximum tokens per response.
        timeout: Per-request timeout in seconds passed to the client.

    Returns:
        A configured LangChain chat model supporting bind_tools().

    Raises:
        MisconfiguredCredential: If the provider's API key is missing.
        ValueError: If the provider is unknown.
    """
    provider = provider.lower().strip()

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        if not openai_api_key:
            raise MisconfiguredCredential("OPENAI_API_KEY is required when LLM_PROVIDER='openai'")

        kwargs: Dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "api_key": openai_api_key,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.info("Building OpenAI chat model (model=%s)", model)
        return ChatOpenAI(**kwargs)

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not groq_api_key:
            raise MisconfiguredCredential("GROQ_API_KEY is required when LLM_PROVIDER='groq'")

        kwargs = {
            "model": model,
            "temperature": temperature,
            "api_key": groq_api_key,
            "max_tokens": max_tokens if max_tokens is not None else 1000,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.info("Building Groq chat model (model=%s)", model)
        return ChatGroq(**kwargs)

    elif provider == "ollama":
        from langchain_ollama import ChatOllama

        kwargs = {
            "model": model,
            "temperature": temperature,
            "base_url": ollama_base_url,
        }
        if max_tokens is not None:
            kwargs["num_predict"] = max_tokens

        logger.info("Building ChatOllama (model=%s, base_url=%s)", model, ollama_base_url)
        return ChatOllama(**kwargs)

    else:
        raise ValueError(
            f"Unsupported LLM_PROVIDER: '{provider}'. "
            "Must be 'openai', 'groq', or 'ollama'."
        )
