"""
infrastructure.providers.google_search - Google Custom Search JSON API client.

Implements WebSearchPort. Returns titles, snippets and links only; the
restaurant tool does any interpretation of the snippet text.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from meal_assistant.domain.exceptions import (
    MisconfiguredCredential,
    ToolTimeout,
    ToolUnavailable,
)
from meal_assistant.domain.models import SearchHit
from meal_assistant.infrastructure.providers.http import JSONGetter

logger = logging.getLogger(__name__)


class GoogleSearchClient:
    def __init__(
        self,
        api_key: str,
        engine_id: str,
        url: str = "https://www.googleapis.com/customsearch/v1",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not engine_id:
            raise MisconfiguredCredential(
                "Google API key or CSE ID not set. Set GOOGLE_SEARCH_API_KEY and "
                "GOOGLE_SEARCH_ENGINE_ID in your environment."
            )
        self._api_key = api_key
        self._engine_id = engine_id
        self._url = url
        self._http = JSONGetter(
            "Google custom search",
            error=ToolUnavailable,
            timeout_error=ToolTimeout,
            timeout=timeout,
            session=session,
        )

    async def search(self, query: str, num: int = 5) -> list[SearchHit]:
        data = await self._http.get(
            self._url,
            params={"key": self._api_key, "cx": self._engine_id, "q": query, "num": num},
        )
        if not isinstance(data, dict):
            raise ToolUnavailable("Google custom search returned an unexpected response shape")

        # No "items" key means zero results, not an error
        hits = [
            SearchHit(
                title=item.get("title", ""),
                snippet=item.get("snippet", ""),
                link=item.get("link", ""),
            )
            for item in data.get("items") or []
        ]
        logger.info("Web search %r: %d hit(s)", query, len(hits))
        return hits
