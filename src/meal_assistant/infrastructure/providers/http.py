"""
infrastructure.providers.http - Shared blocking JSON GET for provider clients.

Uses requests via run_in_executor so the orchestrator's event loop is never
blocked. Network errors, timeouts, non-2xx statuses and unparsable bodies
are mapped onto the caller-supplied error type.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)


class JSONGetter:
    """Issue GET requests and decode JSON, raising domain errors on failure.

    Args:
        service:        Human-readable provider name used in error messages.
        error:          Exception type raised for HTTP, network and parse failures.
        timeout_error:  Exception type raised when the request times out.
        timeout:        Seconds before requests gives up.
        session:        Optional requests.Session (injected in tests).
    """

    def __init__(
        self,
        service: str,
        error: type[Exception],
        timeout_error: Optional[type[Exception]] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._service = service
        self._error = error
        self._timeout_error = timeout_error or error
        self._timeout = timeout
        self._session = session or requests.Session()

    async def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, partial(self._get_sync, url, params, headers),
        )

    def _get_sync(
        self,
        url: str,
        params: Optional[Mapping[str, Any]],
        headers: Optional[Mapping[str, str]],
    ) -> Any:
        logger.debug("GET %s (%s)", url, self._service)
        try:
            response = self._session.get(
                url, params=params, headers=headers, timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise self._timeout_error(
                f"{self._service} timed out after {self._timeout:g}s"
            ) from e
        except requests.exceptions.RequestException as e:
            # Request URLs can carry API keys; keep them out of tool output.
            logger.debug("%s request failed: %s", self._service, e)
            raise self._error(
                f"{self._service} unreachable ({type(e).__name__})"
            ) from e

        if not response.ok:
            raise self._error(
                f"Got {response.status_code} error from {self._service}: {response.reason}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise self._error(f"{self._service} returned an invalid JSON body") from e
