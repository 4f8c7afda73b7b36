"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_bearer_token(): optional bearer token, forwarded to the profile API.
- get_session(): resolves the {session_id} path parameter.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import SessionNotFound
from meal_assistant.factory import ServiceFactory

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory | None) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


# --- Bearer (validated by the profile API, not here) ---

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_session(
    session_id: str,
    factory: ServiceFactory = Depends(get_factory),
) -> Session:
    """Return the session for the path id or raise 404."""
    try:
        return factory.session_store.get(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found.",
        )
