"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# --- Sessions ---

class StartSessionBody(BaseModel):
    """Explicit budget/preference, or leave remaining_calories empty and send a bearer token."""
    remaining_calories: Optional[int] = Field(default=None, ge=0)
    dietary_preference: str = ""


class MessageOut(BaseModel):
    role: str
    content: str


class SessionOut(BaseModel):
    session_id: str
    remaining_calories: int
    dietary_preference: str
    state: str
    messages: list[MessageOut]


# --- Chat ---

class ChatBody(BaseModel):
    message: str = Field(..., min_length=1)


class ToolRunOut(BaseModel):
    name: str
    error: Optional[str] = None
    degraded: bool = False


class ChatOut(BaseModel):
    session_id: str
    reply: str
    tool_runs: list[ToolRunOut]
    degraded: bool
