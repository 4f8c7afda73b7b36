"""Meal-planning chat sessions: start, talk, read the transcript, end."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from meal_assistant.adapters.rest.dependencies import get_bearer_token, get_factory, get_session
from meal_assistant.adapters.rest.schemas import (
    ChatBody,
    ChatOut,
    MessageOut,
    SessionOut,
    StartSessionBody,
    ToolRunOut,
)
from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import ProfileUnavailable
from meal_assistant.factory import ServiceFactory

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def start_session(
    body: StartSessionBody,
    token: Optional[str] = Depends(get_bearer_token),
    factory: ServiceFactory = Depends(get_factory),
):
    """Open a session.

    With remaining_calories in the body the values are taken as given.
    Without it, the caller's bearer token is used to load the profile and
    today's food log from the diet-tracking app.
    """
    starter = factory.create_session_starter()

    if body.remaining_calories is not None:
        session = starter.start(body.remaining_calories, body.dietary_preference)
    else:
        if token is None or not starter.can_load_profile:
            raise HTTPException(
                status_code=422,
                detail=(
                    "remaining_calories is required unless a bearer token is sent "
                    "and the profile API is configured."
                ),
            )
        try:
            session = await starter.start_from_profile(token)
        except ProfileUnavailable as exc:
            logger.warning("Profile lookup failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Could not load your profile: {exc}",
            )

    factory.session_store.add(session)
    return _session_out(session)


@router.get("/{session_id}", response_model=SessionOut)
async def get_session_transcript(session: Session = Depends(get_session)):
    return _session_out(session)


@router.get("/{session_id}/messages", response_model=list[MessageOut])
async def list_messages(session: Session = Depends(get_session)):
    return [MessageOut(role=m.role.value, content=m.content) for m in session.history]


@router.post("/{session_id}/messages", response_model=ChatOut)
async def post_message(
    body: ChatBody,
    session: Session = Depends(get_session),
    factory: ServiceFactory = Depends(get_factory),
):
    """Run one turn. A session accepts one turn at a time (409 while busy)."""
    if session.busy:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A previous message is still being processed.",
        )

    outcome = await factory.create_orchestrator().handle_turn(body.message, session)
    return ChatOut(
        session_id=session.session_id,
        reply=outcome.reply,
        tool_runs=[
            ToolRunOut(name=run.name, error=run.error, degraded=run.degraded)
            for run in outcome.tool_runs
        ],
        degraded=outcome.degraded,
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session: Session = Depends(get_session),
    factory: ServiceFactory = Depends(get_factory),
):
    factory.session_store.remove(session.session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _session_out(session: Session) -> SessionOut:
    return SessionOut(
        session_id=session.session_id,
        remaining_calories=session.remaining_calories,
        dietary_preference=session.dietary_preference,
        state=session.state.value,
        messages=[MessageOut(role=m.role.value, content=m.content) for m in session.history],
    )
