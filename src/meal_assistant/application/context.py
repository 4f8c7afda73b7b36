"""
application.context - Per-conversation session state.

There is no process-global "last recipe search". Every tool receives its
session explicitly, so two concurrent users get two different Session
instances with no shared mutable state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from uuid import uuid4

from meal_assistant.application.candidates import CandidateSet
from meal_assistant.domain.models import Message, TurnState


@dataclass
class Session:
    """One active chat and its calorie/preference context.

    Attributes:
        remaining_calories:  Calories left for today. Set at start, read-only.
        dietary_preference:  Free-form tag such as "halal" or "vegan". Immutable.
        history:             Append-only transcript. Use append(), never mutate entries.
        last_candidates:     Results of the latest successful search, replaced wholesale.
        state:               Position in the orchestrator's turn cycle.
        request_id:          Unique per turn, for tracing/logging.
    """
    remaining_calories: int
    dietary_preference: str = ""
    session_id: str = field(default_factory=lambda: uuid4().hex)
    history: list[Message] = field(default_factory=list)
    last_candidates: CandidateSet = field(default_factory=CandidateSet)
    state: TurnState = TurnState.AWAITING_USER_INPUT
    request_id: str = field(default_factory=lambda: uuid4().hex)
    turn_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, repr=False, compare=False,
    )

    def __setattr__(self, name: str, value) -> None:
        # remaining_calories and dietary_preference are fixed after construction
        if name in ("remaining_calories", "dietary_preference") and name in self.__dict__:
            raise AttributeError(f"Session.{name} is read-only")
        super().__setattr__(name, value)

    @property
    def is_halal(self) -> bool:
        return self.dietary_preference.strip().lower() == "halal"

    @property
    def busy(self) -> bool:
        return self.turn_lock.locked()

    def append(self, message: Message) -> None:
        self.history.append(message)

    def new_request(self) -> None:
        """Start a new turn within the same session.

        last_candidates is not cleared: "pick #2" refers to
        results shown in a previous turn.
        """
        self.request_id = uuid4().hex
