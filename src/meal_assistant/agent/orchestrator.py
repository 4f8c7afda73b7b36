"""
agent.orchestrator - Runs one conversational turn.

    AWAITING_USER_INPUT -> TOOL_EXECUTION -> SYNTHESIZING -> RESPONDED
    AWAITING_USER_INPUT -> RESPONDED                  (no tool calls)

First pass: the model sees the system directive, the history and the new
user text with the tool schemas bound. Requested tools run one after another
(a detail lookup may depend on candidates written by an earlier search in
the same turn). If any tool ran, a synthesis pass replaces the first-pass
content with an answer grounded in the tool outputs.

Tool failures become inline text for the synthesis pass. A failure of either
model pass ends the turn with one assistant error message; the session stays
usable for the next turn.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import (
    EmptyResult,
    InvalidToolArguments,
    ModelTimeout,
    ModelUnavailable,
    ReferenceNotFound,
    ToolTimeout,
    ToolUnavailable,
)
from meal_assistant.domain.models import Message, Role, TurnState
from meal_assistant.agent.prompt import build_synthesis_prompt, build_system_prompt
from meal_assistant.agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I'm sorry, I couldn't generate a response. "
    "Could you please rephrase your question?"
)
MODEL_ERROR_REPLY = "I'm sorry, there was an error processing your request: {error}"
DEGRADATION_NOTICE = (
    "\n\nNote: some lookups failed ({tools}), so this answer may be incomplete."
)


@dataclass(frozen=True)
class ToolRun:
    """Outcome of one tool request within a turn.

    error:     Exception class name when the tool did not produce its normal output.
    degraded:  True when an external provider failed (network, HTTP, timeout).
    """
    name: str
    output: str
    error: Optional[str] = None
    degraded: bool = False


@dataclass(frozen=True)
class TurnOutcome:
    reply: str
    session: Session
    tool_runs: list[ToolRun] = field(default_factory=list)
    path: list[TurnState] = field(default_factory=list)
    model_failed: bool = False

    @property
    def degraded(self) -> bool:
        return any(run.degraded for run in self.tool_runs)


class Orchestrator:
    """Runs the model + tool + synthesis turn for any number of sessions.

    Holds no per-session state; everything a turn reads or writes lives on
    the Session passed to handle_turn().
    """

    def __init__(
        self,
        llm: BaseChatModel,
        tools: ToolRegistry,
        *,
        location: str = "Singapore",
        tool_timeout: float = 20.0,
        model_timeout: float = 60.0,
        history_window: int = 50,
    ):
        self._llm = llm
        self._tools = tools
        self._location = location
        self._tool_timeout = tool_timeout
        self._model_timeout = model_timeout
        self._history_window = history_window

    async def handle_turn(self, user_text: str, session: Session) -> TurnOutcome:
        """Process one user message and return the reply with the updated session.

        Turns on the same session never overlap: a second call waits until
        the running turn has finished.
        """
        async with session.turn_lock:
            session.new_request()
            path = [TurnState.AWAITING_USER_INPUT]
            logger.info(
                "Turn %s (session=%s): %s",
                session.request_id, session.session_id, user_text[:80],
            )

            candidates_before = session.last_candidates
            runs: list[ToolRun] = []
            model_failed = False
            try:
                reply = await self._run_turn(user_text, session, path, runs)
            except ModelUnavailable as exc:
                logger.exception(
                    "Model call failed for session %s, returning error message",
                    session.session_id,
                )
                session.last_candidates = candidates_before
                reply = MODEL_ERROR_REPLY.format(error=exc)
                model_failed = True

            self._transition(session, path, TurnState.RESPONDED)
            session.append(Message.user(user_text))
            session.append(Message.assistant(reply))
            self._transition(session, path, TurnState.AWAITING_USER_INPUT)

            logger.info(
                "Turn %s finished: %d tool run(s), reply starts with: %s",
                session.request_id, len(runs), reply[:80],
            )
            return TurnOutcome(
                reply=reply,
                session=session,
                tool_runs=list(runs),
                path=path,
                model_failed=model_failed,
            )

    # ------------------------------------------------------------------
    # Turn steps
    # ------------------------------------------------------------------

    async def _run_turn(
        self,
        user_text: str,
        session: Session,
        path: list[TurnState],
        runs: list[ToolRun],
    ) -> str:
        messages = self._build_messages(session, user_text)
        try:
            bound = self._llm.bind_tools(self._tools.schemas_for(session))
        except Exception as exc:
            raise ModelUnavailable(f"tools could not be bound to the model: {exc}") from exc
        first = await self._call_model(bound, messages, "first pass")

        requests = _tool_requests(first)
        if not requests:
            return _content(first) or FALLBACK_REPLY

        self._transition(session, path, TurnState.TOOL_EXECUTION)
        for request in requests:
            runs.append(await self._run_tool(session, request))

        self._transition(session, path, TurnState.SYNTHESIZING)
        synthesis = build_synthesis_prompt([(run.name, run.output) for run in runs])
        final = await self._call_model(
            self._llm, messages + [HumanMessage(content=synthesis)], "synthesis",
        )
        reply = _content(final) or runs[0].output

        failed = [run.name for run in runs if run.degraded]
        if failed:
            reply += DEGRADATION_NOTICE.format(tools=", ".join(failed))
        return reply

    async def _run_tool(self, session: Session, request: dict[str, Any]) -> ToolRun:
        """Validate and run one tool request. Never raises."""
        name = request.get("name") or ""
        if request.get("error"):
            logger.warning("Malformed tool call for %r: %s", name, request["error"])
            return ToolRun(
                name=name,
                output=f"Error: malformed arguments for '{name}': {request['error']}",
                error=InvalidToolArguments.__name__,
            )

        try:
            call = self._tools.parse_call(
                session, name, request.get("args"), request.get("id") or "",
            )
            name = call.kind.value
            result = await asyncio.wait_for(
                self._tools.invoke(session, call), timeout=self._tool_timeout,
            )
            return ToolRun(name=name, output=result.output)
        except EmptyResult as exc:
            logger.info("Tool %s found nothing", name)
            return ToolRun(name=name, output=exc.question, error=EmptyResult.__name__)
        except ReferenceNotFound as exc:
            logger.info("Tool %s could not resolve %r", name, exc.reference)
            return ToolRun(name=name, output=f"Error: {exc}", error=ReferenceNotFound.__name__)
        except InvalidToolArguments as exc:
            logger.warning("Rejected tool call %r: %s", name, exc)
            return ToolRun(name=name, output=f"Error: {exc}", error=InvalidToolArguments.__name__)
        except asyncio.TimeoutError:
            logger.warning("Tool %s timed out after %.1fs", name, self._tool_timeout)
            return ToolRun(
                name=name,
                output=f"Error: {name} did not respond within {self._tool_timeout:g} seconds.",
                error=ToolTimeout.__name__,
                degraded=True,
            )
        except ToolUnavailable as exc:
            logger.warning("Tool %s unavailable: %s", name, exc)
            return ToolRun(
                name=name, output=f"Error: {exc}", error=type(exc).__name__, degraded=True,
            )
        except Exception as exc:
            logger.exception("Error executing tool %s", name)
            return ToolRun(
                name=name, output=f"Error: {exc}", error=type(exc).__name__, degraded=True,
            )

    async def _call_model(
        self, model: Any, messages: list[BaseMessage], label: str,
    ) -> AIMessage:
        try:
            response = await asyncio.wait_for(
                model.ainvoke(messages), timeout=self._model_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ModelTimeout(
                f"the language model did not answer within {self._model_timeout:g} seconds"
            ) from exc
        except Exception as exc:
            raise ModelUnavailable(f"the language model call failed: {exc}") from exc
        logger.debug("Model %s returned %d tool call(s)", label, len(_tool_requests(response)))
        return response

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_messages(self, session: Session, user_text: str) -> list[BaseMessage]:
        messages: list[BaseMessage] = [
            SystemMessage(content=build_system_prompt(session, self._location)),
        ]
        window = session.history[-self._history_window:] if self._history_window else []
        for msg in window:
            if msg.role is Role.USER:
                messages.append(HumanMessage(content=msg.content))
            else:
                messages.append(AIMessage(content=msg.content))
        messages.append(HumanMessage(content=user_text))
        return messages

    @staticmethod
    def _transition(session: Session, path: list[TurnState], state: TurnState) -> None:
        logger.debug("Session %s: %s -> %s", session.session_id, session.state.value, state.value)
        session.state = state
        path.append(state)


def _tool_requests(message: Any) -> list[dict[str, Any]]:
    """Tool calls of an AIMessage, valid ones and malformed ones.

    LangChain splits parsed and unparseable calls into two lists. When the raw
    provider payload is present in `additional_kwargs["tool_calls"]`, both are
    put back in the order the model emitted them.
    """
    requests: list[dict[str, Any]] = []
    for call in getattr(message, "tool_calls", None) or []:
        requests.append({"name": call.get("name"), "args": call.get("args"), "id": call.get("id")})
    for call in getattr(message, "invalid_tool_calls", None) or []:
        requests.append({
            "name": call.get("name"),
            "args": call.get("args"),
            "id": call.get("id"),
            "error": call.get("error") or "arguments could not be parsed",
        })

    raw = (getattr(message, "additional_kwargs", None) or {}).get("tool_calls")
    if isinstance(raw, list):
        position = {
            call.get("id"): index
            for index, call in enumerate(raw)
            if isinstance(call, dict) and call.get("id") is not None
        }
        requests.sort(key=lambda r: position.get(r["id"], len(raw)))
    return requests


def _content(message: Any) -> str:
    """Plain text of a model response; list-style content parts are joined."""
    content = getattr(message, "content", "")
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        content = "".join(parts)
    return (content or "").strip()
