"""
agent.tools.registry - The fixed tool catalog, argument validation and dispatch.

The registry is built once at start-up with exactly one tool per ToolKind and
is never mutated afterwards, so it can be shared by every session. The only
session state it touches is session.last_candidates, which it replaces
wholesale whenever a search tool returns candidates.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import InvalidToolArguments
from meal_assistant.agent.tools.base import BaseTool, ToolKind, ToolResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """A validated tool request: which kind, with which typed arguments."""
    kind: ToolKind
    args: BaseModel
    call_id: str = ""
    requested_name: str = ""


class ToolRegistry:
    """Closed catalog of tools, one per ToolKind."""

    def __init__(self, tools: Iterable[BaseTool]):
        catalog: dict[ToolKind, BaseTool] = {}
        for tool in tools:
            if tool.kind in catalog:
                raise ValueError(f"Tool '{tool.name}' registered twice")
            catalog[tool.kind] = tool
            logger.debug("Registered tool: %s", tool.name)

        missing = [kind.value for kind in ToolKind if kind not in catalog]
        if missing:
            raise ValueError(f"Tool registry is missing: {', '.join(missing)}")
        self._tools = catalog

    def get(self, kind: ToolKind) -> BaseTool:
        return self._tools[kind]

    def all(self) -> list[BaseTool]:
        """Return all tools in ToolKind order."""
        return [self._tools[kind] for kind in ToolKind]

    def names(self) -> list[str]:
        return [kind.value for kind in ToolKind]

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def kinds_for(self, session: Session) -> list[ToolKind]:
        """Tool kinds offered to the model for this session.

        Halal users are only offered the halal-aware keyword search.
        """
        if session.is_halal:
            return [k for k in ToolKind if k is not ToolKind.COMPLEX_SEARCH]
        return list(ToolKind)

    def schemas_for(self, session: Session) -> list[dict]:
        return [self._tools[kind].to_openai_schema() for kind in self.kinds_for(session)]

    # ------------------------------------------------------------------
    # Validation and dispatch
    # ------------------------------------------------------------------

    def parse_call(
        self,
        session: Session,
        name: str,
        arguments: Any,
        call_id: str = "",
    ) -> ToolCall:
        """Turn a raw model tool request into a validated ToolCall.

        Raises:
            InvalidToolArguments: unknown tool name or arguments that do not
                match the tool's schema.
        """
        try:
            kind = ToolKind(name)
        except ValueError:
            raise InvalidToolArguments(
                f"Unknown tool '{name}'. Available tools: {', '.join(self.names())}"
            ) from None

        if kind is ToolKind.COMPLEX_SEARCH and session.is_halal:
            logger.info("Routing complex-recipe-search to halal-recipe-search for halal session")
            kind = ToolKind.HALAL_SEARCH

        schema = self._tools[kind].args_schema
        try:
            args = schema.model_validate(_coerce_arguments(arguments, schema))
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidToolArguments(
                f"Invalid arguments for '{kind.value}': {details}"
            ) from exc

        return ToolCall(kind=kind, args=args, call_id=call_id, requested_name=name)

    async def invoke(self, session: Session, call: ToolCall) -> ToolResult:
        """Run a validated call and record any new candidate set on the session.

        Returns the ToolResult; tool exceptions propagate to the caller.
        """
        tool = self._tools[call.kind]
        logger.info("Invoking tool %s (session=%s)", tool.name, session.session_id)
        result = await tool.execute(session, call.args)

        if result.candidates:
            session.last_candidates = result.candidates
            logger.debug(
                "Replaced candidate set for session %s: %r",
                session.session_id, result.candidates,
            )
        return result


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _coerce_arguments(arguments: Any, schema: type[BaseModel]) -> Mapping[str, Any]:
    """Accept dict arguments, a JSON string, or a bare string for one-field schemas.

    Some models send {"input": "..."} or a plain string instead of the declared
    fields; both are mapped onto the schema's single required field.
    """
    if isinstance(arguments, str):
        text = arguments.strip()
        try:
            parsed = json.loads(text) if text else {}
        except json.JSONDecodeError:
            parsed = None
        arguments = parsed if isinstance(parsed, Mapping) else {"input": text}
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise InvalidToolArguments(
            f"Tool arguments must be an object, got {type(arguments).__name__}"
        )

    required = [
        name for name, field in schema.model_fields.items() if field.is_required()
    ]
    if (
        len(required) == 1
        and required[0] not in arguments
        and set(arguments) == {"input"}
    ):
        return {required[0]: arguments["input"]}
    return arguments
