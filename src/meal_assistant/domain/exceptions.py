"""
domain.exceptions - Custom exception hierarchy for the meal assistant.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.

Tool-level errors (ToolError subclasses) are converted to inline text by the
orchestrator; model-level errors end the turn with a single assistant
message; MisconfiguredCredential is raised while wiring components.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


# ---------------------------------------------------------------------------
# Tool-level errors
# ---------------------------------------------------------------------------

class ToolError(DomainError):
    """Base for failures that happen inside a single tool invocation."""


class ToolUnavailable(ToolError):
    """Raised when an external provider call fails (network, HTTP, parse)."""


class ToolTimeout(ToolUnavailable):
    """Raised when an external provider call or tool exceeds its time budget."""


class ReferenceNotFound(ToolError):
    """Raised when a recipe reference cannot be resolved against the candidate set."""

    def __init__(self, reference: str, available: int = 0):
        self.reference = reference
        self.available = available
        if available:
            hint = f"choose a number between 1 and {available} or an exact recipe name"
        else:
            hint = "search for recipes first"
        super().__init__(
            f"Recipe '{reference}' not found in the previous search results. "
            f"Please {hint}."
        )


class EmptyResult(ToolError):
    """Raised when a search found nothing. Carries a clarifying question."""

    def __init__(self, question: str):
        self.question = question
        super().__init__(question)


class InvalidToolArguments(ToolError):
    """Raised when the model requests an unknown tool or passes malformed arguments."""


# ---------------------------------------------------------------------------
# Model-level errors
# ---------------------------------------------------------------------------

class ModelUnavailable(DomainError):
    """Raised when a language-model call fails outright."""


class ModelTimeout(ModelUnavailable):
    """Raised when a language-model call exceeds its time budget."""


# ---------------------------------------------------------------------------
# Wiring / collaborator errors
# ---------------------------------------------------------------------------

class MisconfiguredCredential(DomainError):
    """Raised at start-up when a required external API key is absent."""


class ProfileUnavailable(DomainError):
    """Raised when the user profile or food log cannot be loaded."""


class SessionNotFound(DomainError):
    """Raised when a session id is not known to the session store."""
