"""
Error taxonomy for the scoring / feedback engine and its collaborators.

Engine errors signal a contract violation between the caller, the engine and
the catalog. They are never retried and never replaced by a default.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for scoring, banding and message-selection failures."""


class InvalidInputShape(EngineError):
    """Raw answers or scores do not match the shape the catalog expects."""


class BandNotFound(EngineError):
    """No authored band range (or prescription mapping) covers a score."""

    def __init__(self, dimension: str, value, detail: str | None = None):
        self.dimension = dimension
        self.value = value
        msg = detail or f"value {value} out of range"
        super().__init__(f"{dimension}: {msg}")


class MessageNotFound(EngineError):
    """The catalog does not hold a message the engine asked for."""

    def __init__(self, message_id: str, detail: str | None = None):
        self.message_id = message_id
        super().__init__(detail or f"message not found: {message_id}")


class CatalogLoadError(Exception):
    """Catalog JSON is missing, unreadable or structurally malformed."""


class LLMUnavailable(RuntimeError):
    """No language-model client can be built (usually a missing API key)."""


class LLMResponseError(RuntimeError):
    """The language model answered with something we cannot use."""


__all__ = [
    "EngineError",
    "InvalidInputShape",
    "BandNotFound",
    "MessageNotFound",
    "CatalogLoadError",
    "LLMUnavailable",
    "LLMResponseError",
]
