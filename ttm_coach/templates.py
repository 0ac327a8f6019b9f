"""
Template rendering for catalog messages. Placeholders look like {{ name }}.
Rendering never fails: unknown or empty variables become "".
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional

from .catalog import MessageRecord

_PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}")


def interpolate(text: Optional[str], variables: Optional[Mapping[str, Any]] = None) -> str:
    values = variables or {}

    def _sub(m: re.Match) -> str:
        value = values.get(m.group(1).strip())
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_sub, text or "")


@dataclass(frozen=True)
class RenderedMessage:
    id: str
    slot: str
    title: str
    body: str
    suggested_actions: list = field(default_factory=list)

    def to_payload(self) -> dict:
        return asdict(self)


def render_message(
    record: MessageRecord,
    variables: Optional[Mapping[str, Any]] = None,
    slot: str = "",
) -> RenderedMessage:
    return RenderedMessage(
        id=record.id,
        slot=slot,
        title=interpolate(record.title, variables),
        body=interpolate(record.body, variables),
        suggested_actions=list(record.suggested_actions),
    )


__all__ = ["interpolate", "render_message", "RenderedMessage"]
