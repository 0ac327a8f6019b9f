from __future__ import annotations

import json
import re

from langchain_openai import ChatOpenAI

from .config import settings
from .errors import LLMUnavailable

DEFAULT_LLM_MODEL = "gpt-4o-mini"

# Review touchpoints rewrite or judge authored text; they may run on a separate model.
_REVIEW_TOUCHPOINTS = {
    "tone_rewrite",
    "example_evaluation",
}

_clients: dict[str, ChatOpenAI] = {}


def is_review_touchpoint(touchpoint: str | None) -> bool:
    key = (touchpoint or "").strip().lower()
    if not key:
        return False
    return key in _REVIEW_TOUCHPOINTS


def resolve_model_name_for_touchpoint(
    touchpoint: str | None = None,
    model_override: str | None = None,
) -> str:
    override = (model_override or "").strip()
    if override:
        return override
    coaching_model = (settings.LLM_MODEL or "").strip() or DEFAULT_LLM_MODEL
    if is_review_touchpoint(touchpoint):
        return (settings.REVIEW_MODEL or "").strip() or coaching_model
    return coaching_model


def get_llm_client(
    touchpoint: str | None = None,
    model_override: str | None = None,
) -> ChatOpenAI:
    api_key = (settings.OPENAI_API_KEY or "").strip()
    if not api_key:
        raise LLMUnavailable("OPENAI_API_KEY not configured")
    model_name = resolve_model_name_for_touchpoint(touchpoint=touchpoint, model_override=model_override)
    client = _clients.get(model_name)
    if client is None:
        client = ChatOpenAI(model=model_name, temperature=0, api_key=api_key)
        _clients[model_name] = client
    return client


def reply_text(response) -> str:
    """Text of a chat model reply (AIMessage or plain string)."""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
    return (content or "").strip()


def parse_json_reply(text: str):
    """
    Parse JSON from a model reply, tolerating ```json fences and chatter
    around a single object or list. Raises ValueError when nothing parses.
    """
    trimmed = re.sub(r"```(?:json)?", "", text or "").strip()
    if not trimmed:
        raise ValueError("empty reply")
    try:
        return json.loads(trimmed)
    except ValueError:
        match = re.search(r"(\{.*\}|\[.*\])", trimmed, re.DOTALL)
        if match:
            return json.loads(match.group(1))
        raise
