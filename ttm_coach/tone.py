"""
Tone rewrite of rendered feedback messages. The model may only rephrase;
ids and order must come back unchanged or the originals are returned.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from .debug_utils import debug_log
from .errors import LLMResponseError
from .llm import get_llm_client, parse_json_reply, reply_text
from .prompts import tone_rewrite_prompt

TONES = ("plain", "mi", "polite")
DEFAULT_TONE = "mi"
FALLBACK_NOTE = "LLM parse failed, returned original"


class StyledItem(BaseModel):
    id: str
    title: str
    body: str


_ITEMS = TypeAdapter(List[StyledItem])


def _fallback(items: List[Dict[str, Any]], reason: str) -> Dict[str, Any]:
    debug_log(f"tone rewrite fallback: {reason}", tag="tone", always=True)
    return {"items": items, "note": FALLBACK_NOTE}


def rewrite_messages(items: List[Dict[str, Any]], tone: str = DEFAULT_TONE, client: Optional[Any] = None) -> Dict[str, Any]:
    """
    items: [{"id","title","body"}, ...]
    Returns {"items": [...]} or, when the reply is unusable, the originals plus "note".
    """
    tone = (tone or DEFAULT_TONE).strip().lower()
    if tone not in TONES:
        raise ValueError(f"unknown tone: {tone}")
    originals = [{"id": i["id"], "title": i.get("title", ""), "body": i.get("body", "")} for i in items]
    if not originals:
        return {"items": []}

    client = client or get_llm_client("tone_rewrite")
    try:
        response = client.invoke(tone_rewrite_prompt(originals, tone))
    except Exception as e:
        raise LLMResponseError(f"tone rewrite call failed: {e}") from e

    text = reply_text(response)
    try:
        rewritten = _ITEMS.validate_python(parse_json_reply(text))
    except (ValueError, ValidationError) as e:
        return _fallback(originals, f"unparseable reply ({e.__class__.__name__})")
    if [r.id for r in rewritten] != [o["id"] for o in originals]:
        return _fallback(originals, "ids changed")

    debug_log("tone rewrite ok", {"tone": tone, "count": len(rewritten)}, tag="tone")
    return {"items": [r.model_dump() for r in rewritten]}


__all__ = ["TONES", "DEFAULT_TONE", "FALLBACK_NOTE", "StyledItem", "rewrite_messages"]
