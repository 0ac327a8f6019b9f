from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from .debug_utils import debug_log
from .errors import InvalidInputShape, LLMResponseError
from .llm import get_llm_client, parse_json_reply, reply_text
from .prompts import example_evaluation_prompt, work_system_prompt
from .stages import stage_metadata

MAX_MESSAGE_CHARS = 8000
MAX_EXAMPLE_CHARS = 4000

_ROLE_MAP = {"user": "human", "assistant": "ai"}


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CHARS)


class Verdict(BaseModel):
    value: bool
    reason: str = Field(..., min_length=1, max_length=2000)


class ExampleEvaluation(BaseModel):
    userFriendly: Verdict
    ttmAligned: Verdict
    stressManagementRelated: Verdict


def build_chat_messages(messages: Sequence[ChatTurn], context: Optional[Dict[str, Any]] = None) -> list[tuple[str, str]]:
    """System prompt (stage guide + skeleton) followed by the conversation so far."""
    context = context or {}
    system = work_system_prompt(stage_metadata(context.get("stage")), context.get("skeleton"))
    out = [("system", system)]
    for m in messages:
        out.append((_ROLE_MAP[m.role], m.content))
    return out


def chat_reply(messages: Sequence[ChatTurn], context: Optional[Dict[str, Any]] = None, client: Optional[Any] = None) -> str:
    if not messages:
        raise InvalidInputShape("messages must not be empty")
    if messages[-1].role != "user":
        raise InvalidInputShape("The last message must be from the user.")

    client = client or get_llm_client("work_chat")
    try:
        response = client.invoke(build_chat_messages(messages, context))
    except Exception as e:
        debug_log(f"chat call failed: {e!r}", tag="workchat", always=True)
        raise LLMResponseError(f"work chat call failed: {e}") from e

    text = reply_text(response)
    if not text:
        raise LLMResponseError("model returned an empty reply")
    debug_log("chat reply", {"turns": len(messages), "chars": len(text)}, tag="workchat")
    return text


def evaluate_example(prompt: str, client: Optional[Any] = None) -> ExampleEvaluation:
    """Judge a suggested chat opener on the three quality points; strict JSON expected."""
    prompt = (prompt or "").strip()
    if not prompt or len(prompt) > MAX_EXAMPLE_CHARS:
        raise InvalidInputShape(f"prompt must be 1..{MAX_EXAMPLE_CHARS} characters")

    client = client or get_llm_client("example_evaluation")
    try:
        response = client.invoke(example_evaluation_prompt(prompt))
    except Exception as e:
        raise LLMResponseError(f"example evaluation call failed: {e}") from e

    text = reply_text(response)
    if not text:
        raise LLMResponseError("model returned an empty evaluation")
    try:
        parsed = parse_json_reply(text)
    except ValueError as e:
        raise LLMResponseError("failed to parse example evaluation") from e
    try:
        evaluation = ExampleEvaluation.model_validate(parsed)
    except ValidationError as e:
        raise LLMResponseError("example evaluation did not match the expected format") from e
    debug_log("example evaluated", evaluation.model_dump(), tag="workchat")
    return evaluation


__all__ = [
    "ChatTurn",
    "Verdict",
    "ExampleEvaluation",
    "build_chat_messages",
    "chat_reply",
    "evaluate_example",
]
