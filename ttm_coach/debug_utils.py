# ttm_coach/debug_utils.py
# Tagged console logging. Lines print as "[tag] message :: {json payload}".
# Chatty engine traces only show with TTM_COACH_DEBUG set; operational lines
# (startup, fallbacks, handled errors) pass always=True.

import json
import os
from typing import Any, Optional

_ON = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    return (os.getenv("TTM_COACH_DEBUG") or "").strip().lower() in _ON


def _format(message: str, payload: Optional[dict[str, Any]], tag: str) -> str:
    if payload is None:
        return f"[{tag}] {message}"
    try:
        body = json.dumps(payload, ensure_ascii=False, default=str, sort_keys=True)
    except (TypeError, ValueError):
        body = repr(payload)
    return f"[{tag}] {message} :: {body}"


def debug_log(
    message: str,
    payload: Optional[dict[str, Any]] = None,
    tag: str = "debug",
    always: bool = False,
) -> None:
    if not (always or debug_enabled()):
        return
    try:
        print(_format(message, payload, tag))
    except Exception:
        # console output must never break a request
        pass
