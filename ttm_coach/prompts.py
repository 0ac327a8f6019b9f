"""
Prompt helpers for LLM interactions (structured, data-in/data-out; no DB calls).

Sections:
1) Structured prompt blocks (coach/context/stage/skeleton/task)
2) Tone rewrite prompt for authored feedback messages
3) Work chat system prompt and example evaluation prompt
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

# ---------------------------------------------------------------------------
# Structured prompt blocks (reusable building pieces)
# Each block is a simple text fragment; compose them with assemble_prompt.
# ---------------------------------------------------------------------------


def coach_block(extras: str = "") -> str:
    """Coach persona: tone and global constraints."""
    return (
        "Coach profile: stress-management coach using the transtheoretical model; "
        "tone=supportive, concise, conversational; no diagnosis or medical advice. "
        + extras
    ).strip()


def context_block(interaction: str, purpose: str, history: str = "") -> str:
    """Context of the interaction: type, purpose, history."""
    bits = [
        f"Interaction={interaction}",
        f"Purpose={purpose}",
    ]
    if history:
        bits.append(f"History: {history}")
    return "Context: " + "; ".join(bits)


def stage_block(stage_name: str, description: str = "", strategy: str = "") -> str:
    """Readiness stage and the coaching strategy that goes with it."""
    parts = [f"Stage: {stage_name}"]
    if description:
        parts.append(f"Stage description: {description}")
    if strategy:
        parts.append(f"Coaching strategy: {strategy}")
    return "\n".join(parts)


def skeleton_block(skeleton_payload: Optional[Dict[str, Any]]) -> str:
    """Work-plan skeleton and bands as JSON (empty when no assessment is attached)."""
    if not skeleton_payload:
        return ""
    return "Work plan context (JSON):\n" + json.dumps(skeleton_payload, ensure_ascii=False)


def task_block(instruction: str, length_hint: str = "", constraints: str = "") -> str:
    """Task directive: what to produce, optional length and constraints."""
    parts = [f"Task: {instruction}"]
    if length_hint:
        parts.append(f"Length: {length_hint}")
    if constraints:
        parts.append(f"Constraints: {constraints}")
    return " ".join(parts)


def assemble_prompt(blocks: List[str]) -> str:
    """Join non-empty blocks with newlines."""
    return "\n".join([b for b in blocks if b])


# ---------------------------------------------------------------------------
# Tone rewrite
# ---------------------------------------------------------------------------

TONE_GUIDES = {
    "plain": "plain, easy words",
    "mi": "motivational-interviewing style: empathic, with an open question",
    "polite": "polite and formal",
}


def tone_rewrite_prompt(items: List[Dict[str, Any]], tone: str) -> str:
    return (
        "You are a copy editor with a focus on health literacy.\n"
        "The input is a list of reviewed, fixed feedback messages. Rephrase them in the requested tone "
        "without changing their meaning.\n"
        "- Do not add new advice or medical information\n"
        "- Do not speculate or diagnose\n"
        '- Output JSON only: [{"id","title","body"}], same ids and order as the input\n'
        f"Tone: {tone} ({TONE_GUIDES.get(tone, tone)})\n"
        f"Input: {json.dumps(items, ensure_ascii=False)}"
    )


# ---------------------------------------------------------------------------
# Work chat
# ---------------------------------------------------------------------------


def work_system_prompt(stage_meta: Dict[str, Any], skeleton_payload: Optional[Dict[str, Any]] = None) -> str:
    blocks = [
        coach_block(),
        context_block("work chat", "turn the weekly work plan into one concrete next step"),
        stage_block(
            stage_meta.get("stage_name", ""),
            stage_meta.get("system_description", ""),
            stage_meta.get("coaching_strategy", ""),
        ),
        skeleton_block(skeleton_payload),
        task_block(
            "Reply to the user's last message as their coach.",
            length_hint="under 120 words",
            constraints=(
                "stay within the work plan cards; suggest at most one action per reply; "
                "if the user mentions a crisis or self-harm, advise contacting a professional or local emergency services"
            ),
        ),
    ]
    return assemble_prompt(blocks)


def example_evaluation_prompt(prompt: str) -> str:
    return (
        "You review quality for a mental-health support service and are an expert in the transtheoretical "
        "model (TTM) and stress management. Evaluate the button label below on three points. Give each a "
        "true or false value and a short reason. Return only this JSON:\n"
        "{\n"
        '  "userFriendly": {"value": true|false, "reason": "why it is or is not easy for a user to understand"},\n'
        '  "ttmAligned": {"value": true|false, "reason": "why it does or does not fit the TTM"},\n'
        '  "stressManagementRelated": {"value": true|false, "reason": "why it does or does not relate to stress management"}\n'
        "}\n\n"
        f'Label to evaluate:\n"""{prompt}"""'
    )


__all__ = [
    "coach_block",
    "context_block",
    "stage_block",
    "skeleton_block",
    "task_block",
    "assemble_prompt",
    "TONE_GUIDES",
    "tone_rewrite_prompt",
    "work_system_prompt",
    "example_evaluation_prompt",
]
