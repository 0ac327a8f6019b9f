# ttm_coach/chat_log.py
# Work chat turn logger. All chat persistence goes through write_chat_message.

from datetime import datetime
from typing import Optional

__all__ = ["write_chat_message"]


def _console_echo(session_id: Optional[int], role: Optional[str], content: Optional[str]) -> None:
    """
    Print a console echo for any chat turn written.
    Format: [workchat] USER session #3 → first 120 chars
    """
    preview = (content or "")[:120].replace("\n", " ")
    try:
        print(f"[workchat] {(role or '').upper()} session #{session_id if session_id is not None else '?'} → {preview}")
    except Exception:
        # Never let console echo break the write path
        pass


def write_chat_message(
    session_id: int,
    role: str,
    content: str,
    meta: Optional[dict] = None,
) -> Optional[int]:
    """
    Persist one chat turn in its own DB session and bump the parent session's
    updated_at. Returns the new row id, or None when the write failed
    (logged, never raised).
    """
    # Local imports to avoid circular deps
    from .db import SessionLocal
    from .models import WorkChatMessage, WorkSession

    s = None
    try:
        with SessionLocal() as s:
            row = WorkChatMessage(
                session_id=session_id,
                role=role,
                content=content or "",
                meta=meta,
            )
            s.add(row)
            s.query(WorkSession).filter(WorkSession.id == session_id).update(
                {WorkSession.updated_at: datetime.utcnow()}, synchronize_session=False
            )
            s.commit()
            row_id = row.id
        _console_echo(session_id, role, content)
        return row_id
    except Exception as e:
        try:
            if s is not None:
                s.rollback()
        except Exception:
            pass
        print(f"[WARN] write_chat_message failed (non-fatal): {e!r}")
        return None
