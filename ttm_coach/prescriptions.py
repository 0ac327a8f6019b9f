"""
Prescription history: one append-only row per delivered feedback sequence.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from .banding import Bands
from .models import Prescription, User
from .scoring import Scores


def get_or_create_user(session: Session, external_id: str) -> User:
    user = session.query(User).filter(User.external_id == external_id).first()
    if user:
        return user
    user = User(external_id=external_id)
    session.add(user)
    session.commit()
    session.refresh(user)
    print(f"[prescription] new user #{user.id} ({external_id})")
    return user


def record_prescription(
    session: Session,
    user: User,
    catalog_version: str,
    scores: Scores,
    bands: Bands,
    messages: list[dict],
    tone: Optional[str] = None,
) -> Prescription:
    row = Prescription(
        user_id=user.id,
        catalog_version=catalog_version,
        stage=scores.stage.value,
        scores=scores.to_payload(),
        bands=bands.to_payload(),
        messages=messages,
        tone=tone,
    )
    session.add(row)
    session.commit()
    session.refresh(row)
    print(f"[prescription] stored #{row.id} user={user.id} stage={row.stage} catalog={catalog_version}")
    return row


def list_prescriptions(session: Session, user: User, limit: int = 50) -> list[Prescription]:
    """Newest first."""
    return (
        session.query(Prescription)
        .filter(Prescription.user_id == user.id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .limit(limit)
        .all()
    )


def prescription_payload(row: Prescription) -> dict:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "catalog_version": row.catalog_version,
        "stage": row.stage,
        "scores": row.scores,
        "bands": row.bands,
        "messages": row.messages,
        "tone": row.tone,
    }


__all__ = ["get_or_create_user", "record_prescription", "list_prescriptions", "prescription_payload"]
