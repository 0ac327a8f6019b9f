from __future__ import annotations

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in dev/tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# ──────────────────────────────────────────────────────────────────────────────
# Core
# ──────────────────────────────────────────────────────────────────────────────
class User(Base):
    __tablename__ = "users"
    id         = Column(Integer, primary_key=True)
    external_id = Column(String(128), unique=True, nullable=False, index=True)  # X-User-Id header
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    prescriptions = relationship("Prescription", back_populates="user", cascade="all, delete-orphan")
    work_sessions = relationship("WorkSession", back_populates="user", cascade="all, delete-orphan")


# ──────────────────────────────────────────────────────────────────────────────
# Feedback history (append-only; rows are never updated)
# ──────────────────────────────────────────────────────────────────────────────
class Prescription(Base):
    __tablename__ = "prescriptions"
    id              = Column(Integer, primary_key=True)
    user_id         = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    catalog_version = Column(String(32), nullable=False)
    stage           = Column(String(4), nullable=False)
    scores          = Column(JSONType, nullable=False)
    bands           = Column(JSONType, nullable=False)
    messages        = Column(JSONType, nullable=False)   # rendered items (post tone rewrite if any)
    tone            = Column(String(16), nullable=True)  # plain|mi|polite when rewritten
    created_at      = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="prescriptions")

    __table_args__ = (
        Index("ix_prescriptions_user_created", "user_id", "created_at"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Work chat
# ──────────────────────────────────────────────────────────────────────────────
class WorkSession(Base):
    __tablename__ = "work_sessions"
    id         = Column(Integer, primary_key=True)
    user_id    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    stage      = Column(String(4), nullable=True)
    context    = Column(JSONType, nullable=True)   # skeleton payload the chat was grounded on
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    user     = relationship("User", back_populates="work_sessions")
    messages = relationship(
        "WorkChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="WorkChatMessage.id",
    )


class WorkChatMessage(Base):
    __tablename__ = "work_chat_messages"
    id         = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("work_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    role       = Column(String(16), nullable=False)   # user | assistant
    content    = Column(Text, nullable=False)
    meta       = Column(JSONType, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("WorkSession", back_populates="messages")
