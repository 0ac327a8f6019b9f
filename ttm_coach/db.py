# ttm_coach/db.py
from __future__ import annotations
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# ──────────────────────────────────────────────────────────────────────────────
# DATABASE URL
# ──────────────────────────────────────────────────────────────────────────────

# Prefer env var; fall back to config.py; else a local SQLite file.
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    from .config import settings
    DATABASE_URL = getattr(settings, "DATABASE_URL", None)
if not DATABASE_URL:
    DATABASE_URL = "sqlite:///./ttm_coach.db"

# ──────────────────────────────────────────────────────────────────────────────
# SQLAlchemy engine/session
# ──────────────────────────────────────────────────────────────────────────────
def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


# FastAPI runs sync endpoints in a threadpool; SQLite connections must be shareable
_connect_args = {"check_same_thread": False} if _is_sqlite(DATABASE_URL) else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session():
    """FastAPI dependency: one session per request, always closed."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Create all tables (idempotent). Call at app startup."""
    # Import here to avoid circular import at module import time
    from .models import Base

    Base.metadata.create_all(bind=engine)
    print(f"[db] ready ({engine.url.get_backend_name()})")
