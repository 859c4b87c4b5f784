"""Database engine setup.

The database only holds the per-tenant greeting counters; orders and menus
arrive as already fetched payloads. For test runs (ENV=test) an unset or
in-memory URL maps to a single shared in-memory SQLite connection.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

raw_url = settings.DATABASE_URL or "sqlite:///:memory:"

if raw_url.startswith("sqlite") and ":memory:" in raw_url:
    # One connection shared by every session; otherwise each connection sees an empty database.
    engine = create_engine(
        raw_url,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif raw_url.startswith("sqlite"):
    engine = create_engine(raw_url, future=True, connect_args={"check_same_thread": False})
else:
    # Pool recycle: recycle connections after 1 hour to prevent stale connections
    # Pool pre-ping: verify connection health before using
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
    )
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
