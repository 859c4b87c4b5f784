from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.db import session as db_session  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models import greeting_models  # noqa: E402,F401
from app.models.vat_models import Order  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture
def make_order():
    """Factory building an Order from collaborator-style (camelCase) payloads."""
    counter = {"n": 0}

    def _make(total="10.00", created_at="2024-03-05T12:00:00", **overrides) -> Order:
        counter["n"] += 1
        payload = {
            "id": f"ord-{counter['n']}",
            "orderNumber": f"A{1000 + counter['n']}",
            "createdAt": created_at,
            "total": Decimal(str(total)),
            "orderSource": "online",
            "items": [],
        }
        payload.update(overrides)
        return Order.model_validate(payload)

    return _make


# FastAPI TestClient fixture
from fastapi.testclient import TestClient  # noqa: E402
from app.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)
