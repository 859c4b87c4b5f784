"""Rotating order confirmation greetings.

Each tenant cycles through a fixed list of greetings. The position comes from
a durable per-tenant counter that is incremented and read atomically, so
concurrent orders never share a greeting slot. When the counter store is
down a random greeting is used instead and reported as a fallback.

Follows the store-protocol pattern: GreetingService depends on
GreetingCounterStore, with SQL and Redis implementations.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol

import redis
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app import metrics
from app.core.config import settings
from app.core.exceptions import GreetingCounterUnavailable
from app.models.greeting_models import TenantGreetingCounter

logger = logging.getLogger(__name__)

GREETINGS: tuple[str, ...] = (
    "Great choice!",
    "Good choice!",
    "Yummy Order!",
    "Perfect Order!",
    "Mouth-watering choice!",
)


@dataclass(frozen=True)
class GreetingIndex:
    index: int
    message: str
    source: str  # "counter" or "fallback"


class GreetingCounterStore(Protocol):
    """Atomic per-tenant counter storage."""

    def increment(self, tenant_id: str) -> int:
        """Increment the tenant's counter and return the new value."""
        ...


class SqlGreetingCounterStore:
    """Counter rows in ``tenant_greeting_counter``, bumped with UPDATE ... RETURNING."""

    def __init__(self, db: Session):
        self.db = db

    def _bump(self, tenant_id: str) -> int | None:
        stmt = (
            update(TenantGreetingCounter)
            .where(TenantGreetingCounter.tenant_id == tenant_id)
            .values(message_counter=TenantGreetingCounter.message_counter + 1)
            .returning(TenantGreetingCounter.message_counter)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def increment(self, tenant_id: str) -> int:
        try:
            value = self._bump(tenant_id)
            if value is None:
                self.db.add(TenantGreetingCounter(tenant_id=tenant_id, message_counter=1))
                try:
                    self.db.flush()
                    value = 1
                except IntegrityError:
                    # Another request created the row first
                    self.db.rollback()
                    value = self._bump(tenant_id)
                    if value is None:
                        raise GreetingCounterUnavailable("db", "counter row vanished")
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return value


class RedisGreetingCounterStore:
    """Counters kept under ``greeting:counter:{tenant}`` and bumped with INCR."""

    KEY_PREFIX = "greeting:counter:"

    def __init__(self, client: redis.Redis):
        self.client = client

    def _key(self, tenant_id: str) -> str:
        return f"{self.KEY_PREFIX}{tenant_id}"

    def increment(self, tenant_id: str) -> int:
        return int(self.client.incr(self._key(tenant_id)))


class GreetingService:
    def __init__(self, store: GreetingCounterStore, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or random.Random()

    def next_greeting(self, tenant_id: str) -> GreetingIndex:
        """Return the tenant's next greeting, falling back to a random one on storage errors."""
        try:
            counter = self.store.increment(tenant_id)
        except (SQLAlchemyError, redis.RedisError, GreetingCounterUnavailable) as exc:
            logger.warning(
                "Greeting counter unavailable for tenant %s: %s", tenant_id, exc, extra={"tenant_id": tenant_id}
            )
            index = self.rng.randrange(len(GREETINGS))
            metrics.greeting_issued("fallback")
            return GreetingIndex(index=index, message=GREETINGS[index], source="fallback")

        index = (counter - 1) % len(GREETINGS)
        metrics.greeting_issued("counter")
        return GreetingIndex(index=index, message=GREETINGS[index], source="counter")


def build_counter_store(db: Session, backend: str | None = None) -> GreetingCounterStore:
    """Counter store for the configured GREETING_COUNTER_BACKEND."""
    backend = (backend or settings.GREETING_COUNTER_BACKEND).lower()
    if backend == "redis":
        from app.db.redis_client import get_redis_client

        return RedisGreetingCounterStore(get_redis_client())
    return SqlGreetingCounterStore(db)
