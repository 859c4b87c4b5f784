"""Tests for the rotating greeting counter."""
import random

import pytest
import redis
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import GreetingCounterUnavailable
from app.models.greeting_models import TenantGreetingCounter
from app.services.greeting_service import (
    GREETINGS,
    GreetingService,
    RedisGreetingCounterStore,
    SqlGreetingCounterStore,
    build_counter_store,
)


class FakeRedis:
    """Minimal in-memory stand-in for the INCR command."""

    def __init__(self):
        self.data: dict[str, int] = {}

    def incr(self, key: str) -> int:
        self.data[key] = self.data.get(key, 0) + 1
        return self.data[key]


class BrokenStore:
    def __init__(self, exc: Exception):
        self.exc = exc

    def increment(self, tenant_id: str) -> int:
        raise self.exc


def test_sql_counter_cycles_through_greetings(db_session):
    service = GreetingService(SqlGreetingCounterStore(db_session))

    messages = [service.next_greeting("tandoori-nights").message for _ in range(6)]

    assert messages[:5] == list(GREETINGS)
    assert messages[5] == "Great choice!"
    db_session.expire_all()
    row = db_session.get(TenantGreetingCounter, "tandoori-nights")
    assert row.to_dict()["message_counter"] == 6


def test_sql_counters_are_per_tenant(db_session):
    service = GreetingService(SqlGreetingCounterStore(db_session))
    service.next_greeting("a")
    service.next_greeting("a")
    first_b = service.next_greeting("b")

    assert first_b.index == 0
    assert first_b.source == "counter"


def test_redis_counter_uses_tenant_key():
    fake = FakeRedis()
    service = GreetingService(RedisGreetingCounterStore(fake))

    first = service.next_greeting("spice-house")
    second = service.next_greeting("spice-house")

    assert (first.index, second.index) == (0, 1)
    assert second.message == "Good choice!"
    assert fake.data == {"greeting:counter:spice-house": 2}


@pytest.mark.parametrize(
    "exc",
    [
        SQLAlchemyError("database is down"),
        redis.ConnectionError("connection refused"),
        GreetingCounterUnavailable("redis"),
    ],
)
def test_storage_failure_falls_back_to_random(exc, caplog):
    caplog.set_level("WARNING")
    service = GreetingService(BrokenStore(exc), rng=random.Random(7))

    greeting = service.next_greeting("tenant-x")

    assert greeting.source == "fallback"
    assert 0 <= greeting.index < len(GREETINGS)
    assert greeting.message == GREETINGS[greeting.index]
    assert "Greeting counter unavailable" in caplog.text


def test_unexpected_errors_propagate():
    service = GreetingService(BrokenStore(KeyError("bug")))
    with pytest.raises(KeyError):
        service.next_greeting("tenant-x")


def test_build_counter_store_defaults_to_sql(db_session):
    assert isinstance(build_counter_store(db_session, "db"), SqlGreetingCounterStore)
