"""SQLAlchemy-backed key/value cache."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nutrition_alerts.application.notifications import STORAGE_KEY, NotificationStore
from nutrition_alerts.domain.entities import NotificationCandidate, NotificationType
from nutrition_alerts.infrastructure.database import Base, initialize_database
from nutrition_alerts.infrastructure.errors import LocalStorageError
from nutrition_alerts.infrastructure.repositories import LocalStorageRepository


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def test_get_set_and_remove(session_factory):
    repository = LocalStorageRepository(session_factory, namespace="user-1")

    assert repository.get("missing") is None

    repository.set("greeting", "hello")
    repository.set("greeting", "hello again")
    assert repository.get("greeting") == "hello again"

    repository.remove("greeting")
    assert repository.get("greeting") is None


def test_namespaces_are_isolated(session_factory):
    first = LocalStorageRepository(session_factory, namespace="user-1")
    second = LocalStorageRepository(session_factory, namespace="user-2")

    first.set(STORAGE_KEY, "[]")

    assert second.get(STORAGE_KEY) is None
    second.remove(STORAGE_KEY)
    assert first.get(STORAGE_KEY) == "[]"


def test_database_errors_are_wrapped(session_factory, monkeypatch):
    repository = LocalStorageRepository(session_factory, namespace="user-1")

    def failing_commit(self):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr("sqlalchemy.orm.Session.commit", failing_commit)

    with pytest.raises(LocalStorageError):
        repository.set("key", "value")


def test_store_survives_a_restart(session_factory, clock):
    store = NotificationStore(
        LocalStorageRepository(session_factory, namespace="user-1"), clock=clock
    )
    store.add(
        NotificationCandidate(
            id="meal-reminder-breakfast-2024-05-01",
            message="Don't forget to log your breakfast!",
            type=NotificationType.MEAL,
            time="8:00 AM",
        )
    )
    store.add(NotificationCandidate(message="Welcome", type=NotificationType.SYSTEM))
    store.mark_as_read("meal-reminder-breakfast-2024-05-01")

    restarted = NotificationStore(
        LocalStorageRepository(session_factory, namespace="user-1"), clock=clock
    )
    restarted.load()

    assert [(n.id, n.message, n.is_read) for n in restarted.get_all()] == [
        (n.id, n.message, n.is_read) for n in store.get_all()
    ]
