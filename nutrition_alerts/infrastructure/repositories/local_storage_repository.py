"""Client-scoped key/value persistence backed by SQLAlchemy."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from nutrition_alerts.infrastructure.errors import LocalStorageError
from nutrition_alerts.infrastructure.models import LocalStorageEntryModel


class KeyValueStore(Protocol):
    """Minimal ``get``/``set`` port over opaque string values."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class LocalStorageRepository:
    """Store opaque strings under a fixed ``namespace``.

    The namespace plays the part of a browser origin: every signed-in client
    gets its own set of keys. Each call opens and closes its own session so the
    repository can be held by long-lived objects.
    """

    def __init__(self, session_factory: sessionmaker[Session], namespace: str) -> None:
        self._session_factory = session_factory
        self.namespace = namespace

    def get(self, key: str) -> str | None:
        session = self._session_factory()
        try:
            model = session.get(LocalStorageEntryModel, (self.namespace, key))
            return model.value if model is not None else None
        except SQLAlchemyError as exc:
            msg = f"Failed to read local storage key {key!r}"
            raise LocalStorageError(msg) from exc
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        session = self._session_factory()
        try:
            model = session.get(LocalStorageEntryModel, (self.namespace, key))
            if model is None:
                model = LocalStorageEntryModel(namespace=self.namespace, key=key)
            model.value = value
            session.add(model)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            msg = f"Failed to write local storage key {key!r}"
            raise LocalStorageError(msg) from exc
        finally:
            session.close()

    def remove(self, key: str) -> None:
        session = self._session_factory()
        try:
            session.query(LocalStorageEntryModel).filter(
                LocalStorageEntryModel.namespace == self.namespace,
                LocalStorageEntryModel.key == key,
            ).delete(synchronize_session=False)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            msg = f"Failed to remove local storage key {key!r}"
            raise LocalStorageError(msg) from exc
        finally:
            session.close()


__all__ = ["KeyValueStore", "LocalStorageRepository"]
