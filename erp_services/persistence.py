"""
erp_services.persistence -- Opaque key-value stores.

Responsibility:
    The storage boundary of the application.  A store maps a string key
    to a string value and knows nothing about documents; repositories
    serialize whole collections into it.

Architecture position:
    Services -- I/O layer.  ``SqlKeyValueStore`` uses the kernel's
    SQLAlchemy engine and the ``kv_entries`` table.

Invariants enforced:
    - ``set`` replaces the previous value atomically (one row, one commit).
    - Store failures surface as ``PersistenceError``; SQLAlchemy exceptions
      never escape this module.

Failure modes:
    - PersistenceError wrapping SQLAlchemyError on read or write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.exceptions import PersistenceError
from erp_kernel.logging_config import get_logger
from erp_services.orm import KeyValueEntryModel

logger = get_logger("services.persistence")


class KeyValueStore(ABC):
    """String-to-string storage used by repositories."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Stored value for ``key``, or None when never written."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqlKeyValueStore(KeyValueStore):
    """
    Store backed by the ``kv_entries`` table.

    Contract:
        ``session_factory`` returns a new Session per call (for example
        ``erp_kernel.db.get_session``); each operation opens, commits and
        closes its own session.
    """

    def __init__(self, session_factory: Callable[[], Session], clock: Clock | None = None):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    @staticmethod
    def _find(session: Session, key: str) -> KeyValueEntryModel | None:
        return session.scalars(
            select(KeyValueEntryModel).where(KeyValueEntryModel.key == key)
        ).one_or_none()

    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                entry = self._find(session, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            logger.error("kv_store_read_failed", extra={"key": key}, exc_info=True)
            raise PersistenceError(key, str(exc)) from exc

    def set(self, key: str, value: str) -> None:
        session = self._session_factory()
        try:
            entry = self._find(session, key)
            now = self._clock.now()
            if entry is None:
                session.add(KeyValueEntryModel(key=key, value=value, updated_at=now))
            else:
                entry.value = value
                entry.updated_at = now
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("kv_store_write_failed", extra={"key": key}, exc_info=True)
            raise PersistenceError(key, str(exc)) from exc
        finally:
            session.close()
        logger.debug("kv_store_written", extra={"key": key, "size": len(value)})
