"""Key/value backends for the shared registry.

The registry only ever stores JSON text under string keys, mirroring a
browser-style local storage scratch pad. Two backends are provided: a
process-local dict for tests and a SQLite table for durability across
restarts on a single machine.
"""

import logging
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from nearpay.core.exceptions import StorageError
from nearpay.db import RegistryEntry, transaction

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def pop(self, key: str) -> str | None:
        """Return the value and remove the key in one step."""
        ...

    def keys(self) -> list[str]: ...


class InMemoryStore:
    """Dict-backed store; state is lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def pop(self, key: str) -> str | None:
        return self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqliteStore:
    """Store persisted in the ``registry_entries`` table."""

    def __init__(self, session_maker: sessionmaker[Any]):
        self._session_maker = session_maker

    def get(self, key: str) -> str | None:
        try:
            with self._session_maker() as session:
                entry = session.get(RegistryEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read key {key}", {"key": key}) from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_maker() as session, transaction(session):
                entry = session.get(RegistryEntry, key)
                if entry:
                    entry.value = value
                else:
                    session.add(RegistryEntry(key=key, value=value))
        except SQLAlchemyError as e:
            logger.error(f"Failed to write registry key {key}: {e}")
            raise StorageError(f"Failed to write key {key}", {"key": key}) from e

    def delete(self, key: str) -> None:
        try:
            with self._session_maker() as session, transaction(session):
                entry = session.get(RegistryEntry, key)
                if entry:
                    session.delete(entry)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete key {key}", {"key": key}) from e

    def pop(self, key: str) -> str | None:
        try:
            with self._session_maker() as session, transaction(session):
                entry = session.get(RegistryEntry, key)
                if entry is None:
                    return None
                value = entry.value
                session.delete(entry)
                return value
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to pop key {key}", {"key": key}) from e

    def keys(self) -> list[str]:
        try:
            with self._session_maker() as session:
                return list(session.scalars(select(RegistryEntry.key)))
        except SQLAlchemyError as e:
            raise StorageError("Failed to list registry keys") from e
