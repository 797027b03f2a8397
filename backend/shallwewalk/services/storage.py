"""Durable key-value storage for the engine's JSON documents.

The engine stores exactly two documents: the list of day records and the list
of animal profiles, each under its own key.
"""

import json
import threading
from typing import Any, Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from shallwewalk.core.errors import PersistenceError
from shallwewalk.db import SessionLocal, init_db, session_scope
from shallwewalk.models.kv_entry import KeyValueEntry


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStorage:
    """Dict-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()
        self.writes = 0

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self.writes += 1


class SqlKeyValueStorage:
    """Storage backed by the kv_entries table."""

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal
        self._initialized = False

    def _ensure_tables(self) -> None:
        if self._initialized:
            return
        init_db(self._session_factory.kw.get("bind"))
        self._initialized = True

    def get(self, key: str) -> str | None:
        try:
            self._ensure_tables()
            with session_scope(self._session_factory) as db:
                row = db.get(KeyValueEntry, key)
                return row.value if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            self._ensure_tables()
            with session_scope(self._session_factory) as db:
                row = db.get(KeyValueEntry, key)
                if row is None:
                    db.add(KeyValueEntry(key=key, value=value))
                else:
                    row.value = value
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e


def read_json_list(storage: KeyValueStorage, key: str) -> list[Any]:
    """Read a JSON list document; a missing key is an empty list.

    Raises:
        PersistenceError: If the document is not valid JSON or not a list.
    """
    raw = storage.get(key)
    if raw is None or raw.strip() == "":
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Stored document {key!r} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise PersistenceError(f"Stored document {key!r} must be a list, got {type(data).__name__}")
    return data


def write_json_list(storage: KeyValueStorage, key: str, items: list[Any]) -> None:
    storage.set(key, json.dumps(items, ensure_ascii=False))
    logger.debug(f"Persisted {len(items)} item(s) under {key!r}")
