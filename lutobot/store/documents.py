"""Path-addressed JSON document store.

Documents live in a tree addressed by slash-separated paths, e.g.
``recipes/42`` or ``steps/42/step-1``. Reading a path returns the whole
subtree below it; writing replaces it. Two backends:

    InMemoryDocumentStore   — dict tree, for tests and throwaway runs
    SQLiteDocumentStore     — one JSON blob per top-level collection
"""

from __future__ import annotations

import abc
import asyncio
import copy
import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger


class StoreError(RuntimeError):
    """Raised for invalid paths or backend failures."""


def split_path(path: str) -> list[str]:
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments:
        raise StoreError(f"Invalid document path: {path!r}")
    return segments


def _read(tree: Any, segments: list[str]) -> Any | None:
    node = tree
    for seg in segments:
        if not isinstance(node, dict) or seg not in node:
            return None
        node = node[seg]
    return node


def _write(tree: dict[str, Any], segments: list[str], value: Any) -> None:
    """Set (or, for ``None``, remove) the node at ``segments`` inside ``tree``."""
    node = tree
    for seg in segments[:-1]:
        child = node.get(seg)
        if not isinstance(child, dict):
            if value is None:
                return
            child = {}
            node[seg] = child
        node = child
    if value is None:
        node.pop(segments[-1], None)
    else:
        node[segments[-1]] = value


class DocumentStore(abc.ABC):
    """Async key-by-path document store interface."""

    @abc.abstractmethod
    async def get(self, path: str) -> Any | None:
        """Return the value (or subtree) at ``path``; ``None`` if absent."""
        ...

    @abc.abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Replace the value at ``path``. Setting ``None`` removes it."""
        ...

    async def delete(self, path: str) -> None:
        await self.set(path, None)

    async def exists(self, path: str) -> bool:
        return await self.get(path) is not None

    def close(self) -> None:
        """Release backend resources."""


class InMemoryDocumentStore(DocumentStore):
    """Process-local dict tree. Values are deep-copied in and out."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._root: dict[str, Any] = copy.deepcopy(data) if data else {}

    async def get(self, path: str) -> Any | None:
        return copy.deepcopy(_read(self._root, split_path(path)))

    async def set(self, path: str, value: Any) -> None:
        _write(self._root, split_path(path), copy.deepcopy(value))


_SCHEMA = """
CREATE TABLE IF NOT EXISTS collections (
    name TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class SQLiteDocumentStore(DocumentStore):
    """SQLite-backed store — one JSON document per top-level collection.

    Blocking sqlite calls run in a worker thread. Writes are
    read-modify-write on a whole collection and are serialized with a lock.
    """

    def __init__(self, db_path: str = "data/lutobot.db"):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._init_db()
        logger.info(f"SQLiteDocumentStore initialized: {db_path}")

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._get_conn() as conn:
            conn.executescript(_SCHEMA)
            conn.commit()

    def _load(self, conn: sqlite3.Connection, name: str) -> Any | None:
        row = conn.execute(
            "SELECT data FROM collections WHERE name = ?", (name,)
        ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt collection '{name}': {e}") from e

    def _get_sync(self, segments: list[str]) -> Any | None:
        with self._get_conn() as conn:
            data = self._load(conn, segments[0])
        return _read(data, segments[1:]) if len(segments) > 1 else data

    def _set_sync(self, segments: list[str], value: Any) -> None:
        name, rest = segments[0], segments[1:]
        with self._write_lock, self._get_conn() as conn:
            if rest:
                data = self._load(conn, name)
                if not isinstance(data, dict):
                    data = {}
                _write(data, rest, value)
            else:
                data = value

            if data is None or data == {}:
                conn.execute("DELETE FROM collections WHERE name = ?", (name,))
            else:
                conn.execute(
                    "INSERT INTO collections (name, data) VALUES (?, ?) "
                    "ON CONFLICT(name) DO UPDATE SET data = excluded.data, "
                    "updated_at = CURRENT_TIMESTAMP",
                    (name, json.dumps(data)),
                )
            conn.commit()

    async def get(self, path: str) -> Any | None:
        return await asyncio.to_thread(self._get_sync, split_path(path))

    async def set(self, path: str, value: Any) -> None:
        try:
            await asyncio.to_thread(self._set_sync, split_path(path), value)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Value at '{path}' is not JSON-serializable: {e}") from e

    def collection_names(self) -> list[str]:
        with self._get_conn() as conn:
            rows = conn.execute("SELECT name FROM collections ORDER BY name").fetchall()
        return [r[0] for r in rows]
