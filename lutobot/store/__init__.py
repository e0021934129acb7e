"""Recipe document store."""

from __future__ import annotations

from lutobot.core.config.schema import Config
from lutobot.store.documents import (
    DocumentStore,
    InMemoryDocumentStore,
    SQLiteDocumentStore,
    StoreError,
)
from lutobot.store.recipes import RecipeRepository


def create_store(config: Config) -> DocumentStore:
    """Build the document store backend named by ``config.store.backend``."""
    if config.store.backend == "memory":
        return InMemoryDocumentStore()
    return SQLiteDocumentStore(str(config.store_path))


__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "RecipeRepository",
    "SQLiteDocumentStore",
    "StoreError",
    "create_store",
]
