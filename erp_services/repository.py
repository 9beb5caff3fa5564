"""
erp_services.repository -- In-memory document collections with write-back.

Responsibility:
    Holds one collection of documents (all quotes, all payables ...) in
    memory, keyed by id, and writes the whole collection to the key-value
    store after every change.

Architecture position:
    Services -- implements ``erp_modules._document_helpers.DocumentRepository``
    for the module services.

Invariants enforced:
    - Insertion order is kept; ``list()`` returns documents in the order
      they were first stored.
    - Persistence is best-effort: a failed write is logged as
      ``repository_persist_failed`` and the in-memory change is kept, so
      the store holds the last snapshot that was written successfully.
      ``flush()`` retries and raises.
    - The new collection is encoded before it replaces the in-memory one;
      a codec error leaves both memory and store as they were.

Failure modes:
    - MalformedDocumentError / UnknownStatusError while loading a stored
      collection (including duplicate ids).
    - PersistenceError from ``load()`` when the store cannot be read, and
      from ``flush()`` when it cannot be written.
    - Codec errors from ``upsert()`` / ``remove()`` propagate unchanged.
"""

from __future__ import annotations

from typing import Generic, Protocol, TypeVar
from uuid import UUID

from erp_kernel.exceptions import MalformedDocumentError, PersistenceError
from erp_kernel.logging_config import LogContext, get_logger
from erp_services.persistence import KeyValueStore
from erp_services.serialization import CollectionCodec

logger = get_logger("services.repository")


class _Identified(Protocol):
    id: UUID


T = TypeVar("T", bound=_Identified)


class DocumentRepository(Generic[T]):
    """One collection of documents over a key-value store."""

    def __init__(self, store: KeyValueStore, key: str, codec: CollectionCodec[T]):
        self._store = store
        self._key = key
        self._codec = codec
        self._documents: dict[UUID, T] = {}
        self._dirty = False
        self.load()

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_dirty(self) -> bool:
        """True when the last write to the store failed."""
        return self._dirty

    def load(self) -> None:
        """Replace the in-memory collection with the stored snapshot."""
        text = self._store.get(self._key)
        documents = self._codec.decode_many(text) if text else []
        loaded: dict[UUID, T] = {}
        for document in documents:
            if document.id in loaded:
                raise MalformedDocumentError(str(document.id), f"duplicate id in {self._key}")
            loaded[document.id] = document
        self._documents = loaded
        self._dirty = False
        logger.info("repository_loaded", extra={"key": self._key, "count": len(loaded)})

    def get(self, document_id: UUID) -> T | None:
        return self._documents.get(document_id)

    def list(self) -> list[T]:
        return list(self._documents.values())

    def upsert(self, document: T) -> None:
        candidate = dict(self._documents)
        candidate[document.id] = document
        self._commit(candidate)

    def remove(self, document_id: UUID) -> bool:
        if document_id not in self._documents:
            return False
        candidate = dict(self._documents)
        del candidate[document_id]
        self._commit(candidate)
        return True

    def flush(self) -> None:
        """Write the collection now; raises PersistenceError on failure."""
        self._store.set(self._key, self._codec.encode_many(self.list()))
        self._dirty = False

    def _commit(self, candidate: dict[UUID, T]) -> None:
        # Encoding errors propagate before memory is touched.
        text = self._codec.encode_many(list(candidate.values()))
        self._documents = candidate
        try:
            self._store.set(self._key, text)
            self._dirty = False
        except PersistenceError:
            self._dirty = True
            with LogContext.bind(collection=self._key):
                logger.error(
                    "repository_persist_failed",
                    extra={"key": self._key, "count": len(self._documents)},
                    exc_info=True,
                )
