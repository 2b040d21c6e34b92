"""In-memory implementation of the document store.

Used by the test suite and by ``STORE_BACKEND=memory`` for local runs. A
single re-entrant lock serializes transactions, and writes made inside a
transaction are staged and only applied once the transaction function
returns, so an exception leaves the store untouched.
"""

from __future__ import annotations

import copy
import operator
import threading
import uuid
from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from .store import DocumentStore, Filter, Transaction

T = TypeVar("T")

_MISSING = object()

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda field, value: field in value,
    "array_contains": lambda field, value: isinstance(field, list) and value in field,
}


def _apply_update(document: dict[str, Any], data: dict[str, Any]) -> None:
    for key, value in data.items():
        target = document
        *parents, leaf = key.split(".")
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[leaf] = copy.deepcopy(value)


def _matches(document: dict[str, Any], filters: Sequence[Filter]) -> bool:
    for field, op, value in filters:
        current = document.get(field, _MISSING)
        if current is _MISSING:
            return False
        try:
            if not _OPERATORS[op](current, value):
                return False
        except TypeError:
            return False
    return True


class MemoryTransaction(Transaction):
    """Transaction that stages writes until commit."""

    def __init__(self, store: MemoryStore) -> None:
        """Bind to ``store``."""
        self._store = store
        self._writes: list[Callable[[], None]] = []

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read the committed document."""
        return self._store.get(collection, doc_id)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query the committed documents."""
        return self._store.query(collection, filters, order_by, limit)

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Stage a document write."""
        data = copy.deepcopy(data)
        self._writes.append(lambda: self._store._write(collection, doc_id, data))

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Stage a field update."""
        data = copy.deepcopy(data)
        self._writes.append(lambda: self._store.update(collection, doc_id, data))

    def commit(self) -> None:
        """Apply the staged writes in order."""
        for write in self._writes:
            write()
        self._writes = []


class MemoryStore(DocumentStore):
    """Thread-safe dict-of-dicts document store."""

    def __init__(self) -> None:
        """Start empty."""
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.RLock()

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._collections[collection][doc_id] = copy.deepcopy(data)

    def new_id(self, collection: str) -> str:
        """Allocate a random id."""
        return uuid.uuid4().hex[:20]

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return a copy of the document, or None."""
        with self._lock:
            document = self._collections[collection].get(doc_id)
            if document is None:
                return None
            data = copy.deepcopy(document)
        data["id"] = doc_id
        return data

    def add(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Write a new document and return its id."""
        doc_id = doc_id or self.new_id(collection)
        self._write(collection, doc_id, data)
        return doc_id

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        with self._lock:
            document = self._collections[collection].get(doc_id)
            if document is None:
                raise KeyError(f"No document to update: {collection}/{doc_id}")
            _apply_update(document, data)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Filter, sort and cut the collection like a Firestore query would."""
        with self._lock:
            results = [
                {**copy.deepcopy(document), "id": doc_id}
                for doc_id, document in self._collections[collection].items()
                if _matches(document, filters)
            ]
        if order_by:
            results = [doc for doc in results if order_by in doc]
            results.sort(key=lambda doc: doc[order_by])
        if limit:
            results = results[:limit]
        return results

    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        """Run ``func`` while holding the store lock; commit if it returns."""
        with self._lock:
            transaction = MemoryTransaction(self)
            result = func(transaction)
            transaction.commit()
            return result
