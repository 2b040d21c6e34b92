"""Document store port shared by the repositories.

Repositories never talk to a database client directly. They go through a
``DocumentStore``, which has two implementations: ``FirestoreStore`` for
production and ``MemoryStore`` for tests and local development.

Collections are addressed by slash-separated paths, so a sub-collection is
just ``"tournaments/<id>/matches"``. Documents come back as plain dicts with
their id under the ``"id"`` key.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")

# (field, operator, value), operators as in Firestore: ==, !=, <, <=, >, >=,
# in, array_contains.
Filter = tuple[str, str, Any]


class TransactionAborted(Exception):
    """Raised inside a transaction function to roll it back on purpose."""


class Transaction(abc.ABC):
    """A unit of work. All reads must happen before the first write."""

    @abc.abstractmethod
    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read a document, or None when it does not exist."""

    @abc.abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a query whose results the transaction depends on."""

    @abc.abstractmethod
    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abc.abstractmethod
    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge fields into an existing document. Dotted keys address nested fields."""


class DocumentStore(abc.ABC):
    """Backend-neutral document store with atomic transactions."""

    @abc.abstractmethod
    def new_id(self, collection: str) -> str:
        """Allocate an id for a document that will be written later."""

    @abc.abstractmethod
    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read a single document."""

    @abc.abstractmethod
    def add(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Write a new document and return its id."""

    @abc.abstractmethod
    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge fields into an existing document."""

    @abc.abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return the documents matching every filter, ascending by ``order_by``."""

    @abc.abstractmethod
    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        """Run ``func`` atomically and return its result.

        Any exception raised by ``func`` rolls the transaction back and
        propagates to the caller.
        """
