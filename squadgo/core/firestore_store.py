"""Firestore implementation of the document store."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar, cast

from firebase_admin import firestore

from .store import DocumentStore, Filter, Transaction

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction as FsTransaction

T = TypeVar("T")


def _with_id(snapshot: DocumentSnapshot) -> dict[str, Any]:
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


def _build_query(
    db: Client,
    collection: str,
    filters: Sequence[Filter],
    order_by: str | None,
    limit: int | None,
) -> Any:
    query: Any = db.collection(collection)
    for field, op, value in filters:
        query = query.where(filter=firestore.FieldFilter(field, op, value))
    if order_by:
        query = query.order_by(order_by)
    if limit:
        query = query.limit(limit)
    return query


class FirestoreTransaction(Transaction):
    """Adapts a Firestore transaction to the store interface."""

    def __init__(self, db: Client, transaction: FsTransaction) -> None:
        """Wrap a Firestore transaction bound to ``db``."""
        self._db = db
        self._transaction = transaction

    def _ref(self, collection: str, doc_id: str) -> DocumentReference:
        return self._db.collection(collection).document(doc_id)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read a document within the transaction."""
        snapshot = cast(
            "DocumentSnapshot",
            self._ref(collection, doc_id).get(transaction=self._transaction),
        )
        if not snapshot.exists:
            return None
        return _with_id(snapshot)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a query within the transaction."""
        query = _build_query(self._db, collection, filters, order_by, limit)
        return [_with_id(doc) for doc in query.stream(transaction=self._transaction)]

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Queue a document write."""
        self._transaction.set(self._ref(collection, doc_id), data)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Queue a field update."""
        self._transaction.update(self._ref(collection, doc_id), data)


class FirestoreStore(DocumentStore):
    """Document store backed by a Firestore client."""

    def __init__(self, db: Client | None = None) -> None:
        """Use ``db`` or the default Firebase app's client."""
        if db is None:
            db = firestore.client()
        self.db = db

    def new_id(self, collection: str) -> str:
        """Allocate a Firestore auto-id."""
        return str(self.db.collection(collection).document().id)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read a single document."""
        snapshot = cast(
            "DocumentSnapshot", self.db.collection(collection).document(doc_id).get()
        )
        if not snapshot.exists:
            return None
        return _with_id(snapshot)

    def add(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Write a new document and return its id."""
        collection_ref = self.db.collection(collection)
        ref = collection_ref.document(doc_id) if doc_id else collection_ref.document()
        ref.set(data)
        return str(ref.id)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        self.db.collection(collection).document(doc_id).update(data)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a filtered query and return the matching documents."""
        query = _build_query(self.db, collection, filters, order_by, limit)
        return [_with_id(doc) for doc in query.stream()]

    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        """Run ``func`` in a Firestore transaction, retried on contention."""

        @firestore.transactional
        def in_transaction(transaction: FsTransaction) -> T:
            return func(FirestoreTransaction(self.db, transaction))

        return cast(T, in_transaction(self.db.transaction()))
