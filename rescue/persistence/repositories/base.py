"""Generic async Firestore repository for top-level collections."""

from __future__ import annotations

from typing import Generic, Type, TypeVar

from google.api_core.exceptions import GoogleAPIError

from rescue.contracts.common import FirestoreModel
from rescue.persistence.errors import StoreUnavailableError
from rescue.persistence.firestore_client import get_firestore_client

T = TypeVar("T", bound=FirestoreModel)


class BaseRepository(Generic[T]):
    """Create and read documents of a top-level Firestore collection.

    Serialization relies entirely on the contract's ``to_firestore()``
    and ``from_firestore()`` methods, with no extra mapping layer.
    Stored documents are final: there is no update or delete.
    """

    def __init__(self, model_class: Type[T], collection_name: str):
        self._model_class = model_class
        self._collection_name = collection_name

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collection_ref(self):
        db = get_firestore_client()
        return db.collection(self._collection_name)

    def _hydrate(self, doc) -> T:
        data = doc.to_dict()
        data["id"] = doc.id
        return self._model_class.from_firestore(data)

    async def _stream(self, query) -> list[T]:
        results: list[T] = []
        try:
            async for doc in query.stream():
                results.append(self._hydrate(doc))
        except GoogleAPIError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return results

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, doc_id: str) -> T | None:
        """Fetch a single document by ID. Returns *None* if missing."""
        try:
            doc = await self._collection_ref().document(doc_id).get()
        except GoogleAPIError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        if not doc.exists:
            return None
        return self._hydrate(doc)

    async def list_all(self) -> list[T]:
        """Stream every document in the collection."""
        return await self._stream(self._collection_ref())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, entity: T) -> str:
        """Create a document with a Firestore-generated ID.

        Any ``id`` already set on the entity is ignored.
        Returns the document ID.
        """
        data = entity.to_firestore()
        data.pop("id", None)
        try:
            _, ref = await self._collection_ref().add(data)
        except GoogleAPIError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return ref.id
