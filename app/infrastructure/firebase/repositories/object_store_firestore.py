"""Firestore-backed generic object store (implements IObjectStore)."""

from __future__ import annotations

from typing import Any

from app.infrastructure.firebase._rest_client import (
    DOCUMENT_ID_FIELD,
    DocumentSnapshot,
    FirestoreRESTClient,
)
from app.infrastructure.firebase.collections import COLLECTION_OBJECTS
from app.shared.utils.generators import generate_cuid


def _to_document(snapshot: DocumentSnapshot) -> dict[str, Any]:
    return {**snapshot.to_dict(), "id": snapshot.id}


class FirestoreObjectStore:
    """Object store using one Firestore collection; documents are typed by 'type'.

    query_by_org_type needs a composite index on
    (organization_id, type, created_at, __name__).
    """

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_OBJECTS)

    async def get(self, object_id: str) -> dict[str, Any] | None:
        snapshot = await self._coll.document(object_id).get()
        if not snapshot:
            return None
        return _to_document(snapshot)

    async def insert(self, document: dict[str, Any]) -> str:
        """Insert with a fresh CUID document id; any 'id' key in document is ignored."""
        object_id = generate_cuid()
        data = {k: v for k, v in document.items() if k != "id"}
        await self._coll.create(object_id, data)
        return object_id

    async def patch(self, object_id: str, fields: dict[str, Any]) -> None:
        await self._coll.document(object_id).update(
            {k: v for k, v in fields.items() if k != "id"}
        )

    async def delete(self, object_id: str) -> None:
        await self._coll.document(object_id).delete()

    async def query_by_org_type(
        self, organization_id: str, object_type: str
    ) -> list[dict[str, Any]]:
        """Return documents of one type in an organization, oldest first (ties by id)."""
        q = (
            self._coll.where("organization_id", "==", organization_id)
            .where("type", "==", object_type)
            .order_by("created_at")
            .order_by(DOCUMENT_ID_FIELD)
        )
        return [_to_document(snapshot) async for snapshot in q.stream()]
