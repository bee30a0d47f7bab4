"""Firestore-backed organization lookups (implements IOrganizationRepository)."""

from __future__ import annotations

from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_ORGANIZATIONS


class FirestoreOrganizationRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_ORGANIZATIONS)

    async def get_id_by_slug(self, slug: str) -> str | None:
        """Return organization id by unique slug (server-side where query, at most one doc)."""
        q = self._coll.where("slug", "==", slug).limit(1)
        async for snapshot in q.stream():
            return snapshot.id
        return None
