"""Firestore-backed object action log (implements IAuditService)."""

from __future__ import annotations

from typing import Any

from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_OBJECT_ACTIONS
from app.shared.enums import AuditAction
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid


class FirestoreAuditService:
    """Appends one document per object action (who did what to which object, when)."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_OBJECT_ACTIONS)

    async def log_object_action(
        self,
        organization_id: str,
        object_id: str,
        action_type: AuditAction,
        action_data: dict[str, Any],
        performed_by: str | None = None,
    ) -> None:
        await self._coll.create(
            generate_cuid(),
            {
                "organization_id": organization_id,
                "object_id": object_id,
                "action_type": action_type.value,
                "action_data": action_data,
                "performed_by": performed_by,
                "performed_at": utc_now(),
            },
        )
