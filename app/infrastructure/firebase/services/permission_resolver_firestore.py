"""Resolves user permissions from Firestore (implements IPermissionResolver)."""

from __future__ import annotations

from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import (
    COLLECTION_ORGANIZATION_MEMBERS,
    COLLECTION_ROLES,
    COLLECTION_USERS,
)

SUPER_ADMIN_ROLE = "super_admin"


class FirestorePermissionResolver:
    """Membership -> role -> permissions; global super admins get every permission ('*')."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._users = client.collection(COLLECTION_USERS)
        self._members = client.collection(COLLECTION_ORGANIZATION_MEMBERS)
        self._roles = client.collection(COLLECTION_ROLES)

    async def _active_role(self, role_id: str | None) -> dict | None:
        if not role_id:
            return None
        snapshot = await self._roles.document(role_id).get()
        if not snapshot:
            return None
        role = snapshot.to_dict()
        return role if role.get("is_active", True) else None

    async def get_user_permissions(self, user_id: str, organization_id: str) -> set[str]:
        """Return permission names for user in organization (empty when not a member)."""
        user = await self._users.document(user_id).get()
        if user:
            global_role = await self._active_role(user.to_dict().get("global_role_id"))
            if global_role and global_role.get("name") == SUPER_ADMIN_ROLE:
                return {"*"}

        q = (
            self._members.where("user_id", "==", user_id)
            .where("organization_id", "==", organization_id)
            .where("is_active", "==", True)
            .limit(1)
        )
        async for membership in q.stream():
            role = await self._active_role(membership.to_dict().get("role_id"))
            if role is None:
                return set()
            return set(role.get("permissions") or [])
        return set()
