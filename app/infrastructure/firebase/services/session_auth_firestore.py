"""Firestore-backed session authentication (implements ISessionAuthenticator)."""

from __future__ import annotations

from app.domain.exceptions import AuthenticationException
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_SESSIONS, COLLECTION_USERS
from app.shared.utils.datetime import ensure_utc, utc_now


class FirestoreSessionAuthenticator:
    """Resolves a session document (keyed by session id) to its live user."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._sessions = client.collection(COLLECTION_SESSIONS)
        self._users = client.collection(COLLECTION_USERS)

    async def require_authenticated_user(self, session_id: str) -> str:
        if not session_id:
            raise AuthenticationException("Invalid session: Session not found")
        snapshot = await self._sessions.document(session_id).get()
        if not snapshot:
            raise AuthenticationException("Invalid session: Session not found")
        session = snapshot.to_dict()

        expires_at = ensure_utc(session.get("expires_at"))
        if expires_at is None or expires_at <= utc_now():
            raise AuthenticationException("Session expired: Please log in again")

        user_id = session.get("user_id")
        if not user_id or not await self._users.document(user_id).get():
            raise AuthenticationException("Invalid session: User not found")
        return user_id
