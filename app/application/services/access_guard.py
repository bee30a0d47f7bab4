"""Access guard: session authentication followed by an organization permission check."""

from __future__ import annotations

from app.application.interfaces.services import ISessionAuthenticator
from app.application.services.authorization_service import AuthorizationService
from app.shared.enums import Permission


class AccessGuard:
    """Resolves the caller from a session and enforces permissions per organization."""

    def __init__(
        self,
        authenticator: ISessionAuthenticator,
        authorization: AuthorizationService,
    ) -> None:
        self.authenticator = authenticator
        self.authorization = authorization

    async def authenticate(self, session_id: str) -> str:
        """Return the user id for session_id (raises AuthenticationException)."""
        return await self.authenticator.require_authenticated_user(session_id)

    async def require(
        self, user_id: str, organization_id: str, permission: Permission
    ) -> None:
        """Raise AuthorizationException unless user holds permission in organization."""
        await self.authorization.require_permission(
            user_id, organization_id, permission.value
        )

    async def authorize(
        self, session_id: str, organization_id: str, permission: Permission
    ) -> str:
        """Authenticate and check permission in one step; returns the user id."""
        user_id = await self.authenticate(session_id)
        await self.require(user_id, organization_id, permission)
        return user_id
