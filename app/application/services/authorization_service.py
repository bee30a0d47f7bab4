"""Authorization service: permission checks with optional caching (IPermissionResolver + cache)."""

from __future__ import annotations

from app.application.interfaces.services import ICacheService, IPermissionResolver
from app.domain.exceptions import AuthorizationException

WILDCARD = "*"


def permission_granted(granted: set[str], permission: str) -> bool:
    """Return True for an exact grant, the global '*', or a prefix wildcard like 'view_*'."""
    if permission in granted or WILDCARD in granted:
        return True
    return any(
        code.endswith(WILDCARD) and permission.startswith(code[:-1])
        for code in granted
    )


class AuthorizationService:
    """Centralized permission checking; uses cache when available (5 min TTL typical)."""

    def __init__(
        self,
        permission_resolver: IPermissionResolver,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
    ) -> None:
        self.permission_resolver = permission_resolver
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def get_user_permissions(self, user_id: str, organization_id: str) -> set[str]:
        """Return set of permission names (e.g. manage_workflows). Uses cache if available."""
        key = f"permission:{organization_id}:{user_id}"
        if self.cache and self.cache.is_available():
            cached = await self.cache.get(key)
            if cached is not None:
                return set(cached)

        permissions = await self.permission_resolver.get_user_permissions(
            user_id, organization_id
        )
        if self.cache and self.cache.is_available():
            await self.cache.set(key, sorted(permissions), ttl=self.cache_ttl)
        return permissions

    async def check_permission(
        self,
        user_id: str,
        organization_id: str,
        permission: str,
    ) -> bool:
        """Return True if the user holds permission in the organization."""
        permissions = await self.get_user_permissions(user_id, organization_id)
        return permission_granted(permissions, permission)

    async def require_permission(
        self,
        user_id: str,
        organization_id: str,
        permission: str,
    ) -> None:
        """Raise AuthorizationException if user lacks permission."""
        if not await self.check_permission(user_id, organization_id, permission):
            raise AuthorizationException(
                permission=permission, organization_id=organization_id
            )
