"""AuthorizationService and AccessGuard unit tests (wildcards, caching, errors)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.services.authorization_service import (
    AuthorizationService,
    permission_granted,
)
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.shared.enums import Permission


@pytest.mark.parametrize(
    ("granted", "permission", "expected"),
    [
        ({"manage_workflows"}, "manage_workflows", True),
        ({"*"}, "delete_templates", True),
        ({"view_*"}, "view_templates", True),
        ({"view_*"}, "manage_workflows", False),
        (set(), "view_workflows", False),
    ],
)
def test_permission_granted(granted: set[str], permission: str, expected: bool) -> None:
    assert permission_granted(granted, permission) is expected


async def test_require_permission_raises_with_permission_name(permission_resolver) -> None:
    service = AuthorizationService(permission_resolver)
    with pytest.raises(AuthorizationException) as exc_info:
        await service.require_permission("user_viewer", "org_1", "manage_workflows")
    assert exc_info.value.details == {
        "permission": "manage_workflows",
        "organization_id": "org_1",
    }


async def test_permissions_are_cached(permission_resolver) -> None:
    cache = MagicMock()
    cache.is_available.return_value = True
    cache.get = AsyncMock(side_effect=[None, ["view_*"]])
    cache.set = AsyncMock(return_value=True)
    service = AuthorizationService(permission_resolver, cache=cache, cache_ttl=60)

    assert await service.check_permission("user_viewer", "org_1", "view_workflows")
    assert await service.check_permission("user_viewer", "org_1", "view_templates")

    assert permission_resolver.calls == 1
    cache.set.assert_awaited_once_with("permission:org_1:user_viewer", ["view_*"], ttl=60)



async def test_resolver_errors_propagate() -> None:
    resolver = AsyncMock()
    resolver.get_user_permissions.side_effect = RuntimeError("roles unavailable")
    service = AuthorizationService(resolver)
    with pytest.raises(RuntimeError):
        await service.check_permission("u", "org_1", "view_workflows")


async def test_access_guard_authorize_returns_user_id(access) -> None:
    assert await access.authorize("sess_admin", "org_1", Permission.MANAGE_WORKFLOWS) == "user_admin"


async def test_access_guard_rejects_unknown_session(access) -> None:
    with pytest.raises(AuthenticationException):
        await access.authorize("sess_nope", "org_1", Permission.VIEW_WORKFLOWS)


async def test_access_guard_rejects_other_organization(access) -> None:
    with pytest.raises(AuthorizationException):
        await access.authorize("sess_admin", "org_2", Permission.VIEW_WORKFLOWS)
