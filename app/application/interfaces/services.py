"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import AuditAction

if TYPE_CHECKING:
    from app.application.dtos.behavior import BehaviorActionRequest, BehaviorResult


# Session authenticator interface
class ISessionAuthenticator(Protocol):
    """Protocol for resolving a session token to a user."""

    async def require_authenticated_user(self, session_id: str) -> str:
        """Return user id for a live session; raise AuthenticationException otherwise."""


# Permission resolver interface
class IPermissionResolver(Protocol):
    """Protocol for resolving user permissions (used by AuthorizationService)."""

    async def get_user_permissions(self, user_id: str, organization_id: str) -> set[str]:
        """Return set of permission names (e.g. {'manage_workflows', 'view_*'})."""


# Audit service interface
class IAuditService(Protocol):
    """Protocol for writing object actions (audit trail per object)."""

    async def log_object_action(
        self,
        organization_id: str,
        object_id: str,
        action_type: AuditAction,
        action_data: dict[str, Any],
        performed_by: str | None = None,
    ) -> None:
        """Append one object action."""


# Behavior action interface
class IBehaviorAction(Protocol):
    """Protocol for one side-effecting behavior action (create contact, create ticket, ...).

    Implementations may raise; the behavior executor converts exceptions
    into failure results.
    """

    async def __call__(self, request: BehaviorActionRequest) -> BehaviorResult:
        """Run the action and return its result envelope."""


# Cache service interface
class ICacheService(Protocol):
    """Minimal cache protocol for permission caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""
