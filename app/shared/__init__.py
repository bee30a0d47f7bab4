"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import (
    ActorType,
    AuditAction,
    ExecutionLogLevel,
    ExecutionLogStatus,
    Permission,
)
from app.shared.utils import (
    generate_behavior_id,
    generate_cuid,
    utc_now,
)

__all__ = [
    "ActorType",
    "AuditAction",
    "ExecutionLogLevel",
    "ExecutionLogStatus",
    "Permission",
    "generate_behavior_id",
    "generate_cuid",
    "utc_now",
]
