"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IExecutionLogRepository,
    IObjectStore,
    IOrganizationRepository,
)
from app.application.interfaces.services import (
    IAuditService,
    IBehaviorAction,
    ICacheService,
    IPermissionResolver,
    ISessionAuthenticator,
)

__all__ = [
    "IAuditService",
    "IBehaviorAction",
    "ICacheService",
    "IExecutionLogRepository",
    "IObjectStore",
    "IOrganizationRepository",
    "IPermissionResolver",
    "ISessionAuthenticator",
]
