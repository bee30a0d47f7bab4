"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (object store, logs, audit, actions).
"""

from app.application.interfaces import (
    IAuditService,
    IBehaviorAction,
    ICacheService,
    IExecutionLogRepository,
    IObjectStore,
    IOrganizationRepository,
    IPermissionResolver,
    ISessionAuthenticator,
)
from app.application.services.authorization_service import AuthorizationService
from app.application.services.behavior_executor import BehaviorExecutor
from app.application.services.behavior_sequence_runner import BehaviorSequenceRunner
from app.application.services.template_set_resolver import TemplateSetResolver
from app.application.use_cases.template_sets import TemplateSetService
from app.application.use_cases.workflows import ExecuteWorkflowUseCase, WorkflowService

__all__ = [
    "AuthorizationService",
    "BehaviorExecutor",
    "BehaviorSequenceRunner",
    "ExecuteWorkflowUseCase",
    "IAuditService",
    "IBehaviorAction",
    "ICacheService",
    "IExecutionLogRepository",
    "IObjectStore",
    "IOrganizationRepository",
    "IPermissionResolver",
    "ISessionAuthenticator",
    "TemplateSetResolver",
    "TemplateSetService",
    "WorkflowService",
]
