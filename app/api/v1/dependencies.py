"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the application services. All services are
built from infrastructure implementations here; routes depend only on these
dependencies, not on infra directly. Tests swap them via
app.dependency_overrides.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated

from fastapi import Depends, Request

from app.application.interfaces.repositories import (
    IExecutionLogRepository,
    IObjectStore,
    IOrganizationRepository,
)
from app.application.interfaces.services import IAuditService, IBehaviorAction
from app.application.services.access_guard import AccessGuard
from app.application.services.authorization_service import AuthorizationService
from app.application.services.behavior_executor import BehaviorExecutor
from app.application.services.behavior_sequence_runner import BehaviorSequenceRunner
from app.application.services.template_set_resolver import TemplateSetResolver
from app.application.use_cases.template_sets import TemplateSetService
from app.application.use_cases.workflows import ExecuteWorkflowUseCase, WorkflowService
from app.core.config import get_settings
from app.domain.enums import BehaviorType
from app.infrastructure.firebase import require_firestore_client
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.repositories import (
    FirestoreExecutionLogRepository,
    FirestoreObjectStore,
    FirestoreOrganizationRepository,
)
from app.infrastructure.firebase.services import (
    FirestoreAuditService,
    FirestorePermissionResolver,
    FirestoreSessionAuthenticator,
)


def get_session_id(request: Request) -> str:
    """Session id from the configured header; empty when absent (rejected by authentication)."""
    return request.headers.get(get_settings().session_header_name, "").strip()


def get_firestore() -> FirestoreRESTClient:
    return require_firestore_client()


FirestoreDep = Annotated[FirestoreRESTClient, Depends(get_firestore)]


def get_object_store(client: FirestoreDep) -> IObjectStore:
    return FirestoreObjectStore(client)


def get_execution_log_repo(client: FirestoreDep) -> IExecutionLogRepository:
    return FirestoreExecutionLogRepository(client)


def get_organization_repo(client: FirestoreDep) -> IOrganizationRepository:
    return FirestoreOrganizationRepository(client)


def get_audit_service(client: FirestoreDep) -> IAuditService:
    return FirestoreAuditService(client)


def get_access_guard(request: Request, client: FirestoreDep) -> AccessGuard:
    """Session authentication + RBAC, with the Redis permission cache when connected."""
    settings = get_settings()
    authorization = AuthorizationService(
        FirestorePermissionResolver(client),
        cache=getattr(request.app.state, "cache", None),
        cache_ttl=settings.cache_ttl_permissions,
    )
    return AccessGuard(FirestoreSessionAuthenticator(client), authorization)


def get_behavior_actions(request: Request) -> Mapping[BehaviorType, IBehaviorAction]:
    """Action gateway wired at startup (see app.core.lifespan)."""
    return getattr(request.app.state, "behavior_actions", None) or {}


def get_behavior_executor(
    actions: Annotated[Mapping[BehaviorType, IBehaviorAction], Depends(get_behavior_actions)],
) -> BehaviorExecutor:
    return BehaviorExecutor(actions)


def get_sequence_runner(
    executor: Annotated[BehaviorExecutor, Depends(get_behavior_executor)],
    execution_log_repo: Annotated[IExecutionLogRepository, Depends(get_execution_log_repo)],
) -> BehaviorSequenceRunner:
    return BehaviorSequenceRunner(executor, execution_log_repo)


def get_workflow_service(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    access: Annotated[AccessGuard, Depends(get_access_guard)],
    audit_service: Annotated[IAuditService, Depends(get_audit_service)],
    execution_log_repo: Annotated[IExecutionLogRepository, Depends(get_execution_log_repo)],
) -> WorkflowService:
    return WorkflowService(store, access, audit_service, execution_log_repo)


def get_execute_workflow_use_case(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    access: Annotated[AccessGuard, Depends(get_access_guard)],
    runner: Annotated[BehaviorSequenceRunner, Depends(get_sequence_runner)],
    audit_service: Annotated[IAuditService, Depends(get_audit_service)],
) -> ExecuteWorkflowUseCase:
    return ExecuteWorkflowUseCase(store, access, runner, audit_service)


def get_template_set_resolver(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    organization_repo: Annotated[IOrganizationRepository, Depends(get_organization_repo)],
) -> TemplateSetResolver:
    return TemplateSetResolver(
        store, organization_repo, get_settings().system_organization_slug
    )


def get_template_set_service(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    organization_repo: Annotated[IOrganizationRepository, Depends(get_organization_repo)],
    access: Annotated[AccessGuard, Depends(get_access_guard)],
    audit_service: Annotated[IAuditService, Depends(get_audit_service)],
    resolver: Annotated[TemplateSetResolver, Depends(get_template_set_resolver)],
) -> TemplateSetService:
    return TemplateSetService(
        store,
        organization_repo,
        access,
        audit_service,
        resolver,
        system_organization_slug=get_settings().system_organization_slug,
    )


SessionId = Annotated[str, Depends(get_session_id)]
WorkflowServiceDep = Annotated[WorkflowService, Depends(get_workflow_service)]
ExecuteWorkflowDep = Annotated[ExecuteWorkflowUseCase, Depends(get_execute_workflow_use_case)]
TemplateSetServiceDep = Annotated[TemplateSetService, Depends(get_template_set_service)]
