"""Pytest configuration and fixtures for the workflow orchestrator.

In-memory fakes stand in for Firestore, sessions and RBAC so unit and HTTP
tests run without external services. HTTP tests use app.main:app with
dependency overrides.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import (
    get_execute_workflow_use_case,
    get_template_set_service,
    get_workflow_service,
)
from app.application.dtos.behavior import BehaviorActionRequest, BehaviorResult
from app.application.dtos.workflow import ExecutionLogLine, ExecutionLogResult
from app.application.services.access_guard import AccessGuard
from app.application.services.authorization_service import AuthorizationService
from app.application.services.behavior_executor import BehaviorExecutor
from app.application.services.behavior_sequence_runner import BehaviorSequenceRunner
from app.application.services.template_set_resolver import TemplateSetResolver
from app.application.use_cases.template_sets import TemplateSetService
from app.application.use_cases.workflows import ExecuteWorkflowUseCase, WorkflowService
from app.domain.enums import BehaviorType
from app.domain.exceptions import AuthenticationException
from app.main import app

ORG_ID = "org_1"
SYSTEM_ORG_ID = "org_system"
SESSION_ID = "sess_admin"
USER_ID = "user_admin"
VIEWER_SESSION_ID = "sess_viewer"
VIEWER_ID = "user_viewer"

_BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


class FakeObjectStore:
    """Dict-backed IObjectStore. Inserted ids are obj_1, obj_2, ..."""

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def seed(self, object_id: str, **fields: Any) -> dict[str, Any]:
        doc = {"id": object_id, **fields}
        doc.setdefault("created_at", _BASE_TIME + timedelta(minutes=len(self.docs)))
        self.docs[object_id] = doc
        return doc

    async def get(self, object_id: str) -> dict[str, Any] | None:
        doc = self.docs.get(object_id)
        return dict(doc) if doc is not None else None

    async def insert(self, document: dict[str, Any]) -> str:
        object_id = f"obj_{next(self._ids)}"
        self.docs[object_id] = {**document, "id": object_id}
        return object_id

    async def patch(self, object_id: str, fields: dict[str, Any]) -> None:
        self.docs[object_id].update(fields)

    async def delete(self, object_id: str) -> None:
        self.docs.pop(object_id, None)

    async def query_by_org_type(self, organization_id: str, object_type: str) -> list[dict[str, Any]]:
        matches = [
            dict(d)
            for d in self.docs.values()
            if d.get("organization_id") == organization_id and d.get("type") == object_type
        ]
        return sorted(matches, key=lambda d: (d.get("created_at") or _BASE_TIME, d["id"]))


class FakeExecutionLogRepository:
    """In-memory IExecutionLogRepository; set fail_on to make one method raise."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.logs: dict[str, ExecutionLogResult] = {}
        self.fail_on = fail_on
        self._ids = itertools.count(1)

    def _maybe_fail(self, method: str) -> None:
        if self.fail_on == method:
            raise RuntimeError(f"log store down during {method}")

    async def create(self, organization_id: str, workflow_id: str, workflow_name: str) -> str:
        self._maybe_fail("create")
        execution_id = f"exec_{next(self._ids)}"
        self.logs[execution_id] = ExecutionLogResult(
            id=execution_id,
            organization_id=organization_id,
            workflow_id=workflow_id,
            workflow_name=workflow_name,
            status="running",
            logs=[],
            started_at=_BASE_TIME,
        )
        return execution_id

    async def append_log(self, execution_id: str, level: str, message: str) -> None:
        self._maybe_fail("append_log")
        self.logs[execution_id].logs.append(
            ExecutionLogLine(timestamp=_BASE_TIME, level=getattr(level, "value", level), message=message)
        )

    async def complete(self, execution_id: str, status: str, result: dict[str, Any]) -> None:
        self._maybe_fail("complete")
        current = self.logs[execution_id]
        self.logs[execution_id] = ExecutionLogResult(
            id=current.id,
            organization_id=current.organization_id,
            workflow_id=current.workflow_id,
            workflow_name=current.workflow_name,
            status=getattr(status, "value", status),
            logs=current.logs,
            started_at=current.started_at,
            completed_at=_BASE_TIME,
            result=result,
        )

    async def get(self, execution_id: str) -> ExecutionLogResult | None:
        return self.logs.get(execution_id)

    async def list_for_workflow(self, workflow_id: str, limit: int = 50) -> list[ExecutionLogResult]:
        return [log for log in self.logs.values() if log.workflow_id == workflow_id][:limit]


class FakeAuditService:
    """Records every log_object_action call as a dict."""

    def __init__(self) -> None:
        self.actions: list[dict[str, Any]] = []

    async def log_object_action(
        self,
        organization_id: str,
        object_id: str,
        action_type: Any,
        action_data: dict[str, Any] | None = None,
        performed_by: str | None = None,
    ) -> None:
        self.actions.append(
            {
                "organization_id": organization_id,
                "object_id": object_id,
                "action_type": getattr(action_type, "value", action_type),
                "action_data": action_data or {},
                "performed_by": performed_by,
            }
        )

    def types(self) -> list[str]:
        return [a["action_type"] for a in self.actions]


class FakeOrganizationRepository:
    def __init__(self, slugs: dict[str, str] | None = None) -> None:
        self.slugs = slugs if slugs is not None else {"system": SYSTEM_ORG_ID}

    async def get_id_by_slug(self, slug: str) -> str | None:
        return self.slugs.get(slug)


class FakeSessionAuthenticator:
    def __init__(self, sessions: dict[str, str] | None = None) -> None:
        self.sessions = sessions if sessions is not None else {
            SESSION_ID: USER_ID,
            VIEWER_SESSION_ID: VIEWER_ID,
        }

    async def require_authenticated_user(self, session_id: str) -> str:
        if not session_id:
            raise AuthenticationException("Invalid session: No session provided")
        user_id = self.sessions.get(session_id)
        if user_id is None:
            raise AuthenticationException("Invalid session: Session not found")
        return user_id


class FakePermissionResolver:
    def __init__(self, grants: dict[tuple[str, str], set[str]] | None = None) -> None:
        self.grants = grants if grants is not None else {
            (USER_ID, ORG_ID): {"*"},
            (VIEWER_ID, ORG_ID): {"view_*"},
        }
        self.calls = 0

    async def get_user_permissions(self, user_id: str, organization_id: str) -> set[str]:
        self.calls += 1
        return set(self.grants.get((user_id, organization_id), set()))


class RecordingAction:
    """IBehaviorAction double: records requests and replays a fixed result or raises."""

    def __init__(
        self,
        result: BehaviorResult | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.result = result or BehaviorResult(success=True)
        self.error = error
        self.requests: list[BehaviorActionRequest] = []

    async def __call__(self, request: BehaviorActionRequest) -> BehaviorResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


def workflow_doc(
    store: FakeObjectStore,
    workflow_id: str = "wf_1",
    *,
    behaviors: list[dict[str, Any]] | None = None,
    status: str = "active",
    error_handling: str = "continue",
    trigger_on: str = "checkout_start",
    objects: list[dict[str, Any]] | None = None,
    organization_id: str = ORG_ID,
    name: str = "Checkout",
) -> dict[str, Any]:
    """Seed a workflow document in the store and return it."""
    return store.seed(
        workflow_id,
        organization_id=organization_id,
        type="workflow",
        subtype="checkout-flow",
        name=name,
        description=None,
        status=status,
        custom_properties={
            "objects": objects or [],
            "behaviors": behaviors or [],
            "execution": {"trigger_on": trigger_on, "error_handling": error_handling},
        },
    )


def behavior_doc(
    behavior_id: str,
    behavior_type: str,
    *,
    priority: int = 0,
    enabled: bool = True,
    config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "id": behavior_id,
        "type": behavior_type,
        "enabled": enabled,
        "priority": priority,
        "config": config or {},
        "metadata": {"created_at": _BASE_TIME, "created_by": USER_ID},
    }


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def execution_log_repo() -> FakeExecutionLogRepository:
    return FakeExecutionLogRepository()


@pytest.fixture
def audit() -> FakeAuditService:
    return FakeAuditService()


@pytest.fixture
def organization_repo() -> FakeOrganizationRepository:
    return FakeOrganizationRepository()


@pytest.fixture
def permission_resolver() -> FakePermissionResolver:
    return FakePermissionResolver()


@pytest.fixture
def access(permission_resolver: FakePermissionResolver) -> AccessGuard:
    return AccessGuard(FakeSessionAuthenticator(), AuthorizationService(permission_resolver))


@pytest.fixture
def actions() -> dict[BehaviorType, RecordingAction]:
    """One succeeding RecordingAction per executable behavior type."""
    return {behavior_type: RecordingAction() for behavior_type in BehaviorType}


@pytest.fixture
def executor(actions: dict[BehaviorType, RecordingAction]) -> BehaviorExecutor:
    return BehaviorExecutor(actions)


@pytest.fixture
def runner(
    executor: BehaviorExecutor, execution_log_repo: FakeExecutionLogRepository
) -> BehaviorSequenceRunner:
    return BehaviorSequenceRunner(executor, execution_log_repo)


@pytest.fixture
def workflow_service(
    store: FakeObjectStore,
    access: AccessGuard,
    audit: FakeAuditService,
    execution_log_repo: FakeExecutionLogRepository,
) -> WorkflowService:
    return WorkflowService(store, access, audit, execution_log_repo)


@pytest.fixture
def execute_use_case(
    store: FakeObjectStore,
    access: AccessGuard,
    runner: BehaviorSequenceRunner,
    audit: FakeAuditService,
) -> ExecuteWorkflowUseCase:
    return ExecuteWorkflowUseCase(store, access, runner, audit)


@pytest.fixture
def resolver(
    store: FakeObjectStore, organization_repo: FakeOrganizationRepository
) -> TemplateSetResolver:
    return TemplateSetResolver(store, organization_repo)


@pytest.fixture
def template_set_service(
    store: FakeObjectStore,
    organization_repo: FakeOrganizationRepository,
    access: AccessGuard,
    audit: FakeAuditService,
    resolver: TemplateSetResolver,
) -> TemplateSetService:
    return TemplateSetService(store, organization_repo, access, audit, resolver)


@pytest.fixture
async def client(
    workflow_service: WorkflowService,
    execute_use_case: ExecuteWorkflowUseCase,
    template_set_service: TemplateSetService,
) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) wired to the in-memory fakes."""
    app.dependency_overrides[get_workflow_service] = lambda: workflow_service
    app.dependency_overrides[get_execute_workflow_use_case] = lambda: execute_use_case
    app.dependency_overrides[get_template_set_service] = lambda: template_set_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def seed_workflow(store: FakeObjectStore):
    """Seed a workflow document: seed_workflow(workflow_id, behaviors=[...], ...)."""

    def _seed(workflow_id: str = "wf_1", **kwargs: Any) -> dict[str, Any]:
        return workflow_doc(store, workflow_id, **kwargs)

    return _seed


@pytest.fixture
def make_behavior():
    """Build a stored behavior dict: make_behavior(id, type, priority=..., config=...)."""
    return behavior_doc


@pytest.fixture
def make_action():
    """Build a RecordingAction: make_action(result) or make_action(error=exc)."""
    return RecordingAction


@pytest.fixture
def make_log_repo():
    """Build a FakeExecutionLogRepository: make_log_repo(fail_on="append_log")."""
    return FakeExecutionLogRepository
