"""Workflow API: thin routes delegating to WorkflowService and ExecuteWorkflowUseCase."""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from app.api.v1.dependencies import (
    ExecuteWorkflowDep,
    SessionId,
    WorkflowServiceDep,
)
from app.core.limiter import limit_writes
from app.schemas.workflow import (
    BehaviorAddedResponse,
    BehaviorRequest,
    DuplicateWorkflowRequest,
    ExecuteWorkflowRequest,
    ExecutionLogResponse,
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowRunResponse,
    WorkflowUpdateRequest,
    WorkflowWriteResponse,
)

router = APIRouter()

OrganizationId = Annotated[str, Query(min_length=1)]


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    organization_id: OrganizationId,
    session_id: SessionId,
    service: WorkflowServiceDep,
    subtype: str | None = None,
    status: str | None = None,
    object_type: str | None = None,
):
    """List workflows of an organization, optionally filtered."""
    workflows = await service.list_workflows(
        session_id,
        organization_id,
        subtype=subtype,
        status=status,
        object_type=object_type,
    )
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.post("", response_model=WorkflowWriteResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    organization_id: OrganizationId,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    """Create a workflow (draft unless a status is given)."""
    result = await service.create_workflow(session_id, organization_id, body.to_create())
    return WorkflowWriteResponse.model_validate(result)


@router.get("/by-trigger", response_model=list[WorkflowResponse])
async def get_workflows_by_trigger(
    organization_id: OrganizationId,
    trigger_on: Annotated[str, Query(min_length=1)],
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    """Active workflows listening to trigger_on."""
    workflows = await service.get_workflows_by_trigger(session_id, organization_id, trigger_on)
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.get("/public/by-trigger", response_model=list[WorkflowResponse])
async def get_workflows_by_trigger_public(
    organization_id: OrganizationId,
    trigger_on: Annotated[str, Query(min_length=1)],
    service: WorkflowServiceDep,
):
    """Unauthenticated trigger lookup for public checkout flows."""
    workflows = await service.get_workflows_by_trigger_public(organization_id, trigger_on)
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.get("/executions/{execution_id}", response_model=ExecutionLogResponse)
async def get_execution_log(
    execution_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    log = await service.get_execution_log(session_id, execution_id)
    return ExecutionLogResponse.model_validate(log)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    workflow = await service.get_workflow(session_id, workflow_id)
    return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowWriteResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdateRequest,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    """Partial update; only supplied fields are validated and changed."""
    result = await service.update_workflow(session_id, workflow_id, body.to_update())
    return WorkflowWriteResponse.model_validate(result)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
    hard_delete: bool = False,
) -> None:
    """Archive the workflow; hard_delete=true removes it permanently."""
    await service.delete_workflow(session_id, workflow_id, hard_delete=hard_delete)


@router.post("/{workflow_id}/duplicate", response_model=WorkflowWriteResponse, status_code=201)
@limit_writes
async def duplicate_workflow(
    request: Request,
    workflow_id: str,
    body: DuplicateWorkflowRequest,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    new_id = await service.duplicate_workflow(session_id, workflow_id, body.new_name)
    return WorkflowWriteResponse(workflow_id=new_id)


@router.post("/{workflow_id}/activate", status_code=204)
@limit_writes
async def activate_workflow(
    request: Request,
    workflow_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
) -> None:
    await service.activate_workflow(session_id, workflow_id)


@router.post("/{workflow_id}/deactivate", status_code=204)
@limit_writes
async def deactivate_workflow(
    request: Request,
    workflow_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
) -> None:
    await service.deactivate_workflow(session_id, workflow_id)


@router.post("/{workflow_id}/behaviors", response_model=BehaviorAddedResponse, status_code=201)
@limit_writes
async def add_behavior(
    request: Request,
    workflow_id: str,
    body: BehaviorRequest,
    session_id: SessionId,
    service: WorkflowServiceDep,
):
    behavior_id = await service.add_behavior(session_id, workflow_id, body.to_input())
    return BehaviorAddedResponse(behavior_id=behavior_id)


@router.delete("/{workflow_id}/behaviors/{behavior_id}", status_code=204)
@limit_writes
async def remove_behavior(
    request: Request,
    workflow_id: str,
    behavior_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
) -> None:
    await service.remove_behavior(session_id, workflow_id, behavior_id)


@router.post("/{workflow_id}/execute", response_model=WorkflowRunResponse)
@limit_writes
async def execute_workflow(
    request: Request,
    workflow_id: str,
    session_id: SessionId,
    use_case: ExecuteWorkflowDep,
    body: ExecuteWorkflowRequest | None = None,
):
    """Manually run the workflow's enabled behaviors.

    Behavior failures are reported in the body (success=false), not as HTTP errors.
    """
    result = await use_case.execute(
        session_id,
        workflow_id,
        manual_trigger=True,
        context_data=body.context_data if body else None,
    )
    return WorkflowRunResponse.model_validate(result)


@router.get("/{workflow_id}/executions", response_model=list[ExecutionLogResponse])
async def list_execution_logs(
    workflow_id: str,
    session_id: SessionId,
    service: WorkflowServiceDep,
    limit: int = Query(50, ge=1, le=500),
):
    """Execution history of a workflow, newest first."""
    logs = await service.list_execution_logs(session_id, workflow_id, limit=limit)
    return [ExecutionLogResponse.model_validate(log) for log in logs]
