"""Execute workflow use case: manual trigger of a stored workflow."""

from __future__ import annotations

from typing import Any

from app.application.dtos.workflow import WorkflowRunResult
from app.application.interfaces.repositories import IObjectStore
from app.application.interfaces.services import IAuditService
from app.application.services.access_guard import AccessGuard
from app.application.services.behavior_sequence_runner import BehaviorSequenceRunner
from app.domain.entities.workflow import WORKFLOW_OBJECT_TYPE, WorkflowEntity
from app.domain.exceptions import ResourceNotFoundException
from app.shared.enums import ActorType, AuditAction, Permission
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def build_execution_context(
    workflow: WorkflowEntity,
    *,
    session_id: str,
    user_id: str,
    manual_trigger: bool,
    context_data: dict[str, Any] | None,
) -> dict[str, Any]:
    """Seed context for a manual run."""
    return {
        "organization_id": workflow.organization_id,
        "session_id": session_id,
        "workflow": workflow.execution.workflow_short_name,
        "objects": [o.to_dict() for o in workflow.objects],
        "inputs": [],
        "actor": {"type": ActorType.USER.value, "id": user_id},
        "workflow_data": dict(context_data or {}),
        "behavior_data": {},
        "capabilities": {},
        "metadata": {
            "manual_trigger": manual_trigger,
            "triggered_at": utc_now().isoformat(),
            "triggered_by": user_id,
        },
    }


class ExecuteWorkflowUseCase:
    """Runs a workflow's enabled behaviors on demand.

    Authentication, lookup and permission failures raise. Once execution
    starts, every outcome is returned as a WorkflowRunResult and audited.
    """

    def __init__(
        self,
        store: IObjectStore,
        access: AccessGuard,
        runner: BehaviorSequenceRunner,
        audit_service: IAuditService,
    ) -> None:
        self.store = store
        self.access = access
        self.runner = runner
        self.audit_service = audit_service

    async def execute(
        self,
        session_id: str,
        workflow_id: str,
        *,
        manual_trigger: bool = True,
        context_data: dict[str, Any] | None = None,
    ) -> WorkflowRunResult:
        user_id = await self.access.authenticate(session_id)
        doc = await self.store.get(workflow_id)
        if doc is None or doc.get("type") != WORKFLOW_OBJECT_TYPE:
            raise ResourceNotFoundException("workflow", workflow_id)
        workflow = WorkflowEntity.from_document(doc)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)

        context = build_execution_context(
            workflow,
            session_id=session_id,
            user_id=user_id,
            manual_trigger=manual_trigger,
            context_data=context_data,
        )
        try:
            result = await self.runner.execute_behaviors(
                workflow.organization_id,
                workflow.enabled_behaviors(),
                context,
                workflow.execution.continue_on_error,
                workflow_id=workflow.id,
                workflow_name=workflow.name,
                session_id=session_id,
            )
            await self.audit_service.log_object_action(
                organization_id=workflow.organization_id,
                object_id=workflow.id,
                action_type=AuditAction.WORKFLOW_EXECUTED,
                action_data={
                    "success": result.success,
                    "behavior_count": result.executed_count,
                    "total_behaviors": result.total_count,
                    "manual_trigger": manual_trigger,
                },
                performed_by=user_id,
            )
        except Exception as exc:
            logger.exception("Workflow %s execution failed", workflow.id)
            error = str(exc) or "Unknown error"
            await self.audit_service.log_object_action(
                organization_id=workflow.organization_id,
                object_id=workflow.id,
                action_type=AuditAction.WORKFLOW_EXECUTION_FAILED,
                action_data={"error": error, "manual_trigger": manual_trigger},
                performed_by=user_id,
            )
            return WorkflowRunResult(
                success=False,
                message=f"Failed to execute workflow: {error}",
                error=error,
            )

        counts = f"{result.executed_count} of {result.total_count} behaviors completed."
        if result.success:
            message = f'Workflow "{workflow.name}" executed successfully. {counts}'
        else:
            message = f"Workflow execution completed with errors. {counts}"
        return WorkflowRunResult(
            success=result.success,
            message=message,
            executed_count=result.executed_count,
            total_count=result.total_count,
            execution_id=result.execution_id,
            results=result.results,
        )
