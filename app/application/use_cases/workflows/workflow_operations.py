"""Workflow operations: list, get, create, update, delete, duplicate, lifecycle, behaviors.

Workflows are object store documents of type "workflow". Every write validates
before touching the store and records an object action.
"""

from __future__ import annotations

from typing import Any

from app.application.dtos.workflow import (
    BehaviorInput,
    ExecutionLogResult,
    WorkflowCreate,
    WorkflowUpdate,
    WorkflowWriteResult,
)
from app.application.interfaces.repositories import (
    IExecutionLogRepository,
    IObjectStore,
)
from app.application.interfaces.services import IAuditService
from app.application.services.access_guard import AccessGuard
from app.application.services.workflow_validator import (
    find_unvalidated_behavior_types,
    validate_object_references,
    validate_workflow_config,
)
from app.domain.entities.workflow import (
    WORKFLOW_OBJECT_TYPE,
    BehaviorDefinition,
    BehaviorMetadata,
    WorkflowEntity,
    WorkflowExecutionPolicy,
    WorkflowObjectRef,
)
from app.domain.enums import ErrorHandling, WorkflowStatus
from app.domain.exceptions import (
    BehaviorConfigValidationException,
    InvalidObjectReferencesException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.enums import AuditAction, Permission
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_behavior_id

logger = get_logger(__name__)


def _new_behavior(behavior: BehaviorInput | BehaviorDefinition, user_id: str) -> BehaviorDefinition:
    """Fresh id and creation metadata; type, config and flags are copied."""
    return BehaviorDefinition(
        id=generate_behavior_id(),
        type=behavior.type,
        enabled=behavior.enabled,
        priority=behavior.priority,
        config=dict(behavior.config),
        metadata=BehaviorMetadata(created_at=utc_now(), created_by=user_id),
        triggers=behavior.triggers,
    )


def _validate_status(status: str | None) -> None:
    if status is not None and status not in WorkflowStatus.values():
        raise ValidationException(
            f"Invalid status '{status}'. Must be one of: {', '.join(WorkflowStatus.values())}",
            field="status",
        )


def _validate_execution(execution: WorkflowExecutionPolicy | None) -> None:
    if execution is None:
        return
    if not execution.trigger_on:
        raise ValidationException("trigger_on is required", field="execution.trigger_on")
    if execution.error_handling not in ErrorHandling.values():
        raise ValidationException(
            f"Invalid error_handling '{execution.error_handling}'. "
            f"Must be one of: {', '.join(ErrorHandling.values())}",
            field="execution.error_handling",
        )


class WorkflowService:
    """Workflow definition lifecycle, scoped by organization and guarded by permissions."""

    def __init__(
        self,
        store: IObjectStore,
        access: AccessGuard,
        audit_service: IAuditService,
        execution_log_repo: IExecutionLogRepository | None = None,
    ) -> None:
        self.store = store
        self.access = access
        self.audit_service = audit_service
        self.execution_log_repo = execution_log_repo

    async def _load(self, workflow_id: str) -> WorkflowEntity:
        doc = await self.store.get(workflow_id)
        if doc is None or doc.get("type") != WORKFLOW_OBJECT_TYPE:
            raise ResourceNotFoundException("workflow", workflow_id)
        return WorkflowEntity.from_document(doc)

    async def _audit(
        self,
        organization_id: str,
        object_id: str,
        action: AuditAction,
        data: dict[str, Any],
        user_id: str,
    ) -> None:
        await self.audit_service.log_object_action(
            organization_id=organization_id,
            object_id=object_id,
            action_type=action,
            action_data=data,
            performed_by=user_id,
        )

    async def _validate_objects(self, objects: list[WorkflowObjectRef]) -> None:
        errors = await validate_object_references(self.store, objects)
        if errors:
            raise InvalidObjectReferencesException(errors)

    @staticmethod
    def _validate_behaviors(behaviors: list[BehaviorInput]) -> list[str]:
        """Raise on config errors; return unknown types for operators."""
        errors = validate_workflow_config(behaviors)
        if errors:
            raise BehaviorConfigValidationException(errors)
        unvalidated = find_unvalidated_behavior_types(behaviors)
        if unvalidated:
            logger.warning(
                "Workflow uses behavior types without validation: %s",
                ", ".join(unvalidated),
            )
        return unvalidated

    # Queries

    async def list_workflows(
        self,
        session_id: str,
        organization_id: str,
        *,
        subtype: str | None = None,
        status: str | None = None,
        object_type: str | None = None,
    ) -> list[WorkflowEntity]:
        """Return workflows of the organization, optionally filtered."""
        await self.access.authorize(session_id, organization_id, Permission.VIEW_WORKFLOWS)
        docs = await self.store.query_by_org_type(organization_id, WORKFLOW_OBJECT_TYPE)
        workflows = [WorkflowEntity.from_document(doc) for doc in docs]
        if subtype:
            workflows = [w for w in workflows if w.subtype == subtype]
        if status:
            workflows = [w for w in workflows if w.status == status]
        if object_type:
            workflows = [w for w in workflows if w.references_object_type(object_type)]
        return workflows

    async def get_workflow(self, session_id: str, workflow_id: str) -> WorkflowEntity:
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.VIEW_WORKFLOWS)
        return workflow

    async def get_workflows_by_trigger(
        self, session_id: str, organization_id: str, trigger_on: str
    ) -> list[WorkflowEntity]:
        """Active workflows of the organization listening to trigger_on."""
        await self.access.authorize(session_id, organization_id, Permission.VIEW_WORKFLOWS)
        return await self.get_workflows_by_trigger_public(organization_id, trigger_on)

    async def get_workflows_by_trigger_public(
        self, organization_id: str, trigger_on: str
    ) -> list[WorkflowEntity]:
        """Unauthenticated variant used by public checkout flows."""
        docs = await self.store.query_by_org_type(organization_id, WORKFLOW_OBJECT_TYPE)
        return [
            workflow
            for workflow in (WorkflowEntity.from_document(doc) for doc in docs)
            if workflow.can_trigger_on(trigger_on)
        ]

    # Commands

    async def create_workflow(
        self, session_id: str, organization_id: str, data: WorkflowCreate
    ) -> WorkflowWriteResult:
        """Validate references and behavior configs, then persist as draft unless a status is given."""
        user_id = await self.access.authorize(
            session_id, organization_id, Permission.MANAGE_WORKFLOWS
        )
        _validate_status(data.status)
        _validate_execution(data.execution)
        await self._validate_objects(data.objects)
        unvalidated = self._validate_behaviors(data.behaviors)

        now = utc_now()
        workflow = WorkflowEntity(
            id="",
            organization_id=organization_id,
            name=data.name,
            subtype=data.subtype,
            status=data.status or WorkflowStatus.DRAFT.value,
            description=data.description,
            execution=data.execution,
            objects=list(data.objects),
            behaviors=[_new_behavior(b, user_id) for b in data.behaviors],
            visual_data=data.visual_data,
        )
        workflow_id = await self.store.insert(
            {
                "organization_id": organization_id,
                "type": WORKFLOW_OBJECT_TYPE,
                "subtype": workflow.subtype,
                "name": workflow.name,
                "description": workflow.description,
                "status": workflow.status,
                "custom_properties": workflow.custom_properties(),
                "created_by": user_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self._audit(
            organization_id,
            workflow_id,
            AuditAction.WORKFLOW_CREATED,
            {
                "workflow_type": workflow.subtype,
                "object_count": len(workflow.objects),
                "behavior_count": len(workflow.behaviors),
            },
            user_id,
        )
        return WorkflowWriteResult(workflow_id=workflow_id, unvalidated_behavior_types=unvalidated)

    async def update_workflow(
        self, session_id: str, workflow_id: str, updates: WorkflowUpdate
    ) -> WorkflowWriteResult:
        """Partial update; only supplied fields are validated and changed.

        Behaviors whose id matches an existing behavior keep their creation
        metadata and are stamped as modified; the rest are treated as new.
        """
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)

        _validate_status(updates.status)
        _validate_execution(updates.execution)
        if updates.objects is not None:
            await self._validate_objects(updates.objects)
        unvalidated: list[str] = []
        if updates.behaviors is not None:
            unvalidated = self._validate_behaviors(updates.behaviors)

        now = utc_now()
        if updates.behaviors is not None:
            merged: list[BehaviorDefinition] = []
            for incoming in updates.behaviors:
                existing = workflow.find_behavior(incoming.id) if incoming.id else None
                if existing is None:
                    merged.append(_new_behavior(incoming, user_id))
                    continue
                merged.append(
                    BehaviorDefinition(
                        id=existing.id,
                        type=incoming.type,
                        enabled=incoming.enabled,
                        priority=incoming.priority,
                        config=dict(incoming.config),
                        triggers=incoming.triggers,
                        metadata=BehaviorMetadata(
                            created_at=existing.metadata.created_at,
                            created_by=existing.metadata.created_by,
                            last_modified=now,
                            last_modified_by=user_id,
                        ),
                    )
                )
            workflow.behaviors = merged

        if updates.name is not None:
            workflow.name = updates.name
        if updates.description is not None:
            workflow.description = updates.description
        if updates.subtype is not None:
            workflow.subtype = updates.subtype
        if updates.status is not None:
            workflow.status = updates.status
        if updates.objects is not None:
            workflow.objects = list(updates.objects)
        if updates.execution is not None:
            workflow.execution = updates.execution
        if updates.visual_data is not None:
            workflow.visual_data = updates.visual_data

        await self.store.patch(
            workflow_id,
            {
                "name": workflow.name,
                "description": workflow.description,
                "subtype": workflow.subtype,
                "status": workflow.status,
                "custom_properties": workflow.custom_properties(),
                "updated_at": now,
            },
        )
        await self._audit(
            workflow.organization_id,
            workflow_id,
            AuditAction.WORKFLOW_UPDATED,
            {"updated_fields": updates.supplied_fields()},
            user_id,
        )
        return WorkflowWriteResult(workflow_id=workflow_id, unvalidated_behavior_types=unvalidated)

    async def delete_workflow(
        self, session_id: str, workflow_id: str, *, hard_delete: bool = False
    ) -> None:
        """Archive the workflow, or remove it permanently when hard_delete."""
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)

        if hard_delete:
            await self.store.delete(workflow_id)
            action = AuditAction.WORKFLOW_PERMANENTLY_DELETED
        else:
            await self.store.patch(
                workflow_id,
                {"status": WorkflowStatus.ARCHIVED.value, "updated_at": utc_now()},
            )
            action = AuditAction.WORKFLOW_ARCHIVED
        await self._audit(
            workflow.organization_id,
            workflow_id,
            action,
            {"workflow_name": workflow.name},
            user_id,
        )

    async def duplicate_workflow(self, session_id: str, workflow_id: str, new_name: str) -> str:
        """Clone under new_name with fresh behavior ids; the copy is always a draft."""
        user_id = await self.access.authenticate(session_id)
        source = await self._load(workflow_id)
        await self.access.require(user_id, source.organization_id, Permission.MANAGE_WORKFLOWS)

        source.behaviors = [_new_behavior(b, user_id) for b in source.behaviors]
        now = utc_now()
        new_id = await self.store.insert(
            {
                "organization_id": source.organization_id,
                "type": WORKFLOW_OBJECT_TYPE,
                "subtype": source.subtype,
                "name": new_name,
                "description": source.description,
                "status": WorkflowStatus.DRAFT.value,
                "custom_properties": source.custom_properties(),
                "created_by": user_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self._audit(
            source.organization_id,
            new_id,
            AuditAction.WORKFLOW_DUPLICATED,
            {"original_workflow_id": workflow_id, "original_workflow_name": source.name},
            user_id,
        )
        return new_id

    async def activate_workflow(self, session_id: str, workflow_id: str) -> None:
        await self._set_status(
            session_id, workflow_id, WorkflowStatus.ACTIVE, AuditAction.WORKFLOW_ACTIVATED
        )

    async def deactivate_workflow(self, session_id: str, workflow_id: str) -> None:
        """Return the workflow to draft so trigger lookups skip it."""
        await self._set_status(
            session_id, workflow_id, WorkflowStatus.DRAFT, AuditAction.WORKFLOW_DEACTIVATED
        )

    async def _set_status(
        self,
        session_id: str,
        workflow_id: str,
        status: WorkflowStatus,
        action: AuditAction,
    ) -> None:
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)
        await self.store.patch(workflow_id, {"status": status.value, "updated_at": utc_now()})
        await self._audit(
            workflow.organization_id,
            workflow_id,
            action,
            {"previous_status": workflow.status},
            user_id,
        )

    async def add_behavior(self, session_id: str, workflow_id: str, behavior: BehaviorInput) -> str:
        """Validate and append one behavior; returns its new id."""
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)
        self._validate_behaviors([behavior])

        created = _new_behavior(behavior, user_id)
        workflow.behaviors.append(created)
        await self.store.patch(
            workflow_id,
            {"custom_properties": workflow.custom_properties(), "updated_at": utc_now()},
        )
        await self._audit(
            workflow.organization_id,
            workflow_id,
            AuditAction.BEHAVIOR_ADDED,
            {"behavior_id": created.id, "behavior_type": created.type},
            user_id,
        )
        return created.id

    async def remove_behavior(self, session_id: str, workflow_id: str, behavior_id: str) -> None:
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.MANAGE_WORKFLOWS)

        removed = workflow.find_behavior(behavior_id)
        if removed is None:
            raise ResourceNotFoundException("behavior", behavior_id)
        workflow.behaviors = [b for b in workflow.behaviors if b.id != behavior_id]
        await self.store.patch(
            workflow_id,
            {"custom_properties": workflow.custom_properties(), "updated_at": utc_now()},
        )
        await self._audit(
            workflow.organization_id,
            workflow_id,
            AuditAction.BEHAVIOR_REMOVED,
            {"behavior_id": behavior_id, "behavior_type": removed.type},
            user_id,
        )

    # Execution logs

    async def list_execution_logs(
        self, session_id: str, workflow_id: str, limit: int = 50
    ) -> list[ExecutionLogResult]:
        user_id = await self.access.authenticate(session_id)
        workflow = await self._load(workflow_id)
        await self.access.require(user_id, workflow.organization_id, Permission.VIEW_WORKFLOWS)
        if self.execution_log_repo is None:
            return []
        return await self.execution_log_repo.list_for_workflow(workflow_id, limit=limit)

    async def get_execution_log(self, session_id: str, execution_id: str) -> ExecutionLogResult:
        user_id = await self.access.authenticate(session_id)
        log = (
            await self.execution_log_repo.get(execution_id)
            if self.execution_log_repo is not None
            else None
        )
        if log is None:
            raise ResourceNotFoundException("execution_log", execution_id)
        await self.access.require(user_id, log.organization_id, Permission.VIEW_WORKFLOWS)
        return log

