"""Workflow API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.workflow import BehaviorInput, WorkflowCreate, WorkflowUpdate
from app.domain.entities.workflow import (
    BehaviorTriggers,
    WorkflowExecutionPolicy,
    WorkflowObjectRef,
)
from app.domain.enums import ErrorHandling


class WorkflowObjectSchema(BaseModel):
    """Reference to a business object the workflow orchestrates."""

    model_config = ConfigDict(from_attributes=True)

    object_id: str = Field(..., min_length=1)
    object_type: str = Field(..., min_length=1, max_length=128)
    role: str = ""
    config: dict[str, Any] | None = None

    def to_domain(self) -> WorkflowObjectRef:
        return WorkflowObjectRef(
            object_id=self.object_id,
            object_type=self.object_type,
            role=self.role,
            config=self.config,
        )


class BehaviorTriggersSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    input_types: list[str] | None = None
    object_types: list[str] | None = None
    workflows: list[str] | None = None

    def to_domain(self) -> BehaviorTriggers:
        return BehaviorTriggers(
            input_types=self.input_types,
            object_types=self.object_types,
            workflows=self.workflows,
        )


class ExecutionPolicySchema(BaseModel):
    """When the workflow runs and how behavior failures are handled."""

    model_config = ConfigDict(from_attributes=True)

    trigger_on: str = Field(..., min_length=1, max_length=128)
    error_handling: str = ErrorHandling.CONTINUE.value
    required_inputs: list[str] | None = None
    output_actions: list[str] | None = None

    def to_domain(self) -> WorkflowExecutionPolicy:
        return WorkflowExecutionPolicy(
            trigger_on=self.trigger_on,
            error_handling=self.error_handling,
            required_inputs=self.required_inputs,
            output_actions=self.output_actions,
        )


class BehaviorRequest(BaseModel):
    """Behavior as sent by the builder; id only when editing an existing behavior."""

    id: str | None = None
    type: str = Field(..., min_length=1, max_length=128)
    config: dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    enabled: bool = True
    triggers: BehaviorTriggersSchema | None = None

    def to_input(self) -> BehaviorInput:
        return BehaviorInput(
            id=self.id,
            type=self.type,
            config=self.config,
            priority=self.priority,
            enabled=self.enabled,
            triggers=self.triggers.to_domain() if self.triggers else None,
        )


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow."""

    name: str = Field(..., min_length=1, max_length=255)
    subtype: str = Field(..., min_length=1, max_length=128)
    description: str | None = None
    objects: list[WorkflowObjectSchema] = Field(default_factory=list)
    behaviors: list[BehaviorRequest] = Field(default_factory=list)
    execution: ExecutionPolicySchema
    visual_data: dict[str, Any] | None = None
    status: str | None = None

    def to_create(self) -> WorkflowCreate:
        return WorkflowCreate(
            name=self.name,
            subtype=self.subtype,
            description=self.description,
            execution=self.execution.to_domain(),
            objects=[o.to_domain() for o in self.objects],
            behaviors=[b.to_input() for b in self.behaviors],
            visual_data=self.visual_data,
            status=self.status,
        )


class WorkflowUpdateRequest(BaseModel):
    """Request body for updating a workflow (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    subtype: str | None = Field(default=None, min_length=1, max_length=128)
    status: str | None = None
    objects: list[WorkflowObjectSchema] | None = None
    behaviors: list[BehaviorRequest] | None = None
    execution: ExecutionPolicySchema | None = None
    visual_data: dict[str, Any] | None = None

    def to_update(self) -> WorkflowUpdate:
        return WorkflowUpdate(
            name=self.name,
            description=self.description,
            subtype=self.subtype,
            status=self.status,
            objects=[o.to_domain() for o in self.objects] if self.objects is not None else None,
            behaviors=(
                [b.to_input() for b in self.behaviors] if self.behaviors is not None else None
            ),
            execution=self.execution.to_domain() if self.execution else None,
            visual_data=self.visual_data,
        )


class DuplicateWorkflowRequest(BaseModel):
    new_name: str = Field(..., min_length=1, max_length=255)


class ExecuteWorkflowRequest(BaseModel):
    """Optional workflow_data seeded into the execution context."""

    context_data: dict[str, Any] | None = None


class BehaviorMetadataResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    created_at: datetime
    created_by: str
    last_modified: datetime | None = None
    last_modified_by: str | None = None


class BehaviorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    enabled: bool
    priority: int
    config: dict[str, Any]
    metadata: BehaviorMetadataResponse
    triggers: BehaviorTriggersSchema | None = None


class WorkflowResponse(BaseModel):
    """Workflow response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    subtype: str
    status: str
    description: str | None
    objects: list[WorkflowObjectSchema]
    behaviors: list[BehaviorResponse]
    execution: ExecutionPolicySchema
    visual_data: dict[str, Any] | None
    created_by: str | None
    created_at: datetime | None
    updated_at: datetime | None


class WorkflowWriteResponse(BaseModel):
    """Create/update result; unvalidated_behavior_types lists types without config checks."""

    model_config = ConfigDict(from_attributes=True)

    workflow_id: str
    unvalidated_behavior_types: list[str] = Field(default_factory=list)


class BehaviorAddedResponse(BaseModel):
    behavior_id: str


class BehaviorExecutionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    behavior_type: str
    success: bool
    data: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None


class WorkflowRunResponse(BaseModel):
    """Outcome of a manual workflow trigger."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    message: str
    executed_count: int
    total_count: int
    execution_id: str | None
    results: list[BehaviorExecutionResponse]
    error: str | None


class ExecutionLogLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    level: str
    message: str


class ExecutionLogResponse(BaseModel):
    """Execution log of one sequence run."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    workflow_id: str
    workflow_name: str
    status: str
    logs: list[ExecutionLogLineResponse]
    started_at: datetime
    completed_at: datetime | None
    result: dict[str, Any] | None
