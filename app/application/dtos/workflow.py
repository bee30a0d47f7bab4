"""DTOs for workflow CRUD, manual execution, and execution logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.application.dtos.behavior import BehaviorExecutionRecord
from app.domain.entities.workflow import (
    BehaviorTriggers,
    WorkflowExecutionPolicy,
    WorkflowObjectRef,
)


@dataclass(frozen=True)
class BehaviorInput:
    """Behavior as supplied by a client; id is set only when editing an existing one."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)
    priority: int = 0
    enabled: bool = True
    id: str | None = None
    triggers: BehaviorTriggers | None = None


@dataclass(frozen=True)
class WorkflowCreate:
    """Input for create_workflow."""

    name: str
    subtype: str
    execution: WorkflowExecutionPolicy
    description: str | None = None
    objects: list[WorkflowObjectRef] = field(default_factory=list)
    behaviors: list[BehaviorInput] = field(default_factory=list)
    visual_data: dict[str, Any] | None = None
    status: str | None = None


@dataclass(frozen=True)
class WorkflowUpdate:
    """Partial update; None means the field was not supplied."""

    name: str | None = None
    description: str | None = None
    subtype: str | None = None
    status: str | None = None
    objects: list[WorkflowObjectRef] | None = None
    behaviors: list[BehaviorInput] | None = None
    execution: WorkflowExecutionPolicy | None = None
    visual_data: dict[str, Any] | None = None

    def supplied_fields(self) -> list[str]:
        """Names of fields present on this update, in declaration order."""
        return [
            name
            for name in (
                "name",
                "description",
                "subtype",
                "status",
                "objects",
                "behaviors",
                "execution",
                "visual_data",
            )
            if getattr(self, name) is not None
        ]


@dataclass(frozen=True)
class WorkflowWriteResult:
    """Returned by create/update; unvalidated types are surfaced to operators."""

    workflow_id: str
    unvalidated_behavior_types: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WorkflowRunResult:
    """Outcome of a manual workflow trigger. Always returned, never raised."""

    success: bool
    message: str
    executed_count: int = 0
    total_count: int = 0
    execution_id: str | None = None
    results: list[BehaviorExecutionRecord] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class ExecutionLogLine:
    timestamp: datetime
    level: str
    message: str


@dataclass(frozen=True)
class ExecutionLogResult:
    """Execution log read-model (one record per sequence run)."""

    id: str
    organization_id: str
    workflow_id: str
    workflow_name: str
    status: str
    logs: list[ExecutionLogLine]
    started_at: datetime
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None
