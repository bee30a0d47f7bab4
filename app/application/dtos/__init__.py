"""Application DTOs (no persistence dependency)."""

from app.application.dtos.behavior import (
    BehaviorActionRequest,
    BehaviorExecutionRecord,
    BehaviorResult,
    BehaviorStep,
    SequenceResult,
)
from app.application.dtos.template_set import (
    ResolvedTemplateSet,
    TemplateSetContext,
    TemplateSetCreate,
    TemplateSetCreateResult,
    TemplateSetUpdate,
)
from app.application.dtos.workflow import (
    BehaviorInput,
    ExecutionLogLine,
    ExecutionLogResult,
    WorkflowCreate,
    WorkflowRunResult,
    WorkflowUpdate,
    WorkflowWriteResult,
)

__all__ = [
    "BehaviorActionRequest",
    "BehaviorExecutionRecord",
    "BehaviorInput",
    "BehaviorResult",
    "BehaviorStep",
    "ExecutionLogLine",
    "ExecutionLogResult",
    "ResolvedTemplateSet",
    "SequenceResult",
    "TemplateSetContext",
    "TemplateSetCreate",
    "TemplateSetCreateResult",
    "TemplateSetUpdate",
    "WorkflowCreate",
    "WorkflowRunResult",
    "WorkflowUpdate",
    "WorkflowWriteResult",
]
