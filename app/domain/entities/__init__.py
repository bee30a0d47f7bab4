"""Domain entities and aggregates.

Pure domain models; no persistence concerns.
"""

from app.domain.entities.template_set import TemplateSetEntity, TemplateSetEntry
from app.domain.entities.workflow import (
    BehaviorDefinition,
    BehaviorMetadata,
    BehaviorTriggers,
    WorkflowEntity,
    WorkflowExecutionPolicy,
    WorkflowObjectRef,
)

__all__ = [
    "BehaviorDefinition",
    "BehaviorMetadata",
    "BehaviorTriggers",
    "TemplateSetEntity",
    "TemplateSetEntry",
    "WorkflowEntity",
    "WorkflowExecutionPolicy",
    "WorkflowObjectRef",
]
