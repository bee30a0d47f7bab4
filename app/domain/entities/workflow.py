"""Workflow domain entity.

A workflow is a stored automation definition: the business objects it
orchestrates, an ordered list of configured behaviors, and an execution
policy (trigger event + error handling). Workflows live in the generic
object store as documents with type "workflow"; this module maps those
documents to typed entities and back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import ErrorHandling, WorkflowStatus

WORKFLOW_OBJECT_TYPE = "workflow"


@dataclass
class WorkflowObjectRef:
    """Reference to an externally owned object (product, form, checkout, CRM record)."""

    object_id: str
    object_type: str
    role: str
    config: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowObjectRef:
        return cls(
            object_id=data["object_id"],
            object_type=data["object_type"],
            role=data.get("role", ""),
            config=data.get("config"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "object_id": self.object_id,
            "object_type": self.object_type,
            "role": self.role,
        }
        if self.config is not None:
            out["config"] = self.config
        return out


@dataclass
class BehaviorTriggers:
    """Advisory trigger tags; stored for the builder UI, not enforced at run time."""

    input_types: list[str] | None = None
    object_types: list[str] | None = None
    workflows: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BehaviorTriggers | None:
        if data is None:
            return None
        return cls(
            input_types=data.get("input_types"),
            object_types=data.get("object_types"),
            workflows=data.get("workflows"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in (
                ("input_types", self.input_types),
                ("object_types", self.object_types),
                ("workflows", self.workflows),
            )
            if v is not None
        }


@dataclass
class BehaviorMetadata:
    """Creation and last-modification stamps of a behavior definition."""

    created_at: datetime
    created_by: str
    last_modified: datetime | None = None
    last_modified_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BehaviorMetadata:
        return cls(
            created_at=data["created_at"],
            created_by=data["created_by"],
            last_modified=data.get("last_modified"),
            last_modified_by=data.get("last_modified_by"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "created_at": self.created_at,
            "created_by": self.created_by,
        }
        if self.last_modified is not None:
            out["last_modified"] = self.last_modified
        if self.last_modified_by is not None:
            out["last_modified_by"] = self.last_modified_by
        return out


@dataclass
class BehaviorDefinition:
    """One configured automation step within a workflow.

    Higher priority runs earlier. The id is generated once, when the
    behavior is first saved, and is stable across updates.
    """

    id: str
    type: str
    enabled: bool
    priority: int
    config: dict[str, Any]
    metadata: BehaviorMetadata
    triggers: BehaviorTriggers | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BehaviorDefinition:
        return cls(
            id=data["id"],
            type=data["type"],
            enabled=bool(data.get("enabled", True)),
            priority=int(data.get("priority", 0)),
            config=dict(data.get("config") or {}),
            metadata=BehaviorMetadata.from_dict(data["metadata"]),
            triggers=BehaviorTriggers.from_dict(data.get("triggers")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "enabled": self.enabled,
            "priority": self.priority,
            "config": self.config,
            "metadata": self.metadata.to_dict(),
        }
        if self.triggers is not None:
            out["triggers"] = self.triggers.to_dict()
        return out


@dataclass
class WorkflowExecutionPolicy:
    """When a workflow runs and what happens when one of its behaviors fails."""

    trigger_on: str
    error_handling: str = ErrorHandling.CONTINUE.value
    required_inputs: list[str] | None = None
    output_actions: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowExecutionPolicy:
        return cls(
            trigger_on=data["trigger_on"],
            error_handling=data.get("error_handling", ErrorHandling.CONTINUE.value),
            required_inputs=data.get("required_inputs"),
            output_actions=data.get("output_actions"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "trigger_on": self.trigger_on,
            "error_handling": self.error_handling,
        }
        if self.required_inputs is not None:
            out["required_inputs"] = self.required_inputs
        if self.output_actions is not None:
            out["output_actions"] = self.output_actions
        return out

    @property
    def continue_on_error(self) -> bool:
        """Only 'rollback' halts the sequence; it does not undo earlier behaviors."""
        return self.error_handling != ErrorHandling.ROLLBACK.value

    @property
    def workflow_short_name(self) -> str:
        """Trigger name with the first '_start' removed (checkout_start -> checkout)."""
        return self.trigger_on.replace("_start", "", 1)


@dataclass
class WorkflowEntity:
    """Domain entity for a persisted workflow definition."""

    id: str
    organization_id: str
    name: str
    subtype: str
    status: str
    execution: WorkflowExecutionPolicy
    description: str | None = None
    objects: list[WorkflowObjectRef] = field(default_factory=list)
    behaviors: list[BehaviorDefinition] = field(default_factory=list)
    visual_data: dict[str, Any] | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> WorkflowEntity:
        """Build from an object store document (type 'workflow')."""
        props = doc.get("custom_properties") or {}
        return cls(
            id=doc["id"],
            organization_id=doc["organization_id"],
            name=doc.get("name", ""),
            subtype=doc.get("subtype", ""),
            status=doc.get("status", WorkflowStatus.DRAFT.value),
            description=doc.get("description"),
            execution=WorkflowExecutionPolicy.from_dict(props.get("execution") or {"trigger_on": ""}),
            objects=[WorkflowObjectRef.from_dict(o) for o in props.get("objects") or []],
            behaviors=[BehaviorDefinition.from_dict(b) for b in props.get("behaviors") or []],
            visual_data=props.get("visual_data"),
            created_by=doc.get("created_by"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def custom_properties(self) -> dict[str, Any]:
        """Return the custom_properties payload stored on the object document."""
        props: dict[str, Any] = {
            "objects": [o.to_dict() for o in self.objects],
            "behaviors": [b.to_dict() for b in self.behaviors],
            "execution": self.execution.to_dict(),
        }
        if self.visual_data is not None:
            props["visual_data"] = self.visual_data
        return props

    def find_behavior(self, behavior_id: str) -> BehaviorDefinition | None:
        for behavior in self.behaviors:
            if behavior.id == behavior_id:
                return behavior
        return None

    def enabled_behaviors(self) -> list[BehaviorDefinition]:
        return [b for b in self.behaviors if b.enabled]

    def references_object_type(self, object_type: str) -> bool:
        return any(o.object_type == object_type for o in self.objects)

    def can_trigger_on(self, trigger_on: str) -> bool:
        """Return whether this workflow is active and listens to the trigger."""
        return (
            self.status == WorkflowStatus.ACTIVE.value
            and self.execution.trigger_on == trigger_on
        )
