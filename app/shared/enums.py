"""Shared enumerations for the workflow orchestrator.

Cross-cutting enums used by application and infrastructure (actor type,
audit action types, execution log status). Domain-specific enums (e.g.
WorkflowStatus) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type recorded in execution contexts (who triggered the run)."""

    USER = "user"
    SYSTEM = "system"
    EXTERNAL = "external"


class ExecutionLogStatus(_ValuesMixin, str, Enum):
    """Execution log lifecycle: created RUNNING, sealed SUCCESS or FAILED."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class ExecutionLogLevel(_ValuesMixin, str, Enum):
    """Level of a single human-readable execution log line."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class AuditAction(_ValuesMixin, str, Enum):
    """Object action types written to the audit trail (object_actions)."""

    WORKFLOW_CREATED = "workflow_created"
    WORKFLOW_UPDATED = "workflow_updated"
    WORKFLOW_ARCHIVED = "workflow_archived"
    WORKFLOW_PERMANENTLY_DELETED = "workflow_permanently_deleted"
    WORKFLOW_DUPLICATED = "workflow_duplicated"
    WORKFLOW_ACTIVATED = "workflow_activated"
    WORKFLOW_DEACTIVATED = "workflow_deactivated"
    WORKFLOW_EXECUTED = "workflow_executed"
    WORKFLOW_EXECUTION_FAILED = "workflow_execution_failed"
    BEHAVIOR_ADDED = "behavior_added"
    BEHAVIOR_REMOVED = "behavior_removed"
    TEMPLATE_SET_CREATED = "template_set_created"
    TEMPLATE_SET_DELETED = "template_set_deleted"
    TEMPLATE_SET_DEFAULT_CHANGED = "template_set_default_changed"
    TEMPLATE_SET_UPDATED = "template_set_updated"
    TEMPLATE_SET_COPIED = "template_set_copied"
    TEMPLATES_ADDED_TO_SET = "templates_added_to_set"
    TEMPLATES_REMOVED_FROM_SET = "templates_removed_from_set"
    TEMPLATE_UPDATED_IN_SET = "template_updated_in_set"


class Permission(_ValuesMixin, str, Enum):
    """Permission names checked by workflow and template set operations."""

    MANAGE_WORKFLOWS = "manage_workflows"
    VIEW_WORKFLOWS = "view_workflows"
    CREATE_TEMPLATES = "create_templates"
    EDIT_TEMPLATES = "edit_templates"
    DELETE_TEMPLATES = "delete_templates"
    VIEW_TEMPLATES = "view_templates"
