"""Application services: behavior execution, validation, template sets, authorization."""

from app.application.services.access_guard import AccessGuard
from app.application.services.authorization_service import AuthorizationService
from app.application.services.behavior_executor import BehaviorExecutor
from app.application.services.behavior_sequence_runner import BehaviorSequenceRunner
from app.application.services.template_set_resolver import TemplateSetResolver
from app.application.services.workflow_validator import (
    ConfigError,
    find_unvalidated_behavior_types,
    validate_behavior_config,
    validate_object_references,
    validate_workflow_config,
)

__all__ = [
    "AccessGuard",
    "AuthorizationService",
    "BehaviorExecutor",
    "BehaviorSequenceRunner",
    "ConfigError",
    "TemplateSetResolver",
    "find_unvalidated_behavior_types",
    "validate_behavior_config",
    "validate_object_references",
    "validate_workflow_config",
]
