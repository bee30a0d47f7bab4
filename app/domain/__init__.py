"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    BehaviorDefinition,
    TemplateSetEntity,
    WorkflowEntity,
)
from app.domain.enums import (
    BehaviorType,
    ClientSideBehaviorType,
    ErrorHandling,
    TemplateSetSource,
    TemplateSetVersion,
    WorkflowStatus,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BehaviorConfigValidationException,
    InvalidObjectReferencesException,
    OrchestratorException,
    ResourceNotFoundException,
    TemplateSetConfigurationException,
    ValidationException,
)

__all__ = [
    # Entities
    "BehaviorDefinition",
    "TemplateSetEntity",
    "WorkflowEntity",
    # Enums
    "BehaviorType",
    "ClientSideBehaviorType",
    "ErrorHandling",
    "TemplateSetSource",
    "TemplateSetVersion",
    "WorkflowStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "BehaviorConfigValidationException",
    "InvalidObjectReferencesException",
    "OrchestratorException",
    "ResourceNotFoundException",
    "TemplateSetConfigurationException",
    "ValidationException",
]
