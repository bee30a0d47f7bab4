"""Domain exceptions for the workflow orchestrator.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.

Behavior execution failures are never raised; they travel as result data
(see app.application.services.behavior_executor).
"""

from typing import Any


class OrchestratorException(Exception):
    """Base exception for all orchestrator errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(OrchestratorException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidObjectReferencesException(OrchestratorException):
    """Raised when workflow object references are missing or have the wrong type.

    Carries every failing reference, not just the first one.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            f"Invalid object references: {', '.join(errors)}",
            "INVALID_OBJECT_REFERENCES",
            {"errors": list(errors)},
        )


class BehaviorConfigValidationException(OrchestratorException):
    """Raised when one or more behavior configs fail validation before save."""

    def __init__(self, errors: list[str]) -> None:
        """Initialize with prefixed field errors.

        Args:
            errors: Entries formatted as '<behavior_type>.<field>: <message>'.
        """
        super().__init__(
            f"Invalid behavior configurations: {', '.join(errors)}",
            "INVALID_BEHAVIOR_CONFIG",
            {"errors": list(errors)},
        )


class AuthenticationException(OrchestratorException):
    """Raised when authentication fails (e.g. unknown or expired session)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(OrchestratorException):
    """Raised when the user lacks the named permission in an organization."""

    def __init__(
        self,
        permission: str | None = None,
        organization_id: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional permission, organization, and message.

        Args:
            permission: Permission name that was required (e.g. 'manage_workflows').
            organization_id: Organization the check ran against.
            message: Human-readable message; default used when permission omitted.
        """
        if permission:
            message = f"Permission denied: {permission} required"
        details: dict[str, Any] = {}
        if permission:
            details["permission"] = permission
        if organization_id:
            details["organization_id"] = organization_id
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(OrchestratorException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'template_set').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class TemplateSetConfigurationException(OrchestratorException):
    """Raised when no template set resolves at any precedence level."""

    def __init__(self, organization_id: str) -> None:
        super().__init__(
            f"No template set configured for organization {organization_id} "
            "and no system default template set is available",
            "TEMPLATE_SET_NOT_CONFIGURED",
            {"organization_id": organization_id},
        )


class ObjectStoreUnavailableException(OrchestratorException):
    """Raised when an operation needs the object store but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires the object store, which is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
