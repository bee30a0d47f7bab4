"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse
from app.schemas.template_set import (
    ResolvedTemplateSetResponse,
    TemplateSetCreateRequest,
    TemplateSetResponse,
)
from app.schemas.workflow import (
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowRunResponse,
    WorkflowUpdateRequest,
)

__all__ = [
    "HealthResponse",
    "ResolvedTemplateSetResponse",
    "TemplateSetCreateRequest",
    "TemplateSetResponse",
    "WorkflowCreateRequest",
    "WorkflowResponse",
    "WorkflowRunResponse",
    "WorkflowUpdateRequest",
]
