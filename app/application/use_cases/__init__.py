"""Application use cases: one entry point per workflow."""

from app.application.use_cases.template_sets import TemplateSetService
from app.application.use_cases.workflows import (
    ExecuteWorkflowUseCase,
    WorkflowService,
)

__all__ = [
    "ExecuteWorkflowUseCase",
    "TemplateSetService",
    "WorkflowService",
]
