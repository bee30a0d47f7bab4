"""Workflow use cases."""

from app.application.use_cases.workflows.execute_workflow import (
    ExecuteWorkflowUseCase,
    build_execution_context,
)
from app.application.use_cases.workflows.workflow_operations import WorkflowService

__all__ = [
    "ExecuteWorkflowUseCase",
    "WorkflowService",
    "build_execution_context",
]
