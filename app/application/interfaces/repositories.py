"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or plain documents only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import ExecutionLogLevel, ExecutionLogStatus

if TYPE_CHECKING:
    from app.application.dtos.workflow import ExecutionLogResult


# Generic object store interface
class IObjectStore(Protocol):
    """Protocol for the generic object store (documents keyed by id, typed by 'type').

    Documents are plain dicts: id, organization_id, type, subtype, name,
    description, status, custom_properties, created_by, created_at, updated_at.
    """

    async def get(self, object_id: str) -> dict[str, Any] | None:
        """Return document by id, or None when missing."""

    async def insert(self, document: dict[str, Any]) -> str:
        """Insert a new document and return its generated id."""

    async def patch(self, object_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given top-level fields of an existing document."""

    async def delete(self, object_id: str) -> None:
        """Permanently remove a document."""

    async def query_by_org_type(
        self, organization_id: str, object_type: str
    ) -> list[dict[str, Any]]:
        """Return documents of one type in an organization, ordered by created_at then id."""


# Execution log repository interface
class IExecutionLogRepository(Protocol):
    """Protocol for workflow execution logs (one record per sequence run)."""

    async def create(
        self, organization_id: str, workflow_id: str, workflow_name: str
    ) -> str:
        """Create a running log record and return its id."""

    async def append_log(
        self, execution_id: str, level: ExecutionLogLevel, message: str
    ) -> None:
        """Append one timestamped line to the log."""

    async def complete(
        self,
        execution_id: str,
        status: ExecutionLogStatus,
        result: dict[str, Any],
    ) -> None:
        """Seal the record with final status, result payload and completed_at."""

    async def get(self, execution_id: str) -> ExecutionLogResult | None:
        """Return execution log by id."""

    async def list_for_workflow(
        self, workflow_id: str, limit: int = 50
    ) -> list[ExecutionLogResult]:
        """Return execution logs of a workflow, newest first."""


# Organization repository interface
class IOrganizationRepository(Protocol):
    """Protocol for organization lookups."""

    async def get_id_by_slug(self, slug: str) -> str | None:
        """Return organization id for slug, or None."""
