"""Firestore-backed workflow execution logs (implements IExecutionLogRepository)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.workflow import ExecutionLogLine, ExecutionLogResult
from app.infrastructure.firebase._rest_client import DocumentSnapshot, FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_WORKFLOW_EXECUTION_LOGS
from app.shared.enums import ExecutionLogLevel, ExecutionLogStatus
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid


class FirestoreExecutionLogRepository:
    """One document per sequence run; log lines are appended server-side."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_WORKFLOW_EXECUTION_LOGS)

    def _to_result(self, snapshot: DocumentSnapshot) -> ExecutionLogResult:
        data = snapshot.to_dict()
        return ExecutionLogResult(
            id=snapshot.id,
            organization_id=data.get("organization_id", ""),
            workflow_id=data.get("workflow_id", ""),
            workflow_name=data.get("workflow_name", ""),
            status=data.get("status", ExecutionLogStatus.RUNNING.value),
            logs=[
                ExecutionLogLine(
                    timestamp=line["timestamp"],
                    level=line.get("level", ExecutionLogLevel.INFO.value),
                    message=line.get("message", ""),
                )
                for line in data.get("logs") or []
            ],
            started_at=data["started_at"],
            completed_at=data.get("completed_at"),
            result=data.get("result"),
        )

    async def create(
        self, organization_id: str, workflow_id: str, workflow_name: str
    ) -> str:
        execution_id = generate_cuid()
        await self._coll.create(
            execution_id,
            {
                "organization_id": organization_id,
                "workflow_id": workflow_id,
                "workflow_name": workflow_name,
                "status": ExecutionLogStatus.RUNNING.value,
                "logs": [],
                "started_at": utc_now(),
            },
        )
        return execution_id

    async def append_log(
        self, execution_id: str, level: ExecutionLogLevel, message: str
    ) -> None:
        await self._coll.document(execution_id).array_append(
            "logs",
            [{"timestamp": utc_now(), "level": level.value, "message": message}],
        )

    async def complete(
        self,
        execution_id: str,
        status: ExecutionLogStatus,
        result: dict[str, Any],
    ) -> None:
        await self._coll.document(execution_id).update(
            {"status": status.value, "result": result, "completed_at": utc_now()}
        )

    async def get(self, execution_id: str) -> ExecutionLogResult | None:
        snapshot = await self._coll.document(execution_id).get()
        if not snapshot:
            return None
        return self._to_result(snapshot)

    async def list_for_workflow(
        self, workflow_id: str, limit: int = 50
    ) -> list[ExecutionLogResult]:
        """Newest first (server-side order and limit)."""
        q = (
            self._coll.where("workflow_id", "==", workflow_id)
            .order_by("started_at", "DESCENDING")
            .limit(limit)
        )
        return [self._to_result(snapshot) async for snapshot in q.stream()]
