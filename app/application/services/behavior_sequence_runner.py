"""Behavior sequence runner: execute a list of behaviors in priority order.

Behaviors run strictly one after another. Each successful behavior's data is
merged into the context seen by the next one; the caller's context dict is
never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from app.application.dtos.behavior import BehaviorExecutionRecord, SequenceResult
from app.application.interfaces.repositories import IExecutionLogRepository
from app.application.services.behavior_executor import BehaviorExecutor
from app.shared.enums import ExecutionLogLevel, ExecutionLogStatus
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RunnableBehavior(Protocol):
    """Shape the runner needs from a behavior (BehaviorDefinition, BehaviorStep)."""

    type: str
    config: dict[str, Any]
    priority: int


def order_by_priority(behaviors: Sequence[RunnableBehavior]) -> list[RunnableBehavior]:
    """Highest priority first; equal priorities keep their input position."""
    indexed = sorted(enumerate(behaviors), key=lambda pair: (-pair[1].priority, pair[0]))
    return [behavior for _, behavior in indexed]


class _BestEffortExecutionLog:
    """Execution log writer that never raises; failures are logged and dropped."""

    def __init__(self, repo: IExecutionLogRepository | None) -> None:
        self._repo = repo
        self.execution_id: str | None = None

    async def start(self, organization_id: str, workflow_id: str, workflow_name: str) -> None:
        if self._repo is None:
            return
        try:
            self.execution_id = await self._repo.create(
                organization_id, workflow_id, workflow_name
            )
        except Exception as exc:
            logger.warning(
                "Could not create execution log for workflow %s: %s", workflow_id, exc
            )

    async def line(self, level: ExecutionLogLevel, message: str) -> None:
        if self._repo is None or self.execution_id is None:
            return
        try:
            await self._repo.append_log(self.execution_id, level, message)
        except Exception as exc:
            logger.warning(
                "Could not append to execution log %s: %s", self.execution_id, exc
            )

    async def seal(self, status: ExecutionLogStatus, result: dict[str, Any]) -> None:
        if self._repo is None or self.execution_id is None:
            return
        try:
            await self._repo.complete(self.execution_id, status, result)
        except Exception as exc:
            logger.warning(
                "Could not complete execution log %s: %s", self.execution_id, exc
            )


class BehaviorSequenceRunner:
    """Runs behaviors through the executor, threading an accumulated context."""

    def __init__(
        self,
        executor: BehaviorExecutor,
        execution_log_repo: IExecutionLogRepository | None = None,
    ) -> None:
        self.executor = executor
        self.execution_log_repo = execution_log_repo

    async def execute_behaviors(
        self,
        organization_id: str,
        behaviors: Sequence[RunnableBehavior],
        context: dict[str, Any],
        continue_on_error: bool,
        *,
        workflow_id: str | None = None,
        workflow_name: str | None = None,
        session_id: str | None = None,
    ) -> SequenceResult:
        """Execute behaviors by descending priority.

        When workflow_id and workflow_name are both given, an execution log is
        written for the run. On failure the run stops unless continue_on_error.
        """
        log = _BestEffortExecutionLog(self.execution_log_repo)
        if workflow_id and workflow_name:
            await log.start(organization_id, workflow_id, workflow_name)
            await log.line(
                ExecutionLogLevel.INFO,
                f"Starting execution of {len(behaviors)} behaviors",
            )

        current: dict[str, Any] = dict(context)
        results: list[BehaviorExecutionRecord] = []
        all_success = True
        finished = False

        try:
            for behavior in order_by_priority(behaviors):
                await log.line(ExecutionLogLevel.INFO, f"Executing behavior: {behavior.type}")
                result = await self.executor.execute_behavior(
                    organization_id,
                    behavior.type,
                    behavior.config,
                    current,
                    session_id=session_id,
                )
                results.append(
                    BehaviorExecutionRecord(
                        behavior_type=behavior.type,
                        success=result.success,
                        data=result.data,
                        message=result.message,
                        error=result.error,
                    )
                )

                if not result.success:
                    all_success = False
                    await log.line(
                        ExecutionLogLevel.ERROR,
                        f"Behavior {behavior.type} failed: {result.error or result.message or 'unknown error'}",
                    )
                    if not continue_on_error:
                        break
                    continue

                await log.line(
                    ExecutionLogLevel.SUCCESS,
                    f"Behavior {behavior.type} completed"
                    + (f": {result.message}" if result.message else ""),
                )
                if isinstance(result.data, Mapping) and result.data:
                    current = {**current, **result.data}
            finished = True
        finally:
            # Sealed even when the loop is interrupted; an unfinished run counts as failed
            succeeded = all_success and finished
            await log.seal(
                ExecutionLogStatus.SUCCESS if succeeded else ExecutionLogStatus.FAILED,
                {
                    "success": succeeded,
                    "executed_count": len(results),
                    "total_count": len(behaviors),
                    "results": [r.to_dict() for r in results],
                },
            )

        return SequenceResult(
            success=all_success,
            results=results,
            executed_count=len(results),
            total_count=len(behaviors),
            execution_id=log.execution_id,
            final_context=current,
        )
