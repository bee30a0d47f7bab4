"""DTOs for behavior execution (executor results, action requests, sequence results)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BehaviorResult:
    """Outcome envelope of one behavior: {success, data?, message?, error?, actions?}."""

    success: bool
    data: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None
    actions: list[dict[str, Any]] | None = None

    @classmethod
    def failure(cls, error: str, message: str | None = None) -> BehaviorResult:
        return cls(success=False, error=error, message=message)

    @classmethod
    def skipped(cls, reason: str) -> BehaviorResult:
        """Condition not met: the behavior counts as successful but did nothing."""
        return cls(success=True, data={"skipped": True, "reason": reason})

    @classmethod
    def from_dict(cls, envelope: dict[str, Any]) -> BehaviorResult:
        """Parse an action response; non-object data is a protocol violation and fails."""
        data = envelope.get("data")
        if data is not None and not isinstance(data, dict):
            return cls.failure(
                f"Action returned invalid data: expected an object, got {type(data).__name__}"
            )
        return cls(
            success=bool(envelope.get("success", False)),
            data=data,
            message=envelope.get("message"),
            error=envelope.get("error"),
            actions=envelope.get("actions"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        for key in ("data", "message", "error", "actions"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class BehaviorActionRequest:
    """Payload handed to a side-effecting action: {session_id, organization_id, config, context}."""

    organization_id: str
    config: dict[str, Any]
    context: dict[str, Any]
    session_id: str | None = None


@dataclass(frozen=True)
class BehaviorStep:
    """Minimal runnable behavior (type, config, priority) for ad-hoc sequences."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)
    priority: int = 0


@dataclass(frozen=True)
class BehaviorExecutionRecord:
    """Per-behavior entry in a sequence result and in the sealed execution log."""

    behavior_type: str
    success: bool
    data: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "behavior_type": self.behavior_type,
            "success": self.success,
            "data": self.data,
            "message": self.message,
            "error": self.error,
        }


@dataclass(frozen=True)
class SequenceResult:
    """Result of one sequence run.

    executed_count is the number of behaviors actually attempted; it is lower
    than total_count when the run stopped at a failure.
    """

    success: bool
    results: list[BehaviorExecutionRecord]
    executed_count: int
    total_count: int
    execution_id: str | None = None
    final_context: dict[str, Any] = field(default_factory=dict)
