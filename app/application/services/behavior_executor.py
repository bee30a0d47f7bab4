"""Behavior executor: run one behavior by type (condition gate + static dispatch).

Never raises. Every outcome, including unknown types and action exceptions,
is returned as a BehaviorResult.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from app.application.dtos.behavior import BehaviorActionRequest, BehaviorResult
from app.application.interfaces.services import IBehaviorAction
from app.domain.enums import BehaviorType, ClientSideBehaviorType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

CLIENT_SIDE_MESSAGE = "client-side behavior"

_FIELD = r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*"
_COMPARISON_RE = re.compile(
    rf"^\s*(?P<field>{_FIELD})\s*(?P<op>===|!==)\s*(?P<quote>['\"])(?P<value>(?:(?!(?P=quote)).)*)(?P=quote)\s*$"
)
_TRUTHY_RE = re.compile(rf"^\s*(?P<field>{_FIELD})\s*$")


class ConditionSyntaxError(ValueError):
    """Condition string is outside the supported grammar."""


def _lookup(context: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path into nested mappings; missing segments yield None."""
    current: Any = context
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def evaluate_condition(condition: str, context: Mapping[str, Any]) -> bool:
    """Evaluate `field === 'v'`, `field !== 'v'` or bare `field` against context.

    Raises:
        ConditionSyntaxError: condition matches none of the three forms.
    """
    match = _COMPARISON_RE.match(condition)
    if match:
        actual = _lookup(context, match.group("field"))
        equal = actual == match.group("value")
        return equal if match.group("op") == "===" else not equal
    match = _TRUTHY_RE.match(condition)
    if match:
        return bool(_lookup(context, match.group("field")))
    raise ConditionSyntaxError(condition)


class BehaviorExecutor:
    """Executes a single behavior against the current execution context.

    Executable types form the closed BehaviorType enum; each is mapped to an
    injected action. ClientSideBehaviorType members are recognized but refused.
    """

    def __init__(self, actions: Mapping[BehaviorType, IBehaviorAction]) -> None:
        self._actions = dict(actions)

    def condition_met(self, config: Mapping[str, Any], context: Mapping[str, Any]) -> bool:
        """Return False when config carries a condition that is unmet or unparseable."""
        condition = config.get("condition")
        if not condition:
            return True
        if not isinstance(condition, str):
            logger.warning("Ignoring non-string behavior condition %r; treating as not met", condition)
            return False
        try:
            return evaluate_condition(condition, context)
        except ConditionSyntaxError:
            logger.warning("Unsupported condition syntax %r; treating as not met", condition)
            return False

    async def execute_behavior(
        self,
        organization_id: str,
        behavior_type: str,
        config: dict[str, Any],
        context: dict[str, Any],
        *,
        session_id: str | None = None,
    ) -> BehaviorResult:
        """Run one behavior and return its result envelope."""
        if not self.condition_met(config, context):
            return BehaviorResult.skipped(str(config.get("condition")))

        try:
            kind = BehaviorType(behavior_type)
        except ValueError:
            return self._non_executable(behavior_type)

        action = self._actions.get(kind)
        if action is None:
            return BehaviorResult.failure(
                f"No action registered for behavior type: {behavior_type}"
            )

        request = BehaviorActionRequest(
            organization_id=organization_id,
            config=config,
            context=context,
            session_id=session_id,
        )
        try:
            return await action(request)
        except Exception as exc:
            logger.exception(
                "Behavior %s failed for organization %s", behavior_type, organization_id
            )
            return BehaviorResult.failure(str(exc) or exc.__class__.__name__)

    @staticmethod
    def _non_executable(behavior_type: str) -> BehaviorResult:
        if behavior_type in ClientSideBehaviorType.values():
            return BehaviorResult.failure(
                f"Behavior type {behavior_type} runs in the checkout flow and "
                "cannot be executed by the workflow engine",
                message=CLIENT_SIDE_MESSAGE,
            )
        logger.warning("Unknown behavior type: %s", behavior_type)
        return BehaviorResult.failure(f"Unknown behavior type: {behavior_type}")
