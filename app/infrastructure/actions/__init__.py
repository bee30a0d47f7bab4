"""Behavior action adapters."""

from app.infrastructure.actions.http_behavior_action import (
    BehaviorActionError,
    HttpBehaviorAction,
    build_http_behavior_actions,
)

__all__ = [
    "BehaviorActionError",
    "HttpBehaviorAction",
    "build_http_behavior_actions",
]
