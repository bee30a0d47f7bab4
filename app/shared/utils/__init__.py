"""Shared utilities: datetime and id generators."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_behavior_id, generate_cuid

__all__ = [
    "generate_behavior_id",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
