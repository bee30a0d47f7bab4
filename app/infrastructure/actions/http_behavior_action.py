"""HTTP gateway to side-effecting behavior actions (implements IBehaviorAction).

Each executable behavior type is served by an action endpoint at
{base_url}/{behavior_type}. The request body is the action request as JSON;
the response body is the behavior result envelope.
"""

from __future__ import annotations

from collections.abc import Mapping

import httpx
from pydantic_core import to_jsonable_python

from app.application.dtos.behavior import BehaviorActionRequest, BehaviorResult
from app.application.interfaces.services import IBehaviorAction
from app.domain.enums import BehaviorType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class BehaviorActionError(Exception):
    """Action endpoint answered with a non-success HTTP status."""

    def __init__(self, behavior_type: str, status_code: int, detail: str) -> None:
        self.behavior_type = behavior_type
        self.status_code = status_code
        super().__init__(
            f"Action {behavior_type} returned HTTP {status_code}: {detail}"
        )


class HttpBehaviorAction:
    """Calls one remote action over HTTP. Raises on transport or HTTP errors."""

    def __init__(
        self,
        behavior_type: BehaviorType,
        client: httpx.AsyncClient,
        base_url: str,
    ) -> None:
        self.behavior_type = behavior_type
        self._client = client
        self._url = f"{base_url.rstrip('/')}/{behavior_type.value}"

    async def __call__(self, request: BehaviorActionRequest) -> BehaviorResult:
        payload = {
            "session_id": request.session_id,
            "organization_id": request.organization_id,
            "config": request.config,
            "context": request.context,
        }
        logger.debug("POST %s", self._url)
        resp = await self._client.post(self._url, json=to_jsonable_python(payload))
        if resp.is_error:
            raise BehaviorActionError(
                self.behavior_type.value, resp.status_code, resp.text[:200]
            )
        return BehaviorResult.from_dict(resp.json())


def build_http_behavior_actions(
    client: httpx.AsyncClient, base_url: str
) -> Mapping[BehaviorType, IBehaviorAction]:
    """One HTTP action per executable behavior type."""
    return {
        behavior_type: HttpBehaviorAction(behavior_type, client, base_url)
        for behavior_type in BehaviorType
    }
