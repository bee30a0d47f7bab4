"""Firestore client lifecycle (REST-based, no firebase-admin).

Initialized at app startup from FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). The object store, execution
logs, audit trail, sessions and RBAC documents all live in Firestore.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from app.core.config import Settings, get_settings
from app.domain.exceptions import ObjectStoreUnavailableException
from app.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict(settings: Settings) -> dict[str, Any] | None:
    """Return service account dict from env key or file path."""
    if settings.firebase_service_account_key:
        try:
            return json.loads(settings.firebase_service_account_key.get_secret_value())
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if not path:
        return None
    resolved = Path(path).expanduser().resolve()
    if not resolved.is_file():
        logger.warning(
            "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
            path,
            resolved,
        )
        return None
    with open(resolved, encoding="utf-8") as f:
        return json.load(f)


def init_firebase(settings: Settings | None = None) -> bool:
    """Initialize the Firestore client.

    Safe to call when no credentials are configured (returns False). On
    malformed credentials, logs the exception and returns False so the app
    can still start; lifespan decides whether that is fatal.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = settings or get_settings()
    try:
        key_dict = _load_key_dict(settings)
        if not key_dict:
            return False

        project_id = key_dict.get("project_id")
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return False

        _firestore_client = FirestoreRESTClient(project_id, _get_credentials(key_dict))
        logger.info("Firestore client initialized for project %s", project_id)
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


def require_firestore_client() -> FirestoreRESTClient:
    """Return the Firestore client or raise ObjectStoreUnavailableException."""
    if _firestore_client is None:
        raise ObjectStoreUnavailableException()
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
