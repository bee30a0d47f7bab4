"""Firestore integration (REST client, repositories, services)."""

from app.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
    require_firestore_client,
)

__all__ = [
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
    "require_firestore_client",
]
