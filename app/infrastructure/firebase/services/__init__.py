"""Firestore-backed service implementations (audit, sessions, permissions)."""

from app.infrastructure.firebase.services.audit_firestore import FirestoreAuditService
from app.infrastructure.firebase.services.permission_resolver_firestore import (
    FirestorePermissionResolver,
)
from app.infrastructure.firebase.services.session_auth_firestore import (
    FirestoreSessionAuthenticator,
)

__all__ = [
    "FirestoreAuditService",
    "FirestorePermissionResolver",
    "FirestoreSessionAuthenticator",
]
