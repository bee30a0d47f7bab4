"""Firestore-backed repository implementations."""

from app.infrastructure.firebase.repositories.execution_log_repo_firestore import (
    FirestoreExecutionLogRepository,
)
from app.infrastructure.firebase.repositories.object_store_firestore import (
    FirestoreObjectStore,
)
from app.infrastructure.firebase.repositories.organization_repo_firestore import (
    FirestoreOrganizationRepository,
)

__all__ = [
    "FirestoreExecutionLogRepository",
    "FirestoreObjectStore",
    "FirestoreOrganizationRepository",
]
