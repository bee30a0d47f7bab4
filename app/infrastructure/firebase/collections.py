"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent and act as the single source of truth for the "schema".

Example:
    from app.infrastructure.firebase.client import get_firestore_client
    from app.infrastructure.firebase.collections import COLLECTION_OBJECTS

    db = get_firestore_client()
    if db:
        snapshot = await db.collection(COLLECTION_OBJECTS).document(object_id).get()
"""

# Generic object store (workflows, template sets, templates, products, ...)
COLLECTION_OBJECTS = "objects"
COLLECTION_OBJECT_ACTIONS = "object_actions"

# Workflow runs
COLLECTION_WORKFLOW_EXECUTION_LOGS = "workflow_execution_logs"

# Organizations, sessions & RBAC
COLLECTION_ORGANIZATIONS = "organizations"
COLLECTION_SESSIONS = "sessions"
COLLECTION_USERS = "users"
COLLECTION_ORGANIZATION_MEMBERS = "organization_members"
COLLECTION_ROLES = "roles"
