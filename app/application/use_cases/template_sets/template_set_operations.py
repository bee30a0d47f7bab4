"""Template set operations: create, read, update, edit membership, copy, set default,
soft delete, resolve for a session.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from app.application.dtos.template_set import (
    ResolvedTemplateSet,
    TemplateSetContext,
    TemplateSetCreate,
    TemplateSetCreateResult,
    TemplateSetUpdate,
)
from app.application.interfaces.repositories import IObjectStore, IOrganizationRepository
from app.application.interfaces.services import IAuditService
from app.application.services.access_guard import AccessGuard
from app.application.services.template_set_resolver import TemplateSetResolver
from app.domain.entities.template_set import (
    DELETED_STATUS,
    LEGACY_SLOT_FIELDS,
    TEMPLATE_OBJECT_TYPE,
    TEMPLATE_SET_OBJECT_TYPE,
    TemplateSetEntity,
    TemplateSetEntry,
)
from app.domain.enums import TemplateSetVersion
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.enums import AuditAction, Permission
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


class TemplateSetService:
    """Template set management plus session-scoped resolver wrappers."""

    def __init__(
        self,
        store: IObjectStore,
        organization_repo: IOrganizationRepository,
        access: AccessGuard,
        audit_service: IAuditService,
        resolver: TemplateSetResolver,
        system_organization_slug: str = "system",
    ) -> None:
        self.store = store
        self.organization_repo = organization_repo
        self.access = access
        self.audit_service = audit_service
        self.resolver = resolver
        self.system_organization_slug = system_organization_slug

    async def _load(self, set_id: str) -> dict[str, Any]:
        doc = await self.store.get(set_id)
        if doc is None or doc.get("type") != TEMPLATE_SET_OBJECT_TYPE:
            raise ResourceNotFoundException("template_set", set_id)
        return doc

    async def _require_template(self, template_id: str, label: str) -> dict[str, Any]:
        doc = await self.store.get(template_id)
        if doc is None or doc.get("type") != TEMPLATE_OBJECT_TYPE:
            raise ValidationException(f"Invalid {label}: {template_id}", field="templates")
        return doc

    async def _load_for_edit(self, session_id: str, set_id: str) -> tuple[str, dict[str, Any]]:
        user_id = await self.access.authenticate(session_id)
        doc = await self._load(set_id)
        await self.access.require(user_id, doc["organization_id"], Permission.EDIT_TEMPLATES)
        return user_id, doc

    async def _save_entries(
        self, doc: dict[str, Any], entries: list[dict[str, Any]]
    ) -> None:
        """Store the entry list; membership edits always leave the set in 2.0 format."""
        props = doc.get("custom_properties") or {}
        await self.store.patch(
            doc["id"],
            {
                "custom_properties": {
                    **props,
                    "templates": entries,
                    "version": TemplateSetVersion.V2.value,
                },
                "updated_at": utc_now(),
            },
        )

    async def _unset_defaults(self, organization_id: str, keep_id: str | None = None) -> None:
        docs = await self.store.query_by_org_type(organization_id, TEMPLATE_SET_OBJECT_TYPE)
        for doc in docs:
            props = doc.get("custom_properties") or {}
            if props.get("is_default") and doc["id"] != keep_id:
                await self.store.patch(
                    doc["id"], {"custom_properties": {**props, "is_default": False}}
                )

    async def create_template_set(
        self, session_id: str, organization_id: str, data: TemplateSetCreate
    ) -> TemplateSetCreateResult:
        """Create a 2.0 set from templates, or a 1.0 set from the three legacy ids.

        1.0 sets also store the equivalent templates list.
        """
        user_id = await self.access.authorize(
            session_id, organization_id, Permission.CREATE_TEMPLATES
        )

        legacy_ids = {
            "ticket": data.ticket_template_id,
            "invoice": data.invoice_template_id,
            "email": data.email_template_id,
        }
        if data.templates:
            version = TemplateSetVersion.V2.value
            entries = [
                TemplateSetEntry(
                    template_id=t.template_id,
                    template_type=t.template_type,
                    is_required=t.is_required,
                    display_order=t.display_order or index + 1,
                )
                for index, t in enumerate(data.templates)
            ]
            for entry in entries:
                await self._require_template(entry.template_id, "template")
        elif all(legacy_ids.values()):
            version = TemplateSetVersion.V1.value
            entries = []
            for order, (slot, template_id) in enumerate(legacy_ids.items(), start=1):
                await self._require_template(template_id, f"{slot} template")
                entries.append(
                    TemplateSetEntry(template_id=template_id, template_type=slot, display_order=order)
                )
        else:
            raise ValidationException(
                "Must provide either 'templates' (2.0) or all three template ids (1.0)",
                field="templates",
            )

        if data.is_default:
            await self._unset_defaults(organization_id)

        props: dict[str, Any] = {
            "version": version,
            "templates": [e.to_dict() for e in entries],
            "is_default": data.is_default,
            "is_system_default": False,
            "tags": list(data.tags),
        }
        if version == TemplateSetVersion.V1.value:
            for slot, field_name in LEGACY_SLOT_FIELDS.items():
                props[field_name] = legacy_ids[slot]

        now = utc_now()
        set_id = await self.store.insert(
            {
                "organization_id": organization_id,
                "type": TEMPLATE_SET_OBJECT_TYPE,
                "name": data.name,
                "description": data.description or "",
                "status": "active",
                "custom_properties": props,
                "created_by": user_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self.audit_service.log_object_action(
            organization_id=organization_id,
            object_id=set_id,
            action_type=AuditAction.TEMPLATE_SET_CREATED,
            action_data={
                "name": data.name,
                "version": version,
                "template_count": len(entries),
                "is_default": data.is_default,
            },
            performed_by=user_id,
        )
        return TemplateSetCreateResult(set_id=set_id, version=version, template_count=len(entries))

    async def list_template_sets(
        self, session_id: str, organization_id: str, *, include_system: bool = False
    ) -> list[TemplateSetEntity]:
        """Non-deleted sets of the organization (plus system sets), newest update first."""
        await self.access.authorize(session_id, organization_id, Permission.VIEW_TEMPLATES)
        org_ids = [organization_id]
        if include_system:
            system_org_id = await self.organization_repo.get_id_by_slug(
                self.system_organization_slug
            )
            if system_org_id and system_org_id != organization_id:
                org_ids.append(system_org_id)

        sets: list[TemplateSetEntity] = []
        for org_id in org_ids:
            docs = await self.store.query_by_org_type(org_id, TEMPLATE_SET_OBJECT_TYPE)
            sets.extend(
                s for s in (TemplateSetEntity.from_document(d) for d in docs) if not s.is_deleted
            )
        sets.sort(key=lambda s: s.updated_at or _EPOCH, reverse=True)
        return sets

    async def get_template_set(self, session_id: str, set_id: str) -> TemplateSetEntity:
        user_id = await self.access.authenticate(session_id)
        doc = await self._load(set_id)
        await self.access.require(user_id, doc["organization_id"], Permission.VIEW_TEMPLATES)
        return TemplateSetEntity.from_document(doc)

    async def update_template_set(
        self, session_id: str, set_id: str, data: TemplateSetUpdate
    ) -> None:
        """Apply the supplied fields; referenced templates must exist."""
        user_id, doc = await self._load_for_edit(session_id, set_id)
        organization_id = doc["organization_id"]
        props = dict(doc.get("custom_properties") or {})

        if data.templates is not None:
            entries = [
                TemplateSetEntry(
                    template_id=t.template_id,
                    template_type=t.template_type,
                    is_required=t.is_required,
                    display_order=t.display_order or index + 1,
                )
                for index, t in enumerate(data.templates)
            ]
            for entry in entries:
                await self._require_template(entry.template_id, "template")
            props["templates"] = [e.to_dict() for e in entries]
            props["version"] = TemplateSetVersion.V2.value

        legacy_ids = {
            "ticket": data.ticket_template_id,
            "invoice": data.invoice_template_id,
            "email": data.email_template_id,
        }
        for slot, template_id in legacy_ids.items():
            if template_id is not None:
                await self._require_template(template_id, f"{slot} template")
                props[LEGACY_SLOT_FIELDS[slot]] = template_id

        if data.is_default is not None:
            if data.is_default and not props.get("is_default"):
                await self._unset_defaults(organization_id, keep_id=set_id)
            props["is_default"] = data.is_default
        if data.tags is not None:
            props["tags"] = list(data.tags)

        fields: dict[str, Any] = {"custom_properties": props, "updated_at": utc_now()}
        if data.name is not None:
            fields["name"] = data.name
        if data.description is not None:
            fields["description"] = data.description
        await self.store.patch(set_id, fields)

        await self.audit_service.log_object_action(
            organization_id=organization_id,
            object_id=set_id,
            action_type=AuditAction.TEMPLATE_SET_UPDATED,
            action_data={
                "updates": data.supplied_fields(),
                "template_count": len(data.templates) if data.templates is not None else None,
            },
            performed_by=user_id,
        )

    async def add_templates_to_set(
        self, session_id: str, set_id: str, templates: list[TemplateSetEntry]
    ) -> int:
        """Append templates; a display_order of 0 means after the current last entry."""
        user_id, doc = await self._load_for_edit(session_id, set_id)
        current = list((doc.get("custom_properties") or {}).get("templates") or [])
        next_order = max((int(t.get("display_order", 0)) for t in current), default=0)

        for template in templates:
            template_doc = await self._require_template(template.template_id, "template")
            if any(t["template_id"] == template.template_id for t in current):
                label = template_doc.get("name") or template.template_id
                raise ValidationException(
                    f"Template {label} is already in this set",
                    field="templates",
                )
            if template.display_order:
                order = template.display_order
            else:
                next_order += 1
                order = next_order
            current.append(
                TemplateSetEntry(
                    template_id=template.template_id,
                    template_type=template.template_type,
                    is_required=template.is_required,
                    display_order=order,
                ).to_dict()
            )

        await self._save_entries(doc, current)
        await self.audit_service.log_object_action(
            organization_id=doc["organization_id"],
            object_id=set_id,
            action_type=AuditAction.TEMPLATES_ADDED_TO_SET,
            action_data={
                "added_count": len(templates),
                "template_ids": [t.template_id for t in templates],
            },
            performed_by=user_id,
        )
        return len(templates)

    async def remove_templates_from_set(
        self, session_id: str, set_id: str, template_ids: list[str]
    ) -> int:
        """Drop the given templates and return how many were removed; unknown ids are ignored."""
        user_id, doc = await self._load_for_edit(session_id, set_id)
        current = list((doc.get("custom_properties") or {}).get("templates") or [])
        dropped = set(template_ids)
        remaining = [t for t in current if t["template_id"] not in dropped]
        removed = len(current) - len(remaining)

        await self._save_entries(doc, remaining)
        await self.audit_service.log_object_action(
            organization_id=doc["organization_id"],
            object_id=set_id,
            action_type=AuditAction.TEMPLATES_REMOVED_FROM_SET,
            action_data={"removed_count": removed, "template_ids": list(template_ids)},
            performed_by=user_id,
        )
        return removed

    async def update_template_in_set(
        self,
        session_id: str,
        set_id: str,
        template_id: str,
        *,
        is_required: bool | None = None,
        display_order: int | None = None,
    ) -> None:
        user_id, doc = await self._load_for_edit(session_id, set_id)
        current = [dict(t) for t in (doc.get("custom_properties") or {}).get("templates") or []]
        entry = next((t for t in current if t["template_id"] == template_id), None)
        if entry is None:
            raise ResourceNotFoundException("template_set_entry", template_id)
        if is_required is not None:
            entry["is_required"] = is_required
        if display_order is not None:
            entry["display_order"] = display_order

        await self._save_entries(doc, current)
        await self.audit_service.log_object_action(
            organization_id=doc["organization_id"],
            object_id=set_id,
            action_type=AuditAction.TEMPLATE_UPDATED_IN_SET,
            action_data={
                "template_id": template_id,
                "updates": {"is_required": is_required, "display_order": display_order},
            },
            performed_by=user_id,
        )

    async def copy_template_set(
        self,
        session_id: str,
        source_set_id: str,
        target_organization_id: str,
        *,
        name: str | None = None,
        set_as_default: bool = False,
    ) -> TemplateSetCreateResult:
        """Copy a set (typically the system default) into an organization as a 2.0 set.

        Entries whose template no longer exists are skipped. Copies are never
        system defaults.
        """
        user_id = await self.access.authorize(
            session_id, target_organization_id, Permission.CREATE_TEMPLATES
        )
        source = await self._load(source_set_id)
        source_org_id = source["organization_id"]
        if source_org_id != target_organization_id:
            system_org_id = await self.organization_repo.get_id_by_slug(
                self.system_organization_slug
            )
            if source_org_id != system_org_id:
                await self.access.require(user_id, source_org_id, Permission.VIEW_TEMPLATES)

        source_props = source.get("custom_properties") or {}
        source_entries = source_props.get("templates") or []
        if not source_entries:
            raise ValidationException("Source template set has no templates", field="templates")

        entries: list[dict[str, Any]] = []
        for raw in source_entries:
            template_doc = await self.store.get(raw["template_id"])
            if template_doc is None or template_doc.get("type") != TEMPLATE_OBJECT_TYPE:
                logger.warning(
                    "Template %s not found while copying set %s, skipping",
                    raw["template_id"],
                    source_set_id,
                )
                continue
            entries.append(TemplateSetEntry.from_dict(raw).to_dict())
        if not entries:
            raise ValidationException(
                "No valid templates found in source template set", field="templates"
            )

        if set_as_default:
            await self._unset_defaults(target_organization_id)

        source_name = source.get("name", "")
        now = utc_now()
        new_id = await self.store.insert(
            {
                "organization_id": target_organization_id,
                "type": TEMPLATE_SET_OBJECT_TYPE,
                "name": name or f"{source_name} (Copy)",
                "description": f"Copy of {source_name}. {source.get('description') or ''}".strip(),
                "status": "active",
                "custom_properties": {
                    "version": TemplateSetVersion.V2.value,
                    "templates": entries,
                    "is_default": set_as_default,
                    "is_system_default": False,
                    "tags": [*(source_props.get("tags") or []), "copied"],
                    "copied_from": source_set_id,
                    "copied_at": now,
                },
                "created_by": user_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self.audit_service.log_object_action(
            organization_id=target_organization_id,
            object_id=new_id,
            action_type=AuditAction.TEMPLATE_SET_COPIED,
            action_data={
                "source_set_id": source_set_id,
                "source_set_name": source_name,
                "template_count": len(entries),
                "set_as_default": set_as_default,
            },
            performed_by=user_id,
        )
        return TemplateSetCreateResult(
            set_id=new_id, version=TemplateSetVersion.V2.value, template_count=len(entries)
        )

    async def set_default_template_set(self, session_id: str, set_id: str) -> None:
        """Make set_id the organization default; every other default is cleared."""
        user_id, doc = await self._load_for_edit(session_id, set_id)
        organization_id = doc["organization_id"]

        await self._unset_defaults(organization_id, keep_id=set_id)
        props = doc.get("custom_properties") or {}
        await self.store.patch(
            set_id,
            {"custom_properties": {**props, "is_default": True}, "updated_at": utc_now()},
        )
        await self.audit_service.log_object_action(
            organization_id=organization_id,
            object_id=set_id,
            action_type=AuditAction.TEMPLATE_SET_DEFAULT_CHANGED,
            action_data={"name": doc.get("name")},
            performed_by=user_id,
        )

    async def delete_template_set(self, session_id: str, set_id: str) -> None:
        """Soft delete: status becomes 'deleted'; resolution skips the set from then on."""
        user_id = await self.access.authenticate(session_id)
        doc = await self._load(set_id)
        organization_id = doc["organization_id"]
        await self.access.require(user_id, organization_id, Permission.DELETE_TEMPLATES)

        await self.store.patch(set_id, {"status": DELETED_STATUS, "updated_at": utc_now()})
        await self.audit_service.log_object_action(
            organization_id=organization_id,
            object_id=set_id,
            action_type=AuditAction.TEMPLATE_SET_DELETED,
            action_data={"name": doc.get("name")},
            performed_by=user_id,
        )

    async def resolve_for_session(
        self,
        session_id: str,
        organization_id: str,
        context: TemplateSetContext | None = None,
    ) -> ResolvedTemplateSet:
        await self.access.authorize(session_id, organization_id, Permission.VIEW_TEMPLATES)
        return await self.resolver.resolve_template_set(organization_id, context)

    async def resolve_template_for_session(
        self,
        session_id: str,
        organization_id: str,
        template_type: str,
        context: TemplateSetContext | None = None,
    ) -> str | None:
        await self.access.authorize(session_id, organization_id, Permission.VIEW_TEMPLATES)
        return await self.resolver.resolve_individual_template(
            organization_id, template_type, context
        )
