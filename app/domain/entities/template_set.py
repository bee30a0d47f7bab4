"""Template set domain entity.

A template set bundles document templates (ticket, invoice, email, or any
other type) so documents for one organization, product or checkout share
consistent branding. Two storage formats exist:

- 1.0: exactly three legacy slots (ticket_template_id, invoice_template_id,
  email_template_id).
- 2.0: a flexible list of {template_id, template_type} entries; the legacy
  slot names are derived through a fallback mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import TemplateSetVersion

TEMPLATE_SET_OBJECT_TYPE = "template_set"
TEMPLATE_OBJECT_TYPE = "template"
DELETED_STATUS = "deleted"

LEGACY_SLOT_FIELDS: dict[str, str] = {
    "ticket": "ticket_template_id",
    "invoice": "invoice_template_id",
    "email": "email_template_id",
}

# Legacy slot -> template types that may fill it, in preference order.
LEGACY_SLOT_FALLBACKS: dict[str, tuple[str, ...]] = {
    "ticket": ("ticket", "event"),
    "email": ("email", "invoice_email", "event"),
    "invoice": ("invoice",),
}


@dataclass(frozen=True)
class TemplateSetEntry:
    """One template inside a 2.0 set."""

    template_id: str
    template_type: str
    is_required: bool = True
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TemplateSetEntry:
        return cls(
            template_id=data["template_id"],
            template_type=data["template_type"],
            is_required=bool(data.get("is_required", True)),
            display_order=int(data.get("display_order", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_id": self.template_id,
            "template_type": self.template_type,
            "is_required": self.is_required,
            "display_order": self.display_order,
        }


@dataclass
class TemplateSetEntity:
    """Domain entity for a template set stored in the object store."""

    id: str
    organization_id: str
    name: str
    status: str
    version: str
    entries: list[TemplateSetEntry] = field(default_factory=list)
    legacy_slots: dict[str, str] = field(default_factory=dict)
    is_default: bool = False
    is_system_default: bool = False
    tags: list[str] = field(default_factory=list)
    description: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> TemplateSetEntity:
        props = doc.get("custom_properties") or {}
        raw_entries = props.get("templates") or []
        version = props.get("version") or (
            TemplateSetVersion.V2.value if raw_entries else TemplateSetVersion.V1.value
        )
        legacy = {
            slot: props[field_name]
            for slot, field_name in LEGACY_SLOT_FIELDS.items()
            if props.get(field_name)
        }
        return cls(
            id=doc["id"],
            organization_id=doc.get("organization_id", ""),
            name=doc.get("name", ""),
            status=doc.get("status", "active"),
            version=version,
            entries=[TemplateSetEntry.from_dict(e) for e in raw_entries],
            legacy_slots=legacy,
            is_default=bool(props.get("is_default", False)),
            is_system_default=bool(props.get("is_system_default", False)),
            tags=list(props.get("tags") or []),
            description=doc.get("description"),
            updated_at=doc.get("updated_at"),
        )

    @property
    def is_deleted(self) -> bool:
        return self.status == DELETED_STATUS

    def flexible_templates(self) -> dict[str, str]:
        """Map template_type -> template_id from the 2.0 list (lowest display_order wins)."""
        out: dict[str, str] = {}
        for entry in sorted(self.entries, key=lambda e: e.display_order):
            out.setdefault(entry.template_type, entry.template_id)
        return out

    def legacy_templates(self) -> dict[str, str]:
        """Return the ticket/invoice/email slots, stored (1.0) or derived (2.0)."""
        if self.version == TemplateSetVersion.V1.value and self.legacy_slots:
            return dict(self.legacy_slots)
        flexible = self.flexible_templates()
        out: dict[str, str] = {}
        for slot, candidates in LEGACY_SLOT_FALLBACKS.items():
            for template_type in candidates:
                if template_type in flexible:
                    out[slot] = flexible[template_type]
                    break
            else:
                if slot in self.legacy_slots:
                    out[slot] = self.legacy_slots[slot]
        return out

    def resolved_templates(self) -> dict[str, str]:
        """Flexible map plus legacy slots; explicit types take precedence over derived slots."""
        merged = self.legacy_templates()
        merged.update(self.flexible_templates())
        return merged
