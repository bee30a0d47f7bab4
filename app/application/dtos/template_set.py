"""DTOs for template set resolution and management."""

from dataclasses import dataclass, field

from app.domain.entities.template_set import TemplateSetEntry


@dataclass(frozen=True)
class TemplateSetContext:
    """Optional override references consulted by the resolver (highest precedence first)."""

    manual_set_id: str | None = None
    product_id: str | None = None
    checkout_instance_id: str | None = None
    domain_config_id: str | None = None


@dataclass(frozen=True)
class ResolvedTemplateSet:
    """Resolution-time value; not persisted."""

    set_id: str
    set_name: str
    version: str
    templates: dict[str, str]
    source: str


@dataclass(frozen=True)
class TemplateSetCreate:
    """Input for create_template_set.

    Either templates (2.0) or all three legacy ids (1.0) must be given.
    """

    name: str
    description: str | None = None
    templates: list[TemplateSetEntry] | None = None
    ticket_template_id: str | None = None
    invoice_template_id: str | None = None
    email_template_id: str | None = None
    is_default: bool = False
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateSetCreateResult:
    set_id: str
    version: str
    template_count: int


@dataclass(frozen=True)
class TemplateSetUpdate:
    """Partial update; None means the field was not supplied.

    A templates list replaces the whole 2.0 list and marks the set 2.0.
    """

    name: str | None = None
    description: str | None = None
    templates: list[TemplateSetEntry] | None = None
    ticket_template_id: str | None = None
    invoice_template_id: str | None = None
    email_template_id: str | None = None
    is_default: bool | None = None
    tags: list[str] | None = None

    def supplied_fields(self) -> list[str]:
        return [
            name
            for name in (
                "name",
                "description",
                "templates",
                "ticket_template_id",
                "invoice_template_id",
                "email_template_id",
                "is_default",
                "tags",
            )
            if getattr(self, name) is not None
        ]
