"""Template set API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.template_set import (
    TemplateSetContext,
    TemplateSetCreate,
    TemplateSetUpdate,
)
from app.domain.entities.template_set import TemplateSetEntry


class TemplateSetEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    template_id: str = Field(..., min_length=1)
    template_type: str = Field(..., min_length=1, max_length=64)
    is_required: bool = True
    display_order: int = Field(default=0, ge=0)

    def to_domain(self) -> TemplateSetEntry:
        return TemplateSetEntry(
            template_id=self.template_id,
            template_type=self.template_type,
            is_required=self.is_required,
            display_order=self.display_order,
        )


class TemplateSetCreateRequest(BaseModel):
    """Either templates (2.0) or all three legacy template ids (1.0)."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    templates: list[TemplateSetEntrySchema] | None = None
    ticket_template_id: str | None = None
    invoice_template_id: str | None = None
    email_template_id: str | None = None
    is_default: bool = False
    tags: list[str] = Field(default_factory=list)

    def to_create(self) -> TemplateSetCreate:
        return TemplateSetCreate(
            name=self.name,
            description=self.description,
            templates=[t.to_domain() for t in self.templates] if self.templates else None,
            ticket_template_id=self.ticket_template_id,
            invoice_template_id=self.invoice_template_id,
            email_template_id=self.email_template_id,
            is_default=self.is_default,
            tags=list(self.tags),
        )


class TemplateSetCreateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    set_id: str
    version: str
    template_count: int


class TemplateSetResponse(BaseModel):
    """Template set as listed for an organization."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    description: str | None
    status: str
    version: str
    entries: list[TemplateSetEntrySchema]
    is_default: bool
    is_system_default: bool
    tags: list[str]
    updated_at: datetime | None


class TemplateSetDetailResponse(TemplateSetResponse):
    """One set plus its ticket/invoice/email templates, stored or derived."""

    templates: dict[str, str] = Field(default_factory=dict)


class TemplateSetUpdateRequest(BaseModel):
    """Partial update; a templates list replaces the current one."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    templates: list[TemplateSetEntrySchema] | None = None
    ticket_template_id: str | None = None
    invoice_template_id: str | None = None
    email_template_id: str | None = None
    is_default: bool | None = None
    tags: list[str] | None = None

    def to_update(self) -> TemplateSetUpdate:
        return TemplateSetUpdate(
            name=self.name,
            description=self.description,
            templates=(
                [t.to_domain() for t in self.templates] if self.templates is not None else None
            ),
            ticket_template_id=self.ticket_template_id,
            invoice_template_id=self.invoice_template_id,
            email_template_id=self.email_template_id,
            is_default=self.is_default,
            tags=list(self.tags) if self.tags is not None else None,
        )


class AddTemplatesRequest(BaseModel):
    """display_order 0 places a template after the current last entry."""

    templates: list[TemplateSetEntrySchema] = Field(..., min_length=1)


class TemplatesAddedResponse(BaseModel):
    added_count: int


class TemplateEntryUpdateRequest(BaseModel):
    is_required: bool | None = None
    display_order: int | None = Field(default=None, ge=0)


class TemplateSetCopyRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    set_as_default: bool = False


class ResolveTemplateSetRequest(BaseModel):
    """Override references, highest precedence first."""

    manual_set_id: str | None = None
    product_id: str | None = None
    checkout_instance_id: str | None = None
    domain_config_id: str | None = None

    def to_context(self) -> TemplateSetContext:
        return TemplateSetContext(
            manual_set_id=self.manual_set_id,
            product_id=self.product_id,
            checkout_instance_id=self.checkout_instance_id,
            domain_config_id=self.domain_config_id,
        )


class ResolvedTemplateSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    set_id: str
    set_name: str
    version: str
    templates: dict[str, str]
    source: str


class ResolvedTemplateResponse(BaseModel):
    template_type: str
    template_id: str | None
