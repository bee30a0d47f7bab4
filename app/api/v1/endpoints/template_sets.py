"""Template set API: thin routes delegating to TemplateSetService."""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from app.api.v1.dependencies import SessionId, TemplateSetServiceDep
from app.core.limiter import limit_writes
from app.schemas.template_set import (
    AddTemplatesRequest,
    ResolvedTemplateResponse,
    ResolvedTemplateSetResponse,
    ResolveTemplateSetRequest,
    TemplateEntryUpdateRequest,
    TemplatesAddedResponse,
    TemplateSetCopyRequest,
    TemplateSetCreateRequest,
    TemplateSetCreateResponse,
    TemplateSetDetailResponse,
    TemplateSetResponse,
    TemplateSetUpdateRequest,
)

router = APIRouter()

OrganizationId = Annotated[str, Query(min_length=1)]


@router.get("", response_model=list[TemplateSetResponse])
async def list_template_sets(
    organization_id: OrganizationId,
    session_id: SessionId,
    service: TemplateSetServiceDep,
    include_system: bool = False,
):
    """Non-deleted template sets, most recently updated first."""
    sets = await service.list_template_sets(
        session_id, organization_id, include_system=include_system
    )
    return [TemplateSetResponse.model_validate(s) for s in sets]


@router.post("", response_model=TemplateSetCreateResponse, status_code=201)
@limit_writes
async def create_template_set(
    request: Request,
    body: TemplateSetCreateRequest,
    organization_id: OrganizationId,
    session_id: SessionId,
    service: TemplateSetServiceDep,
):
    result = await service.create_template_set(session_id, organization_id, body.to_create())
    return TemplateSetCreateResponse.model_validate(result)


@router.post("/resolve", response_model=ResolvedTemplateSetResponse)
async def resolve_template_set(
    organization_id: OrganizationId,
    session_id: SessionId,
    service: TemplateSetServiceDep,
    body: ResolveTemplateSetRequest | None = None,
):
    """Template set that applies for the given overrides (manual > product > checkout > domain > org > system)."""
    resolved = await service.resolve_for_session(
        session_id, organization_id, body.to_context() if body else None
    )
    return ResolvedTemplateSetResponse.model_validate(resolved)


@router.post("/resolve/{template_type}", response_model=ResolvedTemplateResponse)
async def resolve_template(
    template_type: str,
    organization_id: OrganizationId,
    session_id: SessionId,
    service: TemplateSetServiceDep,
    body: ResolveTemplateSetRequest | None = None,
):
    template_id = await service.resolve_template_for_session(
        session_id,
        organization_id,
        template_type,
        body.to_context() if body else None,
    )
    return ResolvedTemplateResponse(template_type=template_type, template_id=template_id)


@router.post("/{set_id}/default", status_code=204)
@limit_writes
async def set_default_template_set(
    request: Request,
    set_id: str,
    session_id: SessionId,
    service: TemplateSetServiceDep,
) -> None:
    await service.set_default_template_set(session_id, set_id)


@router.delete("/{set_id}", status_code=204)
@limit_writes
async def delete_template_set(
    request: Request,
    set_id: str,
    session_id: SessionId,
    service: TemplateSetServiceDep,
) -> None:
    """Soft delete; the set is skipped by resolution from then on."""
    await service.delete_template_set(session_id, set_id)


@router.get("/{set_id}", response_model=TemplateSetDetailResponse)
async def get_template_set(
    set_id: str,
    session_id: SessionId,
    service: TemplateSetServiceDep,
):
    template_set = await service.get_template_set(session_id, set_id)
    return TemplateSetDetailResponse.model_validate(template_set).model_copy(
        update={"templates": template_set.legacy_templates()}
    )


@router.patch("/{set_id}", status_code=204)
@limit_writes
async def update_template_set(
    request: Request,
    set_id: str,
    body: TemplateSetUpdateRequest,
    session_id: SessionId,
    service: TemplateSetServiceDep,
) -> None:
    await service.update_template_set(session_id, set_id, body.to_update())


@router.post("/{set_id}/templates", response_model=TemplatesAddedResponse)
@limit_writes
async def add_templates_to_set(
    request: Request,
    set_id: str,
    body: AddTemplatesRequest,
    session_id: SessionId,
    service: TemplateSetServiceDep,
):
    added = await service.add_templates_to_set(
        session_id, set_id, [t.to_domain() for t in body.templates]
    )
    return TemplatesAddedResponse(added_count=added)


@router.delete("/{set_id}/templates/{template_id}", status_code=204)
@limit_writes
async def remove_template_from_set(
    request: Request,
    set_id: str,
    template_id: str,
    session_id: SessionId,
    service: TemplateSetServiceDep,
) -> None:
    await service.remove_templates_from_set(session_id, set_id, [template_id])


@router.patch("/{set_id}/templates/{template_id}", status_code=204)
@limit_writes
async def update_template_in_set(
    request: Request,
    set_id: str,
    template_id: str,
    body: TemplateEntryUpdateRequest,
    session_id: SessionId,
    service: TemplateSetServiceDep,
) -> None:
    await service.update_template_in_set(
        session_id,
        set_id,
        template_id,
        is_required=body.is_required,
        display_order=body.display_order,
    )


@router.post("/{set_id}/copy", response_model=TemplateSetCreateResponse, status_code=201)
@limit_writes
async def copy_template_set(
    request: Request,
    set_id: str,
    organization_id: OrganizationId,
    session_id: SessionId,
    service: TemplateSetServiceDep,
    body: TemplateSetCopyRequest | None = None,
):
    """Copy a set (usually the system default) into organization_id for customizing."""
    body = body or TemplateSetCopyRequest()
    result = await service.copy_template_set(
        session_id,
        set_id,
        organization_id,
        name=body.name,
        set_as_default=body.set_as_default,
    )
    return TemplateSetCreateResponse.model_validate(result)
