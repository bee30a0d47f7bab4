"""Template set resolver: pick the template set that applies to a document.

Precedence, highest first: manual, product, checkout, domain, organization,
system. A level only wins when the set it points at exists, is a template set
and is not deleted; otherwise the next level is tried. Reads only.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from app.application.dtos.template_set import ResolvedTemplateSet, TemplateSetContext
from app.application.interfaces.repositories import IObjectStore, IOrganizationRepository
from app.domain.entities.template_set import (
    TEMPLATE_SET_OBJECT_TYPE,
    TemplateSetEntity,
)
from app.domain.enums import TemplateSetSource
from app.domain.exceptions import TemplateSetConfigurationException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Override level -> object type that carries custom_properties.template_set_id
_OVERRIDE_LEVELS: tuple[tuple[TemplateSetSource, str, str], ...] = (
    (TemplateSetSource.PRODUCT, "product_id", "product"),
    (TemplateSetSource.CHECKOUT, "checkout_instance_id", "checkout_instance"),
    (TemplateSetSource.DOMAIN, "domain_config_id", "domain_config"),
)


def _first_matching(
    sets: list[TemplateSetEntity],
    *predicates: Callable[[TemplateSetEntity], bool],
) -> TemplateSetEntity | None:
    """Return the first set satisfying the earliest predicate that matches anything."""
    for predicate in predicates:
        for template_set in sets:
            if predicate(template_set):
                return template_set
    return None


class TemplateSetResolver:
    """Resolves template sets and individual templates for an organization."""

    def __init__(
        self,
        store: IObjectStore,
        organization_repo: IOrganizationRepository,
        system_organization_slug: str = "system",
    ) -> None:
        self.store = store
        self.organization_repo = organization_repo
        self.system_organization_slug = system_organization_slug

    async def resolve_template_set(
        self,
        organization_id: str,
        context: TemplateSetContext | None = None,
    ) -> ResolvedTemplateSet:
        """Return the winning template set and the level it came from.

        Raises:
            TemplateSetConfigurationException: no level resolves.
        """
        context = context or TemplateSetContext()

        if context.manual_set_id:
            template_set = await self._load_set(context.manual_set_id)
            if template_set is not None:
                return self._resolved(template_set, TemplateSetSource.MANUAL)
            logger.debug("Manual template set %s not usable", context.manual_set_id)

        for source, attr, object_type in _OVERRIDE_LEVELS:
            object_id = getattr(context, attr)
            if not object_id:
                continue
            template_set = await self._load_override(object_id, object_type)
            if template_set is not None:
                return self._resolved(template_set, source)

        org_sets = await self._active_sets(organization_id)
        template_set = _first_matching(org_sets, lambda s: s.is_default, lambda s: True)
        if template_set is not None:
            return self._resolved(template_set, TemplateSetSource.ORGANIZATION)

        system_org_id = await self.organization_repo.get_id_by_slug(
            self.system_organization_slug
        )
        if system_org_id:
            system_sets = await self._active_sets(system_org_id)
            template_set = _first_matching(
                system_sets,
                lambda s: s.is_system_default,
                lambda s: s.is_default,
                lambda s: True,
            )
            if template_set is not None:
                logger.debug(
                    "Organization %s has no template set; using system set %s",
                    organization_id,
                    template_set.id,
                )
                return self._resolved(template_set, TemplateSetSource.SYSTEM)
        else:
            logger.warning(
                "System organization '%s' not found", self.system_organization_slug
            )

        raise TemplateSetConfigurationException(organization_id)

    async def resolve_individual_template(
        self,
        organization_id: str,
        template_type: str,
        context: TemplateSetContext | None = None,
    ) -> str | None:
        """Return the template id for one type from the resolved set, or None.

        The resolved map already folds in the legacy ticket/invoice/email slots,
        so a "ticket" lookup on a 2.0 set holding only an "event" template
        returns that event template.
        """
        resolved = await self.resolve_template_set(organization_id, context)
        return resolved.templates.get(template_type)

    async def _load_set(self, set_id: str) -> TemplateSetEntity | None:
        doc = await self.store.get(set_id)
        if doc is None or doc.get("type") != TEMPLATE_SET_OBJECT_TYPE:
            return None
        template_set = TemplateSetEntity.from_document(doc)
        if template_set.is_deleted:
            return None
        return template_set

    async def _load_override(self, object_id: str, object_type: str) -> TemplateSetEntity | None:
        doc = await self.store.get(object_id)
        if doc is None or doc.get("type") != object_type:
            return None
        props: dict[str, Any] = doc.get("custom_properties") or {}
        set_id = props.get("template_set_id")
        if not set_id:
            return None
        return await self._load_set(set_id)

    async def _active_sets(self, organization_id: str) -> list[TemplateSetEntity]:
        docs = await self.store.query_by_org_type(organization_id, TEMPLATE_SET_OBJECT_TYPE)
        sets = [TemplateSetEntity.from_document(doc) for doc in docs]
        return [s for s in sets if not s.is_deleted]

    @staticmethod
    def _resolved(template_set: TemplateSetEntity, source: TemplateSetSource) -> ResolvedTemplateSet:
        return ResolvedTemplateSet(
            set_id=template_set.id,
            set_name=template_set.name,
            version=template_set.version,
            templates=template_set.resolved_templates(),
            source=source.value,
        )
