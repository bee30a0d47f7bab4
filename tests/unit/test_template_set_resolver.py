"""TemplateSetResolver unit tests: precedence, fallbacks and legacy slots."""

import pytest

from app.application.dtos.template_set import TemplateSetContext
from app.domain.exceptions import TemplateSetConfigurationException


def _seed_set(store, set_id, organization_id="org_1", *, status="active", **props):
    props.setdefault("version", "2.0")
    props.setdefault("templates", [{"template_id": f"{set_id}_ticket", "template_type": "ticket"}])
    return store.seed(
        set_id,
        organization_id=organization_id,
        type="template_set",
        name=set_id.upper(),
        status=status,
        custom_properties=props,
    )


async def test_manual_set_wins_over_everything(store, resolver) -> None:
    _seed_set(store, "ts_default", is_default=True)
    _seed_set(store, "ts_manual")
    store.seed("prod_1", type="product", custom_properties={"template_set_id": "ts_default"})

    resolved = await resolver.resolve_template_set(
        "org_1", TemplateSetContext(manual_set_id="ts_manual", product_id="prod_1")
    )
    assert resolved.set_id == "ts_manual"
    assert resolved.source == "manual"


async def test_product_override_beats_checkout_and_org_default(store, resolver) -> None:
    """A product linked to set A wins over checkout set C and the organization default B."""
    _seed_set(store, "ts_b", is_default=True)
    _seed_set(store, "ts_a")
    _seed_set(store, "ts_c")
    store.seed("prod_1", type="product", custom_properties={"template_set_id": "ts_a"})
    store.seed("co_1", type="checkout_instance", custom_properties={"template_set_id": "ts_c"})

    context = TemplateSetContext(product_id="prod_1", checkout_instance_id="co_1")
    resolved = await resolver.resolve_template_set("org_1", context)
    assert (resolved.set_id, resolved.source) == ("ts_a", "product")

    resolved = await resolver.resolve_template_set("org_1", TemplateSetContext())
    assert (resolved.set_id, resolved.source) == ("ts_b", "organization")


async def test_checkout_then_domain_levels(store, resolver) -> None:
    _seed_set(store, "ts_checkout")
    _seed_set(store, "ts_domain")
    store.seed("co_1", type="checkout_instance", custom_properties={"template_set_id": "ts_checkout"})
    store.seed("dom_1", type="domain_config", custom_properties={"template_set_id": "ts_domain"})

    both = TemplateSetContext(checkout_instance_id="co_1", domain_config_id="dom_1")
    assert (await resolver.resolve_template_set("org_1", both)).source == "checkout"
    domain_only = TemplateSetContext(domain_config_id="dom_1")
    assert (await resolver.resolve_template_set("org_1", domain_only)).set_id == "ts_domain"


async def test_deleted_manual_set_falls_through(store, resolver) -> None:
    _seed_set(store, "ts_gone", status="deleted")
    _seed_set(store, "ts_org")
    resolved = await resolver.resolve_template_set(
        "org_1", TemplateSetContext(manual_set_id="ts_gone")
    )
    assert (resolved.set_id, resolved.source) == ("ts_org", "organization")


async def test_override_pointing_at_non_template_set_falls_through(store, resolver) -> None:
    store.seed("not_a_set", type="template")
    store.seed("prod_1", type="product", custom_properties={"template_set_id": "not_a_set"})
    store.seed("prod_2", type="form", custom_properties={"template_set_id": "ts_org"})
    _seed_set(store, "ts_org")

    resolved = await resolver.resolve_template_set("org_1", TemplateSetContext(product_id="prod_1"))
    assert resolved.source == "organization"
    # Object of the wrong kind is not consulted as a product override
    resolved = await resolver.resolve_template_set("org_1", TemplateSetContext(product_id="prod_2"))
    assert resolved.source == "organization"


async def test_org_level_without_default_takes_first_created(store, resolver) -> None:
    _seed_set(store, "ts_first")
    _seed_set(store, "ts_second")
    resolved = await resolver.resolve_template_set("org_1")
    assert resolved.set_id == "ts_first"


async def test_system_fallback_prefers_system_default(store, resolver) -> None:
    _seed_set(store, "sys_plain", organization_id="org_system")
    _seed_set(store, "sys_default", organization_id="org_system", is_default=True)
    _seed_set(store, "sys_system_default", organization_id="org_system", is_system_default=True)
    _seed_set(store, "ts_deleted", status="deleted")

    resolved = await resolver.resolve_template_set("org_1")
    assert (resolved.set_id, resolved.source) == ("sys_system_default", "system")


async def test_nothing_resolves_raises_configuration_error(store, resolver) -> None:
    with pytest.raises(TemplateSetConfigurationException) as exc_info:
        await resolver.resolve_template_set("org_1")
    assert exc_info.value.details == {"organization_id": "org_1"}


async def test_resolution_is_deterministic(store, resolver) -> None:
    _seed_set(store, "ts_a")
    _seed_set(store, "ts_b")
    first = await resolver.resolve_template_set("org_1")
    second = await resolver.resolve_template_set("org_1")
    assert first == second


async def test_individual_template_from_flexible_set(store, resolver) -> None:
    """A 2.0 set holding only an 'event' template answers ticket and email lookups."""
    _seed_set(
        store,
        "ts_event",
        is_default=True,
        templates=[{"template_id": "tpl_event", "template_type": "event"}],
    )
    assert await resolver.resolve_individual_template("org_1", "event") == "tpl_event"
    assert await resolver.resolve_individual_template("org_1", "ticket") == "tpl_event"
    assert await resolver.resolve_individual_template("org_1", "email") == "tpl_event"
    assert await resolver.resolve_individual_template("org_1", "invoice") is None


async def test_individual_template_from_legacy_set(store, resolver) -> None:
    _seed_set(
        store,
        "ts_legacy",
        version="1.0",
        templates=[],
        ticket_template_id="tpl_ticket",
        invoice_template_id="tpl_invoice",
        email_template_id="tpl_email",
    )
    assert await resolver.resolve_individual_template("org_1", "invoice") == "tpl_invoice"
    assert await resolver.resolve_individual_template("org_1", "certificate") is None


async def test_individual_template_propagates_configuration_error(resolver) -> None:
    with pytest.raises(TemplateSetConfigurationException):
        await resolver.resolve_individual_template("org_1", "ticket")
