"""Template set API tests."""

from httpx import AsyncClient

ADMIN = {"X-Session-ID": "sess_admin"}
VIEWER = {"X-Session-ID": "sess_viewer"}
ORG = {"organization_id": "org_1"}


async def test_create_list_and_resolve(client: AsyncClient, store) -> None:
    store.seed("tpl_ticket", type="template", organization_id="org_1")
    store.seed("tpl_event", type="template", organization_id="org_1")

    response = await client.post(
        "/api/v1/template-sets",
        params=ORG,
        json={
            "name": "Summit",
            "templates": [{"template_id": "tpl_event", "template_type": "event"}],
            "is_default": True,
        },
        headers=ADMIN,
    )
    assert response.status_code == 201
    set_id = response.json()["set_id"]
    assert response.json()["version"] == "2.0"

    listed = await client.get("/api/v1/template-sets", params=ORG, headers=VIEWER)
    assert [s["id"] for s in listed.json()] == [set_id]

    resolved = await client.post("/api/v1/template-sets/resolve", params=ORG, headers=VIEWER)
    assert resolved.status_code == 200
    assert resolved.json()["source"] == "organization"
    assert resolved.json()["templates"]["ticket"] == "tpl_event"

    one = await client.post("/api/v1/template-sets/resolve/email", params=ORG, headers=VIEWER)
    assert one.json() == {"template_type": "email", "template_id": "tpl_event"}


async def test_resolve_with_manual_override(client: AsyncClient, store) -> None:
    for set_id in ("ts_org", "ts_manual"):
        store.seed(
            set_id,
            organization_id="org_1",
            type="template_set",
            name=set_id,
            status="active",
            custom_properties={"version": "2.0", "templates": []},
        )
    response = await client.post(
        "/api/v1/template-sets/resolve",
        params=ORG,
        json={"manual_set_id": "ts_manual"},
        headers=VIEWER,
    )
    assert (response.json()["set_id"], response.json()["source"]) == ("ts_manual", "manual")


async def test_unconfigured_organization_is_409(client: AsyncClient) -> None:
    response = await client.post("/api/v1/template-sets/resolve", params=ORG, headers=VIEWER)
    assert response.status_code == 409
    assert response.json()["error"] == "TEMPLATE_SET_NOT_CONFIGURED"


async def test_invalid_template_reference_is_400(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/template-sets",
        params=ORG,
        json={"name": "Bad", "templates": [{"template_id": "nope", "template_type": "ticket"}]},
        headers=ADMIN,
    )
    assert response.status_code == 400


async def test_default_and_delete(client: AsyncClient, store) -> None:
    store.seed(
        "ts_1",
        organization_id="org_1",
        type="template_set",
        name="One",
        status="active",
        custom_properties={"version": "2.0", "templates": []},
    )
    assert (await client.post("/api/v1/template-sets/ts_1/default", headers=ADMIN)).status_code == 204
    assert store.docs["ts_1"]["custom_properties"]["is_default"] is True

    assert (await client.delete("/api/v1/template-sets/ts_1", headers=VIEWER)).status_code == 403
    assert (await client.delete("/api/v1/template-sets/ts_1", headers=ADMIN)).status_code == 204
    assert store.docs["ts_1"]["status"] == "deleted"


def _seed_set(store, set_id, organization_id="org_1", **props):
    store.seed(
        set_id,
        organization_id=organization_id,
        type="template_set",
        name="One",
        status="active",
        custom_properties={"version": "2.0", "templates": [], **props},
    )


async def test_get_and_update_template_set(client: AsyncClient, store) -> None:
    store.seed("tpl_invoice", type="template", organization_id="org_1")
    _seed_set(
        store,
        "ts_1",
        templates=[{"template_id": "tpl_event", "template_type": "event", "display_order": 1}],
    )

    response = await client.get("/api/v1/template-sets/ts_1", headers=VIEWER)
    assert response.status_code == 200
    assert response.json()["templates"] == {"ticket": "tpl_event", "email": "tpl_event"}

    response = await client.patch(
        "/api/v1/template-sets/ts_1",
        json={"name": "Renamed", "invoice_template_id": "tpl_invoice"},
        headers=ADMIN,
    )
    assert response.status_code == 204
    assert store.docs["ts_1"]["name"] == "Renamed"

    detail = (await client.get("/api/v1/template-sets/ts_1", headers=VIEWER)).json()
    assert detail["templates"]["invoice"] == "tpl_invoice"

    assert (await client.get("/api/v1/template-sets/nope", headers=VIEWER)).status_code == 404


async def test_edit_set_membership(client: AsyncClient, store) -> None:
    for template_id in ("tpl_ticket", "tpl_badge"):
        store.seed(template_id, type="template", organization_id="org_1")
    _seed_set(store, "ts_1")

    response = await client.post(
        "/api/v1/template-sets/ts_1/templates",
        json={"templates": [{"template_id": "tpl_ticket", "template_type": "ticket"},
                            {"template_id": "tpl_badge", "template_type": "badge"}]},
        headers=ADMIN,
    )
    assert response.status_code == 200
    assert response.json() == {"added_count": 2}

    duplicate = await client.post(
        "/api/v1/template-sets/ts_1/templates",
        json={"templates": [{"template_id": "tpl_ticket", "template_type": "ticket"}]},
        headers=ADMIN,
    )
    assert duplicate.status_code == 400

    response = await client.patch(
        "/api/v1/template-sets/ts_1/templates/tpl_badge",
        json={"is_required": False},
        headers=ADMIN,
    )
    assert response.status_code == 204
    assert store.docs["ts_1"]["custom_properties"]["templates"][1]["is_required"] is False

    response = await client.delete("/api/v1/template-sets/ts_1/templates/tpl_ticket", headers=ADMIN)
    assert response.status_code == 204
    remaining = store.docs["ts_1"]["custom_properties"]["templates"]
    assert [t["template_id"] for t in remaining] == ["tpl_badge"]

    missing = await client.patch(
        "/api/v1/template-sets/ts_1/templates/tpl_ticket", json={"display_order": 2}, headers=ADMIN
    )
    assert missing.status_code == 404


async def test_copy_template_set(client: AsyncClient, store) -> None:
    store.seed("tpl_ticket", type="template", organization_id="org_system")
    _seed_set(
        store,
        "sys_default",
        organization_id="org_system",
        templates=[{"template_id": "tpl_ticket", "template_type": "ticket", "display_order": 1}],
    )

    forbidden = await client.post(
        "/api/v1/template-sets/sys_default/copy", params=ORG, headers=VIEWER
    )
    assert forbidden.status_code == 403

    response = await client.post(
        "/api/v1/template-sets/sys_default/copy",
        params=ORG,
        json={"name": "Ours", "set_as_default": True},
        headers=ADMIN,
    )
    assert response.status_code == 201
    body = response.json()
    assert (body["version"], body["template_count"]) == ("2.0", 1)
    copy = store.docs[body["set_id"]]
    assert (copy["organization_id"], copy["name"]) == ("org_1", "Ours")
    assert copy["custom_properties"]["is_default"] is True
