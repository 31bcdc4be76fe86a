"""API tests for clients: CRUD, pagination, problem details and tenant isolation."""

from uuid import uuid4

import pytest

from tourcrm.services.client_service import ClientService


async def create_client(test_client, headers, **fields):
    payload = {"name": "Mehmet Kaya", **fields}
    response = await test_client.post("/v1/clients", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_fetch_client(test_client, agent_headers):
    created = await create_client(test_client, agent_headers, email="Mehmet@Example.com", nationality="TR")

    response = await test_client.get(f"/v1/clients/{created['id']}", headers=agent_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Mehmet Kaya"
    assert data["email"] == "mehmet@example.com"
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(test_client, agent_headers):
    await create_client(test_client, agent_headers, email="dup@example.com")

    response = await test_client.post(
        "/v1/clients",
        json={"name": "Another Person", "email": "DUP@example.com"},
        headers=agent_headers,
    )

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "CLIENT_EMAIL_EXISTS"


@pytest.mark.asyncio
async def test_empty_name_is_rejected(test_client, agent_headers):
    response = await test_client.post("/v1/clients", json={"name": ""}, headers=agent_headers)

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    assert any(v["path"].endswith("name") for v in data["violations"])


@pytest.mark.asyncio
async def test_unknown_client_is_problem_details(test_client, agent_headers):
    missing = uuid4()
    response = await test_client.get(f"/v1/clients/{missing}", headers=agent_headers)

    assert response.status_code == 404
    data = response.json()
    assert data["resource_type"] == "client"
    assert data["resource_id"] == str(missing)
    assert data["instance"] == f"/v1/clients/{missing}"


@pytest.mark.asyncio
async def test_pagination_meta(test_client, agent_headers):
    for name in ("Ali Veli", "Burak Sen", "Cem Tas"):
        await create_client(test_client, agent_headers, name=name)

    first = await test_client.get("/v1/clients?page=1&limit=2", headers=agent_headers)
    second = await test_client.get("/v1/clients?page=2&limit=2", headers=agent_headers)

    assert first.json()["meta"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert len(first.json()["data"]) == 2
    assert len(second.json()["data"]) == 1


@pytest.mark.asyncio
async def test_page_size_is_capped(test_client, agent_headers):
    response = await test_client.get("/v1/clients?limit=101", headers=agent_headers)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_other_tenant_cannot_see_client(test_client, agent_headers, other_tenant_headers):
    created = await create_client(test_client, agent_headers)

    fetched = await test_client.get(f"/v1/clients/{created['id']}", headers=other_tenant_headers)
    listed = await test_client.get("/v1/clients", headers=other_tenant_headers)

    assert fetched.status_code == 404
    assert listed.json()["meta"]["total"] == 0


@pytest.mark.asyncio
async def test_delete_deactivates_client(test_client, agent_headers):
    created = await create_client(test_client, agent_headers)

    response = await test_client.delete(f"/v1/clients/{created['id']}", headers=agent_headers)
    assert response.status_code == 200

    active = await test_client.get("/v1/clients", headers=agent_headers)
    everyone = await test_client.get("/v1/clients?include_inactive=true", headers=agent_headers)
    assert active.json()["meta"]["total"] == 0
    assert everyone.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_bulk_import_dry_run(test_client, agent_headers):
    await create_client(test_client, agent_headers, email="taken@example.com")

    response = await test_client.post(
        "/v1/clients/bulk-import",
        json={
            "dry_run": True,
            "clients": [
                {"name": "New Person", "email": "new@example.com"},
                {"name": "Taken Person", "email": "taken@example.com"},
            ],
        },
        headers=agent_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"created": 1, "skipped": 1, "errors": [], "dry_run": True}
    listed = await test_client.get("/v1/clients", headers=agent_headers)
    assert listed.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_unexpected_failure_is_problem_details(test_client, agent_headers, monkeypatch):
    async def broken_create(self, tenant_id, request):
        raise RuntimeError("database went away")

    monkeypatch.setattr(ClientService, "create_client", broken_create)

    response = await test_client.post("/v1/clients", json={"name": "Mehmet Kaya"}, headers=agent_headers)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/problem+json")
    data = response.json()
    assert data["title"] == "Internal Server Error"
    assert data["error_id"]
    assert "database went away" not in response.text
