"""
User API tests - REST contract: status codes, envelopes, camelCase fields.
"""

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, payload: dict) -> dict:
    response = await client.post("/api/v1/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_list_users_empty(client: AsyncClient):
    response = await client.get("/api/v1/users")
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "count": 0,
        "total": 0,
        "totalPages": 0,
        "currentPage": 1,
        "data": [],
    }


@pytest.mark.asyncio
async def test_create_user_returns_camel_case_record(client: AsyncClient, make_payload):
    payload = make_payload(1)
    del payload["countryCode"]
    response = await client.post("/api/v1/users", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["id"] == "1"
    assert data["countryCode"] == "+1"
    assert {"createdAt", "updatedAt"} <= data.keys()
    assert "country_code" not in data


@pytest.mark.asyncio
async def test_create_user_reports_all_field_errors(client: AsyncClient):
    response = await client.post("/api/v1/users", json={"email": "not-an-email", "hobbies": []})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation Error"
    fields = [e["field"] for e in body["errors"]]
    assert fields == ["name", "email", "phone", "place", "gender", "hobbies"]


@pytest.mark.asyncio
async def test_duplicate_email_returns_conflict(client: AsyncClient, make_payload):
    await _create(client, make_payload(1))
    response = await client.post("/api/v1/users", json=make_payload(2, email="user1@example.com"))
    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "Email is already in use",
        "field": "email",
    }


@pytest.mark.asyncio
async def test_list_with_filters_sort_and_repeated_hobbies(client: AsyncClient, make_payload):
    await _create(client, make_payload(1, hobbies=["coding"]))
    await _create(client, make_payload(2, hobbies=["chess"]))
    await _create(client, make_payload(3, hobbies=["golf"]))

    response = await client.get(
        "/api/v1/users",
        params=[("hobbies", "coding"), ("hobbies", "chess"), ("sort", "name:desc"), ("limit", "1")],
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["count"], body["total"], body["totalPages"]) == (1, 2, 2)
    assert body["data"][0]["name"] == "User 02"

    response = await client.get("/api/v1/users", params={"countryCode": "+1", "search": "USER3"})
    assert [u["email"] for u in response.json()["data"]] == ["user3@example.com"]


@pytest.mark.asyncio
async def test_get_update_delete_round_trip(client: AsyncClient, make_payload):
    created = await _create(client, make_payload(1))
    user_url = f"/api/v1/users/{created['id']}"

    response = await client.get(user_url)
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": created}

    response = await client.put(user_url, json=make_payload(1, place="Porto"))
    assert response.status_code == 200
    assert response.json()["data"]["place"] == "Porto"
    assert response.json()["data"]["createdAt"] == created["createdAt"]

    response = await client.delete(user_url)
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {}}

    response = await client.delete(user_url)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient):
    response = await client.get("/api/v1/users/42")
    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_update_without_country_code_is_rejected(client: AsyncClient, make_payload):
    created = await _create(client, make_payload(1))
    payload = make_payload(1)
    del payload["countryCode"]
    response = await client.put(f"/api/v1/users/{created['id']}", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "countryCode", "message": "Country code is required"}
    ]


@pytest.mark.asyncio
async def test_reset_clears_in_memory_store(client: AsyncClient, make_payload):
    await _create(client, make_payload(1))
    response = await client.post("/api/v1/users/reset-db")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert (await client.get("/api/v1/users")).json()["total"] == 0


@pytest.mark.asyncio
async def test_reset_unavailable_on_durable_store(durable_client: AsyncClient, make_payload):
    await _create(durable_client, make_payload(1))
    response = await durable_client.post("/api/v1/users/reset-db")
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert (await durable_client.get("/api/v1/users")).json()["total"] == 1


@pytest.mark.asyncio
async def test_page_far_past_the_end_on_durable_store(durable_client: AsyncClient, make_payload):
    await _create(durable_client, make_payload(1))
    response = await durable_client.get("/api/v1/users", params={"page": str(10**19), "limit": "10"})
    assert response.status_code == 200
    body = response.json()
    assert (body["success"], body["count"], body["total"], body["data"]) == (True, 0, 1, [])


@pytest.mark.asyncio
async def test_write_metrics_are_exposed(client: AsyncClient, make_payload):
    await _create(client, make_payload(1))
    response = await client.get("/metrics/")
    assert response.status_code == 200
    assert "user_directory_writes_total" in response.text
