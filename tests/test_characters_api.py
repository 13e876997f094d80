import pytest

from tests.conftest import bearer

VALID = {"name": "Walter", "lastName": "Heisenberg"}


@pytest.fixture
def character(client, admin_token):
    resp = client.post("/characters", json=VALID, headers=bearer(admin_token))
    assert resp.status_code == 201
    return resp.get_json()["data"]


def test_user_can_create(client, user_token):
    resp = client.post("/characters", json=VALID, headers=bearer(user_token))
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["name"] == "Walter"
    assert data["lastName"] == "Heisenberg"
    assert data["id"]


def test_create_validation(client, user_token):
    resp = client.post("/characters", json={"name": "Walt", "lastName": "White"}, headers=bearer(user_token))
    assert resp.status_code == 400
    assert set(resp.get_json()["details"]) == {"name", "lastName"}


def test_list_and_get(client, user_token, character):
    resp = client.get("/characters", headers=bearer(user_token))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["meta"] == {"page": 1, "limit": 20, "total": 1}
    assert body["data"][0]["id"] == character["id"]

    resp = client.get(f"/characters/{character['id']}", headers=bearer(user_token))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Walter"


def test_get_missing(client, user_token):
    resp = client.get("/characters/does-not-exist", headers=bearer(user_token))
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Character not found"


def test_update_requires_admin(client, user_token, admin_token, character):
    path = f"/characters/{character['id']}"
    assert client.patch(path, json={"name": "Jessie"}, headers=bearer(user_token)).status_code == 403

    resp = client.patch(path, json={"name": "Jesse P."}, headers=bearer(admin_token))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Jesse P."
    assert resp.get_json()["data"]["lastName"] == "Heisenberg"


def test_update_missing(client, admin_token):
    resp = client.patch("/characters/nope", json={"name": "Saul Goodman"}, headers=bearer(admin_token))
    assert resp.status_code == 404


def test_delete_requires_admin(client, user_token, admin_token, character):
    path = f"/characters/{character['id']}"
    assert client.delete(path, headers=bearer(user_token)).status_code == 403
    assert client.delete(path, headers=bearer(admin_token)).status_code == 204
    assert client.get(path, headers=bearer(admin_token)).status_code == 404
    assert client.delete(path, headers=bearer(admin_token)).status_code == 404


def test_pagination(client, admin_token):
    for i in range(3):
        client.post("/characters", json={"name": f"Name{i}xx", "lastName": "Surname"}, headers=bearer(admin_token))
    resp = client.get("/characters?page=2&limit=2", headers=bearer(admin_token))
    body = resp.get_json()
    assert body["meta"]["total"] == 3
    assert len(body["data"]) == 1

    assert client.get("/characters?page=x", headers=bearer(admin_token)).status_code == 400


def test_characters_require_authentication(client):
    assert client.post("/characters", json=VALID).status_code == 401
    assert client.delete("/characters/anything").status_code == 401
