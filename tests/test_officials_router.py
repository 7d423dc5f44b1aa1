"""Tests for officials CRUD endpoints (repository patched)."""

from officials import repository

OFFICIAL = {
    "person_id": 5,
    "full_name": "Jane Roe",
    "district_number": 12,
    "party_affiliation": "Democratic",
    "position_type": "alderman",
    "email": "ward12@example.org",
    "image_url": None,
}


def test_list_officials(client, patch_async):
    patch_async(repository, "list_officials", [OFFICIAL])

    resp = client.get("/api/v1/officials")

    assert resp.status_code == 200
    assert resp.json() == [OFFICIAL]


def test_get_official(client, patch_async):
    calls = []
    patch_async(repository, "get_official", OFFICIAL, calls)

    resp = client.get("/api/v1/officials/5")

    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Jane Roe"
    assert calls == [((5,), {})]


def test_get_official_not_found(client, patch_async):
    patch_async(repository, "get_official", None)

    resp = client.get("/api/v1/officials/99")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Official not found"


def test_officials_by_party(client, patch_async):
    calls = []
    patch_async(repository, "list_officials_by_party", [OFFICIAL], calls)

    resp = client.get("/api/v1/officials/party/Democratic")

    assert resp.status_code == 200
    assert calls == [(("Democratic",), {})]


def test_officials_by_ward(client, patch_async):
    calls = []
    patch_async(repository, "list_officials_by_district", [OFFICIAL], calls)

    resp = client.get("/api/v1/officials/ward/12")

    assert resp.status_code == 200
    assert calls == [((12,), {})]


def test_officials_by_ward_rejects_non_integer(client):
    assert client.get("/api/v1/officials/ward/twelve").status_code == 422


def test_create_official(client, patch_async):
    calls = []
    created = {"id": 8, "full_name": "John Doe", "email": "jd@example.org"}
    patch_async(repository, "create_person", created, calls)

    resp = client.post("/api/v1/officials", json={"full_name": "  John Doe ", "email": "jd@example.org"})

    assert resp.status_code == 201
    assert resp.json() == created
    (fields,), _ = calls[0]
    assert fields == {"full_name": "John Doe", "email": "jd@example.org"}


def test_create_official_rejects_unknown_fields(client):
    resp = client.post("/api/v1/officials", json={"full_name": "John Doe", "ward": 3})
    assert resp.status_code == 422


def test_create_official_rejects_blank_name(client):
    resp = client.post("/api/v1/officials", json={"full_name": "   "})
    assert resp.status_code == 400


def test_update_official_only_sends_set_fields(client, patch_async):
    calls = []
    patch_async(repository, "update_person", {"id": 5, "email": "new@example.org"}, calls)

    resp = client.put("/api/v1/officials/5", json={"email": "new@example.org"})

    assert resp.status_code == 200
    assert calls == [((5, {"email": "new@example.org"}), {})]


def test_update_official_not_found(client, patch_async):
    patch_async(repository, "update_person", None)

    resp = client.put("/api/v1/officials/5", json={"email": "new@example.org"})

    assert resp.status_code == 404


def test_delete_official(client, patch_async):
    patch_async(repository, "delete_person", True)

    resp = client.delete("/api/v1/officials/5")

    assert resp.status_code == 204
    assert resp.content == b""


def test_delete_official_not_found(client, patch_async):
    patch_async(repository, "delete_person", False)

    assert client.delete("/api/v1/officials/5").status_code == 404


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.json()["status"] == "healthy"
