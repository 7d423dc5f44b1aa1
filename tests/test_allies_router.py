"""Tests for the voting-allies endpoint (stores overridden)."""

from allies import router as allies_router
from allies import stores
from allies.alignment import BlocRules, DEFAULT_BLOC_LABELS
from core.db import StoreError
from main import app

from test_alignment import FakeOfficialStore, FakeVoteStore, official


def _override(vote_store, official_store):
    app.dependency_overrides[allies_router.get_vote_store] = lambda: vote_store
    app.dependency_overrides[allies_router.get_official_store] = lambda: official_store
    app.dependency_overrides[allies_router.get_bloc_rules] = lambda: BlocRules()


def test_voting_allies_response(client):
    officials = [official(1, district=1), official(2, district=2), official(3, party="Green", district=3)]
    votes = {
        1: [("m1", "Yea"), ("m2", "Nay")],
        2: [("m1", "Yea"), ("m2", "Yea")],
        3: [("m1", "Yea"), ("m2", "Nay")],
    }
    _override(FakeVoteStore(votes), FakeOfficialStore(officials))

    resp = client.get("/api/v1/officials/1/voting-allies")

    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"official_id", "allies", "count", "skipped"}
    assert body["official_id"] == 1
    assert body["count"] == 2
    assert body["skipped"] == 0
    assert body["allies"][0] == {
        "official_id": 3,
        "name": "Official 3",
        "ward": 3,
        "party": "Green",
        "alignment": 100.0,
        "bloc": "Independent",
    }
    assert body["allies"][1]["alignment"] == 50.0


def test_voting_allies_reports_skipped_officials(client):
    officials = [official(1), official(2), official(3)]
    votes = {1: [("m1", "Yea")], 3: [("m1", "Yea")]}
    _override(FakeVoteStore(votes, failing={2}), FakeOfficialStore(officials))

    body = client.get("/api/v1/officials/1/voting-allies").json()

    assert body["skipped"] == 1
    assert [a["official_id"] for a in body["allies"]] == [3]


def test_voting_allies_target_failure_is_500(client):
    _override(FakeVoteStore({}, failing={1}), FakeOfficialStore([official(2)]))

    resp = client.get("/api/v1/officials/1/voting-allies")

    assert resp.status_code == 500
    assert "votes unavailable" in resp.json()["detail"]


def test_voting_allies_rejects_non_integer_id(client):
    assert client.get("/api/v1/officials/abc/voting-allies").status_code == 422


def test_bloc_rules_from_env(monkeypatch):
    monkeypatch.setenv("ALLIES_BLOC_LABELS", '{"Republican": "Conservative"}')
    monkeypatch.setenv("ALLIES_DEFAULT_BLOC", "Unaligned")

    rules = stores.bloc_rules()

    assert rules.label_for("Republican") == "Conservative"
    assert rules.label_for("Democratic") == "Unaligned"


def test_bloc_rules_invalid_env_falls_back(monkeypatch):
    monkeypatch.setenv("ALLIES_BLOC_LABELS", "not json")
    monkeypatch.delenv("ALLIES_DEFAULT_BLOC", raising=False)

    rules = stores.bloc_rules()

    assert dict(rules.labels) == DEFAULT_BLOC_LABELS
    assert rules.label_for(None) == "Independent"


async def test_postgres_stores_map_rows(patch_async):
    from officials import repository as officials_repository
    from votes import repository as votes_repository

    patch_async(votes_repository, "list_vote_values_for_person", [{"matter_id": 42, "vote_value": "Yea"}])
    patch_async(
        officials_repository,
        "list_officials",
        [{"person_id": 7, "full_name": "Jane Roe", "district_number": None, "party_affiliation": None}],
    )

    votes = await stores.PostgresVoteStore().votes_by_actor(7)
    officials = await stores.PostgresOfficialStore().all_officials()

    assert votes[0].matter_id == "42"
    assert officials[0].id == 7
    assert officials[0].district is None
    assert officials[0].party == ""


def test_store_error_from_repository_is_500(client, patch_async):
    from officials import repository as officials_repository

    patch_async(officials_repository, "list_officials", StoreError("connection refused"))

    resp = client.get("/api/v1/officials")

    assert resp.status_code == 500
