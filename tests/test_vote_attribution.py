"""
Votes written by `sync.city_api` must be found by the readers that look
officials up by `people.id` (allies stores and metrics calculation).
"""

from collections import Counter

import pytest

from allies import alignment, stores
from core import db
from metrics import repository as metrics_repository
from metrics import service as metrics_service
from officials import repository as officials_repository
from sync import city_api, officials, repository
from votes import repository as votes_repository

from test_sync import FakeLegistar

RECORDS = [
    {
        "OfficeRecordPersonId": 5001,
        "OfficeRecordFullName": "Jane Roe",
        "OfficeRecordEmail": "Ward01@cityofchicago.org",
    },
    {
        "OfficeRecordPersonId": 5002,
        "OfficeRecordFullName": "John Doe",
        "OfficeRecordEmail": "Ward02@cityofchicago.org",
    },
]

# Legistar matter id -> votes (5003 never sat on the council)
MATTER_VOTES = {
    1: [
        {"VoteId": 11, "VotePersonId": 5001, "VoteValueName": "Yea", "VoteEventId": 100},
        {"VoteId": 12, "VotePersonId": 5002, "VoteValueName": "Yea", "VoteEventId": 100},
        {"VoteId": 13, "VotePersonId": 5003, "VoteValueName": "Nay", "VoteEventId": 100},
    ],
    2: [
        {"VoteId": 21, "VotePersonId": 5001, "VoteValueName": "Yea", "VoteEventId": 200},
        {"VoteId": 22, "VotePersonId": 5002, "VoteValueName": "Nay", "VoteEventId": 200},
    ],
}


@pytest.fixture
def people():
    """people rows as `sync.officials` writes them, with serial ids 1 and 2."""
    return [
        {"id": person_id, **officials.person_fields(record, None, client="chicago")}
        for person_id, record in enumerate(RECORDS, start=1)
    ]


@pytest.fixture
def synced_votes(monkeypatch, people):
    """Run the matters/votes sync and return the vote rows it upserted."""
    written = []

    async def fake_fetch_all(sql, *args):
        # external_ids->>'legistar_id' comes back as text
        return [{"id": p["id"], "legistar_id": str(p["external_ids"]["legistar_id"])} for p in people]

    async def fake_upsert(table, row):
        written.append((table, row))

    monkeypatch.setattr(db, "fetch_all", fake_fetch_all)
    monkeypatch.setattr(repository, "upsert_row", fake_upsert)

    api = FakeLegistar(
        matters=[{"MatterId": matter_id} for matter_id in MATTER_VOTES],
        matter_votes=lambda matter_id: MATTER_VOTES[matter_id],
    )

    async def _run():
        await city_api.sync_recent_matters(api, limit=10, delay_s=0)
        return [row for table, row in written if table == "votes"]

    return _run


@pytest.fixture
def current_officials(monkeypatch, people):
    rows = [
        {
            "person_id": p["id"],
            "full_name": p["full_name"],
            "district_number": p["id"],
            "party_affiliation": "Democratic",
        }
        for p in people
    ]

    async def fake_list_officials():
        return rows

    monkeypatch.setattr(officials_repository, "list_officials", fake_list_officials)
    return rows


async def test_votes_are_stored_under_people_ids(synced_votes):
    votes = await synced_votes()

    by_vote = {row["vote_id"]: row["person_id"] for row in votes}
    assert by_vote == {"11": 1, "12": 2, "13": None, "21": 1, "22": 2}


async def test_allies_store_finds_synced_votes(synced_votes, current_officials, monkeypatch):
    votes = await synced_votes()

    async def fake_vote_values(person_id):
        # WHERE person_id = $1 AND vote_value IS NOT NULL
        return [row for row in votes if row["person_id"] == person_id and row["vote_value"] is not None]

    monkeypatch.setattr(votes_repository, "list_vote_values_for_person", fake_vote_values)

    records = await stores.PostgresVoteStore().votes_by_actor(1)
    result = await alignment.voting_allies(
        1,
        vote_store=stores.PostgresVoteStore(),
        official_store=stores.PostgresOfficialStore(),
    )

    assert sorted(r.matter_id for r in records) == ["1", "2"]
    assert [(a.official_id, a.alignment) for a in result.allies] == [(2, 50.0)]


async def test_metrics_count_synced_votes(synced_votes, current_officials, monkeypatch, patch_async):
    votes = await synced_votes()
    attributed = [row for row in votes if row["person_id"] is not None]

    async def fake_value_counts():
        # GROUP BY person_id, vote_value
        counts = Counter((row["person_id"], row["vote_value"]) for row in attributed)
        return [{"person_id": pid, "vote_value": value, "n": n} for (pid, value), n in counts.items()]

    async def fake_event_counts():
        events = {}
        for row in attributed:
            events.setdefault(row["person_id"], set()).add(row["vote_event_id"])
        return [{"person_id": pid, "events_attended": len(ids)} for pid, ids in events.items()]

    saved = []
    monkeypatch.setattr(metrics_repository, "vote_value_counts", fake_value_counts)
    monkeypatch.setattr(metrics_repository, "vote_event_counts", fake_event_counts)
    patch_async(metrics_repository, "total_vote_events", len({row["vote_event_id"] for row in votes}))
    patch_async(metrics_repository, "list_matter_sponsorships", [])
    patch_async(metrics_repository, "upsert_person_metrics", None, saved)

    summary = await metrics_service.calculate_all()

    assert summary == {"officials": 2, "saved": 2, "failed": 0}
    by_person = {args[0]: args[1] for args, _ in saved}
    assert by_person[1]["total_votes_cast"] == 2
    assert by_person[1]["votes_yea"] == 2
    assert by_person[2]["votes_nay"] == 1
    assert by_person[2]["committee_attendance_rate"] == 100.0
