"""
Official metrics: calculation from stored votes/matters, and API reads.

Flow of `calculate_all` (used by `sync.metrics`):
1) Load current officials, vote tallies, vote-event attendance and matter sponsors
2) Compute one `OfficialMetrics` per official (pure functions below)
3) Upsert into `person_metrics`
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable

from fastapi import HTTPException, status

from core import db, settings
from officials import repository as officials_repository

from . import repository

logger = logging.getLogger(__name__)

DEFAULT_TERM_START = "2023-05-15"

YEA_VALUES = {"yea", "yes", "aye"}
NAY_VALUES = {"nay", "no"}
PRESENT_VALUES = {"present", "abstain"}
ABSENT_VALUES = {"absent", "excused"}

# Transparency score weights (0-100 scale).
PARTICIPATION_WEIGHT = 0.4
ATTENDANCE_WEIGHT = 0.3
POINTS_PER_BILL = 2.0
MAX_BILL_POINTS = 20.0
ENGAGEMENT_BASELINE = 10.0


def term_start() -> date:
    raw = settings.env_str("METRICS_TERM_START", DEFAULT_TERM_START)
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return date.fromisoformat(DEFAULT_TERM_START)


@dataclass(frozen=True)
class VoteTally:
    total_votes_cast: int = 0
    votes_yea: int = 0
    votes_nay: int = 0
    votes_present: int = 0
    votes_absent: int = 0


@dataclass(frozen=True)
class OfficialMetrics:
    bills_introduced_total: int
    bills_introduced_current_term: int
    bills_passed_total: int
    bills_passed_current_term: int
    total_votes_cast: int
    votes_yea: int
    votes_nay: int
    votes_present: int
    votes_absent: int
    voting_participation_rate: float
    committee_attendance_rate: float
    transparency_score: float


def tally_votes(value_counts: dict[str, int]) -> VoteTally:
    """
    Bucket raw vote-value counts. Unknown values count as cast but in no bucket.
    """
    yea = nay = present = absent = cast = 0
    for value, n in value_counts.items():
        token = (value or "").strip().lower()
        if token in ABSENT_VALUES:
            absent += n
            continue
        cast += n
        if token in YEA_VALUES:
            yea += n
        elif token in NAY_VALUES:
            nay += n
        elif token in PRESENT_VALUES:
            present += n
    return VoteTally(
        total_votes_cast=cast,
        votes_yea=yea,
        votes_nay=nay,
        votes_present=present,
        votes_absent=absent,
    )


def _sponsor_names(raw: Any) -> list[str]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []

    names: list[str] = []
    for item in raw:
        if isinstance(item, dict):
            name = item.get("MatterSponsorName") or item.get("name")
        else:
            name = item
        if isinstance(name, str) and name.strip():
            names.append(name.strip().lower())
    return names


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def count_sponsored(
    matters: Iterable[dict[str, Any]],
    official_name: str,
    *,
    since: date,
) -> tuple[int, int, int, int]:
    """
    Return (introduced_total, introduced_since, passed_total, passed_since) for
    matters listing `official_name` among their sponsors.
    """
    needle = (official_name or "").strip().lower()
    if not needle:
        return 0, 0, 0, 0

    introduced = introduced_since = passed = passed_since = 0
    for matter in matters:
        if not any(needle in name for name in _sponsor_names(matter.get("matter_sponsors"))):
            continue
        intro = _as_date(matter.get("matter_intro_date"))
        introduced += 1
        if intro is not None and intro >= since:
            introduced_since += 1
        passed_on = _as_date(matter.get("matter_passed_date"))
        if passed_on is not None:
            passed += 1
            if passed_on >= since:
                passed_since += 1
    return introduced, introduced_since, passed, passed_since


def rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return min(100.0, 100.0 * part / whole)


def transparency_score(*, participation_rate: float, attendance_rate: float, bills_current_term: int) -> float:
    bill_points = min(MAX_BILL_POINTS, bills_current_term * POINTS_PER_BILL)
    score = (
        participation_rate * PARTICIPATION_WEIGHT
        + attendance_rate * ATTENDANCE_WEIGHT
        + bill_points
        + ENGAGEMENT_BASELINE
    )
    return round(min(100.0, score), 1)


def build_metrics(
    *,
    official_name: str,
    value_counts: dict[str, int],
    events_attended: int,
    events_total: int,
    most_votes_cast: int,
    matters: list[dict[str, Any]],
    since: date,
) -> OfficialMetrics:
    tally = tally_votes(value_counts)
    introduced, introduced_since, passed, passed_since = count_sponsored(matters, official_name, since=since)
    participation = rate(tally.total_votes_cast, most_votes_cast)
    attendance = rate(events_attended, events_total)
    return OfficialMetrics(
        bills_introduced_total=introduced,
        bills_introduced_current_term=introduced_since,
        bills_passed_total=passed,
        bills_passed_current_term=passed_since,
        total_votes_cast=tally.total_votes_cast,
        votes_yea=tally.votes_yea,
        votes_nay=tally.votes_nay,
        votes_present=tally.votes_present,
        votes_absent=tally.votes_absent,
        voting_participation_rate=round(participation, 1),
        committee_attendance_rate=round(attendance, 1),
        transparency_score=transparency_score(
            participation_rate=participation,
            attendance_rate=attendance,
            bills_current_term=introduced_since,
        ),
    )


async def calculate_all() -> dict[str, int]:
    """
    Recompute and store metrics for every current official.
    """
    officials = await officials_repository.list_officials()
    value_rows = await repository.vote_value_counts()
    event_rows = await repository.vote_event_counts()
    events_total = await repository.total_vote_events()
    matters = await repository.list_matter_sponsorships()
    since = term_start()

    counts_by_person: dict[int, dict[str, int]] = defaultdict(dict)
    for row in value_rows:
        counts_by_person[int(row["person_id"])][str(row["vote_value"] or "")] = int(row["n"])
    attended_by_person = {int(row["person_id"]): int(row["events_attended"]) for row in event_rows}
    most_votes_cast = max(
        (tally_votes(counts).total_votes_cast for counts in counts_by_person.values()),
        default=0,
    )

    logger.info(
        "metrics_start officials=%s matters=%s vote_events=%s",
        len(officials),
        len(matters),
        events_total,
    )

    saved = failed = 0
    calculated_at = datetime.now(timezone.utc)
    for official in officials:
        person_id = int(official["person_id"])
        metrics = build_metrics(
            official_name=str(official.get("full_name") or ""),
            value_counts=counts_by_person.get(person_id, {}),
            events_attended=attended_by_person.get(person_id, 0),
            events_total=events_total,
            most_votes_cast=most_votes_cast,
            matters=matters,
            since=since,
        )
        try:
            await repository.upsert_person_metrics(person_id, asdict(metrics), calculated_at=calculated_at)
        except db.StoreError:
            logger.exception("metrics_save_failed person_id=%s", person_id)
            failed += 1
            continue
        logger.info(
            "metrics_saved person_id=%s votes=%s transparency=%s",
            person_id,
            metrics.total_votes_cast,
            metrics.transparency_score,
        )
        saved += 1

    return {"officials": len(officials), "saved": saved, "failed": failed}


async def official_metrics(person_id: int) -> dict:
    row = await repository.get_person_metrics(person_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics not found")
    return row


async def ward_metrics(ward: int) -> dict:
    row = await repository.get_ward_metrics(ward)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ward metrics not found")
    return row


async def ward_statistics(ward: int) -> dict:
    rows = await officials_repository.list_officials_by_district(ward)
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ward statistics not found")
    return rows[0]
