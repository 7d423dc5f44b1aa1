"""
Legistar payload -> database row mapping.

Legistar ids are stored as text in `matters`, `votes`, `events` and
`event_items` (the tables key on them), and as integers elsewhere.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Mapping

_WARD_RE = re.compile(r"[Ww]ard\s*0*(\d+)")

COUNCIL_BODY_NAME = "City Council"


def parse_api_date(value: Any) -> datetime | None:
    """
    Parse "2024-01-15T00:00:00" (Legistar) or RFC 3339 into an aware datetime.

    Naive values are taken as UTC. Unparsable or empty values return None.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_api_day(value: Any) -> date | None:
    parsed = parse_api_date(value)
    return parsed.date() if parsed is not None else None


def _id_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def legistar_int(value: Any) -> int | None:
    """Legistar ids arrive as ints, or as text from `external_ids->>'legistar_id'`."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def truncate(text: str | None, max_chars: int) -> str:
    text = text or ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def body_row(body: dict[str, Any]) -> dict[str, Any]:
    return {
        "body_id": body.get("BodyId"),
        "body_name": body.get("BodyName"),
        "body_type_id": body.get("BodyTypeId"),
        "body_type_name": body.get("BodyTypeName"),
        "body_meet_flag": body.get("BodyMeetFlag"),
    }


def matter_row(matter: dict[str, Any]) -> dict[str, Any]:
    version = matter.get("MatterVersion")
    return {
        "matter_id": _id_text(matter.get("MatterId")),
        "matter_file": matter.get("MatterFile"),
        "matter_name": matter.get("MatterName"),
        "matter_title": matter.get("MatterTitle"),
        "matter_type_id": matter.get("MatterTypeId"),
        "matter_type_name": matter.get("MatterTypeName"),
        "matter_status_id": matter.get("MatterStatusId"),
        "matter_status_name": matter.get("MatterStatusName"),
        "matter_intro_date": parse_api_date(matter.get("MatterIntroDate")),
        "matter_agenda_date": parse_api_date(matter.get("MatterAgendaDate")),
        "matter_passed_date": parse_api_date(matter.get("MatterPassedDate")),
        "matter_enactment_date": parse_api_date(matter.get("MatterEnactmentDate")),
        "matter_enactment_number": matter.get("MatterEnactmentNumber"),
        "matter_requester": matter.get("MatterRequester"),
        "matter_sponsors": matter.get("MatterSponsors") or [],
        "matter_attachments": matter.get("MatterAttachments") or [],
        "matter_text": matter.get("MatterText"),
        "matter_version": str(version) if version is not None else None,
    }


def vote_row(
    vote: dict[str, Any],
    *,
    matter_id: Any = None,
    person_ids: Mapping[int, int] | None = None,
) -> dict[str, Any]:
    """
    `person_ids` maps Legistar person ids to `people.id`. `votes.person_id`
    holds the `people.id`; voters with no people row get NULL and keep their name.
    """
    return {
        "vote_id": _id_text(vote.get("VoteId")),
        "matter_id": _id_text(vote.get("VoteMatterId") or matter_id),
        "person_id": (person_ids or {}).get(legistar_int(vote.get("VotePersonId"))),
        "person_name": vote.get("VotePersonName"),
        "vote_value": vote.get("VoteValueName"),
        "vote_date": parse_api_date(vote.get("VoteDate")),
        "vote_event_id": vote.get("VoteEventId"),
    }


def event_row(event: dict[str, Any]) -> dict[str, Any]:
    return {
        "event_id": _id_text(event.get("EventId")),
        "event_body_id": event.get("EventBodyId"),
        "event_body_name": event.get("EventBodyName"),
        "event_date": parse_api_date(event.get("EventDate")),
        "event_time": event.get("EventTime"),
        "event_location": event.get("EventLocation"),
        "event_agenda_file": event.get("EventAgendaFile"),
        "event_minutes_file": event.get("EventMinutesFile"),
        "event_video_url": event.get("EventVideoUrl"),
        "event_items": event.get("EventItems") or [],
    }


def event_item_row(item: dict[str, Any], *, event_id: Any) -> dict[str, Any]:
    return {
        "event_item_id": _id_text(item.get("EventItemId")),
        "event_id": _id_text(event_id),
        "matter_id": _id_text(item.get("EventItemMatterId")),
        "item_agenda_sequence": item.get("EventItemAgendaSequence"),
        "item_agenda_number": item.get("EventItemAgendaNumber"),
        "item_action": item.get("EventItemAction"),
        "item_action_text": item.get("EventItemActionText"),
    }


def is_current_council_record(record: dict[str, Any], *, now: datetime | None = None) -> bool:
    """
    A City Council office record with no end date, or an end date in the future.
    """
    if record.get("OfficeRecordBodyName") != COUNCIL_BODY_NAME:
        return False
    raw_end = record.get("OfficeRecordEndDate")
    if not raw_end:
        return True
    end = parse_api_date(raw_end)
    if end is None:
        return False
    return end > (now or datetime.now(timezone.utc))


def extract_ward(record: dict[str, Any]) -> int:
    """
    Ward number from the office email ("Ward01@...") or extra text; 0 when absent.
    """
    for key in ("OfficeRecordEmail", "OfficeRecordExtraText"):
        match = _WARD_RE.search(str(record.get(key) or ""))
        if match:
            return int(match.group(1))
    return 0


def position_type(record: dict[str, Any], ward: int) -> str:
    title = str(record.get("OfficeRecordTitle") or "").lower()
    for keyword in ("mayor", "clerk", "treasurer"):
        if keyword in title:
            return keyword
    if ward > 0:
        return "alderman"
    return "other"
