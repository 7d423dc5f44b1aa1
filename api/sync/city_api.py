"""
Sync bodies, persons, recent matters (with votes) and recent events (with
agenda items) from the Legistar API into Postgres.

Usage (from `api/`):
    python -m sync.city_api --matters 100 --events 50

Each step logs and continues on failure, so one bad endpoint does not stop
the rest of the sync. Row-level upsert failures are logged and skipped.

Votes are stored with `person_id` = `people.id`, matched on
`people.external_ids->>'legistar_id'`. Run `sync.officials` first; votes cast
by someone without a people row are stored with a NULL `person_id`.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from core import db, logs
from core.legistar import LegistarClient, LegistarError

from . import repository, rows

logger = logging.getLogger(__name__)

DEFAULT_MATTERS_LIMIT = 100
DEFAULT_EVENTS_LIMIT = 50
DEFAULT_DELAY_S = 0.1


async def _upsert(table: str, row: dict, *, label: str) -> bool:
    try:
        await repository.upsert_row(table, row)
    except db.StoreError as exc:
        logger.warning("upsert_failed table=%s item=%s error=%s", table, label, exc)
        return False
    return True


async def sync_bodies(api: LegistarClient) -> int:
    bodies = await api.bodies()
    logger.info("bodies_fetched count=%s", len(bodies))

    synced = 0
    for body in bodies:
        if await _upsert("bodies", rows.body_row(body), label=body.get("BodyName")):
            synced += 1
    return synced


async def sync_persons(api: LegistarClient) -> int:
    # Informational only: persons are matched to people rows by `sync.officials`.
    persons = await api.persons()
    logger.info("persons_fetched count=%s", len(persons))
    for person in persons:
        logger.debug("person name=%s legistar_id=%s", person.get("PersonFullName"), person.get("PersonId"))
    return len(persons)


async def sync_votes_for_matter(api: LegistarClient, matter_id: int, *, person_ids: dict[int, int]) -> int:
    try:
        votes = await api.matter_votes(matter_id)
    except LegistarError as exc:
        logger.warning("votes_fetch_failed matter_id=%s error=%s", matter_id, exc)
        return 0

    synced = unmatched = 0
    for vote in votes:
        row = rows.vote_row(vote, matter_id=matter_id, person_ids=person_ids)
        if row["person_id"] is None:
            unmatched += 1
        if await _upsert("votes", row, label=vote.get("VoteId")):
            synced += 1
    if votes:
        logger.info("votes_synced matter_id=%s count=%s unmatched=%s", matter_id, synced, unmatched)
    return synced


async def sync_recent_matters(api: LegistarClient, *, limit: int, delay_s: float) -> int:
    # Votes are attributed to people rows, so `sync.officials` should run first.
    person_ids = await repository.person_ids_by_legistar_id()
    logger.info("people_loaded count=%s", len(person_ids))

    matters = await api.matters(top=limit, orderby="MatterIntroDate desc")
    logger.info("matters_fetched count=%s", len(matters))

    synced = 0
    for matter in matters[:limit]:
        row = rows.matter_row(matter)
        if await _upsert("matters", row, label=row["matter_file"]):
            synced += 1
            logger.info("matter_synced file=%s title=%s", row["matter_file"], rows.truncate(row["matter_title"], 60))

        if matter.get("MatterId") is not None:
            await sync_votes_for_matter(api, int(matter["MatterId"]), person_ids=person_ids)

        await asyncio.sleep(delay_s)
    return synced


async def sync_recent_events(api: LegistarClient, *, limit: int, delay_s: float) -> int:
    events = await api.events(top=limit, orderby="EventDate desc")
    logger.info("events_fetched count=%s", len(events))

    synced = 0
    for event in events[:limit]:
        event_id = event.get("EventId")
        items = event.get("EventItems")
        if not items and event_id is not None:
            try:
                items = await api.event_items(int(event_id))
            except LegistarError as exc:
                logger.warning("event_items_fetch_failed event_id=%s error=%s", event_id, exc)
                items = []
        event = {**event, "EventItems": items or []}

        if await _upsert("events", rows.event_row(event), label=event_id):
            synced += 1
            logger.info("event_synced body=%s date=%s", event.get("EventBodyName"), (event.get("EventDate") or "")[:10])

        for item in event["EventItems"]:
            await _upsert("event_items", rows.event_item_row(item, event_id=event_id), label=item.get("EventItemId"))

        await asyncio.sleep(delay_s)
    return synced


async def run(
    *,
    matters_limit: int = DEFAULT_MATTERS_LIMIT,
    events_limit: int = DEFAULT_EVENTS_LIMIT,
    delay_s: float = DEFAULT_DELAY_S,
    client: str | None = None,
) -> dict[str, int]:
    summary: dict[str, int] = {}
    async with LegistarClient(client) as api:
        # Bodies first: events reference them.
        steps = [
            ("bodies", lambda: sync_bodies(api)),
            ("persons", lambda: sync_persons(api)),
            ("matters", lambda: sync_recent_matters(api, limit=matters_limit, delay_s=delay_s)),
            ("events", lambda: sync_recent_events(api, limit=events_limit, delay_s=delay_s)),
        ]
        for name, step in steps:
            try:
                summary[name] = await step()
            except (LegistarError, db.StoreError) as exc:
                logger.error("sync_step_failed step=%s error=%s", name, exc)
                summary[name] = 0
    return summary


async def _main(args: argparse.Namespace) -> dict[str, int]:
    await db.init_pool()
    try:
        return await run(
            matters_limit=args.matters,
            events_limit=args.events,
            delay_s=args.delay,
            client=args.client,
        )
    finally:
        await db.close_pool()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync Legistar city council data into Postgres.")
    parser.add_argument("--client", default=None, help="Legistar client name (default: $LEGISTAR_CLIENT or chicago)")
    parser.add_argument("--matters", type=int, default=DEFAULT_MATTERS_LIMIT, help="Recent matters to sync")
    parser.add_argument("--events", type=int, default=DEFAULT_EVENTS_LIMIT, help="Recent events to sync")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY_S, help="Seconds between matters/events")
    return parser


def main(argv: list[str] | None = None) -> int:
    logs.configure_logging()
    args = build_parser().parse_args(argv)
    logger.info("sync_start client=%s", args.client or "default")
    summary = asyncio.run(_main(args))
    logger.info("sync_complete %s", " ".join(f"{k}={v}" for k, v in summary.items()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
