"""
Voting alignment ("allies") calculation.

For a target official, compare their votes with every other official's votes
on the matters both of them voted on, and rank the others by the percentage of
those matters where the two cast the same vote value.

Data access is injected through the `VoteStore` / `OfficialStore` protocols so
the calculation runs against Postgres in the API and against in-memory fakes in
tests. Fetches are awaited one after another (one for the target, one per
comparison official).

Policies:
- Duplicate (official, matter) vote rows: the last row read wins, on both sides.
- A failed fetch of the target's votes or of the officials list propagates.
- A failed fetch of one comparison official's votes skips that official; the
  skip is logged and reported in `AlliesResult.skipped`.
- Ties in alignment keep the officials-list order (stable sort).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Iterable, Mapping, Protocol

from core.db import StoreError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_BLOC = "Independent"
DEFAULT_BLOC_LABELS: dict[str, str] = {"Democratic": "Progressive Caucus"}


@dataclass(frozen=True)
class VoteRecord:
    matter_id: str
    vote_value: str


@dataclass(frozen=True)
class Official:
    id: int
    name: str
    district: int | None
    party: str


@dataclass(frozen=True)
class Ally:
    official_id: int
    name: str
    ward: int | None
    party: str
    alignment: float
    bloc: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AlliesResult:
    official_id: int
    allies: list[Ally]
    skipped: list[int] = field(default_factory=list)


class VoteStore(Protocol):
    async def votes_by_actor(self, actor_id: int) -> list[VoteRecord]: ...


class OfficialStore(Protocol):
    async def all_officials(self) -> list[Official]: ...


@dataclass(frozen=True)
class BlocRules:
    """
    Party string -> bloc label, matched exactly; everything else gets `default`.
    """

    labels: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_BLOC_LABELS))
    default: str = DEFAULT_BLOC

    def label_for(self, party: str | None) -> str:
        return self.labels.get(party or "", self.default)


def vote_map(votes: Iterable[VoteRecord]) -> dict[str, str]:
    """
    matter_id -> vote_value. Rows without a recorded value are ignored.
    """
    mapping: dict[str, str] = {}
    for vote in votes:
        if not vote.matter_id or not vote.vote_value:
            continue
        mapping[vote.matter_id] = vote.vote_value
    return mapping


def alignment_between(target: Mapping[str, str], other: Mapping[str, str]) -> float | None:
    """
    Percentage of common matters with equal vote values, or None if nothing is in common.
    """
    total = 0
    matches = 0
    for matter_id, value in other.items():
        target_value = target.get(matter_id)
        if target_value is None:
            continue
        total += 1
        if target_value == value:
            matches += 1

    if total == 0:
        return None
    return 100.0 * matches / total


async def voting_allies(
    official_id: int,
    *,
    vote_store: VoteStore,
    official_store: OfficialStore,
    bloc_rules: BlocRules | None = None,
    limit: int = DEFAULT_LIMIT,
) -> AlliesResult:
    """
    Rank up to `limit` other officials by how often they voted like `official_id`.
    """
    rules = bloc_rules or BlocRules()

    target_votes = vote_map(await vote_store.votes_by_actor(official_id))
    officials = await official_store.all_officials()

    allies: list[Ally] = []
    skipped: list[int] = []
    for other in officials:
        if other.id == official_id:
            continue

        try:
            other_votes = vote_map(await vote_store.votes_by_actor(other.id))
        except StoreError:
            logger.warning(
                "allies_skip_official official_id=%s other_id=%s",
                official_id,
                other.id,
                exc_info=True,
            )
            skipped.append(other.id)
            continue

        alignment = alignment_between(target_votes, other_votes)
        if alignment is None:
            continue

        allies.append(
            Ally(
                official_id=other.id,
                name=other.name,
                ward=other.district,
                party=other.party,
                alignment=alignment,
                bloc=rules.label_for(other.party),
            )
        )

    allies.sort(key=lambda ally: ally.alignment, reverse=True)

    if skipped:
        logger.warning(
            "allies_partial official_id=%s skipped=%s ranked=%s",
            official_id,
            len(skipped),
            len(allies),
        )

    return AlliesResult(official_id=official_id, allies=allies[: max(limit, 0)], skipped=skipped)
