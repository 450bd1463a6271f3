from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from scorekeeper.engine.state import Player, Round


@dataclass
class LastBidderRule:
    round_id: str
    cards: int
    missing_ids: list[str]
    entered_total: int
    # cards - entered_total; only meaningful with exactly one missing bidder
    remainder: int

    @property
    def last_bidder_id(self) -> str | None:
        if len(self.missing_ids) != 1:
            return None
        return self.missing_ids[0]

    @property
    def forbidden_bid(self) -> int | None:
        if self.last_bidder_id is None:
            return None
        # entered bids already exceed the cards dealt
        if self.remainder < 0:
            return None
        return self.remainder


def compute_last_bidder_rule(rnd: Round, players: Sequence[Player]) -> LastBidderRule:
    missing = [p.id for p in players if p.id not in rnd.bids]
    entered = sum(rnd.bids[p.id] for p in players if p.id in rnd.bids)
    return LastBidderRule(
        round_id=rnd.id,
        cards=rnd.cards,
        missing_ids=missing,
        entered_total=entered,
        remainder=rnd.cards - entered,
    )


def forbidden_bid(rnd: Round, players: Sequence[Player]) -> int | None:
    return compute_last_bidder_rule(rnd, players).forbidden_bid


def is_legal_bid(
    rnd: Round, players: Sequence[Player], player_id: str, value: int
) -> bool:
    """
    The proposing player's own current bid is set aside first, so editing a
    bid after everyone else has bid is judged as the last bid.
    """
    if value < 0:
        return False
    others = [p for p in players if p.id != player_id]
    if any(p.id not in rnd.bids for p in others):
        return True
    entered = sum(rnd.bids[p.id] for p in others)
    return value != rnd.cards - entered


def bids_total(rnd: Round, players: Sequence[Player]) -> int:
    return sum(rnd.bids.get(p.id, 0) for p in players)


def can_lock(rnd: Round, players: Sequence[Player]) -> bool:
    if not players:
        return False
    if any(p.id not in rnd.bids for p in players):
        return False
    return bids_total(rnd, players) != rnd.cards
