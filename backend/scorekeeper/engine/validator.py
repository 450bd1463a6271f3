from __future__ import annotations

from typing import Sequence

from scorekeeper.engine.bidding_engine import (
    bids_total,
    compute_last_bidder_rule,
    is_legal_bid,
)
from scorekeeper.engine.state import Player, Round


def validate_player_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Player name must not be empty.")
    return cleaned


def _require_player(players: Sequence[Player], player_id: str) -> None:
    if all(p.id != player_id for p in players):
        raise ValueError(f"Unknown player: {player_id}")


def validate_bid_value(
    rnd: Round, players: Sequence[Player], player_id: str, value: int | None
) -> None:
    _require_player(players, player_id)

    if rnd.locked:
        raise ValueError(f"Bids are locked for round {rnd.index}.")
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Bid must be a whole number.")
    if value < 0:
        raise ValueError("Bid must be >= 0.")
    if not is_legal_bid(rnd, players, player_id, value):
        raise ValueError(
            f"Last bidder cannot bid {value}: total bids would equal {rnd.cards} cards."
        )


def validate_lock(rnd: Round, players: Sequence[Player]) -> None:
    if not players:
        raise ValueError("Add players before locking a round.")

    rule = compute_last_bidder_rule(rnd, players)
    if rule.missing_ids:
        raise ValueError(
            f"All players must bid before locking round {rnd.index} "
            f"({len(rule.missing_ids)} missing)."
        )
    if bids_total(rnd, players) == rnd.cards:
        raise ValueError(f"Total bids cannot equal the {rnd.cards} cards dealt.")


def validate_outcome(rnd: Round, players: Sequence[Player], player_id: str) -> None:
    _require_player(players, player_id)

    if not rnd.locked:
        raise ValueError(f"Lock round {rnd.index} before recording results.")
    if player_id not in rnd.bids:
        raise ValueError(f"Player has no bid in round {rnd.index}.")
