from __future__ import annotations

from scorekeeper.engine.bidding_engine import can_lock, compute_last_bidder_rule
from scorekeeper.engine.scoring import round_points
from scorekeeper.engine.state import GameState, Round


def get_round_actions(state: GameState, rnd: Round) -> dict:
    if not rnd.locked:
        rule = compute_last_bidder_rule(rnd, state.players)
        return {
            "type": "BIDDING",
            "roundId": rnd.id,
            "index": rnd.index,
            "missingPlayerIds": rule.missing_ids,
            "lastBidderId": rule.last_bidder_id,
            "forbiddenBid": rule.forbidden_bid,
            "canLock": can_lock(rnd, state.players),
        }

    awaiting = [p.id for p in state.players if p.id in rnd.bids and p.id not in rnd.ok]
    return {
        "type": "RESULTS" if awaiting else "SCORED",
        "roundId": rnd.id,
        "index": rnd.index,
        "awaitingPlayerIds": awaiting,
        "points": round_points(state, rnd),
        "canUnlock": True,
    }


def get_legal_actions(state: GameState) -> list[dict]:
    return [get_round_actions(state, r) for r in state.rounds]
