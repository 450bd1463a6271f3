from __future__ import annotations

from dataclasses import dataclass

from scorekeeper.engine.state import GameState, Player, Round

EXACT_BID_BONUS = 10


def points_for(bid: int | None, ok: bool | None) -> int:
    """
    TEN_PLUS_BID: an exact bid scores 10 + bid (a made 0-call scores 10).
    Missed or undecided rounds score nothing.
    """
    if bid is None:
        return 0
    if ok is not True:
        return 0
    return EXACT_BID_BONUS + bid


def round_points(state: GameState, rnd: Round) -> dict[str, int]:
    return {
        p.id: points_for(rnd.bids.get(p.id), rnd.ok.get(p.id)) for p in state.players
    }


def totals_by_player(state: GameState) -> dict[str, int]:
    totals = {p.id: 0 for p in state.players}
    for rnd in state.rounds:
        for pid, pts in round_points(state, rnd).items():
            totals[pid] += pts
    return totals


def rounds_won(state: GameState, player_id: str) -> int:
    return sum(1 for r in state.rounds if r.ok.get(player_id) is True)


def current_win_streak(state: GameState, player_id: str) -> int:
    # Most recent round first; a miss or an undecided round ends the streak.
    streak = 0
    for rnd in reversed(state.rounds):
        if rnd.ok.get(player_id) is not True:
            break
        streak += 1
    return streak


def rounds_fully_scored(state: GameState) -> int:
    if not state.players or not state.rounds:
        return 0
    return sum(
        1 for r in state.rounds if all(p.id in r.ok for p in state.players)
    )


def standings(state: GameState) -> list[tuple[Player, int]]:
    """Players ordered by total points; ties keep insertion order."""
    totals = totals_by_player(state)
    return sorted(
        ((p, totals[p.id]) for p in state.players),
        key=lambda item: -item[1],
    )


@dataclass(frozen=True)
class RoundHaul:
    player: Player
    round: Round
    points: int


def best_round_haul(state: GameState) -> RoundHaul | None:
    best: RoundHaul | None = None
    for rnd in state.rounds:
        for p in state.players:
            pts = points_for(rnd.bids.get(p.id), rnd.ok.get(p.id))
            if pts > 0 and (best is None or pts > best.points):
                best = RoundHaul(player=p, round=rnd, points=pts)
    return best
