from __future__ import annotations

from typing import Sequence

from scorekeeper.engine.scoring import (
    best_round_haul,
    current_win_streak,
    rounds_fully_scored,
    rounds_won,
    standings,
    totals_by_player,
)
from scorekeeper.engine.state import GameState

EMPTY_STATS_MESSAGE = "Add players and rounds to see live stats."


def _who(names: Sequence[str]) -> tuple[str, str]:
    return ", ".join(names), ("has" if len(names) == 1 else "have")


def live_stats(state: GameState) -> list[str]:
    """Rotating scoreboard callouts built on top of the scoring functions."""
    stats: list[str] = []
    if not state.players:
        return stats

    stats.append(f"Rounds scored: {rounds_fully_scored(state)}/{len(state.rounds)}.")

    wins = {p.id: rounds_won(state, p.id) for p in state.players}

    no_wins = [p.name for p in state.players if wins[p.id] == 0]
    if no_wins:
        who, verb = _who(no_wins)
        stats.append(f"{who} {verb} not won a round yet.")

    streaks = {p.id: current_win_streak(state, p.id) for p in state.players}
    best_streak = max(streaks.values())
    if best_streak > 0:
        who, verb = _who([p.name for p in state.players if streaks[p.id] == best_streak])
        stats.append(f"{who} {verb} a {best_streak}-round winning streak.")

    ranked = standings(state)
    if len(ranked) >= 2:
        (leader, lead_pts), (runner_up, runner_pts) = ranked[0], ranked[1]
        stats.append(f"{leader.name} leads {runner_up.name} by {abs(lead_pts - runner_pts)} pts.")
    else:
        stats.append(f"{ranked[0][0].name} is in the lead.")

    most_wins = max(wins.values())
    if most_wins > 0:
        who, verb = _who([p.name for p in state.players if wins[p.id] == most_wins])
        stats.append(f"{who} {verb} the most exact bids: {most_wins}.")

    haul = best_round_haul(state)
    if haul is not None:
        stats.append(
            f"Best single round: {haul.player.name} scored {haul.points} pts "
            f"in round {haul.round.index}."
        )

    target = state.settings.target_points
    totals = totals_by_player(state)
    reached = [p.name for p in state.players if target > 0 and totals[p.id] >= target]
    if reached:
        who, verb = _who(reached)
        stats.append(f"{who} {verb} reached {target} pts.")

    return stats


def stat_message(stats: Sequence[str], index: int) -> str:
    if not stats:
        return EMPTY_STATS_MESSAGE
    return stats[index % len(stats)]
