from __future__ import annotations

from scorekeeper.engine.scoring import (
    best_round_haul,
    current_win_streak,
    points_for,
    round_points,
    rounds_fully_scored,
    rounds_won,
    standings,
    totals_by_player,
)
from scorekeeper.engine.state import GameSettings, GameState, Player, Round
from scorekeeper.engine.stats import EMPTY_STATS_MESSAGE, live_stats, stat_message

ANN = Player("a", "Ann")
BOB = Player("b", "Bob")


def _round(index: int, bids: dict, ok: dict, cards: int = 5) -> Round:
    return Round(
        id=f"r{index}",
        index=index,
        suit="Hearts",
        cards=cards,
        locked=bool(ok),
        bids=bids,
        ok=ok,
    )


def _state(rounds: list[Round], players=(ANN, BOB), target: int = 100) -> GameState:
    return GameState(
        id="g1",
        created_at=1,
        players=tuple(players),
        rounds=tuple(rounds),
        settings=GameSettings(target_points=target),
    )


def test_points_for() -> None:
    assert points_for(3, True) == 13
    assert points_for(0, True) == 10
    assert points_for(5, False) == 0
    assert points_for(None, True) == 0
    assert points_for(4, None) == 0


def test_totals_and_round_points() -> None:
    state = _state(
        [
            _round(1, {"a": 2, "b": 1}, {"a": True, "b": False}),
            _round(2, {"a": 0, "b": 3}, {"a": True, "b": True}),
            _round(3, {"a": 1, "b": 1}, {}),
        ]
    )
    assert round_points(state, state.rounds[0]) == {"a": 12, "b": 0}
    assert totals_by_player(state) == {"a": 22, "b": 13}
    assert [(p.name, pts) for p, pts in standings(state)] == [("Ann", 22), ("Bob", 13)]


def test_totals_for_game_without_rounds() -> None:
    assert totals_by_player(_state([])) == {"a": 0, "b": 0}


def test_rounds_won_counts_only_true_outcomes() -> None:
    state = _state(
        [
            _round(1, {"a": 1, "b": 1}, {"a": True, "b": False}),
            _round(2, {"a": 1, "b": 1}, {"a": True}),
            _round(3, {"a": 1, "b": 1}, {}),
        ]
    )
    assert rounds_won(state, "a") == 2
    assert rounds_won(state, "b") == 0


def test_current_win_streak_scans_back_from_latest_round() -> None:
    wins = [_round(i, {"a": 1}, {"a": True}) for i in range(1, 4)]
    assert current_win_streak(_state(wins), "a") == 3

    missed = wins + [_round(4, {"a": 1}, {"a": False})]
    assert current_win_streak(_state(missed), "a") == 0

    undecided = wins + [_round(4, {"a": 1}, {})]
    assert current_win_streak(_state(undecided), "a") == 0

    after_miss = [_round(1, {"a": 1}, {"a": False})] + [
        _round(i, {"a": 1}, {"a": True}) for i in range(2, 4)
    ]
    assert current_win_streak(_state(after_miss), "a") == 2


def test_first_round_miss_gives_zero_streak() -> None:
    state = _state([_round(1, {"a": 1}, {"a": False}), _round(2, {}, {})])
    assert current_win_streak(state, "a") == 0


def test_rounds_fully_scored() -> None:
    state = _state(
        [
            _round(1, {"a": 1, "b": 1}, {"a": True, "b": False}),
            _round(2, {"a": 1, "b": 1}, {"a": True}),
        ]
    )
    assert rounds_fully_scored(state) == 1
    assert rounds_fully_scored(_state([], players=())) == 0
    assert rounds_fully_scored(_state([])) == 0


def test_ties_keep_insertion_order_in_standings() -> None:
    state = _state([_round(1, {"a": 1, "b": 1}, {"a": True, "b": True})])
    assert [p.id for p, _ in standings(state)] == ["a", "b"]


def test_best_round_haul_takes_first_highest() -> None:
    state = _state(
        [
            _round(1, {"a": 4, "b": 2}, {"a": True, "b": True}),
            _round(2, {"a": 1, "b": 4}, {"a": True, "b": True}),
        ]
    )
    haul = best_round_haul(state)
    assert haul is not None
    assert (haul.player.id, haul.round.index, haul.points) == ("a", 1, 14)
    assert best_round_haul(_state([])) is None


def test_live_stats_messages() -> None:
    state = _state(
        [
            _round(1, {"a": 2, "b": 1}, {"a": True, "b": False}),
            _round(2, {"a": 3, "b": 1}, {"a": True, "b": False}),
            _round(3, {"a": 1, "b": 1}, {}),
        ],
        target=25,
    )
    assert live_stats(state) == [
        "Rounds scored: 2/3.",
        "Bob has not won a round yet.",
        "Ann leads Bob by 25 pts.",
        "Ann has the most exact bids: 2.",
        "Best single round: Ann scored 13 pts in round 2.",
        "Ann has reached 25 pts.",
    ]


def test_live_stats_streak_shared_by_several_players() -> None:
    state = _state([_round(1, {"a": 1, "b": 1}, {"a": True, "b": True})])
    stats = live_stats(state)
    assert "Ann, Bob have a 1-round winning streak." in stats
    assert "Ann, Bob have the most exact bids: 1." in stats


def test_live_stats_single_player_and_empty_game() -> None:
    assert live_stats(_state([], players=())) == []
    assert live_stats(_state([], players=(ANN,))) == [
        "Rounds scored: 0/0.",
        "Ann has not won a round yet.",
        "Ann is in the lead.",
    ]


def test_stat_message_cycles() -> None:
    assert stat_message([], 3) == EMPTY_STATS_MESSAGE
    assert stat_message(["x", "y"], 3) == "y"
