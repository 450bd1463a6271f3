from __future__ import annotations

import pytest

from scorekeeper.engine.bidding_engine import (
    can_lock,
    compute_last_bidder_rule,
    forbidden_bid,
    is_legal_bid,
)
from scorekeeper.engine.state import Player, Round
from scorekeeper.engine.validator import (
    validate_bid_value,
    validate_lock,
    validate_outcome,
    validate_player_name,
)

PLAYERS = [Player("a", "Ann"), Player("b", "Bob"), Player("c", "Cy")]


def _round(cards: int = 7, bids: dict | None = None, **kw) -> Round:
    return Round(id="r1", index=1, suit="Spades", cards=cards, bids=bids or {}, **kw)


def test_forbidden_bid_for_single_missing_player() -> None:
    rnd = _round(7, {"a": 3, "b": 2})
    rule = compute_last_bidder_rule(rnd, PLAYERS)

    assert rule.last_bidder_id == "c"
    assert rule.entered_total == 5
    assert forbidden_bid(rnd, PLAYERS) == 2
    assert not is_legal_bid(rnd, PLAYERS, "c", 2)
    assert is_legal_bid(rnd, PLAYERS, "c", 0)
    assert is_legal_bid(rnd, PLAYERS, "c", 3)


def test_no_forbidden_bid_when_entered_bids_exceed_cards() -> None:
    rnd = _round(7, {"a": 5, "b": 3})
    rule = compute_last_bidder_rule(rnd, PLAYERS)

    assert rule.remainder == -1
    assert forbidden_bid(rnd, PLAYERS) is None
    for value in range(0, 10):
        assert is_legal_bid(rnd, PLAYERS, "c", value)


def test_no_forbidden_bid_unless_exactly_one_player_is_missing() -> None:
    assert forbidden_bid(_round(7, {}), PLAYERS) is None
    assert forbidden_bid(_round(7, {"a": 3}), PLAYERS) is None
    assert forbidden_bid(_round(7, {"a": 3, "b": 2, "c": 1}), PLAYERS) is None


def test_forbidden_bid_can_be_zero() -> None:
    rnd = _round(5, {"a": 3, "b": 2})
    assert forbidden_bid(rnd, PLAYERS) == 0
    assert not is_legal_bid(rnd, PLAYERS, "c", 0)


def test_re_editing_a_bid_after_everyone_bid_counts_as_last_bid() -> None:
    rnd = _round(7, {"a": 3, "b": 2, "c": 1})
    assert not is_legal_bid(rnd, PLAYERS, "a", 4)
    assert is_legal_bid(rnd, PLAYERS, "a", 5)


def test_negative_bids_are_never_legal() -> None:
    assert not is_legal_bid(_round(7, {}), PLAYERS, "a", -1)


def test_can_lock_requires_all_bids_and_total_not_equal_cards() -> None:
    assert not can_lock(_round(7, {"a": 3, "b": 2}), PLAYERS)
    assert not can_lock(_round(7, {"a": 3, "b": 2, "c": 2}), PLAYERS)
    assert can_lock(_round(7, {"a": 3, "b": 2, "c": 1}), PLAYERS)
    assert can_lock(_round(7, {"a": 3, "b": 2, "c": 5}), PLAYERS)
    assert not can_lock(_round(7, {}), [])


def test_validate_bid_value_messages() -> None:
    rnd = _round(7, {"a": 3, "b": 2})

    with pytest.raises(ValueError, match="cannot bid 2"):
        validate_bid_value(rnd, PLAYERS, "c", 2)
    with pytest.raises(ValueError, match=">= 0"):
        validate_bid_value(rnd, PLAYERS, "c", -1)
    with pytest.raises(ValueError, match="Unknown player"):
        validate_bid_value(rnd, PLAYERS, "zz", 1)
    with pytest.raises(ValueError, match="locked"):
        validate_bid_value(_round(7, {"a": 1}, locked=True), PLAYERS, "a", 2)

    validate_bid_value(rnd, PLAYERS, "c", 1)
    validate_bid_value(rnd, PLAYERS, "a", None)


def test_validate_lock_restates_the_rule_for_programmatic_edits() -> None:
    # bids that bypassed per-entry checks still cannot be locked
    with pytest.raises(ValueError, match="cannot equal"):
        validate_lock(_round(7, {"a": 3, "b": 2, "c": 2}), PLAYERS)
    with pytest.raises(ValueError, match="must bid"):
        validate_lock(_round(7, {"a": 3}), PLAYERS)
    with pytest.raises(ValueError):
        validate_lock(_round(7, {}), [])


def test_validate_outcome() -> None:
    with pytest.raises(ValueError, match="Lock round"):
        validate_outcome(_round(7, {"a": 3}), PLAYERS, "a")
    with pytest.raises(ValueError, match="no bid"):
        validate_outcome(_round(7, {"a": 3}, locked=True), PLAYERS, "b")
    validate_outcome(_round(7, {"a": 3}, locked=True), PLAYERS, "a")


def test_validate_player_name() -> None:
    assert validate_player_name("  Dee ") == "Dee"
    with pytest.raises(ValueError):
        validate_player_name("   ")
