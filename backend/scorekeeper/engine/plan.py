from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from scorekeeper.engine.state import SUITS, Round, Suit, new_id

DECK_SIZE = 52


@dataclass(frozen=True)
class PlanRow:
    cards: int
    suit: Suit


def max_cards_for_players(count: int) -> int:
    if count <= 0:
        return 13
    return DECK_SIZE // count


def suit_for_step(step: int) -> Suit:
    """Trump rotates Spades -> Hearts -> Clubs -> Diamonds regardless of direction."""
    return SUITS[step % len(SUITS)]


def _rows(card_counts: Sequence[int], start_step: int = 0) -> list[PlanRow]:
    return [
        PlanRow(cards=cards, suit=suit_for_step(start_step + i))
        for i, cards in enumerate(card_counts)
    ]


def generate_plan_rows(player_count: int, descending: bool) -> list[PlanRow]:
    top = max_cards_for_players(player_count)
    if descending:
        counts = range(top, 0, -1)
    else:
        counts = range(1, top + 1)
    return _rows(counts)


def ascending_extension_rows(
    rounds: Sequence[Round], player_count: int
) -> list[PlanRow]:
    """
    Continue 1 -> max after a schedule that ended on a 1-card round.
    Suit rotation picks up from the current schedule length.
    """
    if not rounds:
        return generate_plan_rows(player_count, descending=False)

    if rounds[-1].cards != 1:
        raise ValueError("Schedule must end on a 1-card round to continue upward.")

    top = max_cards_for_players(player_count)
    return _rows(range(1, top + 1), start_step=len(rounds))


def descending_extension_rows(
    rounds: Sequence[Round], player_count: int
) -> list[PlanRow]:
    """
    Continue max-1 -> 1 after a schedule that ended on a max-card round.
    The max-card round is not repeated.
    """
    if not rounds:
        return generate_plan_rows(player_count, descending=True)

    top = max_cards_for_players(player_count)
    if top <= 1:
        raise ValueError(f"Cannot continue downward from {top} card(s).")
    if rounds[-1].cards != top:
        raise ValueError(
            f"Schedule must end on a {top}-card round to continue downward."
        )

    return _rows(range(top - 1, 0, -1), start_step=len(rounds))


def rows_to_rounds(rows: Sequence[PlanRow], start_index: int = 0) -> list[Round]:
    return [
        Round(id=new_id(), index=start_index + i + 1, suit=row.suit, cards=row.cards)
        for i, row in enumerate(rows)
    ]
