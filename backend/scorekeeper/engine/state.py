from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Literal


Suit = Literal["Spades", "Hearts", "Clubs", "Diamonds"]

SUITS: tuple[Suit, ...] = ("Spades", "Hearts", "Clubs", "Diamonds")

ScoringMode = Literal["TEN_PLUS_BID"]

DEFAULT_TARGET_POINTS = 100


@dataclass(frozen=True)
class Player:
    id: str
    name: str


@dataclass(frozen=True)
class Round:
    id: str
    index: int  # 1-based, schedule order
    suit: Suit
    cards: int  # cards dealt to each player

    locked: bool = False

    # player id -> value; a missing key means "not entered yet"
    bids: dict[str, int] = field(default_factory=dict)
    ok: dict[str, bool] = field(default_factory=dict)

    def with_bid(self, player_id: str, value: int | None) -> Round:
        bids = {pid: b for pid, b in self.bids.items() if pid != player_id}
        if value is not None:
            bids[player_id] = value
        return replace(self, bids=bids)

    def with_outcome(self, player_id: str, value: bool | None) -> Round:
        ok = {pid: o for pid, o in self.ok.items() if pid != player_id}
        if value is not None:
            ok[player_id] = value
        return replace(self, ok=ok)

    def without_player(self, player_id: str) -> Round:
        return replace(
            self,
            bids={pid: b for pid, b in self.bids.items() if pid != player_id},
            ok={pid: o for pid, o in self.ok.items() if pid != player_id},
        )


@dataclass(frozen=True)
class GameSettings:
    scoring_mode: ScoringMode = "TEN_PLUS_BID"
    target_points: int = DEFAULT_TARGET_POINTS


@dataclass(frozen=True)
class GameState:
    id: str
    created_at: int  # epoch millis, compared when merging remote snapshots

    players: tuple[Player, ...] = ()
    rounds: tuple[Round, ...] = ()
    settings: GameSettings = field(default_factory=GameSettings)

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_round(self, round_id: str) -> Round | None:
        for r in self.rounds:
            if r.id == round_id:
                return r
        return None

    def replace_round(self, updated: Round) -> GameState:
        return replace(
            self,
            rounds=tuple(updated if r.id == updated.id else r for r in self.rounds),
        )


_clock_lock = threading.Lock()
_last_created_at = 0


def next_created_at() -> int:
    """
    Wall-clock millis, bumped so two games created in the same process never
    share a timestamp.
    """
    global _last_created_at
    with _clock_lock:
        now = time.time_ns() // 1_000_000
        _last_created_at = max(now, _last_created_at + 1)
        return _last_created_at


def new_id() -> str:
    return str(uuid.uuid4())


def new_game(*, target_points: int = DEFAULT_TARGET_POINTS) -> GameState:
    return GameState(
        id=new_id(),
        created_at=next_created_at(),
        settings=GameSettings(target_points=target_points),
    )
