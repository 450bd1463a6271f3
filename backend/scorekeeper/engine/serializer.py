from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    model_validator,
)

from scorekeeper.engine.state import (
    DEFAULT_TARGET_POINTS,
    GameSettings,
    GameState,
    Player,
    Round,
    ScoringMode,
    Suit,
)

Count = Annotated[StrictInt, Field(ge=1)]
BidValue = Annotated[StrictInt, Field(ge=0)]


# -------------------
# wire records
# -------------------
class PlayerRecord(BaseModel):
    id: StrictStr
    name: StrictStr


class RoundRecord(BaseModel):
    id: StrictStr
    index: Count
    suit: Suit
    cards: Count
    locked: StrictBool = False
    # null entries mean "not entered" and are dropped when decoding
    bids: dict[str, BidValue | None] = Field(default_factory=dict)
    ok: dict[str, StrictBool | None] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _outcomes_need_lock(self) -> RoundRecord:
        if not self.locked and any(v is not None for v in self.ok.values()):
            raise ValueError(f"round {self.index} has outcomes but is not locked")
        return self


class SettingsRecord(BaseModel):
    scoringMode: ScoringMode = "TEN_PLUS_BID"
    targetPoints: StrictInt = DEFAULT_TARGET_POINTS


class GameRecord(BaseModel):
    id: StrictStr
    createdAt: StrictInt
    players: list[PlayerRecord]
    rounds: list[RoundRecord]
    settings: SettingsRecord = Field(default_factory=SettingsRecord)


# -------------------
# GameState -> dict
# -------------------
def serialize_player(player: Player) -> dict:
    return {"id": player.id, "name": player.name}


def serialize_round(rnd: Round) -> dict:
    return {
        "id": rnd.id,
        "index": rnd.index,
        "suit": rnd.suit,
        "cards": rnd.cards,
        "locked": rnd.locked,
        "bids": dict(rnd.bids),
        "ok": dict(rnd.ok),
    }


def serialize_game(state: GameState) -> dict:
    return {
        "id": state.id,
        "createdAt": state.created_at,
        "players": [serialize_player(p) for p in state.players],
        "rounds": [serialize_round(r) for r in state.rounds],
        "settings": {
            "scoringMode": state.settings.scoring_mode,
            "targetPoints": state.settings.target_points,
        },
    }


# -------------------
# record -> GameState
# -------------------
def round_from_record(rec: RoundRecord) -> Round:
    return Round(
        id=rec.id,
        index=rec.index,
        suit=rec.suit,
        cards=rec.cards,
        locked=rec.locked,
        bids={pid: b for pid, b in rec.bids.items() if b is not None},
        ok={pid: o for pid, o in rec.ok.items() if o is not None},
    )


def game_from_record(rec: GameRecord) -> GameState:
    return GameState(
        id=rec.id,
        created_at=rec.createdAt,
        players=tuple(Player(id=p.id, name=p.name) for p in rec.players),
        rounds=tuple(round_from_record(r) for r in rec.rounds),
        settings=GameSettings(
            scoring_mode=rec.settings.scoringMode,
            target_points=rec.settings.targetPoints,
        ),
    )


def deserialize_game(data: Any) -> GameState:
    """Raises ValueError (pydantic ValidationError) if `data` is not a game record."""
    return game_from_record(GameRecord.model_validate(data))


def dumps_game(state: GameState) -> str:
    return json.dumps(serialize_game(state), separators=(",", ":"))


def loads_game(raw: str) -> GameState:
    """Parse a persisted record. Raises ValueError if malformed."""
    return game_from_record(GameRecord.model_validate_json(raw))
