from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Request

from scorekeeper.engine.legal_actions import get_legal_actions
from scorekeeper.engine.remote import InMemoryRemoteStore, RemoteError
from scorekeeper.engine.scoring import (
    rounds_fully_scored,
    standings,
    totals_by_player,
)
from scorekeeper.engine.serializer import (
    GameRecord,
    deserialize_game,
    game_from_record,
    serialize_game,
)
from scorekeeper.engine.stats import live_stats

router = APIRouter()


class UpsertGameRequest(BaseModel):
    data: GameRecord
    origin: str | None = None


class UpsertGameResponse(BaseModel):
    gameId: str
    createdAt: int


def get_remote_store(request: Request) -> InMemoryRemoteStore:
    store = getattr(request.app.state, "remote_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Game hub is disabled")
    return store


@router.get("/health")
def health() -> dict:
    return {"ok": True}


@router.get("/games/{game_id}")
async def get_game(game_id: str, request: Request) -> dict:
    store = get_remote_store(request)
    record = await store.fetch_by_id(game_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return record


@router.put("/games/{game_id}", response_model=UpsertGameResponse)
async def put_game(game_id: str, req: UpsertGameRequest, request: Request) -> UpsertGameResponse:
    store = get_remote_store(request)
    state = game_from_record(req.data)
    if state.id != game_id:
        raise HTTPException(status_code=400, detail="Record id does not match URL")

    try:
        await store.upsert(game_id, serialize_game(state), origin=req.origin)
    except RemoteError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return UpsertGameResponse(gameId=state.id, createdAt=state.created_at)


@router.get("/games/{game_id}/summary")
async def get_game_summary(game_id: str, request: Request) -> dict:
    store = get_remote_store(request)
    record = await store.fetch_by_id(game_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Game not found")
    try:
        state = deserialize_game(record)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Stored game unreadable: {e}") from e

    return {
        "gameId": state.id,
        "totals": totals_by_player(state),
        "standings": [
            {"playerId": p.id, "name": p.name, "points": pts}
            for p, pts in standings(state)
        ],
        "roundsScored": rounds_fully_scored(state),
        "roundCount": len(state.rounds),
        "rounds": get_legal_actions(state),
        "stats": live_stats(state),
    }
