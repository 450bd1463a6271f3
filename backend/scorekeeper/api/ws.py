from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from scorekeeper.engine.remote import ChangeNotification, RemoteError
from scorekeeper.engine.serializer import deserialize_game, serialize_game

logger = logging.getLogger(__name__)

router = APIRouter()


def _change_message(notification: ChangeNotification) -> dict:
    return {
        "type": "GAME_CHANGED",
        "gameId": notification.game_id,
        "new": notification.new,
        "origin": notification.origin,
    }


async def _forward_changes(
    websocket: WebSocket, queue: asyncio.Queue[ChangeNotification]
) -> None:
    while True:
        notification = await queue.get()
        await websocket.send_json(_change_message(notification))


async def _stop_forwarder(task: asyncio.Task, game_id: str) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.info("Change feed for game %s ended early: %s", game_id, e)


async def _handle_upsert(websocket: WebSocket, store, game_id: str, msg: dict) -> None:
    try:
        state = deserialize_game(msg.get("data"))
    except ValueError as e:
        await websocket.send_json({"type": "ERROR", "message": str(e)})
        return
    if state.id != game_id:
        await websocket.send_json(
            {"type": "ERROR", "message": "Record id does not match this channel."}
        )
        return

    origin = msg.get("origin")
    try:
        await store.upsert(
            game_id,
            serialize_game(state),
            origin=str(origin) if origin is not None else None,
        )
    except RemoteError as e:
        await websocket.send_json({"type": "ERROR", "message": f"Upsert failed: {e}"})


@router.websocket("/ws/games/{game_id}")
async def ws_game(websocket: WebSocket, game_id: str) -> None:
    await websocket.accept()

    app = websocket.scope["app"]
    store = getattr(app.state, "remote_store", None)
    if store is None:
        await websocket.send_json({"type": "ERROR", "message": "Game hub is disabled"})
        await websocket.close()
        return

    queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()
    subscription = store.subscribe(game_id, queue.put_nowait)
    forwarder = asyncio.create_task(_forward_changes(websocket, queue))
    logger.info("Subscriber joined game %s", game_id)

    await websocket.send_json({"type": "SUBSCRIBED", "gameId": game_id})

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "ERROR", "message": "Expected a JSON message."})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "ERROR", "message": "Expected an object."})
                continue
            msg_type = msg.get("type")

            if msg_type == "GET_STATE":
                record = await store.fetch_by_id(game_id)
                await websocket.send_json({"type": "STATE", "gameId": game_id, "data": record})
                continue

            if msg_type == "UPSERT":
                await _handle_upsert(websocket, store, game_id, msg)
                continue

            await websocket.send_json(
                {"type": "ERROR", "message": f"Unknown message type: {msg_type}"}
            )

    except WebSocketDisconnect:
        return
    finally:
        subscription.close()
        await _stop_forwarder(forwarder, game_id)
        logger.info("Subscriber left game %s", game_id)
