from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from typing import Callable, Literal

from scorekeeper.engine.game_store import ChangeSource, GameStateStore, Notify
from scorekeeper.engine.remote import (
    ChangeNotification,
    RemoteError,
    RemoteGameStore,
    Subscription,
)
from scorekeeper.engine.serializer import deserialize_game, serialize_game
from scorekeeper.engine.state import GameState

logger = logging.getLogger(__name__)

SyncMode = Literal["IDLE", "LIVE"]

DEFAULT_DEBOUNCE_SECONDS = 0.35

# Origin tokens we still expect to see echoed back.
_MAX_OUTSTANDING_ORIGINS = 64


class SyncReconciler:
    """
    Publishes local snapshots to a remote record and merges remote ones in.

    IDLE: nothing is published or received.
    LIVE: local changes are debounced and published with a fresh origin
    token; inbound changes carrying one of our tokens are echoes and are
    dropped, anything else replaces the local snapshot when its createdAt is
    >= the local one.

    Two clients editing the same game (same createdAt) both pass the guard,
    so the last notification received wins and concurrent edits are not
    merged field by field.
    """

    def __init__(
        self,
        store: GameStateStore,
        remote: RemoteGameStore | None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        notify: Notify | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self.debounce_seconds = debounce_seconds
        self._notify = notify or (lambda message: logger.warning("%s", message))

        self._mode: SyncMode = "IDLE"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._scope_id: str | None = None
        self._subscription: Subscription | None = None
        self._unlisten: Callable[[], None] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task] = set()
        self._outstanding: deque[str] = deque(maxlen=_MAX_OUTSTANDING_ORIGINS)

    @property
    def mode(self) -> SyncMode:
        return self._mode

    @property
    def available(self) -> bool:
        return self._remote is not None

    # -------------------
    # IDLE <-> LIVE
    # -------------------
    async def start_live(self) -> bool:
        if self._mode == "LIVE":
            return True
        if self._remote is None:
            logger.info("Live sync unavailable: no remote configured.")
            return False

        self._loop = asyncio.get_running_loop()
        snapshot = self._store.snapshot
        try:
            await self._open(snapshot)
        except RemoteError as e:
            self._close_subscription()
            self._scope_id = None
            self._notify(f"Live sync failed to start: {e}")
            return False

        self._unlisten = self._store.subscribe(self._on_store_change)
        self._mode = "LIVE"
        logger.info("Live sync on for game %s", snapshot.id)
        return True

    async def stop_live(self) -> None:
        if self._mode == "IDLE":
            return
        self._mode = "IDLE"

        if self._unlisten is not None:
            self._unlisten()
            self._unlisten = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._close_subscription()
        self._scope_id = None
        logger.info("Live sync off")

    async def flush(self) -> None:
        """Publish a pending change now and wait for outstanding remote calls."""
        if self._timer is not None:
            self._timer.cancel()
            self._fire_publish()
        while self._inflight:
            await asyncio.gather(*list(self._inflight))

    # -------------------
    # remote scope
    # -------------------
    async def _open(self, snapshot: GameState) -> None:
        assert self._remote is not None
        self._scope_id = snapshot.id

        existing = await self._remote.fetch_by_id(snapshot.id)
        if existing is None:
            await self._remote.upsert(
                snapshot.id, serialize_game(snapshot), origin=self._issue_origin()
            )
        self._subscription = self._remote.subscribe(
            snapshot.id, self.handle_remote_change
        )

    def _close_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    async def _rescope(self, snapshot: GameState) -> None:
        self._close_subscription()
        try:
            await self._open(snapshot)
        except RemoteError as e:
            self._notify(f"Live sync could not follow the new game: {e}")
            return
        if self._mode != "LIVE":
            # stopped while re-subscribing
            self._close_subscription()
            return
        logger.info("Live sync moved to game %s", snapshot.id)

    # -------------------
    # outbound
    # -------------------
    def _issue_origin(self) -> str:
        origin = uuid.uuid4().hex
        self._outstanding.append(origin)
        return origin

    def _track(self, coro) -> None:
        assert self._loop is not None
        task = self._loop.create_task(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _on_store_change(self, snapshot: GameState, source: ChangeSource) -> None:
        if self._mode != "LIVE":
            return

        if snapshot.id != self._scope_id:
            self._scope_id = snapshot.id
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._track(self._rescope(snapshot))
            return

        if source == "remote":
            return

        if self._timer is not None:
            self._timer.cancel()
        assert self._loop is not None
        self._timer = self._loop.call_later(self.debounce_seconds, self._fire_publish)

    def _fire_publish(self) -> None:
        self._timer = None
        if self._mode != "LIVE":
            return
        self._track(self._publish())

    async def _publish(self) -> None:
        assert self._remote is not None
        snapshot = self._store.snapshot
        origin = self._issue_origin()
        try:
            await self._remote.upsert(snapshot.id, serialize_game(snapshot), origin=origin)
        except RemoteError as e:
            if origin in self._outstanding:
                self._outstanding.remove(origin)
            self._notify(f"Live sync publish failed: {e}")

    # -------------------
    # inbound
    # -------------------
    def handle_remote_change(self, notification: ChangeNotification) -> bool:
        """Returns True when the notification replaced the local snapshot."""
        if self._mode != "LIVE":
            return False

        origin = notification.origin
        if origin is not None and origin in self._outstanding:
            self._outstanding.remove(origin)
            logger.debug("Dropped echo of own publish %s", origin)
            return False

        try:
            incoming = deserialize_game(notification.new)
        except ValueError as e:
            logger.warning("Dropped malformed remote snapshot: %s", e)
            return False

        local = self._store.snapshot
        if incoming.id != local.id:
            return False
        if incoming.created_at < local.created_at:
            logger.info(
                "Kept local game: remote createdAt %s < local %s",
                incoming.created_at,
                local.created_at,
            )
            return False
        if incoming == local:
            return False

        self._store.replace_snapshot(incoming, source="remote")
        return True
