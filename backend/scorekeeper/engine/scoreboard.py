from __future__ import annotations

import logging
from urllib.parse import urlencode

from scorekeeper.engine.game_store import GameStateStore, Notify
from scorekeeper.engine.remote import RemoteError, RemoteGameStore
from scorekeeper.engine.serializer import deserialize_game, serialize_game
from scorekeeper.engine.state import GameState
from scorekeeper.engine.stats import live_stats
from scorekeeper.engine.storage import FileStorage, KeyValueStorage
from scorekeeper.engine.sync import DEFAULT_DEBOUNCE_SECONDS, SyncReconciler
from scorekeeper.settings import Settings

logger = logging.getLogger(__name__)

NO_REMOTE_MESSAGE = "Remote sync is not configured."


class Scoreboard:
    """
    What a presentation layer talks to: the current game, its saved copy,
    the optional shared record and the live-sync switch.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        remote: RemoteGameStore | None = None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        target_points: int = 100,
        notify: Notify | None = None,
    ) -> None:
        self._notify = notify or (lambda message: logger.info("Notice: %s", message))
        self._remote = remote
        self.store = GameStateStore(
            storage, notify=self._notify, target_points=target_points
        )
        self.sync = SyncReconciler(
            self.store, remote, debounce_seconds=debounce_seconds, notify=self._notify
        )

    @property
    def state(self) -> GameState:
        return self.store.snapshot

    @property
    def cloud_available(self) -> bool:
        return self._remote is not None

    async def open(self, share_id: str | None = None) -> GameState:
        """
        Load the saved game, or the shared one when a share id is given and
        can be fetched. A game with no rounds gets the default plan.
        """
        self.store.load()
        if share_id and self._remote is not None:
            await self._hydrate(share_id)
        self.store.ensure_schedule()
        return self.store.snapshot

    async def _hydrate(self, game_id: str) -> bool:
        assert self._remote is not None
        try:
            payload = await self._remote.fetch_by_id(game_id)
        except RemoteError as e:
            self._notify(f"Could not load game {game_id}: {e}")
            return False
        if payload is None:
            self._notify(f"Game {game_id} not found.")
            return False
        try:
            incoming = deserialize_game(payload)
        except ValueError as e:
            self._notify(f"Game {game_id} is unreadable: {e}")
            return False

        self.store.replace_snapshot(incoming, source="remote")
        return True

    async def save_to_cloud(self) -> bool:
        if self._remote is None:
            self._notify(NO_REMOTE_MESSAGE)
            return False
        state = self.store.snapshot
        try:
            await self._remote.upsert(state.id, serialize_game(state))
        except RemoteError as e:
            self._notify(f"Save failed: {e}")
            return False
        self._notify(f"Saved to cloud (id: {state.id}).")
        return True

    async def load_from_cloud(self, game_id: str) -> bool:
        if self._remote is None:
            self._notify(NO_REMOTE_MESSAGE)
            return False
        return await self._hydrate(game_id)

    async def set_live(self, on: bool) -> bool:
        if not on:
            await self.sync.stop_live()
            return False
        if self._remote is None:
            self._notify(NO_REMOTE_MESSAGE)
            return False
        return await self.sync.start_live()

    def new_game(self) -> GameState:
        self.store.clear()
        return self.store.reset()

    def share_query(self) -> str:
        return urlencode({"id": self.store.snapshot.id})

    def live_stats(self) -> list[str]:
        return live_stats(self.store.snapshot)


def build_scoreboard(
    settings: Settings,
    remote: RemoteGameStore | None = None,
    *,
    notify: Notify | None = None,
) -> Scoreboard:
    return Scoreboard(
        FileStorage(settings.storage_dir),
        remote,
        debounce_seconds=settings.sync_debounce_ms / 1000,
        target_points=settings.target_points,
        notify=notify,
    )
