from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """A remote record operation failed (network, auth, storage)."""


@dataclass(frozen=True)
class ChangeNotification:
    game_id: str
    new: dict[str, Any]
    # token of the publish that caused this change, if the writer sent one
    origin: str | None = None


ChangeCallback = Callable[[ChangeNotification], None]


class Subscription:
    def __init__(self, game_id: str, on_close: Callable[[], None]) -> None:
        self.game_id = game_id
        self._on_close: Callable[[], None] | None = on_close

    @property
    def closed(self) -> bool:
        return self._on_close is None

    def close(self) -> None:
        if self._on_close is None:
            return
        on_close, self._on_close = self._on_close, None
        on_close()


class RemoteGameStore(Protocol):
    async def upsert(
        self, game_id: str, payload: dict[str, Any], origin: str | None = None
    ) -> None: ...

    async def fetch_by_id(self, game_id: str) -> dict[str, Any] | None: ...

    def subscribe(self, game_id: str, callback: ChangeCallback) -> Subscription: ...


class InMemoryRemoteStore:
    """
    One record per game id plus per-id change feeds. Every upsert is delivered
    to all subscribers of that id, the writer included.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._subscribers: dict[str, list[ChangeCallback]] = {}

    async def upsert(
        self, game_id: str, payload: dict[str, Any], origin: str | None = None
    ) -> None:
        self._records[game_id] = copy.deepcopy(payload)
        callbacks = list(self._subscribers.get(game_id, []))
        logger.debug(
            "Upsert game=%s origin=%s subscribers=%d", game_id, origin, len(callbacks)
        )
        for callback in callbacks:
            callback(
                ChangeNotification(
                    game_id=game_id, new=copy.deepcopy(payload), origin=origin
                )
            )

    async def fetch_by_id(self, game_id: str) -> dict[str, Any] | None:
        record = self._records.get(game_id)
        return copy.deepcopy(record) if record is not None else None

    def subscribe(self, game_id: str, callback: ChangeCallback) -> Subscription:
        self._subscribers.setdefault(game_id, []).append(callback)

        def _remove() -> None:
            callbacks = self._subscribers.get(game_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(game_id, None)

        return Subscription(game_id, _remove)

    def subscriber_count(self, game_id: str) -> int:
        return len(self._subscribers.get(game_id, []))
