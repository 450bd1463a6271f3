from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Literal

from scorekeeper.engine.plan import (
    ascending_extension_rows,
    descending_extension_rows,
    generate_plan_rows,
    rows_to_rounds,
)
from scorekeeper.engine.state import (
    DEFAULT_TARGET_POINTS,
    GameState,
    Player,
    new_game,
    new_id,
)
from scorekeeper.engine.storage import (
    STORAGE_KEY,
    KeyValueStorage,
    clear_game,
    load_game,
    save_game,
)
from scorekeeper.engine.validator import (
    validate_bid_value,
    validate_lock,
    validate_outcome,
    validate_player_name,
)

logger = logging.getLogger(__name__)

ChangeSource = Literal["local", "remote"]
Listener = Callable[[GameState, ChangeSource], None]
Notify = Callable[[str], None]


def _log_notice(message: str) -> None:
    logger.info("Notice: %s", message)


class GameStateStore:
    """
    Owns the current game snapshot.

    Every mutation builds a new GameState; nested rounds/maps are never
    modified in place. Successful mutations are persisted and then announced
    to listeners. Refused mutations return False and report the reason
    through `notify`.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = STORAGE_KEY,
        notify: Notify | None = None,
        target_points: int = DEFAULT_TARGET_POINTS,
    ) -> None:
        self._storage = storage
        self._key = key
        self._notify = notify or _log_notice
        self._target_points = target_points
        self._listeners: list[Listener] = []
        self._state = new_game(target_points=target_points)

    @property
    def snapshot(self) -> GameState:
        return self._state

    # ---------------
    # persistence
    # ---------------
    def load(self) -> GameState:
        saved = load_game(self._storage, self._key)
        if saved is None:
            logger.info("No saved game; starting a new one.")
            self._state = new_game(target_points=self._target_points)
        else:
            self._state = saved
        return self._state

    def save(self) -> None:
        save_game(self._storage, self._state, self._key)

    def clear(self) -> None:
        clear_game(self._storage, self._key)

    # ---------------
    # change feed
    # ---------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: GameState, source: ChangeSource = "local") -> None:
        self._state = state
        try:
            self.save()
        except OSError as e:
            # the change still stands in memory; only the saved copy is stale
            logger.warning("Could not save game %s: %s", state.id, e)
            self._notify(f"Could not save the game: {e}")
        for listener in list(self._listeners):
            listener(state, source)

    def _refuse(self, message: str) -> bool:
        logger.info("Refused: %s", message)
        self._notify(message)
        return False

    def replace_snapshot(
        self, state: GameState, *, source: ChangeSource = "local"
    ) -> None:
        self._commit(state, source)

    def reset(self) -> GameState:
        self._commit(new_game(target_points=self._target_points))
        return self._state

    # ---------------
    # players
    # ---------------
    def add_player(self, name: str) -> Player | None:
        try:
            cleaned = validate_player_name(name)
        except ValueError as e:
            self._refuse(str(e))
            return None

        player = Player(id=new_id(), name=cleaned)
        self._commit(replace(self._state, players=self._state.players + (player,)))
        return player

    def remove_player(self, player_id: str) -> bool:
        state = self._state
        if state.find_player(player_id) is None:
            return self._refuse(f"Unknown player: {player_id}")

        self._commit(
            replace(
                state,
                players=tuple(p for p in state.players if p.id != player_id),
                rounds=tuple(r.without_player(player_id) for r in state.rounds),
            )
        )
        return True

    # ---------------
    # schedule
    # ---------------
    def rebuild_schedule(self, descending: bool) -> bool:
        rows = generate_plan_rows(len(self._state.players), descending)
        self._commit(replace(self._state, rounds=tuple(rows_to_rounds(rows))))
        return True

    def ensure_schedule(self) -> bool:
        if self._state.rounds:
            return False
        return self.rebuild_schedule(descending=True)

    def _extend(self, make_rows) -> bool:
        state = self._state
        try:
            rows = make_rows(state.rounds, len(state.players))
        except ValueError as e:
            return self._refuse(str(e))

        added = rows_to_rounds(rows, start_index=len(state.rounds))
        self._commit(replace(state, rounds=state.rounds + tuple(added)))
        return True

    def append_ascending(self) -> bool:
        return self._extend(ascending_extension_rows)

    def append_descending(self) -> bool:
        return self._extend(descending_extension_rows)

    # ---------------
    # rounds
    # ---------------
    def set_bid(self, round_id: str, player_id: str, value: int | None) -> bool:
        state = self._state
        rnd = state.find_round(round_id)
        if rnd is None:
            return self._refuse(f"Unknown round: {round_id}")

        try:
            validate_bid_value(rnd, state.players, player_id, value)
        except ValueError as e:
            return self._refuse(str(e))

        self._commit(state.replace_round(rnd.with_bid(player_id, value)))
        return True

    def set_outcome(self, round_id: str, player_id: str, ok: bool | None) -> bool:
        state = self._state
        rnd = state.find_round(round_id)
        if rnd is None:
            return self._refuse(f"Unknown round: {round_id}")

        try:
            validate_outcome(rnd, state.players, player_id)
        except ValueError as e:
            return self._refuse(str(e))

        self._commit(state.replace_round(rnd.with_outcome(player_id, ok)))
        return True

    def set_locked(self, round_id: str, locked: bool) -> bool:
        state = self._state
        rnd = state.find_round(round_id)
        if rnd is None:
            return self._refuse(f"Unknown round: {round_id}")
        if rnd.locked == locked:
            return True

        if locked:
            try:
                validate_lock(rnd, state.players)
            except ValueError as e:
                return self._refuse(str(e))
            updated = replace(rnd, locked=True)
        else:
            # outcomes only exist while locked
            updated = replace(rnd, locked=False, ok={})

        self._commit(state.replace_round(updated))
        return True
