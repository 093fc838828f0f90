from __future__ import annotations

import logging
from typing import Callable

from gofish.engine.ai import ai_take_turn
from gofish.engine.game import (
    GameConfig,
    GameError,
    GameState,
    NotYourTurn,
    advance_turn,
    new_game,
    replenish_if_empty,
    take_turn,
)
from gofish.engine.types import Rank
from gofish.paths import Paths, get_paths
from gofish.services.savegame import SaveGameService
from gofish.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


class GameSession:
    """Drives one game at a time on behalf of a UI.

    The engine never schedules turns; this class does, with a plain loop that
    runs automated players until the human is up again or the game ends. Every
    change is autosaved and its engine events go to telemetry.
    """

    def __init__(
        self,
        saves: SaveGameService,
        telemetry: TelemetryService | None = None,
        config: GameConfig | None = None,
    ) -> None:
        self.saves = saves
        self.telemetry = telemetry
        self.config = config or GameConfig()
        self.state: GameState | None = None
        self._events_sent = 0

    @classmethod
    def from_paths(cls, paths: Paths | None = None, config: GameConfig | None = None) -> "GameSession":
        paths = paths or get_paths()
        return cls(
            saves=SaveGameService(paths.save_path, paths.schema_dir, config=config),
            telemetry=TelemetryService(paths.telemetry_path),
            config=config,
        )

    @property
    def has_active_game(self) -> bool:
        return self.state is not None and self.state.has_active_game

    def start(self, num_players: int, seed: int | None = None) -> GameState:
        self.state = new_game(num_players, seed=seed, config=self.config)
        self._events_sent = 0
        self._after_change()
        return self.state

    def resume(self) -> GameState | None:
        """Load the saved game, or None when there is nothing usable to resume."""
        self.state = self.saves.load_or_none()
        self._events_sent = 0
        self._log("resume", {"ok": self.state is not None})
        return self.state

    def reset(self) -> None:
        self.state = None
        self._events_sent = 0
        self.saves.clear()

    def human_ask(self, target_id: int, rank: Rank) -> bool:
        """Ask on the human's behalf, fishing on a miss.

        Returns True when the human keeps the turn.
        """
        state = self._require_state()
        asker = state.current_player
        if asker.is_automated:
            raise NotYourTurn(f"It is {asker.name}'s turn.")
        keeps_turn = take_turn(state, asker.id, target_id, rank)
        self._after_change()
        return keeps_turn

    def run_automated_turns(self, pause: Callable[[], None] | None = None) -> int:
        """Play automated players until the human must act or the game ends.

        `pause` runs before each automated turn so a UI can make turns
        perceptible. Returns the number of turns played or skipped.
        """
        state = self._require_state()
        turns = 0
        while not state.is_over:
            player = state.current_player
            if player.is_automated:
                if pause is not None:
                    pause()
                ai_take_turn(state, player.id)
            elif not player.hand:
                replenish_if_empty(state, player.id)
                if not player.hand and not state.is_over:
                    # Nothing to ask with and nothing left to draw
                    advance_turn(state)
            else:
                break
            turns += 1
            self._after_change()
        return turns

    def _require_state(self) -> GameState:
        if self.state is None:
            raise GameError("No active game.")
        return self.state

    def _after_change(self) -> None:
        state = self._require_state()
        if self.telemetry is not None:
            try:
                self.telemetry.log_events(state.event_log[self._events_sent :])
            except OSError as e:
                logger.warning("Could not write telemetry to %s: %s", self.telemetry.path, e)
        self._events_sent = len(state.event_log)
        try:
            self.saves.save(state)
        except OSError as e:
            logger.warning("Could not save game to %s: %s", self.saves.path, e)

    def _log(self, event_type: str, payload: dict[str, object]) -> None:
        if self.telemetry is not None:
            self.telemetry.log(event_type, payload)
