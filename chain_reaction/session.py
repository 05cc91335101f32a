"""Stateful turn controller.

``TurnController`` owns one game's ``GameState`` between moves. A submitted
move is resolved eagerly by :class:`~chain_reaction.game_engine.GameEngine`;
the controller then hands each wave, together with the board after that
wave, to every subscriber in order. While that handoff runs the visible
status is ``resolving`` and any further submission is rejected. The new
state is committed once every subscriber has returned.

An ``InternalInvariantViolation`` halts the session for good.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from . import metrics
from .board_manager import BoardManager
from .cascade import replay_waves
from .config import GameConfig
from .errors import InternalInvariantViolation, InvalidMoveError
from .game_engine import GameEngine, as_position
from .models import BoardState, GameState, GameStatus, MoveResult, Position, Wave

logger = logging.getLogger(__name__)

__all__ = ["TurnController", "WaveConsumer"]

# Called with (wave, board_after_wave); returning acknowledges the wave.
WaveConsumer = Callable[[Wave, BoardState], None]


class TurnController:
    """Owns a game between moves and streams waves to consumers."""

    def __init__(
        self,
        config: GameConfig | None = None,
        game_id: str | None = None,
        state: GameState | None = None,
    ):
        self.config = config or GameConfig()
        self._state = state or GameEngine.create_initial_state(self.config, game_id)
        self._consumers: list[WaveConsumer] = []
        self._last_result: MoveResult | None = None
        self.fault: InternalInvariantViolation | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def status(self) -> GameStatus:
        return self._state.status

    @property
    def current_player(self) -> int:
        return self._state.current_player

    @property
    def is_over(self) -> bool:
        return self._state.is_over

    @property
    def winner(self) -> int | None:
        return self._state.winner

    @property
    def last_result(self) -> MoveResult | None:
        return self._last_result

    def valid_moves(self) -> list[Position]:
        return GameEngine.get_valid_moves(self._state)

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def subscribe(self, consumer: WaveConsumer) -> Callable[[], None]:
        """Register ``consumer``; returns a callable that unsubscribes it."""
        self._consumers.append(consumer)

        def _unsubscribe() -> None:
            if consumer in self._consumers:
                self._consumers.remove(consumer)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def submit_move(self, position: Position | Sequence[int]) -> list[Wave]:
        """Resolve the current player's move and return its waves.

        Raises:
            InvalidMoveError: not awaiting a move (resolving, finished or
                halted) or the cell belongs to another player. State is
                unchanged.
            InternalInvariantViolation: engine fault; the session halts.
        """
        position = as_position(position)
        if self._state.status != GameStatus.AWAITING_MOVE:
            board = self._state.board
            metrics.observe_move(board.rows, board.cols, "rejected")
            raise InvalidMoveError(
                f"Game is not awaiting a move (status={self._state.status.value})",
                reason=f"status_{self._state.status.value}",
                position=position.to_key(),
                player=self._state.current_player,
            )

        try:
            result = GameEngine.apply_move(self._state, position)
        except InternalInvariantViolation as exc:
            self._halt(exc)
            raise

        previous = self._state
        self._state = previous.model_copy(update={"status": GameStatus.RESOLVING})
        try:
            self._emit(result)
        except BaseException:
            self._state = previous
            raise

        self._state = result.state
        self._last_result = result
        return result.waves

    def _emit(self, result: MoveResult) -> None:
        if not self._consumers or not result.waves:
            return
        placed_board = self._placed_board(result)
        for wave, board_after in replay_waves(placed_board, result.waves):
            for consumer in list(self._consumers):
                consumer(wave, board_after)

    def _placed_board(self, result: MoveResult) -> BoardState:
        return BoardManager.place_or_increment(
            self._state.board, result.move.position, result.move.player
        )

    def _halt(self, exc: InternalInvariantViolation) -> None:
        self.fault = exc
        self._state = self._state.model_copy(update={"status": GameStatus.HALTED})
        logger.critical("Game %s halted: %s", self._state.id, exc)
