"""Core game engine for chain reaction.

``GameEngine`` is the pure turn controller: it validates a move against the
current ``GameState``, places the piece, hands the board to the cascade
engine, and then settles turn order and the win condition on the result.
Every method is a static function over values; ``apply_move`` returns a new
state and never mutates the one it was given, so a rejected move leaves the
caller's state exactly as it was.

The stateful wrapper that owns a game between moves and streams waves to
presentation consumers lives in :mod:`chain_reaction.session`.
"""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from . import metrics
from .board_manager import BoardManager
from .cascade import resolve_cascade
from .config import GameConfig
from .errors import InternalInvariantViolation, InvalidMoveError
from .models import (
    BoardState,
    GameState,
    GameStatus,
    Move,
    MoveResult,
    Player,
    Position,
)
from .rules.geometry import is_valid_position

logger = logging.getLogger(__name__)

__all__ = ["GameEngine", "as_position"]


def as_position(value: Position | Sequence[int]) -> Position:
    """Accept a ``Position`` or a ``(row, col)`` pair."""
    if isinstance(value, Position):
        return value
    row, col = value
    return Position(row=int(row), col=int(col))


class GameEngine:
    """Turn controller over immutable game states.

    - ``create_initial_state`` builds the empty starting position.
    - ``get_valid_moves`` / ``validate_move`` answer what may be played.
    - ``apply_move`` resolves one move end to end and returns a
      ``MoveResult`` holding the new state and the ordered waves.
    """

    @staticmethod
    def create_initial_state(
        config: GameConfig | None = None, game_id: str | None = None
    ) -> GameState:
        """Empty board, player 0 to move, nobody has moved yet."""
        config = config or GameConfig()
        players = [
            Player(playerNumber=i, name=f"Player {i + 1}", color=color)
            for i, color in enumerate(config.players)
        ]
        return GameState(
            id=game_id or uuid.uuid4().hex,
            board=BoardManager.create_empty_board(config.rows, config.cols),
            players=players,
            currentPlayer=0,
            hasMoved=[False] * len(players),
            status=GameStatus.AWAITING_MOVE,
            winner=None,
            moveCount=0,
            maxWaves=config.max_waves,
            skipEliminatedPlayers=config.skip_eliminated_players,
            stopCascadeWhenDecided=config.stop_cascade_when_decided,
        )

    @staticmethod
    def get_valid_moves(game_state: GameState) -> list[Position]:
        """Cells the current player may click, in row-major order.

        Empty cells and the player's own cells are playable. Nothing is
        playable unless the game is waiting for a move.
        """
        if game_state.status != GameStatus.AWAITING_MOVE:
            return []
        board = game_state.board
        player = game_state.current_player
        moves = []
        for row in range(board.rows):
            for col in range(board.cols):
                pos = Position(row=row, col=col)
                if BoardManager.is_empty(pos, board):
                    moves.append(pos)
                elif BoardManager.get_cell(pos, board).owner == player:
                    moves.append(pos)
        return moves

    @staticmethod
    def validate_move(game_state: GameState, position: Position) -> None:
        """Raise ``InvalidMoveError`` if ``position`` cannot be played now."""
        player = game_state.current_player
        if game_state.status != GameStatus.AWAITING_MOVE:
            raise InvalidMoveError(
                f"Game is not awaiting a move (status={game_state.status.value})",
                reason=f"status_{game_state.status.value}",
                position=position.to_key(),
                player=player,
            )
        board = game_state.board
        if not is_valid_position(position, board.rows, board.cols):
            raise InvalidMoveError(
                f"Position {position} is outside the {board.rows}x{board.cols} board",
                reason="out_of_bounds",
                position=position.to_key(),
                player=player,
            )
        cell = BoardManager.get_cell(position, board)
        if cell is not None and cell.owner != player:
            raise InvalidMoveError(
                f"Cell {position} belongs to player {cell.owner}",
                reason="occupied_by_opponent",
                position=position.to_key(),
                player=player,
            )

    @staticmethod
    def apply_move(
        game_state: GameState, position: Position | Sequence[int]
    ) -> MoveResult:
        """
        Apply the current player's move at ``position`` and return the result.

        Args:
            game_state: The current game state. Never mutated.
            position: Target cell.

        Returns:
            MoveResult with the new state, the move, the ordered waves, any
            players who lost their last cell, and the winner if the game
            just ended.

        Raises:
            InvalidMoveError: the move is not legal now.
            InternalInvariantViolation: the cascade engine hit an impossible
                state or ran past the wave cap.
        """
        position = as_position(position)
        board = game_state.board
        try:
            GameEngine.validate_move(game_state, position)
        except InvalidMoveError as exc:
            metrics.observe_move(board.rows, board.cols, "rejected")
            logger.warning("Rejected move: %s", exc)
            raise

        player = game_state.current_player
        has_moved = list(game_state.has_moved)
        has_moved[player] = True
        all_moved = all(has_moved)

        stop_when = None
        if game_state.stop_cascade_when_decided and all_moved:
            def stop_when(b: BoardState) -> bool:
                return BoardManager.owners(b) == {player}

        try:
            placed = BoardManager.place_or_increment(board, position, player)
            cascade = resolve_cascade(
                placed,
                position,
                player,
                max_waves=game_state.max_waves,
                stop_when=stop_when,
            )
            BoardManager.assert_board_invariants(
                cascade.board, game_state.num_players
            )
        except InternalInvariantViolation as exc:
            metrics.observe_move(board.rows, board.cols, "fault")
            metrics.record_invariant_violation(exc.invariant)
            logger.error("Engine fault resolving %s for player %d: %s", position, player, exc)
            raise

        owners_before = BoardManager.owners(board)
        owners_after = BoardManager.owners(cascade.board)
        eliminated = sorted(owners_before - owners_after)

        move = Move(player=player, position=position, moveNumber=game_state.move_count + 1)
        update = {
            "board": cascade.board,
            "has_moved": has_moved,
            "move_count": game_state.move_count + 1,
        }

        winner = None
        if all_moved and len(owners_after) == 1:
            winner = next(iter(owners_after))
            update["status"] = GameStatus.GAME_OVER
            update["winner"] = winner
        else:
            update["status"] = GameStatus.AWAITING_MOVE
            update["current_player"] = GameEngine._next_player(
                game_state, player, has_moved, owners_after
            )

        new_state = game_state.model_copy(update=update)

        metrics.observe_move(board.rows, board.cols, "accepted")
        metrics.observe_cascade(
            board.rows, board.cols, len(cascade.waves), cascade.transfer_count
        )
        logger.info(
            "Move %d: player %d at %s -> %d waves, %d transfers, board charge %d",
            move.move_number,
            player,
            position,
            len(cascade.waves),
            cascade.transfer_count,
            BoardManager.total_charge(cascade.board),
        )
        if eliminated:
            logger.info("Players eliminated by move %d: %s", move.move_number, eliminated)
        if winner is not None:
            metrics.observe_game_finished(board.rows, board.cols, game_state.num_players)
            logger.info("Game %s over: player %d wins", game_state.id, winner)

        return MoveResult(
            state=new_state,
            move=move,
            waves=cascade.waves,
            eliminated=eliminated,
            winner=winner,
        )

    @staticmethod
    def _next_player(
        game_state: GameState,
        player: int,
        has_moved: list[bool],
        owners: set[int],
    ) -> int:
        """Seat after ``player``, optionally skipping eliminated players."""
        n = game_state.num_players
        candidate = (player + 1) % n
        if not game_state.skip_eliminated_players:
            return candidate
        for _ in range(n):
            if not has_moved[candidate] or candidate in owners:
                return candidate
            candidate = (candidate + 1) % n
        return (player + 1) % n

    @staticmethod
    def is_player_alive(game_state: GameState, player: int) -> bool:
        """A player is alive until they have moved and own no cells."""
        if not game_state.has_moved[player]:
            return True
        return bool(BoardManager.player_cells(game_state.board, player))

    @staticmethod
    def get_alive_players(game_state: GameState) -> list[int]:
        return [
            p.player_number
            for p in game_state.players
            if GameEngine.is_player_alive(game_state, p.player_number)
        ]

    @staticmethod
    def get_eliminated_players(game_state: GameState) -> list[int]:
        return [
            p.player_number
            for p in game_state.players
            if not GameEngine.is_player_alive(game_state, p.player_number)
        ]
