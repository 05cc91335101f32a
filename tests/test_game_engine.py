"""Tests for the pure turn controller (GameEngine)."""

import pytest

from chain_reaction.board_manager import BoardManager
from chain_reaction.errors import CascadeLimitExceeded, InvalidMoveError
from chain_reaction.game_engine import GameEngine
from chain_reaction.models import Cell, GameStatus, Position


def play(state, *moves):
    """Apply ``moves`` in order, returning the final MoveResult."""
    result = None
    for move in moves:
        result = GameEngine.apply_move(state, move)
        state = result.state
    return result


class TestInitialState:
    def test_initial_state(self, config_factory):
        config = config_factory(players=["red", "blue", "green"])
        state = GameEngine.create_initial_state(config, game_id="g1")
        assert state.id == "g1"
        assert state.board.rows == 6 and state.board.cols == 9
        assert state.board.cells == {}
        assert state.current_player == 0
        assert state.has_moved == [False, False, False]
        assert state.status == GameStatus.AWAITING_MOVE
        assert not state.is_over
        assert [p.color for p in state.players] == ["red", "blue", "green"]
        assert [p.player_number for p in state.players] == [0, 1, 2]

    def test_default_config(self):
        state = GameEngine.create_initial_state()
        assert (state.board.rows, state.board.cols) == (6, 9)
        assert state.num_players == 2


class TestValidMoves:
    def test_all_cells_valid_on_empty_board(self, initial_state):
        assert len(GameEngine.get_valid_moves(initial_state)) == 54

    def test_opponent_cells_excluded(self, state_factory):
        state = state_factory(cells={(0, 0): (1, 1), (0, 1): (0, 1)}, current_player=0)
        moves = GameEngine.get_valid_moves(state)
        assert Position(row=0, col=0) not in moves
        assert Position(row=0, col=1) in moves
        assert len(moves) == 53

    def test_no_moves_after_game_over(self, initial_state):
        over = initial_state.model_copy(update={"status": GameStatus.GAME_OVER})
        assert GameEngine.get_valid_moves(over) == []


class TestApplyMove:
    def test_first_move_places_and_rotates(self, initial_state):
        result = GameEngine.apply_move(initial_state, (0, 0))
        state = result.state
        assert state.board.cells["0,0"] == Cell(owner=0, charge=1)
        assert state.current_player == 1
        assert state.has_moved == [True, False]
        assert state.move_count == 1
        assert result.waves == []
        assert result.move.player == 0
        assert result.move.move_number == 1

    def test_win_suppressed_until_everyone_has_moved(self, initial_state):
        result = GameEngine.apply_move(initial_state, (0, 0))
        assert BoardManager.owners(result.state.board) == {0}
        assert not result.state.is_over
        assert result.winner is None
        assert result.state.status == GameStatus.AWAITING_MOVE

    def test_input_state_not_mutated(self, initial_state):
        before = initial_state.model_dump()
        GameEngine.apply_move(initial_state, (2, 3))
        assert initial_state.model_dump() == before

    def test_corner_scenario(self, initial_state):
        # p0 corner, p1 elsewhere, p0 corner again -> one wave of 2 transfers
        result = play(initial_state, (0, 0), (5, 8), (0, 0))
        assert len(result.waves) == 1
        wave = result.waves[0]
        assert len(wave.transfers) == 2
        assert {(t.to.row, t.to.col) for t in wave.transfers} == {(0, 1), (1, 0)}
        cells = result.state.board.cells
        assert "0,0" not in cells
        assert cells["0,1"] == Cell(owner=0, charge=1)
        assert cells["1,0"] == Cell(owner=0, charge=1)
        assert cells["5,8"] == Cell(owner=1, charge=1)
        assert not result.state.is_over
        assert result.state.current_player == 1

    def test_capture_wins_game(self, initial_state):
        result = play(initial_state, (0, 0), (1, 0), (0, 0))
        assert result.winner == 0
        assert result.eliminated == [1]
        state = result.state
        assert state.status == GameStatus.GAME_OVER
        assert state.winner == 0
        assert state.is_over
        assert state.board.cells["1,0"] == Cell(owner=0, charge=2)
        # Turn does not advance once the game is over
        assert state.current_player == 0

    def test_board_charge_grows_by_one_per_move(self, initial_state):
        state = initial_state
        for i, move in enumerate([(0, 0), (2, 2), (0, 0), (2, 2), (3, 3)], start=1):
            state = GameEngine.apply_move(state, move).state
            assert BoardManager.total_charge(state.board) == i


class TestRejectedMoves:
    def test_opponent_cell_rejected_and_state_unchanged(self, initial_state):
        state = GameEngine.apply_move(initial_state, (0, 0)).state
        before_hash = BoardManager.hash_board(state.board)
        before = state.model_dump()
        with pytest.raises(InvalidMoveError) as exc_info:
            GameEngine.apply_move(state, (0, 0))
        assert exc_info.value.reason == "occupied_by_opponent"
        assert exc_info.value.player == 1
        assert BoardManager.hash_board(state.board) == before_hash
        assert state.model_dump() == before

    def test_move_after_game_over_rejected(self, initial_state):
        state = play(initial_state, (0, 0), (1, 0), (0, 0)).state
        with pytest.raises(InvalidMoveError) as exc_info:
            GameEngine.apply_move(state, (3, 3))
        assert exc_info.value.reason == "status_game_over"

    def test_move_while_resolving_rejected(self, initial_state):
        resolving = initial_state.model_copy(update={"status": GameStatus.RESOLVING})
        with pytest.raises(InvalidMoveError):
            GameEngine.apply_move(resolving, (0, 0))

    def test_out_of_bounds_rejected(self, initial_state):
        with pytest.raises(InvalidMoveError) as exc_info:
            GameEngine.apply_move(initial_state, (6, 0))
        assert exc_info.value.reason == "out_of_bounds"


class TestMultiplayer:
    def test_three_player_rotation(self, config_factory):
        state = GameEngine.create_initial_state(
            config_factory(players=["red", "blue", "green"]), game_id="g3"
        )
        seen = []
        for move in [(0, 4), (5, 4), (3, 0), (1, 4)]:
            seen.append(state.current_player)
            state = GameEngine.apply_move(state, move).state
        assert seen == [0, 1, 2, 0]

    def test_eliminated_player_keeps_seat_by_default(self, state_factory):
        # Player 1 has moved and owns nothing; player 2 still owns a cell.
        state = state_factory(
            players=["red", "blue", "green"],
            cells={(0, 0): (0, 1), (5, 8): (2, 1)},
            has_moved=[True, True, True],
            current_player=0,
        )
        result = GameEngine.apply_move(state, (3, 3))
        assert result.state.current_player == 1
        assert GameEngine.get_eliminated_players(result.state) == [1]
        assert GameEngine.get_alive_players(result.state) == [0, 2]

    def test_skip_eliminated_players(self, state_factory):
        state = state_factory(
            players=["red", "blue", "green"],
            cells={(0, 0): (0, 1), (5, 8): (2, 1)},
            has_moved=[True, True, True],
            current_player=0,
            skip_eliminated_players=True,
        )
        result = GameEngine.apply_move(state, (3, 3))
        assert result.state.current_player == 2

    def test_unmoved_player_is_alive(self, initial_state):
        state = GameEngine.apply_move(initial_state, (0, 0)).state
        assert GameEngine.is_player_alive(state, 1)
        assert GameEngine.get_alive_players(state) == [0, 1]


class TestCascadeCap:
    def test_runaway_cascade_raises(self, state_factory):
        state = state_factory(
            rows=2,
            cols=2,
            cells={(0, 0): (0, 1), (0, 1): (0, 1), (1, 0): (0, 1), (1, 1): (0, 1)},
            has_moved=[True, True],
            max_waves=30,
            stop_cascade_when_decided=False,
        )
        with pytest.raises(CascadeLimitExceeded):
            GameEngine.apply_move(state, (0, 0))

    def test_decided_runaway_stops_by_default(self, state_factory):
        state = state_factory(
            rows=2,
            cols=2,
            cells={(0, 0): (0, 1), (0, 1): (0, 1), (1, 0): (0, 1), (1, 1): (0, 1)},
            has_moved=[True, True],
            max_waves=30,
        )
        result = GameEngine.apply_move(state, (0, 0))
        assert len(result.waves) == 1
        assert result.winner == 0
        assert BoardManager.total_charge(result.state.board) == 5
