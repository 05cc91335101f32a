"""
Shared pytest fixtures for chain reaction tests.

Game state fixtures are function-scoped so every test gets its own values.
"""

import logging
from pathlib import Path
import sys
from typing import Callable, Dict, Optional, Tuple

import pytest

# Ensure the project root is on sys.path so `import chain_reaction` works
# when pytest is run without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chain_reaction.config import GameConfig  # noqa: E402
from chain_reaction.game_engine import GameEngine  # noqa: E402
from chain_reaction.models import BoardState, Cell, GameState, Position  # noqa: E402


CellSpec = Dict[Tuple[int, int], Tuple[int, int]]


# =============================================================================
# LOGGING ISOLATION
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo handler/propagation changes made by setup_logging in a test."""
    yield
    logger = logging.getLogger("chain_reaction")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def config_factory() -> Callable[..., GameConfig]:
    """Factory for GameConfig with small-board friendly defaults."""

    def _create_config(
        rows: int = 6,
        cols: int = 9,
        players: Optional[list] = None,
        **kwargs,
    ) -> GameConfig:
        return GameConfig(
            rows=rows,
            cols=cols,
            players=players or ["red", "blue"],
            **kwargs,
        )

    return _create_config


@pytest.fixture
def board_factory() -> Callable[..., BoardState]:
    """Factory for BoardState from ``{(row, col): (owner, charge)}``."""

    def _create_board(
        rows: int = 6,
        cols: int = 9,
        cells: Optional[CellSpec] = None,
    ) -> BoardState:
        return BoardState(
            rows=rows,
            cols=cols,
            cells={
                Position(row=r, col=c).to_key(): Cell(owner=owner, charge=charge)
                for (r, c), (owner, charge) in (cells or {}).items()
            },
        )

    return _create_board


@pytest.fixture
def state_factory(config_factory, board_factory) -> Callable[..., GameState]:
    """Factory for GameState, optionally seeded with a board."""

    def _create_state(
        rows: int = 6,
        cols: int = 9,
        players: Optional[list] = None,
        cells: Optional[CellSpec] = None,
        current_player: int = 0,
        has_moved: Optional[list] = None,
        game_id: str = "test-game",
        **config_kwargs,
    ) -> GameState:
        config = config_factory(rows=rows, cols=cols, players=players, **config_kwargs)
        state = GameEngine.create_initial_state(config, game_id=game_id)
        return state.model_copy(
            update={
                "board": board_factory(rows, cols, cells),
                "current_player": current_player,
                "has_moved": has_moved or [False] * config.num_players,
            }
        )

    return _create_state


@pytest.fixture
def initial_state(state_factory) -> GameState:
    """Fresh 6x9 two-player game."""
    return state_factory()
