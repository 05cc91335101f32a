"""Chain reaction: a turn-based territorial grid game engine.

Placing into a cell adds charge; a cell that reaches its critical mass
explodes into its neighbours, which can set off further explosions. The
engine resolves each move into an ordered list of waves and a settled
board that a presentation layer can replay at its own pace.
"""

from chain_reaction.board_manager import BoardManager
from chain_reaction.cascade import (
    DEFAULT_MAX_WAVES,
    apply_wave,
    replay_waves,
    resolve_cascade,
)
from chain_reaction.config import GameConfig
from chain_reaction.errors import (
    CascadeLimitExceeded,
    ChainReactionError,
    ConfigurationError,
    InternalInvariantViolation,
    InvalidMoveError,
)
from chain_reaction.game_engine import GameEngine
from chain_reaction.models import (
    BoardState,
    CascadeResult,
    Cell,
    GameState,
    GameStatus,
    Move,
    MoveResult,
    Player,
    Position,
    Transfer,
    Wave,
)
from chain_reaction.session import TurnController

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_MAX_WAVES",
    "BoardManager",
    "BoardState",
    "CascadeLimitExceeded",
    "CascadeResult",
    "Cell",
    "ChainReactionError",
    "ConfigurationError",
    "GameConfig",
    "GameEngine",
    "GameState",
    "GameStatus",
    "InternalInvariantViolation",
    "InvalidMoveError",
    "Move",
    "MoveResult",
    "Player",
    "Position",
    "Transfer",
    "TurnController",
    "Wave",
    "apply_wave",
    "replay_waves",
    "resolve_cascade",
]
