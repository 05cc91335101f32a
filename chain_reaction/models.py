"""
Pydantic Models for Chain Reaction Game State

Field aliases are camelCase so serialised states and waves match what a
browser-side presentation layer consumes.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, Field


class GameStatus(str, Enum):
    """Game status enumeration"""
    AWAITING_MOVE = "awaiting_move"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"
    HALTED = "halted"


class Position(BaseModel):
    """Grid position, zero-based row and column"""
    row: int
    col: int

    class Config:
        frozen = True

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.row},{self.col}"

    @classmethod
    def from_key(cls, key: str) -> "Position":
        row, col = key.split(",")
        return cls(row=int(row), col=int(col))

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


class Cell(BaseModel):
    """Occupied cell. Empty cells are simply absent from the board."""
    owner: int
    charge: int = Field(ge=1)

    class Config:
        frozen = True


class Transfer(BaseModel):
    """One unit of charge moving from an exploding cell to a neighbour.

    ``sequence`` counts transfers within one cascade resolution, starting
    at 0, so replays and animations get stable identifiers.
    """
    sequence: int
    from_pos: Position = Field(alias="from")
    to: Position
    player: int

    class Config:
        populate_by_name = True
        frozen = True


class Wave(BaseModel):
    """Transfers computed against one pre-wave board and applied together"""
    index: int
    transfers: List[Transfer] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def origins(self) -> List[Position]:
        """Distinct exploding positions in first-seen order."""
        return list(dict.fromkeys(t.from_pos for t in self.transfers))

    @property
    def destinations(self) -> List[Position]:
        """Distinct destination positions in first-touched order."""
        return list(dict.fromkeys(t.to for t in self.transfers))


class BoardState(BaseModel):
    """Current board. ``cells`` is keyed by ``Position.to_key()``."""
    rows: int
    cols: int
    cells: Dict[str, Cell] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class ChargeSnapshot(BaseModel):
    """
    Engine-agnostic charge summary. A move adds one charge; each explosion
    then removes the charge the cell held and hands out one per neighbour.
    """
    total: int
    occupied: int
    by_player: Dict[int, int] = Field(default_factory=dict, alias="byPlayer")

    class Config:
        populate_by_name = True


class Player(BaseModel):
    """Player seat"""
    player_number: int = Field(alias="playerNumber")
    name: str
    color: str

    class Config:
        populate_by_name = True
        frozen = True


class Move(BaseModel):
    """A submitted move: the player and the cell they clicked."""
    player: int
    position: Position
    move_number: int = Field(alias="moveNumber")

    class Config:
        populate_by_name = True
        frozen = True


class GameState(BaseModel):
    """Complete game state"""
    id: str
    board: BoardState
    players: List[Player]
    current_player: int = Field(0, alias="currentPlayer")
    has_moved: List[bool] = Field(default_factory=list, alias="hasMoved")
    status: GameStatus = GameStatus.AWAITING_MOVE
    winner: Optional[int] = None
    move_count: int = Field(0, alias="moveCount")
    # Rule options copied from GameConfig at creation
    max_waves: int = Field(10_000, ge=1, alias="maxWaves")
    skip_eliminated_players: bool = Field(False, alias="skipEliminatedPlayers")
    stop_cascade_when_decided: bool = Field(
        True, alias="stopCascadeWhenDecided"
    )

    class Config:
        populate_by_name = True

    @property
    def is_over(self) -> bool:
        return self.status in (GameStatus.GAME_OVER, GameStatus.HALTED)

    @property
    def num_players(self) -> int:
        return len(self.players)


class CascadeResult(BaseModel):
    """Settled board plus the ordered waves that produced it.

    ``initial_board`` is the post-placement board the cascade started from;
    replaying ``waves`` over it reproduces ``board``.
    """
    initial_board: BoardState = Field(alias="initialBoard")
    board: BoardState
    waves: List[Wave] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def transfer_count(self) -> int:
        return sum(len(w.transfers) for w in self.waves)

    def frames(self) -> Iterator[tuple[Wave, BoardState]]:
        """Yield ``(wave, board_after_wave)`` for each wave in order."""
        from .cascade import replay_waves

        return replay_waves(self.initial_board, self.waves)


class MoveResult(BaseModel):
    """What one accepted move produced."""
    state: GameState
    move: Move
    waves: List[Wave] = Field(default_factory=list)
    eliminated: List[int] = Field(default_factory=list)
    winner: Optional[int] = None

    class Config:
        populate_by_name = True
