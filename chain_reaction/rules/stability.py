"""Stability rule: when a cell explodes."""

from __future__ import annotations

from ..models import BoardState, Cell, Position
from .geometry import capacity


def is_unstable(
    cell: Cell | None, position: Position, rows: int, cols: int
) -> bool:
    """True iff ``cell`` is occupied and has reached its critical mass."""
    if cell is None:
        return False
    return cell.charge >= capacity(position, rows, cols)


def find_unstable_positions(board: BoardState) -> list[Position]:
    """Every unstable cell on ``board`` in row-major order."""
    unstable = []
    for key, cell in board.cells.items():
        pos = Position.from_key(key)
        if is_unstable(cell, pos, board.rows, board.cols):
            unstable.append(pos)
    unstable.sort(key=lambda p: (p.row, p.col))
    return unstable


def is_stable(board: BoardState) -> bool:
    return not find_unstable_positions(board)
