"""Grid geometry for the rectangular chain reaction board.

Everything here is pure and depends only on the grid dimensions. The
neighbour order (up, down, left, right) is part of the contract: it fixes
the order of transfers inside a wave and therefore the replay sequence.
"""

from __future__ import annotations

from functools import lru_cache

from ..models import Position

__all__ = [
    "DIRECTIONS",
    "capacity",
    "get_adjacent_positions",
    "is_valid_position",
]

# (d_row, d_col): up, down, left, right. No diagonals.
DIRECTIONS: tuple[tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
)


def is_valid_position(position: Position, rows: int, cols: int) -> bool:
    """Return True if ``position`` lies on a ``rows`` x ``cols`` grid."""
    return 0 <= position.row < rows and 0 <= position.col < cols


@lru_cache(maxsize=4096)
def _adjacent_coords(
    row: int, col: int, rows: int, cols: int
) -> tuple[tuple[int, int], ...]:
    coords = []
    for d_row, d_col in DIRECTIONS:
        n_row, n_col = row + d_row, col + d_col
        if 0 <= n_row < rows and 0 <= n_col < cols:
            coords.append((n_row, n_col))
    return tuple(coords)


def get_adjacent_positions(
    position: Position, rows: int, cols: int
) -> list[Position]:
    """In-bounds orthogonal neighbours of ``position`` in DIRECTIONS order."""
    return [
        Position(row=r, col=c)
        for r, c in _adjacent_coords(position.row, position.col, rows, cols)
    ]


def capacity(position: Position, rows: int, cols: int) -> int:
    """Critical mass of ``position``: its count of in-bounds neighbours.

    2 for corners, 3 for edges, 4 for interior cells (on grids at least
    2x2; thinner grids give 1 at the ends of a strip).
    """
    return len(_adjacent_coords(position.row, position.col, rows, cols))

