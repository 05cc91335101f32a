"""Pure rules helpers: grid geometry and the stability rule.

These functions take grid dimensions or a ``BoardState`` and never mutate
anything; the board manager, cascade engine and game engine build on them.
"""

from chain_reaction.rules.geometry import (
    DIRECTIONS,
    capacity,
    get_adjacent_positions,
    is_valid_position,
)
from chain_reaction.rules.stability import (
    find_unstable_positions,
    is_stable,
    is_unstable,
)

__all__ = [
    "DIRECTIONS",
    "capacity",
    "find_unstable_positions",
    "get_adjacent_positions",
    "is_stable",
    "is_unstable",
    "is_valid_position",
]
