"""Cascade propagation engine.

Resolves the chain reaction triggered by one placement as a sequence of
waves. Within a wave every pending unstable cell explodes against the same
pre-wave board, so an explosion never sees the effect of another explosion
from the same wave. An exploding cell is cleared outright and sends one
charge to each in-bounds neighbour. The destinations a wave touches become
the pending set for the next one, until a wave comes up empty.

Resolution is synchronous and pure: the caller's board is never mutated,
and the returned ``CascadeResult`` carries the settled board plus the full
ordered wave list. Pacing the display of those waves is entirely up to the
consumer.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator

from .board_manager import BoardManager
from .errors import CascadeLimitExceeded, InternalInvariantViolation
from .models import BoardState, CascadeResult, Cell, Position, Transfer, Wave
from .rules.geometry import get_adjacent_positions, is_valid_position
from .rules.stability import is_stable, is_unstable

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_MAX_WAVES",
    "apply_wave",
    "compute_wave",
    "replay_waves",
    "resolve_cascade",
]

# Once the mover owns every occupied cell a cascade can circulate forever;
# the decided-game stop in GameEngine ends those. The cap turns any other
# runaway into a loud failure.
DEFAULT_MAX_WAVES = 10_000


def compute_wave(
    board: BoardState,
    pending: Iterable[Position],
    player: int,
    index: int,
    sequence_start: int = 0,
) -> Wave:
    """Collect the transfers fired by every unstable pending position.

    Stability is checked against ``board`` as it is before the wave;
    nothing is applied here. Transfers are numbered consecutively from
    ``sequence_start``.
    """
    transfers: list[Transfer] = []
    seq = sequence_start
    for pos in pending:
        if not is_valid_position(pos, board.rows, board.cols):
            raise InternalInvariantViolation(
                f"Pending position {pos} is outside the board",
                invariant="cell_in_bounds",
                context={"position": pos.to_key(), "wave": index},
            )
        cell = board.cells.get(pos.to_key())
        if not is_unstable(cell, pos, board.rows, board.cols):
            continue
        for neighbor in get_adjacent_positions(pos, board.rows, board.cols):
            transfers.append(
                Transfer(sequence=seq, from_pos=pos, to=neighbor, player=player)
            )
            seq += 1
    return Wave(index=index, transfers=transfers)


def apply_wave(board: BoardState, wave: Wave) -> BoardState:
    """Return the board after ``wave`` fires, leaving ``board`` untouched.

    Every exploding cell is cleared to empty, whatever charge it held.
    Each transfer then adds one charge to its destination and hands the
    destination to the transfer's player, so a cell hit by several
    transfers in one wave gains one charge per transfer.
    """
    new_board = BoardManager.snapshot(board)
    cells = new_board.cells

    for origin in wave.origins:
        key = origin.to_key()
        if key not in cells:
            raise InternalInvariantViolation(
                f"Exploding cell {origin} is empty",
                invariant="explosion_source_occupied",
                context={"position": key, "wave": wave.index},
            )
        del cells[key]

    for transfer in wave.transfers:
        key = transfer.to.to_key()
        existing = cells.get(key)
        if existing is None:
            cells[key] = Cell(owner=transfer.player, charge=1)
        else:
            cells[key] = Cell(owner=transfer.player, charge=existing.charge + 1)

    return new_board


def resolve_cascade(
    board: BoardState,
    trigger: Position,
    player: int,
    *,
    max_waves: int = DEFAULT_MAX_WAVES,
    stop_when: Callable[[BoardState], bool] | None = None,
) -> CascadeResult:
    """Resolve the full chain reaction started at ``trigger``.

    Args:
        board: Post-placement board. Not mutated.
        trigger: The cell the move just placed into.
        player: The moving player; every transfer carries this identity.
        max_waves: Upper bound on waves before the cascade is declared
            runaway.
        stop_when: Optional predicate checked after each applied wave;
            propagation ends as soon as it returns True.

    Returns:
        CascadeResult with the starting board, settled board and waves.

    Raises:
        CascadeLimitExceeded: more than ``max_waves`` non-empty waves.
        InternalInvariantViolation: the engine reached an impossible state.
    """
    current = BoardManager.snapshot(board)
    waves: list[Wave] = []
    pending: list[Position] = [trigger]
    sequence = 0
    stopped = False

    while True:
        wave = compute_wave(current, pending, player, len(waves), sequence)
        if not wave.transfers:
            break
        if len(waves) >= max_waves:
            raise CascadeLimitExceeded(
                f"Cascade from {trigger} did not settle within {max_waves} waves",
                max_waves=max_waves,
                context={"trigger": trigger.to_key(), "player": player},
            )
        current = apply_wave(current, wave)
        waves.append(wave)
        sequence += len(wave.transfers)
        logger.debug(
            "wave %d: %d explosions, %d transfers",
            wave.index,
            len(wave.origins),
            len(wave.transfers),
        )
        if stop_when is not None and stop_when(current):
            logger.debug("cascade stopped early after wave %d", wave.index)
            stopped = True
            break
        pending = wave.destinations

    if not stopped and not is_stable(current):
        raise InternalInvariantViolation(
            f"Cascade from {trigger} ended on an unstable board",
            invariant="settled_board_stable",
            context={"trigger": trigger.to_key(), "waves": len(waves)},
        )
    BoardManager.assert_board_invariants(current)
    return CascadeResult(initial_board=board, board=current, waves=waves)


def replay_waves(
    board: BoardState, waves: Iterable[Wave]
) -> Iterator[tuple[Wave, BoardState]]:
    """Yield ``(wave, board_after_wave)`` by re-applying ``waves`` in order.

    Presentation layers use this to step through a resolved move one wave
    at a time at their own pace.
    """
    current = board
    for wave in waves:
        current = apply_wave(current, wave)
        yield wave, current
