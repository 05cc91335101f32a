"""Plain-text rendering of boards and waves.

Each occupied cell prints as the owner's colour initial followed by its
charge (``R2``); empty cells print as ``.``.
"""

from __future__ import annotations

from typing import Sequence

from ..board_manager import BoardManager
from ..models import BoardState, GameState, MoveResult, Player, Position, Wave

CELL_WIDTH = 4


def player_token(player: int, players: Sequence[Player] | None = None) -> str:
    if players and 0 <= player < len(players):
        return players[player].color[:1].upper()
    return str(player)


def render_board(board: BoardState, players: Sequence[Player] | None = None) -> str:
    header = " " * 3 + "".join(f"{c:>{CELL_WIDTH}}" for c in range(board.cols))
    lines = [header]
    for row in range(board.rows):
        tokens = []
        for col in range(board.cols):
            cell = BoardManager.get_cell(Position(row=row, col=col), board)
            if cell is None:
                token = "."
            else:
                token = f"{player_token(cell.owner, players)}{cell.charge}"
            tokens.append(f"{token:>{CELL_WIDTH}}")
        lines.append(f"{row:>3}" + "".join(tokens))
    return "\n".join(lines)


def render_wave(wave: Wave, players: Sequence[Player] | None = None) -> str:
    origins = ", ".join(str(p) for p in wave.origins)
    lines = [f"wave {wave.index}: {len(wave.origins)} explosion(s) at {origins}"]
    for t in wave.transfers:
        lines.append(
            f"  #{t.sequence:<4} {t.from_pos} -> {t.to} "
            f"[{player_token(t.player, players)}]"
        )
    return "\n".join(lines)


def render_charge(board: BoardState, players: Sequence[Player] | None = None) -> str:
    snapshot = BoardManager.compute_charge_snapshot(board)
    line = f"Charge: {snapshot.total} in {snapshot.occupied} cell(s)"
    if snapshot.by_player:
        held = ", ".join(
            f"{player_token(p, players)} {charge}"
            for p, charge in snapshot.by_player.items()
        )
        line += f" ({held})"
    return line


def render_move_result(result: MoveResult, show_waves: bool = True) -> str:
    state: GameState = result.state
    player = state.players[result.move.player]
    parts = [
        f"Move {result.move.move_number}: {player.name} ({player.color}) "
        f"plays {result.move.position}"
    ]
    if show_waves:
        parts.extend(render_wave(w, state.players) for w in result.waves)
    parts.append(render_board(state.board, state.players))
    parts.append(render_charge(state.board, state.players))
    if result.eliminated:
        names = ", ".join(state.players[p].name for p in result.eliminated)
        parts.append(f"Eliminated: {names}")
    if result.winner is not None:
        winner = state.players[result.winner]
        parts.append(f"{winner.name} ({winner.color}) wins!")
    else:
        nxt = state.players[state.current_player]
        parts.append(f"Current turn: {nxt.name} ({nxt.color})")
    return "\n".join(parts)
