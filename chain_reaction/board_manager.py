"""Board-level helpers for the chain reaction engine.

``BoardManager`` is side-effect free: callers pass in ``BoardState``
instances and receive derived views or new boards. Boards are treated as
values; ``place_or_increment`` and ``snapshot`` always return a fresh
``BoardState`` and never touch the caller's copy.
"""
from __future__ import annotations

import hashlib
import json

from .errors import InternalInvariantViolation, InvalidMoveError
from .models import BoardState, Cell, ChargeSnapshot, Position
from .rules.geometry import is_valid_position

__all__ = ["BoardManager"]


class BoardManager:
    """Helper for board-level operations.

    Provides:

    - cell queries (owner, charge, empty/occupied),
    - the placement primitive used by a move before its cascade,
    - value-semantics snapshots,
    - board hashing for determinism tests and diagnostics, and
    - structural invariant checks.
    """

    @staticmethod
    def create_empty_board(rows: int, cols: int) -> BoardState:
        return BoardState(rows=rows, cols=cols, cells={})

    @staticmethod
    def get_cell(position: Position, board: BoardState) -> Cell | None:
        """Return the cell at ``position`` or ``None`` if empty."""
        return board.cells.get(position.to_key())

    @staticmethod
    def is_empty(position: Position, board: BoardState) -> bool:
        return position.to_key() not in board.cells

    @staticmethod
    def snapshot(board: BoardState) -> BoardState:
        """Independent copy of ``board``.

        Cells are frozen, so copying the mapping is enough for the copy to
        be fully independent of the original.
        """
        return BoardState(rows=board.rows, cols=board.cols, cells=dict(board.cells))

    @staticmethod
    def place_or_increment(
        board: BoardState, position: Position, player: int
    ) -> BoardState:
        """Return a new board with one unit of ``player`` charge at ``position``.

        An empty target becomes ``{owner: player, charge: 1}``. An occupied
        target gains one charge and its owner is (re)assigned to ``player``;
        for the player's own cell the reassignment changes nothing.

        Raises:
            InvalidMoveError: ``position`` is off the board or owned by a
                different player. ``board`` is left untouched.
        """
        if not is_valid_position(position, board.rows, board.cols):
            raise InvalidMoveError(
                f"Position {position} is outside the {board.rows}x{board.cols} board",
                reason="out_of_bounds",
                position=position.to_key(),
                player=player,
            )
        key = position.to_key()
        existing = board.cells.get(key)
        if existing is not None and existing.owner != player:
            raise InvalidMoveError(
                f"Cell {position} belongs to player {existing.owner}",
                reason="occupied_by_opponent",
                position=key,
                player=player,
            )

        new_board = BoardManager.snapshot(board)
        if existing is None:
            new_board.cells[key] = Cell(owner=player, charge=1)
        else:
            new_board.cells[key] = Cell(owner=player, charge=existing.charge + 1)
        return new_board

    @staticmethod
    def owners(board: BoardState) -> set[int]:
        """Distinct players owning at least one cell."""
        return {cell.owner for cell in board.cells.values()}

    @staticmethod
    def player_cells(board: BoardState, player: int) -> list[Position]:
        positions = [
            Position.from_key(key)
            for key, cell in board.cells.items()
            if cell.owner == player
        ]
        positions.sort(key=lambda p: (p.row, p.col))
        return positions

    @staticmethod
    def total_charge(board: BoardState) -> int:
        return sum(cell.charge for cell in board.cells.values())

    @staticmethod
    def charge_by_player(board: BoardState) -> dict[int, int]:
        """Total charge held by each owner, keyed by player number."""
        by_player: dict[int, int] = {}
        for cell in board.cells.values():
            by_player[cell.owner] = by_player.get(cell.owner, 0) + cell.charge
        return dict(sorted(by_player.items()))

    @staticmethod
    def compute_charge_snapshot(board: BoardState) -> ChargeSnapshot:
        by_player = BoardManager.charge_by_player(board)
        return ChargeSnapshot(
            total=sum(by_player.values()),
            occupied=len(board.cells),
            byPlayer=by_player,
        )

    @staticmethod
    def hash_board(board: BoardState) -> str:
        """
        Canonical fingerprint of ``board``. Two boards hash equal iff they
        have the same dimensions and the same owner/charge in every cell.
        """
        payload = {
            "rows": board.rows,
            "cols": board.cols,
            "cells": sorted(
                (key, cell.owner, cell.charge) for key, cell in board.cells.items()
            ),
        }
        encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()

    @staticmethod
    def assert_board_invariants(
        board: BoardState, num_players: int | None = None
    ) -> None:
        """Raise ``InternalInvariantViolation`` if ``board`` is malformed.

        Checks that every stored cell is on the board, carries positive
        charge, and (when ``num_players`` is given) is owned by a seated
        player.
        """
        for key, cell in board.cells.items():
            try:
                pos = Position.from_key(key)
            except ValueError as exc:
                raise InternalInvariantViolation(
                    f"Malformed cell key {key!r}",
                    invariant="cell_key_format",
                ) from exc
            if not is_valid_position(pos, board.rows, board.cols):
                raise InternalInvariantViolation(
                    f"Cell {key} lies outside the {board.rows}x{board.cols} board",
                    invariant="cell_in_bounds",
                    context={"position": key},
                )
            if cell.charge < 1:
                raise InternalInvariantViolation(
                    f"Cell {key} stores non-positive charge {cell.charge}",
                    invariant="positive_charge",
                    context={"position": key},
                )
            if num_players is not None and not 0 <= cell.owner < num_players:
                raise InternalInvariantViolation(
                    f"Cell {key} owned by unknown player {cell.owner}",
                    invariant="known_owner",
                    context={"position": key},
                )
