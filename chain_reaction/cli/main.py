"""Command-line driver.

Plays a sequence of moves through a ``TurnController`` and prints each
resolved move as text or JSON lines.

Usage:

  chain-reaction play --moves "0,0 5,8 0,0"
  printf '0,0\\n5,8\\n' | chain-reaction play --rows 4 --cols 4 --json

Exit codes:
  0 - all moves applied
  1 - a move was rejected or the configuration is invalid
  2 - internal engine fault (the game halted)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Iterable, TextIO

from ..board_manager import BoardManager
from ..config import GameConfig
from ..core.logging_config import (
    configure_third_party_loggers,
    level_from_env,
    setup_logging,
)
from ..errors import (
    ConfigurationError,
    InternalInvariantViolation,
    InvalidMoveError,
)
from ..models import Position
from ..session import TurnController
from .render import render_board, render_move_result

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_FAULT = 2


def parse_position(token: str) -> Position:
    """Parse ``"row,col"`` into a Position."""
    try:
        row, col = token.strip().split(",")
        return Position(row=int(row), col=int(col))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid position {token!r}, expected row,col"
        ) from exc


def iter_move_tokens(moves: str | None, stream: TextIO) -> Iterable[str]:
    if moves is not None:
        yield from moves.split()
        return
    for line in stream:
        line = line.strip()
        if line and not line.startswith("#"):
            yield from line.split()


def build_config(args: argparse.Namespace) -> GameConfig:
    base = GameConfig.from_env()
    overrides = {}
    if args.rows is not None:
        overrides["rows"] = args.rows
    if args.cols is not None:
        overrides["cols"] = args.cols
    if args.players is not None:
        overrides["players"] = [p for p in args.players.split(",") if p.strip()]
    if args.max_waves is not None:
        overrides["max_waves"] = args.max_waves
    if args.skip_eliminated:
        overrides["skip_eliminated_players"] = True
    if args.keep_resolving:
        overrides["stop_cascade_when_decided"] = False
    if not overrides:
        return base
    return GameConfig.build(**{**base.model_dump(), **overrides})


def cmd_play(args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> int:
    try:
        config = build_config(args)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_REJECTED

    controller = TurnController(config, game_id=args.game_id)
    if not args.json:
        print(render_board(controller.state.board, controller.state.players), file=stdout)

    for token in iter_move_tokens(args.moves, stdin):
        if controller.is_over:
            logger.info("Game over; ignoring remaining moves")
            break
        try:
            position = parse_position(token)
            controller.submit_move(position)
        except argparse.ArgumentTypeError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_REJECTED
        except InvalidMoveError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_REJECTED
        except InternalInvariantViolation as exc:
            print(f"fatal: {exc}", file=sys.stderr)
            return EXIT_FAULT

        result = controller.last_result
        if args.json:
            print(result.model_dump_json(by_alias=True), file=stdout)
        else:
            print(render_move_result(result, show_waves=not args.no_waves), file=stdout)

    if args.json:
        summary = {
            "status": controller.status.value,
            "winner": controller.winner,
            "moveCount": controller.state.move_count,
            "charge": BoardManager.compute_charge_snapshot(
                controller.state.board
            ).model_dump(by_alias=True),
        }
        print(json.dumps(summary), file=stdout)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chain-reaction",
        description="Turn-based chain reaction game engine",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $CHAIN_REACTION_LOG_LEVEL or WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Apply a sequence of moves")
    play.add_argument("--rows", type=int, default=None)
    play.add_argument("--cols", type=int, default=None)
    play.add_argument(
        "--players", default=None, help="Comma-separated player colours"
    )
    play.add_argument("--max-waves", type=int, default=None)
    play.add_argument("--skip-eliminated", action="store_true")
    play.add_argument(
        "--keep-resolving",
        action="store_true",
        help="Keep resolving a cascade after the mover owns the whole board",
    )
    play.add_argument(
        "--moves",
        default=None,
        help='Space-separated "row,col" moves; read from stdin when omitted',
    )
    play.add_argument("--game-id", default=None)
    play.add_argument("--json", action="store_true", help="Emit JSON lines")
    play.add_argument("--no-waves", action="store_true", help="Hide wave detail")
    play.set_defaults(func=cmd_play)
    return parser


def main(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = args.log_level or level_from_env(logging.WARNING)
    setup_logging("chain_reaction", level=level, format_style="compact")
    configure_third_party_loggers(quiet=True)
    return args.func(args, stdin or sys.stdin, stdout or sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
