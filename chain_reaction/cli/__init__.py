"""Text front end: board/wave rendering and the ``chain-reaction`` command."""

from chain_reaction.cli.main import build_parser, main
from chain_reaction.cli.render import (
    render_board,
    render_charge,
    render_move_result,
    render_wave,
)

__all__ = [
    "build_parser",
    "main",
    "render_board",
    "render_charge",
    "render_move_result",
    "render_wave",
]
