"""Prometheus metrics for the chain reaction engine.

Counters and histograms live here so the engine and sessions can record
lightweight telemetry without each caller managing its own metric
instances. Labels stay coarse (grid size, outcome) so a local Prometheus
can filter them cheaply.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram


MOVES_TOTAL: Final[Counter] = Counter(
    "chain_reaction_moves_total",
    "Total submitted moves, labeled by grid and outcome.",
    labelnames=("grid", "outcome"),
)

CASCADE_WAVES: Final[Histogram] = Histogram(
    "chain_reaction_cascade_waves",
    "Number of waves per resolved move, labeled by grid.",
    labelnames=("grid",),
    buckets=(0, 1, 2, 5, 10, 20, 50, 100, 250, 1000),
)

CASCADE_TRANSFERS: Final[Histogram] = Histogram(
    "chain_reaction_cascade_transfers",
    "Number of transfers per resolved move, labeled by grid.",
    labelnames=("grid",),
    buckets=(0, 2, 4, 10, 25, 50, 100, 250, 1000, 5000),
)

GAMES_FINISHED: Final[Counter] = Counter(
    "chain_reaction_games_finished_total",
    "Games that reached a winner, labeled by grid and number of players.",
    labelnames=("grid", "num_players"),
)

INVARIANT_VIOLATIONS: Final[Counter] = Counter(
    "chain_reaction_invariant_violations_total",
    "Internal invariant violations that halted a game, labeled by invariant.",
    labelnames=("invariant",),
)


def grid_label(rows: int, cols: int) -> str:
    return f"{rows}x{cols}"


def observe_move(rows: int, cols: int, outcome: str) -> None:
    """Count one submitted move. ``outcome`` is accepted/rejected/fault."""
    MOVES_TOTAL.labels(grid_label(rows, cols), outcome).inc()


def observe_cascade(rows: int, cols: int, waves: int, transfers: int) -> None:
    grid = grid_label(rows, cols)
    CASCADE_WAVES.labels(grid).observe(waves)
    CASCADE_TRANSFERS.labels(grid).observe(transfers)


def observe_game_finished(rows: int, cols: int, num_players: int) -> None:
    GAMES_FINISHED.labels(grid_label(rows, cols), str(num_players)).inc()


def record_invariant_violation(invariant: str | None) -> None:
    INVARIANT_VIOLATIONS.labels(invariant or "unknown").inc()
