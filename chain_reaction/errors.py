"""
Chain Reaction Error Hierarchy

Unified exception hierarchy for the engine. All custom exceptions inherit
from ChainReactionError so callers can catch and filter them in one place.

Usage:
    from chain_reaction.errors import InvalidMoveError

    try:
        result = GameEngine.apply_move(state, position)
    except InvalidMoveError as e:
        logger.warning(f"Rejected move: {e.message}, reason: {e.reason}")
"""

from typing import Any

__all__ = [
    "CascadeLimitExceeded",
    # Base error
    "ChainReactionError",
    "ConfigurationError",
    # Aliases
    "FatalError",
    # Engine faults
    "InternalInvariantViolation",
    # Game rules errors
    "InvalidMoveError",
]


class ChainReactionError(Exception):
    """Base exception for all chain reaction errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "CHAIN_REACTION_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class InvalidMoveError(ChainReactionError):
    """Move that cannot be applied to the current state.

    Raised when the target cell belongs to another player, lies off the
    board, or the game is not waiting for a move (resolving, finished or
    halted). Rejected moves never change state, so callers may retry with
    another position.

    Attributes:
        reason: Short machine-readable reason (e.g. "occupied_by_opponent")
        position: The rejected "row,col" key, when known
        player: The player who attempted the move, when known
    """
    code: str = "INVALID_MOVE"

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        position: str | None = None,
        player: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.reason = reason
        self.position = position
        self.player = player
        if reason:
            self.context["reason"] = reason
        if position is not None:
            self.context["position"] = position
        if player is not None:
            self.context["player"] = player


# =============================================================================
# Engine Faults
# =============================================================================


class InternalInvariantViolation(ChainReactionError):
    """Engine state that should be impossible through normal play.

    Out-of-bounds cells, stored non-positive charge, unknown owners and
    runaway cascades all land here. This signals a bug in the engine, not
    bad input, and the affected game session must halt.
    """
    code: str = "INTERNAL_INVARIANT_VIOLATION"

    def __init__(
        self,
        message: str,
        invariant: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.invariant = invariant
        if invariant:
            self.context["invariant"] = invariant


class CascadeLimitExceeded(InternalInvariantViolation):
    """Cascade did not settle within the configured wave cap."""
    code: str = "CASCADE_LIMIT_EXCEEDED"

    def __init__(
        self,
        message: str,
        max_waves: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, invariant="cascade_converges", context=context)
        self.max_waves = max_waves
        if max_waves is not None:
            self.context["max_waves"] = max_waves


# =============================================================================
# Validation Errors
# =============================================================================


class ConfigurationError(ChainReactionError):
    """Invalid game configuration."""
    code: str = "CONFIGURATION_ERROR"


# More intuitive name for the unrecoverable case
FatalError = InternalInvariantViolation
