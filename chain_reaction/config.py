"""Game configuration.

``GameConfig`` is fixed at construction: grid size, the ordered player
colours, the runaway-cascade cap and two rule toggles. It can be
built directly or from ``CHAIN_REACTION_*`` environment variables.

Usage:
    from chain_reaction.config import GameConfig

    config = GameConfig(rows=6, cols=9, players=["red", "blue", "green"])
    config = GameConfig.from_env()   # CHAIN_REACTION_ROWS=8 etc.
"""

from __future__ import annotations

import os
from typing import Any, ClassVar, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from .cascade import DEFAULT_MAX_WAVES
from .errors import ConfigurationError

__all__ = [
    "DEFAULT_COLS",
    "DEFAULT_PLAYERS",
    "DEFAULT_ROWS",
    "GameConfig",
]

DEFAULT_ROWS = 6
DEFAULT_COLS = 9
DEFAULT_PLAYERS: tuple[str, ...] = ("red", "blue")

_TRUTHY = ("true", "1", "yes", "on")


class GameConfig(BaseModel):
    """Configuration for one game."""

    _env_prefix: ClassVar[str] = "CHAIN_REACTION"

    rows: int = Field(DEFAULT_ROWS, ge=2)
    cols: int = Field(DEFAULT_COLS, ge=2)
    players: List[str] = Field(default_factory=lambda: list(DEFAULT_PLAYERS))
    max_waves: int = Field(DEFAULT_MAX_WAVES, ge=1, alias="maxWaves")
    # Pass the turn over players who have moved and own nothing.
    skip_eliminated_players: bool = Field(False, alias="skipEliminatedPlayers")
    # End a cascade as soon as the mover is the only owner left on the board
    # and everyone has moved. A decided board often never settles.
    stop_cascade_when_decided: bool = Field(True, alias="stopCascadeWhenDecided")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("players")
    @classmethod
    def _check_players(cls, players: List[str]) -> List[str]:
        cleaned = [p.strip() for p in players]
        if len(cleaned) < 2:
            raise ValueError("at least two players are required")
        if any(not p for p in cleaned):
            raise ValueError("player names must be non-empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("player names must be unique")
        return cleaned

    @property
    def num_players(self) -> int:
        return len(self.players)

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @classmethod
    def build(cls, **kwargs: Any) -> "GameConfig":
        """Construct a config, raising ``ConfigurationError`` when invalid."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid game configuration",
                context={"errors": "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in exc.errors()
                )},
            ) from exc

    @classmethod
    def _make_env_key(cls, suffix: str) -> str:
        return f"{cls._env_prefix}_{suffix}"

    @classmethod
    def _get_env_int(cls, suffix: str, default: int) -> int:
        key = cls._make_env_key(suffix)
        value = os.environ.get(key)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigurationError(
                f"{key} must be an integer", context={"value": value}
            ) from exc

    @classmethod
    def _get_env_bool(cls, suffix: str, default: bool) -> bool:
        value = os.environ.get(cls._make_env_key(suffix))
        if value is None:
            return default
        return value.lower() in _TRUTHY

    @classmethod
    def _get_env_list(cls, suffix: str, default: list[str]) -> list[str]:
        value = os.environ.get(cls._make_env_key(suffix))
        if value is None:
            return default
        return [item.strip() for item in value.split(",") if item.strip()]

    @classmethod
    def from_env(cls) -> "GameConfig":
        """Create config from ``CHAIN_REACTION_*`` environment variables."""
        return cls.build(
            rows=cls._get_env_int("ROWS", DEFAULT_ROWS),
            cols=cls._get_env_int("COLS", DEFAULT_COLS),
            players=cls._get_env_list("PLAYERS", list(DEFAULT_PLAYERS)),
            max_waves=cls._get_env_int("MAX_WAVES", DEFAULT_MAX_WAVES),
            skip_eliminated_players=cls._get_env_bool("SKIP_ELIMINATED", False),
            stop_cascade_when_decided=cls._get_env_bool("STOP_WHEN_DECIDED", True),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for logging/serialization."""
        return self.model_dump()
