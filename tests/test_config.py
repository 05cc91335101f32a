"""Tests for GameConfig construction and environment overrides."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from chain_reaction.cascade import DEFAULT_MAX_WAVES
from chain_reaction.config import GameConfig
from chain_reaction.errors import ConfigurationError


class TestDefaults:
    def test_defaults(self):
        config = GameConfig()
        assert config.rows == 6
        assert config.cols == 9
        assert config.players == ["red", "blue"]
        assert config.num_players == 2
        assert config.max_waves == DEFAULT_MAX_WAVES
        assert config.skip_eliminated_players is False
        assert config.stop_cascade_when_decided is True

    def test_frozen(self):
        config = GameConfig()
        with pytest.raises(ValidationError):
            config.rows = 10

    def test_alias_and_field_names(self):
        a = GameConfig(maxWaves=5, skipEliminatedPlayers=True)
        b = GameConfig(max_waves=5, skip_eliminated_players=True)
        assert a == b

    def test_to_dict(self):
        assert GameConfig().to_dict()["rows"] == 6


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"rows": 1},
            {"cols": 0},
            {"players": ["red"]},
            {"players": ["red", "red"]},
            {"players": ["red", "  "]},
            {"max_waves": 0},
        ],
    )
    def test_build_rejects_invalid(self, kwargs):
        with pytest.raises(ConfigurationError) as exc_info:
            GameConfig.build(**kwargs)
        assert "errors" in exc_info.value.context

    def test_player_names_stripped(self):
        assert GameConfig(players=[" red", "blue "]).players == ["red", "blue"]

    def test_smallest_board(self):
        config = GameConfig.build(rows=2, cols=2)
        assert (config.rows, config.cols) == (2, 2)


class TestFromEnv:
    def test_no_env_gives_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            assert GameConfig.from_env() == GameConfig()

    def test_env_overrides(self):
        env = {
            "CHAIN_REACTION_ROWS": "8",
            "CHAIN_REACTION_COLS": "10",
            "CHAIN_REACTION_PLAYERS": "red, green ,blue",
            "CHAIN_REACTION_MAX_WAVES": "500",
            "CHAIN_REACTION_SKIP_ELIMINATED": "yes",
            "CHAIN_REACTION_STOP_WHEN_DECIDED": "off",
        }
        with patch.dict(os.environ, env, clear=True):
            config = GameConfig.from_env()
        assert config.rows == 8
        assert config.cols == 10
        assert config.players == ["red", "green", "blue"]
        assert config.max_waves == 500
        assert config.skip_eliminated_players is True
        assert config.stop_cascade_when_decided is False

    def test_bad_integer(self):
        with patch.dict(os.environ, {"CHAIN_REACTION_ROWS": "six"}, clear=True):
            with pytest.raises(ConfigurationError):
                GameConfig.from_env()

    def test_out_of_range_value(self):
        with patch.dict(os.environ, {"CHAIN_REACTION_COLS": "1"}, clear=True):
            with pytest.raises(ConfigurationError):
                GameConfig.from_env()
