"""
Tests for game configuration and environment-driven settings.
"""

import logging

import pytest
from pydantic import ValidationError

from monopoly_core.config import EngineSettings, GameConfig, configure_logging, get_settings
from monopoly_core.jail import JAIL_FINE, MAX_JAIL_TURNS, JailRules


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_game_config_defaults():
    config = GameConfig()
    assert config.starting_money == 1500
    assert config.go_salary == 200
    assert (config.min_players, config.max_players) == (2, 6)
    assert config.jail_fine == 50
    assert config.max_jail_turns == 3
    assert config.seed is None


def test_jail_defaults_come_from_jail_constants():
    rules = JailRules()
    assert (rules.fine, rules.max_turns) == (JAIL_FINE, MAX_JAIL_TURNS)
    assert (GameConfig().jail_fine, GameConfig().max_jail_turns) == (JAIL_FINE, MAX_JAIL_TURNS)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("MONOPOLY_STARTING_MONEY", "2000")
    monkeypatch.setenv("MONOPOLY_SEED", "7")
    monkeypatch.setenv("MONOPOLY_LOG_LEVEL", "debug")

    settings = EngineSettings()

    assert settings.starting_money == 2000
    assert settings.seed == 7
    assert settings.log_level == "DEBUG"


def test_invalid_log_level_rejected(monkeypatch):
    monkeypatch.setenv("MONOPOLY_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        EngineSettings()


def test_negative_starting_money_rejected(monkeypatch):
    monkeypatch.setenv("MONOPOLY_STARTING_MONEY", "-1")
    with pytest.raises(ValidationError):
        EngineSettings()


def test_config_from_settings(monkeypatch):
    monkeypatch.setenv("MONOPOLY_GO_SALARY", "400")
    config = GameConfig.from_settings()
    assert config.go_salary == 400
    assert config.starting_money == 1500


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_configure_logging_uses_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging(EngineSettings(log_level="warning"))
    assert calls[0]["level"] == logging.WARNING
