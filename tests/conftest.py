"""Shared test fixtures for monopoly_core tests."""

import pytest

from monopoly_core import Dice, DiceRoll, EventBus, GameConfig, create_game
from monopoly_core.player import transfer_ownership


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def basic_game(game_config, event_bus):
    """Started game with Alice and Bob."""
    return create_game(["Alice", "Bob"], game_config, event_bus)


@pytest.fixture
def four_player_game(game_config, event_bus):
    """Started game with four players."""
    return create_game(["Alice", "Bob", "Charlie", "Diana"], game_config, event_bus)


@pytest.fixture
def give():
    """Hand board positions to a player without charging them."""

    def _give(game, player, *positions):
        for pos in positions:
            transfer_ownership(game.board.get_space(pos), player)

    return _give


class EventRecorder:
    """Collects every event of the subscribed types, in delivery order."""

    def __init__(self, bus, *event_types):
        self.events = []
        for event_type in event_types:
            bus.subscribe(event_type, self.events.append)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def record(event_bus):
    """Factory: ``record(PlayerAdded, ...)`` returns a recorder on the shared bus."""

    def _record(*event_types):
        return EventRecorder(event_bus, *event_types)

    return _record


class LoadedDice(Dice):
    """Dice that return a fixed sequence of rolls."""

    def __init__(self, *rolls):
        super().__init__(seed=0)
        self.rolls = [DiceRoll(a, b) for a, b in rolls]

    def roll(self):
        return self.rolls.pop(0)


@pytest.fixture
def loaded_dice():
    """Factory: ``loaded_dice((3, 4), (2, 2))``."""
    return LoadedDice
