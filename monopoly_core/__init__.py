"""
Rules-and-state engine for a Monopoly-style board game.

Exposes the game state, rule engines, commands, state machines and the
session facade a presentation layer drives.
"""

from monopoly_core.bankruptcy import BankruptcyHandler
from monopoly_core.board import Board
from monopoly_core.commands import (
    BuildHouseCommand,
    BuyPropertyCommand,
    Card,
    CardProvider,
    Command,
    CommandResult,
    DrawCardCommand,
    EndTurnCommand,
    MortgageCommand,
    MoveCommand,
    PayRentCommand,
    RollDiceCommand,
    SellBuildingCommand,
    TradeCommand,
    TradeOffer,
    UnmortgageCommand,
)
from monopoly_core.config import EngineSettings, GameConfig, configure_logging, get_settings
from monopoly_core.dice import Dice, DiceRoll
from monopoly_core.events import EventBus, Subscription
from monopoly_core.exceptions import (
    CapacityExceededError,
    InvalidArgumentError,
    InvalidTransitionError,
    MonopolyError,
    PreconditionFailedError,
    SnapshotFormatError,
)
from monopoly_core.game import GamePhase, GameState, create_game
from monopoly_core.jail import JailRules, ReleaseMethod
from monopoly_core.player import Player
from monopoly_core.property_rules import PropertyRules, RuleCheck
from monopoly_core.rent import RentCalculator
from monopoly_core.session import GameSession
from monopoly_core.spaces import ColorGroup, OwnableSpace, PropertySpace, RailroadSpace, Space, UtilitySpace
from monopoly_core.state_machine import GameContext, GameFlowState, GameStateMachine, TurnPhase, TurnStateMachine

__all__ = [
    "BankruptcyHandler",
    "Board",
    "BuildHouseCommand",
    "BuyPropertyCommand",
    "Card",
    "CardProvider",
    "CapacityExceededError",
    "ColorGroup",
    "Command",
    "CommandResult",
    "Dice",
    "DiceRoll",
    "DrawCardCommand",
    "EndTurnCommand",
    "EngineSettings",
    "EventBus",
    "GameConfig",
    "GameContext",
    "GameFlowState",
    "GamePhase",
    "GameSession",
    "GameState",
    "GameStateMachine",
    "InvalidArgumentError",
    "InvalidTransitionError",
    "JailRules",
    "MonopolyError",
    "MortgageCommand",
    "MoveCommand",
    "OwnableSpace",
    "PayRentCommand",
    "Player",
    "PreconditionFailedError",
    "PropertyRules",
    "PropertySpace",
    "RailroadSpace",
    "ReleaseMethod",
    "RentCalculator",
    "RollDiceCommand",
    "RuleCheck",
    "SellBuildingCommand",
    "SnapshotFormatError",
    "Space",
    "Subscription",
    "TradeCommand",
    "TradeOffer",
    "TurnPhase",
    "TurnStateMachine",
    "UnmortgageCommand",
    "UtilitySpace",
    "configure_logging",
    "create_game",
    "get_settings",
]
