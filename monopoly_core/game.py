"""
Main game state and turn bookkeeping.
"""

import dataclasses
import logging
from enum import Enum
from typing import Iterable, List, Optional

from monopoly_core.board import Board
from monopoly_core.config import GameConfig
from monopoly_core.events import EventBus, GameOver, GameStarted, PlayerAdded, StateChanged, TurnChanged
from monopoly_core.exceptions import CapacityExceededError, InvalidArgumentError, PreconditionFailedError
from monopoly_core.player import Player, transfer_ownership
from monopoly_core.spaces import PropertySpace

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Coarse lifecycle stage of a game."""

    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class GameState:
    """
    Represents the complete state of a Monopoly game.

    The game owns its board and its roster. Player order is insertion
    order and doubles as turn order. All notifications go through
    ``event_bus``.
    """

    def __init__(self, config: Optional[GameConfig] = None, event_bus: Optional[EventBus] = None):
        self.config = config or GameConfig()
        self.event_bus = event_bus or EventBus()
        self.board = Board()
        self.players: List[Player] = []
        self.phase = GamePhase.SETUP
        self.current_player_index = 0
        self.turn_number = 0
        self._next_player_number = 0

    # Queries

    @property
    def can_start_game(self) -> bool:
        return self.config.min_players <= len(self.players) <= self.config.max_players

    @property
    def current_player(self) -> Optional[Player]:
        """The player whose turn it is, or None before the game starts."""
        if self.phase == GamePhase.SETUP or not self.players:
            return None
        return self.players[self.current_player_index]

    @property
    def active_players(self) -> List[Player]:
        """All non-bankrupt players, in turn order."""
        return [p for p in self.players if not p.is_bankrupt]

    @property
    def active_player_count(self) -> int:
        return sum(1 for p in self.players if not p.is_bankrupt)

    @property
    def winner(self) -> Optional[Player]:
        """Last player standing once the game is over."""
        if self.phase != GamePhase.GAME_OVER:
            return None
        active = self.active_players
        return active[0] if len(active) == 1 else None

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    # Mutators

    def add_player(self, name: str) -> Player:
        """
        Add a player during setup.

        Duplicate names are disambiguated with a " (2)", " (3)", ... suffix.

        Raises:
            InvalidArgumentError: name is None or blank
            PreconditionFailedError: the game has already started
            CapacityExceededError: the roster is full
        """
        if name is None or not name.strip():
            raise InvalidArgumentError("Player name cannot be empty")
        if self.phase != GamePhase.SETUP:
            raise PreconditionFailedError("Players can only be added during setup")
        if len(self.players) >= self.config.max_players:
            raise CapacityExceededError(f"Cannot add more than {self.config.max_players} players")

        base_name = name.strip()
        unique_name = base_name
        suffix = 2
        taken = {p.name for p in self.players}
        while unique_name in taken:
            unique_name = f"{base_name} ({suffix})"
            suffix += 1

        player = Player(f"player_{self._next_player_number}", unique_name, self.config.starting_money)
        self._next_player_number += 1
        self.players.append(player)

        logger.debug(f"Added player {player.player_id} ({player.name})")
        self.event_bus.publish(PlayerAdded(player.player_id, player.name))
        return player

    def start_game(self) -> None:
        """Move from setup to play with the first player to act."""
        if self.phase != GamePhase.SETUP:
            raise PreconditionFailedError(f"Cannot start a game in phase {self.phase.value}")
        if not self.can_start_game:
            raise PreconditionFailedError(
                f"Cannot start game. Need {self.config.min_players}-{self.config.max_players} players, "
                f"have {len(self.players)}."
            )

        self.phase = GamePhase.PLAYING
        self.current_player_index = 0
        self.turn_number = 0

        logger.info(f"Game started with {len(self.players)} players")
        self.event_bus.publish(StateChanged(self.phase))
        self.event_bus.publish(GameStarted(len(self.players), tuple(p.player_id for p in self.players)))

    def next_turn(self) -> None:
        """
        Advance to the next non-bankrupt player.

        Does nothing unless the game is being played. If every player is
        bankrupt the game ends with no winner.
        """
        if self.phase != GamePhase.PLAYING:
            return

        self.turn_number += 1

        if all(p.is_bankrupt for p in self.players):
            self.end_game()
            return

        count = len(self.players)
        for _ in range(count):
            self.current_player_index = (self.current_player_index + 1) % count
            if not self.players[self.current_player_index].is_bankrupt:
                break

        current = self.players[self.current_player_index]
        self.event_bus.publish(TurnChanged(current.player_id, self.turn_number))

    def end_game(self) -> None:
        """Finish the game. Calling it again once over does nothing."""
        if self.phase == GamePhase.GAME_OVER:
            return

        self.phase = GamePhase.GAME_OVER
        winner = self.winner

        if winner is not None:
            logger.info(f"Game over after {self.turn_number} turns, winner {winner.name}")
        else:
            logger.info(f"Game over after {self.turn_number} turns, no winner")

        self.event_bus.publish(StateChanged(self.phase))
        self.event_bus.publish(
            GameOver(
                winner.player_id if winner else None,
                winner.name if winner else None,
                self.turn_number,
            )
        )

    def reset(self) -> None:
        """Discard the current game and return to an empty setup."""
        self.board = Board()
        self.players = []
        self.phase = GamePhase.SETUP
        self.current_player_index = 0
        self.turn_number = 0
        self._next_player_number = 0
        self.event_bus.publish(StateChanged(self.phase))

    def clone(self) -> "GameState":
        """
        Structural deep copy for what-if evaluation.

        The copy has its own board, players and (empty) event bus; owner
        links are rebuilt against the copied objects.
        """
        copy = GameState(config=dataclasses.replace(self.config))
        copy.phase = self.phase
        copy.current_player_index = self.current_player_index
        copy.turn_number = self.turn_number
        copy._next_player_number = self._next_player_number

        for player in self.players:
            twin = Player(player.player_id, player.name, player.money)
            twin.position = player.position
            if player.is_bankrupt:
                twin.mark_bankrupt()
            twin.in_jail = player.in_jail
            twin.jail_turns = player.jail_turns
            twin.get_out_of_jail_cards = player.get_out_of_jail_cards
            copy.players.append(twin)

            for space in player.properties:
                transfer_ownership(copy.board.get_space(space.position), twin)

        for space in self.board.ownable_spaces():
            target = copy.board.get_space(space.position)
            target.is_mortgaged = space.is_mortgaged
            if isinstance(space, PropertySpace):
                target.houses = space.houses
                target.has_hotel = space.has_hotel

        return copy

    def serialize(self) -> str:
        """Render the game as a JSON snapshot."""
        from monopoly_core.snapshot import serialize_game

        return serialize_game(self)

    @classmethod
    def deserialize(
        cls,
        text: str,
        config: Optional[GameConfig] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "GameState":
        """Rebuild a game from ``serialize`` output."""
        from monopoly_core.snapshot import deserialize_game

        return deserialize_game(text, config=config, event_bus=event_bus)


def create_game(
    player_names: Iterable[str],
    config: Optional[GameConfig] = None,
    event_bus: Optional[EventBus] = None,
    start: bool = True,
) -> GameState:
    """Create a game with the given roster, started unless ``start`` is False."""
    game = GameState(config=config, event_bus=event_bus)
    for name in player_names:
        game.add_player(name)
    if start:
        game.start_game()
    return game
