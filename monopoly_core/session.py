"""
GameSession: the single entry point a UI host talks to.

The session owns the game, the event bus and both state machines, turns
user intents into commands, and keeps the turn phase in step with what
the player has done. Presentation code subscribes to ``event_bus`` and
never mutates game objects directly.
"""

import logging
from typing import Any, Dict, List, Optional

from monopoly_core.bankruptcy import BankruptcyHandler
from monopoly_core.commands import (
    BuildHouseCommand,
    BuyPropertyCommand,
    Command,
    CommandResult,
    EndTurnCommand,
    MortgageCommand,
    MoveCommand,
    PayRentCommand,
    RollDiceCommand,
    SellBuildingCommand,
    UnmortgageCommand,
)
from monopoly_core.config import GameConfig
from monopoly_core.dice import Dice, DiceRoll
from monopoly_core.events import EventBus, TurnStarted
from monopoly_core.exceptions import InvalidArgumentError, PreconditionFailedError
from monopoly_core.game import GamePhase, GameState
from monopoly_core.jail import JailRules
from monopoly_core.player import Player
from monopoly_core.property_rules import PropertyRules
from monopoly_core.rent import RentCalculator
from monopoly_core.state_machine import (
    GameContext,
    GameFlowState,
    GameStateMachine,
    TurnPhase,
    TurnStateMachine,
)

logger = logging.getLogger(__name__)


class GameSession:
    """Facade wiring game state, rules, commands and state machines together."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        event_bus: Optional[EventBus] = None,
        dice: Optional[Dice] = None,
    ):
        self.config = config or GameConfig()
        self.event_bus = event_bus or EventBus()
        self.dice = dice or Dice(seed=self.config.seed)
        self.game = GameState(self.config, self.event_bus)
        self.context = GameContext(self.game)
        self.game_machine = GameStateMachine(self.context)
        self.turn_machine = TurnStateMachine(self.context)
        self.jail_rules = JailRules(self.config, self.event_bus)
        self.bankruptcy = BankruptcyHandler(self.game)
        self.last_roll: Optional[DiceRoll] = None
        self.command_log: List[Dict[str, Any]] = []

    # Rule engines are rebuilt on demand because ``GameState.reset`` swaps the board.

    @property
    def rent_calculator(self) -> RentCalculator:
        return RentCalculator(self.game.board)

    @property
    def property_rules(self) -> PropertyRules:
        return PropertyRules(self.game.board, self.config, self.rent_calculator)

    @property
    def flow_state(self) -> GameFlowState:
        return self.game_machine.current_state

    @property
    def turn_phase(self) -> TurnPhase:
        return self.turn_machine.current_state

    @property
    def current_player(self) -> Optional[Player]:
        return self.game.current_player

    # Lifecycle

    def new_game(self) -> None:
        """Open a fresh setup screen, discarding any finished or unstarted game."""
        state = self.flow_state
        if state == GameFlowState.PLAYING:
            raise PreconditionFailedError("A game is in progress")
        if state == GameFlowState.GAME_OVER:
            self.game_machine.transition_to(GameFlowState.MAIN_MENU)
        if self.flow_state == GameFlowState.MAIN_MENU:
            self.game_machine.transition_to(GameFlowState.GAME_SETUP)
        else:
            self.game.reset()
        self.last_roll = None
        self.command_log.clear()

    def add_player(self, name: str) -> Player:
        if self.flow_state != GameFlowState.GAME_SETUP:
            raise PreconditionFailedError("Players can only be added from the setup screen")
        return self.game.add_player(name)

    def start_game(self) -> None:
        if self.flow_state != GameFlowState.GAME_SETUP:
            raise PreconditionFailedError("Start a new game first")
        if not self.game.can_start_game:
            raise PreconditionFailedError(
                f"Need {self.config.min_players}-{self.config.max_players} players, have {len(self.game.players)}"
            )
        self.game_machine.transition_to(GameFlowState.PLAYING)
        self._begin_turn()

    def return_to_main_menu(self) -> None:
        self.game_machine.transition_to(GameFlowState.MAIN_MENU)
        self.turn_machine.initialize()

    # Turn actions

    def roll_dice(self) -> CommandResult:
        """
        Roll for the current player and move them.

        A jailed player uses the roll to try for doubles and only moves if
        released.
        """
        player = self._require_turn_phase(TurnPhase.ROLL_DICE)
        roll_command = RollDiceCommand(self.game, player, self.dice)
        result = self._run(roll_command)
        if not result.success:
            return result

        self.last_roll = roll_command.roll
        self.turn_machine.advance()

        if player.in_jail:
            die1, die2 = self.last_roll
            released = self.jail_rules.try_escape_by_rolling_doubles(player, die1, die2)
            if not released:
                self.turn_machine.advance()
                result.data.update(moved=False, in_jail=True)
                return result

        move = self._run(MoveCommand(self.game, player, self.last_roll.total, self.jail_rules))
        self.turn_machine.advance()
        result.data.update(moved=True, **move.data)
        return result

    def buy_current_property(self) -> CommandResult:
        player = self._require_turn_phase(TurnPhase.TAKE_TURN_ACTION)
        space = self.game.board.get_ownable_space(player.position)
        if space is None:
            return CommandResult.failed(f"{self.game.board.get_space(player.position).name} is not for sale")
        return self._run(BuyPropertyCommand(self.game, player, space, self.property_rules))

    def pay_rent_for_current_space(self) -> CommandResult:
        player = self._require_turn_phase(TurnPhase.TAKE_TURN_ACTION)
        space = self.game.board.get_space(player.position)
        dice_total = self.last_roll.total if self.last_roll else 0
        return self._run(PayRentCommand(self.game, player, space, dice_total, self.rent_calculator))

    def build_house(self, position: int) -> CommandResult:
        player = self._require_playing()
        prop = self.game.board.get_property_space(position)
        if prop is None:
            return CommandResult.failed(f"Cannot build on {self.game.board.get_space(position).name}")
        return self._run(BuildHouseCommand(self.game, player, prop, self.property_rules))

    def sell_building(self, position: int) -> CommandResult:
        player = self._require_playing()
        prop = self.game.board.get_property_space(position)
        if prop is None:
            return CommandResult.failed(f"{self.game.board.get_space(position).name} has no buildings")
        return self._run(SellBuildingCommand(self.game, player, prop, self.property_rules))

    def mortgage(self, position: int) -> CommandResult:
        player = self._require_playing()
        space = self.game.board.get_ownable_space(position)
        if space is None:
            return CommandResult.failed(f"{self.game.board.get_space(position).name} cannot be mortgaged")
        return self._run(MortgageCommand(self.game, player, space, self.property_rules))

    def unmortgage(self, position: int) -> CommandResult:
        player = self._require_playing()
        space = self.game.board.get_ownable_space(position)
        if space is None:
            return CommandResult.failed(f"{self.game.board.get_space(position).name} cannot be mortgaged")
        return self._run(UnmortgageCommand(self.game, player, space, self.property_rules))

    def end_turn(self) -> CommandResult:
        player = self._require_turn_phase(TurnPhase.TAKE_TURN_ACTION)
        self.turn_machine.advance()
        result = self._run(EndTurnCommand(self.game, player))
        self.turn_machine.advance()
        self.last_roll = None

        if self.game.phase == GamePhase.GAME_OVER:
            self.game_machine.update()
        else:
            self._announce_turn()
        return result

    def declare_bankruptcy(self, creditor_id: Optional[str] = None) -> bool:
        """
        Bankrupt the current player in favor of ``creditor_id`` (None for the bank).

        Play passes to the next active player, or the session moves to the
        game over screen when one player is left.
        """
        debtor = self._require_playing()
        creditor = None
        if creditor_id is not None:
            creditor = self.game.get_player(creditor_id)
            if creditor is None:
                raise InvalidArgumentError(f"Unknown player: {creditor_id}")

        if not self.bankruptcy.declare_bankruptcy(debtor, creditor):
            return False

        if self.game.phase == GamePhase.GAME_OVER:
            self.game_machine.update()
        else:
            self.game.next_turn()
            self._begin_turn()
        return True

    # Internals

    def _run(self, command: Command) -> CommandResult:
        result = command.execute()
        if command.executed:
            self.command_log.append(command.to_dict())
        elif not result.success:
            logger.debug(f"{command.command_type} refused: {result.error}")
        return result

    def _require_playing(self) -> Player:
        if self.flow_state != GameFlowState.PLAYING or self.game.phase != GamePhase.PLAYING:
            raise PreconditionFailedError("No game in progress")
        return self.game.current_player

    def _require_turn_phase(self, phase: TurnPhase) -> Player:
        player = self._require_playing()
        if self.turn_phase != phase:
            raise PreconditionFailedError(f"Expected turn phase {phase.value}, currently {self.turn_phase.value}")
        return player

    def _begin_turn(self) -> None:
        self.turn_machine.initialize()
        self.last_roll = None
        self._announce_turn()

    def _announce_turn(self) -> None:
        current = self.game.current_player
        if current is not None:
            self.event_bus.publish(TurnStarted(current.player_id, self.game.turn_number))
