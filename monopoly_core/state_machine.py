"""
Game flow and turn phase state machines.

Both machines follow the same protocol: legal edges are listed in a
table, and a transition exits the current state, records the edge,
switches, then enters the new state. Each state has a handler with
``enter``/``update``/``exit`` hooks; ``update`` may return the next state
to move to.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from monopoly_core.events import EventBus
from monopoly_core.exceptions import InvalidArgumentError, InvalidTransitionError, PreconditionFailedError
from monopoly_core.game import GamePhase, GameState

logger = logging.getLogger(__name__)


class GameFlowState(Enum):
    MAIN_MENU = "main_menu"
    GAME_SETUP = "game_setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class TurnPhase(Enum):
    ROLL_DICE = "roll_dice"
    MOVE_PIECE = "move_piece"
    TAKE_TURN_ACTION = "take_turn_action"
    END_TURN = "end_turn"


GAME_FLOW_TRANSITIONS: Dict[GameFlowState, FrozenSet[GameFlowState]] = {
    GameFlowState.MAIN_MENU: frozenset({GameFlowState.GAME_SETUP}),
    GameFlowState.GAME_SETUP: frozenset({GameFlowState.PLAYING, GameFlowState.MAIN_MENU}),
    GameFlowState.PLAYING: frozenset({GameFlowState.GAME_OVER}),
    GameFlowState.GAME_OVER: frozenset({GameFlowState.MAIN_MENU}),
}

TURN_TRANSITIONS: Dict[TurnPhase, FrozenSet[TurnPhase]] = {
    TurnPhase.ROLL_DICE: frozenset({TurnPhase.MOVE_PIECE}),
    TurnPhase.MOVE_PIECE: frozenset({TurnPhase.TAKE_TURN_ACTION}),
    TurnPhase.TAKE_TURN_ACTION: frozenset({TurnPhase.END_TURN}),
    TurnPhase.END_TURN: frozenset({TurnPhase.ROLL_DICE}),
}


@dataclass
class GameContext:
    """What state handlers are allowed to touch."""

    game_state: GameState
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def event_bus(self) -> EventBus:
        return self.game_state.event_bus


class StateHandler:
    """Behavior attached to one state. The base class does nothing."""

    def __init__(self, context: GameContext):
        self.context = context

    def enter(self) -> None:
        pass

    def update(self) -> Optional[Enum]:
        return None

    def exit(self) -> None:
        pass


class MainMenuHandler(StateHandler):
    pass


class GameSetupHandler(StateHandler):
    def enter(self) -> None:
        self.context.game_state.reset()


class PlayingHandler(StateHandler):
    def enter(self) -> None:
        game = self.context.game_state
        if game.phase == GamePhase.SETUP:
            game.start_game()

    def update(self) -> Optional[Enum]:
        if self.context.game_state.phase == GamePhase.GAME_OVER:
            return GameFlowState.GAME_OVER
        return None


class GameOverHandler(StateHandler):
    def enter(self) -> None:
        game = self.context.game_state
        if game.phase != GamePhase.GAME_OVER:
            game.end_game()


Listener = Callable[..., None]


class StateMachine:
    """
    Table-driven state machine.

    Subclasses set ``transitions`` and ``initial_state`` and supply a
    handler per state.
    """

    transitions: Dict[Enum, FrozenSet[Enum]] = {}
    initial_state: Enum

    def __init__(self, context: GameContext, handlers: Optional[Dict[Enum, StateHandler]] = None):
        if context is None:
            raise InvalidArgumentError("State machine needs a context")
        self.context = context
        self.handlers: Dict[Enum, StateHandler] = self._default_handlers()
        if handlers:
            self.handlers.update(handlers)
        self.current_state = self.initial_state
        self.history: List[Tuple[Enum, Enum]] = []
        self._enter_listeners: List[Listener] = []
        self._exit_listeners: List[Listener] = []
        self._transition_listeners: List[Listener] = []

    def _default_handlers(self) -> Dict[Enum, StateHandler]:
        return {state: StateHandler(self.context) for state in self.transitions}

    def initialize(self) -> None:
        """Return to the initial state without running any hooks."""
        self.current_state = self.initial_state
        self.history.clear()

    def can_transition_to(self, target: Enum) -> bool:
        return target in self.transitions.get(self.current_state, frozenset())

    def transition_to(self, target: Enum) -> None:
        """
        Move to ``target``.

        Raises:
            InvalidTransitionError: the edge is not in the table
            PreconditionFailedError: the target state refuses to be entered
        """
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.current_state, target)

        source = self.current_state
        self._check_entry(target)
        self.handlers[source].exit()
        self._notify(self._exit_listeners, source)

        self.history.append((source, target))
        self._notify(self._transition_listeners, source, target)
        logger.debug(f"{type(self).__name__}: {source.value} -> {target.value}")

        self.current_state = target
        self.handlers[target].enter()
        self._notify(self._enter_listeners, target)

    def _check_entry(self, target: Enum) -> None:
        """Veto a legal edge before any hook runs. The base machine allows all."""

    def update(self) -> None:
        """Run the current state's update hook and follow any transition it asks for."""
        target = self.handlers[self.current_state].update()
        if target is not None and target != self.current_state:
            self.transition_to(target)

    def add_enter_listener(self, listener: Listener) -> None:
        self._enter_listeners.append(listener)

    def add_exit_listener(self, listener: Listener) -> None:
        self._exit_listeners.append(listener)

    def add_transition_listener(self, listener: Listener) -> None:
        self._transition_listeners.append(listener)

    @staticmethod
    def _notify(listeners: List[Listener], *args) -> None:
        for listener in list(listeners):
            try:
                listener(*args)
            except Exception:
                logger.exception(f"State listener {listener!r} failed")


class GameStateMachine(StateMachine):
    """Top-level flow: main menu, setup, playing, game over."""

    transitions = GAME_FLOW_TRANSITIONS
    initial_state = GameFlowState.MAIN_MENU

    def _default_handlers(self) -> Dict[Enum, StateHandler]:
        return {
            GameFlowState.MAIN_MENU: MainMenuHandler(self.context),
            GameFlowState.GAME_SETUP: GameSetupHandler(self.context),
            GameFlowState.PLAYING: PlayingHandler(self.context),
            GameFlowState.GAME_OVER: GameOverHandler(self.context),
        }

    def _check_entry(self, target: Enum) -> None:
        game = self.context.game_state
        if target == GameFlowState.PLAYING and game.phase == GamePhase.SETUP and not game.can_start_game:
            raise PreconditionFailedError(
                f"Need {game.config.min_players}-{game.config.max_players} players, have {len(game.players)}"
            )


class TurnStateMachine(StateMachine):
    """Phases of a single turn, cycling back to the dice roll."""

    transitions = TURN_TRANSITIONS
    initial_state = TurnPhase.ROLL_DICE

    def advance(self) -> TurnPhase:
        """Move to the only successor of the current phase."""
        (target,) = self.transitions[self.current_state]
        self.transition_to(target)
        return target
