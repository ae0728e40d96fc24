"""
Command objects for every player action.

A command validates through the rule engines, applies its change in one
step, publishes events, and can be undone. ``undo`` reverses the most
recent successful ``execute`` and is meant to be called in LIFO order;
it publishes no events. Expected refusals (no money, not your property)
come back as a failed ``CommandResult``, never as an exception.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from monopoly_core.dice import Dice, DiceRoll
from monopoly_core.events import (
    BuildingSold,
    CardDrawn,
    DiceRolled,
    HousePurchased,
    MoneyTransferred,
    PlayerMoved,
    PropertyMortgaged,
    PropertyPurchased,
    PropertyUnmortgaged,
    TradeExecuted,
    TurnEnded,
)
from monopoly_core.exceptions import InvalidArgumentError
from monopoly_core.game import GamePhase, GameState
from monopoly_core.jail import JailRules
from monopoly_core.player import Player, transfer_ownership
from monopoly_core.property_rules import PropertyRules
from monopoly_core.rent import RentCalculator
from monopoly_core.spaces import BOARD_SIZE, MAX_HOUSES, GoToJailSpace, OwnableSpace, PropertySpace

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    success: bool
    error: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data: Any) -> "CommandResult":
        return cls(True, "", data)

    @classmethod
    def failed(cls, error: str, **data: Any) -> "CommandResult":
        return cls(False, error, data)


class Command(ABC):
    """Base class for game commands."""

    command_type = "Command"

    def __init__(self, game: GameState, player: Player):
        if game is None:
            raise InvalidArgumentError("Game is required")
        if player is None:
            raise InvalidArgumentError("Player is required")
        self.game = game
        self.player = player
        self.executed = False

    @abstractmethod
    def execute(self) -> CommandResult:
        pass

    def undo(self) -> None:
        """Reverse the last successful ``execute``. Does nothing otherwise."""
        if not self.executed:
            return
        self._undo()
        self.executed = False

    @abstractmethod
    def _undo(self) -> None:
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.command_type, "player_id": self.player.player_id}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def _publish(self, event) -> None:
        self.game.event_bus.publish(event)

    def _succeeded(self, **data: Any) -> CommandResult:
        self.executed = True
        return CommandResult.ok(**data)


# Player fields a command may touch and must put back on undo
_PlayerMemento = Tuple[int, int, bool, int, int]


def _capture(player: Player) -> _PlayerMemento:
    return (player.money, player.position, player.in_jail, player.jail_turns, player.get_out_of_jail_cards)


def _restore(player: Player, memento: _PlayerMemento) -> None:
    player.money, player.position, player.in_jail, player.jail_turns, player.get_out_of_jail_cards = memento


class RollDiceCommand(Command):
    command_type = "RollDice"

    def __init__(self, game: GameState, player: Player, dice: Optional[Dice] = None):
        super().__init__(game, player)
        self.dice = dice or Dice(seed=game.config.seed)
        self.roll: Optional[DiceRoll] = None

    def execute(self) -> CommandResult:
        if self.player.is_bankrupt:
            return CommandResult.failed(f"{self.player.name} is bankrupt")

        self.roll = self.dice.roll()
        self._publish(
            DiceRolled(
                self.player.player_id,
                self.roll.die1,
                self.roll.die2,
                self.roll.total,
                self.roll.is_doubles,
            )
        )
        return self._succeeded(
            die1=self.roll.die1,
            die2=self.roll.die2,
            total=self.roll.total,
            is_doubles=self.roll.is_doubles,
        )

    def _undo(self) -> None:
        self.roll = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["roll"] = list(self.roll) if self.roll else None
        return data


class MoveCommand(Command):
    """
    Move a player by a number of spaces.

    Moving forward past or onto GO pays the salary. Ending on the Go To
    Jail space sends the player to jail.
    """

    command_type = "Move"

    def __init__(self, game: GameState, player: Player, spaces: int, jail_rules: Optional[JailRules] = None):
        super().__init__(game, player)
        self.spaces = spaces
        self.jail_rules = jail_rules or JailRules(game.config, game.event_bus)
        self.previous_position = player.position
        self.new_position = player.position
        self.passed_go = False
        self.jailed = False
        self._memento: Optional[_PlayerMemento] = None

    def execute(self) -> CommandResult:
        if self.player.is_bankrupt:
            return CommandResult.failed(f"{self.player.name} is bankrupt")

        self._memento = _capture(self.player)
        self.previous_position = self.player.position
        target = self.previous_position + self.spaces
        self.passed_go = self.spaces > 0 and target >= BOARD_SIZE
        self.new_position = target % BOARD_SIZE
        self.jailed = False

        salary = self.game.config.go_salary if self.passed_go else 0
        if salary:
            self.player.add_money(salary)
        self.player.position = self.new_position

        self._publish(PlayerMoved(self.player.player_id, self.previous_position, self.new_position, self.passed_go))
        if salary:
            self._publish(MoneyTransferred(None, self.player.player_id, salary, "Passed GO"))

        if isinstance(self.game.board.get_space(self.new_position), GoToJailSpace):
            self.jailed = self.jail_rules.send_to_jail(self.player, "Landed on Go To Jail")

        return self._succeeded(
            previous_position=self.previous_position,
            new_position=self.player.position,
            passed_go=self.passed_go,
            collected=salary,
            jailed=self.jailed,
        )

    def _undo(self) -> None:
        _restore(self.player, self._memento)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            spaces=self.spaces,
            previous_position=self.previous_position,
            new_position=self.new_position,
            passed_go=self.passed_go,
        )
        return data


class _PropertyCommand(Command):
    """Shared plumbing for commands acting on one ownable space."""

    def __init__(
        self,
        game: GameState,
        player: Player,
        space: OwnableSpace,
        rules: Optional[PropertyRules] = None,
    ):
        super().__init__(game, player)
        if space is None:
            raise InvalidArgumentError("Space is required")
        self.space = space
        self.rules = rules or PropertyRules(game.board, game.config)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(space_index=self.space.position, space_name=self.space.name)
        return data


class BuyPropertyCommand(_PropertyCommand):
    command_type = "BuyProperty"

    def execute(self) -> CommandResult:
        check = self.rules.can_purchase(self.player, self.space)
        if not check:
            return CommandResult.failed(check.reason)

        self.player.remove_money(self.space.price)
        transfer_ownership(self.space, self.player)

        logger.debug(f"{self.player.name} bought {self.space.name} for ${self.space.price}")
        self._publish(
            PropertyPurchased(self.player.player_id, self.space.name, self.space.price, self.player.money)
        )
        return self._succeeded(property_name=self.space.name, price=self.space.price, money=self.player.money)

    def _undo(self) -> None:
        transfer_ownership(self.space, None)
        self.player.add_money(self.space.price)


class BuildHouseCommand(_PropertyCommand):
    """Build a house, or a hotel when the lot already has four houses."""

    command_type = "BuildHouse"

    def __init__(self, game: GameState, player: Player, space: PropertySpace, rules: Optional[PropertyRules] = None):
        super().__init__(game, player, space, rules)
        if not isinstance(space, PropertySpace):
            raise InvalidArgumentError(f"{space.name} cannot hold buildings")
        self.is_hotel = False
        self.cost = 0
        self._previous: Tuple[int, bool] = (space.houses, space.has_hotel)

    def execute(self) -> CommandResult:
        prop = self.space
        self.is_hotel = prop.houses == MAX_HOUSES and not prop.has_hotel
        if self.is_hotel:
            check = self.rules.can_build_hotel(self.player, prop)
        else:
            check = self.rules.can_build_house(self.player, prop)
        if not check:
            return CommandResult.failed(check.reason)

        self._previous = (prop.houses, prop.has_hotel)
        self.cost = prop.hotel_cost if self.is_hotel else prop.house_cost
        self.player.remove_money(self.cost)
        if self.is_hotel:
            prop.houses = 0
            prop.has_hotel = True
        else:
            prop.houses += 1

        self._publish(HousePurchased(self.player.player_id, prop.name, prop.houses, prop.has_hotel, self.cost))
        return self._succeeded(
            property_name=prop.name,
            is_hotel=self.is_hotel,
            house_count=prop.houses,
            cost=self.cost,
            money=self.player.money,
        )

    def _undo(self) -> None:
        self.space.houses, self.space.has_hotel = self._previous
        self.player.add_money(self.cost)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(is_hotel=self.is_hotel, cost=self.cost)
        return data


class SellBuildingCommand(_PropertyCommand):
    """
    Sell one building back to the bank for half its cost.

    A hotel is traded back for four houses.
    """

    command_type = "SellBuilding"

    def __init__(self, game: GameState, player: Player, space: PropertySpace, rules: Optional[PropertyRules] = None):
        super().__init__(game, player, space, rules)
        if not isinstance(space, PropertySpace):
            raise InvalidArgumentError(f"{space.name} cannot hold buildings")
        self.refund = 0
        self.sold_hotel = False
        self._previous: Tuple[int, bool] = (space.houses, space.has_hotel)

    def execute(self) -> CommandResult:
        prop = self.space
        check = self.rules.can_sell_building(self.player, prop)
        if not check:
            return CommandResult.failed(check.reason)

        self._previous = (prop.houses, prop.has_hotel)
        self.sold_hotel = prop.has_hotel
        self.refund = prop.house_cost // 2
        if self.sold_hotel:
            prop.has_hotel = False
            prop.houses = MAX_HOUSES
        else:
            prop.houses -= 1
        self.player.add_money(self.refund)

        self._publish(BuildingSold(self.player.player_id, prop.name, prop.houses, self.sold_hotel, self.refund))
        return self._succeeded(
            property_name=prop.name,
            sold_hotel=self.sold_hotel,
            house_count=prop.houses,
            refund=self.refund,
            money=self.player.money,
        )

    def _undo(self) -> None:
        self.space.houses, self.space.has_hotel = self._previous
        self.player.money -= self.refund


class MortgageCommand(_PropertyCommand):
    command_type = "Mortgage"

    def execute(self) -> CommandResult:
        check = self.rules.can_mortgage(self.player, self.space)
        if not check:
            return CommandResult.failed(check.reason)

        self.space.is_mortgaged = True
        self.player.add_money(self.space.mortgage_value)

        self._publish(PropertyMortgaged(self.player.player_id, self.space.name, self.space.mortgage_value))
        return self._succeeded(
            property_name=self.space.name,
            mortgage_value=self.space.mortgage_value,
            money=self.player.money,
        )

    def _undo(self) -> None:
        self.space.is_mortgaged = False
        self.player.money -= self.space.mortgage_value


class UnmortgageCommand(_PropertyCommand):
    command_type = "Unmortgage"

    def __init__(self, game: GameState, player: Player, space: OwnableSpace, rules: Optional[PropertyRules] = None):
        super().__init__(game, player, space, rules)
        self.cost = 0

    def execute(self) -> CommandResult:
        check = self.rules.can_unmortgage(self.player, self.space)
        if not check:
            return CommandResult.failed(check.reason)

        self.cost = self.rules.unmortgage_cost(self.space)
        self.player.remove_money(self.cost)
        self.space.is_mortgaged = False

        self._publish(PropertyUnmortgaged(self.player.player_id, self.space.name, self.cost))
        return self._succeeded(property_name=self.space.name, cost=self.cost, money=self.player.money)

    def _undo(self) -> None:
        self.space.is_mortgaged = True
        self.player.add_money(self.cost)


class PayRentCommand(Command):
    """
    Pay the owner of the space the player landed on.

    When the player cannot cover the rent nothing changes and the result
    carries ``bankruptcy_required``.
    """

    command_type = "PayRent"

    def __init__(
        self,
        game: GameState,
        player: Player,
        space,
        dice_roll: int = 0,
        rent_calculator: Optional[RentCalculator] = None,
    ):
        super().__init__(game, player)
        if space is None:
            raise InvalidArgumentError("Space is required")
        self.space = space
        self.dice_roll = dice_roll
        self.rent_calculator = rent_calculator or RentCalculator(game.board)
        self.owner: Optional[Player] = None
        self.rent_amount = 0

    def execute(self) -> CommandResult:
        if not isinstance(self.space, OwnableSpace):
            return CommandResult.failed(f"{self.space.name} does not charge rent")

        owner = self.space.owner
        if owner is None or owner is self.player:
            self.owner = None
            self.rent_amount = 0
            return CommandResult.ok(rent_amount=0)

        rent = self.rent_calculator.calculate_rent(self.space, self.dice_roll)
        if rent == 0:
            self.owner = None
            self.rent_amount = 0
            return CommandResult.ok(rent_amount=0)
        if not self.player.can_afford(rent):
            return CommandResult.failed(
                f"Insufficient funds to pay rent of ${rent}. {self.player.name} has ${self.player.money}.",
                rent_amount=rent,
                creditor_id=owner.player_id,
                bankruptcy_required=True,
            )

        self.player.remove_money(rent)
        owner.add_money(rent)
        self.owner = owner
        self.rent_amount = rent

        self._publish(MoneyTransferred(self.player.player_id, owner.player_id, rent, f"Rent for {self.space.name}"))
        return self._succeeded(
            rent_amount=rent,
            owner_id=owner.player_id,
            payer_money=self.player.money,
            owner_money=owner.money,
        )

    def _undo(self) -> None:
        self.owner.money -= self.rent_amount
        self.player.add_money(self.rent_amount)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            space_index=self.space.position,
            rent_amount=self.rent_amount,
            owner_id=self.owner.player_id if self.owner else None,
        )
        return data


@dataclass
class TradeOffer:
    """Items one side of a trade gives away."""

    properties: List[OwnableSpace] = field(default_factory=list)
    money: int = 0
    jail_cards: int = 0

    def is_empty(self) -> bool:
        return not self.properties and self.money == 0 and self.jail_cards == 0

    def __repr__(self) -> str:
        items = []
        if self.money > 0:
            items.append(f"${self.money}")
        if self.properties:
            items.append(f"{len(self.properties)} properties")
        if self.jail_cards > 0:
            items.append(f"{self.jail_cards} GOOJF cards")
        return " + ".join(items) if items else "nothing"


class TradeCommand(Command):
    """Swap properties, cash and jail cards between two players atomically."""

    command_type = "Trade"

    def __init__(
        self,
        game: GameState,
        player1: Player,
        player2: Player,
        offer1: TradeOffer,
        offer2: TradeOffer,
        rules: Optional[PropertyRules] = None,
    ):
        super().__init__(game, player1)
        if player2 is None:
            raise InvalidArgumentError("Trade partner is required")
        if offer1 is None or offer2 is None:
            raise InvalidArgumentError("Both trade offers are required")
        self.player2 = player2
        self.offer1 = offer1
        self.offer2 = offer2
        self.rules = rules or PropertyRules(game.board, game.config)

    @property
    def player1(self) -> Player:
        return self.player

    def validate(self) -> Tuple[bool, str]:
        if self.player1 is self.player2:
            return False, "Cannot trade with yourself"
        for p in (self.player1, self.player2):
            if p.is_bankrupt:
                return False, f"{p.name} is bankrupt"
        for p, offer in ((self.player1, self.offer1), (self.player2, self.offer2)):
            valid, error = self._validate_offer(p, offer)
            if not valid:
                return False, error
        if self.offer1.is_empty() and self.offer2.is_empty():
            return False, "Trade must include at least one item"
        return True, ""

    def _validate_offer(self, player: Player, offer: TradeOffer) -> Tuple[bool, str]:
        if offer.money < 0:
            return False, f"{player.name} cannot offer negative money"
        if offer.money > player.money:
            return False, f"Insufficient cash: {player.name} has ${player.money}, offering ${offer.money}"
        if offer.jail_cards < 0:
            return False, f"{player.name} cannot offer negative cards"
        if offer.jail_cards > player.get_out_of_jail_cards:
            return False, f"{player.name} doesn't have {offer.jail_cards} Get Out of Jail Free cards"
        if len({id(s) for s in offer.properties}) != len(offer.properties):
            return False, "The same property is offered twice"
        for space in offer.properties:
            check = self.rules.can_trade_property(player, space)
            if not check:
                return False, check.reason
        return True, ""

    def execute(self) -> CommandResult:
        valid, error = self.validate()
        if not valid:
            return CommandResult.failed(error)

        self._transfer(self.player1, self.player2, self.offer1)
        self._transfer(self.player2, self.player1, self.offer2)

        names1 = tuple(s.name for s in self.offer1.properties)
        names2 = tuple(s.name for s in self.offer2.properties)
        logger.debug(f"Trade {self.player1.name} ({self.offer1!r}) <-> {self.player2.name} ({self.offer2!r})")
        self._publish(
            TradeExecuted(
                self.player1.player_id,
                self.player2.player_id,
                names1,
                names2,
                self.offer1.money,
                self.offer2.money,
            )
        )
        return self._succeeded(
            player1_gave={"properties": list(names1), "money": self.offer1.money, "jail_cards": self.offer1.jail_cards},
            player2_gave={"properties": list(names2), "money": self.offer2.money, "jail_cards": self.offer2.jail_cards},
        )

    @staticmethod
    def _transfer(giver: Player, receiver: Player, offer: TradeOffer) -> None:
        for space in offer.properties:
            transfer_ownership(space, receiver)
        giver.money -= offer.money
        receiver.money += offer.money
        giver.get_out_of_jail_cards -= offer.jail_cards
        receiver.get_out_of_jail_cards += offer.jail_cards

    def _undo(self) -> None:
        self._transfer(self.player2, self.player1, self.offer1)
        self._transfer(self.player1, self.player2, self.offer2)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            player2_id=self.player2.player_id,
            player1_offer={
                "properties": [s.position for s in self.offer1.properties],
                "money": self.offer1.money,
                "jail_cards": self.offer1.jail_cards,
            },
            player2_offer={
                "properties": [s.position for s in self.offer2.properties],
                "money": self.offer2.money,
                "jail_cards": self.offer2.jail_cards,
            },
        )
        return data


CardEffect = Callable[[GameState, Player], Optional[Dict[str, Any]]]


@dataclass
class Card:
    """A drawn card. ``effect`` is applied to the drawing player."""

    text: str
    deck: str
    effect: Optional[CardEffect] = None


class CardProvider(ABC):
    """Source of cards; deck contents live with the host, not the engine."""

    @abstractmethod
    def draw(self, deck: str) -> Card:
        pass


class DrawCardCommand(Command):
    command_type = "DrawCard"

    def __init__(self, game: GameState, player: Player, provider: CardProvider, deck: str = "chance"):
        super().__init__(game, player)
        if provider is None:
            raise InvalidArgumentError("Card provider is required")
        self.provider = provider
        self.deck = deck
        self.card: Optional[Card] = None
        self._memento: Optional[_PlayerMemento] = None

    def execute(self) -> CommandResult:
        if self.player.is_bankrupt:
            return CommandResult.failed(f"{self.player.name} is bankrupt")

        self.card = self.provider.draw(self.deck)
        self._memento = _capture(self.player)
        self._publish(CardDrawn(self.player.player_id, self.deck, self.card.text))

        outcome = {}
        if self.card.effect is not None:
            outcome = self.card.effect(self.game, self.player) or {}
        return self._succeeded(card_text=self.card.text, deck=self.deck, **outcome)

    def _undo(self) -> None:
        _restore(self.player, self._memento)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(deck=self.deck, card_text=self.card.text if self.card else None)
        return data


class EndTurnCommand(Command):
    """Finish the current player's turn and hand over to the next active player."""

    command_type = "EndTurn"

    def __init__(self, game: GameState, player: Player):
        super().__init__(game, player)
        self._previous: Tuple[int, int, GamePhase] = (game.current_player_index, game.turn_number, game.phase)

    def execute(self) -> CommandResult:
        if self.game.phase != GamePhase.PLAYING:
            return CommandResult.failed("The game is not in progress")
        if self.game.current_player is not self.player:
            return CommandResult.failed(f"It is not {self.player.name}'s turn")

        self._previous = (self.game.current_player_index, self.game.turn_number, self.game.phase)
        self._publish(TurnEnded(self.player.player_id, self.game.turn_number))
        self.game.next_turn()

        current = self.game.current_player
        return self._succeeded(
            next_player_id=current.player_id if current else None,
            turn_number=self.game.turn_number,
        )

    def _undo(self) -> None:
        self.game.current_player_index, self.game.turn_number, self.game.phase = self._previous
