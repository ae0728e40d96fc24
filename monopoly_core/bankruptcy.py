"""
Bankruptcy settlement.

Rule: 'Houses and Hotels are sold to the Bank at half their original cost
and that player receives any cash.' The debtor's estate then goes to the
creditor, or back to the bank when the debt is owed to the bank.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from monopoly_core.events import MoneyTransferred, PlayerBankrupt
from monopoly_core.exceptions import InvalidArgumentError
from monopoly_core.game import GamePhase, GameState
from monopoly_core.player import Player, transfer_ownership
from monopoly_core.spaces import OwnableSpace, PropertySpace

logger = logging.getLogger(__name__)


@dataclass
class _Settlement:
    properties: List[OwnableSpace]
    cash: int
    building_cash: int
    jail_cards: int
    assets_transferred: int


class BankruptcyHandler:
    """Liquidates a bankrupt player's estate and ends the game when one player is left."""

    def __init__(self, game: GameState):
        self.game = game

    @staticmethod
    def liquidation_value(player: Player) -> int:
        """
        Cash a player could raise without selling to other players.

        Buildings at half cost plus the mortgage value of every
        unmortgaged property.
        """
        total = 0
        for space in player.properties:
            total += space.building_liquidation_value()
            if not space.is_mortgaged:
                total += space.mortgage_value
        return total

    def calculate_total_assets(self, player: Player) -> int:
        return player.money + self.liquidation_value(player)

    def can_pay_debt(self, player: Player, amount: int) -> bool:
        if amount < 0:
            raise InvalidArgumentError("Debt amount cannot be negative")
        return self.calculate_total_assets(player) >= amount

    def active_player_count(self) -> int:
        return self.game.active_player_count

    def is_game_over(self) -> bool:
        return self.game.active_player_count <= 1

    def declare_bankruptcy(self, debtor: Player, creditor: Optional[Player] = None) -> bool:
        """
        Settle ``debtor``'s estate with ``creditor`` (None for the bank).

        Returns:
            False if the debtor was already bankrupt, True otherwise

        Raises:
            InvalidArgumentError: the creditor is the debtor or is bankrupt
        """
        if debtor is None:
            raise InvalidArgumentError("Debtor is required")
        if debtor.is_bankrupt:
            return False
        if creditor is debtor:
            raise InvalidArgumentError("A player cannot be their own creditor")
        if creditor is not None and creditor.is_bankrupt:
            raise InvalidArgumentError(f"Creditor {creditor.name} is already bankrupt")

        settlement = self._plan(debtor)
        self._apply(debtor, creditor, settlement)

        creditor_id = creditor.player_id if creditor else None
        logger.info(
            f"{debtor.name} is bankrupt to {creditor.name if creditor else 'the bank'}, "
            f"assets transferred: ${settlement.assets_transferred}"
        )

        bus = self.game.event_bus
        paid = settlement.cash + settlement.building_cash
        if paid > 0:
            bus.publish(MoneyTransferred(debtor.player_id, creditor_id, paid, "Bankruptcy"))
        bus.publish(PlayerBankrupt(debtor.player_id, creditor_id, settlement.assets_transferred))

        if self.is_game_over() and self.game.phase == GamePhase.PLAYING:
            self.game.end_game()
        return True

    def _plan(self, debtor: Player) -> _Settlement:
        properties = list(debtor.properties)
        building_cash = sum(space.building_liquidation_value() for space in properties)
        return _Settlement(
            properties=properties,
            cash=debtor.money,
            building_cash=building_cash,
            jail_cards=debtor.get_out_of_jail_cards,
            assets_transferred=debtor.money + self.liquidation_value(debtor),
        )

    def _apply(self, debtor: Player, creditor: Optional[Player], settlement: _Settlement) -> None:
        for space in settlement.properties:
            if isinstance(space, PropertySpace):
                space.clear_buildings()
            transfer_ownership(space, creditor)
            if creditor is None:
                space.is_mortgaged = False

        debtor.money = 0
        debtor.get_out_of_jail_cards = 0
        if creditor is not None:
            creditor.add_money(settlement.cash + settlement.building_cash)
            creditor.get_out_of_jail_cards += settlement.jail_cards

        debtor.mark_bankrupt()
