"""
Legality checks for property transactions.

Every check returns a ``RuleCheck`` and leaves the game untouched, so
callers can ask "may I?" before doing anything.
"""

from typing import NamedTuple, Optional

from monopoly_core.board import Board
from monopoly_core.config import GameConfig
from monopoly_core.player import Player
from monopoly_core.rent import RentCalculator
from monopoly_core.spaces import MAX_HOUSES, OwnableSpace, PropertySpace


class RuleCheck(NamedTuple):
    """Outcome of a legality check; ``reason`` is empty when allowed."""

    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = RuleCheck(True, "")


def _denied(reason: str) -> RuleCheck:
    return RuleCheck(False, reason)


class PropertyRules:
    """Purchase, building, mortgage and trade rules."""

    def __init__(
        self,
        board: Board,
        config: Optional[GameConfig] = None,
        rent_calculator: Optional[RentCalculator] = None,
    ):
        self.board = board
        self.config = config or GameConfig()
        self.rent_calculator = rent_calculator or RentCalculator(board)

    def can_purchase(self, player: Optional[Player], space: Optional[OwnableSpace]) -> RuleCheck:
        if player is None or space is None:
            return _denied("Player and space are required")
        if player.is_bankrupt:
            return _denied(f"{player.name} is bankrupt")
        if space.is_owned:
            return _denied(f"{space.name} is already owned")
        if space.is_mortgaged:
            return _denied(f"{space.name} is mortgaged")
        if not player.can_afford(space.price):
            return _denied(f"Insufficient funds: has ${player.money}, needs ${space.price}")
        return ALLOWED

    def can_build_house(self, player: Optional[Player], prop: Optional[PropertySpace]) -> RuleCheck:
        """
        Check if a player can build a house on a property.

        Requirements:
        - Player owns the property and it is not mortgaged
        - No hotel yet and fewer than 4 houses
        - Player owns the whole color group
        - Player can afford the house cost
        - Even build rule: this lot is not above the group minimum
        """
        if player is None or prop is None:
            return _denied("Player and property are required")
        if not player.owns(prop):
            return _denied(f"{player.name} does not own {prop.name}")
        if prop.is_mortgaged:
            return _denied(f"{prop.name} is mortgaged")
        if prop.has_hotel:
            return _denied(f"{prop.name} already has a hotel")
        if prop.houses >= MAX_HOUSES:
            return _denied(f"{prop.name} already has {MAX_HOUSES} houses")
        if not self.rent_calculator.owns_monopoly(player, prop.color_group):
            return _denied(f"{player.name} does not own every {prop.color_group.value} property")
        if not player.can_afford(prop.house_cost):
            return _denied(f"Insufficient funds: has ${player.money}, needs ${prop.house_cost}")

        group = self.board.get_color_group(prop.color_group)
        lowest = min(p.building_level for p in group)
        if prop.building_level > lowest:
            return _denied(f"Houses must be built evenly across the {prop.color_group.value} group")
        return ALLOWED

    def can_build_hotel(self, player: Optional[Player], prop: Optional[PropertySpace]) -> RuleCheck:
        if player is None or prop is None:
            return _denied("Player and property are required")
        if not player.owns(prop):
            return _denied(f"{player.name} does not own {prop.name}")
        if prop.is_mortgaged:
            return _denied(f"{prop.name} is mortgaged")
        if prop.has_hotel:
            return _denied(f"{prop.name} already has a hotel")
        if prop.houses != MAX_HOUSES:
            return _denied(f"{prop.name} needs {MAX_HOUSES} houses before a hotel")
        if not self.rent_calculator.owns_monopoly(player, prop.color_group):
            return _denied(f"{player.name} does not own every {prop.color_group.value} property")
        if not player.can_afford(prop.hotel_cost):
            return _denied(f"Insufficient funds: has ${player.money}, needs ${prop.hotel_cost}")

        group = self.board.get_color_group(prop.color_group)
        if prop.building_level > min(p.building_level for p in group):
            return _denied(f"Houses must be built evenly across the {prop.color_group.value} group")
        return ALLOWED

    def can_sell_building(self, player: Optional[Player], prop: Optional[PropertySpace]) -> RuleCheck:
        """A building may be sold from the most developed lots of a group only."""
        if player is None or prop is None:
            return _denied("Player and property are required")
        if not player.owns(prop):
            return _denied(f"{player.name} does not own {prop.name}")
        if not prop.has_buildings:
            return _denied(f"{prop.name} has no buildings")

        group = self.board.get_color_group(prop.color_group)
        highest = max(p.building_level for p in group)
        if prop.building_level < highest:
            return _denied(f"Buildings must be sold evenly across the {prop.color_group.value} group")
        return ALLOWED

    def can_mortgage(self, player: Optional[Player], space: Optional[OwnableSpace]) -> RuleCheck:
        if player is None or space is None:
            return _denied("Player and space are required")
        if not player.owns(space):
            return _denied(f"{player.name} does not own {space.name}")
        if space.is_mortgaged:
            return _denied(f"{space.name} is already mortgaged")
        if space.has_buildings:
            return _denied(f"Sell the buildings on {space.name} first")
        return ALLOWED

    def can_unmortgage(self, player: Optional[Player], space: Optional[OwnableSpace]) -> RuleCheck:
        if player is None or space is None:
            return _denied("Player and space are required")
        if not player.owns(space):
            return _denied(f"{player.name} does not own {space.name}")
        if not space.is_mortgaged:
            return _denied(f"{space.name} is not mortgaged")
        cost = self.unmortgage_cost(space)
        if not player.can_afford(cost):
            return _denied(f"Insufficient funds: has ${player.money}, needs ${cost}")
        return ALLOWED

    def can_trade_property(self, player: Optional[Player], space: Optional[OwnableSpace]) -> RuleCheck:
        if player is None or space is None:
            return _denied("Player and space are required")
        if not player.owns(space):
            return _denied(f"{player.name} does not own {space.name}")
        if space.is_mortgaged:
            return _denied(f"{space.name} is mortgaged")
        if space.has_buildings:
            return _denied(f"{space.name} has buildings")
        return ALLOWED

    def unmortgage_cost(self, space: OwnableSpace) -> int:
        return space.unmortgage_cost(self.config.mortgage_interest_rate)
