"""
Rent calculation for ownable spaces.
"""

from typing import Optional

from monopoly_core.board import Board
from monopoly_core.player import Player
from monopoly_core.spaces import ColorGroup, OwnableSpace, PropertySpace, RailroadSpace, UtilitySpace


class RentCalculator:
    """Computes rent owed for landing on a space, given current ownership."""

    def __init__(self, board: Board):
        self.board = board

    def calculate_rent(self, space: Optional[OwnableSpace], dice_roll: int = 0) -> int:
        """
        Calculate the rent owed for landing on a space.

        Args:
            space: Space landed on
            dice_roll: Dice total (needed for utilities)

        Returns:
            Rent amount, 0 for unowned or mortgaged spaces
        """
        if space is None or not space.is_owned or space.is_mortgaged:
            return 0

        if isinstance(space, PropertySpace):
            has_monopoly = self.owns_monopoly(space.owner, space.color_group)
            return space.get_rent(has_monopoly)

        if isinstance(space, RailroadSpace):
            return space.get_rent(self.count_railroads_owned(space.owner))

        if isinstance(space, UtilitySpace):
            return space.get_rent(dice_roll, self.count_utilities_owned(space.owner))

        return 0

    def owns_monopoly(self, player: Optional[Player], color_group: ColorGroup) -> bool:
        """Check if a player owns every property in a color group."""
        if player is None:
            return False
        group = self.board.get_color_group(color_group)
        if not group:
            return False
        return all(prop.owner is player for prop in group)

    def count_railroads_owned(self, player: Optional[Player]) -> int:
        if player is None:
            return 0
        return sum(1 for rr in self.board.get_all_railroads() if rr.owner is player)

    def count_utilities_owned(self, player: Optional[Player]) -> int:
        if player is None:
            return 0
        return sum(1 for u in self.board.get_all_utilities() if u.owner is player)
