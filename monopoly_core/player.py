"""
Player state and management.
"""

from typing import List, Optional

from monopoly_core.exceptions import InvalidArgumentError
from monopoly_core.spaces import BOARD_SIZE, OwnableSpace


class Player:
    """Represents the complete state of a player in the game."""

    def __init__(self, player_id: str, name: str, money: int = 1500):
        if not player_id or not player_id.strip():
            raise InvalidArgumentError("Player id cannot be empty")
        if name is None or not name.strip():
            raise InvalidArgumentError("Player name cannot be empty")
        if money < 0:
            raise InvalidArgumentError("Starting money cannot be negative")

        self.player_id = player_id
        self.name = name
        self.money = money
        self._position = 0
        self._bankrupt = False
        self.in_jail = False
        self.jail_turns = 0
        self.get_out_of_jail_cards = 0
        self.properties: List[OwnableSpace] = []

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        if not 0 <= value < BOARD_SIZE:
            raise InvalidArgumentError(f"Position must be 0-{BOARD_SIZE - 1}, got {value}")
        self._position = value

    @property
    def is_bankrupt(self) -> bool:
        return self._bankrupt

    def mark_bankrupt(self) -> None:
        """Eliminate the player. There is no way back."""
        self._bankrupt = True

    def add_money(self, amount: int) -> int:
        """Credit ``amount`` and return the new balance."""
        if amount < 0:
            raise InvalidArgumentError("Amount cannot be negative")
        self.money += amount
        return self.money

    def remove_money(self, amount: int) -> bool:
        """
        Debit ``amount`` from the balance.

        Returns:
            True if successful, False if insufficient funds
        """
        if amount < 0:
            raise InvalidArgumentError("Amount cannot be negative")
        if self.money < amount:
            return False
        self.money -= amount
        return True

    def can_afford(self, amount: int) -> bool:
        return self.money >= amount

    def owns(self, space: Optional[OwnableSpace]) -> bool:
        return space is not None and space.owner is self

    def __repr__(self) -> str:
        return (
            f"Player(id={self.player_id}, name='{self.name}', "
            f"money={self.money}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


def transfer_ownership(space: OwnableSpace, new_owner: Optional[Player]) -> None:
    """
    Move ``space`` to ``new_owner`` (None returns it to the bank).

    Both the previous owner's list and the space's back-reference are
    updated together so no observer sees them disagree.
    """
    previous = space.owner
    if previous is new_owner:
        return
    if previous is not None:
        previous.properties.remove(space)
    if new_owner is not None:
        new_owner.properties.append(space)
    space.owner = new_owner
