"""
Jail rules: going in, and the three ways out.
"""

import logging
from enum import Enum
from typing import Optional

from monopoly_core.config import JAIL_FINE, MAX_JAIL_TURNS, GameConfig
from monopoly_core.events import EventBus, MoneyTransferred, PlayerJailed, PlayerReleasedFromJail
from monopoly_core.exceptions import InvalidArgumentError
from monopoly_core.player import Player

logger = logging.getLogger(__name__)

JAIL_POSITION = 10


class ReleaseMethod(Enum):
    ROLLED_DOUBLES = "rolled_doubles"
    PAID_FINE = "paid_fine"
    FORCED_PAYMENT = "forced_payment"
    CARD = "get_out_of_jail_free_card"


def _check_die(value: int) -> None:
    if not 1 <= value <= 6:
        raise InvalidArgumentError(f"Die value must be 1-6, got {value}")


class JailRules:
    """
    Handles jail-related game rules.

    The fine and the turn limit come from ``config``; a player who fails
    to roll doubles on the last allowed turn pays the fine automatically
    if they can.
    """

    def __init__(self, config: Optional[GameConfig] = None, event_bus: Optional[EventBus] = None):
        self.config = config or GameConfig()
        self.event_bus = event_bus

    @property
    def fine(self) -> int:
        return self.config.jail_fine

    @property
    def max_turns(self) -> int:
        return self.config.max_jail_turns

    def send_to_jail(self, player: Player, reason: str = "Go To Jail") -> bool:
        """Move a player to jail. Bankrupt players are left alone."""
        if player is None:
            raise InvalidArgumentError("Player is required")
        if player.is_bankrupt:
            return False

        player.in_jail = True
        player.jail_turns = 0
        player.position = JAIL_POSITION

        logger.debug(f"{player.name} sent to jail: {reason}")
        self._publish(PlayerJailed(player.player_id, reason))
        return True

    def try_escape_by_rolling_doubles(self, player: Player, die1: int, die2: int) -> bool:
        """
        Attempt to leave jail with a roll.

        Doubles release the player. Otherwise the jail turn counter goes up
        and, once it reaches the limit, the fine is charged if affordable.

        Returns:
            True if the player is out of jail
        """
        if player is None:
            raise InvalidArgumentError("Player is required")
        _check_die(die1)
        _check_die(die2)
        if not player.in_jail:
            return False

        if die1 == die2:
            self._release(player, ReleaseMethod.ROLLED_DOUBLES)
            return True

        player.jail_turns += 1
        if player.jail_turns >= self.max_turns:
            if self._charge_fine(player):
                self._release(player, ReleaseMethod.FORCED_PAYMENT)
                return True
            # Can't pay: the player has to raise funds or go bankrupt
            player.jail_turns = self.max_turns
        return False

    def pay_to_get_out_of_jail(self, player: Player) -> bool:
        if player is None:
            raise InvalidArgumentError("Player is required")
        if not player.in_jail:
            return False
        if not self._charge_fine(player):
            return False
        self._release(player, ReleaseMethod.PAID_FINE)
        return True

    def use_get_out_of_jail_free_card(self, player: Player) -> bool:
        if player is None:
            raise InvalidArgumentError("Player is required")
        if not player.in_jail or player.get_out_of_jail_cards <= 0:
            return False
        player.get_out_of_jail_cards -= 1
        self._release(player, ReleaseMethod.CARD)
        return True

    def can_take_normal_actions(self, player: Player) -> bool:
        if player is None:
            raise InvalidArgumentError("Player is required")
        return not player.in_jail

    def turns_until_forced_release(self, player: Player) -> int:
        """Turns left before the fine becomes mandatory, 0 when not jailed."""
        if player is None:
            raise InvalidArgumentError("Player is required")
        if not player.in_jail:
            return 0
        return max(0, self.max_turns - player.jail_turns)

    def _charge_fine(self, player: Player) -> bool:
        if not player.remove_money(self.fine):
            return False
        self._publish(MoneyTransferred(player.player_id, None, self.fine, "Jail fine"))
        return True

    def _release(self, player: Player, method: ReleaseMethod) -> None:
        player.in_jail = False
        player.jail_turns = 0
        logger.debug(f"{player.name} released from jail ({method.value})")
        self._publish(PlayerReleasedFromJail(player.player_id, method))

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)
