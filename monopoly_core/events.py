"""
Game event records and the publish/subscribe bus.

Every event is an immutable dataclass. The presentation layer subscribes
to the types it cares about and never mutates game objects directly.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from monopoly_core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerAdded:
    player_id: str
    name: str


@dataclass(frozen=True)
class StateChanged:
    phase: Any


@dataclass(frozen=True)
class TurnChanged:
    player_id: str
    turn_number: int


@dataclass(frozen=True)
class PlayerMoved:
    player_id: str
    from_position: int
    to_position: int
    passed_go: bool = False


@dataclass(frozen=True)
class PropertyPurchased:
    player_id: str
    property_name: str
    price: int
    money_remaining: int


@dataclass(frozen=True)
class MoneyTransferred:
    """Cash movement; a ``None`` side is the bank."""

    from_player_id: Optional[str]
    to_player_id: Optional[str]
    amount: int
    reason: str


@dataclass(frozen=True)
class PlayerBankrupt:
    player_id: str
    creditor_id: Optional[str]
    assets_transferred: int


@dataclass(frozen=True)
class GameStarted:
    player_count: int
    player_ids: Tuple[str, ...]


@dataclass(frozen=True)
class GameOver:
    winner_id: Optional[str]
    winner_name: Optional[str]
    total_turns: int


@dataclass(frozen=True)
class TurnStarted:
    player_id: str
    turn_number: int


@dataclass(frozen=True)
class TurnEnded:
    player_id: str
    turn_number: int


@dataclass(frozen=True)
class DiceRolled:
    player_id: str
    die1: int
    die2: int
    total: int
    is_doubles: bool


@dataclass(frozen=True)
class HousePurchased:
    player_id: str
    property_name: str
    house_count: int
    is_hotel: bool
    cost: int


@dataclass(frozen=True)
class BuildingSold:
    player_id: str
    property_name: str
    house_count: int
    is_hotel: bool
    refund: int


@dataclass(frozen=True)
class PropertyMortgaged:
    player_id: str
    property_name: str
    mortgage_value: int


@dataclass(frozen=True)
class PropertyUnmortgaged:
    player_id: str
    property_name: str
    cost: int


@dataclass(frozen=True)
class TradeExecuted:
    player1_id: str
    player2_id: str
    player1_properties: Tuple[str, ...]
    player2_properties: Tuple[str, ...]
    player1_money: int
    player2_money: int


@dataclass(frozen=True)
class CardDrawn:
    player_id: str
    deck: str
    card_text: str


@dataclass(frozen=True)
class PlayerJailed:
    player_id: str
    reason: str


@dataclass(frozen=True)
class PlayerReleasedFromJail:
    player_id: str
    method: Any


EVENT_TYPES = frozenset(
    {
        PlayerAdded,
        StateChanged,
        TurnChanged,
        PlayerMoved,
        PropertyPurchased,
        MoneyTransferred,
        PlayerBankrupt,
        GameStarted,
        GameOver,
        TurnStarted,
        TurnEnded,
        DiceRolled,
        HousePurchased,
        BuildingSold,
        PropertyMortgaged,
        PropertyUnmortgaged,
        TradeExecuted,
        CardDrawn,
        PlayerJailed,
        PlayerReleasedFromJail,
    }
)

Handler = Callable[[Any], None]


class Subscription:
    """Opaque handle returned by ``EventBus.subscribe``."""

    __slots__ = ("event_type", "handler")

    def __init__(self, event_type: Type, handler: Handler):
        self.event_type = event_type
        self.handler = handler

    def __repr__(self) -> str:
        name = getattr(self.handler, "__qualname__", repr(self.handler))
        return f"Subscription({self.event_type.__name__}, {name})"


class EventBus:
    """
    Typed publish/subscribe channel.

    Subscriber lists are immutable tuples replaced under ``_lock`` on every
    change, so a publish reads one reference and dispatches from that
    snapshot. ``_dispatch_lock`` keeps events of a type in publish order
    across threads; it is reentrant so handlers may publish.
    """

    def __init__(self):
        self._subscribers: Dict[Type, Tuple[Subscription, ...]] = {}
        self._lock = threading.Lock()
        self._dispatch_lock = threading.RLock()

    def subscribe(self, event_type: Type, handler: Handler) -> Subscription:
        """Register ``handler`` for ``event_type`` and return its handle."""
        if event_type not in EVENT_TYPES:
            raise InvalidArgumentError(f"Unknown event type: {event_type!r}")
        if handler is None or not callable(handler):
            raise InvalidArgumentError("Event handler must be a callable")

        subscription = Subscription(event_type, handler)
        with self._lock:
            current = self._subscribers.get(event_type, ())
            self._subscribers[event_type] = current + (subscription,)
        return subscription

    def unsubscribe(self, event_type: Type, handler: Union[Subscription, Handler, None]) -> bool:
        """
        Remove a registration.

        ``handler`` may be the ``Subscription`` returned by ``subscribe`` or
        the original callable, in which case the earliest matching
        registration is removed. Returns False when nothing matched.
        """
        if handler is None:
            return False

        with self._lock:
            current = self._subscribers.get(event_type, ())
            for i, sub in enumerate(current):
                if sub is handler or (not isinstance(handler, Subscription) and sub.handler == handler):
                    remaining = current[:i] + current[i + 1:]
                    if remaining:
                        self._subscribers[event_type] = remaining
                    else:
                        del self._subscribers[event_type]
                    return True
        return False

    def publish(self, event: Any) -> None:
        """Deliver ``event`` to every handler subscribed to its type."""
        event_type = type(event)
        if event_type not in EVENT_TYPES:
            raise InvalidArgumentError(f"Cannot publish {event_type.__name__}")

        with self._lock:
            handlers = self._subscribers.get(event_type)
        if not handlers:
            return

        with self._dispatch_lock:
            for sub in handlers:
                try:
                    sub.handler(event)
                except Exception:
                    logger.exception(f"Handler {sub!r} failed for {event_type.__name__}")

    def subscriber_count(self, event_type: Type) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, ()))

    def clear(self) -> None:
        """Drop every subscription."""
        with self._lock:
            self._subscribers.clear()
