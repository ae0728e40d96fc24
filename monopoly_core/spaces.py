"""
Board space definitions and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from monopoly_core.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from monopoly_core.player import Player

BOARD_SIZE = 40
MAX_HOUSES = 4
HOTEL_HOUSE_EQUIVALENT = 5


class SpaceType(Enum):
    """Types of spaces on the board."""

    GO = "go"
    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    TAX = "tax"
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"
    JAIL = "jail"
    GO_TO_JAIL = "go_to_jail"
    FREE_PARKING = "free_parking"


class ColorGroup(Enum):
    """Property color groups."""

    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    PINK = "pink"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DARK_BLUE = "dark_blue"


@dataclass(eq=False)
class Space:
    """Base class for a board space."""

    name: str
    position: int
    space_type: SpaceType

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidArgumentError("Space name cannot be empty")
        if not 0 <= self.position < BOARD_SIZE:
            raise InvalidArgumentError(f"Space position must be 0-{BOARD_SIZE - 1}, got {self.position}")

    @property
    def is_ownable(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', position={self.position})"


class OwnableSpace(Space):
    """A space that can be bought, owned and mortgaged."""

    def __init__(
        self,
        name: str,
        position: int,
        space_type: SpaceType,
        price: int,
        mortgage_value: Optional[int] = None,
    ):
        super().__init__(name, position, space_type)
        if price < 0:
            raise InvalidArgumentError("Purchase price cannot be negative")
        self.price = price
        self.mortgage_value = price // 2 if mortgage_value is None else mortgage_value
        self.owner: Optional["Player"] = None
        self.is_mortgaged = False

    @property
    def is_ownable(self) -> bool:
        return True

    @property
    def is_owned(self) -> bool:
        return self.owner is not None

    @property
    def has_buildings(self) -> bool:
        return False

    def unmortgage_cost(self, interest_rate: float = 0.10) -> int:
        """Mortgage value plus interest, rounded down."""
        percent = round(interest_rate * 100)
        return self.mortgage_value + (self.mortgage_value * percent) // 100

    def building_liquidation_value(self) -> int:
        """Cash from selling every building back at half cost."""
        return 0


class PropertySpace(OwnableSpace):
    """A property that can be owned, built upon, and mortgaged."""

    def __init__(
        self,
        name: str,
        position: int,
        price: int,
        color_group: ColorGroup,
        rent_base: int,
        rent_with_1: int,
        rent_with_2: int,
        rent_with_3: int,
        rent_with_4: int,
        rent_hotel: int,
        house_cost: int,
        mortgage_value: Optional[int] = None,
    ):
        super().__init__(name, position, SpaceType.PROPERTY, price, mortgage_value)
        self.color_group = color_group
        self.rent_base = rent_base
        self.rent_with_1 = rent_with_1
        self.rent_with_2 = rent_with_2
        self.rent_with_3 = rent_with_3
        self.rent_with_4 = rent_with_4
        self.rent_hotel = rent_hotel
        self.house_cost = house_cost
        self.houses = 0
        self.has_hotel = False

    @property
    def hotel_cost(self) -> int:
        return self.house_cost

    @property
    def has_buildings(self) -> bool:
        return self.houses > 0 or self.has_hotel

    @property
    def building_level(self) -> int:
        """Houses on the lot, with a hotel counted as five."""
        return HOTEL_HOUSE_EQUIVALENT if self.has_hotel else self.houses

    def rent_for_houses(self, houses: int) -> int:
        """Rent from the tier table for 1-4 houses."""
        tiers = {
            1: self.rent_with_1,
            2: self.rent_with_2,
            3: self.rent_with_3,
            4: self.rent_with_4,
        }
        if houses not in tiers:
            raise InvalidArgumentError(f"House count must be 1-4, got {houses}")
        return tiers[houses]

    def get_rent(self, has_monopoly: bool) -> int:
        """
        Calculate rent for this property from its current buildings.

        Args:
            has_monopoly: Whether owner has complete color set

        Returns:
            Rent amount
        """
        if self.has_hotel:
            return self.rent_hotel
        if self.houses > 0:
            return self.rent_for_houses(self.houses)
        return self.rent_base * 2 if has_monopoly else self.rent_base

    def building_value(self) -> int:
        """Full amount paid for the buildings currently on the lot."""
        return self.building_level * self.house_cost

    def building_liquidation_value(self) -> int:
        return self.building_value() // 2

    def clear_buildings(self) -> None:
        self.houses = 0
        self.has_hotel = False


class RailroadSpace(OwnableSpace):
    """A railroad space."""

    def __init__(self, name: str, position: int, price: int = 200, mortgage_value: int = 100):
        super().__init__(name, position, SpaceType.RAILROAD, price, mortgage_value)

    def get_rent(self, railroads_owned: int) -> int:
        """Calculate rent based on number of railroads owned by the owner."""
        if not 1 <= railroads_owned <= 4:
            return 0
        return 25 * (2 ** (railroads_owned - 1))


class UtilitySpace(OwnableSpace):
    """A utility space (Electric Company or Water Works)."""

    def __init__(self, name: str, position: int, price: int = 150, mortgage_value: int = 75):
        super().__init__(name, position, SpaceType.UTILITY, price, mortgage_value)

    @staticmethod
    def multiplier(utilities_owned: int) -> int:
        if utilities_owned <= 0:
            return 0
        return 4 if utilities_owned == 1 else 10

    def get_rent(self, dice_roll: int, utilities_owned: int) -> int:
        """Calculate rent based on dice roll and number of utilities owned."""
        return dice_roll * self.multiplier(utilities_owned)


class TaxSpace(Space):
    """A tax space (Income Tax or Luxury Tax)."""

    def __init__(self, name: str, position: int, amount: int):
        super().__init__(name, position, SpaceType.TAX)
        if amount < 0:
            raise InvalidArgumentError("Tax amount cannot be negative")
        self.amount = amount


class GoSpace(Space):
    """The GO space."""

    def __init__(self, position: int = 0):
        super().__init__("GO", position, SpaceType.GO)


class ChanceSpace(Space):
    """A Chance card space."""

    def __init__(self, position: int):
        super().__init__("Chance", position, SpaceType.CHANCE)


class CommunityChestSpace(Space):
    """A Community Chest card space."""

    def __init__(self, position: int):
        super().__init__("Community Chest", position, SpaceType.COMMUNITY_CHEST)


class JailSpace(Space):
    """The Jail/Just Visiting space."""

    def __init__(self, position: int = 10):
        super().__init__("Jail", position, SpaceType.JAIL)


class GoToJailSpace(Space):
    """The Go To Jail space."""

    def __init__(self, position: int = 30):
        super().__init__("Go To Jail", position, SpaceType.GO_TO_JAIL)


class FreeParkingSpace(Space):
    """The Free Parking space."""

    def __init__(self, position: int = 20):
        super().__init__("Free Parking", position, SpaceType.FREE_PARKING)
