from typing import Dict, List, Optional, Tuple

from monopoly_core.exceptions import InvalidArgumentError
from monopoly_core.spaces import (
    BOARD_SIZE,
    ChanceSpace,
    ColorGroup,
    CommunityChestSpace,
    FreeParkingSpace,
    GoSpace,
    GoToJailSpace,
    JailSpace,
    OwnableSpace,
    PropertySpace,
    RailroadSpace,
    Space,
    TaxSpace,
    UtilitySpace,
)

BROWN = ColorGroup.BROWN
LIGHT_BLUE = ColorGroup.LIGHT_BLUE
PINK = ColorGroup.PINK
ORANGE = ColorGroup.ORANGE
RED = ColorGroup.RED
YELLOW = ColorGroup.YELLOW
GREEN = ColorGroup.GREEN
DARK_BLUE = ColorGroup.DARK_BLUE


class Board:
    """The Monopoly game board with 40 spaces."""

    def __init__(self):
        self._spaces: Tuple[Space, ...] = tuple(self._create_standard_board())
        self._color_groups: Dict[ColorGroup, Tuple[PropertySpace, ...]] = self._build_color_groups()

    def _create_standard_board(self) -> List[Space]:
        """Create the standard 40-space Monopoly board."""
        return [
            # Bottom row (0-10)
            GoSpace(0),
            PropertySpace("Mediterranean Avenue", 1, 60, BROWN, 2, 10, 30, 90, 160, 250, 50),
            CommunityChestSpace(2),
            PropertySpace("Baltic Avenue", 3, 60, BROWN, 4, 20, 60, 180, 320, 450, 50),
            TaxSpace("Income Tax", 4, 200),
            RailroadSpace("Reading Railroad", 5),
            PropertySpace("Oriental Avenue", 6, 100, LIGHT_BLUE, 6, 30, 90, 270, 400, 550, 50),
            ChanceSpace(7),
            PropertySpace("Vermont Avenue", 8, 100, LIGHT_BLUE, 6, 30, 90, 270, 400, 550, 50),
            PropertySpace("Connecticut Avenue", 9, 120, LIGHT_BLUE, 8, 40, 100, 300, 450, 600, 50),
            JailSpace(10),
            # Left side (11-20)
            PropertySpace("St. Charles Place", 11, 140, PINK, 10, 50, 150, 450, 625, 750, 100),
            UtilitySpace("Electric Company", 12),
            PropertySpace("States Avenue", 13, 140, PINK, 10, 50, 150, 450, 625, 750, 100),
            PropertySpace("Virginia Avenue", 14, 160, PINK, 12, 60, 180, 500, 700, 900, 100),
            RailroadSpace("Pennsylvania Railroad", 15),
            PropertySpace("St. James Place", 16, 180, ORANGE, 14, 70, 200, 550, 750, 950, 100),
            CommunityChestSpace(17),
            PropertySpace("Tennessee Avenue", 18, 180, ORANGE, 14, 70, 200, 550, 750, 950, 100),
            PropertySpace("New York Avenue", 19, 200, ORANGE, 16, 80, 220, 600, 800, 1000, 100),
            FreeParkingSpace(20),
            # Top row (21-30)
            PropertySpace("Kentucky Avenue", 21, 220, RED, 18, 90, 250, 700, 875, 1050, 150),
            ChanceSpace(22),
            PropertySpace("Indiana Avenue", 23, 220, RED, 18, 90, 250, 700, 875, 1050, 150),
            PropertySpace("Illinois Avenue", 24, 240, RED, 20, 100, 300, 750, 925, 1100, 150),
            RailroadSpace("B. & O. Railroad", 25),
            PropertySpace("Atlantic Avenue", 26, 260, YELLOW, 22, 110, 330, 800, 975, 1150, 150),
            PropertySpace("Ventnor Avenue", 27, 260, YELLOW, 22, 110, 330, 800, 975, 1150, 150),
            UtilitySpace("Water Works", 28),
            PropertySpace("Marvin Gardens", 29, 280, YELLOW, 24, 120, 360, 850, 1025, 1200, 150),
            GoToJailSpace(30),
            # Right side (31-39)
            PropertySpace("Pacific Avenue", 31, 300, GREEN, 26, 130, 390, 900, 1100, 1275, 200),
            PropertySpace("North Carolina Avenue", 32, 300, GREEN, 26, 130, 390, 900, 1100, 1275, 200),
            CommunityChestSpace(33),
            PropertySpace("Pennsylvania Avenue", 34, 320, GREEN, 28, 150, 450, 1000, 1200, 1400, 200),
            RailroadSpace("Short Line", 35),
            ChanceSpace(36),
            PropertySpace("Park Place", 37, 350, DARK_BLUE, 35, 175, 500, 1100, 1300, 1500, 200),
            TaxSpace("Luxury Tax", 38, 100),
            PropertySpace("Boardwalk", 39, 400, DARK_BLUE, 50, 200, 600, 1400, 1700, 2000, 200),
        ]

    def _build_color_groups(self) -> Dict[ColorGroup, Tuple[PropertySpace, ...]]:
        """Build a mapping of color groups to their properties."""
        groups: Dict[ColorGroup, List[PropertySpace]] = {}
        for space in self._spaces:
            if isinstance(space, PropertySpace):
                groups.setdefault(space.color_group, []).append(space)
        return {color: tuple(props) for color, props in groups.items()}

    @property
    def spaces(self) -> Tuple[Space, ...]:
        return self._spaces

    def __len__(self) -> int:
        return len(self._spaces)

    def get_space(self, position: int) -> Space:
        """Get the space at the given position."""
        if not 0 <= position < BOARD_SIZE:
            raise InvalidArgumentError(f"Board position must be 0-{BOARD_SIZE - 1}, got {position}")
        return self._spaces[position]

    def get_ownable_space(self, position: int) -> Optional[OwnableSpace]:
        """Get a purchasable space, or None if the space cannot be owned."""
        space = self.get_space(position)
        return space if isinstance(space, OwnableSpace) else None

    def get_property_space(self, position: int) -> Optional[PropertySpace]:
        """Get a property space, or None if not a property."""
        space = self.get_space(position)
        return space if isinstance(space, PropertySpace) else None

    def find_by_name(self, name: str) -> Optional[Space]:
        for space in self._spaces:
            if space.name == name:
                return space
        return None

    def get_color_group(self, color: ColorGroup) -> Tuple[PropertySpace, ...]:
        """Get all properties in a color group."""
        return self._color_groups.get(color, ())

    @property
    def color_groups(self) -> Tuple[ColorGroup, ...]:
        return tuple(self._color_groups)

    def ownable_spaces(self) -> List[OwnableSpace]:
        return [s for s in self._spaces if isinstance(s, OwnableSpace)]

    def get_all_railroads(self) -> List[RailroadSpace]:
        return [s for s in self._spaces if isinstance(s, RailroadSpace)]

    def get_all_utilities(self) -> List[UtilitySpace]:
        return [s for s in self._spaces if isinstance(s, UtilitySpace)]
