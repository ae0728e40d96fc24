import random
from typing import NamedTuple, Optional


class DiceRoll(NamedTuple):
    die1: int
    die2: int

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @property
    def is_doubles(self) -> bool:
        return self.die1 == self.die2


class Dice:
    """Two six-sided dice. Pass ``rng`` or ``seed`` for reproducible games."""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def roll(self) -> DiceRoll:
        return DiceRoll(self.rng.randint(1, 6), self.rng.randint(1, 6))
