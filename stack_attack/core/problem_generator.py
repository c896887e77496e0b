"""
Problem Generator
=================

Produces arithmetic expressions scaled by difficulty level.

Policy by level:
- 1: addition only, operands 1-5, sum clamped to 10
- 2: addition only, operands 2-9
- 3: addition or subtraction (50/50), minuend at most 10
- 4+: addition or subtraction (50/50), minuend 11-18

Every generated problem has a non-negative integer answer.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Problem:
    """A generated arithmetic problem."""
    left: int
    operator: str
    right: int
    answer: int

    @property
    def expression(self) -> str:
        """Rendered form, e.g. ``"7 + 2"``."""
        return f"{self.left} {self.operator} {self.right}"


class ProblemGenerator:
    """
    Seeded arithmetic problem source.

    Uses its own ``random.Random`` so that problems are reproducible per seed
    and independent of any other randomness in the game.
    """

    # Level 3+ addition picks a "teen plus small" pair with this probability
    LARGE_ADDEND_CHANCE = 0.7
    LEVEL1_SUM_CAP = 10

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize generator.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._rng = random.Random(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        """Reseed the generator. Keeps current stream if seed is None."""
        if seed is not None:
            self._rng = random.Random(seed)

    def _randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def generate(self, level: int) -> Problem:
        """
        Generate a problem for the given difficulty level.

        Args:
            level: Current level (1-based). Values below 1 are treated as 1.

        Returns:
            Problem with its exact integer answer.
        """
        level = max(1, level)

        if level <= 2:
            operator = "+"
        else:
            operator = "+" if self._rng.random() < 0.5 else "-"

        if operator == "+":
            a, b = self._addition_operands(level)
            return Problem(a, "+", b, a + b)

        a, b = self._subtraction_operands(level)
        return Problem(a, "-", b, a - b)

    def _addition_operands(self, level: int):
        if level == 1:
            a = self._randint(1, 5)
            b = self._randint(1, 5)
            if a + b > self.LEVEL1_SUM_CAP:
                b = self.LEVEL1_SUM_CAP - a
            return a, b

        if level == 2:
            return self._randint(2, 9), self._randint(2, 9)

        if self._rng.random() < self.LARGE_ADDEND_CHANCE:
            return self._randint(10, 15), self._randint(1, 4)
        return self._randint(2, 9), self._randint(2, 9)

    def _subtraction_operands(self, level: int):
        if level == 3:
            a = self._randint(2, 10)
            b = self._randint(1, a - 1)
            return a, b

        a = self._randint(11, 18)
        b = self._randint(2, 9)
        while b >= a:
            b = self._randint(2, 9)
        return a, b
