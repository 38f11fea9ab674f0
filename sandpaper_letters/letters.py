from __future__ import annotations

import random
import string
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Letter:
    upper: str
    lower: str

    @property
    def pair(self) -> str:
        return f"{self.upper}{self.lower}"


LETTERS: tuple[Letter, ...] = tuple(
    Letter(upper=up, lower=lo) for up, lo in zip(string.ascii_uppercase, string.ascii_lowercase)
)


class SeededRng:
    """Simple seeded RNG wrapper to keep letter draws reproducible."""

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


def pick_letter(rng: SeededRng) -> Letter:
    """Uniform draw from the 26-entry alphabet table."""

    return LETTERS[rng.randint(0, len(LETTERS) - 1)]
