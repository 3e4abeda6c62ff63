"""
Random sources - Injectable randomness for the games.

Games only ever ask for two things:
- randrange(n): uniform integer in [0, n) (tile and pad picks)
- random(): uniform float in [0, 1) (burst draws)

Production play uses SeededRandom; tests script exact draws with
ScriptedRandom so every branch can be forced.
"""

from __future__ import annotations
import random as _random
from collections import deque
from typing import Iterable, Protocol

from ..errors import RandomExhausted


class RandomSource(Protocol):
    """Uniform random integers and floats."""

    def randrange(self, n: int) -> int: ...

    def random(self) -> float: ...


class SeededRandom:
    """RandomSource over the stdlib Mersenne Twister."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self.rng = _random.Random(seed)

    def randrange(self, n: int) -> int:
        return self.rng.randrange(n)

    def random(self) -> float:
        return self.rng.random()


class ScriptedRandom:
    """
    Replays fixed draws in order.

    Integers are reduced modulo n so a script stays valid if a board
    size changes. Running out of values raises RandomExhausted, which
    makes an under-specified test fail loudly instead of silently.
    """

    def __init__(self, ints: Iterable[int] = (), floats: Iterable[float] = ()):
        self._ints = deque(ints)
        self._floats = deque(floats)

    def randrange(self, n: int) -> int:
        if not self._ints:
            raise RandomExhausted("no scripted integers left")
        return self._ints.popleft() % n

    def random(self) -> float:
        if not self._floats:
            raise RandomExhausted("no scripted floats left")
        value = self._floats.popleft()
        if not 0.0 <= value < 1.0:
            raise ValueError(f"scripted float {value} outside [0, 1)")
        return value

    def extend(self, ints: Iterable[int] = (), floats: Iterable[float] = ()):
        self._ints.extend(ints)
        self._floats.extend(floats)

    @property
    def remaining(self) -> tuple[int, int]:
        return len(self._ints), len(self._floats)
