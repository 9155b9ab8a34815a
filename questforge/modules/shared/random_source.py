"""
Random sources for probabilistic rolls.

Every roll the engine makes (forge rarity, stat bonuses, quest selection)
goes through a ``RandomSource`` so hosts and tests control determinism:

- ``SystemRandomSource``: OS entropy via ``secrets.SystemRandom``
- ``SeededRandomSource``: reproducible ``random.Random(seed)``
- ``SequenceRandomSource``: replays fixed fractions in ``[0, 1)``
"""

from __future__ import annotations

import random
import secrets
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from questforge.domain.models.base import DomainValidationError


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        """Float in ``[0, 1)``."""
        ...

    def uniform(self, low: float, high: float) -> float:
        ...

    def randint(self, low: int, high: int) -> int:
        """Integer in ``[low, high]`` inclusive."""
        ...


class _FractionBacked:
    """Derives ``uniform`` and ``randint`` from ``random``."""

    def random(self) -> float:  # pragma: no cover - overridden
        raise NotImplementedError

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.random()

    def randint(self, low: int, high: int) -> int:
        if high < low:
            raise DomainValidationError(f"empty range [{low}, {high}]", field="high")
        return min(high, low + int(self.random() * (high - low + 1)))


class SystemRandomSource(_FractionBacked):
    def __init__(self) -> None:
        self._rng = secrets.SystemRandom()

    def random(self) -> float:
        return self._rng.random()


class SeededRandomSource(_FractionBacked):
    """Reproducible rolls: the same seed yields the same sequence."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()


class SequenceRandomSource(_FractionBacked):
    """
    Replays the given fractions in order, cycling when exhausted.

    >>> rng = SequenceRandomSource([0.99])
    >>> rng.uniform(0, 100)
    99.0
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._values: List[float] = list(values)
        if not self._values:
            raise DomainValidationError("at least one value is required", field="values")
        for value in self._values:
            if not 0 <= value < 1:
                raise DomainValidationError(f"{value} is outside [0, 1)", field="values")
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value

    @property
    def draws(self) -> int:
        return self._index
