"""
Stat value objects.

``Stats`` is the six-stat block stored on a character (and used for class
starting stats). ``EffectiveStats`` is the read model produced by stat
resolution: one value per stat plus a ``StatBreakdown`` naming every
contributing source.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Mapping, Tuple

from questforge.domain.models.base import ValueObject, validate_non_negative
from questforge.domain.models.enums import StatType


@dataclass(frozen=True)
class Stats(ValueObject):
    """
    Immutable block of the six character stats.

    Attributes
    ----------
    strength, wisdom, charisma, dexterity, luck, defense : int
        Non-negative stat values.
    """

    strength: int = 5
    wisdom: int = 5
    charisma: int = 5
    dexterity: int = 5
    luck: int = 5
    defense: int = 5

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        for stat in StatType:
            validate_non_negative(self.get(stat), stat.value)

    def get(self, stat: StatType) -> int:
        return getattr(self, stat.value)

    def with_added(self, stat: StatType, amount: int) -> Stats:
        """Return a copy with ``amount`` added to ``stat``."""
        return replace(self, **{stat.value: self.get(stat) + amount})

    def items(self) -> Iterator[Tuple[StatType, int]]:
        for stat in StatType:
            yield stat, self.get(stat)

    def total(self) -> int:
        return sum(value for _, value in self.items())

    def to_dict(self) -> Dict[str, int]:
        return {stat.value: value for stat, value in self.items()}

    @classmethod
    def from_mapping(cls, data: Mapping[str, int]) -> Stats:
        """Build from a ``{"strength": 8, ...}`` mapping; missing stats default."""
        return cls(**{StatType(key).value: int(value) for key, value in data.items()})


@dataclass(frozen=True)
class StatBreakdown:
    """
    Named contributions to a single effective stat.

    ``sources`` is ordered: base, class, zodiac, one entry per equipped slot
    (``equipment:<slot>``), then ``rebirth``. Sources that contribute zero
    are omitted except ``base``.
    """

    stat: StatType
    sources: Tuple[Tuple[str, int], ...]

    @property
    def total(self) -> int:
        return sum(amount for _, amount in self.sources)

    def amount_from(self, source: str) -> int:
        return sum(amount for name, amount in self.sources if name == source)

    def to_dict(self) -> Dict[str, int]:
        return dict(self.sources)


@dataclass(frozen=True)
class EffectiveStats:
    """Resolved stats and their per-source breakdown."""

    values: Mapping[StatType, int]
    breakdown: Mapping[StatType, StatBreakdown] = field(default_factory=dict)

    def get(self, stat: StatType) -> int:
        return self.values[stat]

    def total(self) -> int:
        return sum(self.values.values())
