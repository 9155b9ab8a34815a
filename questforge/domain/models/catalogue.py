"""
Static catalogue definitions.

Frozen value objects describing balance data: classes, zodiac signs, rebirth
tiers, rarity tables, forge recipes, salvage rules, the daily quest pool and
achievement definitions. Instances are built once by the catalogue loader
and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from questforge.domain.models.base import (
    DomainValidationError,
    ValueObject,
    validate_non_negative,
    validate_positive,
    validate_range,
)
from questforge.domain.models.character import MAX_LEVEL
from questforge.domain.models.enums import (
    CharacterClass,
    ClassTier,
    EquipmentSlot,
    QuestType,
    Rarity,
    RewardType,
    StatType,
    ZodiacSign,
)
from questforge.domain.models.equipment import MAX_ENHANCEMENT_LEVEL
from questforge.domain.models.stats import Stats


@dataclass(frozen=True)
class LevelingRules(ValueObject):
    """Tunable constants for the EXP curve, level rewards and gates."""

    level_cap: int = 100
    exp_base: int = 100
    exp_exponent: float = 1.5
    stat_points_per_level: int = 5
    base_max_hp: int = 100
    hp_per_level: int = 10
    paragon_growth: float = 0.1
    paragon_base_points: int = 5
    paragon_decay_interval: int = 10
    evolution_level: int = 20
    evolution_threshold: int = 15
    zodiac_bonus: int = 2

    def __post_init__(self) -> None:
        validate_range(self.level_cap, 1, MAX_LEVEL, "level_cap")
        validate_positive(self.exp_base, "exp_base")
        if self.exp_exponent <= 0:
            raise DomainValidationError("exp_exponent must be positive", field="exp_exponent")
        if self.paragon_growth <= 0:
            raise DomainValidationError("paragon_growth must be positive", field="paragon_growth")
        validate_positive(self.stat_points_per_level, "stat_points_per_level")
        validate_positive(self.base_max_hp, "base_max_hp")
        validate_non_negative(self.hp_per_level, "hp_per_level")
        validate_positive(self.paragon_base_points, "paragon_base_points")
        validate_positive(self.paragon_decay_interval, "paragon_decay_interval")


@dataclass(frozen=True)
class ClassDefinition(ValueObject):
    """
    One playable class.

    Starter classes carry ``starting_stats``; advanced classes name the
    starter they evolve from and the stat gating that evolution.
    """

    character_class: CharacterClass
    tier: ClassTier
    primary_stat: StatType
    passive_bonus: int = 2
    hp_restore_fraction: float = 1.0
    loot_bonus: float = 0.0
    starting_stats: Optional[Stats] = None
    evolves_from: Optional[CharacterClass] = None
    evolution_stat: Optional[StatType] = None

    def __post_init__(self) -> None:
        if not 0 < self.hp_restore_fraction <= 1:
            raise DomainValidationError(
                "hp_restore_fraction must be in (0, 1]", field="hp_restore_fraction"
            )
        if self.tier == ClassTier.ADVANCED and (
            self.evolves_from is None or self.evolution_stat is None
        ):
            raise DomainValidationError(
                f"advanced class {self.character_class.value} needs evolves_from and evolution_stat",
                field="evolves_from",
            )

    @property
    def is_starter(self) -> bool:
        return self.tier == ClassTier.STARTER


@dataclass(frozen=True)
class ZodiacDefinition(ValueObject):
    sign: ZodiacSign
    boosted_stat: StatType
    element: str


@dataclass(frozen=True)
class RebirthBonus(ValueObject):
    """
    Percent bonuses accumulated through rebirth.

    Attributes
    ----------
    exp_bonus, gold_bonus, loot_bonus, all_stats_bonus : float
        Percentages (``5.0`` means +5%).
    """

    exp_bonus: float = 0.0
    gold_bonus: float = 0.0
    loot_bonus: float = 0.0
    all_stats_bonus: float = 0.0

    def __add__(self, other: "RebirthBonus") -> "RebirthBonus":
        return RebirthBonus(
            exp_bonus=self.exp_bonus + other.exp_bonus,
            gold_bonus=self.gold_bonus + other.gold_bonus,
            loot_bonus=self.loot_bonus + other.loot_bonus,
            all_stats_bonus=self.all_stats_bonus + other.all_stats_bonus,
        )

    def dominates(self, other: "RebirthBonus") -> bool:
        """True when every bonus is at least the other's."""
        return (
            self.exp_bonus >= other.exp_bonus
            and self.gold_bonus >= other.gold_bonus
            and self.loot_bonus >= other.loot_bonus
            and self.all_stats_bonus >= other.all_stats_bonus
        )


@dataclass(frozen=True)
class RebirthRules(ValueObject):
    """
    Rebirth ledger table.

    ``tiers[i]`` is granted by the (i+1)-th rebirth; every rebirth past the
    table grants ``per_rebirth_after``. ``titles[i]`` names the (i+1)-th
    rebirth; later rebirths use ``eternal_title_format``.
    """

    tiers: Tuple[RebirthBonus, ...]
    per_rebirth_after: RebirthBonus
    titles: Tuple[str, ...] = ()
    eternal_title_format: str = "Eternal {class_name}"
    required_level: int = 100

    def __post_init__(self) -> None:
        for tier in self.tiers + (self.per_rebirth_after,):
            if min(tier.exp_bonus, tier.gold_bonus, tier.loot_bonus, tier.all_stats_bonus) < 0:
                raise DomainValidationError("rebirth bonuses cannot be negative", field="tiers")


@dataclass(frozen=True)
class RarityRule(ValueObject):
    """Roll threshold and stat ranges for one rarity."""

    rarity: Rarity
    roll_threshold: float
    primary_min: int
    primary_max: int
    secondary_chance: float = 0.0
    secondary_min: int = 0
    secondary_max: int = 0

    def __post_init__(self) -> None:
        if self.primary_min > self.primary_max or self.secondary_min > self.secondary_max:
            raise DomainValidationError(
                f"invalid bonus range for {self.rarity.value}", field="primary_min"
            )
        if not 0 <= self.secondary_chance <= 1:
            raise DomainValidationError(
                "secondary_chance must be in [0, 1]", field="secondary_chance"
            )


@dataclass(frozen=True)
class ForgeRecipe(ValueObject):
    """
    A tiered forge cost table.

    Attributes
    ----------
    tier : int
        Recipe tier (1 is cheapest)
    essence_cost, material_cost, fragment_cost, gold_cost : int
        Exact costs; ``material_cost`` is paid in ore/crystal/hide at or
        above ``min_material_rarity``.
    min_rarity, max_rarity : Rarity
        Inclusive range of rarities the recipe can produce.
    """

    tier: int
    essence_cost: int
    material_cost: int
    min_material_rarity: Rarity
    fragment_cost: int
    gold_cost: int
    min_rarity: Rarity
    max_rarity: Rarity

    def __post_init__(self) -> None:
        validate_positive(self.tier, "tier")
        for name in ("essence_cost", "material_cost", "fragment_cost", "gold_cost"):
            validate_non_negative(getattr(self, name), name)
        if self.min_rarity > self.max_rarity:
            raise DomainValidationError(
                f"tier {self.tier}: min_rarity above max_rarity", field="min_rarity"
            )

    @property
    def result_rarity_range(self) -> Tuple[Rarity, Rarity]:
        return self.min_rarity, self.max_rarity

    def clamp(self, rarity: Rarity) -> Rarity:
        if rarity < self.min_rarity:
            return self.min_rarity
        if rarity > self.max_rarity:
            return self.max_rarity
        return rarity


@dataclass(frozen=True)
class ForgeRules(ValueObject):
    """Rarity roll weights shared by every recipe."""

    roll_max: float = 100.0
    luck_weight: float = 0.5
    tier_weight: float = 3.0
    loot_weight: float = 0.2
    tier_bonus_per_tier: int = 1
    level_per_tier: int = 5
    slot_stats: Mapping[EquipmentSlot, Tuple[StatType, ...]] = field(default_factory=dict)

    def stats_for(self, slot: EquipmentSlot) -> Tuple[StatType, ...]:
        return self.slot_stats.get(slot) or tuple(StatType)


@dataclass(frozen=True)
class SalvageRule(ValueObject):
    rarity: Rarity
    materials: int
    fragments: int
    gold: int

    def __post_init__(self) -> None:
        validate_non_negative(self.materials, "materials")
        validate_non_negative(self.fragments, "fragments")
        validate_non_negative(self.gold, "gold")


@dataclass(frozen=True)
class EnhancementLevelRule(ValueObject):
    """Odds, price multiplier and stat gain for reaching ``level``."""

    level: int
    success_rate: float
    cost_multiplier: float
    stat_gain: int

    def __post_init__(self) -> None:
        validate_range(self.level, 1, MAX_ENHANCEMENT_LEVEL, "level")
        if not 0 < self.success_rate <= 1:
            raise DomainValidationError(
                f"success_rate must be in (0, 1], got {self.success_rate}", field="success_rate"
            )
        if self.cost_multiplier <= 0:
            raise DomainValidationError("cost_multiplier must be positive", field="cost_multiplier")
        validate_positive(self.stat_gain, "stat_gain")


@dataclass(frozen=True)
class EnhancementRules(ValueObject):
    """
    Enhancement pricing and odds.

    The gold cost of an attempt is ``base_costs[rarity]`` times the target
    level's ``cost_multiplier``, truncated.
    """

    critical_chance: float = 0.1
    base_costs: Mapping[Rarity, int] = field(default_factory=dict)
    levels: Mapping[int, EnhancementLevelRule] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0 <= self.critical_chance <= 1:
            raise DomainValidationError(
                "critical_chance must be between 0 and 1", field="critical_chance"
            )
        for rarity, cost in self.base_costs.items():
            validate_non_negative(cost, f"base_cost.{rarity.value}")


@dataclass(frozen=True)
class QuestTier(ValueObject):
    """Target and rewards for characters at or above ``min_level``."""

    min_level: int
    target: int
    exp_reward: int
    gold_reward: int

    def __post_init__(self) -> None:
        validate_positive(self.min_level, "min_level")
        validate_positive(self.target, "target")
        validate_non_negative(self.exp_reward, "exp_reward")
        validate_non_negative(self.gold_reward, "gold_reward")


@dataclass(frozen=True)
class QuestTemplate(ValueObject):
    """A daily quest pool entry."""

    key: str
    quest_type: QuestType
    title: str
    tiers: Tuple[QuestTier, ...]
    min_level: int = 1
    weight: int = 10
    parameter: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.tiers:
            raise DomainValidationError(f"quest {self.key} has no tiers", field="tiers")
        if self.quest_type == QuestType.BONUS:
            raise DomainValidationError("bonus quests are not pool entries", field="quest_type")
        validate_positive(self.weight, "weight")

    def tier_for(self, level: int) -> QuestTier:
        """Highest tier whose ``min_level`` the character has reached."""
        eligible = [tier for tier in self.tiers if tier.min_level <= level]
        if not eligible:
            return min(self.tiers, key=lambda tier: tier.min_level)
        return max(eligible, key=lambda tier: tier.min_level)


@dataclass(frozen=True)
class BonusQuestRules(ValueObject):
    title: str = "Daily Bonus"
    regular_count: int = 3
    min_exp_reward: int = 25
    min_gold_reward: int = 15

    def __post_init__(self) -> None:
        validate_positive(self.regular_count, "regular_count")


@dataclass(frozen=True)
class AchievementDefinition(ValueObject):
    """
    A trackable achievement.

    ``tracking_key`` names the counter that advances it; several
    achievements may share a counter (``tasks_completed`` feeds
    first_steps, dedicated, centurion and legendary_worker).
    """

    key: str
    name: str
    tracking_key: str
    target: int
    reward_type: RewardType
    reward_value: Union[int, str]
    description: str = ""

    def __post_init__(self) -> None:
        validate_positive(self.target, "target")
        if self.reward_type == RewardType.TITLE:
            if not isinstance(self.reward_value, str) or not self.reward_value:
                raise DomainValidationError(
                    f"achievement {self.key}: title reward needs a name", field="reward_value"
                )
        elif not isinstance(self.reward_value, int) or self.reward_value < 0:
            raise DomainValidationError(
                f"achievement {self.key}: reward must be a non-negative int",
                field="reward_value",
            )


@dataclass(frozen=True)
class LevelTitle(ValueObject):
    min_level: int
    title: str

    def __post_init__(self) -> None:
        validate_range(self.min_level, 1, 10_000, "min_level")
