"""
Progression and economy formulas.

Purpose
-------
Pure calculation functions for the engine: the EXP and paragon curves,
rebirth ledger accumulation, percentage scaling, item level requirements,
rarity thresholds, bonus quest rewards and hero power.

Design Notes
------------
All formulas:
- Accept parameters explicitly (catalogue values are passed in)
- Return calculated values without side effects
- Floor toward zero when a fractional result must become an integer

Usage
-----
    from questforge.modules.shared.formulas import exp_required

    needed = exp_required(50)
"""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

from questforge.domain.models.catalogue import RebirthBonus, RebirthRules
from questforge.domain.models.enums import Rarity
from questforge.modules.shared.constants import (
    HERO_POWER_ACHIEVEMENT_WEIGHT,
    HERO_POWER_EQUIPMENT_WEIGHT,
    HERO_POWER_LEVEL_WEIGHT,
    HERO_POWER_STAT_WEIGHT,
)


def exp_required(level: int, base: int = 100, exponent: float = 1.5) -> int:
    """
    Total EXP needed to stand at ``level``.

    Args:
        level: Target level
        base: Curve multiplier
        exponent: Curve exponent

    Returns:
        Cumulative EXP threshold; zero for level 1 and below

    Example:
        >>> exp_required(1)
        0
        >>> exp_required(2)
        100
        >>> exp_required(5)
        800
    """
    if level <= 1:
        return 0
    return int(base * (level - 1) ** exponent)


def paragon_exp_required(paragon_level: int, cap_exp: int, growth: float = 0.1) -> int:
    """
    Total EXP needed to reach paragon level ``paragon_level + 1``.

    EXP is cumulative across the whole run, so the paragon curve starts at
    the level-cap threshold and each further paragon level costs
    ``cap_exp * growth * k`` more than the previous one.

    Example:
        >>> paragon_exp_required(0, cap_exp=1000, growth=0.1)
        1100
        >>> paragon_exp_required(1, cap_exp=1000, growth=0.1)
        1300
    """
    steps = (paragon_level + 1) * (paragon_level + 2) // 2
    return cap_exp + int(cap_exp * growth * steps)


def paragon_stat_points(paragon_level: int, base_points: int = 5, decay_interval: int = 10) -> int:
    """
    Stat points granted when leaving ``paragon_level``.

    Diminishes every ``decay_interval`` paragon levels but never reaches zero.

    Example:
        >>> paragon_stat_points(0)
        5
        >>> paragon_stat_points(10)
        2
        >>> paragon_stat_points(500)
        1
    """
    return max(1, base_points // (1 + paragon_level // decay_interval))


def rebirth_bonus(rebirth_count: int, rules: RebirthRules) -> RebirthBonus:
    """
    Accumulated rebirth ledger for ``rebirth_count`` rebirths.

    The i-th rebirth adds ``rules.tiers[i-1]``; rebirths past the table add
    ``rules.per_rebirth_after`` each. Every tier is non-negative, so the
    ledger never shrinks as the count grows.
    """
    total = RebirthBonus()
    for tier in rules.tiers[: max(0, rebirth_count)]:
        total = total + tier
    extra = rebirth_count - len(rules.tiers)
    for _ in range(max(0, extra)):
        total = total + rules.per_rebirth_after
    return total


def rebirth_title(rebirth_count: int, class_name: str, rules: RebirthRules) -> str:
    """
    Title earned by the ``rebirth_count``-th rebirth.

    Example:
        >>> rebirth_title(1, "Mage", rules)
        'Reborn'
        >>> rebirth_title(7, "Mage", rules)
        'Eternal Mage'
    """
    if 1 <= rebirth_count <= len(rules.titles):
        return rules.titles[rebirth_count - 1]
    return rules.eternal_title_format.format(class_name=class_name, count=rebirth_count)


def apply_percent(value: int, percent: float) -> int:
    """
    Scale ``value`` by ``(1 + percent/100)`` and floor.

    Multiplication happens before division so whole-number percentages
    stay exact.

    Example:
        >>> apply_percent(100, 5)
        105
        >>> apply_percent(7, 3)
        7
    """
    if percent == 0:
        return value
    return int(value * (100 + percent) // 100)


def item_level_requirement(tier: int, primary_bonus: int, level_per_tier: int = 5) -> int:
    """
    Level needed to equip a crafted item.

    Example:
        >>> item_level_requirement(1, 2)
        1
        >>> item_level_requirement(4, 14)
        22
    """
    return max(1, (tier - 1) * level_per_tier + primary_bonus // 2)


def rarity_from_roll(roll: float, thresholds: Mapping[Rarity, float]) -> Rarity:
    """
    Highest rarity whose threshold ``roll`` reaches.

    Example:
        >>> rarity_from_roll(83.0, {Rarity.COMMON: 0, Rarity.EPIC: 82})
        <Rarity.EPIC: 'epic'>
    """
    result = Rarity.COMMON
    for rarity in Rarity.ordered():
        threshold = thresholds.get(rarity)
        if threshold is not None and roll >= threshold:
            result = rarity
    return result


def bonus_quest_rewards(
    regular_rewards: Sequence[Tuple[int, int]],
    min_exp: int = 25,
    min_gold: int = 15,
) -> Tuple[int, int]:
    """
    EXP and gold for the daily bonus quest: half the regular totals, floored
    at the minimums.

    Example:
        >>> bonus_quest_rewards([(30, 16), (25, 15), (20, 20)])
        (37, 25)
    """
    total_exp = sum(exp for exp, _ in regular_rewards)
    total_gold = sum(gold for _, gold in regular_rewards)
    return max(total_exp // 2, min_exp), max(total_gold // 2, min_gold)


def hero_power(
    effective_stat_total: int,
    level: int,
    equipment_bonus_total: int,
    unlocked_achievements: int,
) -> int:
    """
    Single comparable power score.

    Example:
        >>> hero_power(60, 10, 5, 2)
        730
    """
    return (
        effective_stat_total * HERO_POWER_STAT_WEIGHT
        + level * HERO_POWER_LEVEL_WEIGHT
        + equipment_bonus_total * HERO_POWER_EQUIPMENT_WEIGHT
        + unlocked_achievements * HERO_POWER_ACHIEVEMENT_WEIGHT
    )
