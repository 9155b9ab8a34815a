"""
Character Domain Model for the questforge engine.

Purpose
-------
Aggregate root for one player character: progression counters, currencies,
base stats, class and zodiac, the equipment loadout, and the character's
daily quests and achievements.

Responsibilities
----------------
- Hold and validate character state
- Apply primitive state transitions (gain a level, reset for rebirth,
  equip into a slot) that keep multi-field invariants together
- Emit domain events for significant changes

Non-Responsibilities
--------------------
- Deciding whether a transition is allowed (handled by the services, which
  need catalogue data and resolved stats)
- Persistence (the host writes the snapshot back)

Design Notes
------------
- ``equip_item``/``unequip_item`` are the only writers of both
  ``loadout`` and ``EquipmentItem.is_equipped``, so the pair never drifts.
- Currency mutators reject negative results instead of clamping.

Usage Example
-------------
>>> character = Character("hero-1", "Aria", ZodiacSign.LEO, CharacterClass.WARRIOR)
>>> character.add_gold(100)
>>> character.spend_gold(40)
>>> character.gold
60
"""

from __future__ import annotations

from typing import Dict, List, Optional

from questforge.domain.models.base import (
    AggregateRoot,
    DomainValidationError,
    validate_non_negative,
    validate_positive,
    validate_range,
)
from questforge.domain.models.enums import CharacterClass, EquipmentSlot, StatType, ZodiacSign
from questforge.domain.models.equipment import EquipmentItem, Loadout
from questforge.domain.models.quest import Achievement, DailyQuest
from questforge.domain.models.stats import Stats

MAX_LEVEL = 100


class Character(AggregateRoot):
    """
    Rich domain model for a character.

    Parameters
    ----------
    character_id : str
        Unique identifier
    name : str
        Display name
    zodiac_sign : ZodiacSign
        Immutable after creation
    character_class : Optional[CharacterClass]
        None before a class is chosen and right after rebirth
    """

    def __init__(
        self,
        character_id: str,
        name: str,
        zodiac_sign: ZodiacSign,
        character_class: Optional[CharacterClass] = None,
        level: int = 1,
        current_exp: int = 0,
        rebirth_count: int = 0,
        paragon_level: int = 0,
        unspent_stat_points: int = 0,
        base_stats: Optional[Stats] = None,
        gold: int = 0,
        gems: int = 0,
        max_hp: int = 100,
        current_hp: Optional[int] = None,
        title: Optional[str] = None,
        loadout: Optional[Loadout] = None,
        achievements: Optional[Dict[str, Achievement]] = None,
        daily_quests: Optional[List[DailyQuest]] = None,
    ) -> None:
        super().__init__(character_id)
        self.name = name
        self._zodiac_sign = zodiac_sign
        self.character_class = character_class
        self.level = level
        self.current_exp = current_exp
        self.rebirth_count = rebirth_count
        self.paragon_level = paragon_level
        self.unspent_stat_points = unspent_stat_points
        self.base_stats = base_stats or Stats()
        self.gold = gold
        self.gems = gems
        self.max_hp = max_hp
        self.current_hp = max_hp if current_hp is None else current_hp
        self.title = title
        self.earned_titles: List[str] = [title] if title else []
        self.loadout = loadout or Loadout()
        self.achievements: Dict[str, Achievement] = achievements or {}
        self.daily_quests: List[DailyQuest] = daily_quests or []
        self._validate()

    def _validate(self) -> None:
        validate_range(self.level, 1, MAX_LEVEL, "level")
        validate_non_negative(self.current_exp, "current_exp")
        validate_non_negative(self.rebirth_count, "rebirth_count")
        validate_non_negative(self.paragon_level, "paragon_level")
        validate_non_negative(self.unspent_stat_points, "unspent_stat_points")
        validate_non_negative(self.gold, "gold")
        validate_non_negative(self.gems, "gems")
        validate_positive(self.max_hp, "max_hp")
        if not 0 <= self.current_hp <= self.max_hp:
            raise DomainValidationError(
                f"current_hp must be between 0 and {self.max_hp}, got {self.current_hp}",
                field="current_hp",
            )

    @property
    def zodiac_sign(self) -> ZodiacSign:
        return self._zodiac_sign

    # =========================================================================
    # CURRENCIES
    # =========================================================================

    def add_gold(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        self.gold += amount

    def spend_gold(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        if self.gold < amount:
            raise DomainValidationError(
                f"Insufficient gold: have {self.gold}, need {amount}", field="gold"
            )
        self.gold -= amount

    def add_gems(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        self.gems += amount

    # =========================================================================
    # PROGRESSION PRIMITIVES
    # =========================================================================

    def gain_exp(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        self.current_exp += amount

    def apply_level_up(self, stat_points: int, hp_gain: int, restore_fraction: float) -> None:
        """Advance one level, grant points and HP, then restore HP."""
        if self.level >= MAX_LEVEL:
            raise DomainValidationError(f"level cannot exceed {MAX_LEVEL}", field="level")
        old_level = self.level
        self.level += 1
        self.unspent_stat_points += stat_points
        self.max_hp += hp_gain
        restored = int(self.max_hp * restore_fraction)
        self.current_hp = min(self.max_hp, max(self.current_hp, restored))
        self.add_domain_event(
            "character.leveled_up",
            {
                "character_id": self.id,
                "old_level": old_level,
                "new_level": self.level,
                "stat_points_granted": stat_points,
                "max_hp": self.max_hp,
            },
        )

    def apply_paragon_level(self, stat_points: int) -> None:
        self.paragon_level += 1
        self.unspent_stat_points += stat_points
        self.add_domain_event(
            "character.paragon_leveled",
            {
                "character_id": self.id,
                "paragon_level": self.paragon_level,
                "stat_points_granted": stat_points,
            },
        )

    def allocate_stat_point(self, stat: StatType, amount: int = 1) -> None:
        validate_positive(amount, "amount")
        if self.unspent_stat_points < amount:
            raise DomainValidationError(
                f"only {self.unspent_stat_points} unspent stat points", field="unspent_stat_points"
            )
        self.unspent_stat_points -= amount
        self.base_stats = self.base_stats.with_added(stat, amount)

    def change_class(self, new_class: CharacterClass) -> None:
        old_class = self.character_class
        self.character_class = new_class
        self.add_domain_event(
            "character.class_evolved",
            {
                "character_id": self.id,
                "old_class": old_class.value if old_class else None,
                "new_class": new_class.value,
            },
        )

    def reset_for_rebirth(
        self,
        new_class: CharacterClass,
        starting_stats: Stats,
        max_hp: int,
        title: str,
    ) -> None:
        """
        Apply the rebirth reset as one step.

        Level, EXP, paragon and unspent points reset; the new starter class
        and its starting stats replace the old ones; rebirth_count grows.
        Gold, gems, equipment, achievements and materials are untouched.
        """
        previous_class = self.character_class
        self.level = 1
        self.current_exp = 0
        self.paragon_level = 0
        self.unspent_stat_points = 0
        self.character_class = new_class
        self.base_stats = starting_stats
        self.max_hp = max_hp
        self.current_hp = max_hp
        self.rebirth_count += 1
        self.award_title(title)
        self.add_domain_event(
            "character.reborn",
            {
                "character_id": self.id,
                "rebirth_count": self.rebirth_count,
                "previous_class": previous_class.value if previous_class else None,
                "new_class": new_class.value,
                "title": title,
            },
        )

    def award_title(self, title: str) -> None:
        self.title = title
        if title not in self.earned_titles:
            self.earned_titles.append(title)

    # =========================================================================
    # LOADOUT
    # =========================================================================

    def equip_item(self, item: EquipmentItem) -> Optional[str]:
        """
        Put ``item`` in its slot. Returns the id of the displaced item, if any.

        The caller must unequip the displaced item object (``unequip_item``)
        when it has it; this method only clears the loadout entry.
        """
        displaced = self.loadout.item_in(item.slot)
        self.loadout.set(item.slot, item.id)
        item.is_equipped = True
        return displaced if displaced != item.id else None

    def unequip_item(self, item: EquipmentItem) -> None:
        if self.loadout.item_in(item.slot) == item.id:
            self.loadout.set(item.slot, None)
        item.is_equipped = False

    def equipped_id(self, slot: EquipmentSlot) -> Optional[str]:
        return self.loadout.item_in(slot)

    # =========================================================================
    # QUESTS / ACHIEVEMENTS
    # =========================================================================

    def replace_daily_quests(self, quests: List[DailyQuest]) -> None:
        self.daily_quests = list(quests)

    def get_daily_quest(self, quest_id: str) -> Optional[DailyQuest]:
        for quest in self.daily_quests:
            if quest.quest_id == quest_id:
                return quest
        return None

    def get_achievement(self, key: str) -> Optional[Achievement]:
        return self.achievements.get(key)

    @property
    def unlocked_achievement_count(self) -> int:
        return sum(1 for a in self.achievements.values() if a.is_unlocked)

    def __repr__(self) -> str:
        return (
            f"Character(id={self.id!r}, level={self.level}, "
            f"class={self.character_class.value if self.character_class else None}, "
            f"rebirths={self.rebirth_count}, paragon={self.paragon_level})"
        )
