"""
Closed enumerations for the progression engine.

Every catalogue identifier that used to travel as a raw string (stat names,
classes, zodiac signs, rarities, slots, material kinds, quest kinds) is a
member of one of these enums. The catalogue loader converts YAML strings
once at load time; everything downstream works with enum members.
"""

from __future__ import annotations

from enum import Enum
from typing import List


class StatType(str, Enum):
    """The six named character stats."""

    STRENGTH = "strength"
    WISDOM = "wisdom"
    CHARISMA = "charisma"
    DEXTERITY = "dexterity"
    LUCK = "luck"
    DEFENSE = "defense"


class ClassTier(str, Enum):
    STARTER = "starter"
    ADVANCED = "advanced"


class CharacterClass(str, Enum):
    """Playable classes. Tier and evolution paths live in the catalogue."""

    WARRIOR = "warrior"
    MAGE = "mage"
    ARCHER = "archer"
    BERSERKER = "berserker"
    PALADIN = "paladin"
    SORCERER = "sorcerer"
    ENCHANTER = "enchanter"
    RANGER = "ranger"
    TRICKSTER = "trickster"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ZodiacSign(str, Enum):
    ARIES = "aries"
    TAURUS = "taurus"
    GEMINI = "gemini"
    CANCER = "cancer"
    LEO = "leo"
    VIRGO = "virgo"
    LIBRA = "libra"
    SCORPIO = "scorpio"
    SAGITTARIUS = "sagittarius"
    CAPRICORN = "capricorn"
    AQUARIUS = "aquarius"
    PISCES = "pisces"


class Rarity(str, Enum):
    """Item and material rarity, ordered from common to legendary."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return _RARITY_ORDER.index(self)

    @classmethod
    def ordered(cls) -> List["Rarity"]:
        return list(_RARITY_ORDER)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank >= other.rank


_RARITY_ORDER: List[Rarity] = [
    Rarity.COMMON,
    Rarity.UNCOMMON,
    Rarity.RARE,
    Rarity.EPIC,
    Rarity.LEGENDARY,
]


class EquipmentSlot(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    ACCESSORY = "accessory"
    TRINKET = "trinket"


class MaterialType(str, Enum):
    """Crafting material kinds. Ore, crystal and hide are general materials."""

    ESSENCE = "essence"
    ORE = "ore"
    CRYSTAL = "crystal"
    HIDE = "hide"
    HERB = "herb"
    FRAGMENT = "fragment"

    @property
    def is_general(self) -> bool:
        return self in (MaterialType.ORE, MaterialType.CRYSTAL, MaterialType.HIDE)


class QuestType(str, Enum):
    """Counters that daily quests track."""

    COMPLETE_TASKS = "complete_tasks"
    COMPLETE_CATEGORY = "complete_category"
    START_TRAINING = "start_training"
    CLEAR_DUNGEON_ROOMS = "clear_dungeon_rooms"
    EARN_EXP = "earn_exp"
    EARN_GOLD = "earn_gold"
    MAINTAIN_STREAK = "maintain_streak"
    FORGE_ITEM = "forge_item"
    USE_CONSUMABLE = "use_consumable"
    LOG_MOOD = "log_mood"
    BONUS = "bonus"


class RewardType(str, Enum):
    EXP = "exp"
    GOLD = "gold"
    GEMS = "gems"
    TITLE = "title"
