"""
Domain models for the questforge engine.

Rich models own state and the primitive transitions that keep their
invariants; services decide when a transition is allowed.
"""

from questforge.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
    Entity,
    ValueObject,
)
from questforge.domain.models.catalogue import (
    AchievementDefinition,
    BonusQuestRules,
    ClassDefinition,
    EnhancementLevelRule,
    EnhancementRules,
    ForgeRecipe,
    ForgeRules,
    LevelingRules,
    LevelTitle,
    QuestTemplate,
    QuestTier,
    RarityRule,
    RebirthBonus,
    RebirthRules,
    SalvageRule,
    ZodiacDefinition,
)
from questforge.domain.models.character import Character
from questforge.domain.models.enums import (
    CharacterClass,
    ClassTier,
    EquipmentSlot,
    MaterialType,
    QuestType,
    Rarity,
    RewardType,
    StatType,
    ZodiacSign,
)
from questforge.domain.models.equipment import EquipmentItem, Inventory, Loadout
from questforge.domain.models.quest import Achievement, DailyQuest
from questforge.domain.models.stats import EffectiveStats, StatBreakdown, Stats

__all__ = [
    # Base classes
    "AggregateRoot",
    "DomainEvent",
    "DomainValidationError",
    "Entity",
    "ValueObject",
    # Aggregates and entities
    "Character",
    "EquipmentItem",
    "Inventory",
    "Loadout",
    "DailyQuest",
    "Achievement",
    # Value objects
    "Stats",
    "StatBreakdown",
    "EffectiveStats",
    "RebirthBonus",
    # Catalogue definitions
    "AchievementDefinition",
    "BonusQuestRules",
    "ClassDefinition",
    "EnhancementLevelRule",
    "EnhancementRules",
    "ForgeRecipe",
    "ForgeRules",
    "LevelingRules",
    "LevelTitle",
    "QuestTemplate",
    "QuestTier",
    "RarityRule",
    "RebirthRules",
    "SalvageRule",
    "ZodiacDefinition",
    # Enums
    "CharacterClass",
    "ClassTier",
    "EquipmentSlot",
    "MaterialType",
    "QuestType",
    "Rarity",
    "RewardType",
    "StatType",
    "ZodiacSign",
]
