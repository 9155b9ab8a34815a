"""
Progression Engine facade.

Purpose
-------
Single entry point for hosts. Wires the stat, progression, forge, quest and
achievement services around one catalogue, one event sink and one random
source, and runs every command inside a ``LogContext``.

Responsibilities
----------------
- Construct services with shared dependencies (no module-level singletons)
- Feed engine-driven achievement counters and quest progress after each
  command (level, rebirth count, items forged, rare/legendary items, class
  changes, forge quests)
- Drain the character's queued domain events into the event sink

Non-Responsibilities
--------------------
- Persistence and locking (hosts serialise mutations per character)
- Reporting of host-side counters such as completed tasks; hosts call
  ``advance_quest_progress`` / ``advance_achievement_progress`` directly

Usage Example
-------------
>>> engine = ProgressionEngine(sink=InMemoryEventSink(), rng=SeededRandomSource(7))
>>> hero = engine.create_character("hero-1", "Aria", ZodiacSign.LEO, CharacterClass.WARRIOR)
>>> engine.add_exp(hero, 500).new_level
3
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from questforge.core.config.catalogue import Catalogue, CatalogueLoader
from questforge.core.config.config import Config
from questforge.core.event.sink import EventSink, NullEventSink, publish_all
from questforge.core.logging.logger import LogContext, get_logger
from questforge.domain.models.catalogue import ForgeRecipe
from questforge.domain.models.character import Character
from questforge.domain.models.enums import (
    CharacterClass,
    EquipmentSlot,
    QuestType,
    Rarity,
    StatType,
    ZodiacSign,
)
from questforge.domain.models.equipment import EquipmentItem, Inventory
from questforge.domain.models.quest import Achievement, DailyQuest
from questforge.domain.models.stats import EffectiveStats, Stats
from questforge.modules.achievements.service import AchievementService
from questforge.modules.forge.service import EnhancementResult, ForgeService, SalvageResult
from questforge.modules.progression.service import ExpGainResult, ProgressionService
from questforge.modules.quests.service import QuestService
from questforge.modules.shared.constants import (
    COUNTER_CLASS_EVOLVED,
    COUNTER_ITEMS_FORGED,
    COUNTER_LEGENDARY_ITEMS,
    COUNTER_LEVEL,
    COUNTER_RARE_ITEMS,
    COUNTER_REBIRTH,
)
from questforge.modules.shared.exceptions import InvalidOperationError
from questforge.modules.shared.formulas import hero_power
from questforge.modules.shared.random_source import (
    RandomSource,
    SeededRandomSource,
    SystemRandomSource,
)
from questforge.modules.stats.service import StatService

logger = get_logger(__name__)


class ProgressionEngine:
    """
    Host-facing API over the progression and economy services.

    Parameters
    ----------
    catalogue:
        Balance data; loaded from ``Config.CATALOGUE_PATH`` when omitted.
    sink:
        Receives domain events after each command; discards them when omitted.
    rng:
        Source for every roll; seeded from ``Config.RANDOM_SEED`` when set,
        OS entropy otherwise.
    """

    def __init__(
        self,
        catalogue: Optional[Catalogue] = None,
        sink: Optional[EventSink] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.catalogue = catalogue or CatalogueLoader.load()
        self.sink: EventSink = sink or NullEventSink()
        if rng is None:
            rng = (
                SeededRandomSource(Config.RANDOM_SEED)
                if Config.RANDOM_SEED is not None
                else SystemRandomSource()
            )
        self.rng = rng

        self.stats = StatService(self.catalogue)
        self.progression = ProgressionService(self.catalogue, self.stats)
        self.forge_service = ForgeService(self.catalogue, self.stats, self.rng)
        self.quests = QuestService(self.catalogue, self.progression, self.rng)
        self.achievements = AchievementService(self.catalogue, self.progression)

        logger.info(
            "Progression engine ready",
            extra={
                "classes": len(self.catalogue.classes),
                "recipes": len(self.catalogue.recipes),
                "rng": type(self.rng).__name__,
                "sink": type(self.sink).__name__,
            },
        )

    # =========================================================================
    # CHARACTERS
    # =========================================================================

    def create_character(
        self,
        character_id: str,
        name: str,
        zodiac_sign: ZodiacSign,
        character_class: Optional[CharacterClass] = None,
    ) -> Character:
        """New level-1 character with its starter class stats and achievement records."""
        base_stats = Stats()
        if character_class is not None:
            definition = self.catalogue.class_definition(character_class)
            if not definition.is_starter:
                raise InvalidOperationError(
                    "create_character", f"{character_class.value} is not a starter class"
                )
            base_stats = definition.starting_stats
        max_hp = self.progression.max_hp_for_level(1)
        character = Character(
            character_id=character_id,
            name=name,
            zodiac_sign=zodiac_sign,
            character_class=character_class,
            base_stats=base_stats,
            max_hp=max_hp,
        )
        self.achievements.ensure_achievements(character)
        return character

    def level_title(self, character: Character) -> str:
        return self.catalogue.level_title(character.level)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def resolve_stats(self, character: Character, inventory: Inventory) -> EffectiveStats:
        return self.stats.resolve(character, inventory)

    def can_afford_recipe(
        self, recipe: ForgeRecipe, character: Character, inventory: Inventory
    ) -> bool:
        return self.forge_service.can_afford(recipe, character, inventory)

    def evolution_options(self, character: Character, inventory: Inventory) -> List[CharacterClass]:
        return self.progression.evolution_options(character, inventory)

    def hero_power(self, character: Character, inventory: Inventory) -> int:
        return hero_power(
            self.stats.resolve(character, inventory).total(),
            character.level,
            self.stats.equipment_bonus_total(character, inventory),
            character.unlocked_achievement_count,
        )

    # =========================================================================
    # PROGRESSION COMMANDS
    # =========================================================================

    def add_exp(self, character: Character, amount: int) -> ExpGainResult:
        with LogContext(character_id=character.id, operation="add_exp"):
            result = self.progression.add_exp(character, amount)
            self._sync_level(character)
            self._flush(character)
            return result

    def level_up(self, character: Character) -> bool:
        with LogContext(character_id=character.id, operation="level_up"):
            ok = self.progression.level_up(character)
            if ok:
                self._sync_level(character)
            self._flush(character)
            return ok

    def paragon_level_up(self, character: Character) -> bool:
        with LogContext(character_id=character.id, operation="paragon_level_up"):
            ok = self.progression.paragon_level_up(character)
            self._flush(character)
            return ok

    def allocate_stat_point(self, character: Character, stat: StatType, amount: int = 1) -> bool:
        with LogContext(character_id=character.id, operation="allocate_stat_point"):
            return self.progression.allocate_stat_point(character, stat, amount)

    def assign_starter_class(self, character: Character, starter: CharacterClass) -> bool:
        with LogContext(character_id=character.id, operation="assign_starter_class"):
            ok = self.progression.assign_starter_class(character, starter)
            if ok:
                self.achievements.advance(character, COUNTER_CLASS_EVOLVED)
            self._flush(character)
            return ok

    def evolve_class(self, character: Character, target: CharacterClass, inventory: Inventory) -> bool:
        with LogContext(character_id=character.id, operation="evolve_class"):
            ok = self.progression.evolve_class(character, target, inventory)
            if ok:
                self.achievements.advance(character, COUNTER_CLASS_EVOLVED)
            self._flush(character)
            return ok

    def perform_rebirth(self, character: Character, new_class: CharacterClass) -> bool:
        with LogContext(character_id=character.id, operation="perform_rebirth"):
            ok = self.progression.perform_rebirth(character, new_class)
            if ok:
                self.achievements.advance(character, COUNTER_REBIRTH, character.rebirth_count)
            self._flush(character)
            return ok

    # =========================================================================
    # EQUIPMENT COMMANDS
    # =========================================================================

    def forge(
        self,
        slot: EquipmentSlot,
        recipe: ForgeRecipe,
        character: Character,
        inventory: Inventory,
    ) -> Optional[EquipmentItem]:
        with LogContext(character_id=character.id, operation="forge", tier=recipe.tier):
            item = self.forge_service.forge(slot, recipe, character, inventory)
            if item is not None:
                self.achievements.advance(character, COUNTER_ITEMS_FORGED)
                if item.rarity >= Rarity.RARE:
                    self.achievements.advance(character, COUNTER_RARE_ITEMS)
                if item.rarity == Rarity.LEGENDARY:
                    self.achievements.advance(character, COUNTER_LEGENDARY_ITEMS)
                self.quests.advance_quest_progress(character, QuestType.FORGE_ITEM)
                self._sync_level(character)
            self._flush(character)
            return item

    def equip(self, item: EquipmentItem, character: Character, inventory: Inventory) -> bool:
        with LogContext(character_id=character.id, operation="equip"):
            ok = self.forge_service.equip(item, character, inventory)
            self._flush(character)
            return ok

    def unequip(self, item: EquipmentItem, character: Character, inventory: Inventory) -> bool:
        with LogContext(character_id=character.id, operation="unequip"):
            ok = self.forge_service.unequip(item, character, inventory)
            self._flush(character)
            return ok

    def salvage(
        self, item: EquipmentItem, character: Character, inventory: Inventory
    ) -> Optional[SalvageResult]:
        with LogContext(character_id=character.id, operation="salvage"):
            result = self.forge_service.salvage(item, character, inventory)
            self._flush(character)
            return result

    def enhance(
        self, item: EquipmentItem, character: Character, inventory: Inventory
    ) -> Optional[EnhancementResult]:
        with LogContext(character_id=character.id, operation="enhance"):
            result = self.forge_service.enhance(item, character, inventory)
            self._flush(character)
            return result

    # =========================================================================
    # QUESTS / ACHIEVEMENTS
    # =========================================================================

    def generate_daily_quests(self, character: Character, for_date: date) -> List[DailyQuest]:
        with LogContext(character_id=character.id, operation="generate_daily_quests"):
            return self.quests.generate_daily_quests(character, for_date)

    def advance_quest_progress(
        self,
        character: Character,
        quest_type: QuestType,
        amount: int = 1,
        parameter: Optional[str] = None,
    ) -> List[DailyQuest]:
        with LogContext(character_id=character.id, operation="advance_quest_progress"):
            return self.quests.advance_quest_progress(character, quest_type, amount, parameter)

    def claim_quest(self, character: Character, quest: DailyQuest) -> bool:
        with LogContext(character_id=character.id, operation="claim_quest"):
            ok = self.quests.claim_quest(character, quest)
            if ok:
                self._sync_level(character)
            self._flush(character)
            return ok

    def advance_achievement_progress(
        self, character: Character, tracking_key: str, amount: int = 1
    ) -> List[Achievement]:
        with LogContext(character_id=character.id, operation="advance_achievement_progress"):
            unlocked = self.achievements.advance(character, tracking_key, amount)
            self._sync_level(character)
            self._flush(character)
            return unlocked

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _sync_level(self, character: Character) -> None:
        # EXP rewards can raise the level again; loop until stable.
        seen = -1
        while seen != character.level:
            seen = character.level
            self.achievements.advance(character, COUNTER_LEVEL, character.level)

    def _flush(self, character: Character) -> int:
        return publish_all(self.sink, character.clear_domain_events())

