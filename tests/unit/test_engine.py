"""
Unit tests for ProgressionEngine.

Tests the facade wiring: event flushing to the sink, counters fed into
achievements and quests after each command, and character creation.
"""

from datetime import date

import pytest

from questforge.domain.models import (
    CharacterClass,
    DailyQuest,
    EquipmentSlot,
    QuestType,
    StatType,
    ZodiacSign,
)
from questforge.modules.shared.exceptions import InvalidOperationError


@pytest.mark.unit
class TestCreateCharacter:
    """Test character creation through the engine."""

    def test_starter_character(self, engine):
        """New characters start at level 1 with class stats and achievement records."""
        hero = engine.create_character("hero-9", "Rook", ZodiacSign.LEO, CharacterClass.WARRIOR)

        assert hero.level == 1
        assert hero.base_stats.get(StatType.DEFENSE) == 10
        assert hero.max_hp == 100
        assert len(hero.achievements) == 21
        assert engine.level_title(hero) == "Novice"

    def test_classless_character(self, engine):
        """The class can be picked later."""
        hero = engine.create_character("hero-9", "Rook", ZodiacSign.PISCES)

        assert hero.character_class is None
        assert hero.base_stats.total() == 0

    def test_advanced_class_rejected(self, engine):
        """Characters cannot start in an advanced class."""
        with pytest.raises(InvalidOperationError):
            engine.create_character("hero-9", "Rook", ZodiacSign.LEO, CharacterClass.PALADIN)


@pytest.mark.unit
class TestEngineExp:
    """Test EXP commands and event flushing."""

    def test_add_exp_publishes_level_events(self, engine, event_sink, character):
        """Each level gained reaches the sink and the pending queue is drained."""
        # Act
        result = engine.add_exp(character, 500)

        # Assert
        assert result.new_level == 3
        assert event_sink.names().count("character.leveled_up") == 2
        assert character.get_pending_events() == []

    def test_level_achievement_synced(self, engine, event_sink, make_character):
        """Reaching level 10 unlocks Apprentice and pays its gold."""
        # Arrange
        hero = make_character(level=9, current_exp=2600)

        # Act
        engine.add_exp(hero, 100)

        # Assert
        assert hero.level == 10
        assert hero.get_achievement("apprentice").is_unlocked
        assert hero.gold == 200
        assert "achievement.unlocked" in event_sink.names()

    def test_achievement_exp_reward_can_level(self, engine, character):
        """EXP granted by an achievement is applied and the level counter follows."""
        # Arrange
        character.gain_exp(60)

        # Act
        unlocked = engine.advance_achievement_progress(character, "tasks_completed")

        # Assert
        assert [a.key for a in unlocked] == ["first_steps"]
        assert character.current_exp == 110
        assert character.level == 2
        assert character.get_achievement("apprentice").current_value == 2

    def test_paragon_level_up_without_exp(self, engine, character):
        """Paragon needs the level cap."""
        assert engine.paragon_level_up(character) is False


@pytest.mark.unit
class TestEngineClasses:
    """Test class commands."""

    def test_assign_starter_class_unlocks_specialized(self, engine, make_character):
        """Picking a class counts as a class change."""
        hero = make_character(character_class=None)

        assert engine.assign_starter_class(hero, CharacterClass.MAGE)
        assert hero.get_achievement("specialized").is_unlocked

    def test_rebirth_unlocks_born_again(self, engine, event_sink, make_character):
        """A rebirth feeds the absolute rebirth count."""
        # Arrange
        hero = make_character(level=100, current_exp=999_999)

        # Act
        ok = engine.perform_rebirth(hero, CharacterClass.MAGE)

        # Assert
        assert ok
        assert hero.rebirth_count == 1
        assert hero.get_achievement("born_again").is_unlocked
        assert hero.gems == 25
        assert "character.reborn" in event_sink.names()

    def test_rebirth_into_advanced_class_rejected(self, engine, event_sink, make_character):
        """Rebirth only accepts starter classes."""
        hero = make_character(level=100, current_exp=999_999)

        assert engine.perform_rebirth(hero, CharacterClass.SORCERER) is False
        assert hero.rebirth_count == 0
        assert "character.reborn" not in event_sink.names()


@pytest.mark.unit
class TestEngineForge:
    """Test forging through the engine."""

    def test_forge_feeds_achievements_and_quests(self, engine, event_sink, make_character, stocked_inventory):
        """A forged item counts for the forge achievement and forge quests."""
        # Arrange
        hero = make_character(gold=100)
        quest = DailyQuest(
            quest_type=QuestType.FORGE_ITEM,
            title="Apprentice Smith",
            target_value=1,
            exp_reward=40,
            gold_reward=10,
            generated_for=date(2024, 5, 1),
        )
        hero.replace_daily_quests([quest])
        recipe = engine.catalogue.recipe(1)

        # Act
        item = engine.forge(EquipmentSlot.WEAPON, recipe, hero, stocked_inventory)

        # Assert
        assert item is not None
        assert stocked_inventory.owns(item)
        assert hero.get_achievement("first_forge").is_unlocked
        assert hero.gold == 100 - 25 + 50
        assert quest.is_completed
        assert "equipment.forged" in event_sink.names()

    def test_failed_forge_changes_nothing(self, engine, event_sink, character, inventory):
        """An unaffordable recipe yields no item and no counters."""
        item = engine.forge(EquipmentSlot.WEAPON, engine.catalogue.recipe(1), character, inventory)

        assert item is None
        assert character.get_achievement("first_forge") is None
        assert event_sink.events == []

    def test_equip_and_hero_power(self, engine, character, inventory, make_item):
        """Equipped bonuses count twice in hero power: as stats and as equipment."""
        # Arrange
        item = make_item(primary_bonus=3)
        inventory.add_item(item)
        before = engine.hero_power(character, inventory)

        # Act
        assert engine.equip(item, character, inventory)

        # Assert
        assert before == 37 * 10 + 1 * 5
        assert engine.hero_power(character, inventory) == 40 * 10 + 1 * 5 + 3 * 8

    def test_salvage_through_engine(self, engine, event_sink, character, inventory, make_item):
        """Salvaging returns materials and publishes the event."""
        item = make_item()
        inventory.add_item(item)

        result = engine.salvage(item, character, inventory)

        assert result is not None
        assert character.gold == 5
        assert event_sink.names() == ["equipment.salvaged"]

    def test_enhance_through_engine(self, engine, event_sink, character, inventory, make_item):
        """Enhancing spends gold, raises the item and publishes the event."""
        item = make_item(primary_bonus=3)
        inventory.add_item(item)
        character.add_gold(50)

        result = engine.enhance(item, character, inventory)

        assert result.success is True
        assert item.enhancement_level == 1
        assert character.gold == 0
        assert event_sink.names() == ["equipment.enhanced"]


@pytest.mark.unit
class TestEngineQuests:
    """Test quest commands."""

    def test_generate_daily_quests(self, engine, character):
        """A rotation of regular quests plus a bonus quest is stored."""
        quests = engine.generate_daily_quests(character, date(2024, 5, 1))

        assert len(quests) == 4
        assert quests[-1].quest_type == QuestType.BONUS
        assert character.daily_quests == quests

    def test_claim_quest_publishes(self, engine, event_sink, character):
        """Claiming pays out and is published."""
        # Arrange
        quest = DailyQuest(
            quest_type=QuestType.COMPLETE_TASKS,
            title="Task Warrior",
            target_value=3,
            exp_reward=30,
            gold_reward=15,
            generated_for=date(2024, 5, 1),
        )
        character.replace_daily_quests([quest])
        engine.advance_quest_progress(character, QuestType.COMPLETE_TASKS, 3)

        # Act
        ok = engine.claim_quest(character, quest)

        # Assert
        assert ok
        assert character.current_exp == 30
        assert character.gold == 15
        assert "quest.claimed" in event_sink.names()
        assert engine.claim_quest(character, quest) is False


@pytest.mark.unit
class TestEngineQueries:
    """Test read-only engine queries."""

    def test_resolve_stats(self, engine, character, inventory):
        """Warrior class bonus and Aries zodiac both land on strength."""
        stats = engine.resolve_stats(character, inventory)

        assert stats.get(StatType.STRENGTH) == 12
        assert stats.breakdown[StatType.STRENGTH].total == 12

    def test_can_afford_recipe(self, engine, make_character, stocked_inventory, inventory):
        hero = make_character(gold=100)
        recipe = engine.catalogue.recipe(1)

        assert engine.can_afford_recipe(recipe, hero, stocked_inventory) is True
        assert engine.can_afford_recipe(recipe, hero, inventory) is False

    def test_evolution_options_and_allocation(self, engine, make_character, inventory):
        """Spending points into strength opens the berserker path at level 20."""
        # Arrange
        hero = make_character(level=20, unspent_stat_points=5)
        assert CharacterClass.BERSERKER not in engine.evolution_options(hero, inventory)

        # Act
        assert engine.allocate_stat_point(hero, StatType.STRENGTH, 3)

        # Assert
        assert hero.unspent_stat_points == 2
        assert CharacterClass.BERSERKER in engine.evolution_options(hero, inventory)
