"""
Unit tests for StatService.

Tests effective stat resolution, the per-source breakdown and loadout
consistency checks.
"""

import pytest

from questforge.domain.models import EquipmentSlot, Inventory, Stats, StatType, ZodiacSign
from questforge.modules.shared.exceptions import InvariantViolationError


@pytest.mark.unit
class TestStatResolution:
    """Test effective stat values."""

    def test_base_class_and_zodiac(self, stat_service, character, inventory):
        """Warrior born under Aries gets class and zodiac strength on top of base."""
        # Arrange: warrior starting strength 8, Aries boosts strength

        # Act
        stats = stat_service.resolve(character, inventory)

        # Assert
        assert stats.get(StatType.STRENGTH) == 8 + 2 + 2
        assert stats.get(StatType.WISDOM) == 3

    def test_classless_character_has_no_class_bonus(self, stat_service, make_character, inventory):
        """A character without a class only gets base and zodiac."""
        hero = make_character(character_class=None, zodiac_sign=ZodiacSign.PISCES)

        stats = stat_service.resolve(hero, inventory)

        assert stats.get(StatType.STRENGTH) == 5
        assert stats.get(StatType.LUCK) == 7
        assert stats.breakdown[StatType.LUCK].amount_from("class") == 0

    def test_equipped_primary_and_secondary(self, stat_service, character, make_item):
        """Equipped items add to their primary and secondary stats only."""
        # Arrange
        ring = make_item(
            slot=EquipmentSlot.ACCESSORY,
            primary_stat=StatType.LUCK,
            primary_bonus=4,
            secondary_stat=StatType.CHARISMA,
            secondary_bonus=2,
        )
        inventory = Inventory(owner_id=character.id, items=[ring])
        character.equip_item(ring)

        # Act
        stats = stat_service.resolve(character, inventory)

        # Assert
        assert stats.get(StatType.LUCK) == 4 + 4
        assert stats.get(StatType.CHARISMA) == 3 + 2
        assert stats.breakdown[StatType.LUCK].amount_from("equipment:accessory") == 4

    def test_unequipped_items_do_not_count(self, stat_service, character, make_item):
        """Owned but unequipped items contribute nothing."""
        inventory = Inventory(owner_id=character.id, items=[make_item(primary_bonus=9)])

        stats = stat_service.resolve(character, inventory)

        assert stats.get(StatType.STRENGTH) == 12

    def test_enhancement_adds_to_primary(self, stat_service, character, make_item):
        """Enhancement levels raise the primary bonus."""
        sword = make_item(primary_bonus=3, enhancement_level=2)
        inventory = Inventory(owner_id=character.id, items=[sword])
        character.equip_item(sword)

        stats = stat_service.resolve(character, inventory)

        assert stats.get(StatType.STRENGTH) == 12 + 5

    def test_rebirth_percent_scales_and_floors(self, stat_service, make_character, inventory):
        """The all-stats rebirth bonus scales the sum and rounds down."""
        # Arrange: five rebirths give 3% + 1% all stats
        hero = make_character(rebirth_count=5, base_stats=Stats(strength=90))

        # Act
        stats = stat_service.resolve(hero, inventory)

        # Assert: (90 + 2 + 2) * 1.04 = 97.76
        assert stats.get(StatType.STRENGTH) == 97
        assert stats.breakdown[StatType.STRENGTH].amount_from("rebirth") == 3


@pytest.mark.unit
class TestStatBreakdown:
    """Test the breakdown sum invariant."""

    @pytest.mark.parametrize("rebirths", [0, 1, 4, 5, 9])
    def test_breakdown_sums_to_effective(self, stat_service, make_character, make_item, rebirths):
        """Every stat's sources sum exactly to its effective value."""
        # Arrange
        hero = make_character(rebirth_count=rebirths, base_stats=Stats(13, 7, 21, 4, 17, 33))
        items = [
            make_item(slot=EquipmentSlot.WEAPON, primary_stat=StatType.STRENGTH, primary_bonus=11),
            make_item(
                slot=EquipmentSlot.TRINKET,
                primary_stat=StatType.LUCK,
                primary_bonus=6,
                secondary_stat=StatType.STRENGTH,
                secondary_bonus=3,
            ),
        ]
        inventory = Inventory(owner_id=hero.id, items=items)
        for item in items:
            hero.equip_item(item)

        # Act
        stats = stat_service.resolve(hero, inventory)

        # Assert
        for stat in StatType:
            assert stats.breakdown[stat].total == stats.get(stat)
            assert stats.breakdown[stat].sources[0][0] == "base"

    def test_resolution_is_pure(self, stat_service, character, inventory):
        """Resolving twice yields the same result and changes nothing."""
        first = stat_service.resolve(character, inventory)
        second = stat_service.resolve(character, inventory)

        assert first.values == second.values
        assert character.get_pending_events() == []


@pytest.mark.unit
class TestLoadoutConsistency:
    """Test invariant violations surfaced during resolution."""

    def test_loadout_references_missing_item(self, stat_service, character, make_item, inventory):
        """A loadout slot naming an item outside the inventory is corruption."""
        character.equip_item(make_item())

        with pytest.raises(InvariantViolationError) as exc_info:
            stat_service.resolve(character, inventory)

        assert exc_info.value.details["invariant"] == "loadout_item_owned"

    def test_flag_without_slot(self, stat_service, character, make_item):
        """An item flagged equipped but missing from the loadout is corruption."""
        sword = make_item(is_equipped=True)
        inventory = Inventory(owner_id=character.id, items=[sword])

        with pytest.raises(InvariantViolationError):
            stat_service.resolve(character, inventory)

    def test_equipment_bonus_total(self, stat_service, character, make_item):
        """Equipment total sums primary and secondary bonuses of equipped items."""
        ring = make_item(
            slot=EquipmentSlot.ACCESSORY,
            primary_stat=StatType.LUCK,
            primary_bonus=4,
            secondary_stat=StatType.CHARISMA,
            secondary_bonus=2,
        )
        inventory = Inventory(owner_id=character.id, items=[ring])
        character.equip_item(ring)

        assert stat_service.equipment_bonus_total(character, inventory) == 6
