"""
Unit tests for ProgressionService.

Tests the EXP curve, level and paragon steps, class evolution gates,
rebirth and stat point allocation.
"""

import pytest

from questforge.domain.models import CharacterClass, Stats, StatType
from questforge.modules.shared.exceptions import InvalidOperationError
from tests.conftest import assert_domain_event_emitted, get_domain_event_payload


@pytest.mark.unit
class TestExpCurve:
    """Test EXP thresholds."""

    def test_known_thresholds(self, progression_service):
        """The default curve is 100 * (level - 1) ^ 1.5, floored."""
        assert progression_service.exp_required(1) == 0
        assert progression_service.exp_required(2) == 100
        assert progression_service.exp_required(3) == 282
        assert progression_service.exp_required(5) == 800

    def test_strictly_increasing(self, progression_service):
        """Each level costs more total EXP than the one before."""
        values = [progression_service.exp_required(level) for level in range(1, 101)]
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_paragon_curve_starts_above_cap(self, progression_service):
        """Paragon thresholds start past the cap threshold and keep growing."""
        cap = progression_service.exp_required(100)
        values = [progression_service.paragon_exp_required(p) for p in range(20)]

        assert values[0] > cap
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_exp_to_next(self, progression_service, make_character):
        """Remaining EXP is measured against the next threshold."""
        hero = make_character(current_exp=60)

        assert progression_service.exp_to_next(hero) == 40


@pytest.mark.unit
class TestLevelUp:
    """Test single level steps."""

    def test_level_up_when_threshold_met(self, progression_service, make_character):
        """Meeting the threshold grants a level, stat points and HP."""
        # Arrange
        hero = make_character(current_exp=100)

        # Act
        result = progression_service.level_up(hero)

        # Assert
        assert result is True
        assert hero.level == 2
        assert hero.unspent_stat_points == 5
        assert hero.max_hp == 110
        assert assert_domain_event_emitted(hero, "character.leveled_up")

    def test_level_up_below_threshold_is_noop(self, progression_service, make_character):
        """Below the threshold nothing changes."""
        hero = make_character(current_exp=99)

        result = progression_service.level_up(hero)

        assert result is False
        assert hero.level == 1
        assert hero.unspent_stat_points == 0
        assert hero.get_pending_events() == []

    def test_level_up_blocked_at_cap(self, progression_service, make_character):
        """Level 100 never levels up again."""
        hero = make_character(level=100, current_exp=10**9)

        assert progression_service.level_up(hero) is False
        assert hero.level == 100

    def test_class_restore_fraction(self, progression_service, make_character):
        """Mages restore 80% of max HP on level up."""
        hero = make_character(character_class=CharacterClass.MAGE, current_exp=100, current_hp=50)

        progression_service.level_up(hero)

        assert hero.current_hp == 88

    def test_scenario_level_99_to_100(self, progression_service, make_character):
        """One EXP short of the cap plus one EXP reaches level 100."""
        # Arrange
        hero = make_character(
            level=99,
            current_exp=progression_service.exp_required(100) - 1,
            max_hp=progression_service.max_hp_for_level(99),
        )

        # Act
        result = progression_service.add_exp(hero, 1)

        # Assert
        assert hero.level == 100
        assert result.levels_gained == 1
        assert hero.unspent_stat_points == 5
        assert progression_service.can_paragon_level_up(hero) is False


@pytest.mark.unit
class TestAddExp:
    """Test EXP intake."""

    def test_multiple_levels_in_one_call(self, progression_service, make_character):
        """A large grant takes every level it pays for."""
        hero = make_character()

        result = progression_service.add_exp(hero, 800)

        assert hero.level == 5
        assert result.levels_gained == 4
        assert result.leveled_up
        assert hero.unspent_stat_points == 20

    def test_rebirth_exp_bonus_applied(self, progression_service, make_character):
        """One rebirth adds 5% to incoming EXP."""
        hero = make_character(rebirth_count=1)

        result = progression_service.add_exp(hero, 100)

        assert result.exp_gained == 105
        assert hero.current_exp == 105

    def test_bonus_can_be_skipped(self, progression_service, make_character):
        """Raw grants bypass the rebirth bonus."""
        hero = make_character(rebirth_count=1)

        result = progression_service.add_exp(hero, 100, apply_bonus=False)

        assert result.exp_gained == 100

    def test_negative_amount_rejected(self, progression_service, character):
        """Negative EXP is a caller error."""
        with pytest.raises(InvalidOperationError):
            progression_service.add_exp(character, -1)


@pytest.mark.unit
class TestParagon:
    """Test paragon levels past the cap."""

    def test_paragon_level_up(self, progression_service, make_character):
        """Reaching the paragon threshold at the cap grants a paragon level."""
        # Arrange
        hero = make_character(level=100, current_exp=progression_service.paragon_exp_required(0))
        exp_before = hero.current_exp

        # Act
        result = progression_service.paragon_level_up(hero)

        # Assert
        assert result is True
        assert hero.paragon_level == 1
        assert hero.unspent_stat_points == 5
        assert hero.current_exp == exp_before
        assert get_domain_event_payload(hero, "character.paragon_leveled")["paragon_level"] == 1

    def test_paragon_requires_cap(self, progression_service, make_character):
        """Below the cap paragon levels are unavailable."""
        hero = make_character(level=99, current_exp=10**9)

        assert progression_service.paragon_level_up(hero) is False
        assert hero.paragon_level == 0

    def test_paragon_points_diminish(self, progression_service, make_character):
        """Paragon levels past the decay interval grant fewer points."""
        hero = make_character(
            level=100,
            paragon_level=10,
            current_exp=progression_service.paragon_exp_required(10),
        )

        progression_service.paragon_level_up(hero)

        assert hero.unspent_stat_points == 2

    def test_add_exp_loops_paragon(self, progression_service, make_character):
        """Intake at the cap takes every paragon level the EXP allows."""
        hero = make_character(level=100, current_exp=progression_service.exp_required(100))

        result = progression_service.add_exp(
            hero, progression_service.paragon_exp_required(2) - hero.current_exp
        )

        assert result.paragon_levels_gained == 3
        assert hero.paragon_level == 3


@pytest.mark.unit
class TestEvolution:
    """Test class evolution gates."""

    def test_evolve_when_gates_met(self, progression_service, make_character, inventory):
        """A level 20 warrior with 15 strength becomes a berserker."""
        # Arrange: base 11 + class 2 + Aries 2 = 15
        hero = make_character(level=20, base_stats=Stats(strength=11))

        # Act
        result = progression_service.evolve_class(hero, CharacterClass.BERSERKER, inventory)

        # Assert
        assert result is True
        assert hero.character_class == CharacterClass.BERSERKER
        assert hero.level == 20
        assert assert_domain_event_emitted(hero, "character.class_evolved")

    def test_evolve_blocked_by_stat(self, progression_service, make_character, inventory):
        """Evolution fails when the gating stat is short."""
        hero = make_character(level=20)

        assert progression_service.evolve_class(hero, CharacterClass.PALADIN, inventory) is False
        assert hero.character_class == CharacterClass.WARRIOR

    def test_evolve_blocked_by_level(self, progression_service, make_character, inventory):
        """Evolution fails below level 20."""
        hero = make_character(level=19, base_stats=Stats(strength=30))

        assert progression_service.evolve_class(hero, CharacterClass.BERSERKER, inventory) is False

    def test_evolve_into_foreign_branch(self, progression_service, make_character, inventory):
        """A warrior cannot evolve into a mage branch."""
        hero = make_character(level=20, base_stats=Stats(wisdom=30))

        assert progression_service.evolve_class(hero, CharacterClass.SORCERER, inventory) is False

    def test_equipment_counts_toward_gate(self, progression_service, make_character, make_item):
        """Effective stats, including gear, gate evolution."""
        from questforge.domain.models import Inventory

        hero = make_character(level=20)
        sword = make_item(primary_bonus=3)
        inventory = Inventory(owner_id=hero.id, items=[sword])
        hero.equip_item(sword)

        assert progression_service.evolution_options(hero, inventory) == [CharacterClass.BERSERKER]

    def test_advanced_class_cannot_evolve_again(self, progression_service, make_character, inventory):
        """Evolution is a single step."""
        hero = make_character(
            character_class=CharacterClass.BERSERKER, level=50, base_stats=Stats(defense=40)
        )

        assert progression_service.evolve_class(hero, CharacterClass.PALADIN, inventory) is False

    def test_assign_starter_class(self, progression_service, make_character):
        """A classless character may pick a starter class only."""
        hero = make_character(character_class=None)

        assert progression_service.assign_starter_class(hero, CharacterClass.RANGER) is False
        assert progression_service.assign_starter_class(hero, CharacterClass.ARCHER) is True
        assert progression_service.assign_starter_class(hero, CharacterClass.MAGE) is False
        assert hero.character_class == CharacterClass.ARCHER


@pytest.mark.unit
class TestRebirth:
    """Test the rebirth reset and ledger."""

    def test_scenario_rebirth_at_cap(self, progression_service, make_character):
        """Level 100 rebirth resets progress and grows the ledger."""
        # Arrange
        hero = make_character(
            character_class=CharacterClass.BERSERKER,
            level=100,
            current_exp=progression_service.exp_required(100),
            gold=1234,
            gems=5,
            max_hp=1090,
            base_stats=Stats(strength=60),
        )

        # Act
        result = progression_service.perform_rebirth(hero, CharacterClass.MAGE)

        # Assert
        assert result is True
        assert hero.level == 1
        assert hero.current_exp == 0
        assert hero.rebirth_count == 1
        assert hero.character_class == CharacterClass.MAGE
        assert hero.base_stats.wisdom == 8
        assert hero.max_hp == hero.current_hp == 100
        assert (hero.gold, hero.gems) == (1234, 5)
        assert hero.title == "Reborn"
        assert progression_service.rebirth_bonus(hero).exp_bonus > 0

    def test_rebirth_requires_cap(self, progression_service, make_character):
        """Rebirth below level 100 is rejected."""
        hero = make_character(level=99)

        assert progression_service.perform_rebirth(hero, CharacterClass.MAGE) is False
        assert hero.rebirth_count == 0

    def test_rebirth_requires_starter_class(self, progression_service, make_character):
        """Rebirth into an advanced class is rejected without change."""
        hero = make_character(level=100)

        assert progression_service.perform_rebirth(hero, CharacterClass.SORCERER) is False
        assert hero.level == 100
        assert hero.get_pending_events() == []

    def test_ledger_is_monotonic(self, progression_service, make_character):
        """More rebirths never lower any bonus."""
        previous = None
        for count in range(12):
            bonus = progression_service.rebirth_bonus(make_character(rebirth_count=count))
            if previous is not None:
                assert bonus.dominates(previous)
            previous = bonus

    def test_eternal_title(self, progression_service, make_character):
        """Rebirths past the title table use the eternal title."""
        hero = make_character(level=100, rebirth_count=4)

        progression_service.perform_rebirth(hero, CharacterClass.ARCHER)

        assert hero.title == "Eternal Archer"


@pytest.mark.unit
class TestStatAllocation:
    """Test spending unspent stat points."""

    def test_allocate(self, progression_service, make_character):
        """Points move from unspent into base stats."""
        hero = make_character(unspent_stat_points=5)

        assert progression_service.allocate_stat_point(hero, StatType.LUCK, 3) is True
        assert hero.base_stats.luck == 7
        assert hero.unspent_stat_points == 2

    def test_allocate_too_many(self, progression_service, make_character):
        """Allocation beyond unspent points is rejected."""
        hero = make_character(unspent_stat_points=1)

        assert progression_service.allocate_stat_point(hero, StatType.LUCK, 2) is False
        assert hero.base_stats.luck == 4

    def test_allocate_zero_is_invalid(self, progression_service, character):
        """A zero amount is a caller error."""
        with pytest.raises(InvalidOperationError):
            progression_service.allocate_stat_point(character, StatType.LUCK, 0)
