"""
Unit tests for AchievementService.

Tests record creation, counter feeds, unlocks and one-time rewards.
"""

import pytest

from questforge.modules.shared.exceptions import InvalidOperationError
from tests.conftest import assert_domain_event_emitted


@pytest.mark.unit
class TestEnsureAchievements:
    """Test progress record creation."""

    def test_creates_every_definition(self, achievement_service, catalogue, character):
        """Each catalogue achievement gets a record."""
        records = achievement_service.ensure_achievements(character)

        assert set(records) == set(catalogue.achievements)
        assert all(not a.is_unlocked for a in records.values())

    def test_keeps_existing_progress(self, achievement_service, character):
        """Existing records are not reset."""
        achievement_service.advance(character, "tasks_completed", 7)

        achievement_service.ensure_achievements(character)

        assert character.get_achievement("dedicated").current_value == 7


@pytest.mark.unit
class TestAdvance:
    """Test counter feeds and unlocks."""

    def test_first_unlock_grants_exp(self, achievement_service, character):
        """First Steps unlocks on the first task and grants 50 EXP."""
        # Act
        unlocked = achievement_service.advance(character, "tasks_completed")

        # Assert
        assert [a.key for a in unlocked] == ["first_steps"]
        assert character.current_exp == 50
        assert character.get_achievement("first_steps").reward_granted
        assert assert_domain_event_emitted(character, "achievement.unlocked")

    def test_reward_granted_once(self, achievement_service, character):
        """Further progress never pays an unlocked achievement again."""
        achievement_service.advance(character, "tasks_completed")

        unlocked = achievement_service.advance(character, "tasks_completed")

        assert unlocked == []
        assert character.current_exp == 50

    def test_shared_counter_feeds_all(self, achievement_service, character):
        """Every achievement tracking a counter advances together."""
        achievement_service.advance(character, "tasks_completed", 100)

        assert character.get_achievement("dedicated").is_unlocked
        assert character.get_achievement("centurion").is_unlocked
        assert not character.get_achievement("legendary_worker").is_unlocked
        assert character.gems == 5
        assert character.gold == 500

    def test_absolute_counter_is_monotonic(self, achievement_service, character):
        """Level is reported as a value and never lowers progress."""
        achievement_service.advance(character, "level", 12)
        achievement_service.advance(character, "level", 3)

        apprentice = character.get_achievement("apprentice")
        assert apprentice.current_value == 12
        assert apprentice.is_unlocked
        assert character.gold == 200

    def test_title_reward(self, achievement_service, character):
        """Title rewards become the character's title."""
        achievement_service.advance(character, "items_forged", 25)

        assert character.title == "Master Smith"
        assert "Master Smith" in character.earned_titles

    def test_restored_unlock_without_reward_is_paid(self, achievement_service, character):
        """A snapshot unlocked but unpaid is rewarded on the next check."""
        # Arrange
        records = achievement_service.ensure_achievements(character)
        records["rare_find"].current_value = 1
        records["rare_find"].is_unlocked = True

        # Act
        unlocked = achievement_service.advance(character, "rare_items", 0)

        # Assert
        assert unlocked == []
        assert records["rare_find"].reward_granted
        assert character.gold == 300

    def test_unknown_counter_is_ignored(self, achievement_service, character):
        """Counters nothing tracks change nothing."""
        assert achievement_service.advance(character, "mood_logged", 4) == []

    def test_negative_amount_invalid(self, achievement_service, character):
        """Negative increments are caller errors."""
        with pytest.raises(InvalidOperationError):
            achievement_service.advance(character, "tasks_completed", -1)
