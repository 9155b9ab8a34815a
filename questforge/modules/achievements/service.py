"""
Achievement Service

Purpose
-------
Track long-term achievement counters and grant each achievement's reward
exactly once when it unlocks.

Design Notes
------------
- Counters listed in ``ABSOLUTE_COUNTERS`` (level, rebirth count) are
  reported as absolute values and only ever raise progress; all others
  are increments.
- Unlocking and rewarding are separate flags so a snapshot restored with
  ``is_unlocked`` but without ``reward_granted`` is paid on the next check.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from questforge.core.config.catalogue import Catalogue
from questforge.core.logging.logger import get_logger
from questforge.domain.models.character import Character
from questforge.domain.models.enums import RewardType
from questforge.domain.models.quest import Achievement
from questforge.modules.progression.service import ProgressionService
from questforge.modules.shared.base_service import BaseService
from questforge.modules.shared.constants import ABSOLUTE_COUNTERS


class AchievementService(BaseService):
    """Achievement progress, unlocks and rewards."""

    def __init__(self, catalogue: Catalogue, progression: ProgressionService, logger=None) -> None:
        super().__init__(catalogue, logger or get_logger(__name__))
        self.progression = progression

    def ensure_achievements(self, character: Character) -> Dict[str, Achievement]:
        """Create progress records for catalogue achievements the character lacks."""
        for key, definition in self.catalogue.achievements.items():
            if key in character.achievements:
                continue
            character.achievements[key] = Achievement(
                key=key,
                name=definition.name,
                tracking_key=definition.tracking_key,
                target_value=definition.target,
                reward_type=definition.reward_type,
                reward_value=definition.reward_value,
            )
        return character.achievements

    def advance(
        self,
        character: Character,
        tracking_key: str,
        amount: int = 1,
        now: Optional[datetime] = None,
    ) -> List[Achievement]:
        """
        Feed a counter into every achievement that tracks it.

        Returns the achievements unlocked by this call.
        """
        self.validate_non_negative_int(amount, "amount", "advance_achievement")
        self.ensure_achievements(character)

        unlocked: List[Achievement] = []
        for achievement in character.achievements.values():
            if achievement.tracking_key != tracking_key:
                continue
            if tracking_key in ABSOLUTE_COUNTERS:
                achievement.raise_to(amount)
            else:
                achievement.advance(amount)
            if achievement.try_unlock(now):
                unlocked.append(achievement)
            if achievement.is_unlocked and not achievement.reward_granted:
                self._grant_reward(character, achievement)
        return unlocked

    def _grant_reward(self, character: Character, achievement: Achievement) -> None:
        achievement.reward_granted = True
        value = achievement.reward_value
        if achievement.reward_type == RewardType.EXP:
            self.progression.add_exp(character, int(value))
        elif achievement.reward_type == RewardType.GOLD:
            character.add_gold(int(value))
        elif achievement.reward_type == RewardType.GEMS:
            character.add_gems(int(value))
        elif achievement.reward_type == RewardType.TITLE:
            character.award_title(str(value))

        character.add_domain_event(
            "achievement.unlocked",
            {
                "character_id": character.id,
                "achievement": achievement.key,
                "reward_type": achievement.reward_type.value,
                "reward_value": value,
            },
        )
        self.log_operation(
            "achievement_unlocked",
            character_id=character.id,
            achievement=achievement.key,
            reward_type=achievement.reward_type.value,
        )
