"""Achievement tracking."""

from questforge.modules.achievements.service import AchievementService

__all__ = ["AchievementService"]
