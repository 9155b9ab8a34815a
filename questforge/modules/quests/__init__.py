"""Daily quest rotation."""

from questforge.modules.quests.service import QuestService

__all__ = ["QuestService"]
