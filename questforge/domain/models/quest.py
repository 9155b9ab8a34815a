"""
Daily quest and achievement domain models.

Both are small state machines with one-way terminal flags:

- ``DailyQuest``: progress is clamped to the target, completion is derived,
  ``is_claimed`` flips once.
- ``Achievement``: progress only grows, ``is_unlocked`` flips once and
  records ``unlocked_at``; ``reward_granted`` guards the reward.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, Union
from uuid import uuid4

from questforge.domain.models.base import DomainValidationError, validate_non_negative, validate_positive
from questforge.domain.models.enums import QuestType, RewardType


@dataclass
class DailyQuest:
    """
    One quest in a character's daily rotation.

    Attributes
    ----------
    quest_type : QuestType
        Counter this quest tracks (``BONUS`` for the meta quest)
    title : str
        Display title
    target_value : int
        Progress needed to complete
    exp_reward, gold_reward : int
        Granted on claim
    parameter : Optional[str]
        Extra filter, e.g. the category for ``COMPLETE_CATEGORY``
    current_value : int
        Progress, never above ``target_value``
    is_claimed : bool
        Terminal flag
    """

    quest_type: QuestType
    title: str
    target_value: int
    exp_reward: int
    gold_reward: int
    generated_for: date
    parameter: Optional[str] = None
    current_value: int = 0
    is_claimed: bool = False
    quest_id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self) -> None:
        validate_positive(self.target_value, "target_value")
        validate_non_negative(self.exp_reward, "exp_reward")
        validate_non_negative(self.gold_reward, "gold_reward")
        self.current_value = min(max(self.current_value, 0), self.target_value)

    @property
    def is_bonus_quest(self) -> bool:
        return self.quest_type == QuestType.BONUS

    @property
    def is_completed(self) -> bool:
        return self.current_value >= self.target_value

    @property
    def progress_fraction(self) -> float:
        return self.current_value / self.target_value

    def matches(self, quest_type: QuestType, parameter: Optional[str] = None) -> bool:
        if self.quest_type != quest_type:
            return False
        return self.parameter is None or self.parameter == parameter

    def record_progress(self, amount: int) -> int:
        """Add ``amount`` (clamped to the target). Returns the amount applied."""
        validate_non_negative(amount, "amount")
        if self.is_claimed:
            return 0
        before = self.current_value
        self.current_value = min(self.target_value, self.current_value + amount)
        return self.current_value - before

    def set_progress(self, value: int) -> None:
        if not self.is_claimed:
            self.current_value = min(max(value, 0), self.target_value)

    def mark_claimed(self) -> None:
        if self.is_claimed:
            raise DomainValidationError("quest already claimed", field="is_claimed")
        if not self.is_completed:
            raise DomainValidationError("quest not completed", field="current_value")
        self.is_claimed = True


@dataclass
class Achievement:
    """
    Progress record for one achievement definition.

    ``reward_type``/``reward_value`` are copied from the definition so a
    snapshot is self-describing.
    """

    key: str
    name: str
    tracking_key: str
    target_value: int
    reward_type: RewardType
    reward_value: Union[int, str]
    current_value: int = 0
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None
    reward_granted: bool = False

    def __post_init__(self) -> None:
        validate_positive(self.target_value, "target_value")
        validate_non_negative(self.current_value, "current_value")

    @property
    def progress_fraction(self) -> float:
        return min(1.0, self.current_value / self.target_value)

    def advance(self, amount: int) -> None:
        validate_non_negative(amount, "amount")
        self.current_value += amount

    def raise_to(self, value: int) -> None:
        """Monotonic set: used for counters like level where the host reports a level."""
        self.current_value = max(self.current_value, value)

    def try_unlock(self, now: Optional[datetime] = None) -> bool:
        """Flip to unlocked if the target is reached. True only on the transition."""
        if self.is_unlocked or self.current_value < self.target_value:
            return False
        self.is_unlocked = True
        self.unlocked_at = now or datetime.now(timezone.utc)
        return True
