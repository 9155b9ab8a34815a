"""
Daily Quest Service

Purpose
-------
Generate each character's daily quest rotation, record progress reported
by the host, and pay out claimed quests.

Responsibilities
----------------
- Weighted, level-gated draw of regular quests from the catalogue pool
- Scale targets and rewards by the template tier matching the level
- Maintain the bonus quest (complete every regular quest of the day)
- Claim rewards exactly once through the progression service

Design Notes
------------
- The draw is without replacement, so a day never repeats a template.
- Claimed EXP flows through ``ProgressionService.add_exp`` and therefore
  gets the rebirth EXP bonus; gold gets the rebirth gold bonus here.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from questforge.core.config.catalogue import Catalogue
from questforge.core.logging.logger import get_logger
from questforge.domain.models.catalogue import QuestTemplate
from questforge.domain.models.character import Character
from questforge.domain.models.enums import QuestType
from questforge.domain.models.quest import DailyQuest
from questforge.modules.progression.service import ProgressionService
from questforge.modules.shared.base_service import BaseService
from questforge.modules.shared.formulas import apply_percent, bonus_quest_rewards
from questforge.modules.shared.random_source import RandomSource


class QuestService(BaseService):
    """Daily quest rotation, progress and claims."""

    def __init__(
        self,
        catalogue: Catalogue,
        progression: ProgressionService,
        rng: RandomSource,
        logger=None,
    ) -> None:
        super().__init__(catalogue, logger or get_logger(__name__))
        self.progression = progression
        self.rng = rng

    # =========================================================================
    # GENERATION
    # =========================================================================

    def eligible_templates(self, level: int) -> List[QuestTemplate]:
        return [t for t in self.catalogue.quest_pool if t.min_level <= level]

    def _draw(self, templates: List[QuestTemplate], count: int) -> List[QuestTemplate]:
        pool = list(templates)
        drawn: List[QuestTemplate] = []
        while pool and len(drawn) < count:
            total = sum(t.weight for t in pool)
            pick = self.rng.random() * total
            for index, template in enumerate(pool):
                pick -= template.weight
                if pick < 0:
                    break
            drawn.append(pool.pop(index))
        return drawn

    def generate_daily_quests(self, character: Character, for_date: date) -> List[DailyQuest]:
        """
        Replace the character's quests with a fresh rotation for ``for_date``.

        The rotation holds up to ``bonus.regular_count`` regular quests plus
        one bonus quest whose target is the number of regular quests.
        """
        rules = self.catalogue.bonus_quest
        templates = self._draw(self.eligible_templates(character.level), rules.regular_count)

        quests: List[DailyQuest] = []
        for template in templates:
            tier = template.tier_for(character.level)
            quests.append(
                DailyQuest(
                    quest_type=template.quest_type,
                    title=template.title,
                    target_value=tier.target,
                    exp_reward=tier.exp_reward,
                    gold_reward=tier.gold_reward,
                    generated_for=for_date,
                    parameter=template.parameter,
                )
            )

        if quests:
            bonus_exp, bonus_gold = bonus_quest_rewards(
                [(q.exp_reward, q.gold_reward) for q in quests],
                rules.min_exp_reward,
                rules.min_gold_reward,
            )
            quests.append(
                DailyQuest(
                    quest_type=QuestType.BONUS,
                    title=rules.title,
                    target_value=len(quests),
                    exp_reward=bonus_exp,
                    gold_reward=bonus_gold,
                    generated_for=for_date,
                )
            )

        character.replace_daily_quests(quests)
        self.log_operation(
            "generate_daily_quests",
            character_id=character.id,
            date=for_date.isoformat(),
            quests=[q.quest_type.value for q in quests],
        )
        return quests

    # =========================================================================
    # PROGRESS
    # =========================================================================

    def _refresh_bonus(self, character: Character) -> None:
        regular = [q for q in character.daily_quests if not q.is_bonus_quest]
        done = sum(1 for q in regular if q.is_completed)
        for quest in character.daily_quests:
            if quest.is_bonus_quest:
                quest.set_progress(done)

    def advance_quest_progress(
        self,
        character: Character,
        quest_type: QuestType,
        amount: int = 1,
        parameter: Optional[str] = None,
    ) -> List[DailyQuest]:
        """
        Record ``amount`` of progress on every matching unclaimed quest.

        Returns the quests that became completed by this call.
        """
        self.validate_non_negative_int(amount, "amount", "advance_quest_progress")
        if quest_type == QuestType.BONUS:
            return []

        completed: List[DailyQuest] = []
        bonus_done = {q.quest_id for q in character.daily_quests if q.is_bonus_quest and q.is_completed}
        for quest in character.daily_quests:
            if quest.is_bonus_quest or not quest.matches(quest_type, parameter):
                continue
            was_done = quest.is_completed
            quest.record_progress(amount)
            if quest.is_completed and not was_done:
                completed.append(quest)

        self._refresh_bonus(character)
        completed.extend(
            q
            for q in character.daily_quests
            if q.is_bonus_quest and q.is_completed and q.quest_id not in bonus_done
        )
        return completed

    # =========================================================================
    # CLAIM
    # =========================================================================

    def claim_quest(self, character: Character, quest: DailyQuest) -> bool:
        """
        Grant a completed quest's rewards once.

        ``quest`` only identifies the quest; the character's own copy in its
        rotation is the one checked, marked and paid.
        """
        held = character.get_daily_quest(quest.quest_id)
        if held is None:
            return self.reject("claim_quest", "quest not assigned to character", quest_id=quest.quest_id)
        quest = held
        if quest.is_claimed:
            return self.reject("claim_quest", "quest already claimed", quest_id=quest.quest_id)
        if not quest.is_completed:
            return self.reject(
                "claim_quest",
                "quest not completed",
                quest_id=quest.quest_id,
                progress=f"{quest.current_value}/{quest.target_value}",
            )

        quest.mark_claimed()
        exp_result = self.progression.add_exp(character, quest.exp_reward)
        gold = apply_percent(quest.gold_reward, self.progression.rebirth_bonus(character).gold_bonus)
        character.add_gold(gold)

        character.add_domain_event(
            "quest.claimed",
            {
                "character_id": character.id,
                "quest_id": quest.quest_id,
                "quest_type": quest.quest_type.value,
                "exp": exp_result.exp_gained,
                "gold": gold,
            },
        )
        self.log_operation(
            "claim_quest",
            character_id=character.id,
            quest_type=quest.quest_type.value,
            exp=exp_result.exp_gained,
            gold=gold,
        )

        # Earned rewards feed the EXP and gold quests of the same day.
        if exp_result.exp_gained:
            self.advance_quest_progress(character, QuestType.EARN_EXP, exp_result.exp_gained)
        if gold:
            self.advance_quest_progress(character, QuestType.EARN_GOLD, gold)
        return True
