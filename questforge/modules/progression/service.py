"""
Leveling & Prestige Service

Purpose
-------
The progression state machine: EXP intake, level-up, paragon levels past
the cap, class evolution, rebirth and stat point allocation.

Responsibilities
----------------
- EXP thresholds from the catalogue curve
- One-step ``level_up`` / ``paragon_level_up`` with gates
- ``add_exp`` intake that applies the rebirth EXP bonus and loops the steps
- Class evolution gated on class tier, level and an effective stat
- Rebirth reset and ledger growth

Failure Semantics
-----------------
Every gated command returns ``False`` without touching state when a gate is
not met. Nothing here raises for an unmet gate; ``InvalidOperationError`` is
reserved for meaningless arguments such as a negative EXP amount.

State Machine
-------------
    Leveling(1..cap-1) --level_up--> Leveling / ParagonEligible(cap)
    ParagonEligible --paragon_level_up--> ParagonEligible (paragon + 1)
    level >= rebirth level --perform_rebirth--> Leveling(1), rebirth_count + 1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from questforge.core.config.catalogue import Catalogue
from questforge.core.logging.logger import get_logger
from questforge.domain.models.catalogue import RebirthBonus
from questforge.domain.models.character import Character
from questforge.domain.models.enums import CharacterClass, StatType
from questforge.domain.models.equipment import Inventory
from questforge.modules.shared.base_service import BaseService
from questforge.modules.shared.formulas import (
    apply_percent,
    exp_required,
    paragon_exp_required,
    paragon_stat_points,
    rebirth_bonus,
    rebirth_title,
)
from questforge.modules.stats.service import StatService


@dataclass(frozen=True)
class ExpGainResult:
    """Outcome of one ``add_exp`` call."""

    exp_gained: int
    levels_gained: int
    paragon_levels_gained: int
    new_level: int
    new_paragon_level: int

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0 or self.paragon_levels_gained > 0


class ProgressionService(BaseService):
    """Leveling, paragon, evolution and rebirth rules."""

    def __init__(self, catalogue: Catalogue, stats: StatService, logger=None) -> None:
        super().__init__(catalogue, logger or get_logger(__name__))
        self.stats = stats

    @property
    def rules(self):
        return self.catalogue.leveling

    # =========================================================================
    # CURVES
    # =========================================================================

    def exp_required(self, level: int) -> int:
        return exp_required(level, self.rules.exp_base, self.rules.exp_exponent)

    def paragon_exp_required(self, paragon_level: int) -> int:
        return paragon_exp_required(
            paragon_level, self.exp_required(self.rules.level_cap), self.rules.paragon_growth
        )

    def max_hp_for_level(self, level: int) -> int:
        return self.rules.base_max_hp + (level - 1) * self.rules.hp_per_level

    def exp_to_next(self, character: Character) -> int:
        """EXP still missing for the next level or paragon level."""
        if character.level < self.rules.level_cap:
            target = self.exp_required(character.level + 1)
        else:
            target = self.paragon_exp_required(character.paragon_level)
        return max(0, target - character.current_exp)

    def rebirth_bonus(self, character: Character) -> RebirthBonus:
        return rebirth_bonus(character.rebirth_count, self.catalogue.rebirth)

    # =========================================================================
    # LEVELING
    # =========================================================================

    def can_level_up(self, character: Character) -> bool:
        return (
            character.level < self.rules.level_cap
            and character.current_exp >= self.exp_required(character.level + 1)
        )

    def level_up(self, character: Character) -> bool:
        """Advance exactly one level if the EXP threshold is met."""
        if not self.can_level_up(character):
            return self.reject(
                "level_up",
                "level cap reached" if character.level >= self.rules.level_cap else "not enough EXP",
                character_id=character.id,
                level=character.level,
                current_exp=character.current_exp,
            )

        restore = 1.0
        if character.character_class is not None:
            restore = self.catalogue.class_definition(character.character_class).hp_restore_fraction

        character.apply_level_up(
            stat_points=self.rules.stat_points_per_level,
            hp_gain=self.rules.hp_per_level,
            restore_fraction=restore,
        )
        self.log_operation(
            "level_up",
            character_id=character.id,
            new_level=character.level,
            unspent_stat_points=character.unspent_stat_points,
        )
        return True

    def can_paragon_level_up(self, character: Character) -> bool:
        return (
            character.level >= self.rules.level_cap
            and character.current_exp >= self.paragon_exp_required(character.paragon_level)
        )

    def paragon_level_up(self, character: Character) -> bool:
        """Advance one paragon level. EXP is cumulative and is not consumed."""
        if not self.can_paragon_level_up(character):
            return self.reject(
                "paragon_level_up",
                "below level cap" if character.level < self.rules.level_cap else "not enough EXP",
                character_id=character.id,
                paragon_level=character.paragon_level,
            )

        points = paragon_stat_points(
            character.paragon_level,
            self.rules.paragon_base_points,
            self.rules.paragon_decay_interval,
        )
        character.apply_paragon_level(stat_points=points)
        self.log_operation(
            "paragon_level_up",
            character_id=character.id,
            paragon_level=character.paragon_level,
            stat_points=points,
        )
        return True

    def add_exp(self, character: Character, amount: int, apply_bonus: bool = True) -> ExpGainResult:
        """
        EXP intake: apply the rebirth EXP bonus, then take every level and
        paragon step the new total allows.
        """
        self.validate_non_negative_int(amount, "amount", "add_exp")
        gained = apply_percent(amount, self.rebirth_bonus(character).exp_bonus) if apply_bonus else amount
        start_level, start_paragon = character.level, character.paragon_level

        character.gain_exp(gained)
        while self.level_up(character):
            pass
        while self.paragon_level_up(character):
            pass

        result = ExpGainResult(
            exp_gained=gained,
            levels_gained=character.level - start_level,
            paragon_levels_gained=character.paragon_level - start_paragon,
            new_level=character.level,
            new_paragon_level=character.paragon_level,
        )
        self.log.debug(
            "EXP added",
            extra={
                "character_id": character.id,
                "requested": amount,
                "exp_gained": gained,
                "levels_gained": result.levels_gained,
            },
        )
        return result

    def allocate_stat_point(self, character: Character, stat: StatType, amount: int = 1) -> bool:
        self.validate_positive_int(amount, "amount", "allocate_stat_point")
        if character.unspent_stat_points < amount:
            return self.reject(
                "allocate_stat_point",
                "not enough unspent stat points",
                character_id=character.id,
                unspent=character.unspent_stat_points,
            )
        character.allocate_stat_point(stat, amount)
        self.log_operation("allocate_stat_point", character_id=character.id, stat=stat.value, amount=amount)
        return True

    # =========================================================================
    # CLASSES
    # =========================================================================

    def assign_starter_class(self, character: Character, starter: CharacterClass) -> bool:
        """Pick a first class for a classless character."""
        if character.character_class is not None:
            return self.reject("assign_starter_class", "character already has a class", character_id=character.id)
        if not self.catalogue.class_definition(starter).is_starter:
            return self.reject("assign_starter_class", f"{starter.value} is not a starter class")
        character.change_class(starter)
        self.log_operation("assign_starter_class", character_id=character.id, character_class=starter.value)
        return True

    def evolution_block_reason(
        self, character: Character, target: CharacterClass, inventory: Inventory
    ) -> Optional[str]:
        """Why ``target`` is not reachable right now, or None if it is."""
        if character.character_class is None:
            return "character has no class"
        current = self.catalogue.class_definition(character.character_class)
        if not current.is_starter:
            return "class already evolved"
        definition = self.catalogue.class_definition(target)
        if definition.evolves_from != current.character_class:
            return f"{target.value} does not evolve from {current.character_class.value}"
        if character.level < self.rules.evolution_level:
            return f"requires level {self.rules.evolution_level}"
        value = self.stats.effective_stat(character, inventory, definition.evolution_stat)
        if value < self.rules.evolution_threshold:
            return (
                f"requires {definition.evolution_stat.value} {self.rules.evolution_threshold}, "
                f"have {value}"
            )
        return None

    def evolution_options(self, character: Character, inventory: Inventory) -> List[CharacterClass]:
        if character.character_class is None:
            return []
        return [
            definition.character_class
            for definition in self.catalogue.evolutions_of(character.character_class)
            if self.evolution_block_reason(character, definition.character_class, inventory) is None
        ]

    def evolve_class(self, character: Character, target: CharacterClass, inventory: Inventory) -> bool:
        """Replace a starter class with one of its evolutions. Stats and level are unchanged."""
        reason = self.evolution_block_reason(character, target, inventory)
        if reason is not None:
            return self.reject("evolve_class", reason, character_id=character.id, target=target.value)
        character.change_class(target)
        self.log_operation("evolve_class", character_id=character.id, new_class=target.value)
        return True

    # =========================================================================
    # REBIRTH
    # =========================================================================

    def can_rebirth(self, character: Character) -> bool:
        return character.level >= self.catalogue.rebirth.required_level

    def perform_rebirth(self, character: Character, new_class: CharacterClass) -> bool:
        """
        Reset level, EXP, paragon and class for a permanent ledger bonus.

        ``new_class`` must be a starter class; its starting stats replace the
        base stats. Gold, gems, equipment, achievements and materials stay.
        """
        if not self.can_rebirth(character):
            return self.reject(
                "perform_rebirth",
                f"requires level {self.catalogue.rebirth.required_level}",
                character_id=character.id,
                level=character.level,
            )
        definition = self.catalogue.class_definition(new_class)
        if not definition.is_starter:
            return self.reject("perform_rebirth", f"{new_class.value} is not a starter class")

        before = self.rebirth_bonus(character)
        title = rebirth_title(
            character.rebirth_count + 1, new_class.display_name, self.catalogue.rebirth
        )
        character.reset_for_rebirth(
            new_class=new_class,
            starting_stats=definition.starting_stats,
            max_hp=self.max_hp_for_level(1),
            title=title,
        )
        after = self.rebirth_bonus(character)
        self.log_operation(
            "perform_rebirth",
            character_id=character.id,
            rebirth_count=character.rebirth_count,
            title=title,
            exp_bonus=after.exp_bonus,
            all_stats_bonus=after.all_stats_bonus,
            ledger_grew=after.dominates(before),
        )
        return True
