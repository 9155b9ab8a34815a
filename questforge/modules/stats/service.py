"""
Stat Resolution Service

Purpose
-------
Combine every bonus source into a character's effective stats and expose a
per-stat breakdown whose named amounts always sum to the effective value.

Responsibilities
----------------
- Sum base, class passive, zodiac and equipped item bonuses
- Apply the rebirth all-stats percentage (floored)
- Report each source by name in a ``StatBreakdown``
- Verify the loadout/item consistency of the snapshot it reads

Non-Responsibilities
--------------------
- Mutation of any kind (this service is a pure query)

Design Notes
------------
- The rebirth percentage applies to the summed value, then floors. The
  breakdown records ``scaled - raw`` as the ``rebirth`` source, so the sum
  is exact by construction and no source is ever fractional.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from questforge.core.config.catalogue import Catalogue
from questforge.core.logging.logger import get_logger
from questforge.domain.models.character import Character
from questforge.domain.models.enums import EquipmentSlot, StatType
from questforge.domain.models.equipment import EquipmentItem, Inventory
from questforge.domain.models.stats import EffectiveStats, StatBreakdown
from questforge.modules.shared.base_service import BaseService
from questforge.modules.shared.constants import (
    SOURCE_BASE,
    SOURCE_CLASS,
    SOURCE_EQUIPMENT_PREFIX,
    SOURCE_REBIRTH,
    SOURCE_ZODIAC,
)
from questforge.modules.shared.formulas import apply_percent, rebirth_bonus


class StatService(BaseService):
    """Pure stat resolution over a character snapshot and its inventory."""

    def __init__(self, catalogue: Catalogue, logger=None) -> None:
        super().__init__(catalogue, logger or get_logger(__name__))

    def equipped_items(
        self, character: Character, inventory: Inventory
    ) -> List[Tuple[EquipmentSlot, EquipmentItem]]:
        """
        Resolve the loadout to item objects, checking consistency.

        Raises
        ------
        InvariantViolationError
            The loadout names an unknown item, an item sits in the wrong slot,
            or an item flagged equipped is not in the loadout.
        """
        resolved: List[Tuple[EquipmentSlot, EquipmentItem]] = []
        for slot, item_id in character.loadout.equipped_ids():
            item = inventory.get_item(item_id)
            if item is None:
                raise self.violation(
                    "equipped_items",
                    "loadout_item_owned",
                    f"slot {slot.value} references item {item_id} not in inventory",
                    character_id=character.id,
                    slot=slot.value,
                    item_id=item_id,
                )
            if item.slot != slot or not item.is_equipped:
                raise self.violation(
                    "equipped_items",
                    "loadout_item_flag",
                    f"item {item_id} in slot {slot.value} is inconsistent "
                    f"(item slot {item.slot.value}, equipped={item.is_equipped})",
                    character_id=character.id,
                    item_id=item_id,
                )
            resolved.append((slot, item))

        for item in inventory.items:
            if item.is_equipped and character.loadout.item_in(item.slot) != item.id:
                raise self.violation(
                    "equipped_items",
                    "loadout_item_flag",
                    f"item {item.id} is flagged equipped but not in the loadout",
                    character_id=character.id,
                    item_id=item.id,
                )
        return resolved

    def resolve(self, character: Character, inventory: Inventory) -> EffectiveStats:
        """
        Effective value and breakdown for all six stats.

        Example:
            >>> stats = service.resolve(character, inventory)
            >>> stats.get(StatType.STRENGTH) == stats.breakdown[StatType.STRENGTH].total
            True
        """
        equipped = self.equipped_items(character, inventory)
        class_stat, class_bonus = self._class_bonus(character)
        zodiac = self.catalogue.zodiac_definition(character.zodiac_sign)
        all_stats_percent = rebirth_bonus(character.rebirth_count, self.catalogue.rebirth).all_stats_bonus

        values: Dict[StatType, int] = {}
        breakdown: Dict[StatType, StatBreakdown] = {}

        for stat in StatType:
            sources: List[Tuple[str, int]] = [(SOURCE_BASE, character.base_stats.get(stat))]
            if stat == class_stat and class_bonus:
                sources.append((SOURCE_CLASS, class_bonus))
            if stat == zodiac.boosted_stat and self.catalogue.leveling.zodiac_bonus:
                sources.append((SOURCE_ZODIAC, self.catalogue.leveling.zodiac_bonus))
            for slot, item in equipped:
                amount = item.bonus_for(stat)
                if amount:
                    sources.append((f"{SOURCE_EQUIPMENT_PREFIX}{slot.value}", amount))

            raw = sum(amount for _, amount in sources)
            scaled = apply_percent(raw, all_stats_percent)
            if scaled != raw:
                sources.append((SOURCE_REBIRTH, scaled - raw))

            values[stat] = scaled
            breakdown[stat] = StatBreakdown(stat=stat, sources=tuple(sources))

        return EffectiveStats(values=values, breakdown=breakdown)

    def effective_stat(self, character: Character, inventory: Inventory, stat: StatType) -> int:
        return self.resolve(character, inventory).get(stat)

    def equipment_bonus_total(self, character: Character, inventory: Inventory) -> int:
        return sum(item.total_bonus for _, item in self.equipped_items(character, inventory))

    def _class_bonus(self, character: Character) -> Tuple[Optional[StatType], int]:
        if character.character_class is None:
            return None, 0
        definition = self.catalogue.class_definition(character.character_class)
        return definition.primary_stat, definition.passive_bonus
