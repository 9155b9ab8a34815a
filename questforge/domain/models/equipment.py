"""
Equipment domain models.

Purpose
-------
Represent crafted equipment, the per-character loadout, and the crafting
material inventory the forge draws from.

Responsibilities
----------------
- ``EquipmentItem``: stat bonuses, level requirement, equipped flag
- ``Loadout``: slot -> item id mapping (one item per slot)
- ``Inventory``: owned items plus material stacks keyed by kind and rarity

Non-Responsibilities
--------------------
- Equip rules and cost deduction (handled by ``ForgeService``)
- Keeping ``is_equipped`` and the loadout in sync (handled by ``Character``)

Design Notes
------------
- Material stacks never go negative. ``Inventory.remove_material`` raises
  ``DomainValidationError`` rather than clamping, so a bad deduction plan
  surfaces immediately instead of silently minting materials.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from uuid import uuid4

from questforge.domain.models.base import (
    DomainValidationError,
    Entity,
    validate_non_negative,
    validate_positive,
    validate_range,
)
from questforge.domain.models.enums import EquipmentSlot, MaterialType, Rarity, StatType

MAX_ENHANCEMENT_LEVEL = 10


class EquipmentItem(Entity):
    """
    A piece of equipment owned by a character.

    Parameters
    ----------
    item_id : str
        Unique identifier
    name : str
        Display name
    slot : EquipmentSlot
        Slot the item occupies when equipped
    rarity : Rarity
        Rarity tier
    primary_stat, primary_bonus :
        Main stat and its bonus
    secondary_stat, secondary_bonus :
        Optional second stat; always different from the primary stat
    level_requirement : int
        Minimum character level to equip
    owner_id : str
        Owning character id
    enhancement_level : int
        0..10, added to the primary bonus
    """

    def __init__(
        self,
        item_id: str,
        name: str,
        slot: EquipmentSlot,
        rarity: Rarity,
        primary_stat: StatType,
        primary_bonus: int,
        level_requirement: int,
        owner_id: str,
        secondary_stat: Optional[StatType] = None,
        secondary_bonus: int = 0,
        enhancement_level: int = 0,
        is_equipped: bool = False,
    ) -> None:
        super().__init__(item_id)
        self.name = name
        self.slot = slot
        self.rarity = rarity
        self.primary_stat = primary_stat
        self.primary_bonus = primary_bonus
        self.secondary_stat = secondary_stat
        self.secondary_bonus = secondary_bonus if secondary_stat is not None else 0
        self.level_requirement = level_requirement
        self.owner_id = owner_id
        self.enhancement_level = enhancement_level
        self.is_equipped = is_equipped
        self._validate()

    def _validate(self) -> None:
        validate_non_negative(self.primary_bonus, "primary_bonus")
        validate_non_negative(self.secondary_bonus, "secondary_bonus")
        validate_positive(self.level_requirement, "level_requirement")
        validate_range(self.enhancement_level, 0, MAX_ENHANCEMENT_LEVEL, "enhancement_level")
        if self.secondary_stat is not None and self.secondary_stat == self.primary_stat:
            raise DomainValidationError(
                "secondary_stat must differ from primary_stat",
                field="secondary_stat",
            )

    @property
    def effective_primary_bonus(self) -> int:
        return self.primary_bonus + self.enhancement_level

    def bonus_for(self, stat: StatType) -> int:
        """Bonus this item grants to ``stat`` (zero unless primary or secondary)."""
        if stat == self.primary_stat:
            return self.effective_primary_bonus
        if stat == self.secondary_stat:
            return self.secondary_bonus
        return 0

    @property
    def total_bonus(self) -> int:
        return self.effective_primary_bonus + self.secondary_bonus

    def apply_enhancement(self, stat_gain: int) -> None:
        """Raise the enhancement level by one and fold ``stat_gain`` into the primary bonus."""
        validate_non_negative(stat_gain, "stat_gain")
        if self.enhancement_level >= MAX_ENHANCEMENT_LEVEL:
            raise DomainValidationError(
                f"enhancement_level cannot exceed {MAX_ENHANCEMENT_LEVEL}",
                field="enhancement_level",
            )
        self.enhancement_level += 1
        self.primary_bonus += stat_gain

    @classmethod
    def new_id(cls) -> str:
        return uuid4().hex

    def __repr__(self) -> str:
        return (
            f"EquipmentItem(id={self.id!r}, slot={self.slot.value}, "
            f"rarity={self.rarity.value}, {self.primary_stat.value}+{self.effective_primary_bonus}, "
            f"equipped={self.is_equipped})"
        )


@dataclass
class Loadout:
    """Slot -> equipped item id. Every slot is always present as a key."""

    slots: Dict[EquipmentSlot, Optional[str]] = field(
        default_factory=lambda: {slot: None for slot in EquipmentSlot}
    )

    def __post_init__(self) -> None:
        for slot in EquipmentSlot:
            self.slots.setdefault(slot, None)

    def item_in(self, slot: EquipmentSlot) -> Optional[str]:
        return self.slots.get(slot)

    def set(self, slot: EquipmentSlot, item_id: Optional[str]) -> None:
        self.slots[slot] = item_id

    def equipped_ids(self) -> Iterator[Tuple[EquipmentSlot, str]]:
        for slot in EquipmentSlot:
            item_id = self.slots.get(slot)
            if item_id is not None:
                yield slot, item_id


MaterialKey = Tuple[MaterialType, Rarity]


class Inventory:
    """
    Owned equipment and crafting materials for one character.

    Material stacks are keyed by ``(MaterialType, Rarity)``.
    """

    def __init__(
        self,
        owner_id: str,
        items: Optional[Iterable[EquipmentItem]] = None,
        materials: Optional[Dict[MaterialKey, int]] = None,
    ) -> None:
        self.owner_id = owner_id
        self._items: Dict[str, EquipmentItem] = {}
        self._materials: Counter = Counter()
        for item in items or ():
            self.add_item(item)
        for (material, rarity), quantity in (materials or {}).items():
            self.add_material(material, rarity, quantity)

    # ------------------------------------------------------------------
    # Equipment
    # ------------------------------------------------------------------

    def add_item(self, item: EquipmentItem) -> None:
        if item.owner_id != self.owner_id:
            raise DomainValidationError(
                f"item {item.id} belongs to {item.owner_id}, not {self.owner_id}",
                field="owner_id",
            )
        self._items[item.id] = item

    def remove_item(self, item_id: str) -> EquipmentItem:
        return self._items.pop(item_id)

    def get_item(self, item_id: str) -> Optional[EquipmentItem]:
        return self._items.get(item_id)

    def owns(self, item: EquipmentItem) -> bool:
        return item.id in self._items

    @property
    def items(self) -> List[EquipmentItem]:
        return list(self._items.values())

    # ------------------------------------------------------------------
    # Materials
    # ------------------------------------------------------------------

    def quantity(self, material: MaterialType, rarity: Optional[Rarity] = None) -> int:
        """Quantity of one stack, or of every rarity when ``rarity`` is None."""
        if rarity is not None:
            return self._materials[(material, rarity)]
        return sum(self._materials[(material, r)] for r in Rarity.ordered())

    def general_quantity(self, min_rarity: Rarity) -> int:
        """Ore, crystal and hide at or above ``min_rarity``."""
        return sum(
            quantity
            for (material, rarity), quantity in self._materials.items()
            if material.is_general and rarity >= min_rarity
        )

    def stacks(self) -> Dict[MaterialKey, int]:
        return {key: qty for key, qty in self._materials.items() if qty > 0}

    def add_material(self, material: MaterialType, rarity: Rarity, quantity: int) -> None:
        validate_non_negative(quantity, "quantity")
        if quantity:
            self._materials[(material, rarity)] += quantity

    def remove_material(self, material: MaterialType, rarity: Rarity, quantity: int) -> None:
        validate_non_negative(quantity, "quantity")
        have = self._materials[(material, rarity)]
        if have < quantity:
            raise DomainValidationError(
                f"cannot remove {quantity} {rarity.value} {material.value}; have {have}",
                field="materials",
            )
        self._materials[(material, rarity)] = have - quantity
