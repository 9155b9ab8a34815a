"""
Equipment & Forging Service

Purpose
-------
The equipment economy: recipe affordability, atomic forging of new items,
equip/unequip rules, enhancement and salvage.

Responsibilities
----------------
- Check gold, essence, fragments and general materials against a recipe
- Plan every deduction before touching state, then apply it in one pass
- Roll rarity (clamped into the recipe range) and stat bonuses through an
  injected ``RandomSource``
- Keep at most one equipped item per slot, with ``is_equipped`` and the
  loadout always agreeing
- Enhance owned items up to +10; gold is spent on every attempt
- Salvage owned items back into materials, fragments and gold

Design Notes
------------
- Material priority: essence and fragments are taken from the lowest rarity
  first, then general materials (ore, crystal, hide at or above the recipe's
  minimum rarity) lowest rarity first.
- The item is fully rolled before any cost is deducted; a missing catalogue
  entry therefore aborts the forge with nothing spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from questforge.core.config.catalogue import Catalogue
from questforge.core.logging.logger import get_logger
from questforge.domain.models.catalogue import ForgeRecipe
from questforge.domain.models.character import Character
from questforge.domain.models.enums import EquipmentSlot, MaterialType, Rarity, StatType
from questforge.domain.models.equipment import MAX_ENHANCEMENT_LEVEL, EquipmentItem, Inventory
from questforge.modules.shared.base_service import BaseService
from questforge.modules.shared.exceptions import InsufficientResourcesError
from questforge.modules.shared.formulas import item_level_requirement, rarity_from_roll, rebirth_bonus
from questforge.modules.shared.random_source import RandomSource
from questforge.modules.stats.service import StatService

Deduction = Tuple[MaterialType, Rarity, int]

_GENERAL_ORDER = (MaterialType.ORE, MaterialType.CRYSTAL, MaterialType.HIDE)


@dataclass(frozen=True)
class SalvageResult:
    item_id: str
    rarity: Rarity
    materials: int
    fragments: int
    gold: int
    material_type: Optional[MaterialType] = None


@dataclass(frozen=True)
class EnhancementResult:
    item_id: str
    success: bool
    critical: bool
    stat_gained: int
    new_level: int
    gold_spent: int


class ForgeService(BaseService):
    """Forging, equipment and salvage rules."""

    def __init__(
        self,
        catalogue: Catalogue,
        stats: StatService,
        rng: RandomSource,
        logger=None,
    ) -> None:
        super().__init__(catalogue, logger or get_logger(__name__))
        self.stats = stats
        self.rng = rng

    @property
    def rules(self):
        return self.catalogue.forge_rules

    # =========================================================================
    # AFFORDABILITY
    # =========================================================================

    def shortfalls(
        self, recipe: ForgeRecipe, character: Character, inventory: Inventory
    ) -> Dict[str, Tuple[int, int]]:
        """Resources the character is short of, as ``name -> (required, current)``."""
        checks = {
            "gold": (recipe.gold_cost, character.gold),
            "essence": (recipe.essence_cost, inventory.quantity(MaterialType.ESSENCE)),
            "fragment": (recipe.fragment_cost, inventory.quantity(MaterialType.FRAGMENT)),
            "material": (recipe.material_cost, inventory.general_quantity(recipe.min_material_rarity)),
        }
        return {name: pair for name, pair in checks.items() if pair[1] < pair[0]}

    def can_afford(self, recipe: ForgeRecipe, character: Character, inventory: Inventory) -> bool:
        return not self.shortfalls(recipe, character, inventory)

    def require_affordable(self, recipe: ForgeRecipe, character: Character, inventory: Inventory) -> None:
        """
        Raise :class:`InsufficientResourcesError` for the first missing resource.

        For hosts that want a hard failure before showing a forge preview;
        ``forge`` itself still returns None when the recipe is unaffordable.
        """
        missing = self.shortfalls(recipe, character, inventory)
        if missing:
            resource, (required, current) = next(iter(missing.items()))
            raise InsufficientResourcesError(resource, required, current)

    def _deduction_plan(self, recipe: ForgeRecipe, inventory: Inventory) -> Optional[List[Deduction]]:
        plan: List[Deduction] = []

        def take(materials: Tuple[MaterialType, ...], min_rarity: Rarity, needed: int) -> bool:
            for rarity in Rarity.ordered():
                if rarity < min_rarity:
                    continue
                for material in materials:
                    if needed == 0:
                        return True
                    available = inventory.quantity(material, rarity)
                    used = min(available, needed)
                    if used:
                        plan.append((material, rarity, used))
                        needed -= used
            return needed == 0

        if not take((MaterialType.ESSENCE,), Rarity.COMMON, recipe.essence_cost):
            return None
        if not take((MaterialType.FRAGMENT,), Rarity.COMMON, recipe.fragment_cost):
            return None
        if not take(_GENERAL_ORDER, recipe.min_material_rarity, recipe.material_cost):
            return None
        return plan

    # =========================================================================
    # ROLLS
    # =========================================================================

    def roll_rarity(self, recipe: ForgeRecipe, character: Character, inventory: Inventory) -> Rarity:
        """
        Roll a rarity, biased by luck, tier and loot bonuses, clamped into
        the recipe's result range.
        """
        luck = self.stats.effective_stat(character, inventory, StatType.LUCK)
        loot_percent = rebirth_bonus(character.rebirth_count, self.catalogue.rebirth).loot_bonus
        if character.character_class is not None:
            loot_percent += self.catalogue.class_definition(character.character_class).loot_bonus * 100

        roll = (
            self.rng.uniform(0, self.rules.roll_max)
            + luck * self.rules.luck_weight
            + recipe.tier * self.rules.tier_weight
            + loot_percent * self.rules.loot_weight
        )
        thresholds = {rarity: rule.roll_threshold for rarity, rule in self.catalogue.rarities.items()}
        return recipe.clamp(rarity_from_roll(roll, thresholds))

    def _roll_item(
        self,
        slot: EquipmentSlot,
        recipe: ForgeRecipe,
        character: Character,
        inventory: Inventory,
    ) -> EquipmentItem:
        rarity = self.roll_rarity(recipe, character, inventory)
        rule = self.catalogue.rarity_rule(rarity)
        tier_bonus = (recipe.tier - 1) * self.rules.tier_bonus_per_tier

        pool = self.rules.stats_for(slot)
        primary_stat = pool[self.rng.randint(0, len(pool) - 1)]
        primary_bonus = self.rng.randint(rule.primary_min, rule.primary_max) + tier_bonus

        secondary_stat: Optional[StatType] = None
        secondary_bonus = 0
        if rule.secondary_chance > 0 and self.rng.random() < rule.secondary_chance:
            others = [stat for stat in StatType if stat != primary_stat]
            secondary_stat = others[self.rng.randint(0, len(others) - 1)]
            secondary_bonus = self.rng.randint(rule.secondary_min, rule.secondary_max)

        return EquipmentItem(
            item_id=EquipmentItem.new_id(),
            name=f"{rarity.value.capitalize()} {slot.value.capitalize()} of Tier {recipe.tier}",
            slot=slot,
            rarity=rarity,
            primary_stat=primary_stat,
            primary_bonus=primary_bonus,
            secondary_stat=secondary_stat,
            secondary_bonus=secondary_bonus,
            level_requirement=item_level_requirement(
                recipe.tier, primary_bonus, self.rules.level_per_tier
            ),
            owner_id=character.id,
        )

    # =========================================================================
    # FORGE
    # =========================================================================

    def forge(
        self,
        slot: EquipmentSlot,
        recipe: ForgeRecipe,
        character: Character,
        inventory: Inventory,
    ) -> Optional[EquipmentItem]:
        """
        Craft one item. Either every cost is paid and an item is returned,
        or nothing changes and None is returned.
        """
        plan = self._deduction_plan(recipe, inventory)
        if plan is None or character.gold < recipe.gold_cost:
            self.reject(
                "forge",
                "cannot afford recipe",
                character_id=character.id,
                tier=recipe.tier,
                shortfalls=self.shortfalls(recipe, character, inventory),
            )
            return None

        item = self._roll_item(slot, recipe, character, inventory)

        character.spend_gold(recipe.gold_cost)
        for material, rarity, quantity in plan:
            inventory.remove_material(material, rarity, quantity)
        inventory.add_item(item)

        character.add_domain_event(
            "equipment.forged",
            {
                "character_id": character.id,
                "item_id": item.id,
                "slot": slot.value,
                "rarity": item.rarity.value,
                "tier": recipe.tier,
            },
        )
        self.log_operation(
            "forge",
            character_id=character.id,
            tier=recipe.tier,
            rarity=item.rarity.value,
            gold_spent=recipe.gold_cost,
            materials_spent=sum(quantity for _, _, quantity in plan),
        )
        return item

    # =========================================================================
    # EQUIP / UNEQUIP
    # =========================================================================

    def _held_item(
        self, item: EquipmentItem, character: Character, inventory: Inventory
    ) -> Optional[EquipmentItem]:
        """The inventory's own instance of ``item`` when the character owns it."""
        held = inventory.get_item(item.id)
        if held is None or held.owner_id != character.id:
            return None
        return held

    def equip(self, item: EquipmentItem, character: Character, inventory: Inventory) -> bool:
        """Equip ``item``, displacing whatever occupies its slot."""
        held = self._held_item(item, character, inventory)
        if held is None:
            return self.reject("equip", "item not owned by character", item_id=item.id)
        item = held
        if character.level < item.level_requirement:
            return self.reject(
                "equip",
                f"requires level {item.level_requirement}",
                character_id=character.id,
                level=character.level,
            )
        if character.equipped_id(item.slot) == item.id and item.is_equipped:
            return True

        displaced_id = character.equipped_id(item.slot)
        if displaced_id is not None:
            displaced = inventory.get_item(displaced_id)
            if displaced is None:
                raise self.violation(
                    "equip",
                    "loadout_item_owned",
                    f"slot {item.slot.value} references item {displaced_id} not in inventory",
                    character_id=character.id,
                    item_id=displaced_id,
                )
            character.unequip_item(displaced)

        character.equip_item(item)
        character.add_domain_event(
            "equipment.equipped",
            {
                "character_id": character.id,
                "item_id": item.id,
                "slot": item.slot.value,
                "replaced_item_id": displaced_id,
            },
        )
        self.log_operation("equip", character_id=character.id, item_id=item.id, slot=item.slot.value)
        return True

    def unequip(self, item: EquipmentItem, character: Character, inventory: Inventory) -> bool:
        """Unequip ``item`` if this character currently has it equipped."""
        held = self._held_item(item, character, inventory)
        if held is None or not held.is_equipped or character.equipped_id(held.slot) != held.id:
            return self.reject("unequip", "item not equipped by character", item_id=item.id)
        item = held

        character.unequip_item(item)
        character.add_domain_event(
            "equipment.unequipped",
            {"character_id": character.id, "item_id": item.id, "slot": item.slot.value},
        )
        self.log_operation("unequip", character_id=character.id, item_id=item.id)
        return True

    # =========================================================================
    # SALVAGE
    # =========================================================================

    def salvage(
        self, item: EquipmentItem, character: Character, inventory: Inventory
    ) -> Optional[SalvageResult]:
        """Destroy an owned item for materials, fragments and gold."""
        held = self._held_item(item, character, inventory)
        if held is None:
            self.reject("salvage", "item not owned by character", item_id=item.id)
            return None
        item = held

        rule = self.catalogue.salvage_rule(item.rarity)
        if item.is_equipped:
            character.unequip_item(item)

        inventory.remove_item(item.id)
        material_type = None
        if rule.materials > 0:
            material_type = _GENERAL_ORDER[self.rng.randint(0, len(_GENERAL_ORDER) - 1)]
            inventory.add_material(material_type, Rarity.COMMON, rule.materials)
        inventory.add_material(MaterialType.FRAGMENT, Rarity.COMMON, rule.fragments)
        character.add_gold(rule.gold)

        result = SalvageResult(
            item_id=item.id,
            rarity=item.rarity,
            materials=rule.materials,
            fragments=rule.fragments,
            gold=rule.gold,
            material_type=material_type,
        )
        character.add_domain_event(
            "equipment.salvaged",
            {
                "character_id": character.id,
                "item_id": item.id,
                "rarity": item.rarity.value,
                "gold": rule.gold,
            },
        )
        self.log_operation("salvage", character_id=character.id, item_id=item.id, gold=rule.gold)
        return result

    # =========================================================================
    # ENHANCEMENT
    # =========================================================================

    def enhance(
        self, item: EquipmentItem, character: Character, inventory: Inventory
    ) -> Optional[EnhancementResult]:
        """
        Attempt to raise an owned item's enhancement level by one.

        Returns None when nothing is spent: the item is not owned, already at
        the maximum level, or the gold cost cannot be paid. Otherwise the cost
        is deducted and the attempt may still fail, leaving the level unchanged.
        """
        held = self._held_item(item, character, inventory)
        if held is None:
            self.reject("enhance", "item not owned by character", item_id=item.id)
            return None
        item = held

        next_level = item.enhancement_level + 1
        if next_level > MAX_ENHANCEMENT_LEVEL:
            self.reject("enhance", "item already fully enhanced", item_id=item.id)
            return None

        rule = self.catalogue.enhancement_rule(next_level)
        cost = self.catalogue.enhancement_cost(item.rarity, next_level)
        if character.gold < cost:
            self.reject("enhance", f"needs {cost} gold", character_id=character.id, gold=character.gold)
            return None

        character.spend_gold(cost)
        success = self.rng.random() < rule.success_rate
        critical = False
        gained = 0
        if success:
            critical = self.rng.random() < self.catalogue.enhancement.critical_chance
            gained = rule.stat_gain * 2 if critical else rule.stat_gain
            item.apply_enhancement(gained)

        result = EnhancementResult(
            item_id=item.id,
            success=success,
            critical=critical,
            stat_gained=gained,
            new_level=item.enhancement_level,
            gold_spent=cost,
        )
        character.add_domain_event(
            "equipment.enhanced",
            {
                "character_id": character.id,
                "item_id": item.id,
                "success": success,
                "critical": critical,
                "new_level": item.enhancement_level,
                "gold_spent": cost,
            },
        )
        self.log_operation(
            "enhance",
            character_id=character.id,
            item_id=item.id,
            success=success,
            new_level=item.enhancement_level,
        )
        return result
