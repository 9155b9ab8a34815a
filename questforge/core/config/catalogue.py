"""
Balance catalogue: loading, validation and lookup.

Purpose
-------
Load the static YAML balance catalogue once at startup, validate its shape,
convert every string identifier into its closed enum, and expose typed
lookups to the services.

Responsibilities
----------------
- Read YAML with ``yaml.safe_load``
- Validate structure against ``CATALOGUE_SCHEMA``
- Build frozen catalogue definitions (classes, recipes, quest pool, ...)
- Cross-check references (evolution targets, recipe rarities, salvage rows)
- Raise ``ConfigurationMissingError`` for lookups of undefined ids

Non-Responsibilities
--------------------
- Runtime mutation (the catalogue is immutable once built)
- Balance decisions (values come from the YAML file)

Design Notes
------------
- ``CatalogueLoader.from_dict`` is the single conversion path; ``load`` only
  adds file handling. Tests build catalogues from dicts.
- Conversion errors (unknown enum value, bad range) surface as
  ``ConfigValidationError`` with the offending path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar, Union

import yaml

from questforge.core.config.config import Config
from questforge.core.config.errors import ConfigInitializationError, ConfigValidationError
from questforge.core.config.validator import CATALOGUE_SCHEMA
from questforge.core.exceptions import ConfigurationMissingError
from questforge.core.logging.logger import get_logger
from questforge.domain.models.base import DomainValidationError
from questforge.domain.models.catalogue import (
    AchievementDefinition,
    BonusQuestRules,
    ClassDefinition,
    EnhancementLevelRule,
    EnhancementRules,
    ForgeRecipe,
    ForgeRules,
    LevelingRules,
    LevelTitle,
    QuestTemplate,
    QuestTier,
    RarityRule,
    RebirthBonus,
    RebirthRules,
    SalvageRule,
    ZodiacDefinition,
)
from questforge.domain.models.enums import (
    CharacterClass,
    ClassTier,
    EquipmentSlot,
    QuestType,
    Rarity,
    RewardType,
    StatType,
    ZodiacSign,
)
from questforge.domain.models.stats import Stats

logger = get_logger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class Catalogue:
    """
    Immutable, validated balance data.

    Lookups of ids that the catalogue does not define raise
    ``ConfigurationMissingError``.
    """

    leveling: LevelingRules
    classes: Mapping[CharacterClass, ClassDefinition]
    zodiac: Mapping[ZodiacSign, ZodiacDefinition]
    rebirth: RebirthRules
    rarities: Mapping[Rarity, RarityRule]
    forge_rules: ForgeRules
    recipes: Mapping[int, ForgeRecipe]
    salvage: Mapping[Rarity, SalvageRule] = field(default_factory=dict)
    enhancement: EnhancementRules = field(default_factory=EnhancementRules)
    quest_pool: Tuple[QuestTemplate, ...] = ()
    bonus_quest: BonusQuestRules = field(default_factory=BonusQuestRules)
    achievements: Mapping[str, AchievementDefinition] = field(default_factory=dict)
    level_titles: Tuple[LevelTitle, ...] = ()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def class_definition(self, character_class: CharacterClass) -> ClassDefinition:
        try:
            return self.classes[character_class]
        except KeyError:
            raise ConfigurationMissingError(
                f"classes.{character_class.value}", "class not defined in catalogue"
            ) from None

    def zodiac_definition(self, sign: ZodiacSign) -> ZodiacDefinition:
        try:
            return self.zodiac[sign]
        except KeyError:
            raise ConfigurationMissingError(
                f"zodiac.{sign.value}", "zodiac sign not defined in catalogue"
            ) from None

    def rarity_rule(self, rarity: Rarity) -> RarityRule:
        try:
            return self.rarities[rarity]
        except KeyError:
            raise ConfigurationMissingError(
                f"rarities.{rarity.value}", "rarity not defined in catalogue"
            ) from None

    def recipe(self, tier: int) -> ForgeRecipe:
        try:
            return self.recipes[tier]
        except KeyError:
            raise ConfigurationMissingError(
                f"forge.recipes.{tier}", "forge tier not defined in catalogue"
            ) from None

    def salvage_rule(self, rarity: Rarity) -> SalvageRule:
        try:
            return self.salvage[rarity]
        except KeyError:
            raise ConfigurationMissingError(
                f"salvage.{rarity.value}", "no salvage rule for rarity"
            ) from None

    def enhancement_rule(self, level: int) -> EnhancementLevelRule:
        try:
            return self.enhancement.levels[level]
        except KeyError:
            raise ConfigurationMissingError(
                f"enhancement.levels.{level}", "no enhancement rule for level"
            ) from None

    def enhancement_cost(self, rarity: Rarity, level: int) -> int:
        """Gold needed to attempt raising an item of ``rarity`` to ``level``."""
        try:
            base = self.enhancement.base_costs[rarity]
        except KeyError:
            raise ConfigurationMissingError(
                f"enhancement.base_cost.{rarity.value}", "no enhancement price for rarity"
            ) from None
        return int(base * self.enhancement_rule(level).cost_multiplier)

    def achievement(self, key: str) -> AchievementDefinition:
        try:
            return self.achievements[key]
        except KeyError:
            raise ConfigurationMissingError(
                f"achievements.{key}", "achievement not defined in catalogue"
            ) from None

    def evolutions_of(self, starter: CharacterClass) -> List[ClassDefinition]:
        return [d for d in self.classes.values() if d.evolves_from == starter]

    def starter_classes(self) -> List[CharacterClass]:
        return [c for c, d in self.classes.items() if d.is_starter]

    def level_title(self, level: int) -> str:
        eligible = [t for t in self.level_titles if t.min_level <= level]
        if not eligible:
            return ""
        return max(eligible, key=lambda t: t.min_level).title


# ============================================================================
# Loader
# ============================================================================


class CatalogueLoader:
    """Builds a :class:`Catalogue` from YAML or an already-parsed mapping."""

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> Catalogue:
        """
        Load and validate the catalogue file.

        Parameters
        ----------
        path:
            YAML file; defaults to ``Config.CATALOGUE_PATH``.

        Raises
        ------
        ConfigInitializationError
            File missing, unreadable, or not valid YAML.
        ConfigValidationError
            Structure or values invalid.
        ConfigurationMissingError
            Cross references unresolved.
        """
        catalogue_path = Path(path) if path is not None else Config.CATALOGUE_PATH
        try:
            with open(catalogue_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigInitializationError(f"Catalogue file not found: {catalogue_path}") from e
        except (OSError, yaml.YAMLError) as e:
            raise ConfigInitializationError(
                f"Failed to read catalogue {catalogue_path}: {e}"
            ) from e

        if not data:
            raise ConfigInitializationError(f"Catalogue file is empty: {catalogue_path}")

        catalogue = cls.from_dict(data)
        logger.info(
            f"Loaded catalogue from {catalogue_path}",
            extra={
                "catalogue_path": str(catalogue_path),
                "classes": len(catalogue.classes),
                "recipes": len(catalogue.recipes),
                "quest_templates": len(catalogue.quest_pool),
                "achievements": len(catalogue.achievements),
            },
        )
        return catalogue

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Catalogue:
        CATALOGUE_SCHEMA.validate(data)
        try:
            catalogue = Catalogue(
                leveling=LevelingRules(**data["leveling"]),
                classes=cls._build_classes(data["classes"]),
                zodiac=cls._build_zodiac(data["zodiac"]),
                rebirth=cls._build_rebirth(data["rebirth"]),
                rarities=cls._build_rarities(data["rarities"]),
                forge_rules=cls._build_forge_rules(data["forge"]),
                recipes=cls._build_recipes(data["forge"]["recipes"]),
                salvage=cls._build_salvage(data.get("salvage", {})),
                enhancement=cls._build_enhancement(data.get("enhancement", {})),
                quest_pool=cls._build_quest_pool(data.get("daily_quests", {}).get("pool", [])),
                bonus_quest=BonusQuestRules(**data.get("daily_quests", {}).get("bonus", {})),
                achievements=cls._build_achievements(data.get("achievements", {})),
                level_titles=tuple(
                    LevelTitle(min_level=int(level), title=title)
                    for level, title in data.get("level_titles", {}).items()
                ),
            )
        except (DomainValidationError, TypeError) as e:
            raise ConfigValidationError(f"Invalid catalogue value: {e}") from e

        cls._check_references(catalogue)
        return catalogue

    # ------------------------------------------------------------------
    # Section builders
    # ------------------------------------------------------------------

    @staticmethod
    def _enum(enum_type: Callable[[str], E], raw: str, path: str) -> E:
        try:
            return enum_type(raw)
        except ValueError:
            raise ConfigValidationError(f"Unknown value '{raw}' at '{path}'") from None

    @classmethod
    def _build_classes(cls, raw: Mapping[str, Any]) -> Dict[CharacterClass, ClassDefinition]:
        classes: Dict[CharacterClass, ClassDefinition] = {}
        for name, entry in raw.items():
            path = f"classes.{name}"
            character_class = cls._enum(CharacterClass, name, path)
            starting = entry.get("starting_stats")
            evolves_from = entry.get("evolves_from")
            evolution_stat = entry.get("evolution_stat")
            classes[character_class] = ClassDefinition(
                character_class=character_class,
                tier=cls._enum(ClassTier, entry["tier"], f"{path}.tier"),
                primary_stat=cls._enum(StatType, entry["primary_stat"], f"{path}.primary_stat"),
                passive_bonus=entry.get("passive_bonus", 2),
                hp_restore_fraction=float(entry.get("hp_restore_fraction", 1.0)),
                loot_bonus=float(entry.get("loot_bonus", 0.0)),
                starting_stats=Stats.from_mapping(starting) if starting else None,
                evolves_from=(
                    cls._enum(CharacterClass, evolves_from, f"{path}.evolves_from")
                    if evolves_from
                    else None
                ),
                evolution_stat=(
                    cls._enum(StatType, evolution_stat, f"{path}.evolution_stat")
                    if evolution_stat
                    else None
                ),
            )
        return classes

    @classmethod
    def _build_zodiac(cls, raw: Mapping[str, Any]) -> Dict[ZodiacSign, ZodiacDefinition]:
        return {
            cls._enum(ZodiacSign, name, f"zodiac.{name}"): ZodiacDefinition(
                sign=ZodiacSign(name),
                boosted_stat=cls._enum(StatType, entry["boosted_stat"], f"zodiac.{name}.boosted_stat"),
                element=entry["element"],
            )
            for name, entry in raw.items()
        }

    @staticmethod
    def _build_rebirth(raw: Mapping[str, Any]) -> RebirthRules:
        return RebirthRules(
            tiers=tuple(RebirthBonus(**tier) for tier in raw["tiers"]),
            per_rebirth_after=RebirthBonus(**raw["per_rebirth_after"]),
            titles=tuple(raw.get("titles", ())),
            eternal_title_format=raw.get("eternal_title_format", "Eternal {class_name}"),
            required_level=raw.get("required_level", 100),
        )

    @classmethod
    def _build_rarities(cls, raw: Mapping[str, Any]) -> Dict[Rarity, RarityRule]:
        rules: Dict[Rarity, RarityRule] = {}
        for name, entry in raw.items():
            path = f"rarities.{name}"
            rarity = cls._enum(Rarity, name, path)
            primary = entry["primary"]
            secondary = entry.get("secondary", [0, 0])
            if len(primary) != 2 or len(secondary) != 2:
                raise ConfigValidationError(f"Bonus ranges at '{path}' must be [min, max]")
            rules[rarity] = RarityRule(
                rarity=rarity,
                roll_threshold=float(entry["roll_threshold"]),
                primary_min=primary[0],
                primary_max=primary[1],
                secondary_chance=float(entry.get("secondary_chance", 0.0)),
                secondary_min=secondary[0],
                secondary_max=secondary[1],
            )
        return rules

    @classmethod
    def _build_forge_rules(cls, raw: Mapping[str, Any]) -> ForgeRules:
        settings = {
            k: v for k, v in raw.items() if k not in ("recipes", "slot_stats")
        }
        if "slot_stats" in raw:
            settings["slot_stats"] = {
                cls._enum(EquipmentSlot, slot, f"forge.slot_stats.{slot}"): tuple(
                    cls._enum(StatType, stat, f"forge.slot_stats.{slot}") for stat in stats
                )
                for slot, stats in raw["slot_stats"].items()
            }
        return ForgeRules(**settings)

    @classmethod
    def _build_recipes(cls, raw: List[Mapping[str, Any]]) -> Dict[int, ForgeRecipe]:
        recipes: Dict[int, ForgeRecipe] = {}
        for index, entry in enumerate(raw):
            path = f"forge.recipes[{index}]"
            result = entry["result_rarity"]
            if len(result) != 2:
                raise ConfigValidationError(f"'{path}.result_rarity' must be [min, max]")
            recipe = ForgeRecipe(
                tier=entry["tier"],
                essence_cost=entry.get("essence", 0),
                material_cost=entry.get("material", 0),
                min_material_rarity=cls._enum(
                    Rarity, entry.get("min_material_rarity", "common"), f"{path}.min_material_rarity"
                ),
                fragment_cost=entry.get("fragment", 0),
                gold_cost=entry.get("gold", 0),
                min_rarity=cls._enum(Rarity, result[0], f"{path}.result_rarity"),
                max_rarity=cls._enum(Rarity, result[1], f"{path}.result_rarity"),
            )
            if recipe.tier in recipes:
                raise ConfigValidationError(f"Duplicate forge tier {recipe.tier} at '{path}'")
            recipes[recipe.tier] = recipe
        return recipes

    @classmethod
    def _build_salvage(cls, raw: Mapping[str, Any]) -> Dict[Rarity, SalvageRule]:
        return {
            cls._enum(Rarity, name, f"salvage.{name}"): SalvageRule(rarity=Rarity(name), **entry)
            for name, entry in raw.items()
        }

    @classmethod
    def _build_enhancement(cls, raw: Mapping[str, Any]) -> EnhancementRules:
        levels: Dict[int, EnhancementLevelRule] = {}
        for index, entry in enumerate(raw.get("levels", [])):
            rule = EnhancementLevelRule(**entry)
            if rule.level in levels:
                raise ConfigValidationError(
                    f"Duplicate enhancement level {rule.level} at 'enhancement.levels[{index}]'"
                )
            levels[rule.level] = rule
        return EnhancementRules(
            critical_chance=raw.get("critical_chance", 0.1),
            base_costs={
                cls._enum(Rarity, name, f"enhancement.base_cost.{name}"): cost
                for name, cost in raw.get("base_cost", {}).items()
            },
            levels=levels,
        )

    @classmethod
    def _build_quest_pool(cls, raw: List[Mapping[str, Any]]) -> Tuple[QuestTemplate, ...]:
        templates = []
        seen = set()
        for index, entry in enumerate(raw):
            path = f"daily_quests.pool[{index}]"
            if entry["key"] in seen:
                raise ConfigValidationError(f"Duplicate quest key '{entry['key']}' at '{path}'")
            seen.add(entry["key"])
            templates.append(
                QuestTemplate(
                    key=entry["key"],
                    quest_type=cls._enum(QuestType, entry["type"], f"{path}.type"),
                    title=entry["title"],
                    tiers=tuple(
                        QuestTier(
                            min_level=tier.get("min_level", 1),
                            target=tier["target"],
                            exp_reward=tier.get("exp", 0),
                            gold_reward=tier.get("gold", 0),
                        )
                        for tier in entry["tiers"]
                    ),
                    min_level=entry.get("min_level", 1),
                    weight=entry.get("weight", 10),
                    parameter=entry.get("parameter"),
                )
            )
        return tuple(templates)

    @classmethod
    def _build_achievements(cls, raw: Mapping[str, Any]) -> Dict[str, AchievementDefinition]:
        return {
            key: AchievementDefinition(
                key=key,
                name=entry["name"],
                tracking_key=entry["tracking"],
                target=entry["target"],
                reward_type=cls._enum(RewardType, entry["reward_type"], f"achievements.{key}.reward_type"),
                reward_value=entry["reward_value"],
                description=entry.get("description", ""),
            )
            for key, entry in raw.items()
        }

    # ------------------------------------------------------------------
    # Cross references
    # ------------------------------------------------------------------

    @staticmethod
    def _check_references(catalogue: Catalogue) -> None:
        for definition in catalogue.classes.values():
            if definition.is_starter and definition.starting_stats is None:
                raise ConfigurationMissingError(
                    f"classes.{definition.character_class.value}.starting_stats",
                    "starter classes need starting stats",
                )
            if definition.evolves_from is not None:
                parent = catalogue.class_definition(definition.evolves_from)
                if not parent.is_starter:
                    raise ConfigValidationError(
                        f"classes.{definition.character_class.value}: "
                        f"evolves from non-starter {parent.character_class.value}"
                    )

        for sign in ZodiacSign:
            catalogue.zodiac_definition(sign)

        for rarity in Rarity:
            catalogue.rarity_rule(rarity)

        thresholds = [catalogue.rarity_rule(r).roll_threshold for r in Rarity.ordered()]
        if thresholds != sorted(thresholds):
            raise ConfigValidationError("rarities: roll thresholds must increase with rarity")

        if not catalogue.recipes:
            raise ConfigurationMissingError("forge.recipes", "at least one recipe is required")

        for rarity in catalogue.salvage:
            catalogue.rarity_rule(rarity)
