"""
Schema validation for the YAML balance catalogue.

Purpose
-------
Recursive, structural validation of the parsed catalogue before it is
converted into typed definitions. Type errors are reported with dot-notation
paths so a bad balance edit points at the exact field.

Key Validation Rules
--------------------
1. Values checked against a ``ConfigSchema`` must be mappings
2. Known fields are validated against types or nested schemas
3. Type coercion: int values accepted where float expected
4. Fields listed in ``required`` must be present
5. Unknown fields allowed by default (set allow_extra=False to forbid)
6. ``ListOf`` validates every element of a sequence
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Union

from questforge.core.config.errors import ConfigValidationError


@dataclass(slots=True)
class ListOf:
    """Schema for a list whose elements all match ``item``."""

    item: "SchemaField"

    def validate(self, value: Any, path: str = "") -> Any:
        if not isinstance(value, list):
            raise ConfigValidationError(
                f"Config value at '{path or '<root>'}' must be a list; got {type(value).__name__}"
            )
        for index, element in enumerate(value):
            _validate_field(self.item, element, f"{path}[{index}]")
        return value


@dataclass(slots=True)
class ConfigSchema:
    """
    Recursive schema for nested configuration validation.

    Attributes
    ----------
    fields:
        Mapping of field names to expected types or nested schemas.
    required:
        Field names that must be present.
    allow_extra:
        Whether to allow fields not defined in the schema.

    Examples
    --------
    >>> schema = ConfigSchema(fields={"count": int, "rate": float})
    >>> schema.validate({"count": 10, "rate": 0.5})
    {'count': 10, 'rate': 0.5}
    >>> try:
    ...     schema.validate({"count": "not_an_int"})
    ... except ConfigValidationError as e:
    ...     print(e)
    Config value at 'count' must be int; got str
    """

    fields: Mapping[str, "SchemaField"]
    required: FrozenSet[str] = field(default_factory=frozenset)
    allow_extra: bool = True

    def validate(self, value: Any, path: str = "") -> Any:
        if not isinstance(value, Mapping):
            raise ConfigValidationError(
                f"Config value at '{path or '<root>'}' must be a mapping; "
                f"got {type(value).__name__}"
            )

        for key in self.required:
            if key not in value:
                full_path = f"{path}.{key}" if path else key
                raise ConfigValidationError(f"Missing required config value at '{full_path}'")

        for key, expected in self.fields.items():
            if key not in value:
                continue
            full_path = f"{path}.{key}" if path else key
            _validate_field(expected, value[key], full_path)

        if not self.allow_extra:
            unknown_keys = set(value.keys()) - set(self.fields.keys())
            if unknown_keys:
                unknown_list = ", ".join(sorted(str(k) for k in unknown_keys))
                raise ConfigValidationError(
                    f"Unexpected config keys at '{path or '<root>'}': {unknown_list}"
                )

        return value


@dataclass(slots=True)
class MapOf:
    """Schema for a mapping with arbitrary keys whose values match ``value``."""

    value: "SchemaField"

    def validate(self, data: Any, path: str = "") -> Any:
        if not isinstance(data, Mapping):
            raise ConfigValidationError(
                f"Config value at '{path or '<root>'}' must be a mapping; got {type(data).__name__}"
            )
        for key, element in data.items():
            _validate_field(self.value, element, f"{path}.{key}" if path else str(key))
        return data


SchemaField = Union[type, tuple, ConfigSchema, ListOf, MapOf]


def _validate_field(expected: SchemaField, raw: Any, path: str) -> None:
    if isinstance(expected, (ConfigSchema, ListOf, MapOf)):
        expected.validate(raw, path=path)
        return
    if expected is float and isinstance(raw, int) and not isinstance(raw, bool):
        return
    if not isinstance(raw, expected):
        name = (
            " or ".join(t.__name__ for t in expected)
            if isinstance(expected, tuple)
            else expected.__name__
        )
        raise ConfigValidationError(
            f"Config value at '{path}' must be {name}; got {type(raw).__name__}"
        )


# ============================================================================
# Catalogue Schema
# ============================================================================

_BONUS = ConfigSchema(
    fields={
        "exp_bonus": float,
        "gold_bonus": float,
        "loot_bonus": float,
        "all_stats_bonus": float,
    },
    allow_extra=False,
)

_STATS = MapOf(int)

CATALOGUE_SCHEMA = ConfigSchema(
    fields={
        "leveling": ConfigSchema(
            fields={
                "level_cap": int,
                "exp_base": int,
                "exp_exponent": float,
                "stat_points_per_level": int,
                "base_max_hp": int,
                "hp_per_level": int,
                "paragon_growth": float,
                "paragon_base_points": int,
                "paragon_decay_interval": int,
                "evolution_level": int,
                "evolution_threshold": int,
                "zodiac_bonus": int,
            },
        ),
        "level_titles": MapOf(str),
        "classes": MapOf(
            ConfigSchema(
                fields={
                    "tier": str,
                    "primary_stat": str,
                    "passive_bonus": int,
                    "hp_restore_fraction": float,
                    "loot_bonus": float,
                    "starting_stats": _STATS,
                    "evolves_from": str,
                    "evolution_stat": str,
                },
                required=frozenset({"tier", "primary_stat"}),
            )
        ),
        "zodiac": MapOf(
            ConfigSchema(
                fields={"boosted_stat": str, "element": str},
                required=frozenset({"boosted_stat", "element"}),
            )
        ),
        "rebirth": ConfigSchema(
            fields={
                "required_level": int,
                "tiers": ListOf(_BONUS),
                "per_rebirth_after": _BONUS,
                "titles": ListOf(str),
                "eternal_title_format": str,
            },
            required=frozenset({"tiers", "per_rebirth_after"}),
        ),
        "rarities": MapOf(
            ConfigSchema(
                fields={
                    "roll_threshold": float,
                    "primary": ListOf(int),
                    "secondary_chance": float,
                    "secondary": ListOf(int),
                },
                required=frozenset({"roll_threshold", "primary"}),
            )
        ),
        "forge": ConfigSchema(
            fields={
                "roll_max": float,
                "luck_weight": float,
                "tier_weight": float,
                "loot_weight": float,
                "slot_stats": MapOf(ListOf(str)),
                "tier_bonus_per_tier": int,
                "level_per_tier": int,
                "recipes": ListOf(
                    ConfigSchema(
                        fields={
                            "tier": int,
                            "essence": int,
                            "material": int,
                            "min_material_rarity": str,
                            "fragment": int,
                            "gold": int,
                            "result_rarity": ListOf(str),
                        },
                        required=frozenset({"tier", "result_rarity"}),
                    )
                ),
            },
            required=frozenset({"recipes"}),
        ),
        "salvage": MapOf(
            ConfigSchema(
                fields={"materials": int, "fragments": int, "gold": int},
                allow_extra=False,
            )
        ),
        "enhancement": ConfigSchema(
            fields={
                "critical_chance": float,
                "base_cost": MapOf(int),
                "levels": ListOf(
                    ConfigSchema(
                        fields={
                            "level": int,
                            "success_rate": float,
                            "cost_multiplier": float,
                            "stat_gain": int,
                        },
                        required=frozenset({"level", "success_rate", "cost_multiplier", "stat_gain"}),
                        allow_extra=False,
                    )
                ),
            },
            required=frozenset({"base_cost", "levels"}),
        ),
        "daily_quests": ConfigSchema(
            fields={
                "bonus": ConfigSchema(
                    fields={
                        "title": str,
                        "regular_count": int,
                        "min_exp_reward": int,
                        "min_gold_reward": int,
                    }
                ),
                "pool": ListOf(
                    ConfigSchema(
                        fields={
                            "key": str,
                            "type": str,
                            "title": str,
                            "min_level": int,
                            "weight": int,
                            "parameter": str,
                            "tiers": ListOf(
                                ConfigSchema(
                                    fields={
                                        "min_level": int,
                                        "target": int,
                                        "exp": int,
                                        "gold": int,
                                    },
                                    required=frozenset({"target"}),
                                )
                            ),
                        },
                        required=frozenset({"key", "type", "title", "tiers"}),
                    )
                ),
            },
            required=frozenset({"pool"}),
        ),
        "achievements": MapOf(
            ConfigSchema(
                fields={
                    "name": str,
                    "description": str,
                    "tracking": str,
                    "target": int,
                    "reward_type": str,
                    "reward_value": (int, str),
                },
                required=frozenset({"name", "tracking", "target", "reward_type", "reward_value"}),
            )
        ),
    },
    required=frozenset({"leveling", "classes", "zodiac", "rebirth", "rarities", "forge"}),
)
