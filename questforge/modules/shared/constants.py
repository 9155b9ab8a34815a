"""
Engine Constants

Purpose
-------
Fixed values that are part of the engine's contract rather than tunable
balance. Balance numbers (curves, costs, rewards) live in the YAML
catalogue.
"""

from typing import Final

# ============================================================================
# HERO POWER
# ============================================================================

HERO_POWER_STAT_WEIGHT: Final[int] = 10
HERO_POWER_LEVEL_WEIGHT: Final[int] = 5
HERO_POWER_EQUIPMENT_WEIGHT: Final[int] = 8
HERO_POWER_ACHIEVEMENT_WEIGHT: Final[int] = 20

# ============================================================================
# STAT BREAKDOWN SOURCES
# ============================================================================

SOURCE_BASE: Final[str] = "base"
SOURCE_CLASS: Final[str] = "class"
SOURCE_ZODIAC: Final[str] = "zodiac"
SOURCE_EQUIPMENT_PREFIX: Final[str] = "equipment:"
SOURCE_REBIRTH: Final[str] = "rebirth"

# ============================================================================
# ACHIEVEMENT COUNTERS FED BY ENGINE OPERATIONS
# ============================================================================

COUNTER_LEVEL: Final[str] = "level"
COUNTER_REBIRTH: Final[str] = "rebirth_count"
COUNTER_ITEMS_FORGED: Final[str] = "items_forged"
COUNTER_RARE_ITEMS: Final[str] = "rare_items"
COUNTER_LEGENDARY_ITEMS: Final[str] = "legendary_items"
COUNTER_CLASS_EVOLVED: Final[str] = "class_evolved"

# Counters reported as absolute values rather than increments.
ABSOLUTE_COUNTERS: Final[frozenset] = frozenset({COUNTER_LEVEL, COUNTER_REBIRTH})

