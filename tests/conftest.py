"""
Pytest Configuration and Fixtures for questforge Tests
======================================================

Purpose
-------
Centralized test fixtures and configuration for the questforge test suite.
Provides the bundled catalogue, wired services, domain model factories and
event helpers.

Responsibilities
----------------
- Test environment variables
- Catalogue fixtures (parsed YAML and built ``Catalogue``)
- Service fixtures sharing one catalogue and a controllable random source
- Domain model factories for characters, items and inventories

Architecture Notes
------------------
- Everything is in-memory; there is no integration tier
- The bundled catalogue is parsed once per session; tests that need to
  mutate balance data get a fresh deep copy of the raw mapping
"""

from __future__ import annotations

import copy
import os
from typing import Any, Callable, Dict, Optional

import pytest
import yaml


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ["QUESTFORGE_ENV"] = "test"
    os.environ["QUESTFORGE_LOG_LEVEL"] = "DEBUG"
    os.environ.pop("QUESTFORGE_RANDOM_SEED", None)


# ============================================================================
# CATALOGUE FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def _raw_catalogue() -> Dict[str, Any]:
    from questforge.core.config.config import Config

    with open(Config.DEFAULT_CATALOGUE_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def catalogue_data(_raw_catalogue) -> Dict[str, Any]:
    """Fresh, mutable copy of the bundled catalogue mapping."""
    return copy.deepcopy(_raw_catalogue)


@pytest.fixture(scope="session")
def catalogue(_raw_catalogue):
    from questforge.core.config.catalogue import CatalogueLoader

    return CatalogueLoader.from_dict(_raw_catalogue)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def rng():
    from questforge.modules.shared.random_source import SeededRandomSource

    return SeededRandomSource(1234)


@pytest.fixture
def stat_service(catalogue):
    from questforge.modules.stats.service import StatService

    return StatService(catalogue)


@pytest.fixture
def progression_service(catalogue, stat_service):
    from questforge.modules.progression.service import ProgressionService

    return ProgressionService(catalogue, stat_service)


@pytest.fixture
def make_forge_service(catalogue, stat_service) -> Callable:
    """Build a ForgeService around a given random source."""
    from questforge.modules.forge.service import ForgeService

    def _make(rng):
        return ForgeService(catalogue, stat_service, rng)

    return _make


@pytest.fixture
def forge_service(make_forge_service, rng):
    return make_forge_service(rng)


@pytest.fixture
def quest_service(catalogue, progression_service, rng):
    from questforge.modules.quests.service import QuestService

    return QuestService(catalogue, progression_service, rng)


@pytest.fixture
def achievement_service(catalogue, progression_service):
    from questforge.modules.achievements.service import AchievementService

    return AchievementService(catalogue, progression_service)


@pytest.fixture
def event_sink():
    from questforge.core.event.sink import InMemoryEventSink

    return InMemoryEventSink()


@pytest.fixture
def engine(catalogue, event_sink, rng):
    from questforge.engine import ProgressionEngine

    return ProgressionEngine(catalogue=catalogue, sink=event_sink, rng=rng)


# ============================================================================
# DOMAIN MODEL FACTORIES
# ============================================================================


@pytest.fixture
def make_character(catalogue) -> Callable:
    """
    Character factory.

    Usage:
        hero = make_character(level=20, character_class=CharacterClass.MAGE)
    """
    from questforge.domain.models import Character, CharacterClass, ZodiacSign

    def _make(
        character_id: str = "hero-1",
        character_class: Optional[CharacterClass] = CharacterClass.WARRIOR,
        zodiac_sign: ZodiacSign = ZodiacSign.ARIES,
        **overrides: Any,
    ) -> Character:
        if "base_stats" not in overrides and character_class is not None:
            definition = catalogue.class_definition(character_class)
            if definition.starting_stats is not None:
                overrides["base_stats"] = definition.starting_stats
        return Character(
            character_id=character_id,
            name=overrides.pop("name", "Aria"),
            zodiac_sign=zodiac_sign,
            character_class=character_class,
            **overrides,
        )

    return _make


@pytest.fixture
def character(make_character):
    return make_character()


@pytest.fixture
def make_item() -> Callable:
    """EquipmentItem factory owned by ``hero-1`` unless told otherwise."""
    from questforge.domain.models import EquipmentItem, EquipmentSlot, Rarity, StatType

    counter = {"n": 0}

    def _make(
        slot: EquipmentSlot = EquipmentSlot.WEAPON,
        primary_stat: StatType = StatType.STRENGTH,
        primary_bonus: int = 3,
        rarity: Rarity = Rarity.COMMON,
        level_requirement: int = 1,
        owner_id: str = "hero-1",
        **overrides: Any,
    ) -> EquipmentItem:
        counter["n"] += 1
        return EquipmentItem(
            item_id=overrides.pop("item_id", f"item-{counter['n']}"),
            name=overrides.pop("name", f"Test {slot.value}"),
            slot=slot,
            rarity=rarity,
            primary_stat=primary_stat,
            primary_bonus=primary_bonus,
            level_requirement=level_requirement,
            owner_id=owner_id,
            **overrides,
        )

    return _make


@pytest.fixture
def inventory():
    from questforge.domain.models import Inventory

    return Inventory(owner_id="hero-1")


@pytest.fixture
def stocked_inventory():
    """Inventory holding enough of everything for any tier 1 or 2 recipe."""
    from questforge.domain.models import Inventory, MaterialType, Rarity

    return Inventory(
        owner_id="hero-1",
        materials={
            (MaterialType.ESSENCE, Rarity.COMMON): 20,
            (MaterialType.FRAGMENT, Rarity.COMMON): 10,
            (MaterialType.ORE, Rarity.COMMON): 10,
            (MaterialType.ORE, Rarity.UNCOMMON): 10,
            (MaterialType.CRYSTAL, Rarity.RARE): 5,
        },
    )


# ============================================================================
# TEST UTILITIES
# ============================================================================


def assert_domain_event_emitted(domain_model, event_name: str) -> bool:
    """
    Assert that a domain model emitted a specific event.

    Usage:
        progression.level_up(character)
        assert assert_domain_event_emitted(character, "character.leveled_up")
    """
    events = domain_model.get_pending_events()
    return any(event.event_name == event_name for event in events)


def get_domain_event_payload(domain_model, event_name: str) -> dict | None:
    """
    Get the payload of a specific domain event.

    Usage:
        progression.level_up(character)
        payload = get_domain_event_payload(character, "character.leveled_up")
        assert payload["new_level"] == 2
    """
    events = domain_model.get_pending_events()
    for event in events:
        if event.event_name == event_name:
            return event.payload
    return None
