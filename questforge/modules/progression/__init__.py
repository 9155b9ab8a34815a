"""Leveling and prestige state machine."""

from questforge.modules.progression.service import ExpGainResult, ProgressionService

__all__ = ["ExpGainResult", "ProgressionService"]
