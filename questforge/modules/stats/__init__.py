"""Stat resolution."""
from questforge.modules.stats.service import StatService

__all__ = ["StatService"]
