"""Equipment and forging economy."""

from questforge.modules.forge.service import EnhancementResult, ForgeService, SalvageResult

__all__ = ["EnhancementResult", "ForgeService", "SalvageResult"]
