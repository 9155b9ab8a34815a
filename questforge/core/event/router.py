"""
Wildcard matching for event names.

Patterns may contain ``*`` anywhere: ``"character.*"``, ``"*.forged"``,
``"*"``. Matching is ordered-substring based, not regex.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless wildcard matcher.

    Examples
    --------
    >>> router = EventRouter()
    >>> router.matches("character.leveled_up", "character.*")
    True
    >>> router.matches("equipment.forged", "*.forged")
    True
    >>> router.matches("equipment.forged", "character.*")
    False
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        if pattern == "*":
            return True
        if "*" not in pattern:
            return event_name == pattern

        while "**" in pattern:
            pattern = pattern.replace("**", "*")

        parts = pattern.split("*")
        if parts[0] and not event_name.startswith(parts[0]):
            return False
        if parts[-1] and not event_name.endswith(parts[-1]):
            return False
        if len(parts[0]) + len(parts[-1]) > len(event_name):
            return False

        idx = len(parts[0])
        for mid in parts[1:-1]:
            if not mid:
                continue
            next_idx = event_name.find(mid, idx)
            if next_idx == -1:
                return False
            idx = next_idx + len(mid)

        return idx <= len(event_name) - len(parts[-1])
