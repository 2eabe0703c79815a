"""Registry of the modifier kinds that affect course rates.

Only names registered here are read from an action's modifier declaration;
everything else an action declares is ignored by the optimizer.

How to recognize a new modifier kind:
1) Add a GlobalModifier to BUILTIN_MODIFIERS (or register it on a custom
   registry passed to CourseOptimizer).
2) Give it one of the three effect groups and a sign (+1 increases, -1 decreases).
3) scoped=True means the value is a per-scope list and only the entries for the
   optimized activity count; scoped=False means a single global magnitude.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

TIME_PERCENT = "timePercent"
TIME_FLAT = "timeFlat"
REWARD_PERCENT = "rewardPercent"

MODIFIER_GROUPS = (TIME_PERCENT, TIME_FLAT, REWARD_PERCENT)


@dataclass
class GlobalModifier:
    name: str
    group: str
    sign: int
    scoped: bool = True
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.group not in MODIFIER_GROUPS:
            raise ValueError(f"Unknown modifier group {self.group!r} for {self.name}")
        if self.sign not in (1, -1):
            raise ValueError(f"Modifier sign must be +1 or -1, got {self.sign!r} for {self.name}")


class ModifierRegistry:
    def __init__(self, modifiers: Optional[Iterable[GlobalModifier]] = None) -> None:
        self._modifiers: dict[str, GlobalModifier] = {}
        if modifiers:
            for modifier in modifiers:
                self.register(modifier)

    def register(self, modifier: GlobalModifier) -> None:
        self._modifiers[modifier.name] = modifier

    def unregister(self, name: str) -> None:
        self._modifiers.pop(name, None)

    def set_enabled(self, name: str, enabled: bool) -> None:
        modifier = self._modifiers.get(name)
        if modifier is not None:
            modifier.enabled = enabled

    def get(self, name: str) -> Optional[GlobalModifier]:
        return self._modifiers.get(name)

    def list_modifiers(self) -> list[GlobalModifier]:
        return list(self._modifiers.values())

    def enabled_by_group(self) -> dict[str, list[GlobalModifier]]:
        grouped: dict[str, list[GlobalModifier]] = {group: [] for group in MODIFIER_GROUPS}
        for modifier in self._modifiers.values():
            if modifier.enabled:
                grouped[modifier.group].append(modifier)
        return grouped


def builtin_modifiers() -> list[GlobalModifier]:
    return [
        GlobalModifier("increasedSkillIntervalPercent", TIME_PERCENT, 1),
        GlobalModifier("decreasedSkillIntervalPercent", TIME_PERCENT, -1),
        GlobalModifier("increasedSkillInterval", TIME_FLAT, 1),
        GlobalModifier("decreasedSkillInterval", TIME_FLAT, -1),
        GlobalModifier("increasedSkillXP", REWARD_PERCENT, 1),
        GlobalModifier("decreasedSkillXP", REWARD_PERCENT, -1),
        GlobalModifier("increasedGlobalSkillXP", REWARD_PERCENT, 1, scoped=False),
        GlobalModifier("decreasedGlobalSkillXP", REWARD_PERCENT, -1, scoped=False),
    ]


def get_default_registry() -> ModifierRegistry:
    # set_enabled() mutates the GlobalModifier in place; each registry owns fresh instances.
    return ModifierRegistry(builtin_modifiers())
