from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import CourseError, INVALID_CATALOG

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *, limit: int = 5) -> None:
    """Log warning, but cap repeats per code."""
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


# ---------------------------------------------------------------------
# Modifier values
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ScalarModifier:
    """A modifier that applies everywhere with a single magnitude."""

    magnitude: float


@dataclass(frozen=True)
class ScopedEntry:
    scope: str
    magnitude: float


@dataclass(frozen=True)
class ScopedModifierList:
    """A modifier expressed per scope (e.g. per skill)."""

    entries: Tuple[ScopedEntry, ...] = ()

    def total_for(self, scope: str) -> float:
        return sum(e.magnitude for e in self.entries if e.scope == scope)


ModifierValue = Union[ScalarModifier, ScopedModifierList]

AggregatedModifiers = Dict[str, float]
CourseLayout = Tuple[str, ...]


# ---------------------------------------------------------------------
# Catalog entities
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Action:
    action_id: str
    tier: int
    base_reward: float
    base_time: int  # milliseconds
    name: str = ""
    modifiers: Mapping[str, ModifierValue] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def display_name(self) -> str:
        return self.name or self.action_id


# ---------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class EvaluatedAction:
    action_id: str
    tier: int
    reward: float
    time: float  # milliseconds

    @property
    def seconds(self) -> float:
        return self.time / 1000

    @property
    def rate(self) -> Optional[float]:
        if self.time <= 0:
            return None
        return self.reward / self.seconds


@dataclass(frozen=True)
class CourseResult:
    level: int
    proficiency: int
    actions: Tuple[EvaluatedAction, ...]
    total_reward: float
    total_time: float  # milliseconds
    layouts_evaluated: int = 0

    @property
    def total_seconds(self) -> float:
        return self.total_time / 1000

    @property
    def rate(self) -> float:
        return self.total_reward / self.total_seconds

    @property
    def layout(self) -> CourseLayout:
        return tuple(a.action_id for a in self.actions)


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (math.isnan(value) or math.isinf(value))


def _entry_scope(raw: Mapping[str, Any]) -> Optional[str]:
    for key in ("scope", "skillID", "skill"):
        value = raw.get(key)
        if isinstance(value, Mapping):
            value = value.get("id")
        if isinstance(value, str) and value:
            return value
    return None


def _entry_magnitude(raw: Mapping[str, Any]) -> Optional[float]:
    for key in ("value", "magnitude"):
        value = raw.get(key)
        if _is_number(value):
            return float(value)
    return None


def parse_modifier_value(raw: Any) -> Optional[ModifierValue]:
    """Resolve a raw modifier value into ScalarModifier or ScopedModifierList.

    Accepted shapes:
      5                                              -> ScalarModifier(5.0)
      [{"skillID": "melvorD:Agility", "value": 5}]   -> ScopedModifierList(...)

    Entries may name their scope with "scope", "skillID" or "skill" (a string or
    an object with an "id"), and their magnitude with "value" or "magnitude".
    Anything else returns None.
    """
    if _is_number(raw):
        return ScalarModifier(float(raw))
    if isinstance(raw, (list, tuple)):
        entries: List[ScopedEntry] = []
        for item in raw:
            if not isinstance(item, Mapping):
                return None
            scope = _entry_scope(item)
            magnitude = _entry_magnitude(item)
            if scope is None or magnitude is None:
                return None
            entries.append(ScopedEntry(scope=scope, magnitude=magnitude))
        return ScopedModifierList(tuple(entries))
    return None


def parse_modifiers(raw: Any, *, context: str = "") -> Mapping[str, ModifierValue]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        _warn_limited("CATALOG_MALFORMED_MODIFIERS", f"{context} modifiers={raw!r}")
        return MappingProxyType({})

    out: Dict[str, ModifierValue] = {}
    for name, value in raw.items():
        parsed = parse_modifier_value(value)
        if parsed is None:
            _warn_limited("CATALOG_MALFORMED_MODIFIER", f"{context} name={name!r} value={value!r}")
            continue
        out[str(name)] = parsed
    return MappingProxyType(out)


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _whole_number(value: Any) -> int:
    """int() that refuses fractions, NaN and infinities instead of truncating."""
    number = float(value)
    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(f"not a whole number: {value!r}")
    return int(number)


def parse_action(raw: Mapping[str, Any]) -> Action:
    if not isinstance(raw, Mapping):
        raise CourseError(INVALID_CATALOG, "Action entry must be an object", raw)

    action_id = raw.get("id")
    if action_id is None or str(action_id).strip() == "":
        raise CourseError(INVALID_CATALOG, "Missing id in action", raw)
    action_id = str(action_id).strip()

    tier = _first_present(raw, "tier", "category")
    reward = _first_present(raw, "base_reward", "baseExperience")
    base_time = _first_present(raw, "base_time", "baseInterval")
    try:
        tier = _whole_number(tier)
        reward = float(reward)
        base_time = _whole_number(base_time)
    except (TypeError, ValueError) as exc:
        raise CourseError(INVALID_CATALOG, f"Invalid numeric field in action {action_id}", raw) from exc

    return Action(
        action_id=action_id,
        tier=tier,
        base_reward=reward,
        base_time=base_time,
        name=str(raw.get("name") or ""),
        modifiers=parse_modifiers(raw.get("modifiers"), context=f"action={action_id}"),
    )


def serialize_course(result: CourseResult) -> Dict[str, Any]:
    return {
        "level": result.level,
        "proficiency": result.proficiency,
        "actions": [
            {
                "id": a.action_id,
                "tier": a.tier,
                "reward": a.reward,
                "time": a.time,
                "seconds": a.seconds,
                "rate": a.rate,
            }
            for a in result.actions
        ],
        "total_reward": result.total_reward,
        "total_time": result.total_time,
        "total_seconds": result.total_seconds,
        "rate": result.rate,
        "layouts_evaluated": result.layouts_evaluated,
    }
