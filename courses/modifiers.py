from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional

from config import ACTIVITY_ID, NEGATIVE_DAMPENING_LEVEL, NEGATIVE_DAMPENING_MULT
from .modifier_registry import GlobalModifier, ModifierRegistry, get_default_registry
from .models import AggregatedModifiers, ModifierValue, ScalarModifier, ScopedModifierList


def _never_negative(name: str) -> bool:
    return False


def modifier_value(
    modifiers: Mapping[str, ModifierValue],
    spec: GlobalModifier,
    proficiency: int,
    *,
    is_negative: Callable[[str], bool] = _never_negative,
    activity_id: str = ACTIVITY_ID,
) -> Optional[float]:
    """Unsigned magnitude of one modifier kind in a declaration, or None.

    Scoped kinds only read ScopedModifierList values (entries for activity_id),
    global kinds only read ScalarModifier values. A scoped total of zero counts
    as absent.
    """
    value = modifiers.get(spec.name) if modifiers else None
    if value is None:
        return None

    mult = NEGATIVE_DAMPENING_MULT if (is_negative(spec.name) and proficiency >= NEGATIVE_DAMPENING_LEVEL) else 1
    if not spec.scoped and isinstance(value, ScalarModifier):
        return value.magnitude * mult
    if spec.scoped and isinstance(value, ScopedModifierList):
        total = value.total_for(activity_id)
        return None if total == 0 else total * mult
    return None


def aggregate_modifiers(
    modifiers: Mapping[str, ModifierValue],
    proficiency: int,
    *,
    is_negative: Callable[[str], bool] = _never_negative,
    registry: Optional[ModifierRegistry] = None,
    activity_id: str = ACTIVITY_ID,
) -> Optional[AggregatedModifiers]:
    """Collapse a modifier declaration into signed per-group totals.

    Returns None when nothing recognized survives; a group whose net total is
    zero is left out of the result.
    """
    if not modifiers:
        return None
    registry = registry or get_default_registry()

    out: AggregatedModifiers = {}
    for group, specs in registry.enabled_by_group().items():
        total = 0.0
        for spec in specs:
            value = modifier_value(
                modifiers,
                spec,
                proficiency,
                is_negative=is_negative,
                activity_id=activity_id,
            )
            total += (value or 0) * spec.sign
        if total != 0:
            out[group] = total
    return out or None


def combine_modifiers(values: Iterable[Optional[AggregatedModifiers]]) -> AggregatedModifiers:
    """Per-key sum across aggregated results; None entries contribute nothing."""
    combined: AggregatedModifiers = {}
    for value in values:
        if value is None:
            continue
        for key, amount in value.items():
            combined[key] = combined.get(key, 0) + amount
    return combined
