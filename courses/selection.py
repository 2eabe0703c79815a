from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import CourseError, TIER_NOT_COMPLETABLE
from .evaluator import evaluate_action, round_to_tick
from .models import Action, AggregatedModifiers

logger = logging.getLogger(__name__)


def included_tiers(unlock_levels: Sequence[int], level: int) -> List[int]:
    """Tiers 0..k where k is the last tier whose unlock level is <= level."""
    count = len([threshold for threshold in unlock_levels if threshold <= level])
    return list(range(count))


def best_neutral_action(
    actions: Iterable[Action],
    proficiency: int,
    round_to: Callable[[float], int] = round_to_tick,
) -> Optional[Action]:
    """Highest reward/time action, ignoring modifiers. Ties keep the first seen."""
    best: Optional[Action] = None
    best_ratio = 0.0
    for action in actions:
        props = evaluate_action(action, proficiency, None, round_to)
        if props.time <= 0:
            logger.warning(
                "COURSE_NON_POSITIVE_TIME action=%s time=%r proficiency=%s",
                action.action_id,
                props.time,
                proficiency,
            )
            continue
        ratio = props.reward / props.time
        if best is None or ratio > best_ratio:
            best = action
            best_ratio = ratio
    return best


def build_choice_sets(
    actions: Sequence[Action],
    tiers: Sequence[int],
    aggregated: Mapping[str, Optional[AggregatedModifiers]],
    proficiency: int,
    round_to: Callable[[float], int] = round_to_tick,
) -> List[Tuple[str, ...]]:
    """Viable action ids per included tier, in tier order.

    A tier's choices are every modifier-granting action it holds (catalog
    order) followed by its best neutral action. Raises CourseError when an
    included tier has no choice at all.
    """
    by_tier: Dict[int, List[Action]] = {tier: [] for tier in tiers}
    for action in actions:
        if action.tier in by_tier:
            by_tier[action.tier].append(action)

    choice_sets: List[Tuple[str, ...]] = []
    for tier in tiers:
        tier_actions = by_tier[tier]
        granting = [a.action_id for a in tier_actions if aggregated.get(a.action_id) is not None]
        neutral = best_neutral_action(
            (a for a in tier_actions if aggregated.get(a.action_id) is None),
            proficiency,
            round_to,
        )
        choices = list(granting)
        if neutral is not None:
            choices.append(neutral.action_id)
        choices = list(dict.fromkeys(choices))
        if not choices:
            raise CourseError(
                TIER_NOT_COMPLETABLE,
                f"Tier {tier} has no viable action",
                {"tier": tier, "actions": [a.action_id for a in tier_actions]},
            )
        choice_sets.append(tuple(choices))
    return choice_sets
