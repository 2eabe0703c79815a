from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Tuple

from config import MAX_PROFICIENCY, PROFICIENCY_TIME_PERCENT_STEP, TICK_INTERVAL_MS
from .modifier_registry import REWARD_PERCENT, TIME_FLAT, TIME_PERCENT
from .modifiers import combine_modifiers
from .models import Action, AggregatedModifiers, CourseLayout, EvaluatedAction

logger = logging.getLogger(__name__)


def round_to_tick(value: float, tick: int = TICK_INTERVAL_MS) -> int:
    """Round to the nearest multiple of tick, halves rounding up."""
    return int(math.floor(value / tick + 0.5) * tick)


def proficiency_time_percent(proficiency: int) -> int:
    return PROFICIENCY_TIME_PERCENT_STEP * (min(MAX_PROFICIENCY, proficiency) // 10)


def evaluate_action(
    action: Action,
    proficiency: int,
    totals: Optional[Mapping[str, float]] = None,
    round_to: Callable[[float], int] = round_to_tick,
) -> EvaluatedAction:
    totals = totals or {}
    time_pct = proficiency_time_percent(proficiency) + totals.get(TIME_PERCENT, 0)
    time_flat = totals.get(TIME_FLAT, 0)
    reward_pct = totals.get(REWARD_PERCENT, 0)

    reward = action.base_reward * (1 + reward_pct / 100)
    time = round_to(action.base_time * (1 + time_pct / 100) + time_flat)
    if reward < 0 or time < 0:
        logger.warning(
            "COURSE_NEGATIVE_EFFECTIVE_VALUE action=%s reward=%r time=%r",
            action.action_id,
            reward,
            time,
        )
    return EvaluatedAction(action_id=action.action_id, tier=action.tier, reward=reward, time=time)


@dataclass(frozen=True)
class LayoutScore:
    actions: Tuple[EvaluatedAction, ...]
    total_reward: float
    total_time: float  # milliseconds

    @property
    def total_seconds(self) -> float:
        return self.total_time / 1000

    @property
    def rate(self) -> Optional[float]:
        """Reward per second; None when the layout takes no time."""
        if self.total_time <= 0:
            return None
        return self.total_reward / self.total_seconds


def evaluate_layout(
    layout: CourseLayout,
    actions_by_id: Mapping[str, Action],
    aggregated: Mapping[str, Optional[AggregatedModifiers]],
    proficiency: int,
    round_to: Callable[[float], int] = round_to_tick,
) -> LayoutScore:
    """Score one layout.

    The global modifiers are the sum of what the chosen actions themselves
    grant; every chosen action is then re-evaluated under that sum.
    """
    totals = combine_modifiers(aggregated.get(action_id) for action_id in layout)
    evaluated: Sequence[EvaluatedAction] = [
        evaluate_action(actions_by_id[action_id], proficiency, totals, round_to)
        for action_id in layout
    ]
    return LayoutScore(
        actions=tuple(evaluated),
        total_reward=sum(a.reward for a in evaluated),
        total_time=sum(a.time for a in evaluated),
    )
