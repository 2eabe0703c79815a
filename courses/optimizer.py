"""Course optimizer driver.

For a (level, proficiency) pair:
  1) aggregate every catalog action's own modifiers at that proficiency
  2) build the viable choice set of each unlocked tier
  3) enumerate every layout (one choice per tier)
  4) score each layout and keep the strictly highest reward/second

The catalog is injected and treated as read-only; no state is kept between
calls except level_array, which only drives the default sweep.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from config import (
    ACTIVITY_ID,
    DEFAULT_LEVEL_ARRAY,
    MAX_PROFICIENCY,
    MIN_PROFICIENCY,
)
from .combinations import count_layouts, iter_layouts
from .errors import CourseError, INVALID_LEVEL, INVALID_PROFICIENCY
from .evaluator import LayoutScore, evaluate_layout
from .modifier_registry import ModifierRegistry, get_default_registry
from .modifiers import aggregate_modifiers
from .models import Action, AggregatedModifiers, CourseResult
from .selection import build_choice_sets, included_tiers

logger = logging.getLogger(__name__)


class ActionCatalogLike(Protocol):
    actions: Tuple[Action, ...]
    unlock_levels: Tuple[int, ...]

    def get(self, action_id: str) -> Action:
        ...

    def round_to_tick(self, value: float) -> int:
        ...

    def is_negative(self, name: str) -> bool:
        ...

    def list_modifier_names(self) -> List[str]:
        ...


def _parse_int(value: Any) -> Optional[int]:
    """Integer value of numeric input (ints, floats, numeric strings); None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return None
    return int(parsed) if math.isfinite(parsed) else None


def clamp_proficiency(value: int) -> int:
    return max(MIN_PROFICIENCY, min(MAX_PROFICIENCY, value))


class CourseOptimizer:
    def __init__(
        self,
        catalog: ActionCatalogLike,
        *,
        registry: Optional[ModifierRegistry] = None,
        activity_id: str = ACTIVITY_ID,
        level_array: Optional[Sequence[Sequence[int]]] = None,
        strict: bool = False,
    ) -> None:
        self.catalog = catalog
        self.registry = registry or get_default_registry()
        self.activity_id = activity_id
        self.level_array: List[List[int]] = [
            [int(level), int(proficiency)]
            for level, proficiency in (level_array if level_array is not None else DEFAULT_LEVEL_ARRAY)
        ]
        self.strict = strict

    # -----------------------------------------------------------------
    # Building blocks
    # -----------------------------------------------------------------

    def aggregated_modifiers(self, proficiency: int) -> Dict[str, Optional[AggregatedModifiers]]:
        return {
            action.action_id: aggregate_modifiers(
                action.modifiers,
                proficiency,
                is_negative=self.catalog.is_negative,
                registry=self.registry,
                activity_id=self.activity_id,
            )
            for action in self.catalog.actions
        }

    def choice_sets(self, level: int, proficiency: int) -> List[Tuple[str, ...]]:
        level = self._require_level(level)
        proficiency = self._require_proficiency(proficiency)
        tiers = included_tiers(self.catalog.unlock_levels, level)
        return build_choice_sets(
            self.catalog.actions,
            tiers,
            self.aggregated_modifiers(proficiency),
            proficiency,
            self.catalog.round_to_tick,
        )

    # -----------------------------------------------------------------
    # Public operations
    # -----------------------------------------------------------------

    def optimal_course(self, level: Any, proficiency: Any) -> Optional[CourseResult]:
        """Best layout for one (level, proficiency) pair, or None.

        None means no course can be built: nothing is unlocked, an unlocked
        tier has no viable action (raised instead when strict=True), or every
        layout takes no time. A zero-reward course is still a result.
        """
        level = self._require_level(level)
        proficiency = self._require_proficiency(proficiency)

        tiers = included_tiers(self.catalog.unlock_levels, level)
        if not tiers:
            logger.info("COURSE_NO_TIERS_UNLOCKED level=%s", level)
            return None

        aggregated = self.aggregated_modifiers(proficiency)
        try:
            choices = build_choice_sets(
                self.catalog.actions, tiers, aggregated, proficiency, self.catalog.round_to_tick
            )
        except CourseError as exc:
            if self.strict:
                raise
            logger.warning("%s level=%s proficiency=%s details=%r", exc, level, proficiency, exc.details)
            return None

        actions_by_id = {action_id: self.catalog.get(action_id) for tier in choices for action_id in tier}
        logger.debug(
            "COURSE_ENUMERATE level=%s proficiency=%s tiers=%d layouts=%d",
            level,
            proficiency,
            len(tiers),
            count_layouts(choices),
        )

        best: Optional[LayoutScore] = None
        best_rate = 0.0
        evaluated = 0
        for layout in iter_layouts(choices):
            score = evaluate_layout(
                layout, actions_by_id, aggregated, proficiency, self.catalog.round_to_tick
            )
            evaluated += 1
            rate = score.rate
            if rate is None:
                logger.warning("COURSE_NON_POSITIVE_TOTAL_TIME layout=%r", layout)
                continue
            if best is None or rate > best_rate:
                best = score
                best_rate = rate

        if best is None:
            return None
        return CourseResult(
            level=level,
            proficiency=proficiency,
            actions=best.actions,
            total_reward=best.total_reward,
            total_time=best.total_time,
            layouts_evaluated=evaluated,
        )

    def optimal_course_sweep(
        self, pairs: Optional[Iterable[Sequence[Any]]] = None
    ) -> List[Optional[CourseResult]]:
        """optimal_course for each pair, in input order (defaults to level_array)."""
        pairs = self.level_array if pairs is None else pairs
        return [self.optimal_course(level, proficiency) for level, proficiency in pairs]

    def set_proficiency(self, value: Any) -> bool:
        """Apply one proficiency to every level_array entry.

        Numeric input is clamped to the valid range; anything else leaves the
        array untouched and returns False.
        """
        parsed = _parse_int(value)
        if parsed is None:
            logger.warning("COURSE_INVALID_PROFICIENCY value=%r (unchanged)", value)
            return False
        proficiency = clamp_proficiency(parsed)
        self.level_array = [[level, proficiency] for level, _ in self.level_array]
        return True

    def list_modifier_names(self) -> List[str]:
        return self.catalog.list_modifier_names()

    # -----------------------------------------------------------------
    # Input checks
    # -----------------------------------------------------------------

    @staticmethod
    def _require_level(value: Any) -> int:
        parsed = _parse_int(value)
        if parsed is None:
            raise CourseError(INVALID_LEVEL, "Level must be numeric", {"level": value})
        return parsed

    @staticmethod
    def _require_proficiency(value: Any) -> int:
        parsed = _parse_int(value)
        if parsed is None:
            raise CourseError(INVALID_PROFICIENCY, "Proficiency must be numeric", {"proficiency": value})
        return clamp_proficiency(parsed)


def optimal_course(catalog: ActionCatalogLike, level: Any, proficiency: Any, **kwargs: Any) -> Optional[CourseResult]:
    return CourseOptimizer(catalog, **kwargs).optimal_course(level, proficiency)


def optimal_course_sweep(
    catalog: ActionCatalogLike, pairs: Iterable[Sequence[Any]], **kwargs: Any
) -> List[Optional[CourseResult]]:
    return CourseOptimizer(catalog, **kwargs).optimal_course_sweep(pairs)
