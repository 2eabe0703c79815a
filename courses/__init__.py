"""Course optimization engine: pick one action per tier to maximize reward per second."""

from .errors import CourseError
from .models import (
    Action,
    CourseResult,
    EvaluatedAction,
    ScalarModifier,
    ScopedEntry,
    ScopedModifierList,
    parse_action,
    parse_modifiers,
    serialize_course,
)
from .modifier_registry import GlobalModifier, ModifierRegistry, get_default_registry
from .modifiers import aggregate_modifiers, combine_modifiers
from .optimizer import CourseOptimizer, optimal_course, optimal_course_sweep

__all__ = [
    "CourseError",
    "Action",
    "CourseResult",
    "EvaluatedAction",
    "ScalarModifier",
    "ScopedEntry",
    "ScopedModifierList",
    "parse_action",
    "parse_modifiers",
    "serialize_course",
    "GlobalModifier",
    "ModifierRegistry",
    "get_default_registry",
    "aggregate_modifiers",
    "combine_modifiers",
    "CourseOptimizer",
    "optimal_course",
    "optimal_course_sweep",
]
