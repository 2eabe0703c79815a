from __future__ import annotations

from itertools import product
from typing import Iterator, Sequence

from .models import CourseLayout


def iter_layouts(choice_sets: Sequence[Sequence[str]]) -> Iterator[CourseLayout]:
    """Lazily yield every layout picking one id per tier, tier order preserved.

    The last tier varies fastest. Nothing is yielded when there are no tiers
    or any tier has no choices.
    """
    pools = [tuple(choices) for choices in choice_sets]
    if not pools:
        return
    yield from product(*pools)


def count_layouts(choice_sets: Sequence[Sequence[str]]) -> int:
    if not choice_sets:
        return 0
    total = 1
    for choices in choice_sets:
        total *= len(choices)
    return total
