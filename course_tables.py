"""course_tables.py

Tabular views of optimizer results.

- Input: CourseResult objects (plus the catalog, for names and unlock levels)
- Output: pandas DataFrames, ready for to_string() / to_csv() / display
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from courses.errors import CourseError
from courses.models import CourseResult

COURSE_COLUMNS = ["tier", "level", "action", "reward", "seconds", "reward_per_sec"]
SWEEP_COLUMNS = ["level", "proficiency", "reward", "seconds", "reward_per_sec"]


def _action_name(catalog, action_id: str) -> str:
    try:
        return catalog.get(action_id).display_name
    except CourseError:
        return action_id


def course_table(result: CourseResult, catalog) -> pd.DataFrame:
    """One row per chosen action followed by a Total row."""
    rows: List[Dict[str, Any]] = []
    for action in result.actions:
        rows.append(
            {
                "tier": action.tier,
                "level": catalog.unlock_level_of(action.tier),
                "action": _action_name(catalog, action.action_id),
                "reward": action.reward,
                "seconds": action.seconds,
                "reward_per_sec": action.rate,
            }
        )
    rows.append(
        {
            "tier": None,
            "level": None,
            "action": "Total",
            "reward": result.total_reward,
            "seconds": result.total_seconds,
            "reward_per_sec": result.rate,
        }
    )
    return pd.DataFrame(rows, columns=COURSE_COLUMNS)


def sweep_table(
    results: Sequence[Optional[CourseResult]],
    pairs: Sequence[Sequence[int]],
    catalog,
) -> pd.DataFrame:
    """One row per (level, proficiency) pair with totals and ActionNN names.

    Pairs without a course keep their row with empty totals.
    """
    if len(results) != len(pairs):
        raise ValueError(f"sweep_table: {len(results)} results for {len(pairs)} pairs")

    width = max((len(r.actions) for r in results if r is not None), default=0)
    action_cols = [f"Action{i + 1:02d}" for i in range(width)]

    rows: List[Dict[str, Any]] = []
    for (level, proficiency), result in zip(pairs, results):
        row: Dict[str, Any] = {"level": level, "proficiency": proficiency}
        if result is None:
            row.update({"reward": None, "seconds": None, "reward_per_sec": None})
        else:
            row.update(
                {
                    "reward": result.total_reward,
                    "seconds": result.total_seconds,
                    "reward_per_sec": result.rate,
                }
            )
            for col, action in zip(action_cols, result.actions):
                row[col] = _action_name(catalog, action.action_id)
        rows.append(row)

    return pd.DataFrame(rows, columns=SWEEP_COLUMNS + action_cols)
