# catalog_repo.py
# Developer note:
# - The ActionCatalog is immutable once built; the optimizer only reads it.
# - JSON / CSV / Excel files are import only. Nothing here writes catalogs back.
# - action ids are canonical strings; tiers are 0-based and index unlock_levels.
"""
ActionCatalog: the read-only action data the course optimizer runs on.

Usage (CLI):
  python catalog_repo.py validate --catalog action_catalog.json
  python catalog_repo.py list_modifiers --catalog action_catalog.json
  python catalog_repo.py optimize --catalog action_catalog.json --level 70 --proficiency 50
  python catalog_repo.py sweep --catalog action_catalog.json --proficiency 99

Python:
  from catalog_repo import load_catalog_json
  from courses import CourseOptimizer
  catalog = load_catalog_json("action_catalog.json")
  result = CourseOptimizer(catalog).optimal_course(70, 50)

JSON document format:
  {
    "actions": [
      {"id": "...", "name": "...", "category": 0, "baseExperience": 10,
       "baseInterval": 5000, "modifiers": {...}},
      ...
    ],
    "unlockLevels": [0, 10, 20, ...],        (optional, config default)
    "tickInterval": 50,                       (optional, config default)
    "modifierData": {"name": {"isNegative": true}, ...}   (optional, merged over config default)
  }
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import config
from courses.errors import CATALOG_NOT_FOUND, INVALID_CATALOG, UNKNOWN_ACTION, CourseError
from courses.evaluator import round_to_tick
from courses.models import Action, parse_action

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------

def _json_loads(value: Any, default: Any):
    """
    Safe JSON loader:
    - None / NaN -> default
    - already dict/list -> returns as-is
    - invalid JSON -> default
    """
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, float) and value != value:
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


def _merge_modifier_data(overrides: Optional[Mapping[str, Any]]) -> Dict[str, bool]:
    merged = {name: bool(meta.get("isNegative", False)) for name, meta in config.DEFAULT_MODIFIER_METADATA.items()}
    if not overrides:
        return merged
    if not isinstance(overrides, Mapping):
        raise CourseError(INVALID_CATALOG, "modifierData must be an object", overrides)
    for name, meta in overrides.items():
        if isinstance(meta, Mapping):
            merged[str(name)] = bool(meta.get("isNegative", False))
        else:
            merged[str(name)] = bool(meta)
    return merged


# ----------------------------
# Catalog
# ----------------------------

class ActionCatalog:
    """Immutable action catalog with lookups the optimizer needs."""

    def __init__(
        self,
        actions: Iterable[Action],
        *,
        unlock_levels: Optional[Sequence[int]] = None,
        tick_interval: Optional[int] = None,
        modifier_data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._actions: Tuple[Action, ...] = tuple(actions)
        self._unlock_levels: Tuple[int, ...] = tuple(
            int(level) for level in (unlock_levels if unlock_levels is not None else config.DEFAULT_UNLOCK_LEVELS)
        )
        self._tick_interval = int(tick_interval if tick_interval is not None else config.TICK_INTERVAL_MS)
        self._is_negative = MappingProxyType(_merge_modifier_data(modifier_data))
        self._by_id: Mapping[str, Action] = MappingProxyType({a.action_id: a for a in self._actions})
        self.validate()

    # -- read-only views --------------------------------------------------

    @property
    def actions(self) -> Tuple[Action, ...]:
        return self._actions

    @property
    def unlock_levels(self) -> Tuple[int, ...]:
        return self._unlock_levels

    @property
    def tick_interval(self) -> int:
        return self._tick_interval

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._by_id

    def __repr__(self) -> str:
        return f"<ActionCatalog actions={len(self._actions)} tiers={len(self._unlock_levels)}>"

    # -- lookups ----------------------------------------------------------

    def get(self, action_id: str) -> Action:
        try:
            return self._by_id[action_id]
        except KeyError:
            raise CourseError(UNKNOWN_ACTION, f"Unknown action {action_id!r}", {"action_id": action_id}) from None

    def round_to_tick(self, value: float) -> int:
        return round_to_tick(value, self._tick_interval)

    def is_negative(self, name: str) -> bool:
        return self._is_negative.get(name, False)

    def unlock_level_of(self, tier: int) -> Optional[int]:
        if 0 <= tier < len(self._unlock_levels):
            return self._unlock_levels[tier]
        return None

    def list_modifier_names(self) -> List[str]:
        """Every modifier name any action declares, first-seen order."""
        names: Dict[str, None] = {}
        for action in self._actions:
            for name in action.modifiers:
                names.setdefault(name, None)
        return list(names)

    # -- integrity --------------------------------------------------------

    def validate(self) -> None:
        if self._tick_interval <= 0:
            raise CourseError(INVALID_CATALOG, "tickInterval must be positive", {"tickInterval": self._tick_interval})
        levels = self._unlock_levels
        if any(b < a for a, b in zip(levels, levels[1:])):
            raise CourseError(INVALID_CATALOG, "unlockLevels must be ascending", {"unlockLevels": list(levels)})

        seen: Dict[str, int] = {}
        for idx, action in enumerate(self._actions):
            if action.action_id in seen:
                raise CourseError(
                    INVALID_CATALOG,
                    f"Duplicate action id {action.action_id!r}",
                    {"first_index": seen[action.action_id], "index": idx},
                )
            seen[action.action_id] = idx
            if action.tier < 0:
                raise CourseError(INVALID_CATALOG, f"Negative tier for {action.action_id}", {"tier": action.tier})
            if action.base_reward < 0:
                raise CourseError(
                    INVALID_CATALOG, f"Negative base reward for {action.action_id}", {"base_reward": action.base_reward}
                )
            if action.base_time <= 0:
                raise CourseError(
                    INVALID_CATALOG, f"Non-positive base time for {action.action_id}", {"base_time": action.base_time}
                )
            if action.base_time % self._tick_interval != 0:
                logger.warning(
                    "CATALOG_UNQUANTIZED_TIME action=%s base_time=%s tick=%s",
                    action.action_id,
                    action.base_time,
                    self._tick_interval,
                )
            if action.tier >= len(levels):
                logger.warning("CATALOG_TIER_WITHOUT_UNLOCK action=%s tier=%s", action.action_id, action.tier)


# ----------------------------
# Loaders
# ----------------------------

def catalog_from_payload(payload: Mapping[str, Any]) -> ActionCatalog:
    if not isinstance(payload, Mapping):
        raise CourseError(INVALID_CATALOG, "Catalog document must be an object", payload)
    raw_actions = payload.get("actions")
    if not isinstance(raw_actions, list):
        raise CourseError(INVALID_CATALOG, "Catalog document needs an actions list", {"keys": list(payload)})

    return ActionCatalog(
        [parse_action(raw) for raw in raw_actions],
        unlock_levels=payload.get("unlockLevels"),
        tick_interval=payload.get("tickInterval"),
        modifier_data=payload.get("modifierData"),
    )


def load_catalog_json(path: str | os.PathLike) -> ActionCatalog:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as exc:
        raise CourseError(CATALOG_NOT_FOUND, f"Catalog file not found: {p}", {"path": str(p)}) from exc
    except json.JSONDecodeError as exc:
        raise CourseError(INVALID_CATALOG, f"Catalog file is not valid JSON: {p}", {"error": str(exc)}) from exc
    return catalog_from_payload(payload)


def catalog_from_dataframe(
    df,
    *,
    unlock_levels: Optional[Sequence[int]] = None,
    tick_interval: Optional[int] = None,
    modifier_data: Optional[Mapping[str, Any]] = None,
) -> ActionCatalog:
    """Build a catalog from a table with one row per action.

    Columns follow the JSON action keys (id, name, tier|category,
    base_reward|baseExperience, base_time|baseInterval, modifiers). The
    modifiers cell may hold a dict or a JSON string.
    """
    import pandas as pd  # local import so the catalog can be used without pandas

    actions: List[Action] = []
    for record in df.to_dict(orient="records"):
        raw: Dict[str, Any] = {}
        for key, value in record.items():
            if key == "modifiers":
                raw[key] = _json_loads(value, None)
            elif isinstance(value, (list, dict)) or not pd.isna(value):
                raw[key] = value
        actions.append(parse_action(raw))

    return ActionCatalog(
        actions,
        unlock_levels=unlock_levels,
        tick_interval=tick_interval,
        modifier_data=modifier_data,
    )


def load_catalog_table(path: str | os.PathLike, **kwargs: Any) -> ActionCatalog:
    """CSV or Excel sheet -> ActionCatalog (see catalog_from_dataframe)."""
    import pandas as pd

    p = Path(path)
    if not p.exists():
        raise CourseError(CATALOG_NOT_FOUND, f"Catalog file not found: {p}", {"path": str(p)})
    # Cells stay text so ids like "007" survive; parse_action converts the numbers.
    if p.suffix.lower() in {".xlsx", ".xls"}:
        df = pd.read_excel(p, dtype=str)
    else:
        df = pd.read_csv(p, dtype=str)
    return catalog_from_dataframe(df, **kwargs)


def load_catalog(path: str | os.PathLike) -> ActionCatalog:
    if Path(path).suffix.lower() == ".json":
        return load_catalog_json(path)
    return load_catalog_table(path)


def find_catalog_path(filename: str = config.CATALOG_FILENAME) -> Optional[str]:
    """Find a catalog file in common locations.

    Search order (first hit wins):
      1) project root: <project>/<filename>
      2) project data dir: <project>/data/<filename>
      3) project config dir: <project>/config/<filename>
    """
    candidates = [
        os.path.join(config.BASE_DIR, filename),
        os.path.join(config.BASE_DIR, "data", filename),
        os.path.join(config.BASE_DIR, "config", filename),
    ]
    for path in candidates:
        if os.path.exists(path):
            return path
    return None


def load_default_catalog() -> ActionCatalog:
    path = config.CATALOG_PATH or find_catalog_path()
    if not path:
        raise CourseError(
            CATALOG_NOT_FOUND,
            "No catalog configured; set COURSE_CATALOG_PATH or add action_catalog.json",
            {"filename": config.CATALOG_FILENAME},
        )
    return load_catalog(path)


# ----------------------------
# CLI
# ----------------------------

def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Action catalog tools and course optimizer")
    ap.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    sub = ap.add_subparsers(dest="cmd", required=True)

    def _catalog_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument("--catalog", default=None, help="catalog path (.json, .csv, .xlsx)")

    p_validate = sub.add_parser("validate", help="load the catalog and check its integrity")
    _catalog_arg(p_validate)

    p_mods = sub.add_parser("list_modifiers", help="list every modifier name declared in the catalog")
    _catalog_arg(p_mods)

    p_opt = sub.add_parser("optimize", help="optimal course for one level / proficiency")
    _catalog_arg(p_opt)
    p_opt.add_argument("--level", required=True)
    p_opt.add_argument("--proficiency", default=config.DEFAULT_PROFICIENCY)

    p_sweep = sub.add_parser("sweep", help="optimal course for every configured level")
    _catalog_arg(p_sweep)
    p_sweep.add_argument("--proficiency", default=None, help="override proficiency for every level")

    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s %(message)s")

    try:
        catalog = load_catalog(args.catalog) if args.catalog else load_default_catalog()
    except CourseError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if args.cmd == "validate":
        print(f"OK {catalog!r}")
        return 0

    if args.cmd == "list_modifiers":
        for name in catalog.list_modifier_names():
            print(name)
        return 0

    from course_tables import course_table, sweep_table
    from courses.optimizer import CourseOptimizer

    optimizer = CourseOptimizer(catalog)
    try:
        if args.cmd == "optimize":
            result = optimizer.optimal_course(args.level, args.proficiency)
            if result is None:
                print(f"No course available at level {args.level}")
                return 1
            print(
                f"Optimal rate is {result.rate:.4f}/s "
                f"({result.total_seconds:,.2f}s, {result.total_reward:,.2f} reward)"
            )
            print(course_table(result, catalog).to_string(index=False))
            return 0

        if args.cmd == "sweep":
            if args.proficiency is not None:
                optimizer.set_proficiency(args.proficiency)
            results = optimizer.optimal_course_sweep()
            print(sweep_table(results, optimizer.level_array, catalog).to_string(index=False))
            return 0
    except CourseError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
