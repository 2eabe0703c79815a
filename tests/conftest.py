from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from catalog_repo import ActionCatalog  # noqa: E402
from courses.models import parse_action  # noqa: E402


def _action(action_id, tier, reward, time, modifiers=None, name=""):
    raw = {"id": action_id, "tier": tier, "base_reward": reward, "base_time": time, "name": name}
    if modifiers is not None:
        raw["modifiers"] = modifiers
    return parse_action(raw)


@pytest.fixture
def make_action():
    return _action


@pytest.fixture
def make_catalog():
    def _make(actions, unlock_levels=(1, 10), **kwargs):
        built = [a if not isinstance(a, tuple) else _action(*a) for a in actions]
        return ActionCatalog(built, unlock_levels=unlock_levels, **kwargs)

    return _make


@pytest.fixture
def two_tier_catalog(make_catalog):
    """Tier 0: one neutral action. Tier 1: a +50% global reward granter and a neutral action."""
    return make_catalog(
        [
            ("a0", 0, 10, 5000),
            ("g1", 1, 8, 6000, {"increasedGlobalSkillXP": 50}),
            ("n1", 1, 12, 6000),
        ]
    )
