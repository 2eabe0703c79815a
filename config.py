import os
from typing import Dict, List, Tuple

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Activity whose scoped modifiers are matched (entries for other scopes are ignored).
ACTIVITY_ID = "melvorD:Agility"

# Action times are quantized to this many milliseconds.
TICK_INTERVAL_MS = 50

# Minimum level per tier (index = tier). Must be ascending.
DEFAULT_UNLOCK_LEVELS: Tuple[int, ...] = (
    0,
    10,
    20,
    30,
    40,
    50,
    60,
    70,
    80,
    90,
    100,
    105,
    110,
    115,
    118,
)

# Proficiency (mastery) bounds
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 99
DEFAULT_PROFICIENCY = 50

# At or above this proficiency, modifiers flagged isNegative are halved.
NEGATIVE_DAMPENING_LEVEL = 99
NEGATIVE_DAMPENING_MULT = 0.5

# Every 10 proficiency levels shaves this many percent off the action time.
PROFICIENCY_TIME_PERCENT_STEP = -3

# Scenarios evaluated by a sweep when no explicit pairs are given: [level, proficiency]
DEFAULT_LEVEL_ARRAY: List[List[int]] = [
    [1, DEFAULT_PROFICIENCY],
    [10, DEFAULT_PROFICIENCY],
    [20, DEFAULT_PROFICIENCY],
    [30, DEFAULT_PROFICIENCY],
    [40, DEFAULT_PROFICIENCY],
    [50, DEFAULT_PROFICIENCY],
    [60, DEFAULT_PROFICIENCY],
    [70, DEFAULT_PROFICIENCY],
    [80, DEFAULT_PROFICIENCY],
    [90, DEFAULT_PROFICIENCY],
    [100, DEFAULT_PROFICIENCY],
    [105, DEFAULT_PROFICIENCY],
    [110, DEFAULT_PROFICIENCY],
    [115, DEFAULT_PROFICIENCY],
    [118, DEFAULT_PROFICIENCY],
]

# isNegative flags for the recognized modifier kinds. Catalog documents may
# override or extend this through their "modifierData" block.
DEFAULT_MODIFIER_METADATA: Dict[str, Dict[str, bool]] = {
    "increasedSkillIntervalPercent": {"isNegative": True},
    "decreasedSkillIntervalPercent": {"isNegative": False},
    "increasedSkillInterval": {"isNegative": True},
    "decreasedSkillInterval": {"isNegative": False},
    "increasedSkillXP": {"isNegative": False},
    "decreasedSkillXP": {"isNegative": True},
    "increasedGlobalSkillXP": {"isNegative": False},
    "decreasedGlobalSkillXP": {"isNegative": True},
}

# Catalog document lookup (see catalog_repo.find_catalog_path)
CATALOG_FILENAME = "action_catalog.json"
CATALOG_PATH = os.environ.get("COURSE_CATALOG_PATH") or None
