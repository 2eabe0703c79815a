from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CourseError(Exception):
    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


INVALID_CATALOG = "INVALID_CATALOG"
CATALOG_NOT_FOUND = "CATALOG_NOT_FOUND"
UNKNOWN_ACTION = "UNKNOWN_ACTION"
TIER_NOT_COMPLETABLE = "TIER_NOT_COMPLETABLE"
INVALID_LEVEL = "INVALID_LEVEL"
INVALID_PROFICIENCY = "INVALID_PROFICIENCY"
