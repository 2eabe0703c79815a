#!/usr/bin/env python3
"""Fail when the courses/ engine reaches for catalog loading or outer surfaces.

The engine receives its catalog from the caller; it must never import the
catalog loader, the table export, or the HTTP server.
"""
from __future__ import annotations

import sys
from pathlib import Path

FORBIDDEN_MODULES = ("catalog_repo", "course_tables", "server")


def _iter_python_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for path in root.rglob("*.py"):
        parts = set(path.parts)
        if {".git", "venv", "__pycache__"} & parts:
            continue
        files.append(path)
    return files


def find_violations(root: Path) -> list[str]:
    engine_dir = root / "courses"
    violations: list[str] = []

    for path in _iter_python_files(engine_dir):
        rel_path = path.relative_to(root)
        with path.open("r", encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, start=1):
                stripped = line.strip()
                if not (stripped.startswith("import ") or stripped.startswith("from ")):
                    continue
                module = stripped.split()[1].split(".")[0]
                if module in FORBIDDEN_MODULES:
                    violations.append(f"{rel_path}:{line_no}: imports {module}")
    return violations


def main() -> int:
    root = Path(__file__).resolve().parent.parent
    violations = find_violations(root)

    if violations:
        for entry in violations:
            print(entry)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
