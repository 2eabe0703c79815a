from __future__ import annotations

from pathlib import Path

from tools.check_engine_imports import find_violations, main


def test_engine_does_not_import_outer_modules() -> None:
    assert main() == 0


def test_checker_flags_forbidden_import(tmp_path: Path) -> None:
    engine = tmp_path / "courses"
    engine.mkdir()
    (engine / "bad.py").write_text("import os\nfrom catalog_repo import ActionCatalog\n", encoding="utf-8")
    (engine / "good.py").write_text("from .models import Action\n", encoding="utf-8")

    assert find_violations(tmp_path) == ["courses/bad.py:2: imports catalog_repo"]
