import json

import pytest

import config
from catalog_repo import (
    ActionCatalog,
    catalog_from_payload,
    find_catalog_path,
    load_catalog,
    load_catalog_json,
    main,
)
from courses.errors import CATALOG_NOT_FOUND, INVALID_CATALOG, UNKNOWN_ACTION, CourseError
from courses.models import ScalarModifier

PAYLOAD = {
    "actions": [
        {"id": "melvorF:Cargo_Net", "name": "Cargo Net", "category": 0, "baseExperience": 10, "baseInterval": 5000},
        {
            "id": "melvorF:Rope_Swing",
            "name": "Rope Swing",
            "category": 1,
            "baseExperience": 8,
            "baseInterval": 6000,
            "modifiers": {"increasedGlobalSkillXP": 50, "increasedGPGlobal": "oops"},
        },
        {"id": "melvorF:Log_Balance", "name": "Log Balance", "category": 1, "baseExperience": 12, "baseInterval": 6000},
    ],
    "unlockLevels": [1, 10],
    "tickInterval": 50,
    "modifierData": {"increasedGlobalSkillXP": {"isNegative": True}, "customPenalty": {"isNegative": True}},
}


def test_catalog_from_payload():
    catalog = catalog_from_payload(PAYLOAD)

    assert len(catalog) == 3
    assert [a.action_id for a in catalog] == [
        "melvorF:Cargo_Net",
        "melvorF:Rope_Swing",
        "melvorF:Log_Balance",
    ]
    assert catalog.unlock_levels == (1, 10)
    assert catalog.tick_interval == 50
    assert "melvorF:Rope_Swing" in catalog
    assert catalog.get("melvorF:Rope_Swing").modifiers == {"increasedGlobalSkillXP": ScalarModifier(50.0)}
    assert catalog.unlock_level_of(1) == 10
    assert catalog.unlock_level_of(5) is None


def test_modifier_metadata_merges_over_defaults():
    catalog = catalog_from_payload(PAYLOAD)
    assert catalog.is_negative("increasedGlobalSkillXP") is True
    assert catalog.is_negative("customPenalty") is True
    assert catalog.is_negative("decreasedSkillXP") is True
    assert catalog.is_negative("decreasedSkillIntervalPercent") is False
    assert catalog.is_negative("neverHeardOfIt") is False


def test_defaults_fill_missing_catalog_settings():
    catalog = catalog_from_payload({"actions": []})
    assert catalog.unlock_levels == config.DEFAULT_UNLOCK_LEVELS
    assert catalog.tick_interval == config.TICK_INTERVAL_MS
    assert len(catalog) == 0


def test_round_to_tick_uses_catalog_tick():
    catalog = ActionCatalog([], tick_interval=100)
    assert catalog.round_to_tick(149) == 100
    assert catalog.round_to_tick(150) == 200


def test_get_unknown_action():
    catalog = catalog_from_payload(PAYLOAD)
    with pytest.raises(CourseError) as exc_info:
        catalog.get("nope")
    assert exc_info.value.code == UNKNOWN_ACTION


@pytest.mark.parametrize(
    "payload",
    [
        {"actions": [{"id": "a", "tier": 0, "base_reward": 1, "base_time": 50}] * 2},
        {"actions": [{"id": "a", "tier": -1, "base_reward": 1, "base_time": 50}]},
        {"actions": [{"id": "a", "tier": 0, "base_reward": -1, "base_time": 50}]},
        {"actions": [{"id": "a", "tier": 0, "base_reward": 1, "base_time": 0}]},
        {"actions": [], "unlockLevels": [10, 1]},
        {"actions": [], "tickInterval": 0},
        {"actions": "a"},
        {"actions": [], "modifierData": ["x"]},
        ["not", "an", "object"],
    ],
)
def test_invalid_catalogs_are_rejected(payload):
    with pytest.raises(CourseError) as exc_info:
        catalog_from_payload(payload)
    assert exc_info.value.code == INVALID_CATALOG


def test_list_modifier_names_first_seen_order():
    catalog = catalog_from_payload(PAYLOAD)
    # the malformed increasedGPGlobal value is dropped at load
    assert catalog.list_modifier_names() == ["increasedGlobalSkillXP"]


def test_load_catalog_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")

    catalog = load_catalog_json(path)
    assert len(catalog) == 3
    assert len(load_catalog(str(path))) == 3


def test_load_catalog_json_errors(tmp_path):
    with pytest.raises(CourseError) as exc_info:
        load_catalog_json(tmp_path / "missing.json")
    assert exc_info.value.code == CATALOG_NOT_FOUND

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(CourseError) as exc_info:
        load_catalog_json(bad)
    assert exc_info.value.code == INVALID_CATALOG


def test_find_catalog_path_misses_unknown_file():
    assert find_catalog_path("definitely_not_a_catalog_file.json") is None


def test_catalog_from_dataframe():
    pd = pytest.importorskip("pandas")
    from catalog_repo import catalog_from_dataframe

    df = pd.DataFrame(
        [
            {"id": "a0", "name": "Rope", "tier": 0, "base_reward": 10, "base_time": 5000, "modifiers": None},
            {
                "id": "g1",
                "name": None,
                "tier": 1,
                "base_reward": 8,
                "base_time": 6000,
                "modifiers": '{"increasedGlobalSkillXP": 50}',
            },
        ]
    )
    catalog = catalog_from_dataframe(df, unlock_levels=[1, 10])

    assert [a.action_id for a in catalog] == ["a0", "g1"]
    assert catalog.get("a0").display_name == "Rope"
    assert catalog.get("a0").modifiers == {}
    assert catalog.get("g1").display_name == "g1"
    assert catalog.get("g1").modifiers == {"increasedGlobalSkillXP": ScalarModifier(50.0)}
    assert catalog.get("g1").base_time == 6000


def test_load_catalog_csv(tmp_path):
    pytest.importorskip("pandas")
    path = tmp_path / "catalog.csv"
    path.write_text(
        "id,name,category,baseExperience,baseInterval\n"
        "a0,Rope,0,10,5000\n"
        "n1,Log,1,12,6000\n",
        encoding="utf-8",
    )
    catalog = load_catalog(path)
    assert [a.action_id for a in catalog] == ["a0", "n1"]
    assert catalog.unlock_levels == config.DEFAULT_UNLOCK_LEVELS


def test_load_catalog_csv_keeps_numeric_looking_ids(tmp_path):
    pytest.importorskip("pandas")
    path = tmp_path / "catalog.csv"
    path.write_text(
        "id,name,tier,base_reward,base_time,modifiers\n"
        "007,0.50,0,10,5000,\n"
        "1e3,,1,8,6000,\"{\"\"increasedGlobalSkillXP\"\": 50}\"\n",
        encoding="utf-8",
    )
    catalog = load_catalog(path)

    assert [a.action_id for a in catalog] == ["007", "1e3"]
    assert catalog.get("007").display_name == "0.50"
    assert catalog.get("1e3").display_name == "1e3"
    assert catalog.get("1e3").modifiers == {"increasedGlobalSkillXP": ScalarModifier(50.0)}
    assert catalog.get("1e3").tier == 1
    assert catalog.get("1e3").base_time == 6000


def test_cli_validate_and_list_modifiers(tmp_path, capsys):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")

    assert main(["validate", "--catalog", str(path)]) == 0
    assert "OK" in capsys.readouterr().out

    assert main(["list_modifiers", "--catalog", str(path)]) == 0
    assert capsys.readouterr().out.split() == ["increasedGlobalSkillXP"]


def test_cli_optimize_and_sweep(tmp_path, capsys):
    pytest.importorskip("pandas")
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")

    assert main(["optimize", "--catalog", str(path), "--level", "10", "--proficiency", "1"]) == 0
    out = capsys.readouterr().out
    assert "Optimal rate is 2.4545/s" in out
    assert "Rope Swing" in out
    assert "Total" in out

    assert main(["optimize", "--catalog", str(path), "--level", "0"]) == 1
    assert "No course available" in capsys.readouterr().out

    assert main(["sweep", "--catalog", str(path), "--proficiency", "99"]) == 0
    out = capsys.readouterr().out
    assert "Action01" in out
    assert "Cargo Net" in out


def test_cli_missing_catalog(tmp_path, capsys):
    assert main(["validate", "--catalog", str(tmp_path / "missing.json")]) == 2
    assert CATALOG_NOT_FOUND in capsys.readouterr().err
