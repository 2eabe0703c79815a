import pytest

pd = pytest.importorskip("pandas")

from course_tables import COURSE_COLUMNS, SWEEP_COLUMNS, course_table, sweep_table  # noqa: E402
from courses.optimizer import CourseOptimizer  # noqa: E402


def test_course_table_rows_and_total(two_tier_catalog):
    result = CourseOptimizer(two_tier_catalog).optimal_course(10, 1)
    df = course_table(result, two_tier_catalog)

    assert list(df.columns) == COURSE_COLUMNS
    assert len(df) == 3
    assert list(df["action"]) == ["a0", "g1", "Total"]
    assert list(df["level"][:2]) == [1, 10]
    assert df["seconds"].iloc[-1] == pytest.approx(11.0)
    assert df["reward"].iloc[-1] == pytest.approx(27.0)
    assert df["reward_per_sec"].iloc[-1] == pytest.approx(27 / 11)
    assert df["reward_per_sec"].iloc[0] == pytest.approx(3.0)


def test_sweep_table_keeps_rows_without_course(two_tier_catalog):
    pairs = [[10, 1], [0, 1], [1, 1]]
    results = CourseOptimizer(two_tier_catalog).optimal_course_sweep(pairs)
    df = sweep_table(results, pairs, two_tier_catalog)

    assert list(df.columns) == SWEEP_COLUMNS + ["Action01", "Action02"]
    assert list(df["level"]) == [10, 0, 1]
    assert pd.isna(df.loc[1, "reward"])
    assert pd.isna(df.loc[1, "Action01"])
    assert df.loc[0, "Action02"] == "g1"
    assert pd.isna(df.loc[2, "Action02"])
    assert df.loc[2, "reward_per_sec"] == pytest.approx(2.0)


def test_sweep_table_length_mismatch(two_tier_catalog):
    with pytest.raises(ValueError):
        sweep_table([None], [[1, 1], [10, 1]], two_tier_catalog)
