from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from data_processing.preprocessing.features import (
    add_calendar_features,
    add_daily_integrals,
    add_replicate_aggregates,
    find_gaps,
)
from data_processing.preprocessing.schema import ReplicateSchema, SchemaError

PPFD = ReplicateSchema.from_metrics(["ppfd"], [1])


def _frame(times, ppfd) -> pd.DataFrame:
    return pd.DataFrame({"timestamp": pd.to_datetime(times), "ppfd_1": ppfd})


def test_daily_integral_scenario() -> None:
    df = _frame(["2024-05-01 07:00", "2024-05-01 07:15", "2024-05-01 07:30"], [100.0, 200.0, 150.0])

    out = add_daily_integrals(df, PPFD, {"ppfd": "dli"}, interval_seconds=900)

    assert out["dli_1"].tolist() == pytest.approx([0.09, 0.27, 0.405])


def test_daily_integral_resets_to_first_contribution_each_day() -> None:
    df = _frame(
        ["2024-05-01 07:00", "2024-05-01 07:15", "2024-05-02 07:00", "2024-05-02 07:15"],
        [100.0, 100.0, 50.0, 50.0],
    )

    out = add_daily_integrals(df, PPFD, {"ppfd": "dli"}, interval_seconds=900)

    assert out["dli_1"].tolist() == pytest.approx([0.09, 0.18, 0.045, 0.09])


def test_daily_integral_sorts_input_and_is_monotonic_within_day() -> None:
    rng = np.random.default_rng(3)
    times = pd.date_range("2024-05-01 07:00", "2024-05-03 20:45", freq="15min")
    times = times[(times.hour >= 7) & (times.hour <= 20)]
    df = _frame(times, rng.uniform(0, 800, len(times))).sample(frac=1.0, random_state=1)

    out = add_daily_integrals(df, PPFD, {"ppfd": "dli"}, interval_seconds=900)

    assert out["timestamp"].is_monotonic_increasing
    for _, day in out.groupby(out["timestamp"].dt.date):
        assert day["dli_1"].is_monotonic_increasing
        assert day["dli_1"].iloc[0] == pytest.approx(day["ppfd_1"].iloc[0] * 900 / 1e6)


def test_daily_integral_does_not_fill_gaps() -> None:
    df = _frame(["2024-05-01 07:00", "2024-05-01 08:00"], [100.0, 100.0])

    out = add_daily_integrals(df, PPFD, {"ppfd": "dli"}, interval_seconds=900)

    assert out["dli_1"].tolist() == pytest.approx([0.09, 0.18])


def test_daily_integral_requires_flux_columns_and_unique_timestamps() -> None:
    with pytest.raises(SchemaError):
        add_daily_integrals(_frame(["2024-05-01 07:00"], [1.0]).rename(columns={"ppfd_1": "x"}),
                            PPFD, {"ppfd": "dli"})
    with pytest.raises(SchemaError):
        add_daily_integrals(_frame(["2024-05-01 07:00", "2024-05-01 07:00"], [1.0, 2.0]),
                            PPFD, {"ppfd": "dli"})


def test_calendar_features() -> None:
    df = _frame(["2024-05-04 13:45"], [1.0])

    out = add_calendar_features(df)

    assert str(out.loc[0, "date"]) == "2024-05-04"
    assert out.loc[0, "hour"] == 13
    assert out.loc[0, "day_of_week"] == 5


def test_replicate_aggregates() -> None:
    schema = ReplicateSchema.from_metrics(["ppfd"], [1, 2])
    df = pd.DataFrame({"ppfd_1": [100.0, 0.0], "ppfd_2": [300.0, 50.0]})

    out = add_replicate_aggregates(df, schema, ["ppfd"], suffix="mean")

    assert out["ppfd_mean"].tolist() == [200.0, 25.0]


def test_find_gaps_within_day_only() -> None:
    df = _frame(
        ["2024-05-01 07:00", "2024-05-01 07:15", "2024-05-01 08:00", "2024-05-02 07:00"],
        [1.0, 1.0, 1.0, 1.0],
    )

    gaps = find_gaps(df, 900)

    assert len(gaps) == 1
    assert gaps.loc[0, "gap_start"] == pd.Timestamp("2024-05-01 07:15")
    assert gaps.loc[0, "gap_end"] == pd.Timestamp("2024-05-01 08:00")
    assert gaps.loc[0, "missing_slots"] == 2


def test_find_gaps_contiguous() -> None:
    df = _frame(pd.date_range("2024-05-01 07:00", periods=4, freq="15min"), [1.0] * 4)

    assert find_gaps(df, 900).empty


def test_find_gaps_keeps_timezone_aware_timestamps() -> None:
    df = _frame(
        ["2024-05-01T07:00:00+02:00", "2024-05-01T07:15:00+02:00", "2024-05-01T08:00:00+02:00"],
        [1.0, 1.0, 1.0],
    )

    gaps = find_gaps(df, 900)

    assert len(gaps) == 1
    assert gaps.loc[0, "gap_start"] == pd.Timestamp("2024-05-01T07:15:00+02:00")
    assert gaps.loc[0, "missing_slots"] == 2

    contiguous = find_gaps(df.iloc[:2], 900)
    assert contiguous.empty
    assert list(contiguous.columns) == ["gap_start", "gap_end", "missing_slots"]


def test_daily_integral_uses_explicit_conversion() -> None:
    df = _frame(["2024-05-01 07:00", "2024-05-01 07:15"], [100.0, 300.0])

    out = add_daily_integrals(df, PPFD, {"ppfd": "dli"}, 900, conversion=0.5)

    assert out["dli_1"].tolist() == [50.0, 200.0]
