from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

import main
from data_processing.preprocessing import PipelineConfig, SchemaError, build_merged_dataset, run_pipeline


@pytest.fixture()
def two_days(light_factory, climate_factory, slots):
    times = slots("2024-05-01", "06:30", "21:15") + slots("2024-05-02", "06:30", "21:15")
    return light_factory(times), climate_factory(times)


def test_run_pipeline_end_to_end(two_days) -> None:
    a, b = two_days

    result = run_pipeline(a, b)

    # 07:00 .. 20:45 inclusive = 56 slots per day
    assert len(result.wide) == 2 * 56
    assert len(result.long) == len(result.wide) * 4
    assert result.alignment.comparison.identical
    assert result.gaps.empty

    for col in ["dli_1", "edli_4", "ppfd_mean", "dli_mean", "date", "hour", "day_of_week"]:
        assert col in result.wide.columns
    for col in ["timestamp", "replicate", "qy", "ppfd", "eppfd", "dli", "edli", "temp", "vpd", "co2"]:
        assert col in result.long.columns
    assert not result.long[["qy", "ppfd", "dli", "temp"]].isna().any().any()

    first_of_day2 = result.wide[result.wide["timestamp"] == pd.Timestamp("2024-05-02 07:00")].iloc[0]
    assert first_of_day2["dli_1"] == pytest.approx(first_of_day2["ppfd_1"] * 900 / 1e6)


def test_run_pipeline_rejects_missing_channel(two_days) -> None:
    a, b = two_days

    with pytest.raises(SchemaError):
        run_pipeline(a.drop(columns=["eppfd_2"]), b)


def test_build_merged_dataset_writes_outputs(tmp_path: Path, two_days) -> None:
    a, b = two_days
    a.to_csv(tmp_path / "light.csv", index=False)
    b.to_csv(tmp_path / "climate.csv", index=False)

    result = build_merged_dataset(
        tmp_path / "light.csv",
        tmp_path / "climate.csv",
        output_path=tmp_path / "out" / "merged.csv",
        long_output_path=tmp_path / "out" / "merged_long.csv",
        config=PipelineConfig(),
    )

    merged = pd.read_csv(tmp_path / "out" / "merged.csv")
    long_df = pd.read_csv(tmp_path / "out" / "merged_long.csv")
    assert len(merged) == len(result.wide)
    assert len(long_df) == len(merged) * 4
    assert sorted(long_df["replicate"].unique()) == [1, 2, 3, 4]


def test_cli_runs_and_reports(tmp_path: Path, two_days, capsys) -> None:
    a, b = two_days
    a.to_csv(tmp_path / "light.csv", index=False)
    b.to_csv(tmp_path / "climate.csv", index=False)

    code = main.main([
        str(tmp_path / "light.csv"),
        str(tmp_path / "climate.csv"),
        "--output", str(tmp_path / "merged.csv"),
        "--window-b", "07:00-20:30",
    ])

    assert code == 0
    assert (tmp_path / "merged.csv").exists()
    out = capsys.readouterr().out
    assert "Timestamp sets identical: False" in out


def test_cli_fails_cleanly_on_missing_input(tmp_path: Path) -> None:
    code = main.main([str(tmp_path / "missing.csv"), str(tmp_path / "missing2.csv"),
                      "--output", str(tmp_path / "merged.csv")])

    assert code == 1
    assert not (tmp_path / "merged.csv").exists()


def test_run_pipeline_keeps_timezone_aware_timestamps(light_factory, climate_factory, slots) -> None:
    times = [f"{t}+02:00" for t in slots("2024-05-01", "06:30", "08:00")]

    result = run_pipeline(light_factory(times), climate_factory(times))

    assert len(result.wide) == 5
    assert len(result.long) == 20
    assert result.gaps.empty
    assert result.wide["timestamp"].dt.tz is not None
    assert result.wide["timestamp"].iloc[0] == pd.Timestamp("2024-05-01 07:00+02:00")


def test_run_pipeline_across_daylight_saving_change(light_factory, climate_factory) -> None:
    days = [
        pd.date_range(f"{day} 06:30", f"{day} 08:00", freq="15min", tz="Europe/Berlin")
        for day in ("2024-03-30", "2024-03-31")
    ]
    times = [t for t in days[0].append(days[1]) if t != pd.Timestamp("2024-03-31 07:30", tz="Europe/Berlin")]

    result = run_pipeline(light_factory(times), climate_factory(times))

    assert len(result.wide) == 9
    assert len(result.gaps) == 1
    assert result.gaps.loc[0, "missing_slots"] == 1

    first_of_day2 = result.wide[result.wide["timestamp"] == pd.Timestamp("2024-03-31 07:00", tz="Europe/Berlin")]
    assert first_of_day2["dli_1"].iloc[0] == pytest.approx(first_of_day2["ppfd_1"].iloc[0] * 900 / 1e6)


def test_build_merged_dataset_reads_timezone_aware_csv(tmp_path: Path, light_factory, climate_factory, slots) -> None:
    times = [f"{t}+02:00" for t in slots("2024-05-01", "07:00", "08:00")]
    light_factory(times).to_csv(tmp_path / "light.csv", index=False)
    climate_factory(times).to_csv(tmp_path / "climate.csv", index=False)

    result = build_merged_dataset(tmp_path / "light.csv", tmp_path / "climate.csv",
                                  output_path=tmp_path / "merged.csv")

    assert len(result.wide) == 5
    assert len(pd.read_csv(tmp_path / "merged.csv")) == 5


def test_run_pipeline_with_no_common_timestamps_is_empty(light_factory, climate_factory, slots) -> None:
    a = light_factory(slots("2024-05-01"))
    b = climate_factory(slots("2024-05-02"))

    result = run_pipeline(a, b)

    assert result.wide.empty
    assert result.long.empty
    assert result.gaps.empty
    assert not result.alignment.comparison.identical
    assert result.alignment.dropped_rows == len(a)
    for col in ["timestamp", "replicate", "qy", "dli", "temp"]:
        assert col in result.long.columns


def test_build_merged_dataset_writes_empty_outputs(tmp_path: Path, light_factory, climate_factory, slots) -> None:
    light_factory(slots("2024-05-01")).to_csv(tmp_path / "light.csv", index=False)
    climate_factory(slots("2024-05-02")).to_csv(tmp_path / "climate.csv", index=False)

    result = build_merged_dataset(
        tmp_path / "light.csv",
        tmp_path / "climate.csv",
        output_path=tmp_path / "out" / "merged.csv",
        long_output_path=tmp_path / "out" / "merged_long.csv",
    )

    assert result.wide.empty
    merged = pd.read_csv(tmp_path / "out" / "merged.csv")
    long_df = pd.read_csv(tmp_path / "out" / "merged_long.csv")
    assert merged.empty and "dli_1" in merged.columns
    assert long_df.empty and "replicate" in long_df.columns


def test_run_pipeline_integrates_with_configured_dose_conversion(light_factory, climate_factory) -> None:
    times = [str(t) for t in pd.date_range("2024-05-01 07:00", "2024-05-01 09:00", freq="30min")]
    config = PipelineConfig(grid_interval_seconds=1800)

    result = run_pipeline(light_factory(times), climate_factory(times), config)

    assert config.dose_conversion == pytest.approx(1800 / 1e6)
    first = result.wide.iloc[0]
    assert first["dli_1"] == pytest.approx(first["ppfd_1"] * config.dose_conversion)
    assert result.gaps.empty


def test_cli_converts_workbooks_sharing_a_file_name(tmp_path: Path, two_days) -> None:
    a, b = two_days
    (tmp_path / "light").mkdir()
    (tmp_path / "climate").mkdir()
    a.to_excel(tmp_path / "light" / "export.xlsx", index=False, engine="openpyxl")
    b.to_excel(tmp_path / "climate" / "export.xlsx", index=False, engine="openpyxl")

    code = main.main([
        str(tmp_path / "light" / "export.xlsx"),
        str(tmp_path / "climate" / "export.xlsx"),
        "--output", str(tmp_path / "out" / "merged.csv"),
    ])

    assert code == 0
    assert (tmp_path / "out" / "export_a.csv").exists()
    assert (tmp_path / "out" / "export_b.csv").exists()
    merged = pd.read_csv(tmp_path / "out" / "merged.csv")
    assert len(merged) == 2 * 56
    assert {"qy_1", "temp", "co2"} <= set(merged.columns)


def test_cli_fits_models_from_saved_long_table(tmp_path: Path, synthetic_long, capsys) -> None:
    synthetic_long.to_csv(tmp_path / "merged_long.csv", index=False)

    code = main.main([
        "--long-input", str(tmp_path / "merged_long.csv"),
        "--results-dir", str(tmp_path / "results"),
    ])

    assert code == 0
    assert (tmp_path / "results" / "ols.joblib").exists()
    assert (tmp_path / "results" / "ols_coefficients.csv").exists()
    assert "elastic_net_grid" in capsys.readouterr().out


def test_cli_long_input_missing_file(tmp_path: Path) -> None:
    assert main.main(["--long-input", str(tmp_path / "missing.csv")]) == 1


def test_cli_requires_sources_without_long_input() -> None:
    with pytest.raises(SystemExit):
        main.main([])
