"""
Time alignment of the two greenhouse loggers.

Steps:
- Round every timestamp onto the logging grid (nearest boundary, ties up)
- Discard night-time rows outside each source's daytime window
- Resolve duplicate rounded timestamps with an explicit keep-first/keep-last rule
- Compare the two timestamp sets and report any mismatch
- Join on timestamp and drop rows with a missing channel
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple

import pandas as pd

from .cleaning import drop_incomplete_rows
from .config import TIMESTAMP_COL, DaytimeWindow, PipelineConfig
from .schema import SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimestampComparison:
    """Outcome of comparing the rounded, filtered timestamp sets of both sources."""
    identical: bool
    only_in_a: Tuple[pd.Timestamp, ...] = ()
    only_in_b: Tuple[pd.Timestamp, ...] = ()

    @property
    def symmetric_difference(self) -> FrozenSet[pd.Timestamp]:
        return frozenset(self.only_in_a) | frozenset(self.only_in_b)


@dataclass
class AlignmentResult:
    frame: pd.DataFrame
    comparison: TimestampComparison
    duplicates_a: int = 0
    duplicates_b: int = 0
    dropped_rows: int = 0
    joined_rows: int = 0

    @property
    def drop_rate(self) -> float:
        if self.joined_rows == 0:
            return 0.0
        return self.dropped_rows / self.joined_rows


def round_to_grid(timestamps: pd.Series, interval_seconds: int) -> pd.Series:
    """
    Round timestamps to the nearest grid boundary, breaking ties upwards.

    ``Series.dt.round`` rounds half to even, which would send 07:07:30 and
    07:22:30 in different directions; shifting by half a step and flooring
    always rounds ties up. Already on-grid values are returned unchanged.
    """
    half_step = pd.Timedelta(seconds=interval_seconds) / 2
    return (timestamps + half_step).dt.floor(f"{interval_seconds}s")


def filter_daytime(df: pd.DataFrame, window: DaytimeWindow, timestamp_col: str = TIMESTAMP_COL) -> pd.DataFrame:
    """
    Keep rows whose time-of-day lies inside the inclusive window.
    """
    tod = df[timestamp_col].dt.time
    mask = (tod >= window.start) & (tod <= window.end)
    return df.loc[mask].reset_index(drop=True)


def deduplicate(
    df: pd.DataFrame,
    policy: str = "first",
    timestamp_col: str = TIMESTAMP_COL,
) -> Tuple[pd.DataFrame, int]:
    """
    Collapse rows sharing a rounded timestamp to one row per grid slot.

    ``policy`` picks which occurrence (in input order) survives. Returns the
    deduplicated frame sorted by timestamp and the number of rows removed.
    """
    if policy not in ("first", "last"):
        raise SchemaError(f"Unknown duplicate policy '{policy}'.")

    ordered = df.sort_values(timestamp_col, kind="mergesort")
    deduped = ordered.drop_duplicates(subset=[timestamp_col], keep=policy)
    return deduped.reset_index(drop=True), len(df) - len(deduped)


def compare_timestamps(a: pd.DataFrame, b: pd.DataFrame, timestamp_col: str = TIMESTAMP_COL) -> TimestampComparison:
    set_a = set(a[timestamp_col])
    set_b = set(b[timestamp_col])
    only_a = tuple(sorted(set_a - set_b))
    only_b = tuple(sorted(set_b - set_a))
    return TimestampComparison(identical=not only_a and not only_b, only_in_a=only_a, only_in_b=only_b)


def join_sources(
    a: pd.DataFrame,
    b: pd.DataFrame,
    required: Iterable[str] | None = None,
    timestamp_col: str = TIMESTAMP_COL,
) -> Tuple[pd.DataFrame, int, int]:
    """
    Left-join source B's channels onto source A by timestamp and drop any
    row missing a required channel.

    Returns the joined frame, the number of rows dropped and the number of
    rows before dropping.
    """
    overlap = (set(a.columns) & set(b.columns)) - {timestamp_col}
    if overlap:
        raise SchemaError(f"Both sources define channels {sorted(overlap)}; channel names must be unique.")

    merged = a.merge(b, on=timestamp_col, how="left", validate="one_to_one")

    if required is None:
        required = [c for c in merged.columns if c != timestamp_col]
    cleaned, dropped = drop_incomplete_rows(merged, required)

    cleaned = cleaned.sort_values(timestamp_col, kind="mergesort").reset_index(drop=True)
    return cleaned, dropped, len(merged)


def prepare_source(
    df: pd.DataFrame,
    window: DaytimeWindow,
    config: PipelineConfig,
    source: str,
) -> Tuple[pd.DataFrame, int]:
    """
    Round, filter and deduplicate one source. Returns the frame and the
    number of duplicate rows removed.
    """
    ts = TIMESTAMP_COL
    out = df.copy()
    out[ts] = round_to_grid(out[ts], config.grid_interval_seconds)
    out = filter_daytime(out, window, timestamp_col=ts)
    out, duplicates = deduplicate(out, config.duplicate_policy, timestamp_col=ts)

    if duplicates:
        logger.warning(
            "Duplicate timestamps after rounding resolved with keep-%s", config.duplicate_policy,
            extra={"source": source, "duplicates": duplicates},
        )
    return out, duplicates


def align_sources(a: pd.DataFrame, b: pd.DataFrame, config: PipelineConfig | None = None) -> AlignmentResult:
    """
    Align the light/yield logger (A) with the climate logger (B).

    Parameters
    ----------
    a, b : pd.DataFrame
        Validated sensor tables with a parsed timestamp column.

    config : PipelineConfig, optional
        Grid, windows and duplicate policy; defaults when omitted.

    Returns
    -------
    AlignmentResult
        Joined frame ordered by timestamp with no missing values, plus
        diagnostics (timestamp comparison, duplicate and drop counts).
    """
    config = config or PipelineConfig()
    ts = TIMESTAMP_COL

    prepared_a, dup_a = prepare_source(a, config.window_a, config, source="a")
    prepared_b, dup_b = prepare_source(b, config.window_b, config, source="b")

    comparison = compare_timestamps(prepared_a, prepared_b, timestamp_col=ts)
    if not comparison.identical:
        logger.warning(
            "Timestamp sets differ between sources; continuing with the intersection",
            extra={"only_in_a": len(comparison.only_in_a), "only_in_b": len(comparison.only_in_b)},
        )

    frame, dropped, joined = join_sources(prepared_a, prepared_b, timestamp_col=ts)

    result = AlignmentResult(
        frame=frame,
        comparison=comparison,
        duplicates_a=dup_a,
        duplicates_b=dup_b,
        dropped_rows=dropped,
        joined_rows=joined,
    )

    log = logger.warning if dropped else logger.info
    log(
        "Joined sources",
        extra={"row_count": len(frame), "dropped_rows": dropped, "drop_rate": f"{result.drop_rate:.3f}"},
    )
    return result
