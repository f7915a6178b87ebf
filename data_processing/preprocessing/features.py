"""
Feature engineering for the aligned greenhouse table.

Key decisions:
- Daily light integrals are running sums of flux within one calendar date,
  so the first record of each day already carries its own contribution.
- Gaps in the 15-minute grid are reported but never filled; the integral
  simply skips the missing slot.
"""

from typing import Iterable, Mapping, Optional

import pandas as pd

from .config import DATE_COL, GRID_INTERVAL_SECONDS, MICROMOLES_PER_MOLE, TIMESTAMP_COL
from .schema import ReplicateSchema, SchemaError, replicate_column


def add_calendar_features(df: pd.DataFrame, timestamp_col: str = TIMESTAMP_COL) -> pd.DataFrame:
    """
    Add ``date``, ``hour`` and ``day_of_week`` derived from the timestamp.
    """
    df = df.copy()
    ts = df[timestamp_col]
    df[DATE_COL] = ts.dt.date
    df["hour"] = ts.dt.hour
    df["day_of_week"] = ts.dt.dayofweek
    return df


def add_daily_integrals(
    df: pd.DataFrame,
    schema: ReplicateSchema,
    integral_families: Mapping[str, str],
    interval_seconds: int = GRID_INTERVAL_SECONDS,
    timestamp_col: str = TIMESTAMP_COL,
    conversion: Optional[float] = None,
) -> pd.DataFrame:
    """
    Add cumulative daily integrals for each flux family.

    For flux column ``ppfd_i`` and mapping ``{"ppfd": "dli"}`` this adds
    ``dli_i = cumsum_within_date(ppfd_i) * interval_seconds / 1e6``.

    Parameters
    ----------
    df : pd.DataFrame
        Aligned table with one row per grid slot.

    schema : ReplicateSchema
        Replicate layout of the flux families.

    integral_families : mapping
        Flux family -> integral family name.

    interval_seconds : int
        Grid step each flux sample stands for.

    conversion : float, optional
        Factor applied to the running flux sum; defaults to
        ``interval_seconds / 1e6`` (µmol m-2 s-1 samples -> mol m-2).

    Returns
    -------
    pd.DataFrame
        Copy of the input sorted by timestamp, with integral columns added.
    """
    if timestamp_col not in df.columns:
        raise SchemaError(f"Required column '{timestamp_col}' not found in DataFrame.")

    df = df.sort_values(timestamp_col, kind="mergesort").reset_index(drop=True)
    if df[timestamp_col].duplicated().any():
        raise SchemaError("Timestamps must be unique before integrating flux.")

    flux_cols = []
    integral_cols = []
    for flux, integral in integral_families.items():
        for replicate in schema.replicates:
            flux_cols.append(schema.column(flux, replicate))
            integral_cols.append(replicate_column(integral, replicate))

    missing = [c for c in flux_cols if c not in df.columns]
    if missing:
        raise SchemaError(f"Flux columns missing from DataFrame: {missing}")

    if conversion is None:
        conversion = interval_seconds / MICROMOLES_PER_MOLE
    day = df[timestamp_col].dt.normalize()
    running = df[flux_cols].groupby(day, sort=False).cumsum()

    for flux_col, integral_col in zip(flux_cols, integral_cols):
        df[integral_col] = running[flux_col] * conversion

    return df


def add_replicate_aggregates(
    df: pd.DataFrame,
    schema: ReplicateSchema,
    families: Iterable[str],
    suffix: str = "mean",
) -> pd.DataFrame:
    """
    Add the across-replicate mean of each family as ``{family}_{suffix}``.
    """
    df = df.copy()
    for family in families:
        cols = list(schema.family(family))
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise SchemaError(f"Columns for family '{family}' missing from DataFrame: {missing}")
        df[f"{family}_{suffix}"] = df[cols].mean(axis=1)
    return df


def find_gaps(
    df: pd.DataFrame,
    interval_seconds: int = GRID_INTERVAL_SECONDS,
    timestamp_col: str = TIMESTAMP_COL,
) -> pd.DataFrame:
    """
    List same-day jumps longer than one grid step.

    Returns
    -------
    pd.DataFrame
        Columns ``gap_start``, ``gap_end`` and ``missing_slots``; empty when
        every day is contiguous.
    """
    ts = df[timestamp_col].sort_values(kind="mergesort").reset_index(drop=True)
    prev = ts.shift(1)
    step = pd.Timedelta(seconds=interval_seconds)

    same_day = ts.dt.normalize() == prev.dt.normalize()
    is_gap = same_day & ((ts - prev) > step)

    # Series keep their datetime dtype (tz-aware included) even when empty
    gaps = pd.DataFrame({
        "gap_start": prev[is_gap].reset_index(drop=True),
        "gap_end": ts[is_gap].reset_index(drop=True),
    })
    gaps["missing_slots"] = ((gaps["gap_end"] - gaps["gap_start"]) // step - 1).astype(int)
    return gaps
