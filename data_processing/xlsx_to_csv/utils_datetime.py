"""
Utility functions for turning spreadsheet date/time cells into timestamps.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from ..preprocessing.schema import SchemaError

# Excel's day zero (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = "1899-12-30"


def excel_serial_to_datetime(values: pd.Series) -> pd.Series:
    """
    Convert Excel serial day numbers (e.g. 45123.291666) into timestamps.
    """
    numeric = pd.to_numeric(values, errors="raise")
    return pd.to_datetime(numeric, unit="D", origin=EXCEL_EPOCH)


def parse_timestamps(values: pd.Series, fmt: Optional[str] = None) -> pd.Series:
    """
    Parse a column of timestamps.

    Numeric columns are treated as Excel serial days; everything else goes
    through ``pandas.to_datetime``. Any unparseable cell raises SchemaError,
    chained from the underlying parser error.
    """
    try:
        if pd.api.types.is_numeric_dtype(values):
            parsed = excel_serial_to_datetime(values)
        else:
            parsed = pd.to_datetime(values, format=fmt, errors="raise")
    except (ValueError, TypeError, OverflowError) as exc:
        raise SchemaError(f"Unparseable timestamp in column '{values.name}': {exc}") from exc

    if parsed.isna().any():
        bad = int(parsed.isna().sum())
        raise SchemaError(f"Column '{values.name}' has {bad} empty timestamp cell(s).")

    return parsed


def combine_date_time(dates: pd.Series, times: pd.Series) -> pd.Series:
    """
    Build timestamps from separate date and time-of-day columns, as some
    logger exports store them.
    """
    day = parse_timestamps(dates).dt.normalize()
    try:
        offset = pd.to_timedelta(times.astype(str), errors="raise")
    except (ValueError, TypeError) as exc:
        raise SchemaError(f"Unparseable time-of-day in column '{times.name}': {exc}") from exc
    return (day + offset).rename("timestamp")
