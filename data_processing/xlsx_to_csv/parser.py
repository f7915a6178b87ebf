"""
Greenhouse Logger Workbook Parser
---------------------------------
Reads one spreadsheet export from either greenhouse logger and returns a
DataFrame with normalized column names and a single ``timestamp`` column.

This parser handles:
- inconsistent header spelling and spacing between exports
- timestamps stored as text, as datetime cells, or as Excel serial days
- exports that split the timestamp into separate date and time columns
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from ..preprocessing.config import TIMESTAMP_COL
from ..preprocessing.schema import SchemaError
from .utils_datetime import combine_date_time, parse_timestamps
from .utils_fieldmap import DEFAULT_ALIASES, TIMESTAMP_ALIASES, get_any, normalize_header

logger = logging.getLogger(__name__)


def parse_workbook(
    path: Union[str, Path],
    sheet_name: Union[str, int] = 0,
    aliases: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """
    Parse a single logger workbook.

    Parameters
    ----------
    path : str or Path
        Path to an .xlsx export.

    sheet_name : str or int
        Sheet holding the readings (first sheet by default).

    aliases : dict, optional
        Extra mapping of normalized header -> pipeline column name, applied
        on top of DEFAULT_ALIASES.

    Returns
    -------
    pd.DataFrame
        Readings with a parsed ``timestamp`` column first, sorted by time.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")

    raw = pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    raw = raw.dropna(how="all")

    mapping = dict(DEFAULT_ALIASES)
    if aliases:
        mapping.update(aliases)

    renamed = {}
    for col in raw.columns:
        norm = normalize_header(col)
        renamed[col] = mapping.get(norm, norm)
    df = raw.rename(columns=renamed)

    duplicated = df.columns[df.columns.duplicated()].tolist()
    if duplicated:
        raise SchemaError(f"{path.name}: headers collide after normalization: {duplicated}")

    ts_col = get_any(df.columns, TIMESTAMP_ALIASES)
    if ts_col is not None:
        timestamps = parse_timestamps(df[ts_col])
        df = df.drop(columns=[ts_col])
    elif "date" in df.columns and "time" in df.columns:
        timestamps = combine_date_time(df["date"], df["time"])
        df = df.drop(columns=["date", "time"])
    else:
        raise SchemaError(
            f"{path.name}: no timestamp column found (looked for {TIMESTAMP_ALIASES} "
            f"or separate 'date' and 'time' columns)."
        )

    df.insert(0, TIMESTAMP_COL, timestamps.to_numpy())
    df = df.sort_values(TIMESTAMP_COL, kind="mergesort").reset_index(drop=True)

    logger.debug("Parsed workbook %s", path.name, extra={"path": str(path), "row_count": len(df)})
    return df
