"""
Loading utilities for the CSV intermediates of both greenhouse loggers.

Each source is checked against the columns the pipeline needs before any
processing starts; a missing column or an unparseable timestamp aborts the
run with a SchemaError.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from ..xlsx_to_csv.utils_datetime import parse_timestamps
from .config import TIMESTAMP_COL
from .schema import SchemaError

logger = logging.getLogger(__name__)


def validate_sensor_frame(
    df: pd.DataFrame,
    required_channels: Iterable[str],
    timestamp_col: str = TIMESTAMP_COL,
    timestamp_format: Optional[str] = None,
    source: str = "source",
) -> pd.DataFrame:
    """
    Check and type a raw sensor table.

    Parameters
    ----------
    df : pd.DataFrame
        Raw table with a timestamp column and numeric channels.

    required_channels : iterable of str
        Channels that must be present.

    timestamp_col : str
        Name of the timestamp column; renamed to ``timestamp`` on output.

    timestamp_format : str, optional
        Explicit strftime format; inferred when omitted.

    source : str
        Label used in log records and error messages.

    Returns
    -------
    pd.DataFrame
        ``timestamp`` plus the required channels, channels coerced to float.
    """
    required = list(required_channels)
    missing = [c for c in [timestamp_col] + required if c not in df.columns]
    if missing:
        raise SchemaError(f"{source}: missing required columns {missing}")

    out = pd.DataFrame({TIMESTAMP_COL: parse_timestamps(df[timestamp_col], fmt=timestamp_format)})

    for col in required:
        values = pd.to_numeric(df[col], errors="coerce")
        coerced = int(values.isna().sum() - df[col].isna().sum())
        if coerced:
            logger.warning(
                "Non-numeric cells in channel '%s' treated as missing", col,
                extra={"source": source, "dropped_rows": coerced},
            )
        out[col] = values.astype(float).to_numpy()

    return out


def read_sensor_csv(path: Union[str, Path], source: Optional[str] = None) -> pd.DataFrame:
    """
    Read one logger CSV as-is.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sensor file not found: {path}")

    df = pd.read_csv(path)
    logger.info("Loaded sensor file", extra={"source": source or path.stem, "path": str(path), "row_count": len(df)})
    return df


def load_sensor_csv(
    path: Union[str, Path],
    required_channels: Iterable[str],
    timestamp_col: str = TIMESTAMP_COL,
    timestamp_format: Optional[str] = None,
    source: Optional[str] = None,
) -> pd.DataFrame:
    """
    Read one logger CSV and validate it with validate_sensor_frame.
    """
    label = source or Path(path).stem
    df = read_sensor_csv(path, source=label)

    return validate_sensor_frame(
        df,
        required_channels,
        timestamp_col=timestamp_col,
        timestamp_format=timestamp_format,
        source=label,
    )
