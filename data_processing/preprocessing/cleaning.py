"""
Cleaning for the joined greenhouse table.
"""

from typing import Iterable, Tuple

import numpy as np
import pandas as pd


def drop_incomplete_rows(df: pd.DataFrame, required: Iterable[str]) -> Tuple[pd.DataFrame, int]:
    """
    Drop rows with a missing value in any required channel.

    Infinite values count as missing. The loggers occasionally skip a
    sample, so a joined row may carry NaNs from one side only.

    Parameters
    ----------
    df : pd.DataFrame
        Joined table.

    required : iterable of str
        Channels that must be present on every row.

    Returns
    -------
    (pd.DataFrame, int)
        Cleaned table and the number of rows dropped.
    """
    required = list(required)
    values = df[required].replace([np.inf, -np.inf], np.nan)
    keep = values.notna().all(axis=1)
    return df.loc[keep].reset_index(drop=True), int((~keep).sum())
