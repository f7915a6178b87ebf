"""
Wide -> long reshape of the merged greenhouse table.

The wide table holds one row per timestamp with replicate columns side by
side (``qy_1``..``qy_4``). The long table holds one row per
(timestamp, replicate): shared columns are broadcast to every replicate
row and each replicate family collapses into a single column.
"""

from typing import Sequence

import pandas as pd

from .config import REPLICATE_COL, TIMESTAMP_COL
from .schema import ReplicateSchema, SchemaError


def reshape_to_long(
    df: pd.DataFrame,
    schema: ReplicateSchema,
    shared_columns: Sequence[str],
    replicate_col: str = REPLICATE_COL,
    timestamp_col: str = TIMESTAMP_COL,
) -> pd.DataFrame:
    """
    Emit one row per (timestamp, replicate).

    Parameters
    ----------
    df : pd.DataFrame
        Wide table, one row per timestamp.

    schema : ReplicateSchema
        Replicate families to collapse; each becomes one long column named
        after the metric.

    shared_columns : sequence of str
        Columns copied unchanged onto every replicate row. Must include the
        timestamp column.

    Returns
    -------
    pd.DataFrame
        ``len(df) * len(schema.replicates)`` rows ordered by
        (timestamp, replicate), columns: shared columns, replicate column,
        then one column per metric family.
    """
    shared = list(shared_columns)
    if timestamp_col not in shared:
        raise SchemaError(f"Shared columns must include '{timestamp_col}'.")

    missing = [c for c in shared + schema.columns if c not in df.columns]
    if missing:
        raise SchemaError(f"Columns missing from wide table: {missing}")

    clashes = set(shared) & (set(schema.metrics) | {replicate_col})
    if clashes:
        raise SchemaError(f"Shared columns clash with long-table columns: {sorted(clashes)}")

    frames = []
    for replicate in schema.replicates:
        part = df[shared].copy()
        part[replicate_col] = replicate
        for metric in schema.metrics:
            part[metric] = df[schema.column(metric, replicate)].to_numpy()
        frames.append(part)

    long_df = pd.concat(frames, ignore_index=True)
    long_df = long_df.sort_values([timestamp_col, replicate_col], kind="mergesort")
    return long_df.reset_index(drop=True)
