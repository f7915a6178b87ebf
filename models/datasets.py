# models/datasets.py

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import (
    LONG_DATA_PATH,
    PREDICTORS,
    CATEGORICAL,
    TARGET_COL,
    TEST_FRACTION,
    RANDOM_SEED,
)


def load_long_dataset(csv_path: Path | str = LONG_DATA_PATH) -> pd.DataFrame:
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Long dataset not found: {csv_path}")
    return pd.read_csv(csv_path, parse_dates=["timestamp"])


def build_design_matrix(
    df: pd.DataFrame,
    predictors: Sequence[str] | None = None,
    categorical: Sequence[str] | None = None,
    target: str = TARGET_COL,
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Turn the long table into (X, y) for scikit-learn.

    Numeric predictors are passed through; categorical indicators are
    one-hot encoded with the first level dropped. Rows with a missing
    target or predictor are removed.
    """
    predictors = list(PREDICTORS if predictors is None else predictors)
    categorical = list(CATEGORICAL if categorical is None else categorical)

    required = {target} | set(predictors) | set(categorical)
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns in long dataset: {sorted(missing)}")

    if not pd.api.types.is_numeric_dtype(df[target]):
        raise ValueError(f"Target column '{target}' must be numeric.")

    sub = df[[target] + predictors + categorical].dropna()

    X = sub[predictors].astype(float)
    if categorical:
        dummies = pd.get_dummies(
            sub[categorical].astype(str),
            columns=categorical,
            drop_first=True,
            dtype=float,
        )
        X = pd.concat([X, dummies], axis=1)

    y = sub[target].astype(float)
    return X.reset_index(drop=True), y.reset_index(drop=True)


def split_train_test(
    X: pd.DataFrame,
    y: pd.Series,
    test_fraction: float = TEST_FRACTION,
    seed: int = RANDOM_SEED,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """
    Random row split. The permutation comes from a generator owned by this
    call, so the global numpy state is never touched.
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction}")
    if len(X) != len(y):
        raise ValueError(f"X and y differ in length: {len(X)} vs {len(y)}")

    rng = np.random.default_rng(seed)
    order = rng.permutation(len(X))

    n_test = int(round(len(X) * test_fraction))
    test_idx: List[int] = sorted(order[:n_test].tolist())
    train_idx: List[int] = sorted(order[n_test:].tolist())

    return (
        X.iloc[train_idx].reset_index(drop=True),
        X.iloc[test_idx].reset_index(drop=True),
        y.iloc[train_idx].reset_index(drop=True),
        y.iloc[test_idx].reset_index(drop=True),
    )
