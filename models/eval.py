# models/eval.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List

import joblib
import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from .config import RESULTS_DIR, RANDOM_SEED, TEST_FRACTION, CV_FOLDS, BAYES_N_ITER
from .datasets import build_design_matrix, split_train_test
from .train_elastic_net import fit_elastic_net_bayes, fit_elastic_net_grid
from .train_ols import FitResult, fit_ols, ols_coefficients

logger = logging.getLogger(__name__)


def compute_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
    """Compute standard regression metrics on quantum yield."""
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    mse = mean_squared_error(y_true, y_pred)
    return {
        "RMSE": float(np.sqrt(mse)),
        "MAE": float(mean_absolute_error(y_true, y_pred)),
        "R2": float(r2_score(y_true, y_pred)),
    }


def save_fit(result: FitResult, metrics: Dict[str, float], results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)

    model_path = results_dir / f"{result.name}.joblib"
    joblib.dump(result.estimator, model_path)

    summary = {
        "model": result.name,
        "test_metrics": metrics,
        "cv_r2": [float(s) for s in result.cv_scores],
        "best_params": result.best_params,
    }
    with (results_dir / f"{result.name}_metrics.json").open("w") as f:
        json.dump(summary, f, indent=2)

    logger.info("Saved model artifacts", extra={"model": result.name, "path": str(model_path)})


def run_models(
    long_df: pd.DataFrame,
    results_dir: Path | str | None = RESULTS_DIR,
    use_bayes: bool = False,
    test_fraction: float = TEST_FRACTION,
    cv_folds: int = CV_FOLDS,
    seed: int = RANDOM_SEED,
    bayes_n_iter: int = BAYES_N_ITER,
) -> pd.DataFrame:
    """
    Fit OLS and elastic net on the long table and score them on a held-out split.

    Parameters
    ----------
    long_df : pd.DataFrame
        One row per (timestamp, replicate), as produced by the preprocessing
        pipeline.

    results_dir : Path or str, optional
        Where fitted estimators (joblib), metrics (JSON) and the OLS
        coefficients (CSV) go; nothing is written when None.

    use_bayes : bool
        Also tune elastic net with Bayesian search.

    Returns
    -------
    pd.DataFrame
        One row per model: test RMSE/MAE/R2 and mean CV R2.
    """
    X, y = build_design_matrix(long_df)
    X_train, X_test, y_train, y_test = split_train_test(X, y, test_fraction=test_fraction, seed=seed)
    logger.info("Split rows: train=%d test=%d", len(X_train), len(X_test))

    fits: List[FitResult] = [
        fit_ols(X_train, y_train, cv_folds=cv_folds, seed=seed),
        fit_elastic_net_grid(X_train, y_train, cv_folds=cv_folds, seed=seed),
    ]
    if use_bayes:
        fits.append(fit_elastic_net_bayes(X_train, y_train, n_iter=bayes_n_iter, cv_folds=cv_folds, seed=seed))

    rows = []
    for result in fits:
        metrics = compute_metrics(y_test, result.estimator.predict(X_test))
        logger.info("Test RMSE=%.4f R2=%.3f", metrics["RMSE"], metrics["R2"], extra={"model": result.name})

        if results_dir is not None:
            save_fit(result, metrics, Path(results_dir))
            if result.name == "ols":
                coefs = ols_coefficients(result, X_train.columns)
                coefs.to_csv(Path(results_dir) / "ols_coefficients.csv", header=True)

        rows.append({"model": result.name, **metrics, "CV_R2": result.cv_mean})

    return pd.DataFrame(rows)
