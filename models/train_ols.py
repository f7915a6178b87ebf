# models/train_ols.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.model_selection import KFold, cross_val_score

from .config import CV_FOLDS, RANDOM_SEED

logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    name: str
    estimator: object
    cv_scores: np.ndarray
    best_params: Dict[str, float] = field(default_factory=dict)

    @property
    def cv_mean(self) -> float:
        return float(np.mean(self.cv_scores)) if len(self.cv_scores) else float("nan")


def make_kfold(cv_folds: int = CV_FOLDS, seed: int = RANDOM_SEED) -> KFold:
    return KFold(n_splits=cv_folds, shuffle=True, random_state=seed)


def fit_ols(
    X: pd.DataFrame,
    y: pd.Series,
    cv_folds: int = CV_FOLDS,
    seed: int = RANDOM_SEED,
) -> FitResult:
    """
    Ordinary least squares on all predictors, with k-fold R^2 scores.
    """
    cv = make_kfold(cv_folds, seed)
    scores = cross_val_score(LinearRegression(), X, y, cv=cv, scoring="r2")

    model = LinearRegression().fit(X, y)
    logger.info("OLS CV R2=%.3f +/- %.3f", scores.mean(), scores.std(), extra={"model": "ols"})

    return FitResult(name="ols", estimator=model, cv_scores=scores)


def ols_coefficients(result: FitResult, columns) -> pd.Series:
    model = result.estimator
    coefs = pd.Series(model.coef_, index=list(columns))
    return pd.concat([pd.Series({"intercept": model.intercept_}), coefs]).rename("coefficient")
