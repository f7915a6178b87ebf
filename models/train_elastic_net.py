# models/train_elastic_net.py

from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.linear_model import ElasticNet
from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from skopt import BayesSearchCV
from skopt.space import Real

from .config import (
    BAYES_N_ITER,
    CV_FOLDS,
    ELASTIC_NET_BAYES_SPACE,
    ELASTIC_NET_GRID,
    ELASTIC_NET_MAX_ITER,
    RANDOM_SEED,
)
from .train_ols import FitResult, make_kfold

logger = logging.getLogger(__name__)


def make_elastic_net_pipeline(seed: int = RANDOM_SEED) -> Pipeline:
    return Pipeline([
        ("scaler", StandardScaler()),
        ("model", ElasticNet(max_iter=ELASTIC_NET_MAX_ITER, random_state=seed)),
    ])


def _cv_scores(search) -> list:
    best = search.best_index_
    n_splits = search.n_splits_
    return [search.cv_results_[f"split{i}_test_score"][best] for i in range(n_splits)]


def fit_elastic_net_grid(
    X: pd.DataFrame,
    y: pd.Series,
    param_grid: Dict[str, Sequence[float]] | None = None,
    cv_folds: int = CV_FOLDS,
    seed: int = RANDOM_SEED,
) -> FitResult:
    """
    Elastic net on standardized predictors, alpha/l1_ratio picked by grid search.
    """
    search = GridSearchCV(
        make_elastic_net_pipeline(seed),
        param_grid=param_grid or ELASTIC_NET_GRID,
        cv=make_kfold(cv_folds, seed),
        scoring="r2",
        refit=True,
    )
    search.fit(X, y)

    logger.info("Grid search best params %s (CV R2=%.3f)", search.best_params_, search.best_score_,
                extra={"model": "elastic_net_grid"})

    return FitResult(
        name="elastic_net_grid",
        estimator=search.best_estimator_,
        cv_scores=np.asarray(_cv_scores(search)),
        best_params=dict(search.best_params_),
    )


def _bayes_space(space: Dict[str, Tuple[float, float, str]]):
    return {name: Real(low, high, prior=prior) for name, (low, high, prior) in space.items()}


def fit_elastic_net_bayes(
    X: pd.DataFrame,
    y: pd.Series,
    search_space: Dict[str, Tuple[float, float, str]] | None = None,
    n_iter: int = BAYES_N_ITER,
    cv_folds: int = CV_FOLDS,
    seed: int = RANDOM_SEED,
) -> FitResult:
    """
    Elastic net tuned with scikit-optimize's BayesSearchCV.
    """
    search = BayesSearchCV(
        make_elastic_net_pipeline(seed),
        search_spaces=_bayes_space(search_space or ELASTIC_NET_BAYES_SPACE),
        n_iter=n_iter,
        cv=make_kfold(cv_folds, seed),
        scoring="r2",
        random_state=seed,
        n_jobs=1,
        refit=True,
    )
    search.fit(X, y)

    logger.info("Bayesian search best params %s (CV R2=%.3f)", dict(search.best_params_), search.best_score_,
                extra={"model": "elastic_net_bayes"})

    return FitResult(
        name="elastic_net_bayes",
        estimator=search.best_estimator_,
        cv_scores=np.asarray(_cv_scores(search)),
        best_params={k: float(v) for k, v in search.best_params_.items()},
    )
