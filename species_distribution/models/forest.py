"""
Random forest regression of species richness.

Three stages, mirroring how the model is used in the pipeline:

  1. split_train_test(df, ...)
     Stratified hold-out split. The response is continuous, so rows are first
     binned into quantile groups and the split is stratified on the bins. Each
     group contributes ~train_fraction of its rows to the training set, which
     keeps the test set's richness distribution close to the full table's.

  2. train_random_forest(train_df, ...)
     Bagged regression trees (scikit-learn RandomForestRegressor) with
     out-of-bag scoring, so there's a generalisation estimate even before the
     test set is touched.

  3. evaluate_predictions(actual, predicted)
     RMSE and R² on the held-out rows. R² here is the squared Pearson
     correlation between predicted and actual, not 1 - SSE/SST.

Usage:

    from species_distribution.models.forest import (
        evaluate_predictions, split_train_test, train_random_forest,
    )

    train_df, test_df = split_train_test(df, "species_richness", seed=456)
    rf = train_random_forest(train_df, predictors, "species_richness", {"n_estimators": 500})
    metrics = evaluate_predictions(test_df["species_richness"], rf.predict(test_df[predictors]))
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor
from sklearn.inspection import permutation_importance
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)


def split_train_test(
    df: pd.DataFrame,
    target: str,
    train_fraction: float = 0.75,
    n_groups: int = 5,
    seed: int = 456,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows into train and test sets, stratified on quantile groups of target.

    Args:
        df: Full table.
        target: Column whose quantiles define the strata.
        train_fraction: Share of rows going to the training set, in (0, 1).
        n_groups: Number of quantile bins. Ties in the target are broken by
            row order, so the bins stay equal-sized even for integer counts.
            Small tables get fewer bins (never more than the smaller
            partition has rows); below two bins the split is unstratified.
        seed: random_state for the shuffle.

    Returns:
        (train_df, test_df), each sorted by the original row order. The two
        frames are disjoint and together hold every row of df.

    Raises:
        ValueError: If train_fraction is not strictly between 0 and 1, or if
            either partition would end up empty.
        KeyError: If target is not a column of df.
    """
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    if target not in df.columns:
        raise KeyError(f"Target column not found: {target}")

    # Same partition sizes train_test_split derives from a float train_size.
    n_train = math.floor(train_fraction * len(df))
    n_test = len(df) - n_train
    if n_train == 0 or n_test == 0:
        raise ValueError(
            f"Cannot split {len(df)} rows with train_fraction={train_fraction}: "
            f"{n_train} train / {n_test} test"
        )

    # Each partition needs at least one row per group, and each group two rows.
    n_bins = min(n_groups, n_train, n_test, len(df) // 2)
    strata: pd.Series | None = None
    if n_bins >= 2:
        strata = pd.qcut(df[target].rank(method="first"), q=n_bins, labels=False)
    else:
        logger.warning(
            "%d rows are too few to stratify on %d groups — falling back to a random split",
            len(df),
            n_groups,
        )

    train_df, test_df = train_test_split(
        df,
        train_size=train_fraction,
        stratify=strata,
        random_state=seed,
    )
    train_df = train_df.sort_index()
    test_df = test_df.sort_index()

    logger.info(
        "Split %d rows → %d train / %d test (seed=%d)",
        len(df),
        len(train_df),
        len(test_df),
        seed,
    )
    return train_df, test_df


def train_random_forest(
    train_df: pd.DataFrame,
    predictors: list[str],
    target: str,
    params: dict[str, Any] | None = None,
) -> RandomForestRegressor:
    """
    Fit a RandomForestRegressor on the training rows.

    params are passed straight to the estimator. oob_score is switched on
    unless the caller explicitly disables it (it needs bootstrap=True).
    """
    params = dict(params or {})
    if params.get("bootstrap", True):
        params.setdefault("oob_score", True)

    X = train_df[predictors]
    y = train_df[target]

    rf = RandomForestRegressor(**params)
    rf.fit(X, y)

    if getattr(rf, "oob_score", False):
        oob_mse = mean_squared_error(y, rf.oob_prediction_)
        logger.info(
            "Random forest: %d trees | OOB mean squared residuals=%.2f | %% var explained=%.1f",
            rf.n_estimators,
            oob_mse,
            100 * rf.oob_score_,
        )
    else:
        logger.info("Random forest: %d trees fitted on %d rows", rf.n_estimators, len(X))

    return rf


def evaluate_predictions(actual, predicted) -> dict[str, float]:
    """
    RMSE and R² (squared Pearson correlation) of predictions against actuals.

    Raises:
        ValueError: If the two inputs have different lengths or are empty.
    """
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"actual and predicted differ in shape: {actual.shape} vs {predicted.shape}"
        )
    if actual.size == 0:
        raise ValueError("Cannot evaluate an empty prediction set")

    rmse = float(np.sqrt(np.mean((actual - predicted) ** 2)))
    r_squared = float(np.corrcoef(actual, predicted)[0, 1] ** 2)

    logger.info("Test set: RMSE=%.2f R²=%.3f (n=%d)", rmse, r_squared, actual.size)
    return {"rmse": rmse, "r_squared": r_squared}


def variable_importance(
    model: RandomForestRegressor,
    X: pd.DataFrame,
    y: pd.Series,
    n_repeats: int = 10,
    seed: int = 456,
) -> pd.DataFrame:
    """
    Two importance measures per predictor, sorted by permutation importance.

    X and y should be held-out rows; permuting training rows overstates
    inc_mse for an overfit forest. node_purity always comes from the
    training fit.

    Columns:
        inc_mse      — mean increase in MSE when the predictor is permuted
        inc_mse_pct  — the same as a percentage of the unpermuted MSE
        node_purity  — impurity-based (mean decrease in node variance) importance
    """
    baseline_mse = mean_squared_error(y, model.predict(X))
    perm = permutation_importance(
        model,
        X,
        y,
        scoring="neg_mean_squared_error",
        n_repeats=n_repeats,
        random_state=seed,
    )
    if baseline_mse > 0:
        inc_mse_pct = 100 * perm.importances_mean / baseline_mse
    else:
        inc_mse_pct = np.full_like(perm.importances_mean, np.nan)

    importance = pd.DataFrame(
        {
            "inc_mse": perm.importances_mean,
            "inc_mse_pct": inc_mse_pct,
            "node_purity": model.feature_importances_,
        },
        index=pd.Index(X.columns, name="predictor"),
    )
    return importance.sort_values("inc_mse", ascending=False)


def save_model(model: RandomForestRegressor, path: Path | str) -> Path:
    """Persist the fitted forest with joblib."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, path)
    logger.info("Random forest saved to %s", path)
    return path
