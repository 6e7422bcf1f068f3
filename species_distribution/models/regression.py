"""
Multiple linear regression of species richness on the environmental predictors.

Ordinary least squares with an intercept, fitted with statsmodels so the
coefficient table carries standard errors and p-values, and the fitted model
exposes the influence measures used for the diagnostics figure.

Usage:

    from species_distribution.models.regression import fit_linear_model, top_predictors

    result = fit_linear_model(df, predictors=["mean_temp", "elevation"])
    print(result.r_squared, result.f_pvalue)
    print(top_predictors(result, k=3))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd
import statsmodels.api as sm
from statsmodels.regression.linear_model import RegressionResultsWrapper

logger = logging.getLogger(__name__)

_INTERCEPT = "const"


@dataclass
class RegressionResult:
    """Fitted OLS model plus the numbers the report needs."""

    model: RegressionResultsWrapper
    predictors: list[str]
    target: str
    r_squared: float
    adj_r_squared: float
    f_pvalue: float
    coefficients: pd.DataFrame  # index = predictor; estimate, std_error, t_value, p_value

    @property
    def n_obs(self) -> int:
        return int(self.model.nobs)


def fit_linear_model(
    df: pd.DataFrame,
    predictors: list[str],
    target: str = "species_richness",
) -> RegressionResult:
    """
    Fit target ~ predictors by OLS.

    Args:
        df: Table holding the target and every predictor column.
        predictors: Predictor column names, in model order.
        target: Response column name.

    Returns:
        RegressionResult. The coefficient table excludes the intercept.

    Raises:
        KeyError: If the target or any predictor column is missing.
    """
    missing = [c for c in [*predictors, target] if c not in df.columns]
    if missing:
        raise KeyError(f"Columns missing from regression data: {missing}")

    X = sm.add_constant(df[predictors].astype(float), has_constant="add")
    y = df[target].astype(float)
    model = sm.OLS(y, X).fit()

    coefficients = pd.DataFrame(
        {
            "estimate": model.params,
            "std_error": model.bse,
            "t_value": model.tvalues,
            "p_value": model.pvalues,
        }
    ).drop(index=_INTERCEPT)

    logger.info(
        "OLS fitted on %d rows: R²=%.3f adj R²=%.3f F p-value=%.3g",
        int(model.nobs),
        model.rsquared,
        model.rsquared_adj,
        model.f_pvalue,
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("OLS summary:\n%s", model.summary())

    return RegressionResult(
        model=model,
        predictors=list(predictors),
        target=target,
        r_squared=float(model.rsquared),
        adj_r_squared=float(model.rsquared_adj),
        f_pvalue=float(model.f_pvalue),
        coefficients=coefficients,
    )


def top_predictors(result: RegressionResult, k: int = 3) -> pd.DataFrame:
    """The k most significant predictors (smallest p-value first)."""
    return result.coefficients.sort_values("p_value").head(k)
