"""
Figures for the species richness analysis.

Every function draws one figure, writes it as a PNG, closes it and returns the
output path. Nothing is shown on screen: the Agg backend is selected before
pyplot is imported so the pipeline runs headless (CI, servers, cron).

    01  plot_richness_distribution   histogram of species richness
    02  plot_temperature_relationship  temperature vs richness with OLS fit
    03  plot_correlation_matrix      upper-triangle correlation heatmap
    04  plot_environmental_factors   faceted predictor vs richness grid
    05  plot_model_diagnostics       2×2 OLS residual diagnostics
    06  plot_variable_importance     random forest importance (two measures)
    07  plot_predictions             predicted vs actual on the test set
    08  plot_spatial_distribution    sites on a lon/lat map, coloured by richness
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402
import statsmodels.api as sm  # noqa: E402

from species_distribution.models.regression import RegressionResult  # noqa: E402

logger = logging.getLogger(__name__)

POINT_COLOR = "#2c7fb8"
LINE_COLOR = "red"

VARIABLE_LABELS = {
    "mean_temp": "Temperature (°C)",
    "annual_precip": "Precipitation (mm)",
    "forest_cover": "Forest Cover (%)",
    "human_disturbance": "Human Disturbance",
    "elevation": "Elevation (m)",
    "species_richness": "Species Richness",
}


def _save(fig: plt.Figure, path: Path | str, dpi: int) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved: %s", path.name)
    return path


def plot_richness_distribution(
    df: pd.DataFrame,
    path: Path | str,
    binwidth: float = 5.0,
    dpi: int = 300,
) -> Path:
    """Histogram of species richness with a dashed line at the mean."""
    richness = df["species_richness"]
    mean = richness.mean()

    fig, ax = plt.subplots(figsize=(8, 6))
    bins = np.arange(richness.min() - binwidth / 2, richness.max() + binwidth, binwidth)
    ax.hist(richness, bins=bins, color=POINT_COLOR, edgecolor="white", alpha=0.8)
    ax.axvline(mean, color=LINE_COLOR, linestyle="--", linewidth=1.5)
    ax.set_title(f"Distribution of Bird Species Richness\nMean: {mean:.1f} species per site")
    ax.set_xlabel("Number of Species")
    ax.set_ylabel("Frequency")
    return _save(fig, path, dpi)


def plot_temperature_relationship(df: pd.DataFrame, path: Path | str, dpi: int = 300) -> Path:
    """Mean temperature vs richness, with a linear fit and its 95% confidence band."""
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.regplot(
        data=df,
        x="mean_temp",
        y="species_richness",
        ci=95,
        ax=ax,
        scatter_kws={"alpha": 0.6, "color": POINT_COLOR, "s": 20},
        line_kws={"color": LINE_COLOR},
    )
    ax.set_title(
        "Temperature Impact on Species Richness\n"
        "Linear relationship with 95% confidence interval"
    )
    ax.set_xlabel("Mean Annual Temperature (°C)")
    ax.set_ylabel("Species Richness")
    return _save(fig, path, dpi)


def plot_correlation_matrix(
    df: pd.DataFrame,
    columns: list[str],
    path: Path | str,
    dpi: int = 150,
) -> Path:
    """Pearson correlations between the given columns, upper triangle and diagonal only."""
    corr = df[columns].corr()
    mask = np.tril(np.ones_like(corr, dtype=bool), k=-1)

    fig, ax = plt.subplots(figsize=(6, 6))
    sns.heatmap(
        corr,
        mask=mask,
        annot=True,
        fmt=".2f",
        cmap="RdBu",
        vmin=-1,
        vmax=1,
        square=True,
        cbar_kws={"shrink": 0.7},
        annot_kws={"size": 8, "color": "black"},
        ax=ax,
    )
    ax.set_title("Environmental Variables Correlation Matrix")
    ax.set_xticklabels(ax.get_xticklabels(), rotation=45, ha="right")
    return _save(fig, path, dpi)


def plot_environmental_factors(
    df: pd.DataFrame,
    predictors: list[str],
    path: Path | str,
    dpi: int = 300,
) -> Path:
    """One panel per predictor: scatter against richness with a linear fit, free x axes."""
    long_df = df.melt(
        id_vars="species_richness",
        value_vars=predictors,
        var_name="variable",
        value_name="value",
    )
    long_df["variable"] = long_df["variable"].map(lambda v: VARIABLE_LABELS.get(v, v))

    grid = sns.lmplot(
        data=long_df,
        x="value",
        y="species_richness",
        col="variable",
        col_wrap=2,
        ci=None,
        height=4,
        aspect=1.25,
        facet_kws={"sharex": False},
        scatter_kws={"alpha": 0.4, "color": POINT_COLOR, "s": 15},
        line_kws={"color": LINE_COLOR},
    )
    grid.set_titles("{col_name}")
    grid.set_axis_labels("Environmental Variable Value", "Species Richness")
    grid.figure.suptitle("Environmental Predictors of Species Richness", y=1.02)
    return _save(grid.figure, path, dpi)


def plot_model_diagnostics(result: RegressionResult, path: Path | str, dpi: int = 150) -> Path:
    """
    Standard 2×2 OLS diagnostics.

    Residuals vs fitted, normal Q-Q of standardised residuals, scale-location,
    and standardised residuals vs leverage. The three rows with the largest
    Cook's distance are labelled in the leverage panel.
    """
    model = result.model
    influence = model.get_influence()
    fitted = np.asarray(model.fittedvalues)
    resid = np.asarray(model.resid)
    std_resid = influence.resid_studentized_internal
    leverage = influence.hat_matrix_diag
    cooks = influence.cooks_distance[0]
    lowess = sm.nonparametric.lowess

    fig, axes = plt.subplots(2, 2, figsize=(10, 8))

    ax = axes[0, 0]
    ax.scatter(fitted, resid, facecolors="none", edgecolors="black", s=15)
    smooth = lowess(resid, fitted)
    ax.plot(smooth[:, 0], smooth[:, 1], color=LINE_COLOR)
    ax.axhline(0, color="grey", linestyle=":")
    ax.set(title="Residuals vs Fitted", xlabel="Fitted values", ylabel="Residuals")

    ax = axes[0, 1]
    sm.qqplot(std_resid, line="45", ax=ax, markerfacecolor="none", markeredgecolor="black")
    ax.set(title="Normal Q-Q", xlabel="Theoretical Quantiles", ylabel="Standardized residuals")

    ax = axes[1, 0]
    root_abs = np.sqrt(np.abs(std_resid))
    ax.scatter(fitted, root_abs, facecolors="none", edgecolors="black", s=15)
    smooth = lowess(root_abs, fitted)
    ax.plot(smooth[:, 0], smooth[:, 1], color=LINE_COLOR)
    ax.set(title="Scale-Location", xlabel="Fitted values", ylabel="√|Standardized residuals|")

    ax = axes[1, 1]
    ax.scatter(leverage, std_resid, facecolors="none", edgecolors="black", s=15)
    smooth = lowess(std_resid, leverage)
    ax.plot(smooth[:, 0], smooth[:, 1], color=LINE_COLOR)
    ax.axhline(0, color="grey", linestyle=":")
    for i in np.argsort(cooks)[-3:]:
        ax.annotate(str(model.model.data.row_labels[i]), (leverage[i], std_resid[i]), fontsize=7)
    ax.set(title="Residuals vs Leverage", xlabel="Leverage", ylabel="Standardized residuals")

    fig.tight_layout()
    return _save(fig, path, dpi)


def plot_variable_importance(importance: pd.DataFrame, path: Path | str, dpi: int = 150) -> Path:
    """Dot charts of %IncMSE (permutation) and node purity (impurity) side by side."""
    fig, axes = plt.subplots(1, 2, figsize=(10, 5), sharey=False)

    for ax, col, label in (
        (axes[0], "inc_mse_pct", "%IncMSE"),
        (axes[1], "node_purity", "IncNodePurity"),
    ):
        ordered = importance[col].sort_values()
        ax.plot(ordered.to_numpy(), range(len(ordered)), "o", color=POINT_COLOR)
        ax.set_yticks(range(len(ordered)))
        ax.set_yticklabels(ordered.index)
        ax.grid(axis="y", linestyle=":", alpha=0.6)
        ax.set_xlabel(label)

    fig.suptitle("Variable Importance for Species Richness Prediction")
    fig.tight_layout()
    return _save(fig, path, dpi)


def plot_predictions(
    actual,
    predicted,
    metrics: dict[str, float],
    path: Path | str,
    dpi: int = 300,
) -> Path:
    """Predicted vs actual richness on the held-out rows, with the 1:1 line."""
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.scatter(actual, predicted, alpha=0.6, color=POINT_COLOR, s=40)
    lo = min(actual.min(), predicted.min())
    hi = max(actual.max(), predicted.max())
    ax.plot([lo, hi], [lo, hi], color=LINE_COLOR, linestyle="--")
    ax.set_title(
        "Random Forest Model: Predicted vs Actual Species Richness\n"
        f"R² = {metrics['r_squared']:.3f}, RMSE = {metrics['rmse']:.2f}"
    )
    ax.set_xlabel("Actual Species Richness")
    ax.set_ylabel("Predicted Species Richness")
    return _save(fig, path, dpi)


def plot_spatial_distribution(
    df: pd.DataFrame,
    path: Path | str,
    colormap: str = "plasma",
    dpi: int = 300,
) -> Path:
    """Survey sites on longitude/latitude, colour and marker size mapped to richness."""
    richness = df["species_richness"].astype(float)
    span = richness.max() - richness.min()
    if span > 0:
        scaled = (richness - richness.min()) / span
    else:
        scaled = pd.Series(0.5, index=richness.index)
    sizes = 20 + scaled * 180

    fig, ax = plt.subplots(figsize=(10, 7))
    points = ax.scatter(
        df["longitude"],
        df["latitude"],
        c=richness,
        s=sizes,
        cmap=colormap,
        alpha=0.7,
        edgecolors="none",
    )
    fig.colorbar(points, ax=ax, label="Species\nRichness", shrink=0.8)
    ax.set_aspect(1.3)
    ax.grid(color="0.9")
    ax.set_title("Spatial Distribution of Bird Species Richness\nNorth American Survey Sites")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    return _save(fig, path, dpi)
