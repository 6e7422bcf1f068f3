"""
Plain-text summary of the species richness analysis.

build_summary() turns the fitted results into the report text; write_summary()
puts it on disk. The key findings are worded from the fitted numbers (sign of
the correlation, significance of the coefficient, which model explains more
variance), so they stay true if the synthesis parameters change.
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import pandas as pd

from species_distribution.models.regression import RegressionResult, top_predictors

logger = logging.getLogger(__name__)

_RULE = "=" * 40


def _format_pvalue(p: float, digits: int = 3) -> str:
    # Below machine precision the F-test p-value underflows to 0.
    if p < 2.2e-16:
        return "< 2.2e-16"
    return f"{p:.{digits}g}"


def _key_findings(
    df: pd.DataFrame,
    regression: RegressionResult,
    forest_r_squared: float,
    alpha: float,
) -> list[str]:
    coefs = regression.coefficients
    findings = []

    if "mean_temp" in df.columns:
        r = df["mean_temp"].corr(df[regression.target])
        direction = "positive" if r > 0 else "negative"
        findings.append(
            f"Temperature shows a {direction} correlation with species richness (r = {r:.2f})"
        )

    if "human_disturbance" in coefs.index:
        est = coefs.loc["human_disturbance", "estimate"]
        impact = "negative" if est < 0 else "positive"
        findings.append(f"Human disturbance has a {impact} impact on biodiversity (β = {est:.3f})")

    if "forest_cover" in coefs.index:
        est = coefs.loc["forest_cover", "estimate"]
        p = coefs.loc["forest_cover", "p_value"]
        significance = "a significant" if p < alpha else "not a significant"
        direction = "positive" if est > 0 else "negative"
        findings.append(f"Forest cover is {significance} {direction} predictor (p = {p:.4f})")

    verdict = "outperforms" if forest_r_squared > regression.r_squared else "does not outperform"
    findings.append(
        f"Random Forest model {verdict} linear regression "
        f"(test R² {forest_r_squared:.3f} vs OLS R² {regression.r_squared:.3f})"
    )
    return findings


def build_summary(
    df: pd.DataFrame,
    regression: RegressionResult,
    forest_metrics: dict[str, float],
    n_trees: int,
    files: list[str],
    oob_r_squared: float | None = None,
    author: str = "",
    title: str = "SPECIES DISTRIBUTION ANALYSIS SUMMARY",
    date: dt.date | None = None,
    top_k: int = 3,
    alpha: float = 0.05,
) -> str:
    """
    Assemble the report text.

    Args:
        df: The analysed site table.
        regression: Fitted OLS result.
        forest_metrics: {"rmse", "r_squared"} from evaluate_predictions.
        n_trees: Number of trees in the forest.
        files: Output file names to list at the end of the report.
        oob_r_squared: Forest OOB R², reported as % variance explained if given.
        author, title, date: Header fields. date defaults to today.
        top_k: How many predictors to list, most significant first.
        alpha: Significance level used when wording the key findings.
    """
    date = date or dt.date.today()
    richness = df[regression.target]

    lines = [
        _RULE,
        title,
        _RULE,
        "",
    ]
    if author:
        lines.append(f"Author: {author}")
    lines += [
        f"Date: {date.strftime('%B %d, %Y')}",
        "",
        "DATASET OVERVIEW:",
        f"- Total sites analyzed: {len(df)}",
        f"- Mean species richness: {richness.mean():.1f}",
        f"- Species richness range: {richness.min():.0f} to {richness.max():.0f}",
        "",
        "LINEAR REGRESSION RESULTS:",
        f"- Model R-squared: {regression.r_squared:.3f}",
        f"- Adjusted R-squared: {regression.adj_r_squared:.3f}",
        f"- Model p-value: {_format_pvalue(regression.f_pvalue)}",
        "",
        f"TOP {top_k} PREDICTORS (by significance):",
    ]
    top = top_predictors(regression, k=top_k)
    for i, (name, row) in enumerate(top.iterrows(), start=1):
        lines.append(f"{i}. {name} (β = {row['estimate']:.3f}, p = {row['p_value']:.4f})")

    lines += [
        "",
        "RANDOM FOREST MODEL:",
        f"- RMSE: {forest_metrics['rmse']:.2f}",
        f"- R-squared: {forest_metrics['r_squared']:.3f}",
        f"- Number of trees: {n_trees}",
    ]
    if oob_r_squared is not None:
        lines.append(f"- OOB % variance explained: {100 * oob_r_squared:.1f}")

    lines += ["", "KEY FINDINGS:"]
    findings = _key_findings(df, regression, forest_metrics["r_squared"], alpha)
    lines += [f"{i}. {text}" for i, text in enumerate(findings, start=1)]

    lines += ["", "FILES GENERATED:"]
    lines += [f"- {name}" for name in files]
    lines += ["", _RULE, ""]
    return "\n".join(lines)


def write_summary(text: str, path: Path | str) -> Path:
    """Write the report as UTF-8, creating parent folders."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Summary saved to %s", path)
    return path
