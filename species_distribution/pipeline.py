"""
End-to-end species richness analysis.

run_analysis() executes every step in order over one in-memory table:

    1. synthesise the site table and save it as CSV
    2. log structure, summary statistics and missing values
    3. descriptive figures (01–04)
    4. OLS fit and diagnostics figure (05)
    5. stratified split, random forest fit, importance figure (06)
    6. test-set evaluation and predicted-vs-actual figure (07)
    7. spatial map (08)
    8. text summary

The function returns everything it computed so callers (and tests) can check
numbers without re-reading the files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
from sklearn.ensemble import RandomForestRegressor

from species_distribution import plots
from species_distribution.data.synthesis import (
    describe_dataset,
    generate_from_config,
    save_dataset,
)
from species_distribution.models.forest import (
    evaluate_predictions,
    save_model,
    split_train_test,
    train_random_forest,
    variable_importance,
)
from species_distribution.models.regression import RegressionResult, fit_linear_model
from species_distribution.report import build_summary, write_summary

logger = logging.getLogger(__name__)

DATA_FILE = "ecological_data.csv"
SUMMARY_FILE = "analysis_summary.txt"
FIGURE_FILES = {
    "distribution": "01_species_distribution.png",
    "temperature": "02_temp_species.png",
    "correlation": "03_correlation_matrix.png",
    "factors": "04_multiple_factors.png",
    "diagnostics": "05_model_diagnostics.png",
    "importance": "06_variable_importance.png",
    "predictions": "07_predictions.png",
    "spatial": "08_spatial_map.png",
}


@dataclass
class AnalysisResults:
    data: pd.DataFrame
    regression: RegressionResult
    forest: RandomForestRegressor
    train: pd.DataFrame
    test: pd.DataFrame
    predictions: pd.Series
    metrics: dict[str, float]
    importance: pd.DataFrame
    outputs: dict[str, Path] = field(default_factory=dict)


def run_analysis(cfg: dict[str, Any], output_dir: Path | str | None = None) -> AnalysisResults:
    """
    Run the full analysis and write every output into output_dir.

    Args:
        cfg: Parsed configs/analysis.yaml.
        output_dir: Overrides cfg["output_dir"]. Created if absent.
    """
    out = Path(output_dir if output_dir is not None else cfg["output_dir"])
    out.mkdir(parents=True, exist_ok=True)

    model_cfg = cfg["model"]
    predictors: list[str] = model_cfg["predictors"]
    target: str = model_cfg["target"]
    plot_cfg = cfg.get("plots", {})
    dpi: int = plot_cfg.get("dpi", 300)
    outputs: dict[str, Path] = {}

    # 1. Data synthesis
    df = generate_from_config(cfg["synthesis"])
    outputs["data"] = save_dataset(df, out / DATA_FILE)

    # 2. Exploratory summary
    description = describe_dataset(df)
    logger.info(
        "Data structure: %d rows × %d columns",
        description["n_rows"],
        description["n_columns"],
    )
    logger.info("Column types: %s", description["dtypes"])
    logger.info("Summary statistics:\n%s", description["summary"].round(2).to_string())
    logger.info("Missing values per column:\n%s", description["missing"].to_string())

    # 3. Descriptive figures
    outputs["distribution"] = plots.plot_richness_distribution(
        df, out / FIGURE_FILES["distribution"], dpi=dpi
    )
    outputs["temperature"] = plots.plot_temperature_relationship(
        df, out / FIGURE_FILES["temperature"], dpi=dpi
    )
    outputs["correlation"] = plots.plot_correlation_matrix(
        df, [*predictors, target], out / FIGURE_FILES["correlation"], dpi=min(dpi, 150)
    )
    outputs["factors"] = plots.plot_environmental_factors(
        df, [p for p in predictors if p != "elevation"], out / FIGURE_FILES["factors"], dpi=dpi
    )

    # 4. Linear model
    regression = fit_linear_model(df, predictors, target)
    outputs["diagnostics"] = plots.plot_model_diagnostics(
        regression, out / FIGURE_FILES["diagnostics"], dpi=min(dpi, 150)
    )

    # 5. Random forest
    split_cfg = cfg["split"]
    train_df, test_df = split_train_test(
        df,
        target,
        train_fraction=split_cfg["train_fraction"],
        n_groups=split_cfg["n_groups"],
        seed=split_cfg["seed"],
    )
    rf_cfg = cfg["random_forest"]
    forest = train_random_forest(train_df, predictors, target, rf_cfg["params"])
    importance = variable_importance(
        forest,
        test_df[predictors],
        test_df[target],
        n_repeats=rf_cfg.get("permutation_repeats", 10),
        seed=split_cfg["seed"],
    )
    logger.info(
        "Variable importance on %d held-out sites:\n%s",
        len(test_df),
        importance.round(3).to_string(),
    )
    outputs["importance"] = plots.plot_variable_importance(
        importance, out / FIGURE_FILES["importance"], dpi=min(dpi, 150)
    )
    outputs["model"] = save_model(
        forest, out / rf_cfg.get("output_model", "rf_species_richness.pkl")
    )

    # 6. Evaluation
    predictions = pd.Series(
        forest.predict(test_df[predictors]), index=test_df.index, name="predicted"
    )
    metrics = evaluate_predictions(test_df[target], predictions)
    outputs["predictions"] = plots.plot_predictions(
        test_df[target], predictions, metrics, out / FIGURE_FILES["predictions"], dpi=dpi
    )

    # 7. Spatial map
    outputs["spatial"] = plots.plot_spatial_distribution(
        df, out / FIGURE_FILES["spatial"], colormap=plot_cfg.get("colormap", "plasma"), dpi=dpi
    )

    # 8. Summary report
    report_cfg = cfg.get("report", {})
    file_names = [
        outputs["data"].name,
        *(outputs[key].name for key in FIGURE_FILES),
        outputs["model"].name,
        SUMMARY_FILE,
    ]
    text = build_summary(
        df,
        regression,
        metrics,
        n_trees=forest.n_estimators,
        files=file_names,
        oob_r_squared=getattr(forest, "oob_score_", None),
        author=report_cfg.get("author", ""),
        title=report_cfg.get("title", "SPECIES DISTRIBUTION ANALYSIS SUMMARY"),
        top_k=model_cfg.get("top_k_predictors", 3),
        alpha=report_cfg.get("alpha", 0.05),
    )
    outputs["summary"] = write_summary(text, out / SUMMARY_FILE)

    logger.info("Analysis complete — %d files written to %s", len(outputs), out)

    return AnalysisResults(
        data=df,
        regression=regression,
        forest=forest,
        train=train_df,
        test=test_df,
        predictions=predictions,
        metrics=metrics,
        importance=importance,
        outputs=outputs,
    )
