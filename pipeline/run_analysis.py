"""
run_analysis.py — Species distribution analysis: climate impact on bird species richness.

Synthesises the survey-site dataset, draws the descriptive figures, fits the
multiple linear regression and the random forest, evaluates the forest on
held-out sites and writes a plain-text summary. All settings come from
configs/analysis.yaml.

Usage:
    python -m pipeline.run_analysis

Output (in the configured output_dir, default output/):
    ecological_data.csv, 01_…08_*.png, rf_species_richness.pkl, analysis_summary.txt
"""

from __future__ import annotations

import sys
from pathlib import Path

# Make the project root importable so species_distribution.* works from any directory.
_PROJECT_ROOT = Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from species_distribution.config import load_config  # noqa: E402
from species_distribution.logging_utils import get_logger  # noqa: E402
from species_distribution.pipeline import run_analysis  # noqa: E402

logger = get_logger(__name__)

_cfg = load_config("analysis")

OUTPUT_DIR = Path(_cfg["output_dir"])


def main() -> int:
    logger.info("Species distribution analysis → %s", OUTPUT_DIR)
    try:
        results = run_analysis(_cfg, OUTPUT_DIR)
    except Exception:
        logger.exception("Analysis failed")
        return 1

    logger.info(
        "OLS R²=%.3f | RF test RMSE=%.2f R²=%.3f",
        results.regression.r_squared,
        results.metrics["rmse"],
        results.metrics["r_squared"],
    )
    logger.info("All outputs saved to '%s'", OUTPUT_DIR)
    return 0


if __name__ == "__main__":
    sys.exit(main())
