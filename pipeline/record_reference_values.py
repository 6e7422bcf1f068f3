"""
record_reference_values.py — Store the production-seed model metrics for the test suite.

Runs the full analysis (500-tree forest) into a temporary directory and writes
the OLS R² and the random forest test RMSE / R² into tests/reference_values.yaml.
tests/test_reference_values.py then checks every later run against them.

Usage:
    python -m pipeline.record_reference_values

Output:
    tests/reference_values.yaml (metrics block updated in place)
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import yaml

_PROJECT_ROOT = Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from species_distribution.config import load_config  # noqa: E402
from species_distribution.logging_utils import get_logger  # noqa: E402
from species_distribution.pipeline import run_analysis  # noqa: E402

logger = get_logger(__name__)

REFERENCE_FILE = _PROJECT_ROOT / "tests" / "reference_values.yaml"


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        results = run_analysis(load_config("analysis"), tmp)

    metrics = {
        "ols_r_squared": results.regression.r_squared,
        "rf_rmse": results.metrics["rmse"],
        "rf_r_squared": results.metrics["r_squared"],
    }

    # Only the metrics block is rewritten so the header comments survive.
    text = REFERENCE_FILE.read_text(encoding="utf-8")
    head, marker, _ = text.partition("metrics:\n")
    if not marker:
        raise ValueError(f"No 'metrics:' block found in {REFERENCE_FILE}")
    block = yaml.safe_dump({k: float(v) for k, v in metrics.items()}, sort_keys=False)
    body = "".join(f"  {line}\n" for line in block.splitlines())
    REFERENCE_FILE.write_text(head + marker + body, encoding="utf-8")

    logger.info("Reference metrics written to %s: %s", REFERENCE_FILE, metrics)


if __name__ == "__main__":
    main()
