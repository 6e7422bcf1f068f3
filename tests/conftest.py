"""
Shared pytest fixtures for the Species Distribution test suite.

Everything is synthesised in-process. The full-size table uses the production
seed; the config fixture shrinks the forest and the figure resolution so the
end-to-end tests stay quick.
"""

from __future__ import annotations

import copy

import pandas as pd
import pytest

from species_distribution.config import load_config
from species_distribution.data.synthesis import generate_site_data

PREDICTORS = ["mean_temp", "annual_precip", "forest_cover", "human_disturbance", "elevation"]


@pytest.fixture(scope="session")
def analysis_cfg() -> dict:
    """The real configs/analysis.yaml, loaded once."""
    return load_config("analysis")


@pytest.fixture()
def fast_cfg(analysis_cfg: dict) -> dict:
    """Production config with a 50-tree single-threaded forest and low-DPI figures."""
    cfg = copy.deepcopy(analysis_cfg)
    cfg["random_forest"]["params"]["n_estimators"] = 50
    cfg["random_forest"]["params"]["n_jobs"] = 1
    cfg["random_forest"]["permutation_repeats"] = 2
    cfg["plots"]["dpi"] = 40
    return cfg


@pytest.fixture(scope="session")
def site_df() -> pd.DataFrame:
    """200 sites generated with the production seed (123)."""
    return generate_site_data(n_sites=200, seed=123)


@pytest.fixture()
def predictors() -> list[str]:
    return list(PREDICTORS)


@pytest.fixture()
def exact_linear_df() -> pd.DataFrame:
    """
    Noise-free table where richness = 10 + 2·a − 3·b exactly.

    a and b are chosen so they aren't collinear; OLS should recover the
    coefficients to floating-point precision and report R² = 1.
    """
    a = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
    b = [2.0, 1.0, 4.0, 3.0, 6.0, 5.0, 8.0, 9.0]
    return pd.DataFrame(
        {"a": a, "b": b, "species_richness": [10 + 2 * x - 3 * y for x, y in zip(a, b)]}
    )
