"""
Synthetic survey-site dataset for the species richness analysis.

The table simulates what a season of eBird-style point counts joined to
climate station data would look like: one row per observation site, with
location, terrain, climate and land-use attributes, plus a species richness
response built from a fixed linear combination of those attributes and
Gaussian noise.

Columns are drawn one at a time, in table order, from a single seeded
generator, followed by the noise vector. Changing the order of draws changes
every downstream number. Columns not listed in _UNIFORM_COLUMNS are drawn
from a normal distribution.

Usage:

    from species_distribution.data.synthesis import generate_site_data

    df = generate_site_data(n_sites=200, seed=123)
    # Columns: site_id, latitude, longitude, elevation, mean_temp,
    #          annual_precip, forest_cover, human_disturbance, species_richness
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SITE_COLUMNS = [
    "site_id",
    "latitude",
    "longitude",
    "elevation",
    "mean_temp",
    "annual_precip",
    "forest_cover",
    "human_disturbance",
    "species_richness",
]

DEFAULT_RANGES: dict[str, tuple[float, float]] = {
    "latitude": (30.0, 50.0),
    "longitude": (-120.0, -70.0),
    "elevation": (0.0, 3000.0),
    "mean_temp": (15.0, 5.0),
    "annual_precip": (800.0, 300.0),
    "forest_cover": (0.0, 100.0),
    "human_disturbance": (0.0, 100.0),
}

DEFAULT_COEFFICIENTS: dict[str, float] = {
    "mean_temp": 0.5,
    "annual_precip": 0.02,
    "forest_cover": 0.3,
    "human_disturbance": -0.2,
    "elevation": -0.005,
}

_UNIFORM_COLUMNS = {"latitude", "longitude", "elevation", "forest_cover", "human_disturbance"}


def generate_site_data(
    n_sites: int = 200,
    seed: int = 123,
    ranges: dict[str, tuple[float, float]] | None = None,
    intercept: float = 30.0,
    coefficients: dict[str, float] | None = None,
    noise_sd: float = 8.0,
    minimum: int = 5,
) -> pd.DataFrame:
    """
    Build the site table with a deterministic, seeded generator.

    Args:
        n_sites: Number of observation sites (rows).
        seed: Seed for numpy's default_rng. Same seed, same table.
        ranges: Per-column distribution parameters. Uniform columns take
            (low, high); normal columns (mean_temp, annual_precip) take
            (mean, sd). Missing keys fall back to DEFAULT_RANGES.
        intercept, coefficients, noise_sd, minimum: Passed through to
            compute_species_richness.

    Returns:
        DataFrame with SITE_COLUMNS, one row per site, site_id starting at 1.

    Raises:
        ValueError: If n_sites < 1.
    """
    if n_sites < 1:
        raise ValueError(f"n_sites must be at least 1, got {n_sites}")

    params = {**DEFAULT_RANGES, **(ranges or {})}
    rng = np.random.default_rng(seed)

    data: dict[str, Any] = {"site_id": np.arange(1, n_sites + 1)}
    for col in SITE_COLUMNS[1:-1]:
        a, b = params[col]
        if col in _UNIFORM_COLUMNS:
            data[col] = rng.uniform(a, b, n_sites)
        else:
            data[col] = rng.normal(a, b, n_sites)

    df = pd.DataFrame(data)
    df["species_richness"] = compute_species_richness(
        df,
        rng,
        intercept=intercept,
        coefficients=coefficients,
        noise_sd=noise_sd,
        minimum=minimum,
    )

    logger.info(
        "Generated %d sites (seed=%d): mean richness %.1f, range %d-%d",
        n_sites,
        seed,
        df["species_richness"].mean(),
        df["species_richness"].min(),
        df["species_richness"].max(),
    )
    return df


def compute_species_richness(
    df: pd.DataFrame,
    rng: np.random.Generator,
    intercept: float = 30.0,
    coefficients: dict[str, float] | None = None,
    noise_sd: float = 8.0,
    minimum: int = 5,
) -> pd.Series:
    """
    Derive species richness from the environmental columns.

    richness = round(intercept + sum(coef * column) + N(0, noise_sd)),
    floored at `minimum`. Warmer, wetter and more forested sites gain species;
    disturbed and high-elevation sites lose them.

    Rounding is half-to-even (numpy's np.round).
    """
    coefficients = coefficients or DEFAULT_COEFFICIENTS

    missing = [c for c in coefficients if c not in df.columns]
    if missing:
        raise KeyError(f"Columns required for species richness are missing: {missing}")

    linear = pd.Series(intercept, index=df.index, dtype=float)
    for col, coef in coefficients.items():
        linear = linear + coef * df[col]

    noise = rng.normal(0.0, noise_sd, len(df))
    richness = np.round(linear.to_numpy() + noise)
    richness = np.maximum(richness, minimum)

    return pd.Series(richness.astype(int), index=df.index, name="species_richness")


def generate_from_config(cfg: dict[str, Any]) -> pd.DataFrame:
    """Convenience wrapper around generate_site_data for the 'synthesis' config block."""
    ranges = {col: tuple(cfg[col]) for col in DEFAULT_RANGES if col in cfg}
    richness_cfg = cfg.get("richness", {})
    return generate_site_data(
        n_sites=cfg["n_sites"],
        seed=cfg["seed"],
        ranges=ranges,
        intercept=richness_cfg.get("intercept", 30.0),
        coefficients=richness_cfg.get("coefficients"),
        noise_sd=richness_cfg.get("noise_sd", 8.0),
        minimum=richness_cfg.get("minimum", 5),
    )


def save_dataset(df: pd.DataFrame, path: Path | str) -> Path:
    """Write the site table to CSV without the index, creating parent folders."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Dataset saved to %s (%d rows)", path, len(df))
    return path


def describe_dataset(df: pd.DataFrame) -> dict[str, Any]:
    """
    Structure, summary statistics and missing-value counts for the table.

    Returns a dict with keys: n_rows, n_columns, dtypes (column -> dtype name),
    summary (DataFrame from describe()), missing (Series of NaN counts).
    """
    return {
        "n_rows": len(df),
        "n_columns": df.shape[1],
        "dtypes": {col: str(dtype) for col, dtype in df.dtypes.items()},
        "summary": df.describe(),
        "missing": df.isna().sum(),
    }
