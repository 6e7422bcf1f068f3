"""
Tests for species_distribution.data.synthesis — the synthetic site table.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from species_distribution.data.synthesis import (
    SITE_COLUMNS,
    compute_species_richness,
    describe_dataset,
    generate_from_config,
    generate_site_data,
    save_dataset,
)


class TestTableShape:
    def test_columns_in_order(self, site_df: pd.DataFrame) -> None:
        assert list(site_df.columns) == SITE_COLUMNS

    def test_row_count(self, site_df: pd.DataFrame) -> None:
        assert len(site_df) == 200

    def test_site_ids_follow_row_order(self, site_df: pd.DataFrame) -> None:
        assert site_df["site_id"].tolist() == list(range(1, 201))

    def test_no_missing_values(self, site_df: pd.DataFrame) -> None:
        assert not site_df.isna().any().any()


class TestValueRanges:
    @pytest.mark.parametrize(
        "col, low, high",
        [
            ("latitude", 30.0, 50.0),
            ("longitude", -120.0, -70.0),
            ("elevation", 0.0, 3000.0),
            ("forest_cover", 0.0, 100.0),
            ("human_disturbance", 0.0, 100.0),
        ],
    )
    def test_uniform_columns_within_bounds(
        self, site_df: pd.DataFrame, col: str, low: float, high: float
    ) -> None:
        assert site_df[col].between(low, high).all()

    def test_normal_columns_centred_near_mean(self, site_df: pd.DataFrame) -> None:
        # Standard error of the mean is sd/sqrt(200); allow ~4 of them.
        assert site_df["mean_temp"].mean() == pytest.approx(15.0, abs=1.5)
        assert site_df["annual_precip"].mean() == pytest.approx(800.0, abs=90.0)

    def test_richness_respects_floor(self, site_df: pd.DataFrame) -> None:
        assert (site_df["species_richness"] >= 5).all()

    def test_richness_is_integer(self, site_df: pd.DataFrame) -> None:
        assert pd.api.types.is_integer_dtype(site_df["species_richness"])


class TestDeterminism:
    def test_same_seed_same_table(self) -> None:
        pd.testing.assert_frame_equal(
            generate_site_data(n_sites=50, seed=7),
            generate_site_data(n_sites=50, seed=7),
        )

    def test_different_seed_different_table(self) -> None:
        a = generate_site_data(n_sites=50, seed=7)
        b = generate_site_data(n_sites=50, seed=8)
        assert not a["latitude"].equals(b["latitude"])

    def test_csv_is_byte_identical_across_runs(self, tmp_path: Path) -> None:
        first = save_dataset(generate_site_data(seed=123), tmp_path / "a" / "data.csv")
        second = save_dataset(generate_site_data(seed=123), tmp_path / "b" / "data.csv")
        assert first.read_bytes() == second.read_bytes()

    def test_config_wrapper_matches_direct_call(self, analysis_cfg: dict) -> None:
        pd.testing.assert_frame_equal(
            generate_from_config(analysis_cfg["synthesis"]),
            generate_site_data(n_sites=200, seed=123),
        )


class TestSpeciesRichness:
    def test_floor_applies_to_strongly_negative_sites(self) -> None:
        df = pd.DataFrame(
            {
                "mean_temp": [0.0, 0.0],
                "annual_precip": [0.0, 0.0],
                "forest_cover": [0.0, 0.0],
                "human_disturbance": [100.0, 100.0],
                "elevation": [3000.0, 3000.0],
            }
        )
        richness = compute_species_richness(df, np.random.default_rng(0), noise_sd=0.0, minimum=5)
        # 30 - 20 - 15 = -5 → floored
        assert richness.tolist() == [5, 5]

    def test_noise_free_value_matches_formula(self) -> None:
        df = pd.DataFrame(
            {
                "mean_temp": [10.0],
                "annual_precip": [1000.0],
                "forest_cover": [50.0],
                "human_disturbance": [20.0],
                "elevation": [1000.0],
            }
        )
        richness = compute_species_richness(df, np.random.default_rng(0), noise_sd=0.0)
        # 30 + 5 + 20 + 15 - 4 - 5 = 61
        assert richness.iloc[0] == 61

    def test_missing_predictor_raises(self) -> None:
        df = pd.DataFrame({"mean_temp": [10.0]})
        with pytest.raises(KeyError):
            compute_species_richness(df, np.random.default_rng(0))


class TestEdgeCases:
    def test_zero_sites_rejected(self) -> None:
        with pytest.raises(ValueError):
            generate_site_data(n_sites=0)

    def test_single_site(self) -> None:
        df = generate_site_data(n_sites=1, seed=1)
        assert len(df) == 1
        assert df["species_richness"].iloc[0] >= 5


class TestSaveAndDescribe:
    def test_save_creates_parent_dirs(self, tmp_path: Path, site_df: pd.DataFrame) -> None:
        path = save_dataset(site_df, tmp_path / "nested" / "out" / "ecological_data.csv")
        assert path.exists()

    def test_saved_csv_has_no_index_column(self, tmp_path: Path, site_df: pd.DataFrame) -> None:
        path = save_dataset(site_df, tmp_path / "ecological_data.csv")
        reloaded = pd.read_csv(path)
        assert list(reloaded.columns) == SITE_COLUMNS
        assert len(reloaded) == len(site_df)

    def test_describe_reports_structure(self, site_df: pd.DataFrame) -> None:
        info = describe_dataset(site_df)
        assert info["n_rows"] == 200
        assert info["n_columns"] == len(SITE_COLUMNS)
        assert set(info["dtypes"]) == set(SITE_COLUMNS)
        assert info["missing"].sum() == 0
        assert "mean" in info["summary"].index
