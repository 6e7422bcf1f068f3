"""
Species Distribution — shared Python package.

Contains the core logic for the bird species richness analysis:
  - species_distribution.data.synthesis   — synthetic survey-site dataset
  - species_distribution.models.regression — multiple linear regression (OLS)
  - species_distribution.models.forest    — random forest split, fit and evaluation
  - species_distribution.plots            — the eight output figures
  - species_distribution.report           — plain-text analysis summary
  - species_distribution.pipeline         — end-to-end run over all steps
  - species_distribution.config           — YAML config loading
  - species_distribution.logging_utils    — project-wide logger factory
"""
