"""
Config loader for the Species Distribution project.

All configuration lives in the configs/ directory as YAML files.
The pipeline script and the tests load their settings through this module
so there's one place to look when a value needs changing.

Usage:

    from species_distribution.config import load_config

    cfg = load_config("analysis")
    n_sites = cfg["synthesis"]["n_sites"]
    n_trees = cfg["random_forest"]["params"]["n_estimators"]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# Resolve the configs/ directory relative to this file so the package works
# regardless of the working directory the caller uses.
_CONFIGS_DIR = Path(__file__).parent.parent / "configs"

# Top-level sections each named config must define. A misspelt section name
# fails here instead of deep inside the pipeline.
REQUIRED_SECTIONS: dict[str, tuple[str, ...]] = {
    "analysis": ("output_dir", "synthesis", "model", "split", "random_forest"),
}


def load_config(name: str) -> dict[str, Any]:
    """
    Load a named YAML config file from the configs/ directory.

    Args:
        name: Config file name without the .yaml extension.
              Currently only "analysis".

    Returns:
        The parsed YAML contents as a nested dictionary.

    Raises:
        FileNotFoundError: If configs/<name>.yaml does not exist.
        KeyError: If a section listed in REQUIRED_SECTIONS is missing.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    path = _CONFIGS_DIR / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            f"Expected one of: {[p.stem for p in _CONFIGS_DIR.glob('*.yaml')]}"
        )
    with path.open(encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    validate_sections(cfg, REQUIRED_SECTIONS.get(name, ()), source=path.name)
    return cfg


def validate_sections(
    cfg: dict[str, Any],
    required: tuple[str, ...],
    source: str = "config",
) -> None:
    """Raise KeyError naming every required top-level section absent from cfg."""
    missing = [section for section in required if section not in cfg]
    if missing:
        raise KeyError(
            f"{source} is missing required section(s): {missing}. "
            f"Found: {sorted(cfg)}"
        )
