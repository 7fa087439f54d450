# Z_utils/Z02_data_loader.py
"""
Load closed-set definitions from YAML files in G_config/data/.

Includes type-safety assertions to catch YAML boolean coercion
(e.g., unquoted 'no' -> False).

Key Components:
    - load_term_list: Load a List[str] from a YAML key
    - load_catalog_enumerations: Build the validator's CatalogEnumerations

Example:
    >>> from Z_utils.Z02_data_loader import load_catalog_enumerations
    >>> enums = load_catalog_enumerations()
    >>> enums.administration_routes.contains("Oral Tablet")
    True

Dependencies:
    - pyyaml: YAML parsing
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml

from A_core.A02_enumerations import CatalogEnumerations, Enumeration
from A_core.A12_exceptions import ConfigurationError

DATA_DIR = Path(__file__).resolve().parent.parent / "G_config" / "data"


def _check_strings(values: list, filename: str, key: str) -> None:
    """Raise ConfigurationError if any value is not a string (catches YAML boolean coercion)."""
    for v in values:
        if not isinstance(v, str):
            raise ConfigurationError(
                f"{filename}:{key} contains non-string value {v!r}; quote it in YAML",
                config_key=key,
                expected_type="str",
                actual_value=v,
            )


@lru_cache(maxsize=None)
def _load_yaml(path: Path) -> dict:
    """Load and cache a YAML data file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load data file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Data file {path} must contain a mapping", expected_type="mapping")
    return data


def load_term_list(filename: str, key: str, data_dir: Optional[Path] = None) -> List[str]:
    """Load a non-empty list of strings from a YAML file."""
    data = _load_yaml((data_dir or DATA_DIR) / filename)
    if key not in data:
        raise ConfigurationError(f"{filename} is missing required key", config_key=key)
    values = data[key]
    if not isinstance(values, list) or not values:
        raise ConfigurationError(
            f"{filename}:{key} must be a non-empty list", config_key=key, actual_value=values
        )
    _check_strings(values, filename, key)
    return list(values)


def load_catalog_enumerations(
    filename: str = "catalog_enums.yaml",
    data_dir: Optional[Path] = None,
) -> CatalogEnumerations:
    """Build the three catalog closed sets from a YAML data file."""
    return CatalogEnumerations(
        medicine_types=Enumeration(
            "medicine_type", load_term_list(filename, "medicine_types", data_dir)
        ),
        administration_routes=Enumeration(
            "administration_route", load_term_list(filename, "administration_routes", data_dir)
        ),
        savings_categories=Enumeration(
            "savings_category", load_term_list(filename, "savings_categories", data_dir)
        ),
    )
