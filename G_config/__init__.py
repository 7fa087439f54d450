"""
Configuration module for the label reconciliation pipeline.

Load configuration from config.yaml:

    from G_config import load_config

    config = load_config()
    print(config.rate_limit_interval_seconds)

Closed sets (medicine types, administration routes, savings categories)
live in G_config/data/catalog_enums.yaml.
"""

from .reconciliation_config import ReconciliationConfig, load_config

__all__ = [
    "ReconciliationConfig",
    "load_config",
]
