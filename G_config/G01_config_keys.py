# G_config/G01_config_keys.py
"""
Typed keys for config.yaml.

Each key is a str-valued Enum member, so it can index the parsed YAML
mapping directly, and it carries its own default and a one-line
description. The schema of config.yaml is therefore readable in one place.

Usage:
    from G_config.G01_config_keys import ConfigKey, LookupConfig, get_nested_config

    interval = get_nested_config(raw, ConfigKey.LABEL_LOOKUP, LookupConfig.RATE_LIMIT_INTERVAL)
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, Optional


class ConfigKeyBase(str, Enum):
    """A YAML key with its default value and description."""

    def __new__(cls, key: str, default: Any = None, description: str = "") -> "ConfigKeyBase":
        member = str.__new__(cls, key)
        member._value_ = key
        member._spec = (default, description)
        return member

    @property
    def default(self) -> Any:
        """Default value; list and dict defaults are copied so callers may mutate them."""
        return copy.deepcopy(self._spec[0])

    @property
    def description(self) -> str:
        return self._spec[1]


class ConfigKey(ConfigKeyBase):
    """Top-level sections of config.yaml."""

    LABEL_LOOKUP = ("label_lookup", {}, "openFDA label lookup client settings")
    RECONCILIATION = ("reconciliation", {}, "Label recency reconciliation settings")
    VALIDATION = ("validation", {}, "Catalog validation rule settings")
    LOGGING = ("logging", {}, "Logging settings")


class LookupConfig(ConfigKeyBase):
    """Keys within the 'label_lookup' section."""

    BASE_URL = ("base_url", "https://api.fda.gov/drug/label.json", "Label search endpoint")
    PAGE_LIMIT = ("page_limit", 30, "Documents requested per brand search")
    RATE_LIMIT_INTERVAL = (
        "rate_limit_interval_seconds", 2.0, "Minimum seconds between upstream requests"
    )
    TIMEOUT_SECONDS = ("timeout_seconds", 30, "Request timeout in seconds")
    USER_AGENT = ("user_agent", "pugnare.health/1.0", "User-Agent header sent upstream")


class ReconciliationConfigKey(ConfigKeyBase):
    """Keys within the 'reconciliation' section."""

    ENABLED = ("enabled", True, "Run the FDA label recency check")
    EXCLUDED_ROUTES = (
        "excluded_routes",
        ["Automatic Applicator", "Tubeless Insulin Pump"],
        "Administration routes of devices without an FDA drug label",
    )


class ValidationConfigKey(ConfigKeyBase):
    """Keys within the 'validation' section."""

    FDA_LABEL_PREFIX = (
        "fda_label_prefix",
        "https://www.accessdata.fda.gov/drugsatfda_docs/label/",
        "Required prefix of every FDA label source URL",
    )
    PHONE_PATTERN = ("phone_pattern", r"1-[0-9]{3}-[0-9]{3}-[0-9]{4}", "Savings program phone format (whole value)")
    ENUMS_FILE = ("enums_file", "catalog_enums.yaml", "Closed-set definitions under G_config/data")


class LoggingConfigKey(ConfigKeyBase):
    """Keys within the 'logging' section."""

    LEVEL = ("level", "INFO", "Minimum log level")
    LOG_DIR = ("log_dir", "logs", "Directory for rotating log files")
    FILE_LOGGING = ("file_logging", False, "Write a log file per run")


def _fallback(key: ConfigKeyBase, default: Optional[Any]) -> Any:
    return key.default if default is None else default


def get_config(config: Dict[str, Any], key: ConfigKeyBase, default: Optional[Any] = None) -> Any:
    """Value of ``key`` in one config section, or its default."""
    if key.value in config:
        return config[key.value]
    return _fallback(key, default)


def get_nested_config(config: Dict[str, Any], *keys: ConfigKeyBase, default: Optional[Any] = None) -> Any:
    """
    Walk section keys down to a leaf key.

    A missing section, or a section that is not a mapping, yields the leaf's
    default.

    Example:
        >>> get_nested_config({}, ConfigKey.LABEL_LOOKUP, LookupConfig.PAGE_LIMIT)
        30
    """
    *sections, leaf = keys
    section: Any = config
    for key in sections:
        section = section.get(key.value, {}) if isinstance(section, dict) else None
    if not isinstance(section, dict):
        return _fallback(leaf, default)
    return get_config(section, leaf, default)


__all__ = [
    "ConfigKeyBase",
    "ConfigKey",
    "LookupConfig",
    "ReconciliationConfigKey",
    "ValidationConfigKey",
    "LoggingConfigKey",
    "get_config",
    "get_nested_config",
]
