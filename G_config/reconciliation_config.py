# G_config/reconciliation_config.py
"""
Configuration for the label reconciliation pipeline.

Usage:
    from G_config.reconciliation_config import load_config

    config = load_config()                      # G_config/config.yaml
    config = load_config(Path("other.yaml"))

    # Or build directly (tests use a zero interval)
    config = ReconciliationConfig(rate_limit_interval_seconds=0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from A_core.A00_logging import get_logger
from A_core.A12_exceptions import ConfigurationError
from G_config.G01_config_keys import (
    ConfigKey,
    LoggingConfigKey,
    LookupConfig,
    ReconciliationConfigKey,
    ValidationConfigKey,
    get_nested_config,
)

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


@dataclass
class ReconciliationConfig:
    """
    Flattened view of config.yaml.

    Each field defaults to the matching key's default in G01_config_keys.
    """

    # label_lookup
    base_url: str = LookupConfig.BASE_URL.default
    page_limit: int = LookupConfig.PAGE_LIMIT.default
    rate_limit_interval_seconds: float = LookupConfig.RATE_LIMIT_INTERVAL.default
    timeout_seconds: float = LookupConfig.TIMEOUT_SECONDS.default
    user_agent: str = LookupConfig.USER_AGENT.default

    # reconciliation
    enabled: bool = ReconciliationConfigKey.ENABLED.default
    excluded_routes: List[str] = field(
        default_factory=lambda: list(ReconciliationConfigKey.EXCLUDED_ROUTES.default)
    )

    # validation
    fda_label_prefix: str = ValidationConfigKey.FDA_LABEL_PREFIX.default
    phone_pattern: str = ValidationConfigKey.PHONE_PATTERN.default
    enums_file: str = ValidationConfigKey.ENUMS_FILE.default

    # logging
    log_level: str = LoggingConfigKey.LEVEL.default
    log_dir: str = LoggingConfigKey.LOG_DIR.default
    file_logging: bool = LoggingConfigKey.FILE_LOGGING.default

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError on values the pipeline cannot run with."""
        if not isinstance(self.page_limit, int) or isinstance(self.page_limit, bool) or self.page_limit < 1:
            raise ConfigurationError(
                "page_limit must be a positive integer",
                config_key=LookupConfig.PAGE_LIMIT.value,
                expected_type="int >= 1",
                actual_value=self.page_limit,
            )
        if not isinstance(self.rate_limit_interval_seconds, (int, float)) or self.rate_limit_interval_seconds < 0:
            raise ConfigurationError(
                "rate_limit_interval_seconds must be >= 0",
                config_key=LookupConfig.RATE_LIMIT_INTERVAL.value,
                expected_type="float >= 0",
                actual_value=self.rate_limit_interval_seconds,
            )
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "base_url must be an http(s) URL",
                config_key=LookupConfig.BASE_URL.value,
                actual_value=self.base_url,
            )
        if logging.getLevelName(self.log_level.upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
        ):
            raise ConfigurationError(
                "logging level is not recognised",
                config_key=LoggingConfigKey.LEVEL.value,
                actual_value=self.log_level,
            )

    @property
    def lookup_client_config(self) -> Dict[str, Any]:
        """Config dict in the shape FDALabelClient expects."""
        return {
            LookupConfig.BASE_URL.value: self.base_url,
            LookupConfig.PAGE_LIMIT.value: self.page_limit,
            LookupConfig.RATE_LIMIT_INTERVAL.value: self.rate_limit_interval_seconds,
            LookupConfig.TIMEOUT_SECONDS.value: self.timeout_seconds,
            LookupConfig.USER_AGENT.value: self.user_agent,
        }

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ReconciliationConfig":
        """Build from the parsed config.yaml mapping."""
        lookup = ConfigKey.LABEL_LOOKUP
        recon = ConfigKey.RECONCILIATION
        valid = ConfigKey.VALIDATION
        logs = ConfigKey.LOGGING

        return cls(
            base_url=get_nested_config(raw, lookup, LookupConfig.BASE_URL),
            page_limit=get_nested_config(raw, lookup, LookupConfig.PAGE_LIMIT),
            rate_limit_interval_seconds=get_nested_config(raw, lookup, LookupConfig.RATE_LIMIT_INTERVAL),
            timeout_seconds=get_nested_config(raw, lookup, LookupConfig.TIMEOUT_SECONDS),
            user_agent=get_nested_config(raw, lookup, LookupConfig.USER_AGENT),
            enabled=get_nested_config(raw, recon, ReconciliationConfigKey.ENABLED),
            excluded_routes=list(get_nested_config(raw, recon, ReconciliationConfigKey.EXCLUDED_ROUTES)),
            fda_label_prefix=get_nested_config(raw, valid, ValidationConfigKey.FDA_LABEL_PREFIX),
            phone_pattern=get_nested_config(raw, valid, ValidationConfigKey.PHONE_PATTERN),
            enums_file=get_nested_config(raw, valid, ValidationConfigKey.ENUMS_FILE),
            log_level=str(get_nested_config(raw, logs, LoggingConfigKey.LEVEL)),
            log_dir=get_nested_config(raw, logs, LoggingConfigKey.LOG_DIR),
            file_logging=get_nested_config(raw, logs, LoggingConfigKey.FILE_LOGGING),
        )

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "ReconciliationConfig":
        """
        Load configuration from a YAML file.

        A missing file falls back to defaults with a warning. A file that
        exists but cannot be parsed is a ConfigurationError.
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load {config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping", expected_type="mapping")

        return cls.from_dict(raw)


def load_config(config_path: Optional[Path] = None) -> ReconciliationConfig:
    """Load pipeline configuration from config.yaml."""
    return ReconciliationConfig.from_yaml(config_path)
