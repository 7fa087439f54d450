# A_core/A12_exceptions.py
"""
Exception hierarchy for the label reconciliation pipeline.

Nothing here is retryable. Every failure propagates to the runner, which
halts the whole pass.

Hierarchy:
    LabelReconError (base)
    ├── ConfigurationError        # Invalid config, missing keys
    ├── LabelLookupError          # Transport / protocol failures
    │   ├── APIError              # Connection error, non-200, malformed JSON
    │   ├── EmptyResultError      # Upstream returned zero documents
    │   └── LookupCanceledError   # Canceled while waiting for the limiter
    ├── DataIntegrityError        # Needs a human to fix catalog or upstream
    │   ├── UnmatchedBrandError   # No label document matched the brand
    │   └── DateFormatError       # Malformed YYYYMMDD / YYYY-MM-DD date
    ├── ValidationError           # Catalog record breaks an integrity rule
    │   └── InvalidEnumValueError # Value outside a closed set
    └── CatalogLoadError          # Catalog file unreadable or unparseable

Usage:
    from A_core.A12_exceptions import LabelLookupError, DataIntegrityError

    try:
        reconciler.reconcile(products)
    except (LabelLookupError, DataIntegrityError) as e:
        logger.error(f"Reconciliation aborted: {e}")
        raise
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence


class LabelReconError(Exception):
    """
    Base exception for all reconciliation pipeline errors.

    Attributes:
        message: Human-readable error description.
        context: Additional context data for debugging.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return error message with optional context."""
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ConfigurationError(LabelReconError):
    """
    Raised when configuration is invalid or incomplete.

    Examples:
        - Negative rate limit interval
        - Non-positive page limit
        - Enumeration file missing a required key
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        actual_value: Optional[Any] = None,
    ):
        context = {}
        if config_key:
            context["key"] = config_key
        if expected_type:
            context["expected"] = expected_type
        if actual_value is not None:
            context["actual"] = repr(actual_value)

        super().__init__(message, context)
        self.config_key = config_key
        self.expected_type = expected_type
        self.actual_value = actual_value


# =============================================================================
# LOOKUP (transport / protocol)
# =============================================================================


class LabelLookupError(LabelReconError):
    """
    Raised when the upstream label lookup fails for a brand.

    Attributes:
        brand_name: Brand being looked up when the failure happened.
        url: Exact request URL, if one was built.
    """

    def __init__(
        self,
        message: str,
        brand_name: Optional[str] = None,
        url: Optional[str] = None,
    ):
        context = {}
        if brand_name:
            context["brand"] = brand_name
        if url:
            context["url"] = url

        super().__init__(message, context)
        self.brand_name = brand_name
        self.url = url


class APIError(LabelLookupError):
    """
    Raised when an upstream HTTP request fails.

    Examples:
        - Connection refused / timeout
        - HTTP 4xx/5xx responses
        - Response body that is not the expected JSON envelope
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        brand_name: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message, brand_name=brand_name, url=url)

        if status_code:
            self.context["status_code"] = status_code
        if response_body:
            self.context["response"] = (
                response_body[:200] + "..."
                if len(response_body) > 200
                else response_body
            )

        self.status_code = status_code
        self.response_body = response_body


class EmptyResultError(LabelLookupError):
    """Raised when the upstream search returns zero documents for a brand."""


class LookupCanceledError(LabelLookupError):
    """Raised when the batch is canceled while waiting for a rate-limit token."""


# =============================================================================
# DATA INTEGRITY
# =============================================================================


class DataIntegrityError(LabelReconError):
    """
    Raised when catalog or upstream data cannot be reconciled as-is.

    These require a human to correct the catalog or investigate upstream drift.
    """


class UnmatchedBrandError(DataIntegrityError):
    """
    Raised when none of the returned label documents describe the brand.

    Attributes:
        brand_name: The unmatched brand.
        documents_seen: How many documents the upstream search returned.
    """

    def __init__(
        self,
        message: str,
        brand_name: Optional[str] = None,
        documents_seen: Optional[int] = None,
        url: Optional[str] = None,
    ):
        context: Dict[str, Any] = {}
        if brand_name:
            context["brand"] = brand_name
        if documents_seen is not None:
            context["documents_seen"] = documents_seen
        if url:
            context["url"] = url

        super().__init__(message, context)
        self.brand_name = brand_name
        self.documents_seen = documents_seen
        self.url = url


class DateFormatError(DataIntegrityError):
    """
    Raised when a date string does not match its expected layout.

    Attributes:
        value: The offending string.
        expected_format: Human-readable layout, e.g. "YYYYMMDD".
        source: Where the value came from (brand or product name).
    """

    def __init__(
        self,
        message: str,
        value: Optional[str] = None,
        expected_format: Optional[str] = None,
        source: Optional[str] = None,
    ):
        context = {}
        if value is not None:
            context["value"] = repr(value)
        if expected_format:
            context["expected"] = expected_format
        if source:
            context["source"] = source

        super().__init__(message, context)
        self.value = value
        self.expected_format = expected_format
        self.source = source


# =============================================================================
# VALIDATION
# =============================================================================


class ValidationError(LabelReconError):
    """
    Raised (or returned inside a ValidationResult) when a catalog record
    breaks an integrity rule.

    Examples:
        - Empty brand name
        - Phone number not in 1-DDD-DDD-DDDD form
        - FDA label URL outside the label repository
    """

    def __init__(
        self,
        message: str,
        product: Optional[str] = None,
        field_name: Optional[str] = None,
        expected_value: Optional[str] = None,
        actual_value: Optional[str] = None,
    ):
        context = {}
        if product:
            context["product"] = product
        if field_name:
            context["field"] = field_name
        if expected_value:
            context["expected"] = expected_value
        if actual_value:
            context["actual"] = actual_value

        super().__init__(message, context)
        self.product = product
        self.field_name = field_name
        self.expected_value = expected_value
        self.actual_value = actual_value


class InvalidEnumValueError(ValidationError):
    """
    Raised when a value is not a member of a closed enumeration.

    Attributes:
        value: The rejected value.
        allowed: The permitted values, in declaration order.
    """

    def __init__(
        self,
        message: str,
        value: str,
        allowed: Sequence[str],
        product: Optional[str] = None,
        field_name: Optional[str] = None,
    ):
        super().__init__(
            message,
            product=product,
            field_name=field_name,
            expected_value=", ".join(allowed),
            actual_value=value,
        )
        self.value = value
        self.allowed = tuple(allowed)


class CatalogLoadError(LabelReconError):
    """Raised when a catalog file cannot be read or parsed."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        context = {}
        if file_path:
            context["file"] = file_path

        super().__init__(message, context)
        self.file_path = file_path


__all__ = [
    "LabelReconError",
    "ConfigurationError",
    "LabelLookupError",
    "APIError",
    "EmptyResultError",
    "LookupCanceledError",
    "DataIntegrityError",
    "UnmatchedBrandError",
    "DateFormatError",
    "ValidationError",
    "InvalidEnumValueError",
    "CatalogLoadError",
]
