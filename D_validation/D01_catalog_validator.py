# D_validation/D01_catalog_validator.py
"""
Catalog integrity rules, applied to every product before publication.

Rules run in a fixed order and the first violation wins (no aggregation):

    1. Required fields: brand_name, ingredient_name, dose_frequency non-empty;
       at least one savings program.
    2. medicine_type and administration_route in their closed sets
       (case-sensitive).
    3. Each savings program: description non-empty; phone (if any) matches
       the phone pattern; link (if any) is http(s); category in its closed set.
    4. If fda_label_source is non-empty: fda_label_updated parses as YYYY-MM-DD and
       is not in the future; the URL starts with the FDA label repository
       prefix, parses as an absolute URL, and its path ends in ".pdf".

Violations are returned, not raised. The caller decides whether to halt:

    result = validator.validate_catalog(products)
    result.raise_for_failure()
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

from A_core.A00_logging import get_logger
from A_core.A01_catalog_models import Product, SavingsProgram
from A_core.A02_enumerations import CatalogEnumerations, Enumeration
from A_core.A12_exceptions import DateFormatError, InvalidEnumValueError, ValidationError
from G_config.G01_config_keys import ValidationConfigKey
from Z_utils.Z03_date_utils import parse_catalog_date

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one product (or the first failing product of a catalog)."""

    product: Optional[str]
    error: Optional[ValidationError] = None

    @property
    def passed(self) -> bool:
        return self.error is None

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error


class CatalogValidator:
    """
    Fail-fast rule engine for catalog records.

    Attributes:
        enums: Closed sets for medicine type, route and savings category.
        fda_label_prefix: Required prefix of fda_label_source.
        phone_pattern: Compiled pattern a whole phone number must match.
    """

    def __init__(
        self,
        enums: CatalogEnumerations,
        fda_label_prefix: str = ValidationConfigKey.FDA_LABEL_PREFIX.default,
        phone_pattern: str = ValidationConfigKey.PHONE_PATTERN.default,
        today: Callable[[], date] = date.today,
    ):
        self.enums = enums
        self.fda_label_prefix = fda_label_prefix
        self.phone_pattern = re.compile(phone_pattern)
        self._today = today

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_product(self, product: Product) -> ValidationResult:
        """Run every rule against one product; stop at the first violation."""
        name = product.display_name
        for rule in (
            self._check_required_fields,
            self._check_categories,
            self._check_savings,
            self._check_fda_label,
        ):
            error = rule(product)
            if error is not None:
                logger.error(f"Validation failed for {name}: {error}")
                return ValidationResult(product=name, error=error)
        return ValidationResult(product=name)

    def validate_each(self, products: Iterable[Product]) -> List[ValidationResult]:
        """One verdict per product, in catalog order."""
        return [self.check_product(p) for p in products]

    def validate_catalog(self, products: Iterable[Product]) -> ValidationResult:
        """Return the first failing verdict, or a passing catalog-wide verdict."""
        for product in products:
            result = self.check_product(product)
            if not result.passed:
                return result
        return ValidationResult(product=None)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _check_required_fields(self, product: Product) -> Optional[ValidationError]:
        name = product.display_name
        for field_name in ("brand_name", "ingredient_name", "dose_frequency"):
            if not getattr(product, field_name).strip():
                return ValidationError(
                    f"{field_name} is required", product=name, field_name=field_name
                )
        if not product.savings:
            return ValidationError(
                "at least one savings program is required", product=name, field_name="savings"
            )
        return None

    def _check_enum(
        self, enumeration: Enumeration, value: str, product: Product, field_name: str
    ) -> Optional[ValidationError]:
        error = enumeration.check(value)
        if error is None:
            return None
        return InvalidEnumValueError(
            error.message,
            value=value,
            allowed=error.allowed,
            product=product.display_name,
            field_name=field_name,
        )

    def _check_categories(self, product: Product) -> Optional[ValidationError]:
        return self._check_enum(
            self.enums.medicine_types, product.medicine_type, product, "medicine_type"
        ) or self._check_enum(
            self.enums.administration_routes,
            product.administration_route,
            product,
            "administration_route",
        )

    def _check_savings(self, product: Product) -> Optional[ValidationError]:
        for index, program in enumerate(product.savings):
            error = self._check_program(product, index, program)
            if error is not None:
                return error
        return None

    def _check_program(
        self, product: Product, index: int, program: SavingsProgram
    ) -> Optional[ValidationError]:
        name = product.display_name
        prefix = f"savings[{index}]"

        if not program.description.strip():
            return ValidationError(
                "savings program description is required",
                product=name,
                field_name=f"{prefix}.description",
            )
        if program.phone is not None and not self.phone_pattern.fullmatch(program.phone):
            return ValidationError(
                "savings program phone must look like 1-DDD-DDD-DDDD",
                product=name,
                field_name=f"{prefix}.phone",
                expected_value="1-DDD-DDD-DDDD",
                actual_value=program.phone,
            )
        if program.link is not None and not program.link.startswith(("http://", "https://")):
            return ValidationError(
                "savings program link must start with http:// or https://",
                product=name,
                field_name=f"{prefix}.link",
                actual_value=program.link,
            )
        return self._check_enum(
            self.enums.savings_categories, program.category, product, f"{prefix}.category"
        )

    def _check_fda_label(self, product: Product) -> Optional[ValidationError]:
        url = product.fda_label_source
        if not url:
            return None
        name = product.display_name

        try:
            updated = parse_catalog_date(product.fda_label_updated, source=name)
        except DateFormatError as e:
            return ValidationError(
                f"fda_label_updated is not a valid date: {e.message}",
                product=name,
                field_name="fda_label_updated",
                expected_value="YYYY-MM-DD",
                actual_value=product.fda_label_updated,
            )
        if updated > self._today():
            return ValidationError(
                "fda_label_updated is in the future",
                product=name,
                field_name="fda_label_updated",
                actual_value=product.fda_label_updated,
            )

        if not url.startswith(self.fda_label_prefix):
            return ValidationError(
                "fda_label_source is not in the FDA label repository",
                product=name,
                field_name="fda_label_source",
                expected_value=f"{self.fda_label_prefix}...",
                actual_value=url,
            )

        try:
            parsed = urlparse(url)
        except ValueError as e:
            return ValidationError(
                f"fda_label_source is not a valid URL: {e}",
                product=name,
                field_name="fda_label_source",
                actual_value=url,
            )
        if not parsed.scheme or not parsed.netloc:
            return ValidationError(
                "fda_label_source is not an absolute URL",
                product=name,
                field_name="fda_label_source",
                actual_value=url,
            )

        if not parsed.path.lower().endswith(".pdf"):
            return ValidationError(
                "fda_label_source must point to a PDF",
                product=name,
                field_name="fda_label_source",
                expected_value="*.pdf",
                actual_value=url,
            )
        return None
