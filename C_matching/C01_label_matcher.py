# C_matching/C01_label_matcher.py
"""
Brand-to-label matching.

The openFDA search is a keyword search, so most returned documents are
false positives (generics, combination products, labels that merely mention
the brand). A document describes the brand only if the first whitespace
token of its first ``spl_product_data_elements`` line equals the brand name,
compared case-insensitively. That token comparison is the only
disambiguation rule.

Example:
    >>> matcher = LabelMatcher()
    >>> matcher.latest_effective_date("Ozempic", documents)
    datetime.date(2025, 3, 14)
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from A_core.A00_logging import get_logger
from A_core.A01_catalog_models import LabelDocument
from A_core.A12_exceptions import UnmatchedBrandError
from Z_utils.Z03_date_utils import parse_label_date

logger = get_logger(__name__)


def leading_token(document: LabelDocument) -> Optional[str]:
    """Lower-cased first token of the first data-element line, or None if there is none."""
    if not document.spl_product_data_elements:
        return None
    tokens = document.spl_product_data_elements[0].split()
    if not tokens:
        return None
    return tokens[0].lower()


class LabelMatcher:
    """Resolves a brand's freshest effective date from its search results."""

    def is_match(self, brand_name: str, document: LabelDocument) -> bool:
        token = leading_token(document)
        return token is not None and token == brand_name.lower()

    def latest_effective_date(
        self,
        brand_name: str,
        documents: Sequence[LabelDocument],
    ) -> Optional[date]:
        """
        Return the most recent effective date among matching documents.

        Documents with no data elements are skipped with a warning.

        Returns:
            The maximum effective date, or None if nothing matched.

        Raises:
            DateFormatError: If a matching document's effective_time is not YYYYMMDD.
        """
        latest: Optional[date] = None
        matched = 0

        for document in documents:
            if not document.spl_product_data_elements:
                logger.warning(
                    f"Skipping FDA label with empty spl_product_data_elements for {brand_name} "
                    f"(set_id={document.set_id})"
                )
                continue

            if not self.is_match(brand_name, document):
                continue

            matched += 1
            effective = parse_label_date(document.effective_time, source=brand_name)
            if latest is None or effective > latest:
                latest = effective

        logger.debug(f"{brand_name}: {matched}/{len(documents)} label(s) matched")
        return latest

    def resolve(
        self,
        brand_name: str,
        documents: Sequence[LabelDocument],
        url: Optional[str] = None,
    ) -> date:
        """
        Like latest_effective_date, but an unmatched brand is a hard failure.

        Raises:
            UnmatchedBrandError: If no document matched the brand.
            DateFormatError: If a matching document has a malformed date.
        """
        latest = self.latest_effective_date(brand_name, documents)
        if latest is None:
            raise UnmatchedBrandError(
                f"No brand-matching FDA label found for brand name: {brand_name}",
                brand_name=brand_name,
                documents_seen=len(documents),
                url=url,
            )
        return latest
