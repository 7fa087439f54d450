# H_pipeline/H01_label_reconciler.py
"""
FDA label recency reconciliation.

Drives the lookup for every eligible product and flags the ones whose
official label changed after the catalog's recorded date.

Steps:
    1. Eligibility: products on an excluded administration route (devices
       without an FDA drug label) are skipped and never touched.
    2. Lookup: one paced upstream search per eligible brand, in catalog
       order, through a single shared rate limiter.
    3. Annotate: ``fda_label_needs_update`` is set when the freshest matching
       label date is strictly after ``fda_label_updated``.

Any failure aborts the whole pass. Flags already set on earlier products
are kept; nothing is rolled back.

Example:
    >>> reconciler = LabelReconciler(FDALabelClient(config.lookup_client_config))
    >>> reconciler.reconcile(products)
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Sequence

from A_core.A00_logging import LogContext, get_logger
from A_core.A01_catalog_models import LookupResult, Product
from A_core.A12_exceptions import DataIntegrityError
from B_lookup.B01_fda_label_client import FDALabelClient
from C_matching.C01_label_matcher import LabelMatcher
from G_config.G01_config_keys import ReconciliationConfigKey
from Z_utils.Z03_date_utils import parse_catalog_date

logger = get_logger(__name__)


class LabelReconciler:
    """
    Coordinates label lookup, matching and annotation for a catalog.

    Attributes:
        client: openFDA label search client (owns the shared rate limiter).
        matcher: Brand/label matcher.
        excluded_routes: Administration routes that are never looked up.
    """

    def __init__(
        self,
        client: FDALabelClient,
        matcher: Optional[LabelMatcher] = None,
        excluded_routes: Optional[Iterable[str]] = None,
    ):
        self.client = client
        self.matcher = matcher or LabelMatcher()
        if excluded_routes is None:
            excluded_routes = ReconciliationConfigKey.EXCLUDED_ROUTES.default
        self.excluded_routes = frozenset(excluded_routes)

    def is_eligible(self, product: Product) -> bool:
        return product.administration_route not in self.excluded_routes

    def eligible_products(self, products: Sequence[Product]) -> List[Product]:
        """
        Products that have an FDA drug label, in catalog order.

        Raises:
            DataIntegrityError: An eligible product has a blank brand name.
        """
        eligible = []
        for product in products:
            if not self.is_eligible(product):
                logger.info(f"Skipping label update for: {product.brand_name}")
                continue
            if not product.brand_name.strip():
                raise DataIntegrityError(
                    f"Cannot look up FDA label without a brand name: {product.display_name}",
                    context={"product": product.display_name},
                )
            eligible.append(product)
        return eligible

    def lookup_recency(
        self,
        brand_names: Sequence[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> LookupResult:
        """
        Resolve the freshest matching label date for each brand.

        Brands are looked up sequentially, once per occurrence, and every
        request waits on the client's shared limiter.

        Raises:
            LabelLookupError: Transport failure, empty search, or cancellation.
            DataIntegrityError: Unmatched brand or malformed effective date.
        """
        interval = self.client.rate_limiter.interval_seconds
        logger.info(f"Starting FDA label recency lookup for {len(brand_names)} brand name(s)")
        logger.info(f"Network will take at least {interval * max(len(brand_names) - 1, 0):.0f}s for rate limiting")

        results: LookupResult = {}
        for brand_name in brand_names:
            documents = self.client.search_labels(brand_name, cancel_event=cancel_event)
            results[brand_name] = self.matcher.resolve(
                brand_name, documents, url=self.client.query_url(brand_name)
            )
            logger.info(f"Checked FDA label for {brand_name}: latest {results[brand_name].isoformat()}")
        return results

    def annotate(self, products: Sequence[Product], recency: LookupResult) -> int:
        """
        Set ``fda_label_needs_update`` on eligible products with a newer label.

        Returns:
            Number of products flagged.

        Raises:
            DataIntegrityError: Missing recency for a brand or malformed recorded date.
        """
        flagged = 0
        for product in products:
            if not self.is_eligible(product):
                continue

            latest = recency.get(product.brand_name)
            if latest is None:
                raise DataIntegrityError(
                    f"No FDA label recency found for brand name: {product.brand_name}",
                    context={"brand": product.brand_name},
                )

            recorded = parse_catalog_date(product.fda_label_updated, source=product.brand_name)
            if latest > recorded:
                product.fda_label_needs_update = True
                flagged += 1
                logger.info(
                    f"FDA label for {product.brand_name} changed since last recorded date: "
                    f"{latest.isoformat()} (was {recorded.isoformat()})"
                )
        return flagged

    def reconcile(
        self,
        products: List[Product],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Product]:
        """
        Run the full pass and return the same list with flags updated in place.
        """
        eligible = self.eligible_products(products)
        brand_names = [p.brand_name for p in eligible]

        with LogContext(logger, "FDA label recency lookup"):
            recency = self.lookup_recency(brand_names, cancel_event=cancel_event)

        flagged = self.annotate(eligible, recency)
        logger.info(f"{flagged} of {len(eligible)} product(s) need an FDA label update")
        return products
