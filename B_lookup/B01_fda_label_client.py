# B_lookup/B01_fda_label_client.py
"""
openFDA drug label search client.

Issues exactly one keyword search per brand name against the
``drug/label.json`` endpoint and returns the raw label documents.
Matching those documents to the brand is C_matching's job.

API Reference: https://open.fda.gov/apis/drug/label/

Failure modes (all raise, none are retried):
    - LookupCanceledError: canceled while waiting for the shared limiter
    - APIError: connection error, non-200 status, malformed envelope
    - EmptyResultError: the search returned zero documents
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from A_core.A00_logging import get_logger
from A_core.A01_catalog_models import LabelDocument, LabelSearchResponse
from A_core.A12_exceptions import APIError, ConfigurationError, EmptyResultError
from G_config.G01_config_keys import LookupConfig
from Z_utils.Z01_api_client import BaseAPIClient, RateLimiter

logger = get_logger(__name__)


class FDALabelClient(BaseAPIClient):
    """
    openFDA label search client.

    Rate limit: one request per ``rate_limit_interval_seconds`` (default 2s),
    enforced by a limiter shared across the whole batch.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ):
        config = dict(config or {})
        config.setdefault(LookupConfig.USER_AGENT.value, LookupConfig.USER_AGENT.default)

        super().__init__(
            config=config,
            service_name="FDA API",
            default_base_url=LookupConfig.BASE_URL.default,
            default_interval_seconds=LookupConfig.RATE_LIMIT_INTERVAL.default,
            rate_limiter=rate_limiter,
            session=session,
        )

        self.page_limit = config.get(LookupConfig.PAGE_LIMIT.value, LookupConfig.PAGE_LIMIT.default)
        if not isinstance(self.page_limit, int) or self.page_limit < 1:
            raise ConfigurationError(
                "page_limit must be a positive integer",
                config_key=LookupConfig.PAGE_LIMIT.value,
                expected_type="int >= 1",
                actual_value=self.page_limit,
            )

    def query_params(self, brand_name: str) -> Dict[str, Any]:
        """Search parameters for one brand."""
        return {"search": brand_name, "limit": self.page_limit}

    def query_url(self, brand_name: str) -> str:
        """Exact request URL for one brand, as used in error messages."""
        return self.build_url(self.base_url, self.query_params(brand_name))

    def search_labels(
        self,
        brand_name: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[LabelDocument]:
        """
        Fetch the label documents returned by a keyword search for ``brand_name``.

        Args:
            brand_name: Non-empty brand name used as the search term.
            cancel_event: Set by the caller to abort while waiting for the limiter.

        Returns:
            Label documents in upstream order (at least one).
        """
        if not brand_name or not brand_name.strip():
            raise ValueError("brand_name must be a non-empty string")

        url = self.query_url(brand_name)
        payload = self._get_json(
            self.base_url,
            params=self.query_params(brand_name),
            cancel_event=cancel_event,
            brand_name=brand_name,
        )

        try:
            envelope = LabelSearchResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise APIError(
                f"Malformed FDA API response envelope: {e.error_count()} error(s)",
                brand_name=brand_name,
                url=url,
            ) from e

        logger.debug(
            f"{brand_name}: {len(envelope.results)} of {envelope.meta.results.total} label(s), "
            f"dataset last updated {envelope.meta.last_updated}"
        )

        if not envelope.results:
            raise EmptyResultError(
                f"No FDA label results found for brand name: {brand_name}",
                brand_name=brand_name,
                url=url,
            )

        return envelope.results
