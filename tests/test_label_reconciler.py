# tests/test_label_reconciler.py
"""Tests for H_pipeline/H01_label_reconciler.py - Label recency reconciliation."""

import threading
from datetime import date
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from A_core.A01_catalog_models import LabelDocument
from A_core.A12_exceptions import (
    APIError,
    DataIntegrityError,
    DateFormatError,
    LookupCanceledError,
    UnmatchedBrandError,
)
from B_lookup.B01_fda_label_client import FDALabelClient
from H_pipeline.H01_label_reconciler import LabelReconciler
from Z_utils.Z01_api_client import RateLimiter


def stub_client(results: Dict[str, List[LabelDocument]]) -> MagicMock:
    """FDALabelClient stand-in answering search_labels from a dict."""
    client = MagicMock(spec=FDALabelClient)
    client.rate_limiter = RateLimiter(interval_seconds=0)
    client.query_url.side_effect = lambda brand: f"https://api.fda.gov/drug/label.json?search={brand}&limit=30"

    def search(brand_name, cancel_event=None):
        value = results[brand_name]
        if isinstance(value, Exception):
            raise value
        return value

    client.search_labels.side_effect = search
    return client


def labels(label_factory, brand: str, *dates: str) -> List[LabelDocument]:
    return [
        LabelDocument.model_validate(label_factory(f"{brand} injection", d, f"{brand}-{i}"))
        for i, d in enumerate(dates)
    ]


class TestEligibility:

    def test_excluded_routes_default(self, sample_product, sample_device):
        reconciler = LabelReconciler(stub_client({}))
        assert reconciler.is_eligible(sample_product)
        assert not reconciler.is_eligible(sample_device)

    def test_automatic_applicator_excluded(self, product_factory):
        reconciler = LabelReconciler(stub_client({}))
        assert not reconciler.is_eligible(product_factory(administration_route="Automatic Applicator"))

    def test_custom_excluded_routes(self, sample_product, sample_device):
        reconciler = LabelReconciler(stub_client({}), excluded_routes=["Subcutaneous Injection"])
        assert not reconciler.is_eligible(sample_product)
        assert reconciler.is_eligible(sample_device)

    def test_eligible_products_keeps_order(self, product_factory, sample_device):
        reconciler = LabelReconciler(stub_client({}))
        a = product_factory(brand_name="Ozempic")
        b = product_factory(brand_name="Mounjaro")
        assert reconciler.eligible_products([a, sample_device, b]) == [a, b]

    @pytest.mark.parametrize("brand_name", ["", "   "])
    def test_blank_brand_rejected_before_lookup(self, product_factory, brand_name):
        client = stub_client({})
        product = product_factory(brand_name=brand_name)

        with pytest.raises(DataIntegrityError, match="semaglutide"):
            LabelReconciler(client).reconcile([product])

        client.search_labels.assert_not_called()

    def test_blank_brand_on_excluded_route_ignored(self, sample_device):
        sample_device.brand_name = ""
        assert LabelReconciler(stub_client({})).eligible_products([sample_device]) == []


class TestAnnotate:

    @pytest.mark.parametrize(
        "recorded, latest, expected",
        [
            ("2024-01-01", date(2024, 6, 15), True),
            ("2024-01-01", date(2023, 12, 1), False),
            ("2024-06-15", date(2024, 6, 15), False),
        ],
    )
    def test_flag_only_when_strictly_newer(self, product_factory, recorded, latest, expected):
        product = product_factory(fda_label_updated=recorded)
        reconciler = LabelReconciler(stub_client({}))

        flagged = reconciler.annotate([product], {"Ozempic": latest})

        assert product.fda_label_needs_update is expected
        assert flagged == int(expected)

    def test_excluded_products_untouched(self, sample_device):
        reconciler = LabelReconciler(stub_client({}))
        assert reconciler.annotate([sample_device], {}) == 0
        assert sample_device.fda_label_needs_update is False

    def test_missing_recency(self, sample_product):
        reconciler = LabelReconciler(stub_client({}))
        with pytest.raises(DataIntegrityError, match="Ozempic"):
            reconciler.annotate([sample_product], {})

    @pytest.mark.parametrize("recorded", [None, "01/06/2024", "2024-02-30"])
    def test_bad_recorded_date(self, product_factory, recorded):
        product = product_factory(fda_label_updated=recorded)
        reconciler = LabelReconciler(stub_client({}))
        with pytest.raises(DateFormatError):
            reconciler.annotate([product], {"Ozempic": date(2024, 6, 15)})

    def test_existing_flag_never_cleared(self, product_factory):
        product = product_factory(fda_label_needs_update=True, fda_label_updated="2024-06-15")
        LabelReconciler(stub_client({})).annotate([product], {"Ozempic": date(2024, 1, 1)})
        assert product.fda_label_needs_update is True


class TestReconcile:

    def test_end_to_end(self, product_factory, sample_device, label_factory):
        ozempic = product_factory(brand_name="Ozempic", fda_label_updated="2024-01-01")
        mounjaro = product_factory(brand_name="Mounjaro", fda_label_updated="2024-05-01")
        client = stub_client({
            "Ozempic": labels(label_factory, "Ozempic", "20231201", "20240615"),
            "Mounjaro": labels(label_factory, "Mounjaro", "20240301"),
        })

        products = [ozempic, sample_device, mounjaro]
        result = LabelReconciler(client).reconcile(products)

        assert result is products
        assert ozempic.fda_label_needs_update is True
        assert mounjaro.fda_label_needs_update is False
        assert sample_device.fda_label_needs_update is False

        searched = [c.args[0] for c in client.search_labels.call_args_list]
        assert searched == ["Ozempic", "Mounjaro"]

    def test_duplicate_brands_looked_up_per_occurrence(self, product_factory, label_factory):
        client = stub_client({"Ozempic": labels(label_factory, "Ozempic", "20240615")})
        products = [product_factory(), product_factory(dose_frequency="Once daily")]

        LabelReconciler(client).reconcile(products)

        assert client.search_labels.call_count == 2
        assert all(p.fda_label_needs_update for p in products)

    def test_cancel_event_passed_through(self, sample_product, label_factory):
        client = stub_client({"Ozempic": labels(label_factory, "Ozempic", "20240101")})
        cancel = threading.Event()
        LabelReconciler(client).reconcile([sample_product], cancel_event=cancel)
        client.search_labels.assert_called_once_with("Ozempic", cancel_event=cancel)

    def test_lookup_failure_leaves_flags_untouched(self, product_factory, label_factory):
        """A failure on a later brand aborts before any product is annotated."""
        ozempic = product_factory(brand_name="Ozempic", fda_label_updated="2024-01-01")
        mounjaro = product_factory(brand_name="Mounjaro")
        client = stub_client({
            "Ozempic": labels(label_factory, "Ozempic", "20240615"),
            "Mounjaro": APIError("FDA API returned non-200 status (500)", status_code=500),
        })

        with pytest.raises(APIError):
            LabelReconciler(client).reconcile([ozempic, mounjaro])

        assert ozempic.fda_label_needs_update is False
        assert mounjaro.fda_label_needs_update is False

    def test_unmatched_brand_aborts(self, sample_product, label_factory):
        client = stub_client({"Ozempic": labels(label_factory, "Wegovy", "20240615")})
        with pytest.raises(UnmatchedBrandError) as exc_info:
            LabelReconciler(client).reconcile([sample_product])
        assert exc_info.value.url.endswith("search=Ozempic&limit=30")

    def test_canceled(self, sample_product):
        client = stub_client({"Ozempic": LookupCanceledError("Lookup canceled")})
        with pytest.raises(LookupCanceledError):
            LabelReconciler(client).reconcile([sample_product])
        assert sample_product.fda_label_needs_update is False

    def test_only_devices(self, sample_device):
        client = stub_client({})
        LabelReconciler(client).reconcile([sample_device])
        client.search_labels.assert_not_called()


class TestWithRealClient:
    """Reconciler driving FDALabelClient over a mocked session."""

    def test_request_urls(self, fda_client, mock_session, mock_response, label_payload, label_factory, product_factory):
        mock_session.request.side_effect = [
            mock_response(json_data=label_payload(label_factory("Ozempic injection", "20240615"))),
            mock_response(json_data=label_payload(label_factory("Jardiance tablet", "20230101"))),
        ]
        products = [
            product_factory(brand_name="Ozempic"),
            product_factory(brand_name="Jardiance", fda_label_updated="2023-06-01"),
        ]

        LabelReconciler(fda_client).reconcile(products)

        urls = [c.args[1] for c in mock_session.request.call_args_list]
        assert urls == [
            "https://api.fda.gov/drug/label.json?search=Ozempic&limit=30",
            "https://api.fda.gov/drug/label.json?search=Jardiance&limit=30",
        ]
        assert [p.fda_label_needs_update for p in products] == [True, False]
