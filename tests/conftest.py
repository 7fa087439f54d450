# tests/conftest.py
"""
Pytest configuration and fixtures for label reconciliation tests.

Provides:
- Zero-interval lookup configuration (no real pacing in tests)
- openFDA label search payload factories
- Mocked HTTP session / response helpers (no network)
- Sample catalog products and an on-disk catalog directory

Usage:
    # In test files, fixtures are automatically available:
    def test_search(fda_client, mock_response, label_payload):
        fda_client._session.request.return_value = mock_response(json_data=label_payload(...))
"""

import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from A_core.A01_catalog_models import LabelDocument, Product  # noqa: E402
from A_core.A02_enumerations import CatalogEnumerations, Enumeration  # noqa: E402


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def lookup_config() -> Dict[str, Any]:
    """Lookup client configuration with pacing disabled."""
    return {
        "base_url": "https://api.fda.gov/drug/label.json",
        "page_limit": 30,
        "rate_limit_interval_seconds": 0,
        "timeout_seconds": 5,
        "user_agent": "pugnare.health/1.0",
    }


@pytest.fixture
def catalog_enums() -> CatalogEnumerations:
    """Small closed sets mirroring G_config/data/catalog_enums.yaml."""
    return CatalogEnumerations(
        medicine_types=Enumeration("medicine_type", ["GLP-1 Agonist", "Insulin", "Insulin Pump"]),
        administration_routes=Enumeration(
            "administration_route",
            ["Subcutaneous Injection", "Oral Tablet", "Tubeless Insulin Pump"],
        ),
        savings_categories=Enumeration(
            "savings_category", ["Savings Card", "Patient Assistance Program"]
        ),
    )


@pytest.fixture
def fixed_today() -> Callable[[], date]:
    """Deterministic 'today' for date-in-the-future checks."""
    return lambda: date(2025, 1, 1)


# =============================================================================
# MOCK API RESPONSES
# =============================================================================

def make_label(
    first_line: Optional[str],
    effective_time: str = "20240101",
    set_id: str = "set-0001",
) -> Dict[str, Any]:
    """One raw openFDA label document."""
    elements: List[str] = [] if first_line is None else [first_line]
    return {
        "spl_product_data_elements": elements,
        "effective_time": effective_time,
        "set_id": set_id,
        "id": f"id-{set_id}",
        "version": "3",
        "openfda": {"brand_name": ["IGNORED"], "route": ["SUBCUTANEOUS"]},
    }


@pytest.fixture
def label_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for a label search response envelope."""

    def _payload(*documents: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "meta": {
                "disclaimer": "Do not rely on openFDA to make decisions regarding medical care.",
                "last_updated": "2025-01-01",
                "results": {"skip": 0, "limit": 30, "total": len(documents)},
            },
            "results": list(documents),
        }

    return _payload


@pytest.fixture
def mock_response() -> Callable[..., MagicMock]:
    """Factory for a requests.Response stand-in."""

    def _response(
        status_code: int = 200,
        json_data: Any = None,
        text: str = "",
        json_error: Optional[Exception] = None,
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = json_data
        return response

    return _response


@pytest.fixture
def mock_session() -> MagicMock:
    """requests.Session stand-in with a real headers dict."""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def fda_client(lookup_config: Dict[str, Any], mock_session: MagicMock):
    """FDALabelClient wired to a mocked session."""
    from B_lookup.B01_fda_label_client import FDALabelClient

    client = FDALabelClient(lookup_config, session=mock_session)
    yield client
    client.close()


# =============================================================================
# SAMPLE DATA
# =============================================================================

def make_product(**overrides: Any) -> Product:
    """A catalog product that passes every validation rule."""
    data: Dict[str, Any] = {
        "ingredient_name": "semaglutide",
        "brand_name": "Ozempic",
        "medicine_type": "GLP-1 Agonist",
        "administration_route": "Subcutaneous Injection",
        "dose_frequency": "Once weekly",
        "savings": [
            {
                "category": "Savings Card",
                "description": "Pay as little as $25 for a 1-, 2-, or 3-month prescription.",
                "phone": "1-877-304-6855",
                "link": "https://www.ozempic.com/savings-and-resources/save-on-ozempic.html",
            }
        ],
        "fda_label_source": "https://www.accessdata.fda.gov/drugsatfda_docs/label/2023/209637s020s021lbl.pdf",
        "fda_label_updated": "2024-01-01",
    }
    data.update(overrides)
    return Product.model_validate(data)


@pytest.fixture
def product_factory() -> Callable[..., Product]:
    """Factory for valid products with field overrides."""
    return make_product


@pytest.fixture
def label_factory() -> Callable[..., Dict[str, Any]]:
    """Factory for raw openFDA label documents."""
    return make_label


@pytest.fixture
def sample_product() -> Product:
    return make_product()


@pytest.fixture
def sample_device() -> Product:
    """An insulin pump; never has an FDA drug label."""
    return make_product(
        ingredient_name="insulin delivery system",
        brand_name="Omnipod",
        medicine_type="Insulin Pump",
        administration_route="Tubeless Insulin Pump",
        fda_label_source=None,
        fda_label_updated=None,
    )


@pytest.fixture
def sample_documents() -> List[LabelDocument]:
    """Search results for 'Ozempic': two matches plus keyword-only hits."""
    raw = [
        make_label("Ozempic semaglutide injection, solution", "20240615", "a"),
        make_label("OZEMPIC semaglutide injection, solution", "20231201", "b"),
        make_label("Wegovy semaglutide injection", "20250101", "c"),
        make_label("Semaglutide tablets, compare to Ozempic", "20250201", "d"),
    ]
    return [LabelDocument.model_validate(d) for d in raw]


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """A catalog directory with two ordered products and one unordered."""
    directory = tmp_path / "catalog"
    directory.mkdir()

    products = {
        "b_mounjaro.json": make_product(
            ingredient_name="tirzepatide", brand_name="Mounjaro", order=2
        ),
        "c_ozempic.json": make_product(order=1),
        "a_rybelsus.json": make_product(
            brand_name="Rybelsus", administration_route="Oral Tablet", dose_frequency="Once daily"
        ),
    }
    for filename, product in products.items():
        (directory / filename).write_text(
            json.dumps(product.model_dump(mode="json", exclude_none=True)), encoding="utf-8"
        )
    (directory / "README.md").write_text("not a product", encoding="utf-8")
    return directory


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests requiring external services")
