# I_catalog/I01_catalog_loader.py
"""
Catalog directory loading and annotated catalog export.

Each product lives in its own JSON file in the catalog directory. Files are
read in sorted name order, then products are ordered by their optional
``order`` key (products without one keep their relative order and go last).

Example:
    >>> products = load_catalog(Path("catalog"))
    >>> write_catalog(products, Path("public/catalog.json"))
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from A_core.A00_logging import get_logger
from A_core.A01_catalog_models import Product
from A_core.A12_exceptions import CatalogLoadError

logger = get_logger(__name__)


def catalog_files(directory: Union[str, Path]) -> List[Path]:
    """JSON files directly inside ``directory`` (``.json`` suffix, any case), sorted by name."""
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise CatalogLoadError(f"Failed reading catalog directory: {e}", file_path=str(directory)) from e

    return [
        p for p in entries
        if p.is_file() and len(p.name) > len(".json") and p.name.lower().endswith(".json")
    ]


def load_product(path: Path) -> Product:
    """Parse one catalog file."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogLoadError(f"Failed reading file: {e}", file_path=str(path)) from e

    try:
        return Product.model_validate_json(content)
    except PydanticValidationError as e:
        raise CatalogLoadError(
            f"Failed parsing JSON: {e.error_count()} error(s)", file_path=str(path)
        ) from e


def load_catalog(directory: Union[str, Path]) -> List[Product]:
    """Load and order every product in the catalog directory."""
    files = catalog_files(directory)
    logger.info(f"Found {len(files)} JSON file(s) in {directory}")

    products = [load_product(path) for path in files]
    # sorted() is stable, so ties and unordered products keep file order
    return sorted(products, key=lambda p: (p.order is None, p.order or 0))


def write_catalog(products: Sequence[Product], output_path: Union[str, Path]) -> Path:
    """Write the annotated catalog as a JSON array for the renderer."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = [p.model_dump(mode="json", exclude_none=True) for p in products]
    output_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    logger.info(f"Wrote {len(products)} product(s) to {output_path}")
    return output_path
