# Z_utils/Z03_date_utils.py
"""
Strict calendar date parsing.

Two layouts are in play and are never interchanged:
    - openFDA effective_time: YYYYMMDD
    - catalog fda_label_updated: YYYY-MM-DD

Both parsers reject anything that is not exactly the layout (no single-digit
months, no time component, no surrounding whitespace).
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from A_core.A12_exceptions import DateFormatError

LABEL_DATE_FORMAT = "%Y%m%d"
CATALOG_DATE_FORMAT = "%Y-%m-%d"

_LABEL_DATE_RE = re.compile(r"\d{8}")
_CATALOG_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _parse(value: Optional[str], pattern: re.Pattern, fmt: str, layout: str, source: Optional[str]) -> date:
    if not isinstance(value, str) or not pattern.fullmatch(value):
        raise DateFormatError(
            f"Date does not match {layout}", value=value, expected_format=layout, source=source
        )
    try:
        return datetime.strptime(value, fmt).date()
    except ValueError as e:
        raise DateFormatError(
            f"Invalid calendar date: {e}", value=value, expected_format=layout, source=source
        ) from e


def parse_label_date(value: Optional[str], source: Optional[str] = None) -> date:
    """Parse an openFDA effective_time (YYYYMMDD)."""
    return _parse(value, _LABEL_DATE_RE, LABEL_DATE_FORMAT, "YYYYMMDD", source)


def parse_catalog_date(value: Optional[str], source: Optional[str] = None) -> date:
    """Parse a catalog fda_label_updated value (YYYY-MM-DD)."""
    return _parse(value, _CATALOG_DATE_RE, CATALOG_DATE_FORMAT, "YYYY-MM-DD", source)
