# A_core/A02_enumerations.py
"""
Closed-set enumerations for catalog fields.

An Enumeration is an immutable, ordered set of permitted strings. The
validator receives the sets it needs at construction, so nothing here is
process-wide mutable state.

Example:
    >>> routes = Enumeration("administration_route", ["Oral Tablet", "Subcutaneous Injection"])
    >>> routes.contains("Oral Tablet")
    True
    >>> routes.contains_ci("oral tablet")
    True
    >>> routes.check("Nasal Spray") is None
    False
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from A_core.A12_exceptions import InvalidEnumValueError


@dataclass(frozen=True)
class Enumeration:
    """Ordered set of permitted values with exact and case-insensitive tests."""

    name: str
    values: Tuple[str, ...]
    _folded: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __init__(self, name: str, values: Iterable[str]):
        ordered = tuple(dict.fromkeys(values))
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "values", ordered)
        object.__setattr__(self, "_folded", frozenset(v.lower() for v in ordered))

    def contains(self, value: str) -> bool:
        """Case-sensitive membership test."""
        return value in self.values

    def contains_ci(self, value: str) -> bool:
        """Case-insensitive membership test."""
        return value.lower() in self._folded

    def check(self, value: str, case_sensitive: bool = True) -> Optional[InvalidEnumValueError]:
        """
        Check membership and describe the failure instead of raising.

        Returns:
            None if ``value`` is permitted, otherwise an InvalidEnumValueError
            naming the value and the allowed set.
        """
        ok = self.contains(value) if case_sensitive else self.contains_ci(value)
        if ok:
            return None
        return InvalidEnumValueError(
            f"{value!r} is not a valid {self.name}; must be one of {list(self.values)}",
            value=value,
            allowed=self.values,
            field_name=self.name,
        )

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class CatalogEnumerations:
    """The three closed sets the catalog validator enforces."""

    medicine_types: Enumeration
    administration_routes: Enumeration
    savings_categories: Enumeration
