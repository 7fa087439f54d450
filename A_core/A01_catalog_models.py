# A_core/A01_catalog_models.py
"""
Domain models for the product catalog and the openFDA label search.

Provides Pydantic models for:
- Catalog records (Product, SavingsProgram, EligibilityCriteria)
- openFDA label documents and the search response envelope
- LookupResult: brand name -> freshest matching label date

Catalog models are permissive: empty strings and unknown
categories load fine so the validation engine can report them with a
proper rule violation instead of a pydantic parse error.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# -------------------------
# Catalog records
# -------------------------


class EligibilityCriteria(BaseModel):
    """Who a savings program is open to."""

    commercial_insurance: Optional[bool] = None
    medicare: Optional[bool] = None
    medicaid: Optional[bool] = None
    uninsured: Optional[bool] = None
    notes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SavingsProgram(BaseModel):
    """One savings / patient-assistance offer attached to a product."""

    category: str = ""
    description: str = ""
    phone: Optional[str] = None
    link: Optional[str] = None
    eligibility: Optional[EligibilityCriteria] = None

    model_config = ConfigDict(frozen=True)


class Product(BaseModel):
    """
    One catalog entry.

    Only ``fda_label_needs_update`` is ever mutated after loading, and only
    by the reconciler.
    """

    ingredient_name: str = ""
    brand_name: str = ""
    medicine_type: str = ""
    administration_route: str = ""
    dose_frequency: str = ""
    savings: List[SavingsProgram] = Field(default_factory=list)
    fda_label_source: Optional[str] = None
    fda_label_updated: Optional[str] = None  # YYYY-MM-DD
    fda_label_needs_update: bool = False
    order: Optional[int] = None

    model_config = ConfigDict(validate_assignment=True)

    @property
    def display_name(self) -> str:
        """Name used in log and error messages."""
        return self.brand_name.strip() or self.ingredient_name.strip() or "<unnamed product>"


# -------------------------
# openFDA label search
# -------------------------


class OpenFDABlock(BaseModel):
    """Cross-reference block attached to each label. Not used for matching."""

    application_number: List[str] = Field(default_factory=list)
    brand_name: List[str] = Field(default_factory=list)
    generic_name: List[str] = Field(default_factory=list)
    manufacturer_name: List[str] = Field(default_factory=list)
    product_ndc: List[str] = Field(default_factory=list)
    product_type: List[str] = Field(default_factory=list)
    route: List[str] = Field(default_factory=list)
    substance_name: List[str] = Field(default_factory=list)
    rxcui: List[str] = Field(default_factory=list)
    spl_id: List[str] = Field(default_factory=list)
    spl_set_id: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class LabelDocument(BaseModel):
    """
    One label record from the openFDA ``drug/label`` endpoint.

    ``spl_product_data_elements`` lines start with the product name,
    which is what the matcher compares against the brand.
    """

    spl_product_data_elements: List[str] = Field(default_factory=list)
    effective_time: str = ""  # YYYYMMDD
    set_id: Optional[str] = None
    id: Optional[str] = None
    version: Optional[str] = None
    openfda: OpenFDABlock = Field(default_factory=OpenFDABlock)

    model_config = ConfigDict(extra="ignore")


class ResultsMeta(BaseModel):
    skip: int = 0
    limit: int = 0
    total: int = 0


class SearchMeta(BaseModel):
    disclaimer: Optional[str] = None
    last_updated: Optional[str] = None
    results: ResultsMeta = Field(default_factory=ResultsMeta)

    model_config = ConfigDict(extra="ignore")


class LabelSearchResponse(BaseModel):
    """Response envelope of a label search. ``results`` is required."""

    meta: SearchMeta = Field(default_factory=SearchMeta)
    results: List[LabelDocument]

    model_config = ConfigDict(extra="ignore")


# Brand name -> most recent matching effective date. A brand is present only
# if at least one document matched it.
LookupResult = Dict[str, date]
