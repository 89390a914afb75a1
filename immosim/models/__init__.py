"""Data models for the property simulation engine."""

from .lookups import (
    FederalState,
    IncomeTaxSchedule,
    FEDERAL_STATES,
    INCOME_TAX_2025,
    DEFAULT_INCOME_TAX_SCHEDULE,
    INPUT_BOUNDS,
    DEFAULT_HORIZON_YEARS,
    get_federal_state,
    get_transfer_tax_rate,
    get_church_tax_rate,
)
from .household import (
    FilingStatus,
    HouseholdTaxContext,
)
from .property import (
    FinancingType,
    LoanTranche,
    PropertyInputs,
)
from .validation import (
    ensure_valid_number,
    normalize_property_inputs,
    normalize_tax_context,
    normalize_horizon,
)

__all__ = [
    "FederalState",
    "IncomeTaxSchedule",
    "FEDERAL_STATES",
    "INCOME_TAX_2025",
    "DEFAULT_INCOME_TAX_SCHEDULE",
    "INPUT_BOUNDS",
    "DEFAULT_HORIZON_YEARS",
    "get_federal_state",
    "get_transfer_tax_rate",
    "get_church_tax_rate",
    "FilingStatus",
    "HouseholdTaxContext",
    "FinancingType",
    "LoanTranche",
    "PropertyInputs",
    "ensure_valid_number",
    "normalize_property_inputs",
    "normalize_tax_context",
    "normalize_horizon",
]
