"""Input normalisation: clamp every numeric input to its documented range.

Out-of-range input is never rejected. Each numeric field is clamped to the
``(min, max)`` of ``INPUT_BOUNDS`` and missing or unparsable values fall back
to the documented default, so a half-edited form still produces a projection.
"""

import logging
import math
from dataclasses import replace
from typing import Any, Optional

from .household import FilingStatus, HouseholdTaxContext
from .lookups import FEDERAL_STATES, DEFAULT_STATE_CODE, HORIZON_BOUNDS, INPUT_BOUNDS
from .property import FinancingType, LoanTranche, PropertyInputs

logger = logging.getLogger(__name__)


_PROPERTY_NUMERIC_FIELDS = (
    "purchase_price",
    "notary_rate",
    "broker_rate",
    "depreciation_rate",
    "land_value",
    "building_value",
    "maintenance_cost",
    "furniture_value",
    "down_payment",
    "monthly_rent",
    "vacancy_rate",
    "property_tax",
    "management_fee",
    "maintenance_reserve",
    "insurance",
    "appreciation_rate",
    "rent_increase_rate",
)


def ensure_valid_number(
    value: Any,
    min_value: float = -1e9,
    max_value: float = 1e9,
    default: float = 0.0,
) -> float:
    """Coerce a value to a finite float within [min_value, max_value].

    Args:
        value: Raw input (number, numeric string, None, ...).
        min_value: Lower bound.
        max_value: Upper bound.
        default: Returned for None, NaN, infinities and unparsable input.

    Returns:
        Clamped float.
    """
    if value is None or isinstance(value, bool):
        return float(default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(number) or math.isinf(number):
        return float(default)
    return max(min_value, min(max_value, number))


def clamp_input(field_name: str, value: Any) -> float:
    """Clamp a named input using its entry in INPUT_BOUNDS."""
    min_value, max_value, default = INPUT_BOUNDS[field_name]
    clamped = ensure_valid_number(value, min_value, max_value, default)
    if clamped != value:
        logger.debug("Input %s=%r normalised to %r", field_name, value, clamped)
    return clamped


def _normalize_tranche(tranche: Optional[LoanTranche]) -> LoanTranche:
    if tranche is None:
        return LoanTranche(0.0, 0.0, 0.0)
    return LoanTranche(
        amount=ensure_valid_number(tranche.amount, *INPUT_BOUNDS["loan_amount"][:2], 0.0),
        interest_rate=clamp_input("interest_rate", tranche.interest_rate),
        amortization_rate=clamp_input("amortization_rate", tranche.amortization_rate),
    )


def _normalize_optional(field_name: str, value: Any) -> Optional[float]:
    # Unusable optional values stay unset instead of taking the bound default
    if math.isnan(ensure_valid_number(value, default=math.nan)):
        if value is not None:
            logger.debug("Input %s=%r is unusable, left unset", field_name, value)
        return None
    return clamp_input(field_name, value)


def normalize_property_inputs(inputs: PropertyInputs) -> PropertyInputs:
    """Return a copy of the inputs with every numeric field clamped.

    Args:
        inputs: Raw property inputs.

    Returns:
        New PropertyInputs; the argument is left untouched.
    """
    changes = {name: clamp_input(name, getattr(inputs, name)) for name in _PROPERTY_NUMERIC_FIELDS}

    changes["maintenance_distribution_years"] = int(
        round(clamp_input("maintenance_distribution_years", inputs.maintenance_distribution_years))
    )

    state_code = (inputs.state_code or "").strip().upper()
    changes["state_code"] = state_code if state_code in FEDERAL_STATES else DEFAULT_STATE_CODE
    changes["transfer_tax_rate"] = _normalize_optional("transfer_tax_rate", inputs.transfer_tax_rate)

    try:
        changes["financing_type"] = FinancingType(inputs.financing_type)
    except ValueError:
        changes["financing_type"] = FinancingType.LOAN

    changes["loan_1"] = _normalize_tranche(inputs.loan_1)
    use_second = bool(inputs.use_second_loan) and inputs.loan_2 is not None
    changes["use_second_loan"] = use_second
    changes["loan_2"] = _normalize_tranche(inputs.loan_2) if use_second else None

    changes["current_market_value"] = _normalize_optional(
        "current_market_value", inputs.current_market_value
    )
    changes["current_debt_value"] = _normalize_optional(
        "current_debt_value", inputs.current_debt_value
    )

    return replace(inputs, **changes)


def normalize_tax_context(context: HouseholdTaxContext) -> HouseholdTaxContext:
    """Return a copy of the tax context with income and church tax rate clamped."""
    try:
        status = FilingStatus(context.filing_status)
    except ValueError:
        status = FilingStatus.SINGLE

    return replace(
        context,
        annual_income=clamp_input("annual_income", context.annual_income),
        filing_status=status,
        has_church_tax=bool(context.has_church_tax),
        church_tax_rate=_normalize_optional("church_tax_rate", context.church_tax_rate),
    )


def normalize_horizon(years: Any) -> int:
    """Clamp the projection horizon to whole years within HORIZON_BOUNDS."""
    low, high = HORIZON_BOUNDS
    return int(round(ensure_valid_number(years, low, high, 10)))
