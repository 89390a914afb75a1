"""Lookup tables for federal states, income tax tariff, church tax and input bounds."""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class FederalState:
    """German federal state with its real-estate transfer tax rate."""

    code: str
    name: str
    transfer_tax_rate: float  # Grunderwerbsteuer in percent


FEDERAL_STATES: Dict[str, FederalState] = {
    state.code: state
    for state in (
        FederalState("BW", "Baden-Württemberg", 3.5),
        FederalState("BY", "Bayern", 3.5),
        FederalState("BE", "Berlin", 6.0),
        FederalState("BB", "Brandenburg", 6.5),
        FederalState("HB", "Bremen", 5.0),
        FederalState("HH", "Hamburg", 4.5),
        FederalState("HE", "Hessen", 6.0),
        FederalState("MV", "Mecklenburg-Vorpommern", 5.0),
        FederalState("NI", "Niedersachsen", 5.0),
        FederalState("NW", "Nordrhein-Westfalen", 6.5),
        FederalState("RP", "Rheinland-Pfalz", 5.0),
        FederalState("SL", "Saarland", 6.5),
        FederalState("SN", "Sachsen", 3.5),
        FederalState("ST", "Sachsen-Anhalt", 5.0),
        FederalState("SH", "Schleswig-Holstein", 6.5),
        FederalState("TH", "Thüringen", 6.5),
    )
}

DEFAULT_STATE_CODE = "BY"


@dataclass(frozen=True)
class IncomeTaxSchedule:
    """Band boundaries and coefficients of the progressive income tax tariff.

    Zones (all amounts in EUR of taxable income per assessed person):
        0:  income <= basic_allowance                 -> 0
        1:  up to zone1_end   (y = (x - basic_allowance) / 10_000)
            tax = (zone1_a * y + zone1_b) * y
        2:  up to zone2_end   (z = (x - zone1_end) / 10_000)
            tax = (zone2_a * z + zone2_b) * z + zone2_c
        3:  up to zone3_end   tax = zone3_rate * x - zone3_offset
        4:  above             tax = zone4_rate * x - zone4_offset
    """

    year: int
    basic_allowance: float  # Grundfreibetrag
    zone1_end: float
    zone2_end: float
    zone3_end: float
    zone1_a: float
    zone1_b: float
    zone2_a: float
    zone2_b: float
    zone2_c: float
    zone3_rate: float
    zone3_offset: float
    zone4_rate: float
    zone4_offset: float


# §32a EStG, tariff for 2025
INCOME_TAX_2025 = IncomeTaxSchedule(
    year=2025,
    basic_allowance=12_096,
    zone1_end=17_443,
    zone2_end=68_480,
    zone3_end=277_825,
    zone1_a=932.30,
    zone1_b=1_400,
    zone2_a=176.64,
    zone2_b=2_397,
    zone2_c=1_015.13,
    zone3_rate=0.42,
    zone3_offset=10_911.92,
    zone4_rate=0.45,
    zone4_offset=19_246.67,
)

DEFAULT_INCOME_TAX_SCHEDULE = INCOME_TAX_2025


# Church tax in percent of income tax, by state
CHURCH_TAX_RATES: Dict[str, float] = {
    "BW": 8.0,
    "BY": 8.0,
}
DEFAULT_CHURCH_TAX_RATE = 9.0


# Depreciation (AfA) rates in percent per year
DEFAULT_BUILDING_DEPRECIATION_RATE = 2.0
FURNITURE_DEPRECIATION_RATE = 10.0

# Split used for land/building shares when there is nothing to allocate against
DEFAULT_ALLOCATION_SHARES: Dict[str, float] = {
    "land": 0.20,
    "building": 0.80,
}

DEFAULT_HORIZON_YEARS = 10
HORIZON_BOUNDS: Tuple[int, int] = (1, 50)


# (min, max, default) for every numeric input, applied before any calculation
INPUT_BOUNDS: Dict[str, Tuple[float, float, float]] = {
    # Purchase
    "purchase_price": (0, 1e9, 316_500),
    "notary_rate": (0, 10, 1.5),
    "broker_rate": (0, 10, 3.0),
    "transfer_tax_rate": (0, 10, 3.5),
    "depreciation_rate": (0, 10, DEFAULT_BUILDING_DEPRECIATION_RATE),
    "land_value": (0, 1e9, 45_000),
    "building_value": (0, 1e9, 220_000),
    "maintenance_cost": (0, 1e9, 35_000),
    "furniture_value": (0, 1e9, 16_500),
    "maintenance_distribution_years": (1, 5, 1),
    # Financing
    "down_payment": (0, 1e9, 25_000),
    "loan_amount": (0, 1e9, 291_500),
    "interest_rate": (0, 20, 4.0),
    "amortization_rate": (0, 20, 1.5),
    # Ongoing
    "monthly_rent": (0, 1e6, 1_200),
    "vacancy_rate": (0, 100, 3.0),
    "property_tax": (0, 1e6, 500),
    "management_fee": (0, 1e6, 600),
    "maintenance_reserve": (0, 1e6, 600),
    "insurance": (0, 1e6, 300),
    # Projection
    "appreciation_rate": (0, 20, 2.0),
    "rent_increase_rate": (0, 20, 3.0),
    # Current values
    "current_market_value": (0, 1e9, 0),
    "current_debt_value": (0, 1e9, 0),
    # Household
    "annual_income": (0, 1e9, 70_000),
    "church_tax_rate": (0, 15, DEFAULT_CHURCH_TAX_RATE),
}


def get_federal_state(code: str | None) -> FederalState:
    """Get a federal state by its two-letter code, falling back to the default state.

    Args:
        code: State code (e.g., "BY", "NW"). Case-insensitive.

    Returns:
        The matching FederalState, or the default state for unknown codes.
    """
    if code:
        state = FEDERAL_STATES.get(code.strip().upper())
        if state is not None:
            return state
    return FEDERAL_STATES[DEFAULT_STATE_CODE]


def get_transfer_tax_rate(code: str | None) -> float:
    """Transfer tax rate in percent for a state code."""
    return get_federal_state(code).transfer_tax_rate


def get_church_tax_rate(code: str | None) -> float:
    """Church tax rate in percent for a state code, with default fallback."""
    if code:
        return CHURCH_TAX_RATES.get(code.strip().upper(), DEFAULT_CHURCH_TAX_RATE)
    return DEFAULT_CHURCH_TAX_RATE
