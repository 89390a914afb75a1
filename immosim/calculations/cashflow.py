"""Year-by-year cash flow projection for a single property.

This module produces one YearRecord per simulated year, including:
- Rent (compounding) and fixed operating costs (held at year-1 values)
- Debt service from the precomputed amortization schedule
- Depreciation (AfA) of building and furniture, maintenance deduction
- Taxable income contribution and its effect on the household tax bill
- Cash flow before financing, before tax and after tax
- Property value (appreciation of the real-estate part) and equity
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional

from ..models.household import HouseholdTaxContext
from ..models.lookups import (
    DEFAULT_HORIZON_YEARS,
    DEFAULT_INCOME_TAX_SCHEDULE,
    FURNITURE_DEPRECIATION_RATE,
    IncomeTaxSchedule,
)
from ..models.property import FinancingType, PropertyInputs
from .debt import CombinedLoanSchedule, LoanYear, amortize_tranches
from .household_tax import assess_household_tax
from .ongoing import OngoingCosts, aggregate_ongoing_costs
from .purchase import PurchaseBreakdown, allocate_purchase


@dataclass(frozen=True)
class Property:
    """Property inputs together with their derived purchase and ongoing figures."""

    inputs: PropertyInputs
    purchase: PurchaseBreakdown
    ongoing: OngoingCosts

    @classmethod
    def from_inputs(cls, inputs: PropertyInputs) -> "Property":
        """Derive purchase breakdown and ongoing costs from the inputs."""
        return cls(
            inputs=inputs,
            purchase=allocate_purchase(inputs),
            ongoing=aggregate_ongoing_costs(inputs),
        )


@dataclass(frozen=True)
class YearRecord:
    """Complete projection for one year (ordinal 1..N)."""

    year: int

    # Operations
    rent: float  # Effective rent after vacancy
    ongoing_costs: float
    cashflow_before_financing: float  # rent - ongoing_costs

    # Financing
    interest: float
    principal: float
    payment: float  # Total debt service
    loan_balance: float  # Restschuld at year end

    # Deductions
    building_depreciation: float
    furniture_depreciation: float
    maintenance_deduction: float
    total_depreciation: float
    first_year_deductible_costs: float
    taxable_income: float  # Contribution to the household's taxable income

    # Household tax (not additive across properties)
    previous_income: float
    previous_tax: float
    previous_church_tax: float
    new_total_income: float
    new_tax: float
    new_church_tax: float
    tax_savings: float

    # Cash flow
    cashflow_before_tax: float
    cashflow: float  # After tax: cashflow_before_tax + tax_savings

    # Value and equity
    property_value: float
    equity: float  # property_value - loan_balance
    initial_equity: float

    # Fixed cost components, repeated for export
    vacancy_rate: float
    property_tax: float
    management_fee: float
    maintenance_reserve: float
    insurance: float


@dataclass(frozen=True)
class SimulationResult:
    """Summary of a projection."""

    total_cost: float
    down_payment: float
    loan_amount: float
    annuity: float
    monthly_payment: float
    monthly_cashflow: float  # Year-1 cash flow after tax / 12
    final_property_value: float
    remaining_loan: float
    final_equity: float
    initial_equity: float


@dataclass(frozen=True)
class ProjectionResult:
    """Projection output: summary plus one record per year."""

    result: SimulationResult
    year_records: List[YearRecord]
    prop: Optional[Property] = None  # Source property, None for merged views
    input_warnings: List[str] = field(default_factory=list)

    @property
    def years(self) -> int:
        return len(self.year_records)

    def get_year(self, year: int) -> YearRecord:
        """Get the record for a specific year (1-indexed)."""
        if year < 1 or year > len(self.year_records):
            raise IndexError(f"Year {year} out of range")
        return self.year_records[year - 1]


def depreciation_schedule(base: float, rate: float, years: int) -> List[float]:
    """Straight-line depreciation per year, stopping once the base is used up.

    Args:
        base: Depreciable amount.
        rate: Annual rate in percent.
        years: Number of years.

    Returns:
        Depreciation amount per year.
    """
    annual = max(0.0, base) * rate / 100
    remaining = max(0.0, base)
    schedule = []
    for _ in range(years):
        amount = min(annual, remaining)
        remaining -= amount
        schedule.append(amount)
    return schedule


def build_year_record(
    *,
    year: int,
    rent: float,
    property_tax: float,
    management_fee: float,
    maintenance_reserve: float,
    insurance: float,
    vacancy_rate: float,
    loan_year: LoanYear,
    building_depreciation: float,
    furniture_depreciation: float,
    maintenance_deduction: float,
    first_year_deductible_costs: float,
    property_value: float,
    initial_equity: float,
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> YearRecord:
    """Build one YearRecord from its drivers, deriving every dependent field.

    Dependent fields are computed in order: operating cash flow, cash flow
    before tax, taxable income, household tax, tax savings, cash flow after
    tax and equity. Both the projector and the override reconciler build
    records through this function only.
    """
    ongoing_costs = property_tax + management_fee + maintenance_reserve + insurance
    cashflow_before_financing = rent - ongoing_costs
    cashflow_before_tax = cashflow_before_financing - loan_year.payment

    # Principal repayment is not deductible, depreciation and maintenance are
    taxable_income = (
        cashflow_before_tax
        + loan_year.principal
        - building_depreciation
        - furniture_depreciation
        - maintenance_deduction
        - first_year_deductible_costs
    )

    tax = assess_household_tax(taxable_income, context, schedule)

    return YearRecord(
        year=year,
        rent=rent,
        ongoing_costs=ongoing_costs,
        cashflow_before_financing=cashflow_before_financing,
        interest=loan_year.interest,
        principal=loan_year.principal,
        payment=loan_year.payment,
        loan_balance=loan_year.balance,
        building_depreciation=building_depreciation,
        furniture_depreciation=furniture_depreciation,
        maintenance_deduction=maintenance_deduction,
        total_depreciation=(
            building_depreciation
            + furniture_depreciation
            + maintenance_deduction
            + first_year_deductible_costs
        ),
        first_year_deductible_costs=first_year_deductible_costs,
        taxable_income=taxable_income,
        previous_income=tax.previous_income,
        previous_tax=tax.previous_tax,
        previous_church_tax=tax.previous_church_tax,
        new_total_income=tax.new_total_income,
        new_tax=tax.new_tax,
        new_church_tax=tax.new_church_tax,
        tax_savings=tax.tax_savings,
        cashflow_before_tax=cashflow_before_tax,
        cashflow=cashflow_before_tax + tax.tax_savings,
        property_value=property_value,
        equity=property_value - loan_year.balance,
        initial_equity=initial_equity,
        vacancy_rate=vacancy_rate,
        property_tax=property_tax,
        management_fee=management_fee,
        maintenance_reserve=maintenance_reserve,
        insurance=insurance,
    )


def rebuild_year_record(
    record: YearRecord,
    *,
    property_value: float,
    loan_year: LoanYear,
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> YearRecord:
    """Rebuild a record with a new property value and debt service.

    All other drivers are taken from the existing record; every dependent
    field is recomputed. The original record is not modified.
    """
    return build_year_record(
        year=record.year,
        rent=record.rent,
        property_tax=record.property_tax,
        management_fee=record.management_fee,
        maintenance_reserve=record.maintenance_reserve,
        insurance=record.insurance,
        vacancy_rate=record.vacancy_rate,
        loan_year=loan_year,
        building_depreciation=record.building_depreciation,
        furniture_depreciation=record.furniture_depreciation,
        maintenance_deduction=record.maintenance_deduction,
        first_year_deductible_costs=record.first_year_deductible_costs,
        property_value=property_value,
        initial_equity=record.initial_equity,
        context=context,
        schedule=schedule,
    )


def summarize_final_year(result: SimulationResult, year_records: List[YearRecord]) -> SimulationResult:
    """Re-derive the year-dependent summary fields from the records."""
    if not year_records:
        return result
    first, last = year_records[0], year_records[-1]
    return replace(
        result,
        monthly_cashflow=first.cashflow / 12,
        final_property_value=last.property_value,
        remaining_loan=last.loan_balance,
        final_equity=last.equity,
    )


def project_cashflow(
    prop: Property,
    context: HouseholdTaxContext,
    years: int = DEFAULT_HORIZON_YEARS,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> ProjectionResult:
    """Project cash flow, tax effect and equity for one property.

    Three dynamics run on independent schedules:
    - Rent compounds by (1 + rent_increase_rate) each year.
    - Fixed operating costs stay at their year-1 values for all years.
    - Debt service comes from the precomputed amortization schedule.

    Property value compounds by (1 + appreciation_rate)^(year - 1) off the
    real-estate part of the price (land + building + maintenance); furniture
    never adds to value or equity.

    Args:
        prop: Property with derived purchase breakdown and ongoing costs.
        context: Household tax context.
        years: Projection horizon in years.
        schedule: Income tax tariff.

    Returns:
        ProjectionResult with SimulationResult and one YearRecord per year.
    """
    years = max(1, int(years))
    inputs = prop.inputs
    purchase = prop.purchase
    ongoing = prop.ongoing
    is_loan = inputs.financing_type == FinancingType.LOAN

    loans: CombinedLoanSchedule = amortize_tranches(inputs.loan_tranches, years)

    building_afa = depreciation_schedule(
        purchase.total_building_value, inputs.depreciation_rate, years
    )
    furniture_afa = depreciation_schedule(
        purchase.furniture_value, FURNITURE_DEPRECIATION_RATE, years
    )

    initial_equity = inputs.down_payment if is_loan else purchase.total_cost
    rent_growth = 1 + inputs.rent_increase_rate / 100
    appreciation = 1 + inputs.appreciation_rate / 100

    year_records: List[YearRecord] = []
    rent = ongoing.effective_rent

    for year in range(1, years + 1):
        if year > 1:
            rent *= rent_growth

        maintenance = (
            purchase.annual_maintenance
            if year <= purchase.maintenance_distribution_years
            else 0.0
        )

        year_records.append(build_year_record(
            year=year,
            rent=rent,
            property_tax=ongoing.property_tax,
            management_fee=ongoing.management_fee,
            maintenance_reserve=ongoing.maintenance_reserve,
            insurance=ongoing.insurance,
            vacancy_rate=ongoing.vacancy_rate,
            loan_year=loans.years[year - 1],
            building_depreciation=building_afa[year - 1],
            furniture_depreciation=furniture_afa[year - 1],
            maintenance_deduction=maintenance,
            first_year_deductible_costs=purchase.first_year_deductible_costs if year == 1 else 0.0,
            property_value=purchase.immobile_value * appreciation ** (year - 1),
            initial_equity=initial_equity,
            context=context,
            schedule=schedule,
        ))

    result = SimulationResult(
        total_cost=purchase.total_cost,
        down_payment=inputs.down_payment if is_loan else purchase.total_cost,
        loan_amount=loans.loan_amount,
        annuity=loans.annuity,
        monthly_payment=loans.annuity / 12,
        monthly_cashflow=0.0,
        final_property_value=0.0,
        remaining_loan=0.0,
        final_equity=0.0,
        initial_equity=initial_equity,
    )

    return ProjectionResult(
        result=summarize_final_year(result, year_records),
        year_records=year_records,
        prop=prop,
        input_warnings=list(purchase.input_warnings),
    )
