"""Reconcile a projection with authoritative current market value and debt.

When the user supplies the property's current market value and/or the
outstanding loan balance, the projected ``property_value`` and
``loan_balance`` are replaced from year 1 on. Every dependent field (equity,
cash flow before tax, taxable income, household tax, tax savings, cash flow
after tax) is then rebuilt for every year, and the summary's final-year
fields are re-derived from the rebuilt records.
"""

import logging
from typing import List, Optional, Sequence

from ..models.household import HouseholdTaxContext
from ..models.lookups import DEFAULT_INCOME_TAX_SCHEDULE, IncomeTaxSchedule
from ..models.property import FinancingType, LoanTranche, PropertyInputs
from .cashflow import (
    ProjectionResult,
    Property,
    SimulationResult,
    YearRecord,
    rebuild_year_record,
    summarize_final_year,
)
from .debt import LoanYear, amortize_from_balance, sum_loan_years

logger = logging.getLogger(__name__)


def market_value_override(inputs: PropertyInputs) -> Optional[float]:
    """Current market value if the override is active, else None.

    Zero or negative values are ignored.
    """
    value = inputs.current_market_value
    if inputs.use_current_market_value and value is not None and value > 0:
        return value
    return None


def debt_override(inputs: PropertyInputs) -> Optional[float]:
    """Current outstanding debt if the override is active, else None.

    Cash purchases carry no loan, so a debt override is ignored for them.
    """
    if inputs.financing_type == FinancingType.CASH:
        return None
    if inputs.use_current_debt_value and inputs.current_debt_value is not None:
        return inputs.current_debt_value
    return None


def appreciate_from(value: float, appreciation_rate: float, years: int) -> List[float]:
    """Value per year compounding from ``value`` in year 1."""
    growth = 1 + appreciation_rate / 100
    return [value * growth ** (year - 1) for year in range(1, years + 1)]


def reamortize_from_balance(
    tranches: Sequence[LoanTranche],
    opening_balance: float,
    years: int,
) -> List[LoanYear]:
    """Run the original annuities forward from an authoritative balance.

    The balance is split across the tranches in proportion to their original
    amounts; each share is amortized with its tranche's original interest rate
    and fixed annuity, and the results are summed per year.

    Without any tranche amount the annuity is derived from the balance itself
    using the first tranche's interest and amortization rates.
    """
    tranches = list(tranches)
    total_amount = sum(t.amount for t in tranches)

    if total_amount <= 0:
        rates = tranches[0] if tranches else LoanTranche(0.0, 0.0, 0.0)
        annuity = opening_balance * (rates.interest_rate + rates.amortization_rate) / 100
        return amortize_from_balance(opening_balance, rates.interest_rate, annuity, years)

    schedules = [
        amortize_from_balance(
            opening_balance * t.amount / total_amount,
            t.interest_rate,
            t.annuity,
            years,
        )
        for t in tranches
    ]
    return sum_loan_years(schedules, years)


def _loan_year_of(record: YearRecord) -> LoanYear:
    return LoanYear(
        year=record.year,
        interest=record.interest,
        principal=record.principal,
        payment=record.payment,
        balance=record.loan_balance,
    )


def reconcile_overrides(
    prop: Property,
    year_records: Sequence[YearRecord],
    result: SimulationResult,
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> ProjectionResult:
    """Apply market value and debt overrides and rebuild every dependent field.

    Property value override: year 1 equals the override, later years compound
    from it at the configured appreciation rate.

    Debt override: the amortization is re-run from the override balance with
    the original fixed annuity. Once the balance reaches zero all later
    interest, principal and payment are zero.

    The full dependency chain is recomputed for every year in one pass, even
    when only one driver changed. Input records are not modified; a new list
    is returned.

    Args:
        prop: Property the records were projected for.
        year_records: Projected records, one per year.
        result: Projection summary.
        context: Household tax context the records were projected with.
        schedule: Income tax tariff.

    Returns:
        ProjectionResult with rebuilt records and re-derived summary.
    """
    inputs = prop.inputs
    years = len(year_records)
    market_value = market_value_override(inputs)
    debt = debt_override(inputs)

    if market_value is not None:
        logger.debug("%s: market value override %.2f", inputs.name, market_value)
        values = appreciate_from(market_value, inputs.appreciation_rate, years)
    else:
        values = [record.property_value for record in year_records]

    if debt is not None:
        logger.debug("%s: debt override %.2f", inputs.name, debt)
        loan_years = reamortize_from_balance(inputs.loan_tranches, debt, years)
    else:
        loan_years = [_loan_year_of(record) for record in year_records]

    reconciled = [
        rebuild_year_record(
            record,
            property_value=values[index],
            loan_year=loan_years[index],
            context=context,
            schedule=schedule,
        )
        for index, record in enumerate(year_records)
    ]

    return ProjectionResult(
        result=summarize_final_year(result, reconciled),
        year_records=reconciled,
        prop=prop,
        input_warnings=list(prop.purchase.input_warnings),
    )
