"""Progressive German income tax and church tax."""

import math
from dataclasses import dataclass

from ..models.household import FilingStatus, HouseholdTaxContext
from ..models.lookups import DEFAULT_INCOME_TAX_SCHEDULE, IncomeTaxSchedule


@dataclass
class TaxPosition:
    """Tax burden on the household's base income."""

    annual_income: float
    filing_status: FilingStatus
    income_tax: float
    church_tax: float
    average_tax_rate: float  # Percent of income, one decimal


def round_half_up(amount: float) -> float:
    """Round to the nearest whole euro, halves away from zero for positive amounts.

    Non-finite amounts are returned unchanged.
    """
    if not math.isfinite(amount):
        return float(amount)
    return float(math.floor(amount + 0.5))


def income_tax_tariff(
    income: float,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> float:
    """Unrounded tariff amount for one assessed person.

    Args:
        income: Taxable income in EUR. Negative income is taxed as zero.
        schedule: Band boundaries and coefficients.

    Returns:
        Tax amount before rounding (>= 0).
    """
    if income <= schedule.basic_allowance:
        return 0.0

    if income <= schedule.zone1_end:
        y = (income - schedule.basic_allowance) / 10_000
        tax = (schedule.zone1_a * y + schedule.zone1_b) * y
    elif income <= schedule.zone2_end:
        z = (income - schedule.zone1_end) / 10_000
        tax = (schedule.zone2_a * z + schedule.zone2_b) * z + schedule.zone2_c
    elif income <= schedule.zone3_end:
        tax = schedule.zone3_rate * income - schedule.zone3_offset
    else:
        tax = schedule.zone4_rate * income - schedule.zone4_offset

    return max(0.0, tax)


def compute_income_tax(
    income: float,
    status: FilingStatus = FilingStatus.SINGLE,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> float:
    """Calculate income tax for a filing status.

    Married couples use the splitting procedure: the tariff is applied to
    half of the joint income and the result doubled. The final amount is
    rounded to whole euros.

    Args:
        income: Taxable income in EUR (may be negative). NaN is taxed as
            zero; infinite income gives infinite tax.
        status: SINGLE or MARRIED.
        schedule: Tariff to apply.

    Returns:
        Income tax in whole EUR (>= 0).

    Example:
        >>> compute_income_tax(70_000)
        18488.0
    """
    if math.isnan(income):
        return 0.0
    if FilingStatus(status) == FilingStatus.MARRIED:
        tax = 2 * income_tax_tariff(income / 2, schedule)
    else:
        tax = income_tax_tariff(income, schedule)
    return round_half_up(tax)


def compute_church_tax(income_tax: float, enabled: bool, rate: float) -> float:
    """Church tax as a percentage surcharge on income tax.

    Args:
        income_tax: Income tax amount.
        enabled: Whether the household pays church tax.
        rate: Church tax rate in percent (8 or 9 in practice).

    Returns:
        Church tax amount, 0 when not enabled.
    """
    if not enabled:
        return 0.0
    return income_tax * (rate / 100)


def summarize_tax_position(
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> TaxPosition:
    """Income tax, church tax and average rate on the base income."""
    income_tax = compute_income_tax(context.annual_income, context.filing_status, schedule)
    church_tax = compute_church_tax(
        income_tax, context.has_church_tax, context.effective_church_tax_rate
    )
    average_rate = income_tax / context.annual_income * 100 if context.annual_income > 0 else 0.0

    return TaxPosition(
        annual_income=context.annual_income,
        filing_status=FilingStatus(context.filing_status),
        income_tax=income_tax,
        church_tax=church_tax,
        average_tax_rate=round(average_rate, 1),
    )
