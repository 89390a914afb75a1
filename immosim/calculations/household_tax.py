"""Tax effect of property income on the household's base income."""

from dataclasses import dataclass

from ..models.household import HouseholdTaxContext
from ..models.lookups import DEFAULT_INCOME_TAX_SCHEDULE, IncomeTaxSchedule
from .income_tax import compute_church_tax, compute_income_tax


@dataclass(frozen=True)
class HouseholdTaxAssessment:
    """Household tax before and after adding property income."""

    previous_income: float
    previous_tax: float
    previous_church_tax: float
    new_total_income: float
    new_tax: float
    new_church_tax: float
    tax_savings: float  # Negative when the property raises the tax bill


def assess_household_tax(
    taxable_income_contribution: float,
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> HouseholdTaxAssessment:
    """Compare household tax with and without the property income.

    The tax is computed once on ``max(0, base income + contribution)``.
    For a portfolio the contribution must already be the sum over all
    properties; summing per-property savings instead would ignore the
    progression of the tariff.

    Args:
        taxable_income_contribution: Property result for tax purposes
            (negative for losses).
        context: Base income, filing status and church tax settings.
        schedule: Income tax tariff.

    Returns:
        HouseholdTaxAssessment with both tax positions and the difference.
    """
    base_income = context.annual_income
    church_rate = context.effective_church_tax_rate

    previous_tax = compute_income_tax(base_income, context.filing_status, schedule)
    previous_church_tax = compute_church_tax(previous_tax, context.has_church_tax, church_rate)

    new_total_income = max(0.0, base_income + taxable_income_contribution)
    new_tax = compute_income_tax(new_total_income, context.filing_status, schedule)
    new_church_tax = compute_church_tax(new_tax, context.has_church_tax, church_rate)

    tax_savings = (previous_tax - new_tax) + (previous_church_tax - new_church_tax)

    return HouseholdTaxAssessment(
        previous_income=base_income,
        previous_tax=previous_tax,
        previous_church_tax=previous_church_tax,
        new_total_income=new_total_income,
        new_tax=new_tax,
        new_church_tax=new_church_tax,
        tax_savings=tax_savings,
    )
