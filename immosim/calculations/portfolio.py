"""Portfolio aggregation across several properties of one household.

Each property is projected on its own, then the year records are merged
index by index. Additive fields are summed; household tax is computed once
on the base income plus the SUM of all taxable income contributions. Summing
per-property tax savings instead would be wrong because the tariff is
progressive.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import List, Sequence, Union

from ..models.household import HouseholdTaxContext
from ..models.lookups import (
    DEFAULT_HORIZON_YEARS,
    DEFAULT_INCOME_TAX_SCHEDULE,
    IncomeTaxSchedule,
)
from ..models.property import PropertyInputs
from .cashflow import (
    ProjectionResult,
    Property,
    SimulationResult,
    YearRecord,
    project_cashflow,
    summarize_final_year,
)
from .household_tax import assess_household_tax
from .overrides import reconcile_overrides

logger = logging.getLogger(__name__)


# Every YearRecord field belongs to exactly one of these groups.
# A new field that is not listed here fails at import time.

ADDITIVE_FIELDS = frozenset({
    "rent",
    "ongoing_costs",
    "cashflow_before_financing",
    "interest",
    "principal",
    "payment",
    "loan_balance",
    "building_depreciation",
    "furniture_depreciation",
    "maintenance_deduction",
    "total_depreciation",
    "first_year_deductible_costs",
    "taxable_income",
    "cashflow_before_tax",
    "property_value",
    "initial_equity",
    "property_tax",
    "management_fee",
    "maintenance_reserve",
    "insurance",
})

# Recomputed once on the combined taxable income
HOUSEHOLD_TAX_FIELDS = frozenset({
    "previous_income",
    "previous_tax",
    "previous_church_tax",
    "new_total_income",
    "new_tax",
    "new_church_tax",
    "tax_savings",
})

# Derived from the combined additive and household fields
DERIVED_FIELDS = frozenset({
    "cashflow",
    "equity",
})

NON_ADDITIVE_FIELDS = frozenset({
    "year",
    "vacancy_rate",  # Rent-weighted mean
})


def _check_field_classification() -> None:
    groups = [ADDITIVE_FIELDS, HOUSEHOLD_TAX_FIELDS, DERIVED_FIELDS, NON_ADDITIVE_FIELDS]
    record_fields = {f.name for f in fields(YearRecord)}
    classified = set().union(*groups)

    unclassified = record_fields - classified
    if unclassified:
        raise TypeError(f"YearRecord fields without aggregation rule: {sorted(unclassified)}")
    unknown = classified - record_fields
    if unknown:
        raise TypeError(f"Aggregation rules for unknown YearRecord fields: {sorted(unknown)}")
    if sum(len(g) for g in groups) != len(classified):
        raise TypeError("YearRecord field aggregation groups overlap")


_check_field_classification()


@dataclass
class PortfolioProjection:
    """Combined projection of all properties in a portfolio."""

    result: SimulationResult
    year_records: List[YearRecord]
    properties: List[ProjectionResult] = field(default_factory=list)
    input_warnings: List[str] = field(default_factory=list)

    @property
    def property_count(self) -> int:
        return len(self.properties)

    def get_year(self, year: int) -> YearRecord:
        """Get the combined record for a specific year (1-indexed)."""
        if year < 1 or year > len(self.year_records):
            raise IndexError(f"Year {year} out of range")
        return self.year_records[year - 1]


def empty_result() -> SimulationResult:
    """Summary of a portfolio without properties."""
    return SimulationResult(
        total_cost=0.0,
        down_payment=0.0,
        loan_amount=0.0,
        annuity=0.0,
        monthly_payment=0.0,
        monthly_cashflow=0.0,
        final_property_value=0.0,
        remaining_loan=0.0,
        final_equity=0.0,
        initial_equity=0.0,
    )


def _weighted_vacancy_rate(records: Sequence[YearRecord]) -> float:
    total_rent = sum(r.rent for r in records)
    if total_rent > 0:
        return sum(r.vacancy_rate * r.rent for r in records) / total_rent
    return sum(r.vacancy_rate for r in records) / len(records)


def merge_year_records(
    records: Sequence[YearRecord],
    context: HouseholdTaxContext,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> YearRecord:
    """Merge the records of one year across properties.

    Args:
        records: One record per property, all for the same year.
        context: Household tax context.
        schedule: Income tax tariff.

    Returns:
        Combined YearRecord with household tax computed once on the summed
        taxable income.
    """
    totals = {name: sum(getattr(r, name) for r in records) for name in ADDITIVE_FIELDS}

    tax = assess_household_tax(totals["taxable_income"], context, schedule)

    return YearRecord(
        year=records[0].year,
        vacancy_rate=_weighted_vacancy_rate(records),
        previous_income=tax.previous_income,
        previous_tax=tax.previous_tax,
        previous_church_tax=tax.previous_church_tax,
        new_total_income=tax.new_total_income,
        new_tax=tax.new_tax,
        new_church_tax=tax.new_church_tax,
        tax_savings=tax.tax_savings,
        cashflow=totals["cashflow_before_tax"] + tax.tax_savings,
        equity=totals["property_value"] - totals["loan_balance"],
        **totals,
    )


def _fresh_property(item: Union[Property, PropertyInputs]) -> Property:
    inputs = item.inputs if isinstance(item, Property) else item
    return Property.from_inputs(inputs)


def aggregate_portfolio(
    properties: Sequence[Union[Property, PropertyInputs]],
    context: HouseholdTaxContext,
    years: int = DEFAULT_HORIZON_YEARS,
    schedule: IncomeTaxSchedule = DEFAULT_INCOME_TAX_SCHEDULE,
) -> PortfolioProjection:
    """Project every property and combine them into one household view.

    Each property is re-derived from its inputs and projected fresh (with
    its value overrides applied) against the given tax context. Cached
    per-property results are never reused since the context may have
    changed.

    Order matters: additive fields are summed first, then household tax is
    computed once on ``base income + sum of taxable income``, and combined
    tax savings and cash flow are derived from that single computation.

    Args:
        properties: Properties or their raw inputs.
        context: Household tax context.
        years: Projection horizon in years.
        schedule: Income tax tariff.

    Returns:
        PortfolioProjection. An empty portfolio gives a zero summary and no
        year records.
    """
    if not properties:
        return PortfolioProjection(result=empty_result(), year_records=[])

    projections: List[ProjectionResult] = []
    warnings_: List[str] = []

    for item in properties:
        prop = _fresh_property(item)
        projected = project_cashflow(prop, context, years, schedule)
        reconciled = reconcile_overrides(
            prop, projected.year_records, projected.result, context, schedule
        )
        projections.append(reconciled)
        warnings_.extend(f"{prop.inputs.name}: {w}" for w in reconciled.input_warnings)

    horizon = len(projections[0].year_records)
    year_records = [
        merge_year_records([p.year_records[index] for p in projections], context, schedule)
        for index in range(horizon)
    ]

    results = [p.result for p in projections]
    combined = SimulationResult(
        total_cost=sum(r.total_cost for r in results),
        down_payment=sum(r.down_payment for r in results),
        loan_amount=sum(r.loan_amount for r in results),
        annuity=sum(r.annuity for r in results),
        monthly_payment=sum(r.monthly_payment for r in results),
        monthly_cashflow=0.0,
        final_property_value=0.0,
        remaining_loan=0.0,
        final_equity=0.0,
        initial_equity=sum(r.initial_equity for r in results),
    )

    logger.debug("Aggregated %d properties over %d years", len(projections), horizon)

    return PortfolioProjection(
        result=summarize_final_year(combined, year_records),
        year_records=year_records,
        properties=projections,
        input_warnings=warnings_,
    )
