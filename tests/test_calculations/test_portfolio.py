"""Tests for portfolio aggregation with household-level tax."""

from dataclasses import fields, replace

import pytest

from immosim.calculations.cashflow import Property, YearRecord, project_cashflow
from immosim.calculations.household_tax import assess_household_tax
from immosim.calculations.portfolio import (
    ADDITIVE_FIELDS,
    DERIVED_FIELDS,
    HOUSEHOLD_TAX_FIELDS,
    NON_ADDITIVE_FIELDS,
    aggregate_portfolio,
)


class TestFieldClassification:
    """Every record field has exactly one aggregation rule."""

    def test_groups_cover_all_fields(self):
        """Union of the groups is the set of YearRecord fields."""
        groups = ADDITIVE_FIELDS | HOUSEHOLD_TAX_FIELDS | DERIVED_FIELDS | NON_ADDITIVE_FIELDS
        assert groups == {f.name for f in fields(YearRecord)}

    def test_groups_disjoint(self):
        """No field is in two groups."""
        total = (
            len(ADDITIVE_FIELDS) + len(HOUSEHOLD_TAX_FIELDS)
            + len(DERIVED_FIELDS) + len(NON_ADDITIVE_FIELDS)
        )
        assert total == len(fields(YearRecord))

    def test_household_fields_not_additive(self):
        """Household tax fields, year and vacancy rate are never summed."""
        for name in ("year", "vacancy_rate", "previous_income", "previous_tax",
                     "previous_church_tax", "new_total_income", "new_tax",
                     "new_church_tax", "tax_savings"):
            assert name not in ADDITIVE_FIELDS


class TestAggregation:
    """Merging records of several properties."""

    def test_additive_fields_summed(self, example_inputs, cash_inputs, tax_context):
        """Rent, debt service, balance and value are sums over properties."""
        portfolio = aggregate_portfolio([example_inputs, cash_inputs], tax_context)
        a = project_cashflow(Property.from_inputs(example_inputs), tax_context)
        b = project_cashflow(Property.from_inputs(cash_inputs), tax_context)
        for combined, ra, rb in zip(portfolio.year_records, a.year_records, b.year_records):
            assert combined.rent == pytest.approx(ra.rent + rb.rent)
            assert combined.payment == pytest.approx(ra.payment + rb.payment)
            assert combined.loan_balance == pytest.approx(ra.loan_balance + rb.loan_balance)
            assert combined.property_value == pytest.approx(ra.property_value + rb.property_value)
            assert combined.taxable_income == pytest.approx(ra.taxable_income + rb.taxable_income)

    def test_base_income_not_summed(self, example_inputs, cash_inputs, tax_context):
        """Base income appears once, not once per property."""
        portfolio = aggregate_portfolio([example_inputs, cash_inputs], tax_context)
        for r in portfolio.year_records:
            assert r.previous_income == 70_000
            assert r.year in range(1, 11)

    def test_tax_computed_once_on_combined_income(self, example_inputs, cash_inputs, tax_context):
        """Household tax is assessed on base income + summed taxable income."""
        portfolio = aggregate_portfolio([example_inputs, cash_inputs], tax_context)
        for r in portfolio.year_records:
            assessment = assess_household_tax(r.taxable_income, tax_context)
            assert r.new_total_income == assessment.new_total_income
            assert r.new_tax == assessment.new_tax
            assert r.tax_savings == assessment.tax_savings

    def test_identities(self, example_inputs, cash_inputs, tax_context):
        """Combined records satisfy the cash flow and equity identities exactly."""
        portfolio = aggregate_portfolio([example_inputs, cash_inputs], tax_context)
        for r in portfolio.year_records:
            assert r.cashflow == r.cashflow_before_tax + r.tax_savings
            assert r.equity == r.property_value - r.loan_balance

    def test_vacancy_rate_weighted(self, example_inputs, tax_context):
        """Vacancy rate is the rent-weighted mean, not a sum."""
        other = replace(example_inputs, name="Other", vacancy_rate=3.0)
        portfolio = aggregate_portfolio([example_inputs, other], tax_context)
        assert portfolio.year_records[0].vacancy_rate == pytest.approx(3.0)

    def test_summary(self, example_inputs, cash_inputs, tax_context):
        """Summary sums acquisition figures and re-derives final fields."""
        portfolio = aggregate_portfolio([example_inputs, cash_inputs], tax_context)
        parts = [p.result for p in portfolio.properties]
        r = portfolio.result
        assert r.total_cost == pytest.approx(sum(p.total_cost for p in parts))
        assert r.initial_equity == pytest.approx(sum(p.initial_equity for p in parts))
        assert r.loan_amount == pytest.approx(291_500)
        last = portfolio.year_records[-1]
        assert r.final_equity == last.equity
        assert r.remaining_loan == last.loan_balance
        assert r.monthly_cashflow == portfolio.year_records[0].cashflow / 12

    def test_warnings_prefixed_with_name(self, example_inputs, tax_context):
        """Per-property warnings carry the property name."""
        portfolio = aggregate_portfolio([example_inputs], tax_context)
        assert portfolio.input_warnings
        assert all(w.startswith("Reference apartment: ") for w in portfolio.input_warnings)


class TestNonLinearity:
    """Progressive tax makes combined savings differ from the sum."""

    def test_combined_savings_differ_from_sum(self, band_crossing_context):
        """Two profitable units crossing the 42 % band: combined != S1 + S2."""
        from tests.fixtures.test_inputs import get_profitable_inputs

        a = get_profitable_inputs("Unit A")
        b = get_profitable_inputs("Unit B")

        s1 = project_cashflow(Property.from_inputs(a), band_crossing_context).get_year(1).tax_savings
        s2 = project_cashflow(Property.from_inputs(b), band_crossing_context).get_year(1).tax_savings
        combined = aggregate_portfolio([a, b], band_crossing_context).get_year(1).tax_savings

        # Base income sits below the 42 % band; each unit alone crosses it
        y1 = project_cashflow(Property.from_inputs(a), band_crossing_context).get_year(1)
        assert y1.previous_income < 68_480 < y1.new_total_income

        assert combined != pytest.approx(s1 + s2, abs=1)
        # Higher marginal rates on the combined income: more tax than the sum suggests
        assert combined < s1 + s2

    def test_combined_then_taxed(self, band_crossing_context):
        """Combined savings equal the tax effect of the summed taxable income."""
        from tests.fixtures.test_inputs import get_profitable_inputs

        a = get_profitable_inputs("Unit A")
        b = get_profitable_inputs("Unit B")
        ta = project_cashflow(Property.from_inputs(a), band_crossing_context).get_year(1).taxable_income
        tb = project_cashflow(Property.from_inputs(b), band_crossing_context).get_year(1).taxable_income

        combined = aggregate_portfolio([a, b], band_crossing_context).get_year(1)
        expected = assess_household_tax(ta + tb, band_crossing_context)
        assert combined.tax_savings == expected.tax_savings


class TestFreshRecompute:
    """Properties are always re-derived from their inputs."""

    def test_accepts_property_objects(self, example_property, tax_context):
        """Property objects and raw inputs give the same result."""
        from_property = aggregate_portfolio([example_property], tax_context)
        from_inputs = aggregate_portfolio([example_property.inputs], tax_context)
        assert from_property.year_records == from_inputs.year_records

    def test_single_property_matches_projection(self, example_inputs, tax_context):
        """A one-property portfolio equals the property's own projection."""
        portfolio = aggregate_portfolio([example_inputs], tax_context)
        single = project_cashflow(Property.from_inputs(example_inputs), tax_context)
        for combined, own in zip(portfolio.year_records, single.year_records):
            assert combined.tax_savings == own.tax_savings
            assert combined.cashflow == pytest.approx(own.cashflow)

    def test_overrides_applied(self, example_inputs, tax_context):
        """Per-property value overrides flow into the portfolio."""
        inputs = replace(example_inputs, use_current_market_value=True, current_market_value=400_000)
        portfolio = aggregate_portfolio([inputs], tax_context)
        assert portfolio.year_records[0].property_value == pytest.approx(400_000)


class TestEmptyPortfolio:
    """A portfolio without properties."""

    def test_empty(self, tax_context):
        """No records and an all-zero summary."""
        portfolio = aggregate_portfolio([], tax_context)
        assert portfolio.year_records == []
        assert portfolio.result.total_cost == 0
        assert portfolio.result.final_equity == 0
        assert portfolio.property_count == 0
