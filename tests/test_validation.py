"""Tests for input models, lookups and normalisation."""

import math
import warnings
from dataclasses import replace

import pytest

from immosim.models.household import FilingStatus, HouseholdTaxContext
from immosim.models.lookups import FEDERAL_STATES, get_federal_state, get_transfer_tax_rate
from immosim.models.property import FinancingType, LoanTranche, PropertyInputs
from immosim.models.validation import (
    ensure_valid_number,
    normalize_horizon,
    normalize_property_inputs,
    normalize_tax_context,
)


class TestLookups:
    """Tests for the federal state table."""

    def test_sixteen_states(self):
        """All federal states are listed."""
        assert len(FEDERAL_STATES) == 16

    def test_transfer_tax_rates(self):
        """Spot-check transfer tax rates."""
        assert get_transfer_tax_rate("BY") == 3.5
        assert get_transfer_tax_rate("NW") == 6.5
        assert get_transfer_tax_rate("HH") == 4.5

    def test_unknown_state_falls_back(self):
        """Unknown codes use the default state."""
        assert get_federal_state("XX").code == "BY"
        assert get_federal_state(None).code == "BY"


class TestEnsureValidNumber:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize("raw", [None, math.nan, math.inf, "abc", True])
    def test_unusable_gives_default(self, raw):
        """None, NaN, infinities, garbage and booleans fall back."""
        assert ensure_valid_number(raw, 0, 100, 42) == 42

    def test_clamped(self):
        """Values are clamped into the range."""
        assert ensure_valid_number(-5, 0, 100, 1) == 0
        assert ensure_valid_number(500, 0, 100, 1) == 100
        assert ensure_valid_number("12.5", 0, 100, 1) == 12.5


class TestNormalizeProperty:
    """Tests for property input normalisation."""

    def test_returns_new_instance(self, example_inputs):
        """The argument is not modified."""
        raw = replace(example_inputs, vacancy_rate=150)
        clean = normalize_property_inputs(raw)
        assert raw.vacancy_rate == 150
        assert clean.vacancy_rate == 100

    def test_consistent_inputs_unchanged(self, example_inputs):
        """In-range inputs pass through unchanged."""
        assert normalize_property_inputs(example_inputs) == example_inputs

    def test_distribution_years_rounded(self, example_inputs):
        """Maintenance distribution is a whole number of years in 1-5."""
        assert normalize_property_inputs(
            replace(example_inputs, maintenance_distribution_years=2.6)
        ).maintenance_distribution_years == 3
        assert normalize_property_inputs(
            replace(example_inputs, maintenance_distribution_years=9)
        ).maintenance_distribution_years == 5

    def test_unknown_state(self, example_inputs):
        """Unknown state codes become BY."""
        assert normalize_property_inputs(replace(example_inputs, state_code="ZZ")).state_code == "BY"

    def test_invalid_financing_type(self, example_inputs):
        """Unknown financing types default to a loan."""
        clean = normalize_property_inputs(replace(example_inputs, financing_type="lease"))
        assert clean.financing_type == FinancingType.LOAN

    def test_loan_rates_clamped(self, example_inputs):
        """Tranche rates are clamped to their bounds."""
        clean = normalize_property_inputs(
            replace(example_inputs, loan_1=LoanTranche(291_500, 45.0, -2.0))
        )
        assert clean.loan_1.interest_rate == 20
        assert clean.loan_1.amortization_rate == 0

    def test_second_loan_dropped_without_flag(self, two_tranche_inputs):
        """loan_2 is removed when use_second_loan is false."""
        clean = normalize_property_inputs(replace(two_tranche_inputs, use_second_loan=False))
        assert clean.loan_2 is None


class TestNormalizeContext:
    """Tests for tax context normalisation."""

    def test_income_clamped(self):
        """Negative base income becomes zero."""
        assert normalize_tax_context(HouseholdTaxContext(annual_income=-1)).annual_income == 0

    def test_status_string(self):
        """String filing status is converted."""
        ctx = normalize_tax_context(HouseholdTaxContext(filing_status="married"))
        assert ctx.filing_status == FilingStatus.MARRIED

    def test_horizon(self):
        """Horizon is clamped and rounded."""
        assert normalize_horizon(None) == 10
        assert normalize_horizon(7.4) == 7
        assert normalize_horizon(100) == 50


class TestPropertyInputs:
    """Tests for derived properties and warnings of PropertyInputs."""

    def test_cash_has_no_tranches(self, cash_inputs):
        """Cash purchases ignore configured loans."""
        assert cash_inputs.loan_tranches == []
        assert cash_inputs.total_loan_amount == 0

    def test_allocation_difference(self, example_inputs):
        """Reference allocation adds up to the price."""
        assert example_inputs.allocation_difference == 0

    def test_override_flag_without_value_warned(self, example_inputs):
        """A set override flag without a value is reported."""
        inputs = replace(example_inputs, use_current_debt_value=True)
        assert any("current_debt_value is missing" in w for w in inputs.validate())

    def test_from_legacy_deprecated(self):
        """The legacy single-loan triple maps to tranche 1 with a warning."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            inputs = PropertyInputs.from_legacy(200_000, 3.0, 2.0, monthly_rent=900)
        assert any(issubclass(w.category, DeprecationWarning) for w in caught)
        assert inputs.loan_1 == LoanTranche(200_000, 3.0, 2.0)
        assert inputs.monthly_rent == 900
