"""Tests for annuity loan amortization."""

import math

import pytest

from immosim.calculations.debt import (
    amortize,
    amortize_from_balance,
    amortize_tranches,
    calculate_principal_portion,
    estimate_payoff_years,
)
from immosim.models.property import LoanTranche


class TestAmortize:
    """Tests for a single annuity loan."""

    def test_reference_loan_year_1(self):
        """291,500 at 4.0 % / 1.5 %: annuity 16,032.50, interest 11,660."""
        s = amortize(291_500, 4.0, 1.5, 10)
        first = s.years[0]
        assert s.annuity == pytest.approx(16_032.5)
        assert first.interest == pytest.approx(11_660)
        assert first.principal == pytest.approx(4_372.5)
        assert first.payment == pytest.approx(16_032.5)
        assert first.balance == pytest.approx(287_127.5)

    def test_annuity_is_fixed(self):
        """Payment stays at the annuity while the loan is outstanding."""
        s = amortize(291_500, 4.0, 1.5, 10)
        for year in s.years:
            assert year.payment == pytest.approx(s.annuity)

    def test_principal_grows_as_interest_falls(self):
        """With a fixed annuity the principal portion increases every year."""
        s = amortize(291_500, 4.0, 1.5, 10)
        for prev, curr in zip(s.years, s.years[1:]):
            assert curr.interest < prev.interest
            assert curr.principal > prev.principal

    def test_one_row_per_year(self):
        """Schedule has exactly one row per projected year."""
        s = amortize(100_000, 3.0, 2.0, 7)
        assert [y.year for y in s.years] == list(range(1, 8))

    def test_zero_principal(self):
        """A zero loan gives an all-zero schedule."""
        s = amortize(0, 4.0, 1.5, 5)
        assert s.annuity == 0
        for year in s.years:
            assert (year.interest, year.principal, year.payment, year.balance) == (0, 0, 0, 0)


class TestPayoff:
    """Tests for the final years of a loan."""

    def test_balance_non_increasing_and_floored(self):
        """Balance never grows and never goes below zero."""
        s = amortize(100_000, 4.0, 20.0, 15)
        balances = [y.balance for y in s.years]
        assert all(b >= 0 for b in balances)
        assert all(curr <= prev for prev, curr in zip(balances, balances[1:]))

    def test_zero_after_payoff(self):
        """Once repaid, interest, principal and payment are zero."""
        s = amortize(100_000, 4.0, 20.0, 15)
        paid_off = [y for y in s.years if y.balance == 0]
        assert paid_off
        first_zero = paid_off[0].year
        for year in s.years[first_zero:]:
            assert (year.interest, year.principal, year.payment) == (0, 0, 0)

    def test_last_principal_settles_balance(self):
        """Principal is clamped to the remaining balance in the final year."""
        assert calculate_principal_portion(24_000, 500, 10_000) == 10_000
        assert calculate_principal_portion(1_000, 2_000, 10_000) == 0


class TestConservation:
    """Total principal never exceeds the loan."""

    @pytest.mark.parametrize("rate,amort,years", [(4.0, 1.5, 10), (3.0, 2.0, 30), (0.0, 5.0, 10)])
    def test_principal_sum_bounded(self, rate, amort, years):
        """Sum of principal stays at or below the original amount."""
        s = amortize(250_000, rate, amort, years)
        assert s.total_principal <= 250_000 + 1e-6
        assert s.total_principal + s.final_balance == pytest.approx(250_000)

    def test_principal_sum_equals_loan_when_repaid(self):
        """Paid off inside the horizon: principal sum equals the loan."""
        s = amortize(100_000, 4.0, 20.0, 15)
        assert s.final_balance == 0
        assert s.total_principal == pytest.approx(100_000, abs=1e-6)


class TestTranches:
    """Tests for combining two tranches."""

    def test_tranches_summed_per_year(self):
        """Combined schedule is the per-year sum of independent schedules."""
        t1 = LoanTranche(200_000, 3.5, 2.0)
        t2 = LoanTranche(91_500, 5.0, 3.0)
        combined = amortize_tranches([t1, t2], 10)
        s1 = amortize(200_000, 3.5, 2.0, 10)
        s2 = amortize(91_500, 5.0, 3.0, 10)
        for c, a, b in zip(combined.years, s1.years, s2.years):
            assert c.interest == pytest.approx(a.interest + b.interest)
            assert c.principal == pytest.approx(a.principal + b.principal)
            assert c.balance == pytest.approx(a.balance + b.balance)

    def test_combined_totals(self):
        """Annuity, loan amount and first-year figures are totals."""
        combined = amortize_tranches(
            [LoanTranche(200_000, 3.5, 2.0), LoanTranche(91_500, 5.0, 3.0)], 10
        )
        assert combined.loan_amount == pytest.approx(291_500)
        assert combined.annuity == pytest.approx(200_000 * 0.055 + 91_500 * 0.08)
        assert combined.first_year_interest == pytest.approx(7_000 + 4_575)

    def test_no_tranches(self):
        """Without tranches every year is zero."""
        combined = amortize_tranches([], 4)
        assert combined.annuity == 0
        assert len(combined.years) == 4
        assert all(y.balance == 0 for y in combined.years)


class TestFromBalance:
    """Tests for running an annuity from an arbitrary balance."""

    def test_matches_amortize_from_original(self):
        """Starting from the original principal reproduces the schedule."""
        s = amortize(291_500, 4.0, 1.5, 10)
        rows = amortize_from_balance(291_500, 4.0, s.annuity, 10)
        assert [r.balance for r in rows] == [y.balance for y in s.years]

    def test_zero_balance(self):
        """A zero opening balance gives zero rows."""
        rows = amortize_from_balance(0, 4.0, 16_032.5, 3)
        assert all(r.payment == 0 for r in rows)


class TestPayoffEstimate:
    """Tests for the payoff time estimate."""

    def test_reference_loan(self):
        """The reference loan takes about 33 years at 4.0 % / 1.5 %."""
        years = estimate_payoff_years(291_500, 4.0, 16_032.5)
        assert 33 < years < 34

    def test_never_repaid(self):
        """An annuity at or below the interest never repays the loan."""
        assert estimate_payoff_years(100_000, 5.0, 5_000) == math.inf

    def test_zero_interest(self):
        """Without interest payoff is principal / annuity."""
        assert estimate_payoff_years(100_000, 0.0, 10_000) == pytest.approx(10)
