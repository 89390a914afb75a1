"""Annuity loan amortization (German fixed-annuity convention)."""

import math
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy_financial as npf

from ..models.property import LoanTranche


@dataclass(frozen=True)
class LoanYear:
    """Debt service of one year."""

    year: int  # 1-indexed
    interest: float
    principal: float  # Tilgung
    payment: float  # interest + principal
    balance: float  # Restschuld at year end


@dataclass
class LoanSchedule:
    """Year-by-year schedule of a single loan."""

    principal: float
    interest_rate: float  # Percent
    amortization_rate: float  # Percent
    annuity: float
    years: List[LoanYear] = field(default_factory=list)

    @property
    def total_principal(self) -> float:
        return sum(y.principal for y in self.years)

    @property
    def final_balance(self) -> float:
        return self.years[-1].balance if self.years else self.principal


@dataclass
class CombinedLoanSchedule:
    """One or two tranches amortized independently and summed per year."""

    tranches: List[LoanSchedule]
    years: List[LoanYear]

    @property
    def loan_amount(self) -> float:
        return sum(t.principal for t in self.tranches)

    @property
    def annuity(self) -> float:
        return sum(t.annuity for t in self.tranches)

    @property
    def first_year_interest(self) -> float:
        return self.years[0].interest if self.years else 0.0

    @property
    def first_year_principal(self) -> float:
        return self.years[0].principal if self.years else 0.0


def calculate_interest_portion(balance: float, interest_rate: float) -> float:
    """Interest for one year on the opening balance (rate in percent)."""
    return balance * interest_rate / 100


def calculate_principal_portion(annuity: float, interest: float, balance: float) -> float:
    """Principal portion of the annuity, clamped to [0, balance].

    The upper clamp settles the loan exactly in its final year; the lower
    clamp keeps the balance from growing when interest exceeds the annuity.
    """
    return max(0.0, min(annuity - interest, balance))


def amortize_from_balance(
    opening_balance: float,
    interest_rate: float,
    annuity: float,
    years: int,
) -> List[LoanYear]:
    """Run a fixed annuity forward from an opening balance.

    Args:
        opening_balance: Outstanding balance at the start of year 1.
        interest_rate: Annual interest rate in percent.
        annuity: Fixed annual payment (interest + principal).
        years: Number of years to project.

    Returns:
        One LoanYear per year. Once the balance reaches zero every later
        year is all zeros.
    """
    schedule: List[LoanYear] = []
    balance = max(0.0, opening_balance)

    for year in range(1, years + 1):
        if balance <= 0:
            schedule.append(LoanYear(year, 0.0, 0.0, 0.0, 0.0))
            continue

        interest = calculate_interest_portion(balance, interest_rate)
        principal = calculate_principal_portion(annuity, interest, balance)
        balance -= principal

        schedule.append(LoanYear(
            year=year,
            interest=interest,
            principal=principal,
            payment=interest + principal,
            balance=balance,
        ))

    return schedule


def amortize(
    principal: float,
    interest_rate: float,
    amortization_rate: float,
    years: int,
) -> LoanSchedule:
    """Amortize an annuity loan with a fixed annual rate.

    The annuity is fixed for the life of the loan at
    ``principal x (interest_rate + amortization_rate)``; each year the
    interest on the remaining balance is paid first and the rest of the
    annuity repays principal.

    Args:
        principal: Original loan amount.
        interest_rate: Annual interest rate in percent.
        amortization_rate: Initial annual amortization (Tilgung) in percent.
        years: Number of years to project.

    Returns:
        LoanSchedule with one LoanYear per year.

    Example:
        >>> s = amortize(291_500, 4.0, 1.5, 10)
        >>> s.annuity
        16032.5
        >>> s.years[0].balance
        287127.5
    """
    if principal <= 0:
        return LoanSchedule(
            principal=0.0,
            interest_rate=interest_rate,
            amortization_rate=amortization_rate,
            annuity=0.0,
            years=[LoanYear(year, 0.0, 0.0, 0.0, 0.0) for year in range(1, years + 1)],
        )

    annuity = principal * (interest_rate + amortization_rate) / 100

    return LoanSchedule(
        principal=principal,
        interest_rate=interest_rate,
        amortization_rate=amortization_rate,
        annuity=annuity,
        years=amortize_from_balance(principal, interest_rate, annuity, years),
    )


def sum_loan_years(schedules: Sequence[Sequence[LoanYear]], years: int) -> List[LoanYear]:
    """Sum several per-year schedules index by index."""
    combined = []
    for index in range(years):
        rows = [schedule[index] for schedule in schedules]
        combined.append(LoanYear(
            year=index + 1,
            interest=sum(r.interest for r in rows),
            principal=sum(r.principal for r in rows),
            payment=sum(r.payment for r in rows),
            balance=sum(r.balance for r in rows),
        ))
    return combined


def amortize_tranches(tranches: Sequence[LoanTranche], years: int) -> CombinedLoanSchedule:
    """Amortize each tranche independently and sum the results per year.

    Args:
        tranches: Zero, one or two loan tranches.
        years: Number of years to project.

    Returns:
        CombinedLoanSchedule. An empty tranche list gives an all-zero schedule.
    """
    schedules = [
        amortize(t.amount, t.interest_rate, t.amortization_rate, years)
        for t in tranches
    ]
    if not schedules:
        zero_years = [LoanYear(year, 0.0, 0.0, 0.0, 0.0) for year in range(1, years + 1)]
        return CombinedLoanSchedule(tranches=[], years=zero_years)

    return CombinedLoanSchedule(
        tranches=schedules,
        years=sum_loan_years([s.years for s in schedules], years),
    )


def estimate_payoff_years(principal: float, interest_rate: float, annuity: float) -> float:
    """Years until the loan is fully repaid at the fixed annuity.

    Uses the closed-form number of periods of an annuity.

    Returns:
        Payoff time in years (fractional), 0 for no loan and ``math.inf``
        when the annuity does not exceed the first year's interest.
    """
    if principal <= 0:
        return 0.0
    if annuity <= calculate_interest_portion(principal, interest_rate):
        return math.inf
    if interest_rate == 0:
        return principal / annuity
    return float(npf.nper(interest_rate / 100, -annuity, principal))
