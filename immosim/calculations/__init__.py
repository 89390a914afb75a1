"""Calculation modules for the property simulation engine."""

from .income_tax import (
    TaxPosition,
    compute_income_tax,
    compute_church_tax,
    summarize_tax_position,
)
from .purchase import allocate_purchase, PurchaseBreakdown
from .ongoing import aggregate_ongoing_costs, OngoingCosts
from .debt import (
    amortize,
    amortize_tranches,
    estimate_payoff_years,
    LoanSchedule,
    CombinedLoanSchedule,
    LoanYear,
)
from .household_tax import assess_household_tax, HouseholdTaxAssessment

# Projection engine
from .cashflow import (
    Property,
    YearRecord,
    SimulationResult,
    ProjectionResult,
    project_cashflow,  # Single-property entry point
)
from .overrides import reconcile_overrides
from .portfolio import aggregate_portfolio, PortfolioProjection

from .metrics import (
    calculate_return_metrics,
    calculate_portfolio_stats,
    ReturnMetrics,
    PortfolioStats,
)

__all__ = [
    "TaxPosition",
    "compute_income_tax",
    "compute_church_tax",
    "summarize_tax_position",
    "allocate_purchase",
    "PurchaseBreakdown",
    "aggregate_ongoing_costs",
    "OngoingCosts",
    "amortize",
    "amortize_tranches",
    "estimate_payoff_years",
    "LoanSchedule",
    "CombinedLoanSchedule",
    "LoanYear",
    "assess_household_tax",
    "HouseholdTaxAssessment",
    "Property",
    "YearRecord",
    "SimulationResult",
    "ProjectionResult",
    "project_cashflow",
    "reconcile_overrides",
    "aggregate_portfolio",
    "PortfolioProjection",
    "calculate_return_metrics",
    "calculate_portfolio_stats",
    "ReturnMetrics",
    "PortfolioStats",
]
