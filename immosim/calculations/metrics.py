"""Return metrics for a projection and overview statistics for a portfolio."""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import numpy_financial as npf

from .cashflow import SimulationResult, YearRecord


@dataclass
class ReturnMetrics:
    """Equity-based return figures of one projection."""

    initial_equity: float
    final_equity: float
    equity_growth: float  # final - initial
    equity_growth_percent: float
    annualized_return: float  # Percent p.a.
    cash_on_cash_return: float  # Percent, year-1 after-tax cash flow / initial equity
    equity_irr: Optional[float] = None  # Percent p.a.; None if no IRR exists


@dataclass
class PortfolioStats:
    """Overview statistics across several property results."""

    total_value: float = 0.0
    total_equity: float = 0.0
    total_debt: float = 0.0
    avg_cashflow: float = 0.0  # Monthly, after tax
    avg_roi: float = 0.0  # Percent, cash-on-cash
    property_count: int = 0
    cashflow_positive: int = 0
    cashflow_negative: int = 0


def calculate_equity_irr(initial_equity: float, year_records: Sequence[YearRecord]) -> Optional[float]:
    """Annual equity IRR in percent.

    Cash flow stream: the initial equity as outflow in year 0, each year's
    after-tax cash flow, and the final equity as terminal value.

    Returns:
        IRR in percent, or None when there is no equity or no real solution.
    """
    if initial_equity <= 0 or not year_records:
        return None

    flows = [-initial_equity] + [r.cashflow for r in year_records]
    flows[-1] += year_records[-1].equity

    irr = npf.irr(np.asarray(flows, dtype=float))
    if irr is None or np.isnan(irr):
        return None
    return float(irr) * 100


def calculate_return_metrics(
    result: SimulationResult,
    year_records: Sequence[YearRecord],
) -> ReturnMetrics:
    """Calculate equity growth, annualized return, cash-on-cash return and IRR.

    Zero or negative initial equity gives 0 for every ratio instead of
    dividing by it.

    Args:
        result: Projection summary.
        year_records: Projected records.

    Returns:
        ReturnMetrics.

    Example:
        >>> m = calculate_return_metrics(projection.result, projection.year_records)
        >>> m.cash_on_cash_return  # doctest: +SKIP
        -4.1
    """
    initial = result.initial_equity
    final = result.final_equity
    growth = final - initial
    periods = len(year_records)

    if initial <= 0:
        return ReturnMetrics(
            initial_equity=initial,
            final_equity=final,
            equity_growth=growth,
            equity_growth_percent=0.0,
            annualized_return=0.0,
            cash_on_cash_return=0.0,
            equity_irr=None,
        )

    growth_pct = growth / initial * 100

    if periods > 1:
        ratio = final / initial
        # Equity wiped out: no real root
        annualized = (ratio ** (1 / periods) - 1) * 100 if ratio > 0 else -100.0
    else:
        annualized = growth_pct

    return ReturnMetrics(
        initial_equity=initial,
        final_equity=final,
        equity_growth=growth,
        equity_growth_percent=growth_pct,
        annualized_return=annualized,
        cash_on_cash_return=result.monthly_cashflow * 12 / initial * 100,
        equity_irr=calculate_equity_irr(initial, year_records),
    )


def calculate_portfolio_stats(results: Sequence[SimulationResult]) -> PortfolioStats:
    """Summarize per-property results for an overview.

    Properties with a monthly cash flow of exactly zero count as positive.
    ROI is the cash-on-cash return; properties without initial equity count
    with an ROI of 0.
    """
    if not results:
        return PortfolioStats()

    stats = PortfolioStats(property_count=len(results))
    total_cashflow = 0.0
    total_roi = 0.0

    for r in results:
        stats.total_value += r.final_property_value
        stats.total_equity += r.final_equity
        stats.total_debt += r.remaining_loan

        total_cashflow += r.monthly_cashflow
        if r.monthly_cashflow >= 0:
            stats.cashflow_positive += 1
        else:
            stats.cashflow_negative += 1

        if r.initial_equity > 0:
            total_roi += r.monthly_cashflow * 12 / r.initial_equity * 100

    stats.avg_cashflow = total_cashflow / stats.property_count
    stats.avg_roi = total_roi / stats.property_count
    return stats
