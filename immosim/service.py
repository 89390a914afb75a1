"""Stateless simulation service.

Entry point for callers: normalises the inputs, runs the engine and tags
the outcome. A computation that fails unexpectedly is logged and replaced
by a rough estimate derived from the raw inputs; the outcome's ``status``
tells the caller which of the two it got.

Nothing is cached here. Callers that want to memoise can key on
``simulation_cache_key(inputs, context, years)``.
"""

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import List, Optional, Sequence, Union

from .calculations.cashflow import (
    ProjectionResult,
    Property,
    SimulationResult,
    project_cashflow,
)
from .calculations.metrics import ReturnMetrics, calculate_return_metrics
from .calculations.overrides import reconcile_overrides
from .calculations.portfolio import PortfolioProjection, aggregate_portfolio
from .models.household import HouseholdTaxContext
from .models.lookups import DEFAULT_HORIZON_YEARS, get_transfer_tax_rate
from .models.property import FinancingType, LoanTranche, PropertyInputs
from .models.validation import (
    ensure_valid_number,
    normalize_horizon,
    normalize_property_inputs,
    normalize_tax_context,
)

logger = logging.getLogger(__name__)


class SimulationStatus(str, Enum):
    """Whether a projection is a real computation or a fallback estimate."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass
class SimulationOutcome:
    """Tagged simulation result."""

    status: SimulationStatus
    projection: Union[ProjectionResult, PortfolioProjection]
    reason: Optional[str] = None  # Error text when degraded
    metrics: Optional[ReturnMetrics] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == SimulationStatus.OK

    @property
    def result(self) -> SimulationResult:
        return self.projection.result


def _raw(value) -> float:
    return ensure_valid_number(value, default=0.0)


def estimate_fallback(inputs: PropertyInputs) -> SimulationResult:
    """Rough summary from the raw inputs, used when the engine fails.

    Extra costs are estimated with the flat rates only; monthly cash flow is
    before tax; no year is projected. Unusable values count as zero.
    """
    price = _raw(inputs.purchase_price)
    if inputs.transfer_tax_rate is not None:
        transfer_rate = _raw(inputs.transfer_tax_rate)
    elif isinstance(inputs.state_code, str):
        transfer_rate = get_transfer_tax_rate(inputs.state_code)
    else:
        transfer_rate = get_transfer_tax_rate(None)
    rates = _raw(inputs.notary_rate) + _raw(inputs.broker_rate) + transfer_rate
    total_cost = price * (1 + rates / 100)

    loan_1 = inputs.loan_1 if isinstance(inputs.loan_1, LoanTranche) else LoanTranche(0.0, 0.0, 0.0)
    is_cash = inputs.financing_type == FinancingType.CASH
    loan = 0.0 if is_cash else _raw(loan_1.amount)
    annuity = loan * (_raw(loan_1.interest_rate) + _raw(loan_1.amortization_rate)) / 100
    down_payment = total_cost if is_cash else _raw(inputs.down_payment)

    annual_rent = _raw(inputs.monthly_rent) * 12 * (1 - _raw(inputs.vacancy_rate) / 100)
    ongoing = sum(
        _raw(value)
        for value in (
            inputs.property_tax,
            inputs.management_fee,
            inputs.maintenance_reserve,
            inputs.insurance,
        )
    )

    return SimulationResult(
        total_cost=total_cost,
        down_payment=down_payment,
        loan_amount=loan,
        annuity=annuity,
        monthly_payment=annuity / 12,
        monthly_cashflow=(annual_rent - ongoing - annuity) / 12,
        final_property_value=price,
        remaining_loan=loan,
        final_equity=price - loan,
        initial_equity=down_payment,
    )


def simulate_property(
    inputs: PropertyInputs,
    context: HouseholdTaxContext,
    years: int = DEFAULT_HORIZON_YEARS,
) -> SimulationOutcome:
    """Simulate one property: normalise, project, reconcile overrides.

    Args:
        inputs: Raw property inputs.
        context: Household tax context.
        years: Projection horizon in years (clamped to 1-50).

    Returns:
        SimulationOutcome with status OK, or DEGRADED with a fallback
        estimate and the error text in ``reason``.
    """
    try:
        clean = normalize_property_inputs(inputs)
        clean_context = normalize_tax_context(context)
        horizon = normalize_horizon(years)

        prop = Property.from_inputs(clean)
        projected = project_cashflow(prop, clean_context, horizon)
        reconciled = reconcile_overrides(
            prop, projected.year_records, projected.result, clean_context
        )
        metrics = calculate_return_metrics(reconciled.result, reconciled.year_records)
    except Exception as exc:
        logger.exception(
            "Simulation of %r failed, returning fallback estimate", getattr(inputs, "name", None)
        )
        return SimulationOutcome(
            status=SimulationStatus.DEGRADED,
            projection=ProjectionResult(result=estimate_fallback(inputs), year_records=[]),
            reason=f"{type(exc).__name__}: {exc}",
        )

    for warning in reconciled.input_warnings:
        logger.debug("%s: %s", clean.name, warning)

    return SimulationOutcome(
        status=SimulationStatus.OK,
        projection=reconciled,
        metrics=metrics,
        warnings=list(reconciled.input_warnings),
    )


def simulate_portfolio(
    properties: Sequence[PropertyInputs],
    context: HouseholdTaxContext,
    years: int = DEFAULT_HORIZON_YEARS,
) -> SimulationOutcome:
    """Simulate all properties of a household together.

    Returns:
        SimulationOutcome wrapping a PortfolioProjection. When the engine
        fails, the fallback sums the per-property estimates.
    """
    try:
        clean_context = normalize_tax_context(context)
        horizon = normalize_horizon(years)
        clean = [normalize_property_inputs(p) for p in properties]
        portfolio = aggregate_portfolio(clean, clean_context, horizon)
        metrics = calculate_return_metrics(portfolio.result, portfolio.year_records)
    except Exception as exc:
        logger.exception("Portfolio simulation failed, returning fallback estimate")
        return SimulationOutcome(
            status=SimulationStatus.DEGRADED,
            projection=PortfolioProjection(
                result=_sum_results([estimate_fallback(p) for p in properties]),
                year_records=[],
            ),
            reason=f"{type(exc).__name__}: {exc}",
        )

    return SimulationOutcome(
        status=SimulationStatus.OK,
        projection=portfolio,
        metrics=metrics,
        warnings=list(portfolio.input_warnings),
    )


def _sum_results(results: Sequence[SimulationResult]) -> SimulationResult:
    names = [f.name for f in fields(SimulationResult)]
    return SimulationResult(**{name: sum(getattr(r, name) for r in results) for name in names})


def simulation_cache_key(
    inputs: Union[PropertyInputs, Sequence[PropertyInputs]],
    context: HouseholdTaxContext,
    years: int = DEFAULT_HORIZON_YEARS,
) -> str:
    """SHA-256 over the canonical JSON of ``(inputs, context, years)``.

    Equal arguments always give the same key, so callers can memoise
    simulation outcomes on it.
    """
    if isinstance(inputs, PropertyInputs):
        payload_inputs = asdict(inputs)
    else:
        payload_inputs = [asdict(p) for p in inputs]

    payload = {"inputs": payload_inputs, "context": asdict(context), "years": years}
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
