"""Purchase cost calculations: transfer tax, fees and purchase price allocation."""

from dataclasses import dataclass, field
from typing import List

from ..models.lookups import DEFAULT_ALLOCATION_SHARES
from ..models.property import FinancingType, PropertyInputs


@dataclass(frozen=True)
class PurchaseBreakdown:
    """Acquisition costs and their allocation to land, building and maintenance."""

    purchase_price: float

    # Extra costs (Kaufnebenkosten)
    transfer_tax_rate: float  # Percent
    transfer_tax_base: float  # Purchase price without furniture
    transfer_tax: float  # Grunderwerbsteuer
    notary_cost: float
    broker_fee: float
    broker_as_consulting: bool
    first_year_deductible_costs: float  # Broker fee when deducted as consulting expense
    total_extra: float  # All extra costs, paid regardless of tax treatment
    capitalized_extra: float  # Extra costs added to the acquisition cost basis
    total_cost: float  # Purchase price + all extra costs

    # Nominal allocation
    land_value: float
    building_value: float
    maintenance_cost: float
    furniture_value: float
    land_value_percentage: float  # Of purchase price
    building_value_percentage: float  # Of purchase price

    # Allocation of capitalized extras (shares of land + building + maintenance)
    land_share: float
    building_share: float
    maintenance_share: float
    land_extra_costs: float
    building_extra_costs: float
    maintenance_extra_costs: float
    total_land_value: float
    total_building_value: float  # Depreciation base for the building
    total_maintenance_value: float

    # Maintenance deduction
    maintenance_distribution_years: int
    annual_maintenance: float

    input_warnings: List[str] = field(default_factory=list)

    @property
    def immobile_value(self) -> float:
        """Real-estate part of the nominal price (excludes furniture)."""
        return self.land_value + self.building_value + self.maintenance_cost


def _allocation_shares(inputs: PropertyInputs) -> tuple[float, float, float]:
    """Shares of land, building and maintenance in the immobile value."""
    immobile = inputs.immobile_value
    if immobile <= 0:
        return DEFAULT_ALLOCATION_SHARES["land"], DEFAULT_ALLOCATION_SHARES["building"], 0.0
    return (
        inputs.land_value / immobile,
        inputs.building_value / immobile,
        inputs.maintenance_cost / immobile,
    )


def allocate_purchase(inputs: PropertyInputs) -> PurchaseBreakdown:
    """Calculate purchase extra costs and allocate them to the components.

    Transfer tax applies to the purchase price minus furniture (movable goods
    are exempt) and therefore includes the maintenance component. Notary and
    broker fees are charged on the full purchase price.

    Capitalized extras (transfer tax + notary, plus the broker fee unless it
    is deducted as a consulting expense) are split between land, building and
    maintenance in proportion to their nominal values.

    Args:
        inputs: Normalised property inputs.

    Returns:
        PurchaseBreakdown with all cost components.

    Example:
        >>> b = allocate_purchase(PropertyInputs())
        >>> b.transfer_tax  # (316,500 - 16,500) x 3.5 %
        10500.0
    """
    price = inputs.purchase_price
    transfer_tax_rate = inputs.effective_transfer_tax_rate

    transfer_tax_base = max(0.0, price - inputs.furniture_value)
    transfer_tax = transfer_tax_base * transfer_tax_rate / 100
    notary_cost = price * inputs.notary_rate / 100
    broker_fee = price * inputs.broker_rate / 100

    total_extra = transfer_tax + notary_cost + broker_fee
    total_cost = price + total_extra

    if inputs.broker_as_consulting:
        capitalized_extra = transfer_tax + notary_cost
        first_year_deductible = broker_fee
    else:
        capitalized_extra = total_extra
        first_year_deductible = 0.0

    if price > 0:
        land_pct = inputs.land_value / price * 100
        building_pct = inputs.building_value / price * 100
    else:
        land_pct = DEFAULT_ALLOCATION_SHARES["land"] * 100
        building_pct = DEFAULT_ALLOCATION_SHARES["building"] * 100

    land_share, building_share, maintenance_share = _allocation_shares(inputs)
    land_extra = capitalized_extra * land_share
    building_extra = capitalized_extra * building_share
    maintenance_extra = capitalized_extra * maintenance_share

    distribution_years = max(1, int(inputs.maintenance_distribution_years))

    input_warnings = inputs.validate()
    if inputs.financing_type == FinancingType.LOAN:
        financed = inputs.total_loan_amount + inputs.down_payment
        if total_cost - financed >= 1.0:
            input_warnings.append(
                f"loan + down payment ({financed:,.0f}) does not cover "
                f"total cost ({total_cost:,.0f}), gap {total_cost - financed:,.0f}"
            )

    return PurchaseBreakdown(
        purchase_price=price,
        transfer_tax_rate=transfer_tax_rate,
        transfer_tax_base=transfer_tax_base,
        transfer_tax=transfer_tax,
        notary_cost=notary_cost,
        broker_fee=broker_fee,
        broker_as_consulting=inputs.broker_as_consulting,
        first_year_deductible_costs=first_year_deductible,
        total_extra=total_extra,
        capitalized_extra=capitalized_extra,
        total_cost=total_cost,
        land_value=inputs.land_value,
        building_value=inputs.building_value,
        maintenance_cost=inputs.maintenance_cost,
        furniture_value=inputs.furniture_value,
        land_value_percentage=land_pct,
        building_value_percentage=building_pct,
        land_share=land_share,
        building_share=building_share,
        maintenance_share=maintenance_share,
        land_extra_costs=land_extra,
        building_extra_costs=building_extra,
        maintenance_extra_costs=maintenance_extra,
        total_land_value=inputs.land_value + land_extra,
        total_building_value=inputs.building_value + building_extra,
        total_maintenance_value=inputs.maintenance_cost + maintenance_extra,
        maintenance_distribution_years=distribution_years,
        annual_maintenance=inputs.maintenance_cost / distribution_years,
        input_warnings=input_warnings,
    )
