"""Ongoing rent and operating cost calculations."""

from dataclasses import dataclass

from ..models.property import PropertyInputs


@dataclass(frozen=True)
class OngoingCosts:
    """Year-1 rent and fixed operating costs."""

    monthly_rent: float
    annual_rent: float  # Gross
    vacancy_rate: float  # Percent
    effective_rent: float  # After vacancy
    property_tax: float  # Grundsteuer
    management_fee: float  # Hausverwaltung
    maintenance_reserve: float  # Instandhaltungsrücklage
    insurance: float
    total_ongoing: float


def aggregate_ongoing_costs(inputs: PropertyInputs) -> OngoingCosts:
    """Calculate effective annual rent and total recurring costs.

    effective_rent = monthly_rent x 12 x (1 - vacancy_rate / 100)

    Args:
        inputs: Normalised property inputs.

    Returns:
        OngoingCosts for the first projected year.
    """
    annual_rent = inputs.monthly_rent * 12
    effective_rent = annual_rent * (1 - inputs.vacancy_rate / 100)
    total_ongoing = (
        inputs.property_tax
        + inputs.management_fee
        + inputs.maintenance_reserve
        + inputs.insurance
    )

    return OngoingCosts(
        monthly_rent=inputs.monthly_rent,
        annual_rent=annual_rent,
        vacancy_rate=inputs.vacancy_rate,
        effective_rent=effective_rent,
        property_tax=inputs.property_tax,
        management_fee=inputs.management_fee,
        maintenance_reserve=inputs.maintenance_reserve,
        insurance=inputs.insurance,
        total_ongoing=total_ongoing,
    )
