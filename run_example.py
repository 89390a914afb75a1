#!/usr/bin/env python3
"""Example script to simulate the reference apartment and a small portfolio."""

import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from immosim.models.household import FilingStatus, HouseholdTaxContext
from immosim.models.property import FinancingType, LoanTranche, PropertyInputs
from immosim.service import simulate_portfolio, simulate_property


def get_example_inputs() -> PropertyInputs:
    """Get the reference apartment inputs."""
    return PropertyInputs(
        name="Reference apartment",
        purchase_price=316_500,
        state_code="BY",
        transfer_tax_rate=3.5,
        notary_rate=1.5,
        broker_rate=3.0,
        land_value=45_000,
        building_value=220_000,
        maintenance_cost=35_000,
        furniture_value=16_500,
        financing_type=FinancingType.LOAN,
        down_payment=25_000,
        loan_1=LoanTranche(291_500, 4.0, 1.5),
        monthly_rent=1_200,
        vacancy_rate=3.0,
    )


def print_year_table(records) -> None:
    """Print the yearly projection as a fixed-width table."""
    print(f"\n{'Year':>4} {'Rent':>10} {'Interest':>10} {'Principal':>10} {'Balance':>12} "
          f"{'Taxable':>10} {'Tax Sav.':>10} {'CF a.T.':>10} {'Equity':>12}")
    print("-" * 96)
    for r in records:
        print(f"{r.year:>4} {r.rent:>10,.0f} {r.interest:>10,.0f} {r.principal:>10,.0f} "
              f"{r.loan_balance:>12,.0f} {r.taxable_income:>10,.0f} {r.tax_savings:>10,.0f} "
              f"{r.cashflow:>10,.0f} {r.equity:>12,.0f}")


def run_single_property(years: int, context: HouseholdTaxContext) -> None:
    """Simulate the reference apartment."""
    print("\n" + "=" * 60)
    print("RENTAL PROPERTY SIMULATION")
    print("Reference Apartment")
    print("=" * 60)

    outcome = simulate_property(get_example_inputs(), context, years)
    if not outcome.ok:
        print(f"Degraded result: {outcome.reason}")

    result = outcome.result
    print(f"\nTotal cost:        {result.total_cost:>12,.2f}")
    print(f"Loan amount:       {result.loan_amount:>12,.2f}")
    print(f"Annuity:           {result.annuity:>12,.2f}")
    print(f"Monthly cash flow: {result.monthly_cashflow:>12,.2f}")
    print(f"Final equity:      {result.final_equity:>12,.2f}")

    if outcome.metrics is not None:
        m = outcome.metrics
        print(f"Annualized return: {m.annualized_return:>11.2f}%")
        print(f"Cash-on-cash:      {m.cash_on_cash_return:>11.2f}%")

    for warning in outcome.warnings:
        print(f"Warning: {warning}")

    print_year_table(outcome.projection.year_records)


def run_portfolio(years: int, context: HouseholdTaxContext) -> None:
    """Simulate the reference apartment together with a cash-bought unit."""
    print("\n" + "=" * 60)
    print("PORTFOLIO (household tax computed on combined income)")
    print("=" * 60)

    cash_unit = replace(
        get_example_inputs(),
        name="Cash unit",
        purchase_price=180_000,
        land_value=40_000,
        building_value=140_000,
        maintenance_cost=0,
        furniture_value=0,
        financing_type=FinancingType.CASH,
        monthly_rent=750,
    )

    outcome = simulate_portfolio([get_example_inputs(), cash_unit], context, years)
    print_year_table(outcome.projection.year_records)


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Rental property simulation")
    parser.add_argument("--years", type=int, default=10, help="Projection horizon in years")
    parser.add_argument("--income", type=float, default=70_000, help="Taxable base income")
    parser.add_argument("--married", action="store_true", help="Joint assessment (splitting)")
    parser.add_argument("--church-tax", action="store_true", help="Apply church tax")
    parser.add_argument("--portfolio", action="store_true", help="Also run a two-property portfolio")
    args = parser.parse_args()

    context = HouseholdTaxContext(
        annual_income=args.income,
        filing_status=FilingStatus.MARRIED if args.married else FilingStatus.SINGLE,
        has_church_tax=args.church_tax,
        state_code="BY",
    )

    run_single_property(args.years, context)

    if args.portfolio:
        run_portfolio(args.years, context)

    print("\nDone.")


if __name__ == "__main__":
    main()
