"""Projection Report Generator - tabular and Excel export of a projection.

Renders the summary, the purchase cost breakdown and the year-by-year
records of a property or portfolio projection for review outside the
engine.
"""

import io
import math
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Optional, Sequence, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.cashflow import ProjectionResult, YearRecord
from ..calculations.debt import estimate_payoff_years
from ..calculations.metrics import ReturnMetrics, calculate_return_metrics
from ..calculations.portfolio import PortfolioProjection
from ..calculations.purchase import PurchaseBreakdown


# Column headers of the yearly sheet, in record order
YEAR_COLUMN_LABELS = {
    "year": "Year",
    "rent": "Rent",
    "ongoing_costs": "Ongoing Costs",
    "cashflow_before_financing": "CF before Financing",
    "interest": "Interest",
    "principal": "Principal",
    "payment": "Debt Service",
    "loan_balance": "Loan Balance",
    "building_depreciation": "Building AfA",
    "furniture_depreciation": "Furniture AfA",
    "maintenance_deduction": "Maintenance",
    "total_depreciation": "Total Deductions",
    "first_year_deductible_costs": "First-Year Costs",
    "taxable_income": "Taxable Income",
    "previous_income": "Base Income",
    "previous_tax": "Base Tax",
    "previous_church_tax": "Base Church Tax",
    "new_total_income": "New Income",
    "new_tax": "New Tax",
    "new_church_tax": "New Church Tax",
    "tax_savings": "Tax Savings",
    "cashflow_before_tax": "CF before Tax",
    "cashflow": "CF after Tax",
    "property_value": "Property Value",
    "equity": "Equity",
    "initial_equity": "Initial Equity",
    "vacancy_rate": "Vacancy %",
    "property_tax": "Property Tax",
    "management_fee": "Management",
    "maintenance_reserve": "Reserve",
    "insurance": "Insurance",
}


@dataclass
class ProjectionReportConfig:
    """Configuration for projection report generation."""
    include_summary: bool = True
    include_purchase: bool = True
    include_yearly: bool = True
    title: str = "Property Projection"


def year_records_to_dataframe(records: Sequence[YearRecord]) -> pd.DataFrame:
    """Convert year records to a DataFrame indexed by year.

    Args:
        records: Year records of a property or portfolio.

    Returns:
        DataFrame with one column per YearRecord field (``year`` is the index).
    """
    columns = [f.name for f in fields(YearRecord)]
    df = pd.DataFrame([asdict(r) for r in records], columns=columns)
    return df.set_index("year")


def _format_eur(value: float) -> str:
    return f"{value:,.0f} €"


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _add_section_header(ws, title: str, row: int) -> int:
    """Add a section header and return next row."""
    ws.cell(row=row, column=1, value=title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=14)
    return row + 1


def generate_projection_excel(
    projection: Union[ProjectionResult, PortfolioProjection],
    config: Optional[ProjectionReportConfig] = None,
) -> bytes:
    """Generate an Excel report of a projection.

    Args:
        projection: Property or portfolio projection.
        config: Optional configuration for the report.

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = ProjectionReportConfig()

    metrics = calculate_return_metrics(projection.result, projection.year_records)

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_summary:
        ws = wb.create_sheet("Summary")
        _create_summary_sheet(ws, projection, metrics, config)

    purchase = _purchase_of(projection)
    if config.include_purchase and purchase is not None:
        ws = wb.create_sheet("Purchase")
        _create_purchase_sheet(ws, purchase)

    if config.include_yearly:
        ws = wb.create_sheet("Yearly Projection")
        _create_yearly_sheet(ws, projection.year_records)

    # openpyxl cannot save a workbook without sheets
    if not wb.sheetnames:
        wb.create_sheet("Summary")

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _purchase_of(projection) -> Optional[PurchaseBreakdown]:
    prop = getattr(projection, "prop", None)
    return prop.purchase if prop is not None else None


def _loan_term_of(projection) -> Optional[float]:
    """Estimated years until the slowest tranche is repaid, None without loans."""
    prop = getattr(projection, "prop", None)
    if prop is None or not prop.inputs.loan_tranches:
        return None
    return max(
        estimate_payoff_years(t.amount, t.interest_rate, t.annuity)
        for t in prop.inputs.loan_tranches
    )


def _format_term(years: float) -> str:
    if math.isinf(years):
        return "never repaid"
    return f"{years:.1f} years"


def _create_summary_sheet(ws, projection, metrics: ReturnMetrics, config: ProjectionReportConfig) -> None:
    """Create the summary sheet."""
    result = projection.result
    row = 1

    ws.cell(row=row, column=1, value=config.title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=16)
    row += 1

    ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    row += 2

    row = _add_section_header(ws, "Key Figures", row)
    row += 1

    figures = [
        ("Total Cost", _format_eur(result.total_cost)),
        ("Down Payment", _format_eur(result.down_payment)),
        ("Loan Amount", _format_eur(result.loan_amount)),
        ("Annuity", _format_eur(result.annuity)),
        ("Monthly Payment", _format_eur(result.monthly_payment)),
        ("Monthly Cash Flow (after tax)", _format_eur(result.monthly_cashflow)),
        ("", ""),
        ("Final Property Value", _format_eur(result.final_property_value)),
        ("Remaining Loan", _format_eur(result.remaining_loan)),
        ("Final Equity", _format_eur(result.final_equity)),
        ("Initial Equity", _format_eur(result.initial_equity)),
    ]

    loan_term = _loan_term_of(projection)
    if loan_term is not None:
        figures.insert(5, ("Loan Term at Purchase (est.)", _format_term(loan_term)))

    for label, value in figures:
        if label:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
        row += 1

    row += 1
    row = _add_section_header(ws, "Returns", row)
    row += 1

    irr = f"{metrics.equity_irr:.2f}%" if metrics.equity_irr is not None else "-"
    returns = [
        ("Equity Growth", f"{_format_eur(metrics.equity_growth)} ({metrics.equity_growth_percent:.1f}%)"),
        ("Annualized Return", f"{metrics.annualized_return:.2f}% p.a."),
        ("Cash-on-Cash Return", f"{metrics.cash_on_cash_return:.2f}%"),
        ("Equity IRR", irr),
    ]

    for label, value in returns:
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)
        row += 1

    warnings_ = getattr(projection, "input_warnings", [])
    if warnings_:
        row += 1
        row = _add_section_header(ws, "Input Warnings", row)
        for warning in warnings_:
            ws.cell(row=row, column=1, value=warning)
            row += 1

    ws.column_dimensions['A'].width = 32
    ws.column_dimensions['B'].width = 24


def _create_purchase_sheet(ws, purchase: PurchaseBreakdown) -> None:
    """Create the purchase cost sheet."""
    row = 1
    row = _add_section_header(ws, "Purchase Costs", row)
    row += 1

    ws.cell(row=row, column=1, value="Item")
    ws.cell(row=row, column=2, value="Amount")
    ws.cell(row=row, column=3, value="Basis")
    _add_header_style(ws, row, 3)
    row += 1

    costs = [
        ("Purchase Price", purchase.purchase_price, "Input"),
        ("Transfer Tax", purchase.transfer_tax,
         f"(price - furniture) x {purchase.transfer_tax_rate:.1f}%"),
        ("Notary", purchase.notary_cost, "price x notary rate"),
        ("Broker", purchase.broker_fee,
         "deducted in year 1" if purchase.broker_as_consulting else "capitalized"),
        ("", 0.0, ""),
        ("Total Cost", purchase.total_cost, "price + all extra costs"),
    ]

    for label, amount, basis in costs:
        if label:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=_format_eur(amount))
            ws.cell(row=row, column=3, value=basis)
            if label == "Total Cost":
                ws.cell(row=row, column=1).font = Font(bold=True)
                ws.cell(row=row, column=2).font = Font(bold=True)
        row += 1

    row += 1
    row = _add_section_header(ws, "Allocation", row)
    row += 1

    headers = ["Component", "Nominal", "Extra Costs", "Total"]
    for col, header in enumerate(headers, 1):
        ws.cell(row=row, column=col, value=header)
    _add_header_style(ws, row, len(headers))
    row += 1

    allocation = [
        ("Land", purchase.land_value, purchase.land_extra_costs, purchase.total_land_value),
        ("Building", purchase.building_value, purchase.building_extra_costs,
         purchase.total_building_value),
        ("Maintenance", purchase.maintenance_cost, purchase.maintenance_extra_costs,
         purchase.total_maintenance_value),
        ("Furniture", purchase.furniture_value, 0.0, purchase.furniture_value),
    ]

    for label, nominal, extra, total in allocation:
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=_format_eur(nominal))
        ws.cell(row=row, column=3, value=_format_eur(extra))
        ws.cell(row=row, column=4, value=_format_eur(total))
        row += 1

    ws.column_dimensions['A'].width = 20
    ws.column_dimensions['B'].width = 18
    ws.column_dimensions['C'].width = 32
    ws.column_dimensions['D'].width = 18


def _create_yearly_sheet(ws, records: Sequence[YearRecord]) -> None:
    """Create the year-by-year sheet from the records DataFrame."""
    df = year_records_to_dataframe(records).reset_index()
    df = df.rename(columns=YEAR_COLUMN_LABELS).round(2)

    for row_idx, values in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
        for col_idx, value in enumerate(values, 1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    _add_header_style(ws, 1, len(df.columns))
    ws.freeze_panes = "B2"

    for col in range(1, len(df.columns) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 16
