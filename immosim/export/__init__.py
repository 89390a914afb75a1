"""Export module for projection reports."""

from .projection_report import (
    ProjectionReportConfig,
    generate_projection_excel,
    year_records_to_dataframe,
)

__all__ = [
    "ProjectionReportConfig",
    "generate_projection_excel",
    "year_records_to_dataframe",
]
