"""Household tax context the property income is assessed against."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .lookups import get_church_tax_rate


class FilingStatus(str, Enum):
    """Income tax filing status."""

    SINGLE = "single"
    MARRIED = "married"  # Joint assessment, splitting procedure


@dataclass(frozen=True)
class HouseholdTaxContext:
    """Base income and tax settings of the household owning the properties."""

    annual_income: float = 70_000.0  # Taxable income before any property
    filing_status: FilingStatus = FilingStatus.SINGLE
    has_church_tax: bool = False
    church_tax_rate: Optional[float] = None  # Percent; None = derive from state_code
    state_code: Optional[str] = None  # Residence, only used for the church tax rate

    @property
    def effective_church_tax_rate(self) -> float:
        """Church tax rate in percent, falling back to the regional table."""
        if self.church_tax_rate is not None:
            return self.church_tax_rate
        return get_church_tax_rate(self.state_code)
