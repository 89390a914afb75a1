"""Property data model containing all user inputs for one rented property."""

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .lookups import (
    DEFAULT_BUILDING_DEPRECIATION_RATE,
    DEFAULT_STATE_CODE,
    get_transfer_tax_rate,
)


class FinancingType(str, Enum):
    """How the purchase is financed."""

    LOAN = "loan"
    CASH = "cash"


@dataclass(frozen=True)
class LoanTranche:
    """A single annuity loan (Annuitätendarlehen)."""

    amount: float
    interest_rate: float  # Percent p.a.
    amortization_rate: float  # Initial Tilgung, percent p.a.

    @property
    def annuity(self) -> float:
        """Fixed annual debt service: amount x (interest + amortization)."""
        return self.amount * (self.interest_rate + self.amortization_rate) / 100


@dataclass(frozen=True)
class PropertyInputs:
    """Complete input parameters for one property.

    Rates are stored as percentages (3.0 means 3 %), money in EUR per year
    unless the field name says otherwise. Instances are immutable; use
    ``dataclasses.replace`` to derive variants.
    """

    name: str = "Property"

    # === Purchase ===
    purchase_price: float = 316_500.0
    state_code: str = DEFAULT_STATE_CODE  # Determines the transfer tax rate
    transfer_tax_rate: Optional[float] = None  # Percent; None = from state table
    notary_rate: float = 1.5
    broker_rate: float = 3.0
    broker_as_consulting: bool = False  # Deduct broker fee in year 1 instead of capitalizing
    depreciation_rate: float = DEFAULT_BUILDING_DEPRECIATION_RATE

    # === Purchase price allocation ===
    land_value: float = 45_000.0
    building_value: float = 220_000.0
    maintenance_cost: float = 35_000.0  # Erhaltungsaufwand included in the price
    furniture_value: float = 16_500.0
    maintenance_distribution_years: int = 1  # 1-5

    # === Financing ===
    financing_type: FinancingType = FinancingType.LOAN
    down_payment: float = 25_000.0
    loan_1: LoanTranche = field(default_factory=lambda: LoanTranche(291_500.0, 4.0, 1.5))
    use_second_loan: bool = False
    loan_2: Optional[LoanTranche] = None

    # === Ongoing (annual unless monthly) ===
    monthly_rent: float = 1_200.0
    vacancy_rate: float = 3.0
    property_tax: float = 500.0
    management_fee: float = 600.0
    maintenance_reserve: float = 600.0
    insurance: float = 300.0

    # === Projection ===
    appreciation_rate: float = 2.0
    rent_increase_rate: float = 3.0

    # === Current values (authoritative overrides) ===
    use_current_market_value: bool = False
    current_market_value: Optional[float] = None
    use_current_debt_value: bool = False
    current_debt_value: Optional[float] = None

    @classmethod
    def from_legacy(
        cls,
        loan_amount: float,
        interest_rate: float,
        repayment_rate: float,
        **kwargs,
    ) -> "PropertyInputs":
        """Build inputs from the old single-loan field triple.

        .. deprecated::
            Pass ``loan_1=LoanTranche(...)`` instead.
        """
        warnings.warn(
            "loan_amount/interest_rate/repayment_rate are deprecated. "
            "Pass loan_1=LoanTranche(amount, interest_rate, amortization_rate) instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return cls(loan_1=LoanTranche(loan_amount, interest_rate, repayment_rate), **kwargs)

    @property
    def effective_transfer_tax_rate(self) -> float:
        """Transfer tax rate in percent (explicit override or state table)."""
        if self.transfer_tax_rate is not None:
            return self.transfer_tax_rate
        return get_transfer_tax_rate(self.state_code)

    @property
    def loan_tranches(self) -> List[LoanTranche]:
        """Active loan tranches; empty for cash purchases."""
        if self.financing_type == FinancingType.CASH:
            return []
        tranches = [self.loan_1]
        if self.use_second_loan and self.loan_2 is not None:
            tranches.append(self.loan_2)
        return tranches

    @property
    def total_loan_amount(self) -> float:
        return sum(tranche.amount for tranche in self.loan_tranches)

    @property
    def immobile_value(self) -> float:
        """Real-estate part of the price (land + building + maintenance)."""
        return self.land_value + self.building_value + self.maintenance_cost

    @property
    def allocation_total(self) -> float:
        """Sum of all allocated purchase price components."""
        return self.immobile_value + self.furniture_value

    @property
    def allocation_difference(self) -> float:
        """Allocated components minus purchase price (0 when consistent)."""
        return self.allocation_total - self.purchase_price

    def validate(self) -> list[str]:
        """Check inputs for inconsistencies and return warnings.

        Inconsistent inputs are still simulated as entered; the warnings are
        for the caller to show.

        Returns:
            List of warning messages. Empty if consistent.
        """
        warnings_ = []

        if abs(self.allocation_difference) >= 1.0:
            warnings_.append(
                f"land + building + maintenance + furniture ({self.allocation_total:,.0f}) "
                f"does not match purchase_price ({self.purchase_price:,.0f}), "
                f"difference {self.allocation_difference:+,.0f}"
            )

        if self.financing_type == FinancingType.LOAN:
            if self.total_loan_amount <= 0:
                warnings_.append("financing_type is 'loan' but no loan amount is set")
            if self.use_second_loan and self.loan_2 is None:
                warnings_.append("use_second_loan is set but loan_2 is missing")

        if self.use_current_market_value and self.current_market_value is None:
            warnings_.append("use_current_market_value is set but current_market_value is missing")
        elif self.use_current_market_value and not (
            isinstance(self.current_market_value, (int, float)) and self.current_market_value > 0
        ):
            warnings_.append("current_market_value is not positive and is ignored")
        if self.use_current_debt_value and self.current_debt_value is None:
            warnings_.append("use_current_debt_value is set but current_debt_value is missing")
        if (
            self.use_current_debt_value
            and self.financing_type == FinancingType.CASH
            and self.current_debt_value
        ):
            warnings_.append("current_debt_value is ignored for cash purchases")

        return warnings_
