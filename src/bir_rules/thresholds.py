"""BIR tax thresholds, graduated brackets and filing deadline tables.

This module contains the statutory constants used by every rule module:
the VAT threshold, the 8% option parameters, the Optional Standard
Deduction rate, the TRAIN Law graduated bracket table and the per-form
deadline calendar.

Sources:
- TRAIN Law (RA 10963) Section 24(A)(2)(b)
- Revenue Regulations No. 8-2018 (8% Income Tax Option)
- NIRC Section 34(L) (Optional Standard Deduction)

All values require CPA validation before production use.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional


# =============================================================================
# VERSION TRACKING
# =============================================================================

RULES_VERSION = "TRAIN-2023"


def get_rules_version() -> str:
    """Return the version tag of the bracket and threshold tables."""
    return RULES_VERSION


# =============================================================================
# THRESHOLDS
# =============================================================================

# Gross sales/receipts above this require VAT registration
VAT_THRESHOLD = Decimal("3000000")

# 8% option is only available up to the VAT threshold
EIGHT_PERCENT_GROSS_LIMIT = VAT_THRESHOLD

# First 250K of business income is exempt under the 8% option
PERSONAL_EXEMPTION_THRESHOLD = Decimal("250000")

EIGHT_PERCENT_RATE = Decimal("0.08")

# Optional Standard Deduction, 40% of gross
OSD_RATE = Decimal("0.40")

# Percentage tax for non-VAT taxpayers on graduated rates
PERCENTAGE_TAX_RATE = Decimal("0.03")

ANNUAL_REGISTRATION_FEE = Decimal("500")

# Regime recommendation: above this deduction ratio itemizing wins
HIGH_DEDUCTION_RATIO = Decimal("0.4")

CENTAVO = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")


def round_currency(amount: Decimal) -> Decimal:
    """Round a peso amount to centavos (half up)."""
    return amount.quantize(CENTAVO, rounding=ROUND_HALF_UP)


def round_rate(rate: Decimal) -> Decimal:
    """Round a ratio to four decimal places (half up)."""
    return rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


# =============================================================================
# GRADUATED TAX BRACKETS
# =============================================================================
# Applied to taxable income after deductions. Tax within a bracket is the
# base tax plus the marginal rate on the excess over the previous bracket's
# upper bound.


class TaxBracket(NamedTuple):
    """One row of the graduated income tax table."""
    min: Decimal
    max: Optional[Decimal]  # None = no upper bound
    rate: Decimal
    base_tax: Decimal


GRADUATED_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("250000"), Decimal("0"), Decimal("0")),
    TaxBracket(Decimal("250001"), Decimal("400000"), Decimal("0.15"), Decimal("0")),
    TaxBracket(Decimal("400001"), Decimal("800000"), Decimal("0.20"), Decimal("22500")),
    TaxBracket(Decimal("800001"), Decimal("2000000"), Decimal("0.25"), Decimal("102500")),
    TaxBracket(Decimal("2000001"), Decimal("8000000"), Decimal("0.30"), Decimal("402500")),
    TaxBracket(Decimal("8000001"), None, Decimal("0.35"), Decimal("2202500")),
)


def apply_graduated_rates(taxable_income: Decimal) -> Decimal:
    """Compute income tax on taxable income using the graduated table.

    Args:
        taxable_income: Income after deductions (negative values are
            treated as zero)

    Returns:
        Tax due, rounded to centavos
    """
    taxable = max(Decimal("0"), taxable_income)
    lower_bound = Decimal("0")

    for bracket in GRADUATED_TAX_BRACKETS:
        if bracket.max is None or taxable <= bracket.max:
            excess = max(Decimal("0"), taxable - lower_bound)
            return round_currency(bracket.base_tax + excess * bracket.rate)
        lower_bound = bracket.max

    # Unreachable: the last bracket is unbounded
    raise AssertionError("graduated bracket table has no open-ended top bracket")


def compute_eight_percent_tax(business_income: Decimal) -> tuple[Decimal, Decimal]:
    """Compute the 8% option tax.

    Returns:
        Tuple of (tax, taxable_amount) where taxable_amount is gross
        receipts above the 250K exemption
    """
    taxable_amount = max(Decimal("0"), business_income - PERSONAL_EXEMPTION_THRESHOLD)
    return round_currency(taxable_amount * EIGHT_PERCENT_RATE), taxable_amount


def best_graduated_deduction(
    business_income: Decimal,
    itemized_deductions: Decimal,
) -> tuple[Decimal, bool]:
    """Pick the larger of OSD (40% of gross) and itemized deductions.

    Returns:
        Tuple of (deduction, uses_osd). OSD wins ties.
    """
    osd = business_income * OSD_RATE
    if osd >= itemized_deductions:
        return osd, True
    return itemized_deductions, False


# =============================================================================
# FILING DEADLINES
# =============================================================================


@dataclass(frozen=True)
class DueDay:
    """Calendar day a return is due. Months are 1-based."""
    month: int
    day: int
    next_year: bool = False  # due in the year after the tax year


@dataclass(frozen=True)
class DeadlineConfig:
    """Deadline calendar for a single BIR form."""
    form_code: str
    description: str
    quarter_deadlines: dict[str, DueDay] = field(default_factory=dict)
    annual_deadline: Optional[DueDay] = None


# Quarters with their own deadline. A configured Q4 date is never emitted;
# the fourth quarter is covered by the annual return.
QUARTERS = ("Q1", "Q2", "Q3")

DEFAULT_ANNUAL_DEADLINE = DueDay(month=4, day=15)

FILING_DEADLINES: dict[str, DeadlineConfig] = {
    "1701Q": DeadlineConfig(
        form_code="1701Q",
        description="Quarterly Income Tax Return for Self-Employed Individuals, Estates and Trusts",
        quarter_deadlines={
            "Q1": DueDay(5, 15),
            "Q2": DueDay(8, 15),
            "Q3": DueDay(11, 15),
        },
    ),
    "1701": DeadlineConfig(
        form_code="1701",
        description="Annual Income Tax Return for Individuals (including Mixed Income)",
        annual_deadline=DueDay(4, 15),
    ),
    "2551Q": DeadlineConfig(
        form_code="2551Q",
        description="Quarterly Percentage Tax Return",
        quarter_deadlines={
            "Q1": DueDay(4, 25),
            "Q2": DueDay(7, 25),
            "Q3": DueDay(10, 25),
            "Q4": DueDay(1, 25, next_year=True),
        },
    ),
}

# Registration fee (0605) is due in January of the tax year itself
REGISTRATION_FEE_DEADLINE = DueDay(month=1, day=31)

QUARTERLY_REMINDER_DAYS = (30, 14, 7, 3, 1)
ANNUAL_REMINDER_DAYS = (60, 30, 14, 7, 3, 1)
REGISTRATION_FEE_REMINDER_DAYS = (30, 14, 7)


def get_deadline_config(form_code: str) -> Optional[DeadlineConfig]:
    """Look up the deadline calendar for a form, if one is configured."""
    return FILING_DEADLINES.get(form_code)
