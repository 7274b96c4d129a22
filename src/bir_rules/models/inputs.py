"""Input models for a single tax assessment.

A RuleInput is a snapshot of one taxpayer's declared profile, income
streams and expenses for one tax year. The engine treats it as read-only:
the models are frozen and every rule module derives its aggregates from
them without mutation.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMERATIONS
# =============================================================================


class UserType(str, Enum):
    """Taxpayer classification."""

    FREELANCER = "FREELANCER"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    MICRO_SMALL_BUSINESS = "MICRO_SMALL_BUSINESS"
    MIXED_INCOME = "MIXED_INCOME"


class RegistrationStatus(str, Enum):
    """BIR registration status."""

    NOT_REGISTERED = "NOT_REGISTERED"
    PENDING_REGISTRATION = "PENDING_REGISTRATION"
    REGISTERED = "REGISTERED"
    NEEDS_UPDATE = "NEEDS_UPDATE"


class TaxRegime(str, Enum):
    """Income tax treatment for self-employment income."""

    GRADUATED_RATES = "GRADUATED_RATES"
    EIGHT_PERCENT_FLAT = "EIGHT_PERCENT_FLAT"
    UNDETERMINED = "UNDETERMINED"

    @property
    def is_concrete(self) -> bool:
        """True for an actual regime choice, False for UNDETERMINED."""
        return self is not TaxRegime.UNDETERMINED


class IncomeType(str, Enum):
    """Source type of an income stream."""

    FREELANCE_SERVICE = "FREELANCE_SERVICE"
    BUSINESS_SALES = "BUSINESS_SALES"
    EMPLOYMENT = "EMPLOYMENT"
    RENTAL = "RENTAL"
    ROYALTIES = "ROYALTIES"
    OTHER = "OTHER"


class IncomeFrequency(str, Enum):
    """How often an income stream pays out."""

    ONE_TIME = "ONE_TIME"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"
    IRREGULAR = "IRREGULAR"


class ExpenseCategory(str, Enum):
    """Business expense categories."""

    RENT = "RENT"
    UTILITIES = "UTILITIES"
    SUPPLIES = "SUPPLIES"
    PROFESSIONAL_FEES = "PROFESSIONAL_FEES"
    TRANSPORTATION = "TRANSPORTATION"
    COMMUNICATION = "COMMUNICATION"
    DEPRECIATION = "DEPRECIATION"
    SALARIES_WAGES = "SALARIES_WAGES"
    TAXES_LICENSES = "TAXES_LICENSES"
    INSURANCE = "INSURANCE"
    INTEREST_EXPENSE = "INTEREST_EXPENSE"
    REPAIRS_MAINTENANCE = "REPAIRS_MAINTENANCE"
    ADVERTISING = "ADVERTISING"
    BAD_DEBTS = "BAD_DEBTS"
    OTHER_DEDUCTIBLE = "OTHER_DEDUCTIBLE"


# =============================================================================
# INCOME AND EXPENSES
# =============================================================================


class IncomeStream(BaseModel):
    """A single declared source of income for the tax year."""

    model_config = {"frozen": True}

    id: str
    income_type: IncomeType
    gross_amount: Decimal = Field(ge=0, description="Gross amount for the tax year")
    frequency: IncomeFrequency = IncomeFrequency.ONE_TIME
    has_withholding: bool = False
    withheld_amount: Optional[Decimal] = Field(default=None, ge=0)
    withholding_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    form_2307_received: bool = Field(
        default=False,
        description="Certificate of creditable tax withheld (BIR Form 2307) received",
    )

    @property
    def is_business(self) -> bool:
        """Everything other than compensation income counts as business income."""
        return self.income_type != IncomeType.EMPLOYMENT

    @property
    def creditable_withholding(self) -> Decimal:
        """Withheld amount usable as a tax credit (0 without withholding)."""
        if self.has_withholding and self.withheld_amount:
            return self.withheld_amount
        return Decimal("0")

    @property
    def missing_certificate(self) -> bool:
        """True when tax was withheld but no Form 2307 has been received."""
        return self.has_withholding and not self.form_2307_received


class Expense(BaseModel):
    """A business expense item."""

    model_config = {"frozen": True}

    id: str
    category: ExpenseCategory
    amount: Decimal = Field(ge=0)
    is_deductible: bool = True


# =============================================================================
# RULE INPUT
# =============================================================================


class RuleInput(BaseModel):
    """Complete, already-validated input for one assessment run."""

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "tax_year": 2024,
                    "user_type": "FREELANCER",
                    "registration_status": "REGISTERED",
                    "has_employment_income": False,
                    "income_streams": [
                        {
                            "id": "inc-1",
                            "income_type": "FREELANCE_SERVICE",
                            "gross_amount": "500000",
                            "frequency": "MONTHLY",
                            "has_withholding": True,
                            "withheld_amount": "25000",
                            "form_2307_received": True,
                        }
                    ],
                    "expenses": [],
                    "selected_regime": "UNDETERMINED",
                    "tin": "123-456-789-000",
                }
            ]
        },
    }

    tax_year: int
    user_type: UserType
    registration_status: RegistrationStatus
    has_employment_income: bool = False
    income_streams: list[IncomeStream] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    selected_regime: Optional[TaxRegime] = None
    tin: Optional[str] = None

    @property
    def regime_choice(self) -> TaxRegime:
        """The declared regime, with an absent selection read as UNDETERMINED."""
        return self.selected_regime or TaxRegime.UNDETERMINED

    @property
    def gross_income(self) -> Decimal:
        """Sum of gross amounts over all income streams."""
        return sum((s.gross_amount for s in self.income_streams), Decimal("0"))

    @property
    def business_income(self) -> Decimal:
        """Gross receipts from non-employment streams."""
        return sum(
            (s.gross_amount for s in self.income_streams if s.is_business),
            Decimal("0"),
        )

    @property
    def employment_income(self) -> Decimal:
        """Compensation income from employment streams."""
        return sum(
            (s.gross_amount for s in self.income_streams if not s.is_business),
            Decimal("0"),
        )

    @property
    def total_deductions(self) -> Decimal:
        """Sum of expenses flagged deductible."""
        return sum(
            (e.amount for e in self.expenses if e.is_deductible),
            Decimal("0"),
        )

    @property
    def total_withheld(self) -> Decimal:
        """Creditable withholding across all streams."""
        return sum(
            (s.creditable_withholding for s in self.income_streams),
            Decimal("0"),
        )

    @property
    def has_withholding(self) -> bool:
        """True if any stream reports withholding."""
        return any(s.has_withholding for s in self.income_streams)

    @property
    def has_business_stream(self) -> bool:
        """True if any stream is non-employment income."""
        return any(s.is_business for s in self.income_streams)

    @property
    def has_employment_stream(self) -> bool:
        """True if any stream is employment income."""
        return any(not s.is_business for s in self.income_streams)
