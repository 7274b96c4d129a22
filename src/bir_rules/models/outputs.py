"""Output models produced by the rule modules.

Every instance is created fresh inside one assessment run and is never
mutated after construction. Identifiers on obligations, deadlines and
risk flags are only unique within the run that produced them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from .inputs import TaxRegime
from .receipt import ReasoningReceipt

ASAP = "ASAP"


class RegimeEstimate(BaseModel):
    """Estimated tax and trade-offs for one regime."""

    model_config = {"frozen": True}

    estimated_tax: Decimal = Field(ge=0)
    effective_rate: Decimal = Field(ge=0)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class RegimeComparison(BaseModel):
    """Side-by-side estimates for the two regimes."""

    model_config = {"frozen": True}

    eight_percent: RegimeEstimate
    graduated_rates: RegimeEstimate


class RegimeComparisonResult(BaseModel):
    """Result of the regime determination module."""

    model_config = {"frozen": True}

    eligible_8_percent: bool
    eligibility_reason: str
    comparison: RegimeComparison
    recommendation: TaxRegime
    recommendation_reason: str
    rule_module_id: str


class QuarterlyPayments(BaseModel):
    """Even quarterly split of the net tax with an annual true-up."""

    model_config = {"frozen": True}

    q1: Decimal
    q2: Decimal
    q3: Decimal
    annual: Decimal

    @property
    def total(self) -> Decimal:
        """Sum of all four installments."""
        return self.q1 + self.q2 + self.q3 + self.annual


class ComputedValues(BaseModel):
    """Tax liability under the effective regime."""

    model_config = {"frozen": True}

    gross_income: Decimal = Field(ge=0)
    business_income: Decimal = Field(ge=0)  # Non-employment income
    employment_income: Decimal = Field(ge=0)
    total_deductions: Decimal = Field(ge=0)
    deduction_method: str
    taxable_income: Decimal = Field(ge=0)
    estimated_tax: Decimal = Field(ge=0)
    credits_applied: Decimal = Field(ge=0)  # From withholding taxes
    net_tax_payable: Decimal = Field(ge=0)
    quarterly_payments: QuarterlyPayments


class FilingFrequency(str, Enum):
    """How often an obligation recurs."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class Obligation(BaseModel):
    """A BIR form or compliance requirement the taxpayer must meet."""

    model_config = {"frozen": True}

    id: str
    form_code: str  # e.g. "1701Q", "2551Q"
    form_name: str
    description: str
    frequency: FilingFrequency
    is_applicable: bool
    rule_module_id: str
    notes: str


class Deadline(BaseModel):
    """A concrete due date for one filing period of an obligation."""

    model_config = {"frozen": True}

    id: str
    obligation_id: str
    form_code: str
    description: str
    due_date: Union[date, Literal["ASAP"]]
    period: str  # e.g. "Q1 2024"
    reminder_days: list[int] = Field(default_factory=list)
    penalty_info: str

    @property
    def is_asap(self) -> bool:
        """True when the deadline has no calendar date."""
        return self.due_date == ASAP

    def sort_key(self) -> tuple[int, date]:
        """Ordering key: ASAP entries first, then ascending due date."""
        if isinstance(self.due_date, date):
            return (1, self.due_date)
        return (0, date.min)


class RiskLevel(str, Enum):
    """Risk flag severity, ordered by need for professional review."""

    NONE = "NONE"
    INFO = "INFO"
    WARNING = "WARNING"
    CPA_REVIEW_REQUIRED = "CPA_REVIEW_REQUIRED"

    @property
    def rank(self) -> int:
        """Position on the severity scale (NONE=0 ... CPA_REVIEW_REQUIRED=3)."""
        return _RISK_RANKS[self]


_RISK_RANKS = {
    RiskLevel.NONE: 0,
    RiskLevel.INFO: 1,
    RiskLevel.WARNING: 2,
    RiskLevel.CPA_REVIEW_REQUIRED: 3,
}


class RiskFlag(BaseModel):
    """A triggered compliance-risk check."""

    model_config = {"frozen": True}

    id: str
    level: RiskLevel
    code: str
    title: str
    description: str
    rule_module_id: str
    recommended_action: str
    affected_fields: list[str] = Field(default_factory=list)


class AssessmentOutput(BaseModel):
    """Complete result of one run of the rules engine."""

    model_config = {"frozen": True}

    effective_regime: TaxRegime
    regime_comparison: RegimeComparisonResult
    computed_values: ComputedValues
    obligations: list[Obligation] = Field(default_factory=list)
    deadlines: list[Deadline] = Field(default_factory=list)
    risk_flags: list[RiskFlag] = Field(default_factory=list)
    reasoning_receipt: ReasoningReceipt
    rules_engine_version: str

    @property
    def applicable_obligations(self) -> list[Obligation]:
        """Obligations the taxpayer actually has to meet."""
        return [o for o in self.obligations if o.is_applicable]

    @property
    def highest_risk_level(self) -> RiskLevel:
        """Most severe level among the risk flags (NONE if there are none)."""
        return max(
            (f.level for f in self.risk_flags),
            key=lambda level: level.rank,
            default=RiskLevel.NONE,
        )

    def flags_at_level(self, level: RiskLevel) -> list[RiskFlag]:
        """Risk flags with exactly the given level."""
        return [f for f in self.risk_flags if f.level == level]

    def next_deadline(self) -> Optional[Deadline]:
        """Earliest deadline (ASAP entries come first)."""
        return self.deadlines[0] if self.deadlines else None
