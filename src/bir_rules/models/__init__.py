"""Data models for the BIR rules engine.

This package provides:
- Assessment input: taxpayer profile, income streams, expenses (inputs.py)
- Rule module outputs: regime comparison, computed values, obligations,
  deadlines, risk flags and the bundled assessment (outputs.py)
- Reasoning receipt and completeness assessment (receipt.py)
"""

from bir_rules.models.inputs import (
    # Enumerations
    UserType,
    RegistrationStatus,
    TaxRegime,
    IncomeType,
    IncomeFrequency,
    ExpenseCategory,
    # Input
    IncomeStream,
    Expense,
    RuleInput,
)

from bir_rules.models.receipt import (
    ReasoningStep,
    CompletenessAssessment,
    ReasoningReceipt,
    ReasoningTrail,
)

from bir_rules.models.outputs import (
    ASAP,
    RegimeEstimate,
    RegimeComparison,
    RegimeComparisonResult,
    QuarterlyPayments,
    ComputedValues,
    FilingFrequency,
    Obligation,
    Deadline,
    RiskLevel,
    RiskFlag,
    AssessmentOutput,
)

__all__ = [
    "UserType",
    "RegistrationStatus",
    "TaxRegime",
    "IncomeType",
    "IncomeFrequency",
    "ExpenseCategory",
    "IncomeStream",
    "Expense",
    "RuleInput",
    "ReasoningStep",
    "CompletenessAssessment",
    "ReasoningReceipt",
    "ReasoningTrail",
    "ASAP",
    "RegimeEstimate",
    "RegimeComparison",
    "RegimeComparisonResult",
    "QuarterlyPayments",
    "ComputedValues",
    "FilingFrequency",
    "Obligation",
    "Deadline",
    "RiskLevel",
    "RiskFlag",
    "AssessmentOutput",
]
