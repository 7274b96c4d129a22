"""Rule modules of the assessment pipeline.

Each module exposes a stateless class with an ``execute`` method:
- RegimeDeterminationRule: 8% eligibility and regime recommendation
- TaxComputationRule: liability, credits and quarterly schedule
- FilingObligationsRule: BIR forms the taxpayer must file
- DeadlineCalculationRule: due dates for applicable obligations
- RiskAssessmentRule: compliance risk flags
"""

from .base import RuleModule, RuleModuleId, format_peso, id_sequence
from .computation import TaxComputationRule
from .deadlines import DeadlineCalculationRule, adjust_for_weekend, get_penalty_info
from .obligations import FilingObligationsRule
from .regime import RegimeDeterminationRule
from .risk import RiskAssessmentRule

__all__ = [
    "RuleModule",
    "RuleModuleId",
    "format_peso",
    "id_sequence",
    "RegimeDeterminationRule",
    "TaxComputationRule",
    "FilingObligationsRule",
    "DeadlineCalculationRule",
    "RiskAssessmentRule",
    "adjust_for_weekend",
    "get_penalty_info",
]
