"""BIR Rules - Deterministic Philippine income tax assessment engine."""

__version__ = "0.1.0"

from .config import RulesEngineConfig, configure_logging, load_config
from .engine import ENGINE_VERSION, RulesEngine, run_assessment
from .exceptions import BirRulesError, ConfigurationError, RuleModuleNotFoundError
from .explanations import RuleExplanation, get_all_rule_explanations, get_rule_explanation
from .models import (
    AssessmentOutput,
    Expense,
    ExpenseCategory,
    IncomeFrequency,
    IncomeStream,
    IncomeType,
    RegistrationStatus,
    RiskLevel,
    RuleInput,
    TaxRegime,
    UserType,
)
from .narration import (
    ClarifyingQuestion,
    ReasoningSummary,
    generate_clarifying_questions,
    summarize_reasoning,
)
from .rules import RuleModuleId
from .thresholds import RULES_VERSION, get_rules_version

__all__ = [
    "RulesEngine",
    "run_assessment",
    "ENGINE_VERSION",
    "RULES_VERSION",
    "get_rules_version",
    "RuleModuleId",
    "RuleInput",
    "IncomeStream",
    "Expense",
    "UserType",
    "RegistrationStatus",
    "TaxRegime",
    "IncomeType",
    "IncomeFrequency",
    "ExpenseCategory",
    "RiskLevel",
    "AssessmentOutput",
    "RulesEngineConfig",
    "load_config",
    "configure_logging",
    "BirRulesError",
    "RuleModuleNotFoundError",
    "ConfigurationError",
    "RuleExplanation",
    "get_rule_explanation",
    "get_all_rule_explanations",
    "ReasoningSummary",
    "ClarifyingQuestion",
    "summarize_reasoning",
    "generate_clarifying_questions",
]
