"""Beginner-friendly narration of an assessment.

These helpers only read an AssessmentOutput. They turn the reasoning
receipt into a plain-language summary and suggest questions that would
improve the input data; they never recompute or alter a tax outcome.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from .models import AssessmentOutput, ReasoningStep, RegimeComparisonResult, RiskLevel, TaxRegime
from .rules import RuleModuleId, format_peso

logger = structlog.get_logger()

DISCLAIMER = (
    "This summary is for guidance only. Tax rules are complex and may have exceptions. "
    "Always consult a licensed CPA before filing."
)

STEP_TITLES = {
    RuleModuleId.REGIME_DETERMINATION.value: "Choosing Your Tax Option",
    RuleModuleId.TAX_COMPUTATION.value: "Calculating Your Tax",
    RuleModuleId.FILING_OBLIGATIONS.value: "Identifying What to File",
    RuleModuleId.DEADLINE_CALCULATION.value: "Setting Your Deadlines",
    RuleModuleId.RISK_ASSESSMENT.value: "Checking for Issues",
}

MISSING_FIELD_QUESTIONS = {
    "TIN (Tax Identification Number)": (
        "What is your Tax Identification Number (TIN)? This is needed for all BIR filings."
    ),
    "Income streams": (
        "What are your sources of income this year? Please add at least one income stream."
    ),
}

# Below this completeness score, every missing field gets its own question
LOW_COMPLETENESS_SCORE = 70

REGIME_NOT_SELECTED_CODE = "REGIME_NOT_SELECTED"
MISSING_2307_CODE = "MISSING_2307"
REGIME_WARNING_TEXT = "Tax regime not selected"


# =============================================================================
# MODELS
# =============================================================================


class StepExplanation(BaseModel):
    """One reasoning step retold for a beginner."""

    model_config = {"frozen": True}

    step: int
    title: str
    what_we_did: str
    result: str


class KeyNumbers(BaseModel):
    """Headline amounts of the assessment."""

    model_config = {"frozen": True}

    gross_income: Decimal
    deductions: Decimal
    taxable_income: Decimal
    estimated_tax: Decimal
    tax_credits: Decimal
    net_tax_due: Decimal


class ActionItem(BaseModel):
    """An applicable filing obligation."""

    model_config = {"frozen": True}

    form: str
    description: str
    frequency: str
    notes: str


class WatchItem(BaseModel):
    """A risk flag retold for a beginner."""

    model_config = {"frozen": True}

    severity: RiskLevel
    issue: str
    explanation: str
    what_to_do: str


class DataCompleteness(BaseModel):
    """Completeness assessment retold for a beginner."""

    model_config = {"frozen": True}

    score: int
    missing_items: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class ReasoningSummary(BaseModel):
    """Plain-language summary of an assessment."""

    model_config = {"frozen": True}

    rules_engine_version: str
    overview: str
    step_by_step_explanation: list[StepExplanation]
    key_numbers: KeyNumbers
    what_you_need_to_do: list[ActionItem]
    things_to_watch: list[WatchItem]
    data_completeness: DataCompleteness
    disclaimer: str = DISCLAIMER


class QuestionPriority(str, Enum):
    """How urgently a clarifying question should be answered."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClarifyingQuestion(BaseModel):
    """A question whose answer would improve the assessment input."""

    model_config = {"frozen": True}

    id: str
    question: str
    context: str
    suggested_action: str
    priority: QuestionPriority
    related_data: Optional[dict[str, Any]] = None


# =============================================================================
# SUMMARY
# =============================================================================


def summarize_reasoning(output: AssessmentOutput) -> ReasoningSummary:
    """
    Build a beginner-friendly summary of how an assessment was derived.

    Args:
        output: Result of a rules engine run

    Returns:
        ReasoningSummary
    """
    computed = output.computed_values
    completeness = output.reasoning_receipt.completeness

    summary = ReasoningSummary(
        rules_engine_version=output.rules_engine_version,
        overview=build_overview(output),
        step_by_step_explanation=[
            StepExplanation(
                step=step.step_number,
                title=STEP_TITLES.get(step.rule_module_id, step.rule_module_id),
                what_we_did=step.explanation,
                result=format_step_result(step),
            )
            for step in output.reasoning_receipt.steps
        ],
        key_numbers=KeyNumbers(
            gross_income=computed.gross_income,
            deductions=computed.total_deductions,
            taxable_income=computed.taxable_income,
            estimated_tax=computed.estimated_tax,
            tax_credits=computed.credits_applied,
            net_tax_due=computed.net_tax_payable,
        ),
        what_you_need_to_do=[
            ActionItem(
                form=o.form_code,
                description=o.form_name,
                frequency=o.frequency.value,
                notes=o.notes,
            )
            for o in output.applicable_obligations
        ],
        things_to_watch=[
            WatchItem(
                severity=f.level,
                issue=f.title,
                explanation=f.description,
                what_to_do=f.recommended_action,
            )
            for f in output.risk_flags
        ],
        data_completeness=DataCompleteness(
            score=completeness.score,
            missing_items=list(completeness.missing_fields),
            suggestions=list(completeness.warnings),
        ),
    )

    logger.debug("reasoning_summarized", steps=len(summary.step_by_step_explanation))
    return summary


def build_overview(output: AssessmentOutput) -> str:
    """One-paragraph overview: regime, net tax and obligation count."""
    if output.effective_regime == TaxRegime.EIGHT_PERCENT_FLAT:
        regime_text = "8% flat tax on gross receipts"
    else:
        regime_text = "graduated income tax rates with deductions"

    return (
        f"Based on your income and expenses, we recommend using the {regime_text}. "
        f"Your estimated tax for the year is {format_peso(output.computed_values.net_tax_payable)}. "
        f"You have {len(output.applicable_obligations)} filing obligation(s) to track."
    )


def format_step_result(step: ReasoningStep) -> str:
    """Render the first output value of a step.

    Amounts are shown in pesos, flags as Yes/No and lists comma-separated.
    """
    if not step.output_digest:
        return ""
    value = next(iter(step.output_digest.values()))

    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return format_peso(value)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "None"
    return str(value)


# =============================================================================
# CLARIFYING QUESTIONS
# =============================================================================


def missing_field_question(field: str) -> str:
    """Question asking the taxpayer for a missing field."""
    return MISSING_FIELD_QUESTIONS.get(field, f"Could you provide your {field}?")


def question_id_for_field(field: str) -> str:
    """Stable question id for a missing field, e.g. ``MISSING_INCOME_STREAMS``."""
    return "MISSING_" + "_".join(field.split()).upper()


def generate_clarifying_questions(output: AssessmentOutput) -> list[ClarifyingQuestion]:
    """
    Suggest questions that would make the assessment more accurate.

    Args:
        output: Result of a rules engine run

    Returns:
        Questions, highest priority first
    """
    completeness = output.reasoning_receipt.completeness
    flag_codes = {f.code for f in output.risk_flags if f.level == RiskLevel.WARNING}
    questions: list[ClarifyingQuestion] = []

    if completeness.score < LOW_COMPLETENESS_SCORE:
        for field in completeness.missing_fields:
            questions.append(
                ClarifyingQuestion(
                    id=question_id_for_field(field),
                    question=missing_field_question(field),
                    context="This information helps provide more accurate tax guidance.",
                    suggested_action=f"Update your tax profile with {field}",
                    priority=QuestionPriority.HIGH,
                )
            )

    regime_unselected = REGIME_NOT_SELECTED_CODE in flag_codes or any(
        w.startswith(REGIME_WARNING_TEXT) for w in completeness.warnings
    )
    if regime_unselected:
        questions.append(
            ClarifyingQuestion(
                id="REGIME_SELECTION",
                question=(
                    "Have you decided between the 8% flat tax option and graduated rates "
                    "with deductions?"
                ),
                context=(
                    "This choice affects your tax computation. The assessment shows a "
                    "comparison to help you decide."
                ),
                suggested_action="Review the regime comparison and update your tax profile",
                priority=QuestionPriority.HIGH,
                related_data=_regime_comparison_data(output.regime_comparison),
            )
        )

    if MISSING_2307_CODE in flag_codes:
        questions.append(
            ClarifyingQuestion(
                id="FORM_2307_FOLLOWUP",
                question="Have you requested Form 2307 certificates from clients who withheld taxes?",
                context=(
                    "Without Form 2307, you cannot claim withholding tax credits. These "
                    "certificates are usually issued monthly or quarterly."
                ),
                suggested_action="Contact your clients to request Form 2307",
                priority=QuestionPriority.MEDIUM,
            )
        )

    logger.debug("clarifying_questions_generated", count=len(questions))
    return questions


def _regime_comparison_data(result: RegimeComparisonResult) -> dict[str, Any]:
    return {
        "eligible_8_percent": result.eligible_8_percent,
        "recommendation": result.recommendation.value,
        "eight_percent_tax": str(result.comparison.eight_percent.estimated_tax),
        "graduated_tax": str(result.comparison.graduated_rates.estimated_tax),
    }
