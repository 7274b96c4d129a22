"""Static plain-language explanations of the rule modules.

The table is read-only and independent of any assessment input. The
explanation layer reads it to describe a rule to a beginner; it never
feeds back into a computation.
"""

from typing import Union

from pydantic import BaseModel, Field

from .exceptions import RuleModuleNotFoundError
from .rules import (
    DeadlineCalculationRule,
    FilingObligationsRule,
    RegimeDeterminationRule,
    RiskAssessmentRule,
    RuleModule,
    RuleModuleId,
    TaxComputationRule,
)


class ExplanationExample(BaseModel):
    """A worked scenario and its outcome."""

    model_config = {"frozen": True}

    scenario: str
    outcome: str


class PlainLanguageExplanation(BaseModel):
    """Input-independent description of one rule module."""

    model_config = {"frozen": True}

    summary: str
    for_beginners: str
    examples: list[ExplanationExample] = Field(default_factory=list)


class RuleExplanation(PlainLanguageExplanation):
    """Explanation together with the identity of the rule module it describes."""

    id: RuleModuleId
    code: str
    version: str
    title: str


def _example(scenario: str, outcome: str) -> ExplanationExample:
    return ExplanationExample(scenario=scenario, outcome=outcome)


EXPLANATIONS: dict[RuleModuleId, PlainLanguageExplanation] = {
    RuleModuleId.REGIME_DETERMINATION: PlainLanguageExplanation(
        summary=(
            "The 8% flat tax option allows eligible self-employed individuals and professionals "
            "to pay a simple 8% tax on gross receipts above ₱250,000, instead of the regular "
            "graduated income tax rates plus 3% percentage tax. This option is only available if "
            "your annual gross receipts don't exceed ₱3,000,000."
        ),
        for_beginners=(
            "Think of it like choosing between two ways to pay tax: "
            "(1) The simple way - pay 8% of everything you earn above ₱250,000, no math needed. "
            "(2) The detailed way - track all your business expenses, subtract them from income, "
            "then use a tax table. The simple way is easier but might cost more if you have lots "
            "of expenses. The app will show you which option saves you more money."
        ),
        examples=[
            _example(
                "Freelancer earning ₱600,000/year with ₱150,000 in expenses",
                "8% tax: ₱28,000 (8% of ₱350,000). Graduated: ₱16,500 (after 40% OSD). "
                "Graduated rates are better.",
            ),
            _example(
                "Freelancer earning ₱1,000,000/year with ₱100,000 expenses",
                "8% tax: ₱60,000. Graduated: ₱62,500 (after 40% OSD). "
                "8% option saves ₱2,500 and is simpler.",
            ),
        ],
    ),
    RuleModuleId.TAX_COMPUTATION: PlainLanguageExplanation(
        summary=(
            "Tax computation depends on your chosen regime. Under 8% flat tax, you pay 8% of "
            "gross receipts above ₱250,000. Under graduated rates, you deduct expenses from income "
            "and apply progressive tax brackets (0% to 35% depending on income level)."
        ),
        for_beginners=(
            "Your tax is calculated based on how much you earn and how much you spend on "
            "business. If you use the simple 8% option, just multiply your earnings (minus "
            "₱250,000) by 0.08. If you use the detailed option, subtract your business expenses "
            "first, then use a tax table. The app does all the math for you and shows both "
            "options so you can pick the one that saves you more money."
        ),
        examples=[
            _example(
                "Freelancer with ₱800,000 gross, using 8% flat tax",
                "Taxable: ₱800,000 - ₱250,000 = ₱550,000. Tax: ₱550,000 × 8% = ₱44,000. "
                "Quarterly: ₱11,000 each.",
            ),
            _example(
                "Freelancer with ₱800,000 gross, ₱400,000 expenses, using graduated rates",
                "Using OSD (40% = ₱320,000) vs Itemized (₱400,000). Itemized is better. "
                "Taxable: ₱400,000. Tax: ₱22,500.",
            ),
        ],
    ),
    RuleModuleId.FILING_OBLIGATIONS: PlainLanguageExplanation(
        summary=(
            "This rule determines which BIR forms you need to file based on your income sources "
            "and tax regime. The main forms are: 1701Q (quarterly income tax), 1701 (annual "
            "income tax), and 2551Q (percentage tax, only if not using 8% option)."
        ),
        for_beginners=(
            "The BIR has different forms for different purposes. Don't worry about memorizing "
            "form numbers - this app will tell you exactly which forms to file and when. The key "
            "things to remember: (1) You'll file quarterly and annually, (2) Keep receipts from "
            "clients who deduct taxes from your payments (Form 2307), and (3) Keep records of "
            "your income and expenses."
        ),
        examples=[
            _example(
                "Freelancer using 8% flat tax",
                "File Form 1701Q quarterly and Form 1701 annually. No percentage tax (2551Q) needed.",
            ),
            _example(
                "Small business using graduated rates",
                "File Form 1701Q (income tax) AND Form 2551Q (3% percentage tax) quarterly, "
                "plus annual Form 1701.",
            ),
            _example(
                "Employee with side freelancing",
                "File Form 1701Q quarterly for freelance income. Annual Form 1701 combines both "
                "employment (from 2316) and freelance income.",
            ),
        ],
    ),
    RuleModuleId.DEADLINE_CALCULATION: PlainLanguageExplanation(
        summary=(
            "Tax filing deadlines in the Philippines follow a regular schedule. Quarterly returns "
            "(1701Q, 2551Q) are typically due on the 15th or 25th of the month following the "
            "quarter. The annual return (1701) is due on April 15th of the following year."
        ),
        for_beginners=(
            "Here's the simple version: File something every quarter (every 3 months) and once a "
            "year. The app will send you reminders before each deadline. If you miss a deadline, "
            "you'll have to pay extra fees (penalties), so try to file on time. If you can't pay "
            "everything, it's still better to file on time and pay what you can."
        ),
        examples=[
            _example(
                "Q1 2024 income tax (Form 1701Q)",
                "Due on May 15, 2024 (covers income from January-March 2024)",
            ),
            _example("Annual return for Tax Year 2024", "Due on April 15, 2025"),
            _example(
                "Q3 2024 percentage tax (Form 2551Q)",
                "Due on October 25, 2024 (covers sales from July-September 2024). "
                "October-December sales are settled with the annual return.",
            ),
        ],
    ),
    RuleModuleId.RISK_ASSESSMENT: PlainLanguageExplanation(
        summary=(
            "The risk assessment identifies potential issues with your tax situation that may "
            "require attention or professional consultation. Issues range from informational "
            "notes to situations requiring CPA review."
        ),
        for_beginners=(
            "This is like a health check for your tax situation. Green means all good. Yellow "
            'means "heads up, you should look at this." Red means "this is serious, you should '
            'talk to a professional accountant." Always address red flags before filing.'
        ),
        examples=[
            _example(
                "Earning ₱2.8M approaching VAT threshold",
                "Warning flag: Approaching VAT threshold. Monitor income and prepare for "
                "potential VAT registration.",
            ),
            _example(
                "Not registered with BIR but earning income",
                "CPA Review Required: Must register immediately. Potential back taxes and "
                "penalties may apply.",
            ),
        ],
    ),
}

_RULE_CLASSES: dict[RuleModuleId, type[RuleModule]] = {
    rule.module_id: rule
    for rule in (
        RegimeDeterminationRule,
        TaxComputationRule,
        FilingObligationsRule,
        DeadlineCalculationRule,
        RiskAssessmentRule,
    )
}


def get_rule_explanation(rule_module_id: Union[RuleModuleId, str]) -> RuleExplanation:
    """
    Look up the plain-language explanation of a rule module.

    Args:
        rule_module_id: RuleModuleId member or its string value

    Returns:
        RuleExplanation with the module's identity and static text

    Raises:
        RuleModuleNotFoundError: If the identifier names no rule module
    """
    try:
        module_id = RuleModuleId(rule_module_id)
    except ValueError:
        raise RuleModuleNotFoundError(
            f"Rule module not found: {rule_module_id}",
            rule_module_id=str(rule_module_id),
            available_ids=[m.value for m in RuleModuleId],
        ) from None

    rule = _RULE_CLASSES[module_id]
    explanation = EXPLANATIONS[module_id]
    return RuleExplanation(
        id=module_id,
        code=rule.code,
        version=rule.version,
        title=rule.title,
        summary=explanation.summary,
        for_beginners=explanation.for_beginners,
        examples=list(explanation.examples),
    )


def get_all_rule_explanations() -> list[RuleExplanation]:
    """Explanations for every rule module, in pipeline order."""
    return [get_rule_explanation(module_id) for module_id in RuleModuleId]
