"""8% flat tax eligibility and regime recommendation.

Legal basis:
- TRAIN Law (RA 10963) Section 24(A)(2)(b)
- Revenue Regulations No. 8-2018
"""

from decimal import Decimal
from typing import NamedTuple

import structlog

from ..models import (
    RegimeComparison,
    RegimeComparisonResult,
    RegimeEstimate,
    RuleInput,
    TaxRegime,
    UserType,
)
from ..thresholds import (
    EIGHT_PERCENT_GROSS_LIMIT,
    HIGH_DEDUCTION_RATIO,
    apply_graduated_rates,
    best_graduated_deduction,
    compute_eight_percent_tax,
    round_rate,
)
from .base import RuleModule, RuleModuleId, format_peso

logger = structlog.get_logger()

ELIGIBLE_USER_TYPES = frozenset({
    UserType.FREELANCER,
    UserType.SELF_EMPLOYED,
    UserType.MICRO_SMALL_BUSINESS,
    UserType.MIXED_INCOME,
})

EIGHT_PERCENT_PROS = [
    "Simpler computation - just 8% of gross receipts above ₱250,000",
    "No need to track itemized deductions",
    "Less bookkeeping requirements",
    "Replaces percentage tax and income tax",
]
EIGHT_PERCENT_CONS = [
    "Cannot claim business expenses as deductions",
    "May pay more tax if expenses are high (above 40% of gross)",
    "Fixed rate regardless of actual profitability",
    "Not available if gross exceeds ₱3,000,000",
]
GRADUATED_PROS = [
    "Can deduct actual business expenses",
    "May result in lower tax if expenses are high",
    "Progressive rates favor lower income",
    "More accurate reflection of actual profit",
]
GRADUATED_CONS = [
    "Requires detailed expense tracking with receipts",
    "More complex tax computation",
    "Subject to both income tax AND percentage tax (3%)",
    "Higher compliance burden",
]

REASON_INELIGIBLE = "8% option not available: {reason}"
REASON_HIGH_EXPENSES = (
    "Your expenses appear high relative to income. Graduated rates with "
    "itemized deductions may result in lower tax."
)
REASON_FLAT_CHEAPER = (
    "Based on your income and expenses, 8% flat tax would result in lower "
    "tax liability with simpler compliance."
)
REASON_GRADUATED_CHEAPER = (
    "Based on your income and deductible expenses, graduated rates would "
    "result in lower tax liability."
)


class Eligibility(NamedTuple):
    is_eligible: bool
    reason: str


class RegimeDeterminationRule(RuleModule):
    """
    Compare the 8% flat tax with graduated rates and recommend one.

    The recommendation policy is evaluated in a fixed order:
    1. Not eligible for the 8% option -> graduated rates
    2. Deductions above 40% of business income -> graduated rates
    3. 8% tax strictly lower -> 8% flat
    4. Otherwise -> graduated rates

    Only non-employment income enters either computation; compensation
    income is taxed through employer withholding.
    """

    module_id = RuleModuleId.REGIME_DETERMINATION
    code = "REGIME_8PCT_ELIGIBILITY"
    version = "1.0.0"
    title = "8% Flat Tax Eligibility Determination"

    def execute(self, rule_input: RuleInput) -> RegimeComparisonResult:
        """
        Determine eligibility and recommend a tax regime.

        Args:
            rule_input: Assessment input (its selected regime is ignored)

        Returns:
            RegimeComparisonResult with both estimates and the recommendation
        """
        business_income = rule_input.business_income
        total_deductions = rule_input.total_deductions
        eligibility = self.check_eligibility(rule_input)

        eight_percent_tax, _ = compute_eight_percent_tax(business_income)
        graduated_tax = self.calculate_graduated_tax(business_income, total_deductions)

        # An ineligible taxpayer cannot owe anything under the 8% option
        reported_flat_tax = eight_percent_tax if eligibility.is_eligible else Decimal("0")

        comparison = RegimeComparison(
            eight_percent=RegimeEstimate(
                estimated_tax=reported_flat_tax,
                effective_rate=self._effective_rate(eight_percent_tax, business_income),
                pros=list(EIGHT_PERCENT_PROS),
                cons=list(EIGHT_PERCENT_CONS),
            ),
            graduated_rates=RegimeEstimate(
                estimated_tax=graduated_tax,
                effective_rate=self._effective_rate(graduated_tax, business_income),
                pros=list(GRADUATED_PROS),
                cons=list(GRADUATED_CONS),
            ),
        )

        deduction_ratio = (
            total_deductions / business_income if business_income > 0 else Decimal("0")
        )

        if not eligibility.is_eligible:
            recommendation = TaxRegime.GRADUATED_RATES
            reason = REASON_INELIGIBLE.format(reason=eligibility.reason)
        elif deduction_ratio > HIGH_DEDUCTION_RATIO:
            recommendation = TaxRegime.GRADUATED_RATES
            reason = REASON_HIGH_EXPENSES
        elif eight_percent_tax < graduated_tax:
            recommendation = TaxRegime.EIGHT_PERCENT_FLAT
            reason = REASON_FLAT_CHEAPER
        else:
            recommendation = TaxRegime.GRADUATED_RATES
            reason = REASON_GRADUATED_CHEAPER

        logger.debug(
            "regime_determined",
            eligible=eligibility.is_eligible,
            business_income=str(business_income),
            eight_percent_tax=str(eight_percent_tax),
            graduated_tax=str(graduated_tax),
            recommendation=recommendation.value,
        )

        return RegimeComparisonResult(
            eligible_8_percent=eligibility.is_eligible,
            eligibility_reason=eligibility.reason,
            comparison=comparison,
            recommendation=recommendation,
            recommendation_reason=reason,
            rule_module_id=self.module_id.value,
        )

    def check_eligibility(self, rule_input: RuleInput) -> Eligibility:
        """Check whether the taxpayer may elect the 8% option."""
        if rule_input.user_type not in ELIGIBLE_USER_TYPES:
            return Eligibility(
                False,
                "Only self-employed individuals, freelancers, and sole proprietors can elect 8% tax.",
            )

        if rule_input.business_income > EIGHT_PERCENT_GROSS_LIMIT:
            return Eligibility(
                False,
                f"Gross receipts/sales exceed {format_peso(EIGHT_PERCENT_GROSS_LIMIT)}. You are "
                "VAT-registered and cannot use 8% flat tax.",
            )

        if rule_input.user_type == UserType.MIXED_INCOME or rule_input.has_employment_income:
            return Eligibility(
                True,
                "Eligible for 8% flat tax on business/professional income. Employment "
                "income will be taxed separately through withholding.",
            )

        return Eligibility(True, "You meet all requirements for 8% flat tax on gross sales/receipts.")

    @staticmethod
    def calculate_graduated_tax(business_income: Decimal, itemized_deductions: Decimal) -> Decimal:
        """Graduated tax after the larger of OSD and itemized deductions."""
        deduction, _ = best_graduated_deduction(business_income, itemized_deductions)
        return apply_graduated_rates(max(Decimal("0"), business_income - deduction))

    @staticmethod
    def _effective_rate(tax: Decimal, business_income: Decimal) -> Decimal:
        if business_income <= 0:
            return Decimal("0")
        return round_rate(tax / business_income)
