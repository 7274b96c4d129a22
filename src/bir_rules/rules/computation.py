"""Income tax computation under the effective regime.

Legal basis:
- NIRC as amended by the TRAIN Law
- RR No. 8-2018 (8% Income Tax Option)
"""

from decimal import ROUND_DOWN, Decimal
from typing import Optional

import structlog

from ..models import ComputedValues, QuarterlyPayments, RuleInput, TaxRegime
from ..thresholds import (
    CENTAVO,
    apply_graduated_rates,
    best_graduated_deduction,
    compute_eight_percent_tax,
    round_currency,
)
from .base import RuleModule, RuleModuleId

logger = structlog.get_logger()

DEDUCTION_NONE = "None (8% flat tax)"
DEDUCTION_OSD = "Optional Standard Deduction (40%)"
DEDUCTION_ITEMIZED = "Itemized Deductions"


class TaxComputationRule(RuleModule):
    """
    Compute tax liability, withholding credits and the quarterly schedule.

    Under the 8% option the tax is 8% of gross business receipts above
    ₱250,000. Any other regime value is computed with graduated rates on
    business income net of the larger of OSD and itemized deductions.
    Employment income is reported but excluded from the graduated base.
    """

    module_id = RuleModuleId.TAX_COMPUTATION
    code = "TAX_COMPUTE"
    version = "1.0.0"
    title = "Tax Computation Engine"

    def execute(self, rule_input: RuleInput, regime: Optional[TaxRegime] = None) -> ComputedValues:
        """
        Compute tax under the given regime.

        Args:
            rule_input: Assessment input
            regime: Effective regime (default: the input's declared regime)

        Returns:
            ComputedValues with a quarterly breakdown of the net tax
        """
        regime = regime or rule_input.regime_choice

        business_income = rule_input.business_income
        total_deductions = rule_input.total_deductions
        credits_applied = rule_input.total_withheld

        if regime == TaxRegime.EIGHT_PERCENT_FLAT:
            estimated_tax, taxable_income = compute_eight_percent_tax(business_income)
            deduction_method = DEDUCTION_NONE
        else:
            deduction, uses_osd = best_graduated_deduction(business_income, total_deductions)
            taxable_income = max(Decimal("0"), business_income - deduction)
            estimated_tax = apply_graduated_rates(taxable_income)
            deduction_method = DEDUCTION_OSD if uses_osd else DEDUCTION_ITEMIZED

        net_tax_payable = round_currency(max(Decimal("0"), estimated_tax - credits_applied))

        logger.debug(
            "tax_computed",
            regime=regime.value,
            taxable_income=str(taxable_income),
            estimated_tax=str(estimated_tax),
            credits_applied=str(credits_applied),
            net_tax_payable=str(net_tax_payable),
        )

        return ComputedValues(
            gross_income=rule_input.gross_income,
            business_income=business_income,
            employment_income=rule_input.employment_income,
            total_deductions=total_deductions,
            deduction_method=deduction_method,
            taxable_income=round_currency(taxable_income),
            estimated_tax=estimated_tax,
            credits_applied=credits_applied,
            net_tax_payable=net_tax_payable,
            quarterly_payments=self.calculate_quarterly_payments(net_tax_payable),
        )

    @staticmethod
    def calculate_quarterly_payments(net_tax_payable: Decimal) -> QuarterlyPayments:
        """Split the net tax into three even installments and a true-up.

        The annual installment absorbs the rounding remainder so the four
        amounts always add back to ``net_tax_payable``.
        """
        quarterly = round_currency(net_tax_payable / 4)
        if quarterly * 3 > net_tax_payable:
            # Only for amounts of a few centavos; keeps the true-up non-negative
            quarterly = (net_tax_payable / 4).quantize(CENTAVO, rounding=ROUND_DOWN)
        return QuarterlyPayments(
            q1=quarterly,
            q2=quarterly,
            q3=quarterly,
            annual=round_currency(net_tax_payable - quarterly * 3),
        )
