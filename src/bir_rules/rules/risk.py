"""Compliance risk assessment.

Runs a fixed battery of independent checks over the assessment input.
Each check either stays silent or emits exactly one flag; checks never
short-circuit each other, so several flags may co-occur.

Risk levels:
- INFO: Nice to know, no action needed
- WARNING: The taxpayer should review or reconsider
- CPA_REVIEW_REQUIRED: Professional consultation strongly recommended
"""

from decimal import Decimal
from typing import Optional

import structlog

from ..models import (
    RegistrationStatus,
    RiskFlag,
    RiskLevel,
    RuleInput,
    TaxRegime,
    UserType,
)
from ..thresholds import VAT_THRESHOLD
from .base import RuleModule, RuleModuleId, format_peso, id_sequence

logger = structlog.get_logger()

APPROACHING_VAT_RATIO = Decimal("0.8")
HIGH_WITHHOLDING_RATE = Decimal("0.15")
HIGH_WITHHOLDING_AMOUNT = Decimal("50000")
FLAT_HIGH_EXPENSE_RATIO = Decimal("0.5")
LARGE_INCOME_THRESHOLD = Decimal("500000")


class RiskAssessmentRule(RuleModule):
    """Identify compliance issues and situations that need CPA review."""

    module_id = RuleModuleId.RISK_ASSESSMENT
    code = "RISK_ASSESS"
    version = "1.0.0"
    title = "Tax Risk Assessment"

    def execute(self, rule_input: RuleInput, regime: Optional[TaxRegime] = None) -> list[RiskFlag]:
        """
        Run every risk check.

        Args:
            rule_input: Assessment input
            regime: Effective regime (default: the input's declared regime)

        Returns:
            Triggered flags in check order, with ids RISK-1, RISK-2, ...
        """
        regime = regime or rule_input.regime_choice
        next_id = id_sequence("RISK")
        flags: list[RiskFlag] = []

        def flag(
            level: RiskLevel,
            code: str,
            title: str,
            description: str,
            recommended_action: str,
            affected_fields: list[str],
        ) -> None:
            flags.append(
                RiskFlag(
                    id=next_id(),
                    level=level,
                    code=code,
                    title=title,
                    description=description,
                    rule_module_id=self.module_id.value,
                    recommended_action=recommended_action,
                    affected_fields=affected_fields,
                )
            )

        gross_receipts = rule_input.business_income
        withholding_streams = [s for s in rule_input.income_streams if s.has_withholding]
        uncertified_streams = [s for s in withholding_streams if not s.form_2307_received]

        # =====================================================================
        # REGISTRATION STATUS
        # =====================================================================

        if rule_input.registration_status == RegistrationStatus.NOT_REGISTERED and gross_receipts > 0:
            flag(
                RiskLevel.CPA_REVIEW_REQUIRED,
                "UNREG_WITH_INCOME",
                "Operating Without BIR Registration",
                f"You have reported business/professional income of {format_peso(gross_receipts)} "
                "but are not registered with the BIR. This may have legal and tax implications.",
                "Register with the BIR immediately. Consult a CPA to assess any back taxes, "
                "penalties, or amnesty programs that may apply to your situation.",
                ["registration_status", "tin"],
            )

        if rule_input.registration_status == RegistrationStatus.NEEDS_UPDATE:
            flag(
                RiskLevel.WARNING,
                "REG_NEEDS_UPDATE",
                "BIR Registration Needs Updating",
                "Your BIR registration may need updating. This could affect your tax filing requirements.",
                "Visit your RDO to update your registration. Common updates include: change of "
                "address, change of line of business, or updating from employee to self-employed status.",
                ["registration_status", "rdo"],
            )

        # =====================================================================
        # INCOME THRESHOLDS
        # =====================================================================

        if VAT_THRESHOLD * APPROACHING_VAT_RATIO <= gross_receipts < VAT_THRESHOLD:
            flag(
                RiskLevel.WARNING,
                "APPROACHING_VAT_THRESHOLD",
                "Approaching VAT Registration Threshold",
                f"Your gross receipts ({format_peso(gross_receipts)}) are approaching the "
                f"{format_peso(VAT_THRESHOLD)} VAT threshold. Once exceeded, you must register for VAT.",
                "Monitor your income closely. If you expect to exceed ₱3M, consult a CPA about "
                "VAT registration requirements and timing.",
                ["income_streams"],
            )

        if gross_receipts > VAT_THRESHOLD:
            flag(
                RiskLevel.CPA_REVIEW_REQUIRED,
                "EXCEEDS_VAT_THRESHOLD",
                "Gross Receipts Exceed VAT Threshold",
                f"Your gross receipts ({format_peso(gross_receipts)}) exceed the "
                f"{format_peso(VAT_THRESHOLD)} VAT threshold. This app currently does not support VAT workflows.",
                "IMPORTANT: You are required to register for VAT. Consult a CPA immediately for "
                "proper VAT compliance, which includes different filing requirements and rates.",
                ["income_streams", "selected_regime"],
            )

        # =====================================================================
        # WITHHOLDING
        # =====================================================================

        if uncertified_streams:
            uncertified_withheld = sum(
                (s.withheld_amount or Decimal("0") for s in uncertified_streams),
                Decimal("0"),
            )
            flag(
                RiskLevel.WARNING,
                "MISSING_2307",
                "Missing Form 2307 Certificates",
                f"You have {len(uncertified_streams)} income source(s) with withholding taxes "
                f"({format_peso(uncertified_withheld)}) but no Form 2307 received. Without 2307, "
                "you cannot claim these as tax credits.",
                "Request Form 2307 certificates from your clients/payors. These are usually issued "
                "within the month following payment. Keep them for filing and audit purposes.",
                ["income_streams"],
            )

        total_withheld = sum(
            (s.withheld_amount or Decimal("0") for s in withholding_streams),
            Decimal("0"),
        )
        if gross_receipts > 0:
            withholding_rate = total_withheld / gross_receipts
            if withholding_rate > HIGH_WITHHOLDING_RATE and total_withheld > HIGH_WITHHOLDING_AMOUNT:
                flag(
                    RiskLevel.INFO,
                    "HIGH_WITHHOLDING",
                    "High Withholding Tax Rate",
                    f"Your effective withholding rate is {withholding_rate * 100:.1f}%. "
                    "This may result in a tax refund or credit.",
                    "Verify that clients are using the correct withholding rate for your income "
                    "type. You may be entitled to a refund if overwithholding occurred.",
                    ["income_streams"],
                )

        # =====================================================================
        # REGIME SELECTION
        # =====================================================================

        if regime == TaxRegime.UNDETERMINED:
            flag(
                RiskLevel.WARNING,
                "REGIME_NOT_SELECTED",
                "Tax Regime Not Yet Selected",
                "You have not selected between 8% flat tax and graduated rates. This selection "
                "affects your tax computation and filing obligations.",
                "Review the regime comparison and select your preferred option. Once selected and "
                "filed, this cannot be changed for the tax year.",
                ["selected_regime"],
            )

        if regime == TaxRegime.EIGHT_PERCENT_FLAT and gross_receipts > 0:
            expense_ratio = rule_input.total_deductions / gross_receipts
            if expense_ratio > FLAT_HIGH_EXPENSE_RATIO:
                flag(
                    RiskLevel.INFO,
                    "8PCT_HIGH_EXPENSES",
                    "High Expenses with 8% Flat Tax",
                    f"Your expenses are {expense_ratio * 100:.0f}% of gross receipts. With the 8% "
                    "flat tax, you cannot deduct these expenses. Graduated rates might result in lower tax.",
                    "Review the regime comparison. If you have not yet filed your first quarterly "
                    "return for the year, you may still switch to graduated rates.",
                    ["selected_regime", "expenses"],
                )

        # =====================================================================
        # DATA QUALITY
        # =====================================================================

        if not rule_input.income_streams:
            flag(
                RiskLevel.WARNING,
                "NO_INCOME_RECORDED",
                "No Income Streams Recorded",
                "No income has been recorded for this tax year. Add your income sources to "
                "generate an accurate assessment.",
                "Add your income streams, including amounts and whether withholding tax was deducted.",
                ["income_streams"],
            )

        if (
            rule_input.user_type == UserType.MIXED_INCOME
            and not rule_input.has_employment_income
            and not rule_input.has_employment_stream
        ):
            flag(
                RiskLevel.WARNING,
                "MIXED_NO_EMPLOYMENT",
                "Mixed Income Type Without Employment Income",
                'You selected "Mixed Income" as your user type but have not recorded any employment income.',
                "Either add your employment income details or change your user type if you no "
                "longer have employment income.",
                ["user_type", "has_employment_income", "income_streams"],
            )

        if gross_receipts > LARGE_INCOME_THRESHOLD:
            has_any_docs = any(
                s.form_2307_received or s.has_withholding for s in rule_input.income_streams
            )
            if not has_any_docs:
                flag(
                    RiskLevel.INFO,
                    "LARGE_INCOME_NO_DOCS",
                    "Consider Documenting Income Sources",
                    f"Your income exceeds {format_peso(LARGE_INCOME_THRESHOLD)} with no withholding "
                    "certificates indicated. Ensure you have proper documentation.",
                    "Keep official receipts, invoices, and contracts for all income. These serve as "
                    "evidence in case of BIR audit.",
                    ["income_streams"],
                )

        # =====================================================================
        # EXPENSE DOCUMENTATION
        # =====================================================================

        if regime == TaxRegime.GRADUATED_RATES and rule_input.expenses:
            flag(
                RiskLevel.INFO,
                "EXPENSE_DOCS_REMINDER",
                "Keep Expense Documentation",
                "You are using graduated rates with itemized deductions. All deductible expenses "
                "must be supported by official receipts.",
                "Ensure you have Official Receipts (OR) or Sales Invoices (SI) for all business "
                "expenses. The BIR may disallow deductions without proper documentation.",
                ["expenses"],
            )

        logger.debug(
            "risks_assessed",
            total=len(flags),
            codes=[f.code for f in flags],
        )
        return flags
