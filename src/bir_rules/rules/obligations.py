"""Filing obligations determination.

Determines which BIR forms the taxpayer must file based on user type,
registration status, income sources and the effective tax regime.

Legal basis:
- NIRC as amended by the TRAIN Law
- RR No. 8-2018 (8% Income Tax Option)
- RR No. 11-2018 (Withholding Tax)
"""

from typing import Optional

import structlog

from ..models import (
    FilingFrequency,
    Obligation,
    RegistrationStatus,
    RuleInput,
    TaxRegime,
    UserType,
)
from ..thresholds import ANNUAL_REGISTRATION_FEE, PERCENTAGE_TAX_RATE
from .base import RuleModule, RuleModuleId, format_peso, id_sequence

logger = structlog.get_logger()

QUARTERLY_FILER_TYPES = frozenset({
    UserType.FREELANCER,
    UserType.SELF_EMPLOYED,
    UserType.MICRO_SMALL_BUSINESS,
    UserType.MIXED_INCOME,
})

# Mixed-income earners pay percentage tax through a different path
PERCENTAGE_TAX_TYPES = frozenset({
    UserType.FREELANCER,
    UserType.SELF_EMPLOYED,
    UserType.MICRO_SMALL_BUSINESS,
})


class FilingObligationsRule(RuleModule):
    """
    Derive the ordered list of filing obligations.

    Every rule fires independently; the emission order is fixed:
    1701Q, 1701, 2551Q, 1901, 0605, 2307, 2316, BOOKS.
    """

    module_id = RuleModuleId.FILING_OBLIGATIONS
    code = "FILING_OBLIGATIONS_DETERMINATION"
    version = "1.0.0"
    title = "Tax Filing Obligations Determination"

    def execute(self, rule_input: RuleInput, regime: Optional[TaxRegime] = None) -> list[Obligation]:
        """
        Determine filing obligations.

        Args:
            rule_input: Assessment input
            regime: Effective regime (default: the input's declared regime)

        Returns:
            Obligations in emission order, with ids OBL-1, OBL-2, ...
        """
        regime = regime or rule_input.regime_choice
        is_flat = regime == TaxRegime.EIGHT_PERCENT_FLAT
        next_id = id_sequence("OBL")
        obligations: list[Obligation] = []

        def add(
            form_code: str,
            form_name: str,
            description: str,
            frequency: FilingFrequency,
            notes: str,
            is_applicable: bool = True,
        ) -> None:
            obligations.append(
                Obligation(
                    id=next_id(),
                    form_code=form_code,
                    form_name=form_name,
                    description=description,
                    frequency=frequency,
                    is_applicable=is_applicable,
                    rule_module_id=self.module_id.value,
                    notes=notes,
                )
            )

        # =====================================================================
        # INCOME TAX
        # =====================================================================

        if rule_input.user_type in QUARTERLY_FILER_TYPES:
            add(
                "1701Q",
                "Quarterly Income Tax Return",
                "For self-employed individuals, estates, and trusts",
                FilingFrequency.QUARTERLY,
                "File quarterly even under 8% regime. Report gross receipts and compute tax at 8%."
                if is_flat
                else "Report income and compute tax using graduated rates with deductions.",
            )

        add(
            "1701",
            "Annual Income Tax Return",
            "Annual income tax return for individuals",
            FilingFrequency.ANNUAL,
            self._annual_return_notes(rule_input, is_flat),
        )

        # =====================================================================
        # PERCENTAGE TAX (non-VAT)
        # =====================================================================

        if (
            not is_flat
            and regime == TaxRegime.GRADUATED_RATES
            and rule_input.user_type in PERCENTAGE_TAX_TYPES
        ):
            add(
                "2551Q",
                "Quarterly Percentage Tax Return",
                f"{PERCENTAGE_TAX_RATE:.0%} percentage tax on gross sales/receipts (non-VAT)",
                FilingFrequency.QUARTERLY,
                f"{PERCENTAGE_TAX_RATE:.0%} of gross sales/receipts. Required for non-VAT "
                "registered taxpayers using graduated rates. NOT required if using 8% flat "
                "tax option.",
            )
        elif is_flat:
            # Kept in the list to explain why it does not apply
            add(
                "2551Q",
                "Quarterly Percentage Tax Return",
                f"{PERCENTAGE_TAX_RATE:.0%} percentage tax on gross sales/receipts (non-VAT)",
                FilingFrequency.QUARTERLY,
                "Not required because you elected 8% flat tax, which replaces percentage tax.",
                is_applicable=False,
            )

        # =====================================================================
        # REGISTRATION
        # =====================================================================

        if rule_input.registration_status == RegistrationStatus.NOT_REGISTERED:
            add(
                "1901",
                "Application for Registration (Self-Employed)",
                "Initial BIR registration for self-employed individuals",
                FilingFrequency.ANNUAL,  # one-time, tracked annually
                "IMPORTANT: You must register with the BIR before starting business activities. "
                "This should be done within 30 days of starting business.",
            )

        if rule_input.registration_status == RegistrationStatus.REGISTERED:
            add(
                "0605",
                "Payment Form (Annual Registration Fee)",
                f"Annual registration fee of {format_peso(ANNUAL_REGISTRATION_FEE)}",
                FilingFrequency.ANNUAL,
                f"{format_peso(ANNUAL_REGISTRATION_FEE)} annual registration fee, due on or before "
                "January 31 each year.",
            )

        # =====================================================================
        # WITHHOLDING AND EMPLOYMENT CERTIFICATES
        # =====================================================================

        if rule_input.has_withholding:
            add(
                "2307",
                "Certificate of Creditable Tax Withheld at Source",
                "Certificate received from clients who withheld taxes",
                FilingFrequency.QUARTERLY,
                "You should receive Form 2307 from clients who withhold taxes from your payments. "
                "These are CREDITS that reduce your tax due. Keep all 2307s for filing.",
            )

        if rule_input.has_employment_income:
            add(
                "2316",
                "Certificate of Compensation Payment/Tax Withheld",
                "Annual certificate from employer",
                FilingFrequency.ANNUAL,
                "Your employer should provide this by January 31. You need this to file "
                "Form 1701 for mixed income.",
            )

        # =====================================================================
        # BOOKS OF ACCOUNTS
        # =====================================================================

        if rule_input.user_type != UserType.MIXED_INCOME or rule_input.has_business_stream:
            add(
                "BOOKS",
                "Books of Accounts",
                "Required record-keeping for business/professional income",
                FilingFrequency.ANNUAL,
                "Under 8% regime, you may use simplified books (journal and ledger). "
                "Must be registered with BIR."
                if is_flat
                else "Must maintain books of accounts (journal, ledger, cash "
                "receipts/disbursements). Required for itemized deductions.",
            )

        logger.debug(
            "obligations_determined",
            regime=regime.value,
            total=len(obligations),
            applicable=[o.form_code for o in obligations if o.is_applicable],
        )
        return obligations

    @staticmethod
    def _annual_return_notes(rule_input: RuleInput, is_flat: bool) -> str:
        if rule_input.has_employment_income:
            return (
                "As a mixed-income earner, you must file Form 1701 combining employment and "
                "business income. Attach Form 2316 from your employer."
            )
        if is_flat:
            return (
                "File annual return reporting total gross receipts. Final tax computation "
                "using 8% rate on amounts exceeding ₱250,000."
            )
        return "File annual return with final tax computation. Report all income and claim applicable deductions."
