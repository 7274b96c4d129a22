"""Filing deadline calculation.

Turns applicable obligations into concrete due dates for the tax year.
Due dates falling on a weekend move to the following Monday; there is no
holiday calendar.

Legal basis:
- NIRC Sections 248-249 (surcharges and interest on late payment)
- BIR filing calendars for Forms 1701Q, 1701 and 2551Q
"""

from datetime import date, timedelta

import structlog

from ..models import ASAP, Deadline, FilingFrequency, Obligation, RuleInput
from ..thresholds import (
    ANNUAL_REMINDER_DAYS,
    DEFAULT_ANNUAL_DEADLINE,
    PERCENTAGE_TAX_RATE,
    QUARTERLY_REMINDER_DAYS,
    QUARTERS,
    REGISTRATION_FEE_DEADLINE,
    REGISTRATION_FEE_REMINDER_DAYS,
    DueDay,
    get_deadline_config,
)
from .base import RuleModule, RuleModuleId, id_sequence

logger = structlog.get_logger()

REGISTRATION_FEE_FORM = "0605"
INITIAL_REGISTRATION_FORM = "1901"

BASE_PENALTY = (
    "Late filing penalties:\n"
    "• 25% surcharge on tax due (for late filing)\n"
    "• 12% annual interest on unpaid tax\n"
    "• Compromise penalty (varies by amount)\n"
    "\n"
    "Note: Penalties compound, so file and pay on time to avoid additional charges."
)

FORM_PENALTY_NOTES = {
    "1701Q": "Quarterly returns help spread your tax payments throughout the year.",
    "1701": "Annual return reconciles all quarterly payments. Any underpayment is due with this return.",
    "2551Q": f"Percentage tax ({PERCENTAGE_TAX_RATE:.0%}) is separate from income tax.",
}

REGISTRATION_FEE_PENALTY = "Late registration may result in penalties and surcharges."
INITIAL_REGISTRATION_PENALTY = (
    "Operating without BIR registration may result in penalties, surcharges, and "
    "possible criminal liability."
)


def adjust_for_weekend(due: date) -> date:
    """Move a Saturday or Sunday due date to the following Monday."""
    weekday = due.weekday()
    if weekday == 5:  # Saturday
        return due + timedelta(days=2)
    if weekday == 6:  # Sunday
        return due + timedelta(days=1)
    return due


def get_penalty_info(form_code: str) -> str:
    """Penalty text for a form: standard boilerplate plus form-specific notes."""
    if form_code == REGISTRATION_FEE_FORM:
        return REGISTRATION_FEE_PENALTY
    if form_code == INITIAL_REGISTRATION_FORM:
        return INITIAL_REGISTRATION_PENALTY
    note = FORM_PENALTY_NOTES.get(form_code)
    return f"{BASE_PENALTY}\n\n{note}" if note else BASE_PENALTY


class DeadlineCalculationRule(RuleModule):
    """
    Calculate due dates for every applicable obligation.

    - Quarterly forms with a configured calendar get one deadline each for
      Q1 to Q3 of the tax year. A configured Q4 date is ignored.
    - Annual forms are due on their configured day of the following year,
      April 15 when nothing is configured.
    - The registration fee (0605) is due January 31 of the tax year.
    - Initial registration (1901) has no calendar date and is due ASAP.

    The result is sorted ascending by due date with ASAP entries first.
    """

    module_id = RuleModuleId.DEADLINE_CALCULATION
    code = "DEADLINE_CALC"
    version = "1.0.0"
    title = "Tax Filing Deadline Calculator"

    def execute(self, rule_input: RuleInput, obligations: list[Obligation]) -> list[Deadline]:
        """
        Calculate deadlines for the given obligations.

        Args:
            rule_input: Assessment input (only the tax year is read)
            obligations: Output of the filing obligations module

        Returns:
            Sorted deadlines with ids DL-1, DL-2, ... in generation order
        """
        tax_year = rule_input.tax_year
        next_id = id_sequence("DL")
        deadlines: list[Deadline] = []

        for obligation in obligations:
            if not obligation.is_applicable:
                continue

            if obligation.form_code == INITIAL_REGISTRATION_FORM:
                deadlines.append(
                    Deadline(
                        id=next_id(),
                        obligation_id=obligation.id,
                        form_code=obligation.form_code,
                        description="BIR Registration - Within 30 days of starting business",
                        due_date=ASAP,
                        period="Before business starts",
                        reminder_days=[],
                        penalty_info=get_penalty_info(obligation.form_code),
                    )
                )
                continue

            if obligation.form_code == REGISTRATION_FEE_FORM:
                deadlines.append(
                    Deadline(
                        id=next_id(),
                        obligation_id=obligation.id,
                        form_code=obligation.form_code,
                        description=f"Annual Registration Fee - {tax_year}",
                        due_date=self.calculate_due_date(tax_year, REGISTRATION_FEE_DEADLINE),
                        period=str(tax_year),
                        reminder_days=list(REGISTRATION_FEE_REMINDER_DAYS),
                        penalty_info=get_penalty_info(obligation.form_code),
                    )
                )
                continue

            config = get_deadline_config(obligation.form_code)

            if obligation.frequency == FilingFrequency.QUARTERLY and config and config.quarter_deadlines:
                for quarter in QUARTERS:
                    due_day = config.quarter_deadlines.get(quarter)
                    if due_day is None:
                        continue
                    deadlines.append(
                        Deadline(
                            id=next_id(),
                            obligation_id=obligation.id,
                            form_code=obligation.form_code,
                            description=f"{obligation.form_name} - {quarter} {tax_year}",
                            due_date=self.calculate_due_date(tax_year, due_day),
                            period=f"{quarter} {tax_year}",
                            reminder_days=list(QUARTERLY_REMINDER_DAYS),
                            penalty_info=get_penalty_info(obligation.form_code),
                        )
                    )

            if obligation.frequency == FilingFrequency.ANNUAL or (config and config.annual_deadline):
                annual_day = (config.annual_deadline if config else None) or DEFAULT_ANNUAL_DEADLINE
                deadlines.append(
                    Deadline(
                        id=next_id(),
                        obligation_id=obligation.id,
                        form_code=obligation.form_code,
                        description=f"{obligation.form_name} - Tax Year {tax_year}",
                        # Annual returns are filed the year after the tax year
                        due_date=self.calculate_due_date(tax_year + 1, annual_day),
                        period=f"Annual {tax_year}",
                        reminder_days=list(ANNUAL_REMINDER_DAYS),
                        penalty_info=get_penalty_info(obligation.form_code),
                    )
                )

        deadlines.sort(key=Deadline.sort_key)

        logger.debug(
            "deadlines_calculated",
            tax_year=tax_year,
            total=len(deadlines),
            asap=sum(1 for d in deadlines if d.is_asap),
        )
        return deadlines

    @staticmethod
    def calculate_due_date(year: int, due_day: DueDay) -> date:
        """Resolve a configured due day to a weekend-adjusted date.

        Args:
            year: Base year (the tax year for quarterly forms)
            due_day: Configured month/day, optionally in the next year
        """
        if due_day.next_year:
            year += 1
        return adjust_for_weekend(date(year, due_day.month, due_day.day))
