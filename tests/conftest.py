"""Shared fixtures and factories for the rules engine tests."""

from decimal import Decimal
from typing import Any, Optional

import pytest

from bir_rules import RulesEngine
from bir_rules.models import (
    Expense,
    ExpenseCategory,
    IncomeStream,
    IncomeType,
    RegistrationStatus,
    RuleInput,
    TaxRegime,
    UserType,
)


def make_stream(
    gross_amount: str = "500000",
    income_type: IncomeType = IncomeType.FREELANCE_SERVICE,
    stream_id: str = "inc-1",
    **overrides: Any,
) -> IncomeStream:
    """Build an income stream with sensible defaults."""
    return IncomeStream(
        id=stream_id,
        income_type=income_type,
        gross_amount=Decimal(gross_amount),
        **overrides,
    )


def make_expense(
    amount: str,
    category: ExpenseCategory = ExpenseCategory.SUPPLIES,
    expense_id: str = "exp-1",
    is_deductible: bool = True,
) -> Expense:
    """Build an expense item."""
    return Expense(
        id=expense_id,
        category=category,
        amount=Decimal(amount),
        is_deductible=is_deductible,
    )


def make_input(
    streams: Optional[list[IncomeStream]] = None,
    expenses: Optional[list[Expense]] = None,
    **overrides: Any,
) -> RuleInput:
    """Build a RuleInput for a registered freelancer earning 500K in 2024."""
    data: dict[str, Any] = {
        "tax_year": 2024,
        "user_type": UserType.FREELANCER,
        "registration_status": RegistrationStatus.REGISTERED,
        "has_employment_income": False,
        "income_streams": [make_stream()] if streams is None else streams,
        "expenses": expenses or [],
        "selected_regime": None,
        "tin": "123-456-789-000",
    }
    data.update(overrides)
    return RuleInput(**data)


@pytest.fixture
def engine() -> RulesEngine:
    """A rules engine with default configuration."""
    return RulesEngine()


@pytest.fixture
def freelancer_input() -> RuleInput:
    """Registered freelancer, 500K gross, no expenses, no regime chosen."""
    return make_input()


@pytest.fixture
def flat_freelancer_input() -> RuleInput:
    """Registered freelancer, 500K gross, 8% flat tax selected."""
    return make_input(selected_regime=TaxRegime.EIGHT_PERCENT_FLAT)


@pytest.fixture
def graduated_freelancer_input() -> RuleInput:
    """Registered freelancer, 500K gross with expenses, graduated rates selected."""
    return make_input(
        expenses=[make_expense("100000")],
        selected_regime=TaxRegime.GRADUATED_RATES,
    )


@pytest.fixture
def mixed_income_input() -> RuleInput:
    """Employee with a side freelance business."""
    return make_input(
        streams=[
            make_stream("600000", IncomeType.EMPLOYMENT, stream_id="inc-emp"),
            make_stream("400000", stream_id="inc-biz"),
        ],
        user_type=UserType.MIXED_INCOME,
        has_employment_income=True,
    )
