"""Tests for regime determination."""

from decimal import Decimal

import pytest

from bir_rules.models import IncomeType, RegimeComparisonResult, TaxRegime, UserType
from bir_rules.rules import RegimeDeterminationRule, RuleModuleId
from bir_rules.rules.regime import (
    REASON_FLAT_CHEAPER,
    REASON_GRADUATED_CHEAPER,
    REASON_HIGH_EXPENSES,
)

from conftest import make_expense, make_input, make_stream


@pytest.fixture
def rule() -> RegimeDeterminationRule:
    return RegimeDeterminationRule()


class TestEligibility:
    """Test suite for 8% option eligibility."""

    @pytest.mark.parametrize("user_type", list(UserType))
    def test_all_user_types_eligible_under_threshold(self, rule, user_type):
        """Every supported user type may elect the 8% option under 3M."""
        result = rule.execute(make_input(user_type=user_type))
        assert result.eligible_8_percent is True

    def test_above_vat_threshold_is_ineligible(self, rule):
        """Gross receipts over 3M rule out the 8% option."""
        result = rule.execute(make_input(streams=[make_stream("3500000")]))

        assert result.eligible_8_percent is False
        assert "₱3,000,000" in result.eligibility_reason
        assert result.recommendation == TaxRegime.GRADUATED_RATES
        assert result.recommendation_reason.startswith("8% option not available:")

    def test_exactly_at_threshold_is_eligible(self, rule):
        """The threshold itself is still eligible."""
        result = rule.execute(make_input(streams=[make_stream("3000000")]))
        assert result.eligible_8_percent is True

    def test_ineligible_flat_estimate_is_zero(self, rule):
        """An ineligible taxpayer sees no 8% tax estimate but keeps the formula's rate."""
        result = rule.execute(make_input(streams=[make_stream("3500000")]))

        assert result.comparison.eight_percent.estimated_tax == Decimal("0")
        # 8% of 3,250,000 over 3,500,000 gross
        assert result.comparison.eight_percent.effective_rate == Decimal("0.0743")

    def test_mixed_income_eligible_on_business_portion(self, rule, mixed_income_input):
        """Mixed-income earners are eligible on their business income."""
        result = rule.execute(mixed_income_input)

        assert result.eligible_8_percent is True
        assert "business/professional income" in result.eligibility_reason


class TestComparison:
    """Test suite for the side-by-side tax estimates."""

    def test_worked_example_600k(self, rule):
        """600K gross: 8% of 350K is 28K; OSD leaves 360K taxed at 16.5K."""
        result = rule.execute(make_input(streams=[make_stream("600000")]))

        assert result.comparison.eight_percent.estimated_tax == Decimal("28000")
        assert result.comparison.graduated_rates.estimated_tax == Decimal("16500")

    def test_effective_rates(self, rule):
        """Effective rate is tax over business income to four places."""
        result = rule.execute(make_input(streams=[make_stream("600000")]))

        assert result.comparison.eight_percent.effective_rate == Decimal("0.0467")
        assert result.comparison.graduated_rates.effective_rate == Decimal("0.0275")

    def test_only_business_income_counts(self, rule, mixed_income_input):
        """Employment income is excluded from both estimates."""
        result = rule.execute(mixed_income_input)

        # Business portion is 400K
        assert result.comparison.eight_percent.estimated_tax == Decimal("12000")
        assert result.comparison.graduated_rates.estimated_tax == Decimal("0")

    def test_pros_and_cons_present(self, rule, freelancer_input):
        result = rule.execute(freelancer_input)

        assert result.comparison.eight_percent.pros
        assert result.comparison.eight_percent.cons
        assert result.comparison.graduated_rates.pros
        assert result.comparison.graduated_rates.cons


class TestRecommendation:
    """Test suite for the recommendation policy."""

    def test_flat_recommended_when_cheaper(self, rule):
        """1M gross with no expenses: 8% tax 60K beats graduated 62.5K."""
        result = rule.execute(make_input(streams=[make_stream("1000000")]))

        assert result.recommendation == TaxRegime.EIGHT_PERCENT_FLAT
        assert result.recommendation_reason == REASON_FLAT_CHEAPER

    def test_graduated_recommended_when_cheaper(self, rule, freelancer_input):
        """500K gross: graduated 7.5K beats 8% tax of 20K."""
        result = rule.execute(freelancer_input)

        assert result.recommendation == TaxRegime.GRADUATED_RATES
        assert result.recommendation_reason == REASON_GRADUATED_CHEAPER

    def test_high_expenses_recommend_graduated(self, rule):
        """Deductions above 40% of business income favor graduated rates."""
        rule_input = make_input(
            streams=[make_stream("1000000")],
            expenses=[make_expense("450000")],
        )
        result = rule.execute(rule_input)

        assert result.recommendation == TaxRegime.GRADUATED_RATES
        assert result.recommendation_reason == REASON_HIGH_EXPENSES

    def test_non_deductible_expenses_ignored(self, rule):
        """Only deductible expenses enter the deduction ratio."""
        rule_input = make_input(
            streams=[make_stream("1000000")],
            expenses=[make_expense("450000", is_deductible=False)],
        )
        result = rule.execute(rule_input)

        assert result.recommendation == TaxRegime.EIGHT_PERCENT_FLAT

    def test_selected_regime_is_ignored(self, rule):
        """The recommendation does not depend on the declared choice."""
        rule_input = make_input(
            streams=[make_stream("1000000")],
            selected_regime=TaxRegime.GRADUATED_RATES,
        )
        assert rule.execute(rule_input).recommendation == TaxRegime.EIGHT_PERCENT_FLAT

    def test_flat_never_recommended_above_threshold(self, rule):
        """Eligibility bound holds across a grid of large incomes."""
        for gross in ("3000001", "3500000", "5000000", "12000000"):
            result = rule.execute(make_input(streams=[make_stream(gross)]))
            assert result.recommendation != TaxRegime.EIGHT_PERCENT_FLAT


class TestZeroBusinessIncome:
    """Test suite for taxpayers without business income."""

    def test_employment_only_defaults_to_graduated(self, rule):
        """With no business income the ratio is 0 and graduated wins the tie."""
        rule_input = make_input(
            streams=[make_stream("600000", IncomeType.EMPLOYMENT)],
            user_type=UserType.MIXED_INCOME,
            has_employment_income=True,
            expenses=[make_expense("1000")],
        )
        result = rule.execute(rule_input)

        assert result.recommendation == TaxRegime.GRADUATED_RATES
        assert result.recommendation_reason == REASON_GRADUATED_CHEAPER
        assert result.comparison.eight_percent.effective_rate == Decimal("0")
        assert result.comparison.graduated_rates.effective_rate == Decimal("0")

    def test_no_income_streams(self, rule):
        """An empty input still yields a complete result."""
        result = rule.execute(make_input(streams=[]))

        assert isinstance(result, RegimeComparisonResult)
        assert result.comparison.eight_percent.estimated_tax == Decimal("0")
        assert result.recommendation == TaxRegime.GRADUATED_RATES


class TestIdentity:
    """Test suite for rule module identity."""

    def test_module_identity(self, rule, freelancer_input):
        result = rule.execute(freelancer_input)

        assert result.rule_module_id == RuleModuleId.REGIME_DETERMINATION.value
        assert rule.version == "1.0.0"
        assert rule.explanation_id == "REGIME_DETERMINATION_v1.0.0"
