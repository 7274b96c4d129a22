"""Tests for tax computation."""

from decimal import Decimal

import pytest

from bir_rules.models import IncomeType, TaxRegime
from bir_rules.rules import TaxComputationRule
from bir_rules.rules.computation import DEDUCTION_ITEMIZED, DEDUCTION_NONE, DEDUCTION_OSD

from conftest import make_expense, make_input, make_stream


@pytest.fixture
def rule() -> TaxComputationRule:
    return TaxComputationRule()


class TestEightPercentComputation:
    """Test suite for the 8% flat tax path."""

    def test_worked_example_500k(self, rule, flat_freelancer_input):
        """500K gross under 8% yields 20K tax."""
        result = rule.execute(flat_freelancer_input)

        assert result.estimated_tax == Decimal("20000")
        assert result.taxable_income == Decimal("250000")
        assert result.deduction_method == DEDUCTION_NONE

    def test_expenses_not_deducted(self, rule):
        """Expenses do not reduce the 8% tax."""
        rule_input = make_input(
            expenses=[make_expense("300000")],
            selected_regime=TaxRegime.EIGHT_PERCENT_FLAT,
        )
        result = rule.execute(rule_input)

        assert result.estimated_tax == Decimal("20000")
        assert result.total_deductions == Decimal("300000")

    def test_credit_clamp(self, rule):
        """Credits larger than the tax leave nothing payable, never a negative."""
        rule_input = make_input(
            streams=[
                make_stream("300000", has_withholding=True, withheld_amount=Decimal("50000")),
            ],
            selected_regime=TaxRegime.EIGHT_PERCENT_FLAT,
        )
        result = rule.execute(rule_input)

        assert result.estimated_tax == Decimal("4000")
        assert result.credits_applied == Decimal("50000")
        assert result.net_tax_payable == Decimal("0")
        assert result.quarterly_payments.total == Decimal("0")


class TestGraduatedComputation:
    """Test suite for the graduated rates path."""

    def test_osd_applied(self, rule, graduated_freelancer_input):
        """OSD (200K) beats itemized (100K) on 500K gross."""
        result = rule.execute(graduated_freelancer_input)

        assert result.deduction_method == DEDUCTION_OSD
        assert result.taxable_income == Decimal("300000")
        assert result.estimated_tax == Decimal("7500")

    def test_itemized_applied(self, rule):
        """Itemized deductions are used when larger than OSD."""
        rule_input = make_input(
            streams=[make_stream("800000")],
            expenses=[make_expense("400000")],
            selected_regime=TaxRegime.GRADUATED_RATES,
        )
        result = rule.execute(rule_input)

        assert result.deduction_method == DEDUCTION_ITEMIZED
        assert result.taxable_income == Decimal("400000")
        assert result.estimated_tax == Decimal("22500")

    def test_undetermined_uses_graduated(self, rule, freelancer_input):
        """Without a concrete regime the graduated path applies."""
        result = rule.execute(freelancer_input)
        assert result.deduction_method == DEDUCTION_OSD
        assert result.estimated_tax == Decimal("7500")

    def test_employment_income_excluded(self, rule, mixed_income_input):
        """Only business income enters the graduated base."""
        result = rule.execute(mixed_income_input, TaxRegime.GRADUATED_RATES)

        assert result.gross_income == Decimal("1000000")
        assert result.business_income == Decimal("400000")
        assert result.employment_income == Decimal("600000")
        assert result.taxable_income == Decimal("240000")
        assert result.estimated_tax == Decimal("0")

    def test_explicit_regime_overrides_input(self, rule, flat_freelancer_input):
        """The regime argument takes precedence over the declared regime."""
        result = rule.execute(flat_freelancer_input, TaxRegime.GRADUATED_RATES)
        assert result.estimated_tax == Decimal("7500")


class TestCredits:
    """Test suite for withholding credits."""

    def test_credits_only_from_withholding_streams(self, rule):
        """A withheld amount without the withholding flag is not credited."""
        rule_input = make_input(
            streams=[
                make_stream("400000", has_withholding=True, withheld_amount=Decimal("20000")),
                make_stream(
                    "100000",
                    stream_id="inc-2",
                    has_withholding=False,
                    withheld_amount=Decimal("5000"),
                ),
            ],
            selected_regime=TaxRegime.EIGHT_PERCENT_FLAT,
        )
        result = rule.execute(rule_input)

        assert result.credits_applied == Decimal("20000")
        assert result.net_tax_payable == Decimal("0")

    def test_partial_credit(self, rule):
        rule_input = make_input(
            streams=[make_stream("1000000", has_withholding=True, withheld_amount=Decimal("10000"))],
            selected_regime=TaxRegime.EIGHT_PERCENT_FLAT,
        )
        result = rule.execute(rule_input)

        assert result.estimated_tax == Decimal("60000")
        assert result.net_tax_payable == Decimal("50000")


class TestQuarterlyPayments:
    """Test suite for the quarterly schedule."""

    def test_even_split(self):
        payments = TaxComputationRule.calculate_quarterly_payments(Decimal("20000.00"))

        assert payments.q1 == payments.q2 == payments.q3 == Decimal("5000.00")
        assert payments.annual == Decimal("5000.00")

    def test_remainder_goes_to_annual(self):
        """The annual true-up absorbs the rounding remainder."""
        payments = TaxComputationRule.calculate_quarterly_payments(Decimal("100.01"))

        assert payments.q1 == Decimal("25.00")
        assert payments.annual == Decimal("25.01")
        assert payments.total == Decimal("100.01")

    def test_tiny_amount_never_negative(self):
        """A few centavos never produce a negative true-up."""
        payments = TaxComputationRule.calculate_quarterly_payments(Decimal("0.02"))

        assert payments.q1 == Decimal("0.00")
        assert payments.annual == Decimal("0.02")

    @pytest.mark.parametrize(
        "net",
        ["0", "0.01", "0.03", "1", "7500", "12345.67", "99999.99", "2902500"],
    )
    def test_split_sums_to_net(self, net: str):
        """q1 + q2 + q3 + annual equals the net tax to the centavo."""
        payments = TaxComputationRule.calculate_quarterly_payments(Decimal(net))

        assert payments.total == Decimal(net)
        assert payments.annual >= 0

    def test_non_negative_grid(self, rule):
        """Tax, net payable and the net <= tax invariant hold over a grid."""
        for gross in ("0", "100000", "250000", "400000", "999999.99", "3500000"):
            for withheld in ("0", "1000", "500000"):
                for regime in (TaxRegime.GRADUATED_RATES, TaxRegime.EIGHT_PERCENT_FLAT):
                    rule_input = make_input(
                        streams=[
                            make_stream(
                                gross,
                                has_withholding=withheld != "0",
                                withheld_amount=Decimal(withheld),
                            )
                        ],
                        selected_regime=regime,
                    )
                    result = rule.execute(rule_input)

                    assert result.estimated_tax >= 0
                    assert result.net_tax_payable >= 0
                    assert result.net_tax_payable <= result.estimated_tax
                    assert result.quarterly_payments.total == result.net_tax_payable

    def test_rental_counts_as_business(self, rule):
        """Non-employment income types all count as business income."""
        rule_input = make_input(
            streams=[make_stream("500000", IncomeType.RENTAL)],
            selected_regime=TaxRegime.EIGHT_PERCENT_FLAT,
        )
        assert rule.execute(rule_input).business_income == Decimal("500000")
