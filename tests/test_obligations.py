"""Tests for filing obligation determination."""

from decimal import Decimal

import pytest

from bir_rules.models import FilingFrequency, IncomeType, RegistrationStatus, TaxRegime, UserType
from bir_rules.rules import FilingObligationsRule

from conftest import make_input, make_stream


@pytest.fixture
def rule() -> FilingObligationsRule:
    return FilingObligationsRule()


def form_codes(obligations, applicable_only: bool = True) -> list[str]:
    return [o.form_code for o in obligations if o.is_applicable or not applicable_only]


def find(obligations, form_code: str):
    return next(o for o in obligations if o.form_code == form_code)


class TestIncomeTaxForms:
    """Test suite for quarterly and annual income tax returns."""

    def test_freelancer_flat(self, rule, flat_freelancer_input):
        """8% freelancer files 1701Q and 1701 but not 2551Q."""
        obligations = rule.execute(flat_freelancer_input)

        assert form_codes(obligations) == ["1701Q", "1701", "0605", "BOOKS"]
        assert form_codes(obligations, applicable_only=False) == [
            "1701Q",
            "1701",
            "2551Q",
            "0605",
            "BOOKS",
        ]

    def test_quarterly_return_frequency(self, rule, flat_freelancer_input):
        quarterly = find(rule.execute(flat_freelancer_input), "1701Q")

        assert quarterly.frequency == FilingFrequency.QUARTERLY
        assert "8%" in quarterly.notes

    def test_annual_return_always_present(self, rule):
        """The annual return is emitted for every user type."""
        for user_type in UserType:
            obligations = rule.execute(make_input(user_type=user_type))
            assert find(obligations, "1701").is_applicable

    def test_mixed_income_annual_notes(self, rule, mixed_income_input):
        annual = find(rule.execute(mixed_income_input, TaxRegime.GRADUATED_RATES), "1701")
        assert "mixed-income" in annual.notes


class TestPercentageTax:
    """Test suite for the 2551Q percentage tax return."""

    def test_flat_marks_not_applicable(self, rule, flat_freelancer_input):
        """Under 8% the record is kept but not applicable."""
        percentage = find(rule.execute(flat_freelancer_input), "2551Q")

        assert percentage.is_applicable is False
        assert "8% flat tax" in percentage.notes

    def test_graduated_is_applicable(self, rule, graduated_freelancer_input):
        percentage = find(rule.execute(graduated_freelancer_input), "2551Q")

        assert percentage.is_applicable is True
        assert percentage.frequency == FilingFrequency.QUARTERLY
        assert percentage.notes.startswith("3% of gross sales/receipts")

    def test_mixed_income_graduated_has_no_record(self, rule, mixed_income_input):
        """Mixed-income earners on graduated rates get no 2551Q record."""
        obligations = rule.execute(mixed_income_input, TaxRegime.GRADUATED_RATES)
        assert "2551Q" not in form_codes(obligations, applicable_only=False)

    def test_undetermined_has_no_record(self, rule, freelancer_input):
        """Without a concrete regime neither branch fires."""
        obligations = rule.execute(freelancer_input)
        assert "2551Q" not in form_codes(obligations, applicable_only=False)


class TestRegistration:
    """Test suite for registration related forms."""

    def test_unregistered_needs_1901(self, rule):
        obligations = rule.execute(
            make_input(registration_status=RegistrationStatus.NOT_REGISTERED),
            TaxRegime.EIGHT_PERCENT_FLAT,
        )

        assert "1901" in form_codes(obligations)
        assert "0605" not in form_codes(obligations)

    def test_registered_pays_fee(self, rule, flat_freelancer_input):
        fee = find(rule.execute(flat_freelancer_input), "0605")
        assert fee.description == "Annual registration fee of ₱500"
        assert fee.notes.startswith("₱500 annual registration fee")

    @pytest.mark.parametrize(
        "status",
        [RegistrationStatus.PENDING_REGISTRATION, RegistrationStatus.NEEDS_UPDATE],
    )
    def test_other_statuses_have_neither(self, rule, status):
        codes = form_codes(rule.execute(make_input(registration_status=status)))

        assert "1901" not in codes
        assert "0605" not in codes


class TestCertificates:
    """Test suite for withholding and employer certificates."""

    def test_withholding_adds_2307(self, rule):
        rule_input = make_input(
            streams=[make_stream(has_withholding=True, withheld_amount=Decimal("10000"))],
        )
        certificate = find(rule.execute(rule_input), "2307")

        assert certificate.frequency == FilingFrequency.QUARTERLY
        assert "CREDITS" in certificate.notes

    def test_no_withholding_no_2307(self, rule, freelancer_input):
        assert "2307" not in form_codes(rule.execute(freelancer_input))

    def test_employment_adds_2316(self, rule, mixed_income_input):
        certificate = find(rule.execute(mixed_income_input), "2316")
        assert "employer" in certificate.notes.lower()


class TestBooksOfAccounts:
    """Test suite for the books of accounts obligation."""

    def test_flat_allows_simplified_books(self, rule, flat_freelancer_input):
        books = find(rule.execute(flat_freelancer_input), "BOOKS")
        assert "simplified" in books.notes

    def test_graduated_requires_full_books(self, rule, graduated_freelancer_input):
        books = find(rule.execute(graduated_freelancer_input), "BOOKS")
        assert "itemized deductions" in books.notes

    def test_employment_only_mixed_income_skips_books(self, rule):
        rule_input = make_input(
            streams=[make_stream("600000", IncomeType.EMPLOYMENT)],
            user_type=UserType.MIXED_INCOME,
            has_employment_income=True,
        )
        assert "BOOKS" not in form_codes(rule.execute(rule_input))

    def test_mixed_income_with_business_keeps_books(self, rule, mixed_income_input):
        assert "BOOKS" in form_codes(rule.execute(mixed_income_input))


class TestIdentifiers:
    """Test suite for per-call obligation ids."""

    def test_ids_are_sequential(self, rule, flat_freelancer_input):
        obligations = rule.execute(flat_freelancer_input)
        assert [o.id for o in obligations] == [f"OBL-{i}" for i in range(1, len(obligations) + 1)]

    def test_ids_restart_per_call(self, rule, flat_freelancer_input):
        """Counters are scoped to one call."""
        first = rule.execute(flat_freelancer_input)
        second = rule.execute(flat_freelancer_input)
        assert [o.id for o in first] == [o.id for o in second]
