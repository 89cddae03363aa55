"""Unit tests for expense, group and user profile validation."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import ExpenseDraft
from splitsmart.services.errors import ErrorKind, ValidationError
from splitsmart.services.validation_service import (
    ExpenseValidator,
    check_date,
    parse_tags,
    selected_participants,
    validate_expense_submission,
    validate_group_creation,
    validate_user_profile,
)

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_draft(**overrides) -> ExpenseDraft:
    fields = {
        "group_id": "g1",
        "description": "Dinner",
        "original_amount": 100,
        "original_currency": "USD",
        "date": "2026-06-10",
        "paid_by": "A",
        "participants": ["A", "B"],
        "tags": "food, fun",
    }
    fields.update(overrides)
    return ExpenseDraft(**fields)


def kind_of(draft: ExpenseDraft):
    return validate_expense_submission(draft, now=NOW).kind


class TestValidSubmission:
    """Test a well-formed draft passes and is normalized."""

    def test_valid_draft(self):
        result = validate_expense_submission(make_draft(), now=NOW)

        assert result.ok
        expense = result.value
        assert expense.description == "Dinner"
        assert expense.original_amount == Decimal("100")
        assert expense.original_currency == "USD"
        assert expense.date == datetime(2026, 6, 10, tzinfo=timezone.utc)
        assert expense.tags == ["food", "fun"]
        assert expense.participants == ["A", "B"]
        assert expense.directive == ["A", "B"]

    def test_values_are_normalized(self):
        draft = make_draft(description="  Taxi home  ", original_currency="eur", group_id=" g1 ")

        expense = validate_expense_submission(draft, now=NOW).value

        assert expense.description == "Taxi home"
        assert expense.original_currency == "EUR"
        assert expense.group_id == "g1"

    def test_exact_directive_uses_split_values(self):
        draft = make_draft(split_type=SplitType.EXACT, participants=[], split_values={"A": 60, "B": 40})

        expense = validate_expense_submission(draft, now=NOW).value

        assert expense.participants == ["A", "B"]
        assert expense.directive == {"A": 60, "B": 40}

    def test_validator_raises_first_error(self):
        with pytest.raises(ValidationError) as exc_info:
            ExpenseValidator(NOW).validate(make_draft(description=""))

        assert exc_info.value.kind == ErrorKind.INVALID_DESCRIPTION


class TestDescriptionRules:
    """Test description checks."""

    @pytest.mark.parametrize(
        "description",
        [
            "",
            "   ",
            "a",
            "x" * 201,
            "<script>alert(1)</script>",
            "see JavaScript:void(0)",
            "data:text/html;base64,AAAA",
            "VBScript:msgbox",
        ],
    )
    def test_rejected(self, description):
        assert kind_of(make_draft(description=description)) == ErrorKind.INVALID_DESCRIPTION

    @pytest.mark.parametrize("description", ["ok", "x" * 200, "Dinner at Roy's"])
    def test_accepted(self, description):
        assert kind_of(make_draft(description=description)) is None


class TestAmountRules:
    """Test amount and currency checks."""

    def test_non_positive_amount(self):
        assert kind_of(make_draft(original_amount=0)) == ErrorKind.INVALID_AMOUNT

    def test_missing_amount(self):
        assert kind_of(make_draft(original_amount=None)) == ErrorKind.INVALID_AMOUNT

    def test_too_many_decimals(self):
        assert kind_of(make_draft(original_amount=100.001)) == ErrorKind.TOO_MANY_DECIMALS

    def test_zero_decimal_currency(self):
        assert kind_of(make_draft(original_amount=100.5, original_currency="JPY")) == (
            ErrorKind.TOO_MANY_DECIMALS
        )
        assert kind_of(make_draft(original_amount=1500, original_currency="JPY")) is None

    def test_too_large(self):
        assert kind_of(make_draft(original_amount=2_000_000_000)) == ErrorKind.AMOUNT_TOO_LARGE

    def test_unsupported_currency(self):
        assert kind_of(make_draft(original_currency="XYZ")) == ErrorKind.UNSUPPORTED_CURRENCY


class TestDateRules:
    """Test date window checks."""

    def test_eleven_years_ago_rejected(self):
        assert kind_of(make_draft(date="2015-06-14")) == ErrorKind.INVALID_DATE

    def test_two_years_ahead_rejected(self):
        assert kind_of(make_draft(date="2028-06-15")) == ErrorKind.INVALID_DATE

    def test_nine_years_ago_accepted(self):
        assert kind_of(make_draft(date="2017-06-15")) is None

    def test_six_months_ahead_accepted(self):
        assert kind_of(make_draft(date="2026-12-15")) is None

    @pytest.mark.parametrize("value", ["", None, "not-a-date", "2026-13-01", 12345])
    def test_unparsable_rejected(self, value):
        assert kind_of(make_draft(date=value)) == ErrorKind.INVALID_DATE

    @pytest.mark.parametrize(
        "value",
        ["0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00", datetime.min],
    )
    def test_calendar_edge_rejected_not_raised(self, value):
        assert kind_of(make_draft(date=value)) == ErrorKind.INVALID_DATE

    def test_iso_datetime_with_zulu(self):
        moment = check_date("2026-06-10T08:30:00.000Z", NOW)

        assert moment == datetime(2026, 6, 10, 8, 30, tzinfo=timezone.utc)

    def test_date_and_datetime_objects(self):
        assert check_date(date(2026, 6, 1), NOW) == datetime(2026, 6, 1, tzinfo=timezone.utc)
        assert check_date(datetime(2026, 6, 1, 9, 0), NOW).tzinfo == timezone.utc

    def test_leap_day_reference(self):
        leap_now = datetime(2028, 2, 29, tzinfo=timezone.utc)

        assert check_date("2018-03-01", leap_now)
        with pytest.raises(ValidationError):
            check_date("2018-02-27", leap_now)


class TestGroupAndParticipantRules:
    """Test group and participant checks."""

    def test_missing_group(self):
        assert kind_of(make_draft(group_id="")) == ErrorKind.MISSING_GROUP

    def test_no_participants(self):
        assert kind_of(make_draft(participants=[])) == ErrorKind.NO_PARTICIPANTS

    def test_parts_without_rows(self):
        draft = make_draft(split_type=SplitType.PARTS, participants=[], split_values={})

        assert kind_of(draft) == ErrorKind.NO_PARTICIPANTS

    def test_selected_participants_dedupes(self):
        assert selected_participants(make_draft(participants=["A", "B", "A"])) == ["A", "B"]


class TestTagRules:
    """Test tag checks."""

    def test_no_tags(self):
        assert kind_of(make_draft(tags="")) is None

    def test_tag_list_accepted(self):
        expense = validate_expense_submission(make_draft(tags=[" a ", "", "b"]), now=NOW).value

        assert expense.tags == ["a", "b"]

    def test_more_than_ten_tags(self):
        tags = ",".join(f"t{i}" for i in range(11))

        assert kind_of(make_draft(tags=tags)) == ErrorKind.TOO_MANY_TAGS

    def test_ten_tags_accepted(self):
        tags = ",".join(f"t{i}" for i in range(10))

        assert kind_of(make_draft(tags=tags)) is None

    def test_tag_too_long(self):
        assert kind_of(make_draft(tags="short, " + "x" * 31)) == ErrorKind.TAG_TOO_LONG

    def test_tags_text_too_long(self):
        tags = ", ".join("y" * 25 for _ in range(9))

        assert kind_of(make_draft(tags=tags)) == ErrorKind.TOO_MANY_TAGS

    def test_parse_tags(self):
        assert parse_tags(" food ,, travel ,") == ["food", "travel"]
        assert parse_tags(None) == []


class TestRuleOrder:
    """Test the first failing rule wins."""

    def test_description_before_amount(self):
        draft = make_draft(description="", original_amount=-1)

        assert kind_of(draft) == ErrorKind.INVALID_DESCRIPTION

    def test_amount_before_currency(self):
        draft = make_draft(original_amount=0, original_currency="XYZ")

        assert kind_of(draft) == ErrorKind.INVALID_AMOUNT

    def test_amount_too_large_before_currency(self):
        draft = make_draft(original_amount=2_000_000_000, original_currency="XYZ")

        assert kind_of(draft) == ErrorKind.AMOUNT_TOO_LARGE

    def test_currency_before_decimal_places(self):
        draft = make_draft(original_amount=10.555, original_currency="XYZ")

        assert kind_of(draft) == ErrorKind.UNSUPPORTED_CURRENCY

    def test_amount_before_date(self):
        draft = make_draft(original_amount=-1, date="garbage")

        assert kind_of(draft) == ErrorKind.INVALID_AMOUNT

    def test_date_before_group(self):
        draft = make_draft(date="garbage", group_id="")

        assert kind_of(draft) == ErrorKind.INVALID_DATE

    def test_participants_before_tags(self):
        draft = make_draft(participants=[], tags="x" * 31)

        assert kind_of(draft) == ErrorKind.NO_PARTICIPANTS


class TestGroupCreation:
    """Test new group validation."""

    def test_valid_group(self):
        result = validate_group_creation("  Ski Trip ", "cad", ["A", "B", "A"])

        assert result.ok
        assert result.value.name == "Ski Trip"
        assert result.value.master_currency == "CAD"
        assert result.value.member_ids == ["A", "B"]

    @pytest.mark.parametrize("name", ["", "x", "y" * 51])
    def test_invalid_name(self, name):
        assert validate_group_creation(name, "USD", ["A", "B"]).kind == ErrorKind.INVALID_GROUP_NAME

    def test_unsupported_currency(self):
        result = validate_group_creation("Trip", "XYZ", ["A", "B"])

        assert result.kind == ErrorKind.UNSUPPORTED_CURRENCY

    @pytest.mark.parametrize("members", [[], ["A"], ["A", "A"], ["A", ""]])
    def test_not_enough_members(self, members):
        result = validate_group_creation("Trip", "USD", members)

        assert result.kind == ErrorKind.NOT_ENOUGH_MEMBERS


class TestUserProfile:
    """Test user profile validation."""

    def test_valid_profile(self):
        result = validate_user_profile("  Mary-Jane O'Neil ", "mary.jane@gmail.com")

        assert result.ok
        assert result.value.name == "Mary-Jane O'Neil"
        assert result.value.email == "mary.jane@gmail.com"

    def test_email_is_optional(self):
        result = validate_user_profile("Alex Doe")

        assert result.ok
        assert result.value.email is None

    def test_initials_with_periods(self):
        assert validate_user_profile("J. R. Smith").ok

    @pytest.mark.parametrize("name", ["", "   ", "z" * 51, "Alex2", "<b>Alex</b>", "Alex_Doe"])
    def test_invalid_name(self, name):
        assert validate_user_profile(name).kind == ErrorKind.INVALID_USER_NAME

    @pytest.mark.parametrize("email", ["", "not-an-email", "alex@", "@gmail.com", "alex doe@gmail.com"])
    def test_invalid_email(self, email):
        assert validate_user_profile("Alex Doe", email).kind == ErrorKind.INVALID_EMAIL

    def test_email_too_long(self):
        email = "a" * 60 + "@" + "b" * 40 + ".com"

        result = validate_user_profile("Alex Doe", email)

        assert result.kind == ErrorKind.INVALID_EMAIL
        assert result.message == "Email address is too long"

    def test_name_checked_before_email(self):
        assert validate_user_profile("", "not-an-email").kind == ErrorKind.INVALID_USER_NAME
