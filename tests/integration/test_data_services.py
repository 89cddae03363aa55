"""Storage contract tests, run against every data backend."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import ExpenseRecord, SplitDetail
from splitsmart.services.data.sql import SqlDataService
from splitsmart.services.errors import RecordNotFoundError


def _expense(group_id, expense_id="", paid_by="A", amount="90.00", **overrides):
    fields = {
        "id": expense_id,
        "group_id": group_id,
        "description": "Groceries",
        "amount": Decimal(amount),
        "original_amount": Decimal(amount),
        "original_currency": "USD",
        "paid_by": paid_by,
        "participants": [
            SplitDetail(user_id="A", amount=Decimal(amount) / 2),
            SplitDetail(user_id="B", amount=Decimal(amount) / 2),
        ],
        "split_type": SplitType.EQUAL,
        "date": datetime(2026, 6, 1, 18, 30, tzinfo=timezone.utc),
        "tags": ["food"],
    }
    fields.update(overrides)
    return ExpenseRecord(**fields)


class TestUsers:
    """Test user storage."""

    def test_add_and_get_user(self, data_service):
        user = data_service.add_user("Alex", email="alex@example.com")

        fetched = data_service.get_user(user.id)

        assert fetched.name == "Alex"
        assert fetched.email == "alex@example.com"

    def test_explicit_user_id(self, data_service):
        data_service.add_user("Ben", user_id="user_02")

        assert data_service.get_user("user_02").name == "Ben"
        assert [user.id for user in data_service.get_all_users()] == ["user_02"]

    def test_missing_user(self, data_service):
        with pytest.raises(RecordNotFoundError):
            data_service.get_user("nobody")


class TestGroups:
    """Test group storage and membership."""

    def test_add_group(self, data_service):
        group = data_service.add_group("Trip", "USD", ["A", "B", "A"])

        assert group.id
        assert group.members == ["A", "B"]
        assert data_service.get_group(group.id).master_currency == "USD"

    def test_groups_for_user(self, data_service):
        trip = data_service.add_group("Trip", "USD", ["A", "B"])
        data_service.add_group("Flat", "CAD", ["B", "C"])

        groups = data_service.get_groups_for_user("A")

        assert [group.id for group in groups] == [trip.id]
        assert len(data_service.get_groups_for_user("B")) == 2

    def test_membership_changes(self, data_service, trip_group):
        data_service.add_user_to_group(trip_group.id, "C")
        data_service.add_user_to_group(trip_group.id, "C")

        assert data_service.get_group(trip_group.id).members == ["A", "B", "C"]

        data_service.remove_user_from_group(trip_group.id, "A")

        assert data_service.get_group(trip_group.id).members == ["B", "C"]

    def test_edit_group(self, data_service, trip_group):
        edited = trip_group.model_copy(
            update={"name": "Ski Trip", "master_currency": "EUR", "members": ["B", "A", "D"]}
        )

        data_service.edit_group(edited)

        stored = data_service.get_group(trip_group.id)
        assert stored.name == "Ski Trip"
        assert stored.master_currency == "EUR"
        assert stored.members == ["B", "A", "D"]

    def test_delete_group_removes_expenses(self, data_service, trip_group):
        stored = data_service.add_expense(_expense(trip_group.id))

        data_service.delete_group(trip_group.id)

        with pytest.raises(RecordNotFoundError):
            data_service.get_group(trip_group.id)
        with pytest.raises(RecordNotFoundError):
            data_service.get_expense(stored.id)

    def test_missing_group(self, data_service):
        with pytest.raises(RecordNotFoundError):
            data_service.get_group("missing")
        with pytest.raises(RecordNotFoundError):
            data_service.get_group_expenses("missing")


class TestExpenses:
    """Test expense storage."""

    def test_add_expense_generates_id(self, data_service, trip_group):
        stored = data_service.add_expense(_expense(trip_group.id))

        assert stored.id
        fetched = data_service.get_expense(stored.id)
        assert fetched.amount == Decimal("90.00")
        assert [share.user_id for share in fetched.participants] == ["A", "B"]
        assert fetched.participants[0].amount == Decimal("45.00")
        assert fetched.tags == ["food"]

    def test_date_round_trips_as_utc(self, data_service, trip_group):
        stored = data_service.add_expense(_expense(trip_group.id))

        fetched = data_service.get_expense(stored.id)

        assert fetched.date == datetime(2026, 6, 1, 18, 30, tzinfo=timezone.utc)
        assert fetched.date.tzinfo is not None

    def test_parts_are_kept(self, data_service, trip_group):
        expense = _expense(
            trip_group.id,
            split_type=SplitType.PARTS,
            participants=[
                SplitDetail(user_id="A", amount=Decimal("60"), parts=2),
                SplitDetail(user_id="B", amount=Decimal("30"), parts=1),
            ],
        )

        fetched = data_service.get_expense(data_service.add_expense(expense).id)

        assert fetched.split_type == SplitType.PARTS
        assert [share.parts for share in fetched.participants] == [2, 1]

    def test_edit_expense_replaces_shares(self, data_service, trip_group):
        stored = data_service.add_expense(_expense(trip_group.id))
        replacement = stored.model_copy(
            update={
                "description": "Big groceries",
                "split_type": SplitType.EXACT,
                "participants": [
                    SplitDetail(user_id="B", amount=Decimal("70")),
                    SplitDetail(user_id="A", amount=Decimal("20")),
                ],
            }
        )

        data_service.edit_expense(replacement)

        fetched = data_service.get_expense(stored.id)
        assert fetched.description == "Big groceries"
        assert fetched.split_type == SplitType.EXACT
        assert [(s.user_id, s.amount) for s in fetched.participants] == [
            ("B", Decimal("70")),
            ("A", Decimal("20")),
        ]

    def test_edit_missing_expense(self, data_service, trip_group):
        with pytest.raises(RecordNotFoundError):
            data_service.edit_expense(_expense(trip_group.id, expense_id="missing"))

    def test_delete_expense(self, data_service, trip_group):
        stored = data_service.add_expense(_expense(trip_group.id))

        data_service.delete_expense(stored.id)

        assert data_service.get_group_expenses(trip_group.id) == []
        with pytest.raises(RecordNotFoundError):
            data_service.delete_expense(stored.id)

    def test_expenses_scoped_to_group(self, data_service, trip_group):
        other = data_service.add_group("Flat", "USD", ["A", "B"])
        data_service.add_expense(_expense(trip_group.id))
        data_service.add_expense(_expense(other.id))

        assert len(data_service.get_group_expenses(trip_group.id)) == 1

    def test_add_expense_to_missing_group(self, data_service):
        with pytest.raises(RecordNotFoundError):
            data_service.add_expense(_expense("missing"))


class TestSqlSessionRecovery:
    """Test a failed write leaves the SQL backend usable."""

    @pytest.fixture
    def sql_service(self, db_session):
        return SqlDataService(db_session)

    def test_duplicate_user_id_then_new_group(self, sql_service):
        sql_service.add_user("Alex", user_id="u1")

        with pytest.raises(SQLAlchemyError):
            sql_service.add_user("Alex again", user_id="u1")

        group = sql_service.add_group("Trip", "USD", ["u1", "u2"])
        assert sql_service.get_group(group.id).members == ["u1", "u2"]
        assert sql_service.get_user("u1").name == "Alex"
        assert len(sql_service.get_all_users()) == 1

    def test_duplicate_expense_id_keeps_original(self, sql_service):
        group = sql_service.add_group("Trip", "USD", ["A", "B"])
        stored = sql_service.add_expense(_expense(group.id, expense_id="e1"))

        with pytest.raises(SQLAlchemyError):
            sql_service.add_expense(_expense(group.id, expense_id="e1", amount="10.00"))

        expenses = sql_service.get_group_expenses(group.id)
        assert [expense.id for expense in expenses] == [stored.id]
        assert expenses[0].amount == Decimal("90.00")
