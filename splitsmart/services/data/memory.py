"""In-memory data backend with optional demo data."""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Sequence

from splitsmart.models import new_id
from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import ExpenseRecord, GroupRecord, SplitDetail, UserRecord
from splitsmart.services.data.base import DataService
from splitsmart.services.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


def build_demo_data() -> tuple[list[UserRecord], list[GroupRecord], list[ExpenseRecord]]:
    """Demo users, groups and expenses, dated relative to now."""
    now = datetime.now(timezone.utc)
    users = [
        UserRecord(id="user_01", name="Alex Doe", email="alex.doe@example.com"),
        UserRecord(id="user_02", name="Ben Smith", email="ben.smith@example.com"),
        UserRecord(id="user_03", name="Casey Jones", email="casey.jones@example.com"),
        UserRecord(id="user_04", name="Dana Scully", email="dana.scully@example.com"),
    ]
    groups = [
        GroupRecord(
            id="group_01",
            name="Hawaii Trip",
            master_currency="USD",
            members=[user.id for user in users],
        ),
        GroupRecord(
            id="group_02",
            name="Apartment Bills",
            master_currency="CAD",
            members=["user_01", "user_03"],
        ),
    ]
    expenses = [
        ExpenseRecord(
            id="exp_01",
            group_id="group_01",
            description="Flight Tickets",
            amount=Decimal("1200.00"),
            original_amount=Decimal("1200.00"),
            original_currency="USD",
            paid_by="user_01",
            participants=[
                SplitDetail(user_id=user.id, amount=Decimal("300.00")) for user in users
            ],
            split_type=SplitType.EQUAL,
            date=now - timedelta(days=2),
            tags=["travel", "flights"],
        ),
        ExpenseRecord(
            id="exp_02",
            group_id="group_01",
            description="Dinner at Roy's",
            amount=Decimal("250.00"),
            original_amount=Decimal("250.00"),
            original_currency="USD",
            paid_by="user_02",
            participants=[
                SplitDetail(user_id="user_01", amount=Decimal("100.00")),
                SplitDetail(user_id="user_02", amount=Decimal("50.00")),
                SplitDetail(user_id="user_03", amount=Decimal("100.00")),
            ],
            split_type=SplitType.EXACT,
            date=now - timedelta(days=1),
            tags=["food", "dining"],
        ),
        ExpenseRecord(
            id="exp_03",
            group_id="group_02",
            description="Monthly Rent",
            amount=Decimal("1500.00"),
            original_amount=Decimal("1500.00"),
            original_currency="CAD",
            paid_by="user_03",
            participants=[
                SplitDetail(user_id="user_01", amount=Decimal("750.00")),
                SplitDetail(user_id="user_03", amount=Decimal("750.00")),
            ],
            split_type=SplitType.EQUAL,
            date=now - timedelta(days=5),
            tags=["rent", "housing"],
        ),
    ]
    return users, groups, expenses


class MemoryDataService(DataService):
    """Process-local storage. Records are copied in and out, never shared."""

    mode = "memory"

    def __init__(self, seed_demo_data: bool = False):
        """Initialize storage.

        Args:
            seed_demo_data: Preload demo users, groups and expenses
        """
        self.users: dict[str, UserRecord] = {}
        self.groups: dict[str, GroupRecord] = {}
        self.expenses: dict[str, ExpenseRecord] = {}

        if seed_demo_data:
            users, groups, expenses = build_demo_data()
            self.users = {user.id: user for user in users}
            self.groups = {group.id: group for group in groups}
            self.expenses = {expense.id: expense for expense in expenses}
            logger.info(
                f"Loaded demo data: {len(users)} users, {len(groups)} groups, "
                f"{len(expenses)} expenses"
            )

    def _require_group(self, group_id: str) -> GroupRecord:
        group = self.groups.get(group_id)
        if group is None:
            raise RecordNotFoundError("Group", group_id)
        return group

    # --- Users ---

    def get_all_users(self) -> list[UserRecord]:
        return [user.model_copy() for user in self.users.values()]

    def get_user(self, user_id: str) -> UserRecord:
        user = self.users.get(user_id)
        if user is None:
            raise RecordNotFoundError("User", user_id)
        return user.model_copy()

    def add_user(
        self,
        name: str,
        email: Optional[str] = None,
        avatar_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> UserRecord:
        user = UserRecord(id=user_id or new_id(), name=name, email=email, avatar_url=avatar_url)
        self.users[user.id] = user
        return user.model_copy()

    # --- Groups ---

    def get_groups_for_user(self, user_id: str) -> list[GroupRecord]:
        return [
            group.model_copy(deep=True)
            for group in self.groups.values()
            if user_id in group.members
        ]

    def get_group(self, group_id: str) -> GroupRecord:
        return self._require_group(group_id).model_copy(deep=True)

    def add_group(
        self,
        name: str,
        master_currency: str,
        members: Sequence[str],
        image_url: Optional[str] = None,
    ) -> GroupRecord:
        group = GroupRecord(
            id=new_id(),
            name=name,
            master_currency=master_currency,
            members=list(dict.fromkeys(members)),
            image_url=image_url,
        )
        self.groups[group.id] = group
        logger.info(f"Created group {group.id} ({name}) with {len(group.members)} members")
        return group.model_copy(deep=True)

    def edit_group(self, group: GroupRecord) -> GroupRecord:
        self._require_group(group.id)
        self.groups[group.id] = group.model_copy(deep=True)
        return group.model_copy(deep=True)

    def delete_group(self, group_id: str) -> None:
        self._require_group(group_id)
        del self.groups[group_id]
        self.expenses = {
            expense_id: expense
            for expense_id, expense in self.expenses.items()
            if expense.group_id != group_id
        }
        logger.info(f"Deleted group {group_id} and its expenses")

    def add_user_to_group(self, group_id: str, user_id: str) -> GroupRecord:
        group = self._require_group(group_id)
        if user_id not in group.members:
            group.members.append(user_id)
        return group.model_copy(deep=True)

    def remove_user_from_group(self, group_id: str, user_id: str) -> GroupRecord:
        group = self._require_group(group_id)
        group.members = [member for member in group.members if member != user_id]
        return group.model_copy(deep=True)

    # --- Expenses ---

    def get_group_expenses(self, group_id: str) -> list[ExpenseRecord]:
        self._require_group(group_id)
        return [
            expense.model_copy(deep=True)
            for expense in self.expenses.values()
            if expense.group_id == group_id
        ]

    def get_expense(self, expense_id: str) -> ExpenseRecord:
        expense = self.expenses.get(expense_id)
        if expense is None:
            raise RecordNotFoundError("Expense", expense_id)
        return expense.model_copy(deep=True)

    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        self._require_group(expense.group_id)
        stored = expense.model_copy(update={"id": expense.id or new_id()}, deep=True)
        self.expenses[stored.id] = stored
        return stored.model_copy(deep=True)

    def edit_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        if expense.id not in self.expenses:
            raise RecordNotFoundError("Expense", expense.id)
        self.expenses[expense.id] = expense.model_copy(deep=True)
        return expense.model_copy(deep=True)

    def delete_expense(self, expense_id: str) -> None:
        if self.expenses.pop(expense_id, None) is None:
            raise RecordNotFoundError("Expense", expense_id)


__all__ = ["MemoryDataService", "build_demo_data"]
