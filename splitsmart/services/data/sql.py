"""SQLAlchemy-backed data service."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from splitsmart.models import Expense, ExpenseShare, Group, GroupMember, User, new_id
from splitsmart.schemas.expense import ExpenseRecord, GroupRecord, SplitDetail, UserRecord
from splitsmart.services.data.base import DataService
from splitsmart.services.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


def _aware(moment: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are always UTC
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def group_to_record(group: Group) -> GroupRecord:
    return GroupRecord(
        id=group.id,
        name=group.name,
        master_currency=group.master_currency,
        members=group.member_ids,
        image_url=group.image_url,
    )


def expense_to_record(expense: Expense) -> ExpenseRecord:
    return ExpenseRecord(
        id=expense.id,
        group_id=expense.group_id,
        description=expense.description,
        amount=expense.amount,
        original_amount=expense.original_amount,
        original_currency=expense.original_currency,
        conversion_rate=expense.conversion_rate,
        paid_by=expense.paid_by,
        participants=[SplitDetail.model_validate(share) for share in expense.participants],
        split_type=expense.split_type,
        date=_aware(expense.date),
        tags=list(expense.tags or []),
        attachments=list(expense.attachments or []),
        location=expense.location,
    )


def _shares(participants: Sequence[SplitDetail]) -> list[ExpenseShare]:
    return [
        ExpenseShare(user_id=share.user_id, amount=share.amount, parts=share.parts, position=i)
        for i, share in enumerate(participants)
    ]


class SqlDataService(DataService):
    """Persist users, groups and expenses through an SQLAlchemy session."""

    mode = "sql"

    def __init__(self, db: Session):
        """Initialize with database session.

        Args:
            db: Session used for every read and write
        """
        self.db = db

    def _commit(self, action: str) -> None:
        """Commit the pending write, rolling back so the session stays usable."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error during {action}: {e}", exc_info=True)
            self.db.rollback()
            raise

    def _flush(self, action: str) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error during {action}: {e}", exc_info=True)
            self.db.rollback()
            raise

    def _load_group(self, group_id: str) -> Group:
        group = self.db.get(Group, group_id, options=[selectinload(Group.member_links)])
        if group is None:
            raise RecordNotFoundError("Group", group_id)
        return group

    def _load_expense(self, expense_id: str) -> Expense:
        expense = self.db.get(Expense, expense_id, options=[selectinload(Expense.participants)])
        if expense is None:
            raise RecordNotFoundError("Expense", expense_id)
        return expense

    def _set_members(self, group: Group, members: Sequence[str]) -> None:
        # Clear and flush first: re-adding a member reuses the same primary key
        group.member_links.clear()
        self._flush("edit_group")
        for position, user_id in enumerate(dict.fromkeys(members)):
            group.member_links.append(GroupMember(user_id=user_id, position=position))

    # --- Users ---

    def get_all_users(self) -> list[UserRecord]:
        users = self.db.execute(select(User).order_by(User.name)).scalars().all()
        return [UserRecord.model_validate(user) for user in users]

    def get_user(self, user_id: str) -> UserRecord:
        user = self.db.get(User, user_id)
        if user is None:
            raise RecordNotFoundError("User", user_id)
        return UserRecord.model_validate(user)

    def add_user(
        self,
        name: str,
        email: Optional[str] = None,
        avatar_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> UserRecord:
        user = User(id=user_id or new_id(), name=name, email=email, avatar_url=avatar_url)
        self.db.add(user)
        self._commit("add_user")
        return UserRecord.model_validate(user)

    # --- Groups ---

    def get_groups_for_user(self, user_id: str) -> list[GroupRecord]:
        stmt = (
            select(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.user_id == user_id)
            .options(selectinload(Group.member_links))
        )
        return [group_to_record(group) for group in self.db.execute(stmt).scalars().all()]

    def get_group(self, group_id: str) -> GroupRecord:
        return group_to_record(self._load_group(group_id))

    def add_group(
        self,
        name: str,
        master_currency: str,
        members: Sequence[str],
        image_url: Optional[str] = None,
    ) -> GroupRecord:
        group = Group(id=new_id(), name=name, master_currency=master_currency, image_url=image_url)
        group.member_links = [
            GroupMember(user_id=user_id, position=position)
            for position, user_id in enumerate(dict.fromkeys(members))
        ]
        self.db.add(group)
        self._commit("add_group")
        logger.info(f"Created group {group.id} ({name}) with {len(group.member_links)} members")
        return group_to_record(group)

    def edit_group(self, group: GroupRecord) -> GroupRecord:
        row = self._load_group(group.id)
        row.name = group.name
        row.master_currency = group.master_currency
        row.image_url = group.image_url
        self._set_members(row, group.members)
        self._commit("edit_group")
        return group_to_record(row)

    def delete_group(self, group_id: str) -> None:
        self.db.delete(self._load_group(group_id))
        self._commit("delete_group")
        logger.info(f"Deleted group {group_id} and its expenses")

    def add_user_to_group(self, group_id: str, user_id: str) -> GroupRecord:
        group = self._load_group(group_id)
        if user_id not in group.member_ids:
            group.member_links.append(
                GroupMember(user_id=user_id, position=len(group.member_links))
            )
            self._commit("add_user_to_group")
        return group_to_record(group)

    def remove_user_from_group(self, group_id: str, user_id: str) -> GroupRecord:
        group = self._load_group(group_id)
        group.member_links = [link for link in group.member_links if link.user_id != user_id]
        self._commit("remove_user_from_group")
        return group_to_record(group)

    # --- Expenses ---

    def get_group_expenses(self, group_id: str) -> list[ExpenseRecord]:
        self._load_group(group_id)
        stmt = (
            select(Expense)
            .where(Expense.group_id == group_id)
            .options(selectinload(Expense.participants))
            .order_by(Expense.date)
        )
        return [expense_to_record(expense) for expense in self.db.execute(stmt).scalars().all()]

    def get_expense(self, expense_id: str) -> ExpenseRecord:
        return expense_to_record(self._load_expense(expense_id))

    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        self._load_group(expense.group_id)
        row = Expense(
            id=expense.id or new_id(),
            group_id=expense.group_id,
            description=expense.description,
            amount=expense.amount,
            original_amount=expense.original_amount,
            original_currency=expense.original_currency,
            conversion_rate=expense.conversion_rate,
            paid_by=expense.paid_by,
            split_type=expense.split_type.value,
            date=expense.date,
            tags=list(expense.tags),
            attachments=list(expense.attachments),
            location=expense.location,
        )
        row.participants = _shares(expense.participants)
        self.db.add(row)
        self._commit("add_expense")
        logger.info(f"Stored expense {row.id} in group {row.group_id}")
        return expense_to_record(row)

    def edit_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        row = self._load_expense(expense.id)
        row.description = expense.description
        row.amount = expense.amount
        row.original_amount = expense.original_amount
        row.original_currency = expense.original_currency
        row.conversion_rate = expense.conversion_rate
        row.paid_by = expense.paid_by
        row.split_type = expense.split_type.value
        row.date = expense.date
        row.tags = list(expense.tags)
        row.attachments = list(expense.attachments)
        row.location = expense.location

        # Clear and flush first: shares are keyed by (expense_id, user_id)
        row.participants.clear()
        self._flush("edit_expense")
        row.participants.extend(_shares(expense.participants))

        self._commit("edit_expense")
        logger.info(f"Replaced expense {row.id}")
        return expense_to_record(row)

    def delete_expense(self, expense_id: str) -> None:
        self.db.delete(self._load_expense(expense_id))
        self._commit("delete_expense")
        logger.info(f"Deleted expense {expense_id}")


__all__ = ["SqlDataService", "group_to_record", "expense_to_record"]
