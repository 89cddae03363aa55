"""Storage contract shared by every data backend.

Backends are chosen once at process start (see create_data_service) and
passed explicitly to whatever needs them. The expense core never talks to
storage itself; it only receives the records a backend returns.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from splitsmart.schemas.expense import ExpenseRecord, GroupRecord, UserRecord


class DataService(ABC):
    """Contract for user, group and expense storage.

    Lookups of missing records raise RecordNotFoundError.
    """

    mode: str = "uninitialized"

    # --- Users ---

    @abstractmethod
    def get_all_users(self) -> list[UserRecord]:
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> UserRecord:
        ...

    @abstractmethod
    def add_user(
        self,
        name: str,
        email: Optional[str] = None,
        avatar_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> UserRecord:
        ...

    # --- Groups ---

    @abstractmethod
    def get_groups_for_user(self, user_id: str) -> list[GroupRecord]:
        ...

    @abstractmethod
    def get_group(self, group_id: str) -> GroupRecord:
        ...

    @abstractmethod
    def add_group(
        self,
        name: str,
        master_currency: str,
        members: Sequence[str],
        image_url: Optional[str] = None,
    ) -> GroupRecord:
        ...

    @abstractmethod
    def edit_group(self, group: GroupRecord) -> GroupRecord:
        ...

    @abstractmethod
    def delete_group(self, group_id: str) -> None:
        """Delete a group together with all of its expenses."""

    @abstractmethod
    def add_user_to_group(self, group_id: str, user_id: str) -> GroupRecord:
        ...

    @abstractmethod
    def remove_user_from_group(self, group_id: str, user_id: str) -> GroupRecord:
        """Drop a user from current membership; their expenses stay untouched."""

    # --- Expenses ---

    @abstractmethod
    def get_group_expenses(self, group_id: str) -> list[ExpenseRecord]:
        ...

    @abstractmethod
    def get_expense(self, expense_id: str) -> ExpenseRecord:
        ...

    @abstractmethod
    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        """Store a new expense; an empty id is replaced by a generated one."""

    @abstractmethod
    def edit_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        """Replace a stored expense entirely."""

    @abstractmethod
    def delete_expense(self, expense_id: str) -> None:
        ...


__all__ = ["DataService"]
