"""Expense workflow: validate, convert, allocate, persist.

Provides methods for:
- Creating expenses from a submitted draft
- Editing expenses by full replacement
- Deleting expenses
- Reading a group's balances, raw or formatted for display
- Merging machine-suggested fields into a draft
"""

import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Dict, NamedTuple, Optional, Sequence

from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import (
    ExpenseDraft,
    ExpenseRecord,
    ExpenseSuggestion,
    GroupRecord,
    UserRecord,
)
from splitsmart.services.balance_service import BalanceService, is_settled
from splitsmart.services.currency_service import (
    DEFAULT_LOCALE,
    ExchangeRateService,
    format_amount,
    is_supported_currency,
)
from splitsmart.services.data.base import DataService
from splitsmart.services.errors import (
    ErrorKind,
    RecordNotFoundError,
    Result,
    SplitSmartError,
    WorkflowError,
)
from splitsmart.services.split_service import SplitAllocator, directive_from_expense
from splitsmart.services.validation_service import ExpenseValidator, ValidatedExpense

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class BalanceLine(NamedTuple):
    """One member's balance ready for display."""

    user_id: str
    amount: Decimal
    display: str
    settled: bool


class ExpenseService:
    """Core expense operations over a storage backend."""

    def __init__(
        self,
        data: DataService,
        rates: Optional[ExchangeRateService] = None,
        now: Optional[datetime] = None,
        locale: str = DEFAULT_LOCALE,
    ):
        """Initialize expense service.

        Args:
            data: Storage backend
            rates: Exchange-rate lookup (default: static mock rates)
            now: Fixed reference time for date validation (default: wall clock)
            locale: Babel locale for formatted amounts
        """
        self.data = data
        self.locale = locale
        self.rates = rates or ExchangeRateService()
        self.validator = ExpenseValidator(now)
        self.allocator = SplitAllocator()
        self.balances = BalanceService()

    def _load_group(self, group_id: str) -> GroupRecord:
        try:
            return self.data.get_group(group_id)
        except RecordNotFoundError as e:
            raise WorkflowError(ErrorKind.NOT_FOUND, "Group not found") from e

    def _load_expense(self, expense_id: str) -> ExpenseRecord:
        try:
            return self.data.get_expense(expense_id)
        except RecordNotFoundError as e:
            raise WorkflowError(ErrorKind.NOT_FOUND, "Expense not found") from e

    def _check_membership(self, group: GroupRecord, validated: ValidatedExpense) -> None:
        members = set(group.members)
        if not validated.paid_by:
            raise WorkflowError(ErrorKind.NOT_A_MEMBER, "Please select who paid.")
        if validated.paid_by not in members:
            raise WorkflowError(
                ErrorKind.NOT_A_MEMBER, f"Payer {validated.paid_by} is not a member of this group."
            )
        outsiders = [user_id for user_id in validated.participants if user_id not in members]
        if outsiders:
            raise WorkflowError(
                ErrorKind.NOT_A_MEMBER,
                f"Participants not in this group: {', '.join(outsiders)}.",
            )

    def _build_record(self, draft: ExpenseDraft, expense_id: str = "") -> ExpenseRecord:
        """Run the full pipeline for a draft and return the record to store.

        Raises:
            SplitSmartError: First failed rule
        """
        validated = self.validator.validate(draft)
        group = self._load_group(validated.group_id)
        self._check_membership(group, validated)

        amount, rate = self.rates.convert(
            validated.original_amount, validated.original_currency, group.master_currency
        )
        shares = self.allocator.allocate(validated.split_type, amount, validated.directive)

        return ExpenseRecord(
            id=expense_id,
            group_id=group.id,
            description=validated.description,
            amount=amount,
            original_amount=validated.original_amount,
            original_currency=validated.original_currency,
            conversion_rate=rate,
            paid_by=validated.paid_by,
            participants=shares,
            split_type=validated.split_type,
            date=validated.date,
            tags=validated.tags,
            attachments=validated.attachments,
            location=validated.location,
        )

    def create_expense(self, draft: ExpenseDraft) -> Result[ExpenseRecord]:
        """Validate, allocate and store a new expense.

        Args:
            draft: Submitted add-expense form

        Returns:
            Result with the stored expense, or the first failed rule
        """
        try:
            record = self._build_record(draft)
        except SplitSmartError as e:
            logger.info(f"Expense not created ({e.kind.value}): {e.message}")
            return Result.failure(e)

        stored = self.data.add_expense(record)
        logger.info(
            f"Created expense {stored.id} in group {stored.group_id}: "
            f"{stored.amount} split {stored.split_type.value} across {len(stored.participants)}"
        )
        return Result.success(stored)

    def edit_expense(self, expense_id: str, draft: ExpenseDraft) -> Result[ExpenseRecord]:
        """Replace an expense with a re-validated, re-allocated version.

        The expense keeps its id and owning group regardless of the draft.
        """
        try:
            existing = self._load_expense(expense_id)
            draft = draft.model_copy(update={"group_id": existing.group_id})
            record = self._build_record(draft, expense_id=existing.id)
        except SplitSmartError as e:
            logger.info(f"Expense {expense_id} not updated ({e.kind.value}): {e.message}")
            return Result.failure(e)

        stored = self.data.edit_expense(record)
        logger.info(f"Updated expense {stored.id}")
        return Result.success(stored)

    def delete_expense(self, expense_id: str) -> Result[None]:
        try:
            self.data.delete_expense(expense_id)
        except RecordNotFoundError:
            logger.warning(f"Delete requested for unknown expense {expense_id}")
            return Result.failure(WorkflowError(ErrorKind.NOT_FOUND, "Expense not found"))
        logger.info(f"Deleted expense {expense_id}")
        return Result.success(None)

    def get_group_balances(self, group_id: str) -> Result[Dict[str, Decimal]]:
        """Recompute balances for a group from its stored expenses."""
        try:
            group = self._load_group(group_id)
        except WorkflowError as e:
            return Result.failure(e)
        expenses = self.data.get_group_expenses(group.id)
        return Result.success(self.balances.compute_balances(group.members, expenses))

    def get_balance_summary(self, group_id: str) -> Result[list[BalanceLine]]:
        """Group balances formatted in the master currency, largest creditor first."""
        try:
            group = self._load_group(group_id)
        except WorkflowError as e:
            return Result.failure(e)
        expenses = self.data.get_group_expenses(group.id)
        balances = self.balances.compute_balances(group.members, expenses)

        lines = []
        for entry in self.balances.sorted_entries(balances):
            settled = is_settled(entry.amount)
            # Rounding noise would otherwise show as "-$0.00"
            shown = Decimal(0) if settled else entry.amount
            lines.append(
                BalanceLine(
                    user_id=entry.user_id,
                    amount=entry.amount,
                    display=format_amount(shown, group.master_currency, self.locale),
                    settled=settled,
                )
            )
        return Result.success(lines)

    def draft_from_expense(self, expense_id: str) -> Result[ExpenseDraft]:
        """Rebuild the form state of a stored expense for editing."""
        try:
            expense = self._load_expense(expense_id)
        except WorkflowError as e:
            return Result.failure(e)

        directive = directive_from_expense(expense)
        is_equal = expense.split_type == SplitType.EQUAL
        return Result.success(
            ExpenseDraft(
                group_id=expense.group_id,
                description=expense.description,
                original_amount=expense.original_amount,
                original_currency=expense.original_currency,
                date=expense.date,
                paid_by=expense.paid_by,
                split_type=expense.split_type,
                participants=[share.user_id for share in expense.participants],
                split_values={} if is_equal else dict(directive),
                tags=list(expense.tags),
                attachments=list(expense.attachments),
                location=expense.location,
            )
        )


def _find_user_by_name(
    name: str, members: Sequence[UserRecord], current_user: Optional[UserRecord]
) -> Optional[UserRecord]:
    lowered = name.strip().lower()
    if current_user and lowered in ("you", current_user.name.lower()):
        return current_user
    for member in members:
        if member.name.lower() == lowered:
            return member
    return None


def apply_suggestion(
    draft: ExpenseDraft,
    suggestion: ExpenseSuggestion,
    members: Sequence[UserRecord],
    current_user: Optional[UserRecord] = None,
) -> tuple[ExpenseDraft, set[str]]:
    """Merge machine-suggested fields into a draft.

    Only ExpenseSuggestion's fields are considered. Unsupported currencies,
    malformed dates and unknown names are skipped. The merged draft must
    still pass validate_expense_submission before it is trusted.

    Args:
        draft: Current form state
        suggestion: Parsed suggestion
        members: Group members, used to resolve names to ids
        current_user: User submitting the form ("you" resolves to them)

    Returns:
        Tuple of (new draft, names of fields that were updated)
    """
    updates: dict = {}
    updated: set[str] = set()

    if suggestion.description:
        updates["description"] = suggestion.description
        updated.add("description")
    if suggestion.amount:
        updates["original_amount"] = suggestion.amount
        updated.add("amount")
    if suggestion.currency:
        if is_supported_currency(suggestion.currency):
            updates["original_currency"] = suggestion.currency.upper()
        else:
            logger.warning(f"Suggestion named an unsupported currency: {suggestion.currency}")
    if suggestion.date and ISO_DATE.match(suggestion.date):
        updates["date"] = suggestion.date
        updated.add("date")
    if suggestion.category:
        updates["tags"] = suggestion.category
        updated.add("tags")

    if suggestion.paid_by:
        payer = _find_user_by_name(suggestion.paid_by, members, current_user)
        if payer:
            updates["paid_by"] = payer.id
            updated.add("paid_by")

    if suggestion.split and suggestion.split.type in SplitType.__members__:
        split_type = SplitType(suggestion.split.type)
        participants: list[str] = []
        values: dict = {}
        for entry in suggestion.split.participants:
            user = _find_user_by_name(entry.name, members, current_user)
            if user is None:
                continue
            participants.append(user.id)
            if split_type == SplitType.EXACT and entry.amount is not None:
                values[user.id] = entry.amount
            elif split_type == SplitType.PARTS and entry.parts is not None:
                values[user.id] = entry.parts

        updates["split_type"] = split_type
        updates["participants"] = participants
        updates["split_values"] = values
        updated.add("split")

    return draft.model_copy(update=updates), updated


__all__ = ["BalanceLine", "ExpenseService", "apply_suggestion"]
