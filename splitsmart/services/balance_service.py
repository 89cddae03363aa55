"""Balance calculation service for group members.

Balance formula per user: Paid (as payer) - Owed (as participant)
- Positive balance: the group owes the user money
- Negative balance: the user owes the group money

Balances are never stored. Every read folds the full expense list of the
group again, trusting the shares persisted at write time.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, NamedTuple

from splitsmart.schemas.expense import ExpenseRecord
from splitsmart.services.currency_service import EPSILON

logger = logging.getLogger(__name__)


class BalanceEntry(NamedTuple):
    """Net position of one user."""

    user_id: str
    amount: Decimal


class BalanceService:
    """Compute member balances from expense records."""

    def compute_balances(
        self, members: Iterable[str], expenses: Iterable[ExpenseRecord]
    ) -> Dict[str, Decimal]:
        """Fold expenses into a balance per user.

        Every current member starts at zero so members without activity show
        as settled. Payers and participants who are no longer members keep
        their historical entries: money they owe or are owed does not vanish
        when they leave.

        Args:
            members: Current member user ids
            expenses: Expenses of the group, in any order

        Returns:
            Dict mapping user_id to balance (positive = owed money)
        """
        balances: Dict[str, Decimal] = {member_id: Decimal(0) for member_id in members}

        count = 0
        for expense in expenses:
            balances[expense.paid_by] = balances.get(expense.paid_by, Decimal(0)) + expense.amount
            for share in expense.participants:
                balances[share.user_id] = balances.get(share.user_id, Decimal(0)) - share.amount
            count += 1

        logger.debug(f"Computed balances for {len(balances)} users from {count} expenses")
        return balances

    def sorted_entries(self, balances: Dict[str, Decimal]) -> list[BalanceEntry]:
        """Order balances for display, largest creditor first."""
        entries = [BalanceEntry(user_id, amount) for user_id, amount in balances.items()]
        return sorted(entries, key=lambda entry: entry.amount, reverse=True)


_service = BalanceService()


def compute_balances(
    members: Iterable[str], expenses: Iterable[ExpenseRecord]
) -> Dict[str, Decimal]:
    """Module-level shortcut for BalanceService.compute_balances."""
    return _service.compute_balances(members, expenses)


def sorted_balance_entries(balances: Dict[str, Decimal]) -> list[BalanceEntry]:
    return _service.sorted_entries(balances)


def is_settled(amount: Decimal) -> bool:
    """True if a balance is zero up to rounding noise."""
    return abs(amount) < EPSILON


__all__ = [
    "BalanceEntry",
    "BalanceService",
    "compute_balances",
    "sorted_balance_entries",
    "is_settled",
]
