"""Split allocation: turn a split directive into per-participant shares.

Supports split types:
- EQUAL: Total divided evenly across selected participants
- EXACT: Explicit amount per participant
- PARTS: Total divided proportionally to integer weights

EXACT and PARTS drop rows that are zero rather than rejecting the whole
submission, so a participant toggled into the split but left at zero is
simply not listed.
"""

import logging
from decimal import Decimal
from typing import Mapping, Sequence, Union

from splitsmart.models.expense import SplitType
from splitsmart.schemas.expense import ExpenseRecord, SplitDetail
from splitsmart.services.currency_service import amounts_match, format_plain, to_decimal
from splitsmart.services.errors import ErrorKind, Result, SplitError, SplitSmartError

logger = logging.getLogger(__name__)

SplitDirective = Union[Sequence[str], Mapping[str, object]]


def _to_parts(user_id: str, value) -> int:
    """Parse a PARTS weight as a non-negative integer."""
    if isinstance(value, bool):
        raise SplitError(ErrorKind.INVALID_PARTS, f"Parts for {user_id} must be a whole number")
    try:
        parts = to_decimal(value)
    except SplitSmartError as e:
        raise SplitError(
            ErrorKind.INVALID_PARTS, f"Parts for {user_id} must be a whole number"
        ) from e
    if parts != parts.to_integral_value():
        raise SplitError(ErrorKind.INVALID_PARTS, f"Parts for {user_id} must be a whole number")
    if parts < 0:
        raise SplitError(ErrorKind.INVALID_PARTS, f"Parts for {user_id} cannot be negative")
    return int(parts)


class SplitAllocator:
    """Split engine with one method per split type."""

    def allocate_equal(self, total_amount: Decimal, participants: Sequence[str]) -> list[SplitDetail]:
        """Divide the total evenly.

        The rounding remainder is not reconciled: 100 / 3 gives three shares
        of 33.333..., whose sum is within EPSILON of the total.

        Args:
            total_amount: Expense total in master currency
            participants: Selected user ids (duplicates collapse)

        Returns:
            One SplitDetail per participant, in selection order

        Raises:
            SplitError: NO_PARTICIPANTS if the selection is empty
        """
        unique_ids = list(dict.fromkeys(participants))
        if not unique_ids:
            raise SplitError(ErrorKind.NO_PARTICIPANTS, "Please select at least one participant.")

        share = total_amount / len(unique_ids)
        return [SplitDetail(user_id=user_id, amount=share) for user_id in unique_ids]

    def allocate_exact(
        self, total_amount: Decimal, amounts: Mapping[str, object]
    ) -> list[SplitDetail]:
        """Use explicitly entered amounts.

        Non-positive rows are dropped before the totals are compared, so the
        kept shares always sum to the total within EPSILON.

        Raises:
            SplitError: SPLIT_SUM_MISMATCH if the entered amounts do not add up
        """
        entered = [(user_id, to_decimal(value)) for user_id, value in amounts.items()]
        kept = [(user_id, amount) for user_id, amount in entered if amount > 0]

        entered_total = sum((amount for _, amount in kept), Decimal(0))
        if not amounts_match(entered_total, total_amount):
            raise SplitError(
                ErrorKind.SPLIT_SUM_MISMATCH,
                f"Split amounts ({format_plain(entered_total)}) do not add up to "
                f"total ({format_plain(total_amount)}).",
            )

        return [SplitDetail(user_id=user_id, amount=amount) for user_id, amount in kept]

    def allocate_parts(
        self, total_amount: Decimal, parts_by_user: Mapping[str, object]
    ) -> list[SplitDetail]:
        """Divide the total proportionally to integer weights.

        Raises:
            SplitError: INVALID_PARTS for negative or fractional weights,
                NO_PARTS_ASSIGNED if the weights sum to zero
        """
        weights = [(user_id, _to_parts(user_id, value)) for user_id, value in parts_by_user.items()]
        total_parts = sum(parts for _, parts in weights)
        if total_parts <= 0:
            raise SplitError(
                ErrorKind.NO_PARTS_ASSIGNED, "Please assign parts to at least one participant."
            )

        return [
            SplitDetail(
                user_id=user_id,
                amount=total_amount * parts / total_parts,
                parts=parts,
            )
            for user_id, parts in weights
            if parts > 0
        ]

    def allocate(
        self, split_type: SplitType, total_amount, directive: SplitDirective
    ) -> list[SplitDetail]:
        """Allocate an expense using the given split type.

        Args:
            split_type: EQUAL, EXACT or PARTS
            total_amount: Expense total in master currency
            directive: Sequence of ids for EQUAL, mapping of id to amount
                (EXACT) or to parts (PARTS)

        Returns:
            Non-empty list of shares summing to the total within EPSILON

        Raises:
            SplitError: On the first violated rule
        """
        total = to_decimal(total_amount)
        split_type = SplitType(split_type)

        if split_type == SplitType.EQUAL:
            if isinstance(directive, Mapping):
                directive = list(directive.keys())
            shares = self.allocate_equal(total, directive)
        elif split_type == SplitType.EXACT:
            shares = self.allocate_exact(total, dict(directive))
        else:
            shares = self.allocate_parts(total, dict(directive))

        if not shares:
            raise SplitError(ErrorKind.NO_PARTICIPANTS, "At least one participant is required.")

        logger.debug(f"Resolved {split_type.value} split of {total} into {len(shares)} shares")
        return shares


_allocator = SplitAllocator()


def resolve_split(split_type: SplitType, total_amount, directive: SplitDirective) -> Result[list[SplitDetail]]:
    """Resolve a split directive into participant shares.

    Returns:
        Result with the share list, or the first violated rule
    """
    try:
        return Result.success(_allocator.allocate(split_type, total_amount, directive))
    except SplitSmartError as e:
        logger.info(f"Split rejected ({e.kind.value}): {e.message}")
        return Result.failure(e)


def directive_from_expense(expense: ExpenseRecord) -> SplitDirective:
    """Rebuild the directive that produced a stored expense, for re-editing."""
    if expense.split_type == SplitType.EQUAL:
        return [share.user_id for share in expense.participants]
    if expense.split_type == SplitType.PARTS:
        return {
            share.user_id: share.parts if share.parts is not None else 1
            for share in expense.participants
        }
    return {share.user_id: share.amount for share in expense.participants}


__all__ = ["SplitAllocator", "SplitDirective", "resolve_split", "directive_from_expense"]
