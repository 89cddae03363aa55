"""Pydantic schemas for records exchanged with the storage layer."""

from splitsmart.schemas.expense import (
    ExpenseDraft,
    ExpenseRecord,
    ExpenseSuggestion,
    GroupRecord,
    SplitDetail,
    SuggestedParticipant,
    SuggestedSplit,
    UserRecord,
)

__all__ = [
    "ExpenseDraft",
    "ExpenseRecord",
    "ExpenseSuggestion",
    "GroupRecord",
    "SplitDetail",
    "SuggestedParticipant",
    "SuggestedSplit",
    "UserRecord",
]
