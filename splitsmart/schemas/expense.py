"""Pydantic schemas for users, groups, expenses and expense drafts."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from splitsmart.models.expense import SplitType


class UserRecord(BaseModel):
    """A person as seen by the core: only ``id`` matters for balances."""

    id: str
    name: str
    email: str | None = None
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class GroupRecord(BaseModel):
    """Group with its current membership."""

    id: str
    name: str
    master_currency: str = Field(..., description="ISO 4217 code balances are kept in")
    members: list[str] = Field(default_factory=list, description="Current member user ids")
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SplitDetail(BaseModel):
    """One participant's share of an expense, in master currency."""

    user_id: str
    amount: Decimal
    parts: int | None = Field(None, description="Weight used for PARTS splits only")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ExpenseRecord(BaseModel):
    """A persisted expense with its resolved participant shares."""

    id: str
    group_id: str
    description: str
    amount: Decimal = Field(..., description="Total in the group's master currency")
    original_amount: Decimal
    original_currency: str
    conversion_rate: Decimal | None = None
    paid_by: str
    participants: list[SplitDetail]
    split_type: SplitType
    date: datetime
    tags: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)
    location: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseDraft(BaseModel):
    """Raw add/edit-expense form state, before any validation.

    Field types are deliberately loose: values arrive as the user typed them
    and are only trusted after validate_expense_submission.

    ``participants`` lists the ids selected for an EQUAL split.
    ``split_values`` maps user id to an exact amount (EXACT) or integer
    parts (PARTS).
    """

    group_id: str = ""
    description: str = ""
    original_amount: Any = None
    original_currency: str = ""
    date: Any = None
    paid_by: str = ""
    split_type: SplitType = SplitType.EQUAL
    participants: list[str] = Field(default_factory=list)
    split_values: dict[str, Any] = Field(default_factory=dict)
    tags: str | list[str] = ""
    attachments: list[str] = Field(default_factory=list)
    location: str | None = None


class SuggestedParticipant(BaseModel):
    """Participant named by an expense suggestion."""

    name: str
    amount: float | None = None
    parts: int | None = None


class SuggestedSplit(BaseModel):
    type: str
    participants: list[SuggestedParticipant] = Field(default_factory=list)


class ExpenseSuggestion(BaseModel):
    """Partial expense extracted from free text or a receipt image.

    Only these fields may ever be merged into a draft; anything else the
    parser returns is dropped on construction.
    """

    description: str | None = None
    amount: float | None = None
    currency: str | None = None
    date: str | None = None
    category: str | None = None
    paid_by: str | None = Field(None, alias="paidBy")
    split: SuggestedSplit | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


__all__ = [
    "UserRecord",
    "GroupRecord",
    "SplitDetail",
    "ExpenseRecord",
    "ExpenseDraft",
    "SuggestedParticipant",
    "SuggestedSplit",
    "ExpenseSuggestion",
]
