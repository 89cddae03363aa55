"""Expense and per-participant share ORM models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from splitsmart.models import Base, BaseModel


class SplitType(str, Enum):
    """Algorithm that produced an expense's participant shares."""

    EQUAL = "EQUAL"
    """Total divided evenly across the selected participants."""

    EXACT = "EXACT"
    """Each participant's share entered explicitly."""

    PARTS = "PARTS"
    """Total divided proportionally to integer weights."""


class Expense(Base, BaseModel):
    """Model representing a shared expense within a group.

    ``amount`` is always in the group's master currency and is the only value
    balance math reads. ``original_amount`` / ``original_currency`` keep what
    the user typed; ``conversion_rate`` is set only when those currencies
    differ.
    """

    __tablename__ = "expenses"

    group_id: Mapped[str] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(String(200), nullable=False)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 6),
        nullable=False,
        comment="Total in the group's master currency",
    )
    original_amount: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    original_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    conversion_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(18, 8),
        nullable=True,
        comment="original_currency -> master currency; NULL when they match",
    )

    paid_by: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    split_type: Mapped[SplitType] = mapped_column(
        String(10),
        nullable=False,
        default=SplitType.EQUAL,
    )

    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    attachments: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)

    group: Mapped["Group"] = relationship("Group", back_populates="expenses")  # noqa: F821
    participants: Mapped[list["ExpenseShare"]] = relationship(
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseShare.position",
    )

    __table_args__ = (Index("idx_expense_group_date", "group_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id!r}, group_id={self.group_id!r}, "
            f"amount={self.amount}, paid_by={self.paid_by!r})>"
        )


class ExpenseShare(Base):
    """One participant's share of an expense, in master currency."""

    __tablename__ = "expense_shares"

    expense_id: Mapped[str] = mapped_column(
        ForeignKey("expenses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    # Only set for PARTS splits
    parts: Mapped[int | None] = mapped_column(Integer, nullable=True)

    expense: Mapped["Expense"] = relationship("Expense", back_populates="participants")

    __table_args__ = (Index("idx_expense_share_user", "user_id"),)

    def __repr__(self) -> str:
        return (
            f"<ExpenseShare(expense_id={self.expense_id!r}, user_id={self.user_id!r}, "
            f"amount={self.amount}, parts={self.parts})>"
        )


__all__ = ["Expense", "ExpenseShare", "SplitType"]
