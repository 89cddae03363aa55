"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


def new_id() -> str:
    """Generate an opaque record identifier."""
    return uuid4().hex


class BaseModel:
    """Base model with string id and common timestamp fields."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from splitsmart.models.user import User  # noqa: E402
from splitsmart.models.group import Group, GroupMember  # noqa: E402
from splitsmart.models.expense import Expense, ExpenseShare, SplitType  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "new_id",
    "User",
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseShare",
    "SplitType",
]
