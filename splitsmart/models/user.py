"""User ORM model for people who can join groups."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from splitsmart.models import Base, BaseModel


class User(Base, BaseModel):
    """A person who can be a member of groups and take part in expenses.

    Balance math only ever uses ``id``; the remaining fields are display data.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, name={self.name!r})>"


__all__ = ["User"]
