"""Group and group membership ORM models."""

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from splitsmart.models import Base, BaseModel


class Group(Base, BaseModel):
    """Model representing an expense-sharing group.

    Every balance in the group is expressed in ``master_currency``.
    Membership is stored as ordered GroupMember rows; it describes current
    membership only, expenses keep referencing former members by id.
    """

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    master_currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        comment="ISO 4217 code all balances are computed in",
    )
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    member_links: Mapped[list["GroupMember"]] = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.position",
    )
    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense",
        back_populates="group",
        cascade="all, delete-orphan",
    )

    @property
    def member_ids(self) -> list[str]:
        return [link.user_id for link in self.member_links]

    def __repr__(self) -> str:
        return (
            f"<Group(id={self.id!r}, name={self.name!r}, "
            f"master_currency={self.master_currency})>"
        )


class GroupMember(Base):
    """Association row linking a user id to a group."""

    __tablename__ = "group_members"

    group_id: Mapped[str] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # No FK to users: membership may reference users the store does not know
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    group: Mapped["Group"] = relationship("Group", back_populates="member_links")

    __table_args__ = (Index("idx_group_member_user", "user_id"),)

    def __repr__(self) -> str:
        return f"<GroupMember(group_id={self.group_id!r}, user_id={self.user_id!r})>"


__all__ = ["Group", "GroupMember"]
