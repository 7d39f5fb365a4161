from datetime import datetime
from sqlalchemy import Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from investtrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from investtrack.models.member import Member


class Interaction(Base, TimestampMixin):
    """
    Logged conversation with a member.

    firm_id records the firm the member belonged to when the interaction
    happened; it is not rewritten when the member moves.
    """

    __tablename__ = "interactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    # Deferred so a transfer can swap the member row inside one transaction
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", deferrable=True, initially="DEFERRED"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_interaction: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    # Relationships
    member: Mapped["Member"] = relationship("Member", back_populates="interactions")

    __table_args__ = (
        Index("ix_interactions_member_date", "member_id", "date_of_interaction"),
    )
