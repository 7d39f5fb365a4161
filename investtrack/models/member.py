from datetime import date, datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    Text,
    Boolean,
    Date,
    DateTime,
    JSON,
    ForeignKey,
    Enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from investtrack.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from investtrack.models.firm import Firm
    from investtrack.models.interaction import Interaction


class MemberType(str, PyEnum):
    """Discriminator values for the members table; mirrors FirmType"""

    BROKER = "broker"
    INVESTOR = "investor"


class Member(Base, TimestampMixin):
    """
    Contact person belonging to exactly one firm at a time.

    Single-table inheritance on `member_type`. The variant always matches the
    current firm's variant and only changes through a transfer, which
    replaces the row with a new one of the target variant.

    `firm_history` is append-only and chronological; it holds one entry for
    every firm the member has belonged to, the current firm included.
    """

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_type: Mapped[MemberType] = mapped_column(
        Enum(MemberType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    designation: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile_country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    mobile_number: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    office_country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    office_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_gift: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sectors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    # files.id; plain columns to avoid a members <-> files foreign-key cycle
    business_card_front_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    business_card_back_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    firm: Mapped["Firm"] = relationship("Firm", back_populates="members")
    firm_history: Mapped[list["FirmHistoryEntry"]] = relationship(
        "FirmHistoryEntry",
        back_populates="member",
        order_by="FirmHistoryEntry.id",
        cascade="all, delete-orphan",
    )
    # Interactions are removed explicitly before the member row goes away
    interactions: Mapped[list["Interaction"]] = relationship(
        "Interaction",
        back_populates="member",
        order_by="Interaction.id",
        passive_deletes="all",
    )

    __mapper_args__ = {
        "polymorphic_on": "member_type",
        "version_id_col": version,
    }
    # A transferred member must never get its predecessor's id back
    __table_args__ = {"sqlite_autoincrement": True}

    @property
    def interaction_ids(self) -> list[int]:
        return [interaction.id for interaction in self.interactions]

    @property
    def business_card_ids(self) -> list[int]:
        return [
            file_id
            for file_id in (self.business_card_front_id, self.business_card_back_id)
            if file_id is not None
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, email='{self.email}', firm_id={self.firm_id})>"


class BrokerMember(Member):
    """Analyst or salesperson at a broker firm."""

    __mapper_args__ = {"polymorphic_identity": MemberType.BROKER}


class InvestorMember(Member):
    """Fund manager or analyst at an investor firm."""

    fund_size_global: Mapped[float | None] = mapped_column(
        Numeric(precision=18, scale=2), nullable=True
    )
    fund_size_indian: Mapped[float | None] = mapped_column(
        Numeric(precision=18, scale=2), nullable=True
    )
    regional_focus: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_existing_investor: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    holding_size: Mapped[float | None] = mapped_column(
        Numeric(precision=18, scale=2), nullable=True
    )
    last_holding_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __mapper_args__ = {"polymorphic_identity": MemberType.INVESTOR}


class FirmHistoryEntry(Base):
    """One `{firm, date_of_joining}` step in a member's career. Never updated."""

    __tablename__ = "member_firm_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    date_of_joining: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    member: Mapped["Member"] = relationship("Member", back_populates="firm_history")

    def __repr__(self) -> str:
        return f"<FirmHistoryEntry(member_id={self.member_id}, firm_id={self.firm_id})>"
