from datetime import date
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    Text,
    Boolean,
    Date,
    JSON,
    ForeignKey,
    Enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from investtrack.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from investtrack.models.user import User
    from investtrack.models.member import Member
    from investtrack.models.coverage import Coverage


class FirmType(str, PyEnum):
    """Discriminator values for the firms table"""

    BROKER = "broker"
    INVESTOR = "investor"


class LocationType(str, PyEnum):
    DOMESTIC = "Domestic"
    FOREIGN = "Foreign"


class Firm(Base, TimestampMixin):
    """
    Broker or investor organisation.

    Single-table inheritance: both variants live in `firms`, told apart by
    `firm_type`. Firms are never hard-deleted; `is_active=False` marks a
    deactivated firm and keeps every relation pointing at it.

    `members` is the read side of Member.firm_id, so the firm's member list
    cannot drift from the members' own firm reference.
    """

    __tablename__ = "firms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_type: Mapped[FirmType] = mapped_column(
        Enum(FirmType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    location_type: Mapped[LocationType] = mapped_column(
        Enum(LocationType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    website: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    created_by: Mapped["User"] = relationship("User", back_populates="firms")
    members: Mapped[list["Member"]] = relationship(
        "Member", back_populates="firm", order_by="Member.id"
    )

    __mapper_args__ = {
        "polymorphic_on": "firm_type",
        "version_id_col": version,
    }

    @property
    def member_ids(self) -> list[int]:
        return [member.id for member in self.members]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}')>"


class Broker(Firm):
    """Sell-side firm; publishes coverage (target price + recommendation)."""

    sectors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    coverages: Mapped[list["Coverage"]] = relationship(
        "Coverage", back_populates="firm", order_by="Coverage.id"
    )

    __mapper_args__ = {"polymorphic_identity": FirmType.BROKER}

    @property
    def coverage_ids(self) -> list[int]:
        return [coverage.id for coverage in self.coverages]


class Investor(Firm):
    """Buy-side firm; tracks fund size and fund factsheets."""

    regional_focus: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    fund_size_global: Mapped[float | None] = mapped_column(
        Numeric(precision=18, scale=2), nullable=True
    )
    fund_size_indian: Mapped[float | None] = mapped_column(
        Numeric(precision=18, scale=2), nullable=True
    )

    fund_factsheets: Mapped[list["FundFactsheet"]] = relationship(
        "FundFactsheet",
        back_populates="firm",
        order_by="FundFactsheet.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"polymorphic_identity": FirmType.INVESTOR}


class FundFactsheet(Base):
    """A dated factsheet document attached to an investor firm."""

    __tablename__ = "fund_factsheets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    file_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("files.id"), nullable=False, unique=True
    )
    document_date: Mapped[date] = mapped_column(
        Date, nullable=False, default=lambda: utcnow().date()
    )

    firm: Mapped["Investor"] = relationship("Investor", back_populates="fund_factsheets")
