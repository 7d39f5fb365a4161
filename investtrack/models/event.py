from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import String, Integer, Text, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column

from investtrack.models.base import Base, TimestampMixin


class EventMode(str, PyEnum):
    VIRTUAL = "Virtual"
    PHYSICAL = "Physical"


class NextStep(str, PyEnum):
    """Outcome of an event invitation"""

    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    DECLINED = "Declined"
    TBD = "TBD"


class Event(Base, TimestampMixin):
    """
    Meeting, roadshow or conference involving a member of a firm.

    location is required when mode is Physical; start_date <= end_date.
    Both rules are enforced by the event schemas.
    """

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", deferrable=True, initially="DEFERRED"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    mode: Mapped[EventMode] = mapped_column(
        Enum(EventMode, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    internal_attendees: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_step: Mapped[NextStep] = mapped_column(
        Enum(NextStep, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=NextStep.TBD,
    )
    is_invited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    exchange_intimated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
