from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy import Integer, Numeric, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from investtrack.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from investtrack.models.firm import Broker


class Recommendation(str, PyEnum):
    BUY = "Buy"
    ACCUMULATE = "Accumulate"
    HOLD = "Hold"
    REDUCE = "Reduce"
    SELL = "Sell"


class Coverage(Base, TimestampMixin):
    """
    A broker's quarterly target price and recommendation.

    Constraints:
    - Unique(firm_id, fiscal_year, quarter) - one coverage per broker per quarter
    - firm_id must point at a Broker (enforced at application layer)
    """

    __tablename__ = "coverages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    tp: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[int] = mapped_column(Integer, nullable=False)
    recommendation: Mapped[Recommendation] = mapped_column(
        Enum(Recommendation, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    coverage_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    coverage_file_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("files.id"), nullable=True
    )

    # Relationships
    firm: Mapped["Broker"] = relationship("Broker", back_populates="coverages")

    __table_args__ = (
        UniqueConstraint("firm_id", "fiscal_year", "quarter", name="uq_coverage_period"),
    )

    def __repr__(self) -> str:
        return f"<Coverage(firm_id={self.firm_id}, fiscal_year={self.fiscal_year}, quarter={self.quarter})>"
