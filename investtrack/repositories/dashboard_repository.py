from sqlalchemy import func
from sqlalchemy.orm import Session

from investtrack.models.coverage import Coverage
from investtrack.models.event import Event
from investtrack.models.firm import Firm, FirmType
from investtrack.models.interaction import Interaction
from investtrack.models.member import Member, InvestorMember, MemberType


class DashboardRepository:
    """Aggregate queries behind the dashboard"""

    def __init__(self, db: Session):
        self.db = db

    def count_firms(self, firm_type: FirmType | None = None) -> int:
        query = self.db.query(func.count(Firm.id))
        if firm_type is not None:
            query = query.filter(Firm.firm_type == firm_type)
        return query.scalar() or 0

    def count_members(self, member_type: MemberType | None = None) -> int:
        query = self.db.query(func.count(Member.id))
        if member_type is not None:
            query = query.filter(Member.member_type == member_type)
        return query.scalar() or 0

    def count_interactions(self) -> int:
        return self.db.query(func.count(Interaction.id)).scalar() or 0

    def count_events(self) -> int:
        return self.db.query(func.count(Event.id)).scalar() or 0

    def count_coverages(self) -> int:
        return self.db.query(func.count(Coverage.id)).scalar() or 0

    def firms_by_location_type(self, firm_type: FirmType) -> list[tuple]:
        """(location_type, count) pairs for one firm variant"""
        return (
            self.db.query(Firm.location_type, func.count(Firm.id))
            .filter(Firm.firm_type == firm_type)
            .group_by(Firm.location_type)
            .order_by(Firm.location_type)
            .all()
        )

    def top_coverages(self, limit: int = 10) -> list[tuple]:
        """Highest target prices joined with the broker name"""
        return (
            self.db.query(
                Firm.name,
                Coverage.fiscal_year,
                Coverage.quarter,
                Coverage.tp,
                Coverage.recommendation,
            )
            .join(Firm, Firm.id == Coverage.firm_id)
            .order_by(Coverage.tp.desc(), Coverage.id)
            .limit(limit)
            .all()
        )

    def investor_member_profiles(self) -> list[tuple]:
        """(address, regional_focus) of every investor member"""
        return (
            self.db.query(Member.address, InvestorMember.__table__.c.regional_focus)
            .filter(Member.member_type == MemberType.INVESTOR)
            .all()
        )

    def count_members_with_designation(self, designation: str) -> int:
        """Case-insensitive exact match on designation"""
        return (
            self.db.query(func.count(Member.id))
            .filter(func.lower(Member.designation) == designation.lower())
            .scalar()
            or 0
        )
