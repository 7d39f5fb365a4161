from typing import Optional
from sqlalchemy.orm import Session

from investtrack.models.member import Member, MemberType
from investtrack.repositories.filters import json_array_contains_any, paginate


class MemberRepository:
    """Repository for Member (BrokerMember / InvestorMember) data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, member_id: int) -> Member | None:
        return self.db.query(Member).filter(Member.id == member_id).first()

    def get_with_filters(
        self,
        member_type: Optional[MemberType] = None,
        firm_id: Optional[int] = None,
        name: Optional[str] = None,
        designation: Optional[str] = None,
        is_gift: Optional[bool] = None,
        sectors: Optional[list[str]] = None,
        localities: Optional[list[str]] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Member], int]:
        """
        Get members with filters, newest first.

        Returns:
            Tuple of (members list, total count before pagination)
        """
        query = self.db.query(Member)

        if member_type is not None:
            query = query.filter(Member.member_type == member_type)

        if firm_id is not None:
            query = query.filter(Member.firm_id == firm_id)

        if name is not None:
            query = query.filter(Member.name.ilike(f"%{name}%"))

        if designation is not None:
            query = query.filter(Member.designation.ilike(f"%{designation}%"))

        if is_gift is not None:
            query = query.filter(Member.is_gift == is_gift)

        if sectors:
            query = query.filter(json_array_contains_any(Member.sectors, sectors))

        if localities:
            query = query.filter(Member.address["locality"].as_string().in_(localities))

        total = query.count()

        members = paginate(
            query.order_by(Member.created_at.desc(), Member.id.desc()), page, per_page
        ).all()

        return members, total

    def add(self, member: Member) -> Member:
        """Stage a new member and assign its id (caller commits)"""
        self.db.add(member)
        self.db.flush()
        return member

    def delete(self, member: Member) -> None:
        """Remove the member row and its firm history (caller commits)"""
        self.db.delete(member)
        self.db.flush()
