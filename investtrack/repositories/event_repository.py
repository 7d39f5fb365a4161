from typing import Optional
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from investtrack.models.event import Event, EventMode, NextStep
from investtrack.repositories.filters import paginate


class EventRepository:
    """Repository for Event data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: int) -> Event | None:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def get_with_filters(
        self,
        firm_id: Optional[int] = None,
        member_id: Optional[int] = None,
        mode: Optional[EventMode] = None,
        next_step: Optional[NextStep] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Event], int]:
        """Get events ordered by start date (latest first)"""
        query = self.db.query(Event)

        if firm_id is not None:
            query = query.filter(Event.firm_id == firm_id)

        if member_id is not None:
            query = query.filter(Event.member_id == member_id)

        if mode is not None:
            query = query.filter(Event.mode == mode)

        if next_step is not None:
            query = query.filter(Event.next_step == next_step)

        total = query.count()

        events = paginate(
            query.order_by(Event.start_date.desc(), Event.id.desc()), page, per_page
        ).all()

        return events, total

    def add(self, event: Event) -> Event:
        self.db.add(event)
        self.db.flush()
        return event

    def delete(self, event: Event) -> None:
        self.db.delete(event)
        self.db.flush()

    def delete_by_member(self, member_id: int) -> int:
        result = self.db.execute(
            delete(Event)
            .where(Event.member_id == member_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def reassign_member(self, old_member_id: int, new_member_id: int) -> int:
        result = self.db.execute(
            update(Event)
            .where(Event.member_id == old_member_id)
            .values(member_id=new_member_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
