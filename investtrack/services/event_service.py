import logging
from typing import Optional

from sqlalchemy.orm import Session

from investtrack.core.exceptions import NotFoundException, ValidationException
from investtrack.database import atomic
from investtrack.models.base import as_utc
from investtrack.models.event import Event, EventMode, NextStep
from investtrack.repositories.event_repository import EventRepository
from investtrack.repositories.firm_repository import FirmRepository
from investtrack.repositories.member_repository import MemberRepository
from investtrack.schemas.event_schemas import EventCreate, EventUpdate
from investtrack.services.relationship_service import RelationshipService
from investtrack.services.type_resolver import reject_cleared_required

logger = logging.getLogger(__name__)


def _check_event_rules(event: Event) -> None:
    """Cross-field rules, re-checked after a partial update is merged"""
    fields = []
    if event.mode == EventMode.PHYSICAL and not event.location:
        fields.append({"field": "location", "message": "location is required for a Physical event"})
    if as_utc(event.start_date) > as_utc(event.end_date):
        fields.append(
            {"field": "start_date", "message": "Start date cannot be greater than end date"}
        )
    if fields:
        raise ValidationException("; ".join(f["message"] for f in fields), fields=fields)


class EventService:
    """Service layer for events involving members"""

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventRepository(db)
        self.member_repo = MemberRepository(db)
        self.firm_repo = FirmRepository(db)
        self.relationships = RelationshipService(db)

    def create_event(self, event_data: EventCreate) -> Event:
        """
        Raises:
            NotFoundException: Firm or member doesn't exist
            InvalidOperationException: Member doesn't belong to the firm
        """
        firm = self.firm_repo.get_by_id(event_data.firm_id)
        if not firm:
            raise NotFoundException(f"Firm {event_data.firm_id} not found")
        member = self.member_repo.get_by_id(event_data.member_id)
        if not member:
            raise NotFoundException(f"Member {event_data.member_id} not found")

        event = Event(**event_data.model_dump(exclude={"firm_id", "member_id"}))

        with atomic(self.db):
            self.relationships.attach_event(event, member, firm.id)
            self.event_repo.add(event)

        logger.info("Created event %s for member %s", event.id, event.member_id)
        return event

    def get_event(self, event_id: int) -> Event:
        event = self.event_repo.get_by_id(event_id)
        if not event:
            raise NotFoundException(f"Event {event_id} not found")
        return event

    def get_events(
        self,
        firm_id: Optional[int] = None,
        member_id: Optional[int] = None,
        mode: Optional[EventMode] = None,
        next_step: Optional[NextStep] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[Event], int]:
        return self.event_repo.get_with_filters(
            firm_id=firm_id,
            member_id=member_id,
            mode=mode,
            next_step=next_step,
            page=page,
            per_page=per_page,
        )

    def update_event(self, event_id: int, event_data: EventUpdate) -> Event:
        event = self.get_event(event_id)

        updates = event_data.model_dump(exclude_unset=True)
        reject_cleared_required(EventCreate, updates)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(event, field, value)
            _check_event_rules(event)
            self.db.flush()

        return event

    def delete_event(self, event_id: int) -> None:
        event = self.get_event(event_id)

        with atomic(self.db):
            self.event_repo.delete(event)

        logger.info("Deleted event %s", event_id)
