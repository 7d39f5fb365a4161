from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import require_admin
from investtrack.models.event import EventMode, NextStep
from investtrack.models.user import User
from investtrack.services.event_service import EventService
from investtrack.schemas.event_schemas import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventListResponse,
)

router = APIRouter()


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    event_data: EventCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create an event.

    - location is required for Physical events
    - start_date must not be after end_date
    - the member must belong to firm_id (400 otherwise)
    """
    return EventService(db).create_event(event_data)


@router.get("", response_model=EventListResponse)
def list_events(
    firm_id: Optional[int] = Query(None, description="Filter by firm ID"),
    member_id: Optional[int] = Query(None, description="Filter by member ID"),
    mode: Optional[EventMode] = Query(None, description="Virtual or Physical"),
    next_step: Optional[NextStep] = Query(None, description="Filter by outcome"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(100, ge=1, le=1000, description="Results per page"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List events, latest start date first"""
    events, total = EventService(db).get_events(
        firm_id=firm_id,
        member_id=member_id,
        mode=mode,
        next_step=next_step,
        page=page,
        per_page=per_page,
    )
    return EventListResponse(events=events, total=total)


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return EventService(db).get_event(event_id)


@router.put("/{event_id}", response_model=EventResponse)
@router.patch("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: int,
    event_data: EventUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update an event.

    - Location and date rules are checked against the updated event
    """
    return EventService(db).update_event(event_id, event_data)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    EventService(db).delete_event(event_id)
