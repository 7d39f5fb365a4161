from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from investtrack.models.base import as_utc
from investtrack.models.event import EventMode, NextStep


class EventCreate(BaseModel):
    """
    Schema for creating an event.

    - location is required when mode is Physical
    - start_date must not be after end_date
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    firm_id: int = Field(..., gt=0)
    member_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    event_type: str = Field(..., min_length=1, max_length=100)
    mode: EventMode
    location: str | None = Field(None, max_length=255)
    start_date: datetime
    end_date: datetime
    internal_attendees: str | None = Field(None, max_length=2000)
    next_step: NextStep = NextStep.TBD
    is_invited: bool = False
    exchange_intimated: bool = False

    @model_validator(mode="after")
    def check_location_and_dates(self):
        if self.mode == EventMode.PHYSICAL and not self.location:
            raise ValueError("location is required for a Physical event")
        if as_utc(self.start_date) > as_utc(self.end_date):
            raise ValueError("Start date cannot be greater than end date")
        return self


class EventUpdate(BaseModel):
    """Partial update; cross-field rules are re-checked on the merged event"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    event_type: str | None = Field(None, min_length=1, max_length=100)
    mode: EventMode | None = None
    location: str | None = Field(None, max_length=255)
    start_date: datetime | None = None
    end_date: datetime | None = None
    internal_attendees: str | None = Field(None, max_length=2000)
    next_step: NextStep | None = None
    is_invited: bool | None = None
    exchange_intimated: bool | None = None


class EventResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    firm_id: int
    member_id: int
    name: str
    event_type: str
    mode: EventMode
    location: str | None
    start_date: datetime
    end_date: datetime
    internal_attendees: str | None
    next_step: NextStep
    is_invited: bool
    exchange_intimated: bool
    created_at: datetime
    updated_at: datetime


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
