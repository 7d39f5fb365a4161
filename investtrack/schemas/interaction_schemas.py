from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class InteractionCreate(BaseModel):
    """Schema for logging an interaction with a member"""

    model_config = ConfigDict(str_strip_whitespace=True)

    firm_id: int = Field(..., gt=0)
    member_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=1, max_length=10000)
    date_of_interaction: datetime


class InteractionUpdate(BaseModel):
    """Schema for updating an interaction; firm and member are fixed"""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str | None = Field(None, min_length=1, max_length=10000)
    date_of_interaction: datetime | None = None


class InteractionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    firm_id: int
    member_id: int
    content: str
    date_of_interaction: datetime
    created_at: datetime
    updated_at: datetime


class InteractionListResponse(BaseModel):
    interactions: list[InteractionResponse]
    total: int
