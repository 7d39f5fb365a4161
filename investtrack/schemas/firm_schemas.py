from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from investtrack.models.firm import FirmType, LocationType
from investtrack.schemas.common_schemas import AddressSchema


class FirmCreateBase(BaseModel):
    """Fields shared by every firm variant"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)
    location_type: LocationType
    website: HttpUrl | None = None
    remark: str | None = Field(None, max_length=5000)
    comment: str | None = Field(None, max_length=5000)
    address: AddressSchema | None = None


class BrokerCreate(FirmCreateBase):
    """Schema for creating a broker firm"""

    firm_type: Literal["broker"] = "broker"
    sectors: list[str] = Field(..., min_length=1, description="At least one sector")


class InvestorCreate(FirmCreateBase):
    """Schema for creating an investor firm"""

    firm_type: Literal["investor"] = "investor"
    regional_focus: list[str] = Field(..., min_length=1, description="At least one region")
    fund_size_global: float | None = Field(None, ge=0)
    fund_size_indian: float | None = Field(None, ge=0)


class FirmUpdateBase(BaseModel):
    """Partial update; firm_type cannot change"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    location_type: LocationType | None = None
    website: HttpUrl | None = None
    remark: str | None = Field(None, max_length=5000)
    comment: str | None = Field(None, max_length=5000)
    address: AddressSchema | None = None
    is_active: bool | None = None


class BrokerUpdate(FirmUpdateBase):
    sectors: list[str] | None = Field(None, min_length=1)


class InvestorUpdate(FirmUpdateBase):
    regional_focus: list[str] | None = Field(None, min_length=1)
    fund_size_global: float | None = Field(None, ge=0)
    fund_size_indian: float | None = Field(None, ge=0)


class RemarkUpdate(BaseModel):
    remark: str = Field(..., max_length=5000)


class FundFactsheetResponse(BaseModel):
    model_config = {"from_attributes": True}

    file_id: int
    document_date: date


class FirmResponse(BaseModel):
    """
    Schema for firm response.

    Variant-specific fields are null for the other variant.
    """

    model_config = {"from_attributes": True}

    id: int
    firm_type: FirmType
    name: str
    location_type: LocationType
    website: str | None
    remark: str | None
    comment: str | None
    address: AddressSchema | None
    created_by_id: int
    is_active: bool
    member_ids: list[int]
    # Broker
    sectors: list[str] | None = None
    coverage_ids: list[int] | None = None
    # Investor
    regional_focus: list[str] | None = None
    fund_size_global: float | None = None
    fund_size_indian: float | None = None
    fund_factsheets: list[FundFactsheetResponse] | None = None
    created_at: datetime
    updated_at: datetime


class FirmListResponse(BaseModel):
    """Schema for a page of firms"""

    firms: list[FirmResponse]
    total: int
