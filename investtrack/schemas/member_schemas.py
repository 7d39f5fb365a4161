from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from investtrack.models.member import MemberType
from investtrack.schemas.common_schemas import AddressSchema

COUNTRY_CODE_PATTERN = r"^[A-Za-z]{2}$"
PHONE_PATTERN = r"^\+?[0-9][0-9 ()-]{5,19}$"


class MemberCreateBase(BaseModel):
    """Fields shared by every member variant"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    firm_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    designation: str = Field(..., min_length=1, max_length=255)
    mobile_country_code: str | None = Field(None, pattern=COUNTRY_CODE_PATTERN)
    mobile_number: str | None = Field(None, pattern=PHONE_PATTERN)
    office_country_code: str | None = Field(None, pattern=COUNTRY_CODE_PATTERN)
    office_number: str | None = Field(None, pattern=PHONE_PATTERN)
    address: AddressSchema | None = None
    comment: str | None = Field(None, max_length=5000)
    is_gift: bool = False
    sectors: list[str] = Field(..., min_length=1, description="At least one sector")


class BrokerMemberCreate(MemberCreateBase):
    """Schema for creating a member of a broker firm"""

    member_type: Literal["broker"] = "broker"


class InvestorMemberCreate(MemberCreateBase):
    """Schema for creating a member of an investor firm"""

    member_type: Literal["investor"] = "investor"
    fund_size_global: float | None = Field(None, ge=0)
    fund_size_indian: float = Field(..., ge=0)
    regional_focus: list[str] = Field(..., min_length=1, description="At least one region")
    is_existing_investor: bool = False
    holding_size: float | None = Field(None, ge=0)
    last_holding_date: date | None = None

    @model_validator(mode="after")
    def holding_required_for_existing_investor(self):
        if self.is_existing_investor:
            missing = [
                name
                for name in ("holding_size", "last_holding_date")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(
                    f"{' and '.join(missing)} required for an existing investor"
                )
        return self


class MemberUpdateBase(BaseModel):
    """Partial update; member_type and firm_id only change through a move"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    designation: str | None = Field(None, min_length=1, max_length=255)
    mobile_country_code: str | None = Field(None, pattern=COUNTRY_CODE_PATTERN)
    mobile_number: str | None = Field(None, pattern=PHONE_PATTERN)
    office_country_code: str | None = Field(None, pattern=COUNTRY_CODE_PATTERN)
    office_number: str | None = Field(None, pattern=PHONE_PATTERN)
    address: AddressSchema | None = None
    comment: str | None = Field(None, max_length=5000)
    is_gift: bool | None = None
    sectors: list[str] | None = Field(None, min_length=1)


class BrokerMemberUpdate(MemberUpdateBase):
    pass


class InvestorMemberUpdate(MemberUpdateBase):
    fund_size_global: float | None = Field(None, ge=0)
    fund_size_indian: float | None = Field(None, ge=0)
    regional_focus: list[str] | None = Field(None, min_length=1)
    is_existing_investor: bool | None = None
    holding_size: float | None = Field(None, ge=0)
    last_holding_date: date | None = None


class MemberMoveRequest(BaseModel):
    """Move a member to another firm, optionally overriding fields on the new record"""

    firm_id: int = Field(..., gt=0)
    overrides: dict[str, Any] = Field(default_factory=dict)


class FirmHistoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    firm_id: int
    date_of_joining: datetime


class MemberResponse(BaseModel):
    """
    Schema for member response.

    Investor-only fields are null for broker members.
    """

    model_config = {"from_attributes": True}

    id: int
    member_type: MemberType
    firm_id: int
    name: str
    email: str
    designation: str
    mobile_country_code: str | None
    mobile_number: str | None
    office_country_code: str | None
    office_number: str | None
    address: AddressSchema | None
    comment: str | None
    is_gift: bool
    sectors: list[str] | None
    firm_history: list[FirmHistoryResponse]
    interaction_ids: list[int]
    business_card_front_id: int | None
    business_card_back_id: int | None
    # Investor
    fund_size_global: float | None = None
    fund_size_indian: float | None = None
    regional_focus: list[str] | None = None
    is_existing_investor: bool | None = None
    holding_size: float | None = None
    last_holding_date: date | None = None
    created_at: datetime
    updated_at: datetime


class MemberListResponse(BaseModel):
    """Schema for a page of members"""

    members: list[MemberResponse]
    total: int
