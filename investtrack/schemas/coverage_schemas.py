from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from investtrack.models.coverage import Recommendation


class CoverageCreate(BaseModel):
    """Schema for creating a coverage entry under a broker"""

    model_config = ConfigDict(extra="forbid")

    tp: float = Field(..., gt=0, description="Target price")
    fiscal_year: int = Field(..., ge=1900, le=2200)
    quarter: int = Field(..., ge=1, le=4)
    recommendation: Recommendation
    coverage_date: datetime | None = None


class CoverageUpdate(BaseModel):
    """Schema for updating a coverage entry"""

    model_config = ConfigDict(extra="forbid")

    tp: float | None = Field(None, gt=0)
    fiscal_year: int | None = Field(None, ge=1900, le=2200)
    quarter: int | None = Field(None, ge=1, le=4)
    recommendation: Recommendation | None = None
    coverage_date: datetime | None = None


class CoverageResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    firm_id: int
    tp: float
    fiscal_year: int
    quarter: int
    recommendation: Recommendation
    coverage_date: datetime
    coverage_file_id: int | None
    created_at: datetime
    updated_at: datetime


class CoverageListResponse(BaseModel):
    coverages: list[CoverageResponse]
    total: int
