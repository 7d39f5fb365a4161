from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from investtrack.core.uploads import read_optional_upload
from investtrack.database import get_db
from investtrack.dependencies import require_admin
from investtrack.models.user import User
from investtrack.schemas.common_schemas import MessageResponse
from investtrack.schemas.coverage_schemas import CoverageListResponse, CoverageResponse
from investtrack.services.coverage_service import CoverageService

router = APIRouter()


@router.get("/{broker_id}", response_model=CoverageListResponse)
def list_coverages(
    broker_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List the coverages of a broker, latest period first"""
    coverages = CoverageService(db).get_coverages(broker_id)
    return CoverageListResponse(coverages=coverages, total=len(coverages))


@router.post("/{broker_id}", response_model=CoverageResponse, status_code=status.HTTP_201_CREATED)
def create_coverage(
    broker_id: int,
    tp: float = Form(...),
    fiscal_year: int = Form(...),
    quarter: int = Form(...),
    recommendation: str = Form(...),
    coverage_date: Optional[datetime] = Form(None),
    coverage: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a coverage under a broker (multipart form).

    - One coverage per broker per fiscal year and quarter (409 otherwise)
    - Investor firms cannot have coverages (400)
    - Optional `coverage` document file
    """
    payload = {
        "tp": tp,
        "fiscal_year": fiscal_year,
        "quarter": quarter,
        "recommendation": recommendation,
    }
    if coverage_date is not None:
        payload["coverage_date"] = coverage_date

    document = read_optional_upload(coverage)
    return CoverageService(db).create_coverage(broker_id, payload, document)


@router.get("/{broker_id}/{coverage_id}", response_model=CoverageResponse)
def get_coverage(
    broker_id: int,
    coverage_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Get a coverage of a broker"""
    return CoverageService(db).get_coverage(broker_id, coverage_id)


@router.put("/{broker_id}/{coverage_id}", response_model=CoverageResponse)
def update_coverage(
    broker_id: int,
    coverage_id: int,
    tp: Optional[float] = Form(None),
    fiscal_year: Optional[int] = Form(None),
    quarter: Optional[int] = Form(None),
    recommendation: Optional[str] = Form(None),
    coverage_date: Optional[datetime] = Form(None),
    coverage: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a coverage (multipart form).

    - Only provided fields are updated
    - A new `coverage` file replaces and deletes the previous one
    """
    submitted = {
        "tp": tp,
        "fiscal_year": fiscal_year,
        "quarter": quarter,
        "recommendation": recommendation,
        "coverage_date": coverage_date,
    }
    payload = {field: value for field, value in submitted.items() if value is not None}

    document = read_optional_upload(coverage)
    return CoverageService(db).update_coverage(broker_id, coverage_id, payload, document)


@router.delete("/{broker_id}/{coverage_id}", response_model=MessageResponse)
def delete_coverage(
    broker_id: int,
    coverage_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a coverage and its document"""
    CoverageService(db).delete_coverage(broker_id, coverage_id)
    return MessageResponse(message="Coverage deleted")
