from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from investtrack.core.uploads import read_upload
from investtrack.database import get_db
from investtrack.dependencies import get_current_user, require_admin
from investtrack.models.firm import FirmType, LocationType
from investtrack.models.user import User
from investtrack.schemas.common_schemas import MessageResponse, split_csv
from investtrack.schemas.firm_schemas import (
    FirmListResponse,
    FirmResponse,
    FundFactsheetResponse,
    RemarkUpdate,
)
from investtrack.services.firm_service import FirmService

router = APIRouter()


@router.get("", response_model=FirmListResponse)
def list_firms(
    firm_type: Optional[FirmType] = Query(None, description="broker or investor"),
    name: Optional[str] = Query(None, description="Filter by name (partial match)"),
    location_type: Optional[LocationType] = Query(None, description="Domestic or Foreign"),
    sectors: Optional[str] = Query(None, description="Comma-separated sectors (matches ANY)"),
    regional_focus: Optional[str] = Query(
        None, description="Comma-separated regions (matches ANY)"
    ),
    localities: Optional[str] = Query(
        None, description="Comma-separated address localities (matches ANY)"
    ),
    is_active: Optional[bool] = Query(None, description="Active / deactivated firms"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(100, ge=1, le=1000, description="Results per page"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List firms with optional filters.

    - Deactivated firms are included unless is_active is given
    - Results sorted by firm type, then id
    """
    firms, total = FirmService(db).get_firms(
        firm_type=firm_type,
        name=name,
        location_type=location_type,
        sectors=split_csv(sectors),
        regional_focus=split_csv(regional_focus),
        localities=split_csv(localities),
        is_active=is_active,
        page=page,
        per_page=per_page,
    )
    return FirmListResponse(firms=firms, total=total)


@router.post("", response_model=FirmResponse, status_code=status.HTTP_201_CREATED)
def create_firm(
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a broker or investor firm.

    - firm_type selects the variant: broker requires sectors, investor requires regional_focus
    - Name must be unique across all firms (409 otherwise)
    - Requires admin
    """
    return FirmService(db).create_firm(payload, current_user)


@router.get("/{firm_id}", response_model=FirmResponse)
def get_firm(
    firm_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a firm by ID, including deactivated firms"""
    return FirmService(db).get_firm(firm_id)


@router.put("/{firm_id}", response_model=FirmResponse)
@router.patch("/{firm_id}", response_model=FirmResponse)
def update_firm(
    firm_id: int,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a firm.

    - Only provided fields are updated (partial update)
    - firm_type cannot be changed
    - Requires admin
    """
    return FirmService(db).update_firm(firm_id, payload)


@router.delete("/{firm_id}", response_model=FirmResponse)
def deactivate_firm(
    firm_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Deactivate a firm (soft delete).

    - Members, coverages and references are kept
    - Requires admin
    """
    return FirmService(db).deactivate_firm(firm_id)


@router.post("/{firm_id}/remark", response_model=FirmResponse)
def set_remark(
    firm_id: int,
    data: RemarkUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Set the remark of a firm"""
    return FirmService(db).set_remark(firm_id, data.remark)


@router.get("/{firm_id}/sheet", response_model=list[FundFactsheetResponse])
def list_factsheets(
    firm_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List fund factsheets of an investor firm"""
    return FirmService(db).get_factsheets(firm_id)


@router.post(
    "/{firm_id}/sheet",
    response_model=FundFactsheetResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_factsheet(
    firm_id: int,
    sheet: UploadFile = File(...),
    document_date: Optional[date] = Form(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Attach a fund factsheet to an investor firm.

    - Images and office documents only (415 otherwise), at most MAX_UPLOAD_SIZE_MB (413)
    - document_date defaults to today
    """
    payload = read_upload(sheet)
    return FirmService(db).add_factsheet(firm_id, payload, document_date)


@router.delete("/{firm_id}/sheet/{file_id}", response_model=MessageResponse)
def delete_factsheet(
    firm_id: int,
    file_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Remove a fund factsheet and delete its file"""
    FirmService(db).delete_factsheet(firm_id, file_id)
    return MessageResponse(message="Factsheet deleted")
