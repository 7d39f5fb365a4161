from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from investtrack.core.uploads import read_optional_upload
from investtrack.database import get_db
from investtrack.dependencies import require_admin
from investtrack.models.member import MemberType
from investtrack.models.user import User
from investtrack.schemas.common_schemas import MessageResponse, split_csv
from investtrack.schemas.member_schemas import (
    MemberListResponse,
    MemberMoveRequest,
    MemberResponse,
)
from investtrack.services.member_service import MemberService

router = APIRouter()


@router.get("", response_model=MemberListResponse)
def list_members(
    member_type: Optional[MemberType] = Query(None, description="broker or investor"),
    firm_id: Optional[int] = Query(None, description="Filter by current firm"),
    name: Optional[str] = Query(None, description="Filter by name (partial match)"),
    designation: Optional[str] = Query(None, description="Filter by designation (partial match)"),
    is_gift: Optional[bool] = Query(None),
    sectors: Optional[str] = Query(None, description="Comma-separated sectors (matches ANY)"),
    localities: Optional[str] = Query(
        None, description="Comma-separated address localities (matches ANY)"
    ),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(100, ge=1, le=1000, description="Results per page"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    List members with optional filters.

    - Results sorted by creation time (newest first)
    """
    members, total = MemberService(db).get_members(
        member_type=member_type,
        firm_id=firm_id,
        name=name,
        designation=designation,
        is_gift=is_gift,
        sectors=split_csv(sectors),
        localities=split_csv(localities),
        page=page,
        per_page=per_page,
    )
    return MemberListResponse(members=members, total=total)


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a member under a firm.

    - member_type must match the firm's type (broker firm -> broker member)
    - The firm must be active
    - Email and mobile number must be unique (409 otherwise)
    """
    return MemberService(db).create_member(payload)


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Get a member by ID with its firm history"""
    return MemberService(db).get_member(member_id)


@router.put("/{member_id}", response_model=MemberResponse)
@router.patch("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: int,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Update a member.

    - Only provided fields are updated (partial update)
    - firm_id and member_type change only through a move
    """
    return MemberService(db).update_member(member_id, payload)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a member.

    - Also deletes the member's interactions, events and business card files
    """
    MemberService(db).delete_member(member_id)


@router.put("/{member_id}/move", response_model=MemberResponse)
def move_member(
    member_id: int,
    move: MemberMoveRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Move a member to another firm.

    - The member is re-created with a new ID, as the variant of the target firm
    - overrides supplies fields the target variant needs (e.g. fund_size_indian)
    - Interactions, events and business cards follow the member
    - Returns 400 if the member is already in the target firm
    """
    return MemberService(db).move_member(member_id, move)


@router.put("/{member_id}/business-card", response_model=MemberResponse)
def replace_business_card(
    member_id: int,
    front: Optional[UploadFile] = File(None),
    back: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Upload the front and/or back of a member's business card.

    - A replaced card file is deleted
    - Images and office documents only (415 otherwise), at most MAX_UPLOAD_SIZE_MB (413)
    """
    front_payload = read_optional_upload(front)
    back_payload = read_optional_upload(back)
    return MemberService(db).replace_business_card(member_id, front_payload, back_payload)


@router.delete("/{member_id}/business-card", response_model=MessageResponse)
def delete_business_card(
    member_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete both business card files of a member"""
    MemberService(db).delete_business_card(member_id)
    return MessageResponse(message="Business card deleted")
