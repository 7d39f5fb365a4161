from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import require_admin
from investtrack.models.user import User
from investtrack.services.interaction_service import InteractionService
from investtrack.schemas.interaction_schemas import (
    InteractionCreate,
    InteractionUpdate,
    InteractionResponse,
    InteractionListResponse,
)

router = APIRouter()


@router.post("", response_model=InteractionResponse, status_code=status.HTTP_201_CREATED)
def create_interaction(
    interaction_data: InteractionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Log an interaction with a member.

    - member must currently belong to firm_id (400 otherwise)
    """
    return InteractionService(db).create_interaction(interaction_data)


@router.get("", response_model=InteractionListResponse)
def list_interactions(
    firm_id: Optional[int] = Query(None, description="Filter by firm ID"),
    member_id: Optional[int] = Query(None, description="Filter by member ID"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(100, ge=1, le=1000, description="Results per page"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List interactions, most recent first"""
    interactions, total = InteractionService(db).get_interactions(
        firm_id=firm_id, member_id=member_id, page=page, per_page=per_page
    )
    return InteractionListResponse(interactions=interactions, total=total)


@router.get("/{interaction_id}", response_model=InteractionResponse)
def get_interaction(
    interaction_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return InteractionService(db).get_interaction(interaction_id)


@router.put("/{interaction_id}", response_model=InteractionResponse)
@router.patch("/{interaction_id}", response_model=InteractionResponse)
def update_interaction(
    interaction_id: int,
    interaction_data: InteractionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Update content and/or date of an interaction"""
    return InteractionService(db).update_interaction(interaction_id, interaction_data)


@router.delete("/{interaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_interaction(
    interaction_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    InteractionService(db).delete_interaction(interaction_id)
