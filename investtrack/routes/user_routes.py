from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import get_current_user
from investtrack.models.user import User
from investtrack.schemas.auth_schemas import UserResponse, UserUpdate
from investtrack.services.auth_service import AuthService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_me(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update own name and/or avatar"""
    return AuthService(db).update_profile(current_user, data)
