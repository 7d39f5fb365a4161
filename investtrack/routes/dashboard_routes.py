from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import get_current_user
from investtrack.models.user import User
from investtrack.schemas.dashboard_schemas import DashboardResponse
from investtrack.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Totals and top-10 breakdowns.

    - Broker and investor firms by location type
    - Top coverages by target price
    - Investor members by country and by regional focus
    """
    return DashboardService(db).get_dashboard()
