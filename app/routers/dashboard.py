from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas.resume import DashboardResponse
from app.services.resume_insights import build_dashboard

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Latest completed analysis, its counts, and the ATS score trend."""
    return build_dashboard(db, user_id)
