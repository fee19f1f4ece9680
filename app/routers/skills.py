from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas.resume import SkillsOverviewResponse
from app.services.resume_insights import skills_overview

router = APIRouter()


@router.get("/resumes/{resume_id}/skills", response_model=SkillsOverviewResponse)
def get_skills(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Extracted skills as display text, plus skill gaps grouped by category."""
    return skills_overview(db, resume_id, user_id)
