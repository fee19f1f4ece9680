import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from app.core.exceptions import AppException
from app.core.limiter import limiter
from app.database import get_db
from app.dependencies import get_current_user_id, get_job_matcher
from app.models.resume import AnalysisStatus
from app.schemas.resume import JobRecommendationResponse, JobRefreshRequest
from app.services.analysis_pipeline import JOB_SEARCH_SKILL_LIMIT
from app.services.job_matcher import JobMatcher, refresh_recommendations
from app.services.resume_insights import extracted_skills
from app.services.resume_records import get_owned_resume

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resumes/{resume_id}/jobs")


@router.get("", response_model=List[JobRecommendationResponse])
def list_jobs(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Best match first. Empty while scraping is still running or when it found nothing."""
    return get_owned_resume(db, resume_id, user_id).job_recommendations


@router.post("/refresh", response_model=List[JobRecommendationResponse])
@limiter.limit("5/minute")
def refresh_jobs(
    request: Request,
    resume_id: str,
    body: Optional[JobRefreshRequest] = Body(default=None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    matcher: JobMatcher = Depends(get_job_matcher),
):
    """
    Re-run job matching. Uses the skills in the body when given, otherwise
    the resume's extracted skills (first ten).
    """
    resume = get_owned_resume(db, resume_id, user_id)
    skills = body.skills if body and body.skills else None
    if skills is None:
        if resume.status != AnalysisStatus.completed:
            raise AppException(
                "Resume analysis is not complete yet",
                status_code=409,
                error_code="ANALYSIS_NOT_READY",
            )
        skills = extracted_skills(resume)[:JOB_SEARCH_SKILL_LIMIT]

    try:
        return refresh_recommendations(db, matcher, resume.id, user_id, skills)
    except ValueError as e:
        raise AppException(str(e), status_code=400, error_code="NO_SKILLS")
