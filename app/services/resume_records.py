import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import InvalidStatusTransition, NotFoundError
from app.models.resume import ALLOWED_TRANSITIONS, AnalysisStatus, Resume

logger = logging.getLogger(__name__)

RAW_TEXT_LIMIT = 5000

# The related-row fan-out: one SELECT ... IN per child table
_ENRICHED = (
    selectinload(Resume.resume_analysis),
    selectinload(Resume.job_recommendations),
    selectinload(Resume.skill_gaps),
    selectinload(Resume.interview_questions),
)


def create_resume(db: Session, user_id: str, file_name: str, file_url: str, file_path: Optional[str] = None) -> Resume:
    resume = Resume(
        user_id=user_id,
        file_name=file_name,
        file_url=file_url,
        file_path=file_path,
        status=AnalysisStatus.pending,
    )
    db.add(resume)
    try:
        db.commit()
        db.refresh(resume)
    except Exception:
        db.rollback()
        raise
    logger.info(f"Created resume {resume.id} for user {user_id}")
    return resume


def update_resume_status(
    db: Session,
    resume_id: str,
    status: Union[AnalysisStatus, str],
    raw_text: Optional[str] = None,
    error_message: Optional[str] = None,
) -> Resume:
    status = AnalysisStatus(status)
    resume = db.get(Resume, resume_id)
    if resume is None:
        raise NotFoundError("Resume not found")

    if status != resume.status and status not in ALLOWED_TRANSITIONS[resume.status]:
        raise InvalidStatusTransition(resume.status.value, status.value)

    resume.status = status
    if raw_text:
        resume.raw_text = raw_text[:RAW_TEXT_LIMIT]
    if error_message is not None:
        resume.error_message = error_message
    try:
        db.commit()
        db.refresh(resume)
    except Exception:
        db.rollback()
        raise
    logger.info(f"Resume {resume_id} status -> {status.value}")
    return resume


def get_user_resumes(db: Session, user_id: str) -> List[Resume]:
    return (
        db.query(Resume)
        .options(*_ENRICHED)
        .filter(Resume.user_id == user_id)
        .order_by(Resume.created_at.desc())
        .all()
    )


def get_resume_by_id(db: Session, resume_id: str, user_id: Optional[str] = None) -> Optional[Resume]:
    query = db.query(Resume).options(*_ENRICHED).filter(Resume.id == resume_id)
    if user_id is not None:
        query = query.filter(Resume.user_id == user_id)
    return query.first()


def get_owned_resume(db: Session, resume_id: str, user_id: str) -> Resume:
    resume = get_resume_by_id(db, resume_id, user_id)
    if resume is None:
        raise NotFoundError("Resume not found")
    return resume


def delete_resume(db: Session, resume_id: str, user_id: str, storage=None) -> None:
    resume = get_owned_resume(db, resume_id, user_id)
    file_path = resume.file_path
    db.delete(resume)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    if storage is not None and file_path:
        try:
            storage.delete(file_path)
        except Exception as e:
            logger.warning(f"Resume {resume_id} deleted but its file could not be removed: {e}")
