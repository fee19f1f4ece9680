"""
Generic persistence gateway: one endpoint, one action name per hand-written
query. Each handler checks only what it needs and returns plain JSON rows.
"""
import logging
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from app.core.exceptions import GatewayActionError, NotFoundError
from app.models.analysis import ResumeAnalysis
from app.models.interview_question import InterviewQuestion, QuestionCategory, QuestionDifficulty
from app.models.job_recommendation import JobRecommendation
from app.models.resume import AnalysisStatus, Resume
from app.models.skill_gap import SkillCategory, SkillGap
from app.schemas.resume import (
    InterviewQuestionResponse,
    JobRecommendationResponse,
    ProfileResponse,
    ResumeAnalysisResponse,
    ResumeDetailResponse,
    ResumeResponse,
    SkillGapResponse,
)
from app.services import profile_service, resume_records
from app.services.coercion import as_list, clamp_percentage
from app.services.profile_service import PROFILE_FIELDS

logger = logging.getLogger(__name__)

Handler = Callable[[Session, Dict[str, Any]], Any]


def _require(params: Dict[str, Any], *keys: str) -> None:
    missing = [k for k in keys if params.get(k) in (None, "")]
    if missing:
        raise GatewayActionError(f"Missing required params: {', '.join(missing)}")


def _records(params: Dict[str, Any]) -> List[Dict[str, Any]]:
    records = params.get("records")
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise GatewayActionError("'records' must be a list of objects")
    return records


def _enum(enum_cls, value: Any, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise GatewayActionError(f"Invalid {field} '{value}'. Allowed: {allowed}")


def _ensure_resumes_exist(db: Session, resume_ids) -> None:
    ids = set(resume_ids)
    found = {rid for (rid,) in db.query(Resume.id).filter(Resume.id.in_(ids)).all()}
    if ids - found:
        raise NotFoundError(f"Resume not found: {', '.join(sorted(ids - found))}")


def _dump(schema, rows) -> List[Dict[str, Any]]:
    return [schema.model_validate(r).model_dump(mode="json") for r in rows]


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


# ===== PROFILES =====

def upsert_profile(db: Session, params: Dict[str, Any]):
    _require(params, "user_id")
    fields = {k: params[k] for k in PROFILE_FIELDS if k in params}
    profile = profile_service.upsert_profile(db, params["user_id"], **fields)
    return _dump(ProfileResponse, [profile])


# ===== RESUMES =====

def create_resume(db: Session, params: Dict[str, Any]):
    _require(params, "user_id", "file_name", "file_url")
    resume = resume_records.create_resume(
        db, params["user_id"], params["file_name"], params["file_url"], params.get("file_path")
    )
    return _dump(ResumeResponse, [resume])


def update_resume_status(db: Session, params: Dict[str, Any]):
    _require(params, "id", "status")
    status = _enum(AnalysisStatus, params["status"], "status")
    resume = resume_records.update_resume_status(db, params["id"], status, raw_text=params.get("raw_text"))
    return _dump(ResumeResponse, [resume])


def get_user_resumes(db: Session, params: Dict[str, Any]):
    _require(params, "user_id")
    return _dump(ResumeDetailResponse, resume_records.get_user_resumes(db, params["user_id"]))


def get_resume_by_id(db: Session, params: Dict[str, Any]):
    _require(params, "id")
    resume = resume_records.get_resume_by_id(db, params["id"])
    if resume is None:
        return None
    return ResumeDetailResponse.model_validate(resume).model_dump(mode="json")


# ===== RESUME ANALYSIS =====

def save_analysis(db: Session, params: Dict[str, Any]):
    _require(params, "resume_id", "user_id")
    _ensure_resumes_exist(db, [params["resume_id"]])
    ats_score = params.get("ats_score")
    analysis = ResumeAnalysis(
        resume_id=params["resume_id"],
        user_id=params["user_id"],
        ats_score=None if ats_score is None else clamp_percentage(ats_score),
        extracted_skills=as_list(params.get("extracted_skills")),
        education=as_list(params.get("education")),
        experience=as_list(params.get("experience")),
        projects=as_list(params.get("projects")),
        certifications=as_list(params.get("certifications")),
        strengths=as_list(params.get("strengths")),
        weaknesses=as_list(params.get("weaknesses")),
        missing_keywords=as_list(params.get("missing_keywords")),
        improvement_tips=as_list(params.get("improvement_tips")),
    )
    db.add(analysis)
    _commit(db)
    db.refresh(analysis)
    return _dump(ResumeAnalysisResponse, [analysis])


# ===== JOB RECOMMENDATIONS =====

def save_job_recommendations(db: Session, params: Dict[str, Any]):
    records = _records(params)
    for record in records:
        _require(record, "resume_id", "user_id", "job_title")
    _ensure_resumes_exist(db, [r["resume_id"] for r in records])
    rows = [
        JobRecommendation(
            resume_id=r["resume_id"],
            user_id=r["user_id"],
            job_title=r["job_title"],
            company_type=r.get("company_type"),
            location=r.get("location"),
            match_percentage=clamp_percentage(r.get("match_percentage")),
            matched_skills=as_list(r.get("matched_skills")),
            required_skills=as_list(r.get("required_skills")),
            job_description=r.get("job_description"),
            salary_range=r.get("salary_range"),
            apply_url=r.get("apply_url") or "",
        )
        for r in records
    ]
    db.add_all(rows)
    _commit(db)
    return _dump(JobRecommendationResponse, rows)


def delete_job_recommendations(db: Session, params: Dict[str, Any]):
    _require(params, "resume_id", "user_id")
    deleted = db.query(JobRecommendation).filter(
        JobRecommendation.resume_id == params["resume_id"],
        JobRecommendation.user_id == params["user_id"],
    ).delete(synchronize_session=False)
    _commit(db)
    return {"deleted": True, "count": deleted}


# ===== SKILL GAPS =====

def save_skill_gaps(db: Session, params: Dict[str, Any]):
    records = _records(params)
    for record in records:
        _require(record, "resume_id", "user_id", "skill_name", "category")
    _ensure_resumes_exist(db, [r["resume_id"] for r in records])
    rows = [
        SkillGap(
            resume_id=r["resume_id"],
            user_id=r["user_id"],
            skill_name=r["skill_name"],
            category=_enum(SkillCategory, r["category"], "category"),
            importance=r.get("importance"),
            learning_resources=as_list(r.get("learning_resources")),
        )
        for r in records
    ]
    db.add_all(rows)
    _commit(db)
    return _dump(SkillGapResponse, rows)


# ===== INTERVIEW QUESTIONS =====

def save_interview_questions(db: Session, params: Dict[str, Any]):
    records = _records(params)
    for record in records:
        _require(record, "resume_id", "user_id", "job_role", "question", "category", "difficulty")
    _ensure_resumes_exist(db, [r["resume_id"] for r in records])
    rows = [
        InterviewQuestion(
            resume_id=r["resume_id"],
            user_id=r["user_id"],
            job_role=r["job_role"],
            question=r["question"],
            category=_enum(QuestionCategory, r["category"], "category"),
            difficulty=_enum(QuestionDifficulty, r["difficulty"], "difficulty"),
            suggested_answer=r.get("suggested_answer"),
        )
        for r in records
    ]
    db.add_all(rows)
    _commit(db)
    return _dump(InterviewQuestionResponse, rows)


# Registry of gateway actions
ACTION_HANDLERS: Dict[str, Handler] = {
    "upsert_profile": upsert_profile,
    "create_resume": create_resume,
    "update_resume_status": update_resume_status,
    "get_user_resumes": get_user_resumes,
    "get_resume_by_id": get_resume_by_id,
    "save_analysis": save_analysis,
    "save_job_recommendations": save_job_recommendations,
    "delete_job_recommendations": delete_job_recommendations,
    "save_skill_gaps": save_skill_gaps,
    "save_interview_questions": save_interview_questions,
}


def dispatch(db: Session, action: str, params: Dict[str, Any]) -> Any:
    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        raise GatewayActionError(f"Unknown action: {action}", error_code="UNKNOWN_ACTION")
    logger.info(f"Gateway action: {action}")
    return handler(db, params or {})
