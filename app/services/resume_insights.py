"""
Read-side views over a user's analysed resumes: dashboard summary, skills
overview, question filtering and side-by-side comparison.
"""
from collections import OrderedDict
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import AppException
from app.models.interview_question import InterviewQuestion, QuestionCategory, QuestionDifficulty
from app.models.resume import AnalysisStatus, Resume
from app.models.skill_gap import SkillCategory, SkillGap
from app.schemas.resume import (
    DashboardResponse,
    ResumeAnalysisResponse,
    ResumeComparisonResponse,
    ResumeComparisonSide,
    ResumeResponse,
    ScorePoint,
    SkillGapResponse,
    SkillsOverviewResponse,
)
from app.services.coercion import coerce_text_list
from app.services.resume_records import get_owned_resume, get_user_resumes


def _completed(resumes: List[Resume]) -> List[Resume]:
    return [r for r in resumes if r.status == AnalysisStatus.completed and r.analysis is not None]


def extracted_skills(resume: Resume) -> List[str]:
    return coerce_text_list(resume.analysis.extracted_skills) if resume.analysis else []


def group_skill_gaps(gaps: List[SkillGap]) -> Dict[str, List[SkillGapResponse]]:
    grouped: Dict[str, List[SkillGapResponse]] = OrderedDict((c.value, []) for c in SkillCategory)
    for gap in gaps:
        grouped[gap.category.value].append(SkillGapResponse.model_validate(gap))
    return grouped


def skills_overview(db: Session, resume_id: str, user_id: str) -> SkillsOverviewResponse:
    resume = get_owned_resume(db, resume_id, user_id)
    return SkillsOverviewResponse(
        resume_id=resume.id,
        extracted_skills=extracted_skills(resume),
        skill_gaps=group_skill_gaps(resume.skill_gaps),
    )


def filter_questions(
    db: Session,
    resume_id: str,
    user_id: str,
    category: Optional[QuestionCategory] = None,
    difficulty: Optional[QuestionDifficulty] = None,
) -> List[InterviewQuestion]:
    resume = get_owned_resume(db, resume_id, user_id)
    return [
        q for q in resume.interview_questions
        if (category is None or q.category == category)
        and (difficulty is None or q.difficulty == difficulty)
    ]


def build_dashboard(db: Session, user_id: str) -> DashboardResponse:
    resumes = get_user_resumes(db, user_id)
    completed = _completed(resumes)
    if not completed:
        return DashboardResponse(
            latest_resume=ResumeResponse.model_validate(resumes[0]) if resumes else None
        )

    latest = completed[0]
    # get_user_resumes is newest first; the trend reads oldest to newest
    trend = [
        ScorePoint(
            resume_id=r.id,
            file_name=r.file_name,
            ats_score=r.analysis.ats_score or 0,
            created_at=r.created_at,
        )
        for r in reversed(completed)
    ]
    return DashboardResponse(
        latest_resume=ResumeResponse.model_validate(latest),
        latest_analysis=ResumeAnalysisResponse.model_validate(latest.analysis),
        job_count=len(latest.job_recommendations),
        skill_count=len(extracted_skills(latest)),
        question_count=len(latest.interview_questions),
        skill_gap_count=len(latest.skill_gaps),
        score_trend=trend,
    )


def _comparison_side(resume: Resume) -> ResumeComparisonSide:
    return ResumeComparisonSide(
        resume_id=resume.id,
        file_name=resume.file_name,
        ats_score=resume.analysis.ats_score or 0,
        skill_count=len(extracted_skills(resume)),
        skill_gap_count=len(resume.skill_gaps),
        job_count=len(resume.job_recommendations),
        created_at=resume.created_at,
    )


def compare_resumes(db: Session, first_id: str, second_id: str, user_id: str) -> ResumeComparisonResponse:
    """Skill differences are case-insensitive and keep the wording of the resume they come from."""
    first = get_owned_resume(db, first_id, user_id)
    second = get_owned_resume(db, second_id, user_id)
    for resume in (first, second):
        if resume.status != AnalysisStatus.completed or resume.analysis is None:
            raise AppException(
                f"Resume {resume.id} has no completed analysis to compare",
                status_code=409,
                error_code="ANALYSIS_NOT_READY",
            )

    first_skills = extracted_skills(first)
    second_skills = extracted_skills(second)
    first_keys = {s.lower() for s in first_skills}
    second_keys = {s.lower() for s in second_skills}

    left = _comparison_side(first)
    right = _comparison_side(second)
    return ResumeComparisonResponse(
        first=left,
        second=right,
        ats_score_delta=right.ats_score - left.ats_score,
        skills_gained=[s for s in second_skills if s.lower() not in first_keys],
        skills_lost=[s for s in first_skills if s.lower() not in second_keys],
        common_skills=[s for s in first_skills if s.lower() in second_keys],
    )
