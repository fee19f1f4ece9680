import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AIQuotaError, AIRateLimitError, InvalidStatusTransition
from app.models.analysis import ResumeAnalysis
from app.models.interview_question import InterviewQuestion
from app.models.resume import AnalysisStatus, Resume
from app.models.skill_gap import SkillGap
from app.schemas.analysis import ResumeProfile, ScoringResult
from app.services.entity_extractor import extract_entities
from app.services.job_matcher import JobMatcher, refresh_recommendations
from app.services.llm_gateway import LLMGateway
from app.services.resume_records import update_resume_status
from app.services.resume_scorer import score_resume
from app.services.scraper_client import ScraperClient
from app.services.storage import get_storage
from app.services.text_extractor import TextExtractor

logger = logging.getLogger(__name__)

JOB_SEARCH_SKILL_LIMIT = 10
GENERIC_FAILURE_MESSAGE = "Resume analysis failed. Please try again."


def failure_message(exc: Exception) -> str:
    """Only rate limiting and exhausted credits get their own wording."""
    if isinstance(exc, (AIRateLimitError, AIQuotaError)):
        return exc.message
    return GENERIC_FAILURE_MESSAGE


class ResumeAnalysisPipeline:
    """
    pending -> processing -> (extract text, extract entities, score, persist)
    -> completed, then a best-effort job search that never changes the status.
    """

    def __init__(
        self,
        db: Session,
        llm=None,
        storage=None,
        extractor: Optional[TextExtractor] = None,
        matcher: Optional[JobMatcher] = None,
    ):
        self.db = db
        self.llm = llm or LLMGateway()
        self.storage = storage or get_storage()
        self.extractor = extractor or TextExtractor(self.llm)
        self.matcher = matcher

    def run(self, resume_id: str, user_id: str) -> ResumeAnalysis:
        logger.info(f"Pipeline: starting analysis for resume {resume_id}")
        try:
            resume = update_resume_status(self.db, resume_id, AnalysisStatus.processing)
            resume_text = self._extract_text(resume)
            profile = extract_entities(self.llm, resume_text)
            scoring = score_resume(self.llm, profile, resume_text)
            analysis = self._persist(resume, user_id, profile, scoring, resume_text)
        except InvalidStatusTransition:
            # Another attempt owns this resume (or it already finished); leave it alone
            self.db.rollback()
            raise
        except Exception as e:
            logger.error(f"Pipeline: analysis failed for resume {resume_id}: {e}")
            self.db.rollback()
            self._mark_failed(resume_id, failure_message(e))
            raise

        self._match_jobs(resume_id, user_id, profile.all_skills())
        logger.info(f"Pipeline: analysis completed for resume {resume_id}")
        return analysis

    def _extract_text(self, resume: Resume) -> str:
        if not resume.file_path:
            logger.warning(f"Resume {resume.id} has no stored file")
            return self.extractor.extract(b"", resume.file_name)
        data = self.storage.download(resume.file_path)
        text = self.extractor.extract(data, resume.file_name)
        logger.info(f"Extracted text length: {len(text)}")
        return text

    def _persist(
        self,
        resume: Resume,
        user_id: str,
        profile: ResumeProfile,
        scoring: ScoringResult,
        resume_text: str,
    ) -> ResumeAnalysis:
        analysis = ResumeAnalysis(
            resume_id=resume.id,
            user_id=user_id,
            ats_score=scoring.ats_score,
            extracted_skills=profile.all_skills(),
            education=profile.education,
            experience=profile.experience,
            projects=profile.projects,
            certifications=profile.skills.certifications,
            strengths=scoring.strengths,
            weaknesses=scoring.weaknesses,
            missing_keywords=scoring.missing_keywords,
            improvement_tips=scoring.improvement_tips,
        )
        self.db.add(analysis)
        self.db.add_all(
            SkillGap(
                resume_id=resume.id,
                user_id=user_id,
                skill_name=gap.skill_name,
                category=gap.category,
                importance=gap.importance,
                learning_resources=gap.learning_resources,
            )
            for gap in scoring.skill_gaps
        )
        self.db.add_all(
            InterviewQuestion(
                resume_id=resume.id,
                user_id=user_id,
                job_role=q.job_role,
                question=q.question,
                category=q.category,
                difficulty=q.difficulty,
                suggested_answer=q.suggested_answer,
            )
            for q in scoring.interview_questions
        )
        # Rows and the completed status land in the same commit
        update_resume_status(self.db, resume.id, AnalysisStatus.completed, raw_text=resume_text)
        return analysis

    def _mark_failed(self, resume_id: str, message: str) -> None:
        try:
            update_resume_status(self.db, resume_id, AnalysisStatus.failed, error_message=message)
        except Exception as e:
            logger.error(f"Could not mark resume {resume_id} as failed: {e}")

    def _match_jobs(self, resume_id: str, user_id: str, skills) -> None:
        if self.matcher is None:
            if not settings.scraper.api_key:
                logger.info("Job scraping skipped: scraper API key not configured")
                return
            self.matcher = JobMatcher(ScraperClient(), self.llm)

        top_skills = skills[:JOB_SEARCH_SKILL_LIMIT]
        if not top_skills:
            logger.info(f"Job scraping skipped for resume {resume_id}: no skills extracted")
            return

        logger.info(f"Triggering job scraping with skills: {top_skills}")
        try:
            jobs = refresh_recommendations(self.db, self.matcher, resume_id, user_id, top_skills)
            logger.info(f"Job scraping completed: {len(jobs)} jobs found")
        except Exception as e:
            # The resume stays completed, just without job rows
            self.db.rollback()
            logger.error(f"Job scraping error for resume {resume_id}: {e}")


def build_pipeline(db: Session) -> ResumeAnalysisPipeline:
    return ResumeAnalysisPipeline(db)


def run_analysis_task(
    resume_id: str,
    user_id: str,
    session_factory: Callable[[], Session],
    pipeline_builder: Callable[[Session], ResumeAnalysisPipeline] = build_pipeline,
) -> None:
    """
    BackgroundTasks entry point. Runs after the response is sent, so it
    opens its own session instead of reusing the request's.
    """
    db = session_factory()
    try:
        pipeline_builder(db).run(resume_id, user_id)
    except Exception as e:
        logger.error(f"Critical error in analysis task for resume {resume_id}: {e}")
    finally:
        db.close()
