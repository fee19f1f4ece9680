# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    profile, resume, analysis, job_recommendation, skill_gap, interview_question
)

# Explicit class exports for cleaner imports
from .profile import Profile
from .resume import Resume, AnalysisStatus
from .analysis import ResumeAnalysis
from .job_recommendation import JobRecommendation
from .skill_gap import SkillGap, SkillCategory
from .interview_question import InterviewQuestion, QuestionCategory, QuestionDifficulty

__all__ = [
    "Profile",
    "Resume",
    "AnalysisStatus",
    "ResumeAnalysis",
    "JobRecommendation",
    "SkillGap",
    "SkillCategory",
    "InterviewQuestion",
    "QuestionCategory",
    "QuestionDifficulty",
]
