from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Optional, Any, Dict
from datetime import datetime

from app.models.resume import AnalysisStatus
from app.models.skill_gap import SkillCategory
from app.models.interview_question import QuestionCategory, QuestionDifficulty
from app.services.resume_scorer import ats_band as score_band

# --- PROFILE SCHEMAS ---

class ProfileUpdate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    email: Optional[str]
    full_name: Optional[str]
    avatar_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

# --- ANALYSIS SCHEMAS ---

class ResumeAnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resume_id: str
    user_id: str
    ats_score: Optional[int]
    extracted_skills: List[Any] = []
    education: List[Any] = []
    experience: List[Any] = []
    projects: List[Any] = []
    certifications: List[Any] = []
    strengths: List[Any] = []
    weaknesses: List[Any] = []
    missing_keywords: List[Any] = []
    improvement_tips: List[Any] = []
    created_at: Optional[datetime]

    @computed_field
    @property
    def ats_band(self) -> Dict[str, str]:
        return score_band(self.ats_score)

class JobRecommendationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resume_id: str
    user_id: str
    job_title: str
    company_type: Optional[str]
    location: Optional[str]
    match_percentage: int = Field(ge=0, le=100)
    matched_skills: List[Any] = []
    required_skills: List[Any] = []
    job_description: Optional[str]
    salary_range: Optional[str]
    apply_url: Optional[str]
    created_at: Optional[datetime]

class SkillGapResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resume_id: str
    user_id: str
    skill_name: str
    category: SkillCategory
    importance: Optional[str]
    learning_resources: List[Any] = []
    created_at: Optional[datetime]

class InterviewQuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resume_id: str
    user_id: str
    job_role: str
    question: str
    category: QuestionCategory
    difficulty: QuestionDifficulty
    suggested_answer: Optional[str]
    created_at: Optional[datetime]

# --- RESUME SCHEMAS ---

class ResumeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_name: str
    file_url: str
    status: AnalysisStatus
    error_message: Optional[str] = None
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

class ResumeDetailResponse(ResumeResponse):
    raw_text: Optional[str] = None
    resume_analysis: List[ResumeAnalysisResponse] = []
    job_recommendations: List[JobRecommendationResponse] = []
    skill_gaps: List[SkillGapResponse] = []
    interview_questions: List[InterviewQuestionResponse] = []

class ResumeUploadResponse(BaseModel):
    resume: ResumeResponse
    message: str = "Resume uploaded successfully. Analysis pending."

class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int

# --- JOB SCHEMAS ---

class JobRefreshRequest(BaseModel):
    skills: Optional[List[str]] = None

# --- READ VIEWS ---

class SkillsOverviewResponse(BaseModel):
    resume_id: str
    extracted_skills: List[str]
    skill_gaps: Dict[str, List[SkillGapResponse]]

class ScorePoint(BaseModel):
    resume_id: str
    file_name: str
    ats_score: int
    created_at: Optional[datetime]

class DashboardResponse(BaseModel):
    latest_resume: Optional[ResumeResponse] = None
    latest_analysis: Optional[ResumeAnalysisResponse] = None
    job_count: int = 0
    skill_count: int = 0
    question_count: int = 0
    skill_gap_count: int = 0
    score_trend: List[ScorePoint] = []

class ResumeComparisonSide(BaseModel):
    resume_id: str
    file_name: str
    ats_score: int
    skill_count: int
    skill_gap_count: int
    job_count: int
    created_at: Optional[datetime]

class ResumeComparisonResponse(BaseModel):
    first: ResumeComparisonSide
    second: ResumeComparisonSide
    ats_score_delta: int
    skills_gained: List[str]
    skills_lost: List[str]
    common_skills: List[str]

# --- GATEWAY SCHEMAS ---

class GatewayRequest(BaseModel):
    action: str
    params: Dict[str, Any] = {}

class GatewayResponse(BaseModel):
    success: bool = True
    data: Any = None
