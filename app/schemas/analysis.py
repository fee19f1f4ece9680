"""
Shapes of the LLM's JSON answers.

The model is free-form: fields go missing, lists mix strings and objects,
numbers arrive as strings. These models accept all of that; the scorer and
the job matcher normalise it into something the tables can hold.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from app.models.skill_gap import SkillCategory
from app.models.interview_question import QuestionCategory, QuestionDifficulty
from app.services.coercion import coerce_text

# plain strings or objects, both occur
LooseItem = Any


class _Loose(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SkillBuckets(_Loose):
    technical: List[LooseItem] = []
    tools: List[LooseItem] = []
    soft_skills: List[LooseItem] = Field(default=[], alias="softSkills")
    certifications: List[LooseItem] = []


class ResumeProfile(_Loose):
    personal_info: Dict[str, Any] = Field(default={}, alias="personalInfo")
    professional_summary: Optional[str] = Field(default=None, alias="professionalSummary")
    skills: SkillBuckets = SkillBuckets()
    experience: List[LooseItem] = []
    education: List[LooseItem] = []
    projects: List[LooseItem] = []
    languages: List[LooseItem] = []
    raw_skills_list: List[LooseItem] = Field(default=[], alias="rawSkillsList")

    def all_skills(self) -> List[str]:
        """Every skill mentioned anywhere, first occurrence wins."""
        combined = [
            *self.raw_skills_list,
            *self.skills.technical,
            *self.skills.tools,
            *self.skills.soft_skills,
            *self.skills.certifications,
        ]
        seen = set()
        result = []
        for item in combined:
            text = coerce_text(item).strip()
            if text and text not in seen:
                seen.add(text)
                result.append(text)
        return result


class SkillGapItem(BaseModel):
    skill_name: str
    category: SkillCategory = SkillCategory.technical
    importance: str = "medium"
    learning_resources: List[str] = []


class InterviewQuestionItem(BaseModel):
    job_role: str = "General"
    question: str
    category: QuestionCategory = QuestionCategory.technical
    difficulty: QuestionDifficulty = QuestionDifficulty.intermediate
    suggested_answer: str = ""


class ScoringResult(BaseModel):
    ats_score: int = 65
    strengths: List[Any] = []
    weaknesses: List[Any] = []
    missing_keywords: List[Any] = []
    improvement_tips: List[Any] = []
    skill_gaps: List[SkillGapItem] = []
    interview_questions: List[InterviewQuestionItem] = []


class JobListing(BaseModel):
    """One job posting, from the scraper heuristics or the LLM re-rank."""
    job_title: str
    company: str = "Tech Company"
    company_type: str = "Company"
    location: str = ""
    job_description: str = ""
    apply_url: str = ""
    salary_range: str = "Competitive"
    matched_skills: List[str] = []
    required_skills: List[str] = []
    match_percentage: int = Field(default=0, ge=0, le=100)
