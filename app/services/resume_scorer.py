import json
import logging
from typing import Any, Dict, List, Optional

from app.core import prompts
from app.core.exceptions import AIResponseParseError
from app.models.interview_question import QuestionCategory, QuestionDifficulty
from app.models.skill_gap import SkillCategory
from app.schemas.analysis import (
    InterviewQuestionItem,
    ResumeProfile,
    ScoringResult,
    SkillGapItem,
)
from app.services.coercion import as_list, clamp_percentage, coerce_enum, coerce_text, coerce_text_list

logger = logging.getLogger(__name__)

DEFAULT_ATS_SCORE = 65
RESUME_EXCERPT_LENGTH = 4000

# Display bands for the ATS score. The score itself is whatever the model returned.
ATS_BANDS = (
    (80, "excellent", "Excellent Resume!", "Your resume is well-optimized for ATS systems."),
    (60, "good", "Good Resume", "Your resume is decent but could use some improvements."),
    (0, "needs_improvement", "Needs Improvement", "Consider updating your resume with the suggestions below."),
)


def ats_band(score: Optional[int]) -> Dict[str, str]:
    score = clamp_percentage(score)
    for floor, band, headline, summary in ATS_BANDS:
        if score >= floor:
            return {"band": band, "headline": headline, "summary": summary}


def normalize_skill_gaps(raw: Any) -> List[SkillGapItem]:
    gaps = []
    for item in as_list(raw):
        if not isinstance(item, dict):
            continue
        name = coerce_text(item.get("skillName") or item.get("skill_name")).strip()
        if not name:
            continue
        gaps.append(SkillGapItem(
            skill_name=name,
            category=coerce_enum(SkillCategory, item.get("category"), SkillCategory.technical),
            importance=str(item.get("importance") or "medium").lower(),
            learning_resources=coerce_text_list(
                item.get("learningResources") or item.get("learning_resources") or []
            ),
        ))
    return gaps


def normalize_interview_questions(raw: Any) -> List[InterviewQuestionItem]:
    questions = []
    for item in as_list(raw):
        if not isinstance(item, dict):
            continue
        question = coerce_text(item.get("question")).strip()
        if not question:
            continue
        questions.append(InterviewQuestionItem(
            job_role=coerce_text(item.get("jobRole") or item.get("job_role")) or "General",
            question=question,
            category=coerce_enum(QuestionCategory, item.get("category"), QuestionCategory.technical),
            difficulty=coerce_enum(QuestionDifficulty, item.get("difficulty"), QuestionDifficulty.intermediate),
            suggested_answer=coerce_text(item.get("suggestedAnswer") or item.get("suggested_answer")),
        ))
    return questions


def normalize_scoring(data: Dict[str, Any]) -> ScoringResult:
    raw_score = data.get("atsScore", data.get("ats_score"))
    return ScoringResult(
        ats_score=clamp_percentage(raw_score, DEFAULT_ATS_SCORE),
        strengths=as_list(data.get("strengths")),
        weaknesses=as_list(data.get("weaknesses")),
        missing_keywords=as_list(data.get("missingKeywords") or data.get("missing_keywords")),
        improvement_tips=as_list(data.get("improvementTips") or data.get("improvement_tips")),
        skill_gaps=normalize_skill_gaps(data.get("skillGaps") or data.get("skill_gaps")),
        interview_questions=normalize_interview_questions(
            data.get("interviewQuestions") or data.get("interview_questions")
        ),
    )


def score_resume(llm, profile: ResumeProfile, resume_text: str) -> ScoringResult:
    """Second LLM pass: ATS score, feedback, skill gaps and interview questions."""
    logger.info("Scoring resume and generating career guidance...")
    user_content = prompts.get_prompt(
        prompts.RESUME_SCORING_USER_TEMPLATE,
        profile_json=json.dumps(profile.model_dump(by_alias=True), indent=2, default=str),
        resume_excerpt=resume_text[:RESUME_EXCERPT_LENGTH],
    )
    data = llm.chat_json(prompts.RESUME_SCORING_SYSTEM, user_content, temperature=0.3)
    if not isinstance(data, dict):
        raise AIResponseParseError("Failed to parse analysis results")

    result = normalize_scoring(data)
    logger.info(
        f"Scoring complete: ats={result.ats_score}, gaps={len(result.skill_gaps)}, "
        f"questions={len(result.interview_questions)}"
    )
    return result
