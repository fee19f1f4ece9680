from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user_id
from app.models.interview_question import QuestionCategory, QuestionDifficulty
from app.schemas.resume import InterviewQuestionResponse
from app.services.resume_insights import filter_questions

router = APIRouter()


@router.get("/resumes/{resume_id}/interview-questions", response_model=List[InterviewQuestionResponse])
def list_interview_questions(
    resume_id: str,
    category: Optional[QuestionCategory] = Query(default=None),
    difficulty: Optional[QuestionDifficulty] = Query(default=None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return filter_questions(db, resume_id, user_id, category=category, difficulty=difficulty)
