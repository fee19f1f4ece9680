import enum
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class QuestionCategory(str, enum.Enum):
    technical = "technical"
    hr = "hr"
    coding_scenario = "coding_scenario"


class QuestionDifficulty(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class InterviewQuestion(Base):
    __tablename__ = "interview_questions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    job_role = Column(String, nullable=False, default="General")
    question = Column(Text, nullable=False)
    category = Column(SQLEnum(QuestionCategory), nullable=False, default=QuestionCategory.technical)
    difficulty = Column(SQLEnum(QuestionDifficulty), nullable=False, default=QuestionDifficulty.intermediate)
    suggested_answer = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    resume = relationship("Resume", back_populates="interview_questions")
