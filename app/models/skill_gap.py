import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class SkillCategory(str, enum.Enum):
    technical = "technical"
    soft_skills = "soft_skills"
    tools_frameworks = "tools_frameworks"


class SkillGap(Base):
    __tablename__ = "skill_gaps"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    skill_name = Column(String, nullable=False)
    category = Column(SQLEnum(SkillCategory), nullable=False, default=SkillCategory.technical)
    importance = Column(String, default="medium")
    learning_resources = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    resume = relationship("Resume", back_populates="skill_gaps")
