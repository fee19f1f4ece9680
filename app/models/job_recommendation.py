import uuid
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class JobRecommendation(Base):
    __tablename__ = "job_recommendations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    job_title = Column(String, nullable=False)
    company_type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    match_percentage = Column(Integer, default=0)
    matched_skills = Column(JSON, default=list)
    required_skills = Column(JSON, default=list)
    job_description = Column(Text, nullable=True)
    salary_range = Column(String, nullable=True)
    apply_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    resume = relationship("Resume", back_populates="job_recommendations")
