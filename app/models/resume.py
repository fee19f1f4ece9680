import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class AnalysisStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


# One-directional per analysis attempt: pending -> processing -> completed | failed.
# pending -> failed covers failures raised before processing was recorded.
ALLOWED_TRANSITIONS = {
    AnalysisStatus.pending: {AnalysisStatus.processing, AnalysisStatus.failed},
    AnalysisStatus.processing: {AnalysisStatus.completed, AnalysisStatus.failed},
    AnalysisStatus.completed: set(),
    AnalysisStatus.failed: set(),
}


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, index=True, nullable=False)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    file_path = Column(String, nullable=True)  # storage key
    raw_text = Column(Text, nullable=True)
    status = Column(SQLEnum(AnalysisStatus), default=AnalysisStatus.pending, nullable=False, index=True)
    error_message = Column(Text, nullable=True)
    # Python-side default keeps sub-second ordering on SQLite
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    resume_analysis = relationship(
        "ResumeAnalysis", back_populates="resume", cascade="all, delete-orphan",
        order_by="ResumeAnalysis.created_at"
    )
    job_recommendations = relationship(
        "JobRecommendation", back_populates="resume", cascade="all, delete-orphan",
        order_by="JobRecommendation.match_percentage.desc()"
    )
    skill_gaps = relationship("SkillGap", back_populates="resume", cascade="all, delete-orphan")
    interview_questions = relationship("InterviewQuestion", back_populates="resume", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Resume {self.id} ({self.status.value if self.status else None})>"

    @property
    def analysis(self):
        """Only the first analysis row is consumed."""
        return self.resume_analysis[0] if self.resume_analysis else None
