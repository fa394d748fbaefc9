"""Job application model."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class JobApplication(Base):
    """Job application model."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "job_seeker_id", name="unique_job_seeker_application"),
        CheckConstraint("ats_score IS NULL OR (ats_score >= 0 AND ats_score <= 100)", name="ck_applications_ats_score_range"),
    )

    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job_seeker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Public links of uploaded documents
    resume_link = Column(String(512))
    cover_letter = Column(Text)

    # Storage keys, kept so the blobs can be removed later
    resume_path = Column(String(512))
    cover_letter_path = Column(String(512))

    # ATS
    ats_score = Column(Integer)  # 0-100, NULL when scoring was skipped or failed
    ats_feedback = Column(Text)

    # Status tracking
    status = Column(String(20), nullable=False, default="applied")  # applied, under_review, approved, rejected, withdrawn
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")

    def __repr__(self):
        return f"<JobApplication {self.job_seeker_id} -> {self.job_id} ({self.status})>"
