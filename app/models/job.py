"""Job model."""

from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"
    __table_args__ = (Index("ix_jobs_status_posted_at", "status", "posted_at"),)

    company_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Job details
    location = Column(String(255))
    type = Column(String(20), nullable=False, default="full_time")  # full_time, part_time, contract, internship, remote
    salary_range = Column(String(100))
    status = Column(String(20), nullable=False, default="draft")  # draft, open, closed
    benefits = Column(String(512))

    # Requirements (consumed by eligibility gating and ATS prompt)
    education = Column(String(255))  # free text, e.g. "Bachelor's degree"
    experience_min = Column(Integer)  # years
    skills = Column(JSON, default=list)  # ["Python", "FastAPI", ...]
    tags = Column(JSON, default=list)
    category = Column(String(100))

    posted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    deadline = Column(Date)

    # Relationships
    company = relationship("User")
    applications = relationship("JobApplication", back_populates="job", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Job {self.title} ({self.company_id})>"
