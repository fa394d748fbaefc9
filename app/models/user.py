"""User model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    """User model for authentication (job seekers, employers and admins)."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="job_seeker")
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    education = relationship("UserEducation", back_populates="user", cascade="all, delete-orphan")
    applications = relationship("JobApplication", back_populates="applicant")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
