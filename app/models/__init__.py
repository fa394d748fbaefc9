"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from app.models.user import User

# Models with foreign keys to base models
from app.models.education import UserEducation
from app.models.job import Job
from app.models.notification import Notification

# Models with foreign keys to other models
from app.models.application import JobApplication

# Export all models
__all__ = [
    "User",
    "UserEducation",
    "Job",
    "Notification",
    "JobApplication",
]
