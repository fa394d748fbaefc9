"""Job application schemas."""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.job import JobBrief


class ApplicationResponse(BaseModel):
    """Public fields of a submitted application."""

    id: int
    job_id: int
    status: str
    ats_score: Optional[int] = Field(None, ge=0, le=100)
    ats_feedback: Optional[str] = None
    applied_at: datetime
    resume_link: Optional[str] = None
    cover_letter: Optional[str] = None

    class Config:
        from_attributes = True


class ApplicationWithJobResponse(ApplicationResponse):
    job: Optional[JobBrief] = None


class ApplicationEnvelope(BaseModel):
    success: bool = True
    application: ApplicationResponse


class ApplicationDetailEnvelope(BaseModel):
    success: bool = True
    application: ApplicationWithJobResponse


class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: List[ApplicationWithJobResponse]
    total: int


class StatusUpdateRequest(BaseModel):
    status: Literal["applied", "under_review", "approved", "rejected", "withdrawn"]


class StatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    application: ApplicationWithJobResponse


class ApplicationStatsResponse(BaseModel):
    success: bool = True
    stats: Dict[str, int]


class CandidateEducation(BaseModel):
    school: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None

    class Config:
        from_attributes = True


class CandidateBrief(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    education: List[CandidateEducation] = Field(default_factory=list)

    class Config:
        from_attributes = True


class CandidateApplicationResponse(ApplicationWithJobResponse):
    job_seeker_id: int
    applicant: CandidateBrief


class CompanyCandidatesResponse(BaseModel):
    success: bool = True
    applications: List[CandidateApplicationResponse]
    total: int
