"""Job schemas for API responses."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class JobBrief(BaseModel):
    """Job summary embedded in application responses."""

    id: int
    title: str
    location: Optional[str] = None
    type: Optional[str] = None
    company_id: int

    class Config:
        from_attributes = True


class JobDetailResponse(JobBrief):
    """Full job posting."""

    description: str
    salary_range: Optional[str] = None
    status: str
    benefits: Optional[str] = None
    education: Optional[str] = None
    experience_min: Optional[int] = None
    skills: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    posted_at: datetime
    deadline: Optional[date] = None


class JobListResponse(BaseModel):
    """Paginated job listing."""

    jobs: List[JobDetailResponse]
    total: int
    page: int
    page_size: int
