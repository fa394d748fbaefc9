"""Job endpoints - Browse open jobs."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.config import settings
from app.models.job import Job
from app.schemas.job import JobDetailResponse, JobListResponse
from app.utils.helpers import paginate_query

router = APIRouter()


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    category: Optional[str] = Query(None, description="Filter by category (exact, case-insensitive)"),
    location: Optional[str] = Query(None, description="Filter by location (e.g., 'Pune', 'Remote'; partial match)"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get paginated list of open jobs, newest first

    **Filters:**
    - `category`: job category
    - `location`: city name or 'Remote' (case-insensitive, partial match)
    """
    filters = [Job.status == "open"]
    if category:
        filters.append(func.lower(Job.category) == category.strip().lower())
    if location:
        filters.append(Job.location.ilike(f"%{location.strip()}%"))

    total = (await db.execute(select(func.count(Job.id)).where(*filters))).scalar_one()

    paging = paginate_query(page, size)
    result = await db.execute(
        select(Job)
        .where(*filters)
        .order_by(Job.posted_at.desc(), Job.id.desc())
        .offset(paging["offset"])
        .limit(paging["limit"])
    )
    jobs = result.scalars().all()

    return JobListResponse(
        jobs=[JobDetailResponse.model_validate(job) for job in jobs],
        total=total,
        page=paging["page"],
        page_size=paging["page_size"],
    )


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single job posting."""
    job = await db.get(Job, job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job
