"""Job application endpoints - Apply, track and review applications."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.api.deps import Role, get_application_service, get_current_user, require_role
from app.config import settings
from app.models.user import User
from app.schemas.application import (
    ApplicationDetailEnvelope,
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationStatsResponse,
    CompanyCandidatesResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.services.application_service import ApplicationService, DocumentKind, UploadedDocument

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _read_document(upload: Optional[UploadFile], kind: DocumentKind) -> Optional[UploadedDocument]:
    """Read at most one byte past the size cap so oversized files are rejected without buffering them."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read(settings.MAX_UPLOAD_SIZE + 1)
    return UploadedDocument(
        kind=kind,
        filename=upload.filename,
        content_type=upload.content_type or "",
        content=content,
    )


@router.post("/apply", response_model=ApplicationEnvelope, status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    coverLetter: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_role(Role.JOB_SEEKER)),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Apply to a job with a resume and/or cover letter

    - Files: PDF, DOC, DOCX or TXT, up to 5MB each
    - Education requirement of the job is checked against your education records
    - The application is scored by the ATS; scoring problems never block the application
    """
    application = await service.submit(
        applicant_id=current_user.id,
        job_id=job_id,
        resume=await _read_document(resume, DocumentKind.RESUME),
        cover_letter=await _read_document(coverLetter, DocumentKind.COVER_LETTER),
    )
    return ApplicationEnvelope(application=application)


@router.get("/my-applications", response_model=ApplicationListResponse)
async def get_my_applications(
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Applications of the current user, newest first."""
    applications = await service.list_for_applicant(current_user.id)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.get("/stats", response_model=ApplicationStatsResponse)
async def get_application_stats(
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Per-status counts of the current user's applications."""
    return ApplicationStatsResponse(stats=await service.stats_for_applicant(current_user.id))


@router.get("/company-candidates/{company_id}", response_model=CompanyCandidatesResponse)
async def get_company_candidates(
    company_id: int,
    current_user: User = Depends(require_role(Role.EMPLOYER)),
    service: ApplicationService = Depends(get_application_service),
):
    """Applicants to the company's jobs with their ATS results, newest first."""
    applications = await service.company_candidates(company_id, current_user)
    return CompanyCandidatesResponse(applications=applications, total=len(applications))


@router.get("/{application_id}", response_model=ApplicationDetailEnvelope)
async def get_application(
    application_id: int,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    application = await service.get_for_applicant(application_id, current_user.id)
    return ApplicationDetailEnvelope(application=application)


@router.patch("/{application_id}/withdraw", response_model=StatusUpdateResponse)
async def withdraw_application(
    application_id: int,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Withdraw an application that is still applied or under review."""
    application = await service.withdraw(application_id, current_user.id)
    return StatusUpdateResponse(message="Application withdrawn successfully", application=application)


@router.put("/{application_id}/status", response_model=StatusUpdateResponse)
async def update_application_status(
    application_id: int,
    request: StatusUpdateRequest,
    current_user: User = Depends(require_role(Role.EMPLOYER)),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Move an application forward (employer owning the job, or admin)

    applied -> under_review | withdrawn, under_review -> approved | rejected | withdrawn
    """
    application = await service.update_status(application_id, request.status, current_user)
    return StatusUpdateResponse(message="Application status updated", application=application)
