"""
Job application service

Submission runs as a saga over two systems that share no transaction:
documents are uploaded to object storage, then the application row is
committed. Every upload registers a compensating delete that runs when
anything after it fails, so a committed row is the only thing that ever
references an uploaded blob.

Also hosts the lifecycle operations on existing applications (listing,
withdrawal, employer status changes, stats).
"""
import asyncio
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import sentry_sdk
import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    ApplicationError,
    DuplicateApplication,
    InvalidStatusTransition,
    NotEligible,
    NotFound,
    PermissionDenied,
    PersistenceError,
    ValidationFailed,
)
from app.core.security import Role, has_role
from app.models.application import JobApplication
from app.models.education import UserEducation
from app.models.job import Job
from app.models.user import User
from app.services.ats_scorer import AtsScorer
from app.services.file_storage_service import FileStorageGateway, build_storage_path, get_file_storage
from app.services.notification_service import NotificationService
from app.services.qualification_matcher import QualificationMatcher, get_qualification_matcher
from app.services.resume_text_extractor import extract_text
from app.utils.constants import (
    APPLICATION_STATUSES,
    APPLICATION_STATUS_TRANSITIONS,
    STATUS_NOTIFICATION_MESSAGES,
    WITHDRAWABLE_STATUSES,
)
from app.utils.validators import parse_positive_id, validate_mime_type

logger = structlog.get_logger(__name__)


class SubmissionStage(str, Enum):
    VALIDATING = "validating"
    CHECKING_DUPLICATE = "checking_duplicate"
    UPLOADING = "uploading"
    EXTRACTING = "extracting"
    SCORING = "scoring"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    FAILED = "failed"


class DocumentKind(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover_letter"

    @property
    def label(self) -> str:
        return "Resume" if self is DocumentKind.RESUME else "Cover Letter"

    @property
    def bucket(self) -> str:
        return settings.BUCKET_RESUMES if self is DocumentKind.RESUME else settings.BUCKET_COVER_LETTERS


@dataclass
class UploadedDocument:
    """A file part received with the submission."""

    kind: DocumentKind
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class StoredDocument:
    document: UploadedDocument
    bucket: str
    path: str
    url: str


def validate_document(document: Optional[UploadedDocument]) -> None:
    """Type and size rules for an optional upload. Raises ValidationFailed."""
    if document is None:
        return
    if not validate_mime_type(document.content_type, settings.ALLOWED_UPLOAD_MIME_TYPES):
        raise ValidationFailed(
            f"Invalid {document.kind.label} file type. Only PDF, DOC, DOCX, and TXT files are allowed."
        )
    if document.size > settings.MAX_UPLOAD_SIZE:
        max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationFailed(f"{document.kind.label} file is too large. Maximum size is {max_mb}MB.")


class ApplicationService:
    """Application submission and lifecycle"""

    def __init__(
        self,
        db: AsyncSession,
        storage: Optional[FileStorageGateway] = None,
        scorer: Optional[AtsScorer] = None,
        matcher: Optional[QualificationMatcher] = None,
        extractor: Callable[[bytes, str, str], str] = extract_text,
    ):
        self.db = db
        self._storage = storage
        self._scorer = scorer
        self.matcher = matcher or get_qualification_matcher()
        self.extractor = extractor

    @property
    def storage(self) -> FileStorageGateway:
        if self._storage is None:
            self._storage = get_file_storage()
        return self._storage

    @property
    def scorer(self) -> AtsScorer:
        if self._scorer is None:
            self._scorer = AtsScorer()
        return self._scorer

    # ==================== Submission ====================

    async def submit(
        self,
        applicant_id: int,
        job_id,
        resume: Optional[UploadedDocument] = None,
        cover_letter: Optional[UploadedDocument] = None,
    ) -> JobApplication:
        """
        Apply ``applicant_id`` to ``job_id`` with up to two documents.

        Raises:
            ValidationFailed: bad job id, no documents, bad type or size (400)
            NotFound: job does not exist (404)
            NotEligible: education requirement not met (403)
            DuplicateApplication: already applied, including a lost race (400)
            StorageError: upload failure (500)
            PersistenceError: the row could not be saved (500)
            ApplicationError: any other failure after validation (500)
        """
        log = logger.bind(applicant_id=applicant_id, job_id=job_id)
        stage = SubmissionStage.VALIDATING

        job_pk = parse_positive_id(job_id)
        if job_pk is None:
            raise ValidationFailed("Invalid job ID format")
        validate_document(resume)
        validate_document(cover_letter)
        documents = [d for d in (resume, cover_letter) if d is not None]
        if not documents:
            raise ValidationFailed("At least one file (resume or cover letter) is required")

        job = await self.db.get(Job, job_pk)
        if job is None:
            raise NotFound("Job not found")

        if job.education:
            await self._check_eligibility(applicant_id, job)

        stored: List[StoredDocument] = []
        try:
            stage = SubmissionStage.CHECKING_DUPLICATE
            if await self._find_existing(job_pk, applicant_id) is not None:
                raise DuplicateApplication()

            stage = SubmissionStage.UPLOADING
            for document in documents:
                stored.append(await self._upload(document, applicant_id, job_pk))

            stage = SubmissionStage.EXTRACTING
            candidate_text = await self._candidate_text(documents)

            stage = SubmissionStage.SCORING
            result = await self.scorer.score(candidate_text, job)

            stage = SubmissionStage.PERSISTING
            by_kind = {s.document.kind: s for s in stored}
            resume_stored = by_kind.get(DocumentKind.RESUME)
            cover_stored = by_kind.get(DocumentKind.COVER_LETTER)
            application = JobApplication(
                job_id=job_pk,
                job_seeker_id=applicant_id,
                resume_link=resume_stored.url if resume_stored else None,
                resume_path=resume_stored.path if resume_stored else None,
                cover_letter=cover_stored.url if cover_stored else None,
                cover_letter_path=cover_stored.path if cover_stored else None,
                ats_score=result.score,
                ats_feedback=result.feedback,
                status="applied",
            )
            self.db.add(application)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self._abort(stored, stage, log)
            if await self._find_existing(job_pk, applicant_id) is not None:
                log.info("application_duplicate_on_commit")
                raise DuplicateApplication() from e
            sentry_sdk.capture_exception(e)
            raise PersistenceError(str(e) if settings.DEBUG else None) from e
        except ApplicationError:
            await self._abort(stored, stage, log)
            raise
        except Exception as e:
            await self._abort(stored, stage, log)
            log.exception("application_submit_failed", stage=stage.value)
            sentry_sdk.capture_exception(e)
            raise ApplicationError(str(e) if settings.DEBUG else None) from e
        except asyncio.CancelledError:
            await asyncio.shield(self._abort(stored, stage, log))
            raise

        log.info(
            "application_submitted",
            stage=SubmissionStage.COMMITTED.value,
            application_id=application.id,
            ats_score=application.ats_score,
        )
        return application

    async def _check_eligibility(self, applicant_id: int, job: Job) -> None:
        result = await self.db.execute(
            select(UserEducation.degree)
            .where(UserEducation.user_id == applicant_id)
            .order_by(UserEducation.id.desc())
        )
        degrees = list(result.scalars().all())
        eligibility = self.matcher.check_eligibility(job.education, degrees)
        if not eligibility.eligible:
            logger.info("application_not_eligible", applicant_id=applicant_id, job_id=job.id)
            raise NotEligible(eligibility.message)

    async def _find_existing(self, job_id: int, applicant_id: int) -> Optional[JobApplication]:
        result = await self.db.execute(
            select(JobApplication).where(
                JobApplication.job_id == job_id,
                JobApplication.job_seeker_id == applicant_id,
            )
        )
        return result.scalars().first()

    async def _upload(self, document: UploadedDocument, applicant_id: int, job_id: int) -> StoredDocument:
        bucket = document.kind.bucket
        path = build_storage_path(applicant_id, job_id, document.filename)
        url = await self.storage.upload(document.content, document.content_type, path, bucket=bucket)
        return StoredDocument(document=document, bucket=bucket, path=path, url=url)

    async def _candidate_text(self, documents: List[UploadedDocument]) -> str:
        """Resume text, then the cover letter under a heading; empty when nothing was extracted."""
        parts = []
        found_text = False
        for document in documents:
            extracted = await asyncio.to_thread(
                self.extractor, document.content, document.filename, document.content_type
            )
            found_text = found_text or bool(extracted.strip())
            if document.kind is DocumentKind.COVER_LETTER:
                parts.append(f"\n\nCover Letter:\n{extracted}")
            else:
                parts.append(extracted)
        return "".join(parts) if found_text else ""

    async def _abort(self, stored: List[StoredDocument], stage: SubmissionStage, log) -> None:
        """Roll back and run compensating deletes for this attempt's uploads."""
        log.warning(
            "application_submit_aborted",
            stage=SubmissionStage.FAILED.value,
            failed_at=stage.value,
            uploaded=len(stored),
        )
        try:
            await self.db.rollback()
        except Exception:
            log.exception("application_rollback_failed", failed_at=stage.value)

        paths_by_bucket: Dict[str, List[str]] = defaultdict(list)
        for item in stored:
            paths_by_bucket[item.bucket].append(item.path)
        for bucket, paths in paths_by_bucket.items():
            await self.storage.remove(bucket, paths)

    # ==================== Lifecycle ====================

    async def list_for_applicant(self, applicant_id: int) -> List[JobApplication]:
        result = await self.db.execute(
            select(JobApplication)
            .options(selectinload(JobApplication.job))
            .where(JobApplication.job_seeker_id == applicant_id)
            .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
        )
        return list(result.scalars().all())

    async def get_for_applicant(self, application_id: int, applicant_id: int) -> JobApplication:
        result = await self.db.execute(
            select(JobApplication)
            .options(selectinload(JobApplication.job))
            .where(
                JobApplication.id == application_id,
                JobApplication.job_seeker_id == applicant_id,
            )
        )
        application = result.scalars().first()
        if application is None:
            raise NotFound("Application not found")
        return application

    async def withdraw(self, application_id: int, applicant_id: int) -> JobApplication:
        application = await self.get_for_applicant(application_id, applicant_id)
        if application.status not in WITHDRAWABLE_STATUSES:
            raise InvalidStatusTransition(
                f"Cannot withdraw an application that is {application.status}"
            )
        application.status = "withdrawn"
        await self.db.commit()
        logger.info("application_withdrawn", application_id=application.id, applicant_id=applicant_id)
        return application

    async def update_status(self, application_id: int, new_status: str, actor: User) -> JobApplication:
        """
        Employer/admin status change, validated against the transition table.
        The applicant is notified on best-effort basis after the change commits.
        """
        if new_status not in APPLICATION_STATUSES:
            raise ValidationFailed(
                "Invalid status. Valid statuses are: " + ", ".join(APPLICATION_STATUSES)
            )

        result = await self.db.execute(
            select(JobApplication)
            .options(selectinload(JobApplication.job), selectinload(JobApplication.applicant))
            .where(JobApplication.id == application_id)
        )
        application = result.scalars().first()
        if application is None:
            raise NotFound("Application not found")

        if not has_role(actor, Role.ADMIN) and application.job.company_id != actor.id:
            raise PermissionDenied("You can only manage applications for your own jobs")

        current = application.status
        if new_status not in APPLICATION_STATUS_TRANSITIONS.get(current, set()):
            raise InvalidStatusTransition(f"Cannot change status from {current} to {new_status}")

        application.status = new_status
        await self.db.commit()
        logger.info(
            "application_status_changed",
            application_id=application.id,
            from_status=current,
            to_status=new_status,
            actor_id=actor.id,
        )

        template = STATUS_NOTIFICATION_MESSAGES.get(new_status)
        if template:
            await self._notify(application.job_seeker_id, template.format(title=application.job.title))
        return application

    async def _notify(self, user_id: int, message: str) -> None:
        try:
            await NotificationService(self.db).create(user_id, message)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.warning("notification_failed", user_id=user_id, error=str(e))

    async def stats_for_applicant(self, applicant_id: int) -> Dict[str, int]:
        result = await self.db.execute(
            select(JobApplication.status, func.count(JobApplication.id))
            .where(JobApplication.job_seeker_id == applicant_id)
            .group_by(JobApplication.status)
        )
        stats = {status: 0 for status in APPLICATION_STATUSES}
        for status, count in result.all():
            stats[status] = count
        stats["total"] = sum(stats.values())
        return stats

    async def company_candidates(self, company_id: int, actor: User) -> List[JobApplication]:
        if not has_role(actor, Role.ADMIN) and actor.id != company_id:
            raise PermissionDenied("You can only view candidates for your own company")

        result = await self.db.execute(
            select(JobApplication)
            .join(Job, JobApplication.job_id == Job.id)
            .options(
                selectinload(JobApplication.job),
                selectinload(JobApplication.applicant).selectinload(User.education),
            )
            .where(Job.company_id == company_id)
            .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
        )
        return list(result.scalars().all())
