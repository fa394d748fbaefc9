"""
File storage gateway
Uploads application documents to an object store and removes them again
when a submission is rolled back.

Backends: Supabase Storage (default), S3 and the local filesystem. SDK calls
are blocking, so they run in a worker thread.
"""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from tenacity import retry, stop_after_attempt, wait_exponential

from app.config import settings
from app.core.exceptions import StorageError
from app.utils.helpers import sanitize_filename

logger = logging.getLogger(__name__)

_upload_retry = retry(
    stop=stop_after_attempt(settings.STORAGE_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    reraise=True,
)


def build_storage_path(applicant_id: int, job_id: int, filename: str) -> str:
    """user_{applicant}_job_{job}/{epoch_ms}_{sanitized name}"""
    return f"user_{applicant_id}_job_{job_id}/{int(time.time() * 1000)}_{sanitize_filename(filename)}"


class FileStorageGateway(ABC):
    """Object store used for resumes and cover letters"""

    name = "base"

    @abstractmethod
    async def upload(self, content: bytes, mime_type: str, path: str, *, bucket: str) -> str:
        """Store ``content`` at ``bucket/path`` (overwriting) and return its public URL.

        Raises:
            StorageError: the object could not be stored
        """

    @abstractmethod
    async def _delete(self, bucket: str, paths: List[str]) -> None:
        """Backend-specific delete; may raise."""

    async def remove(self, bucket: str, paths: Iterable[str]) -> None:
        """Best-effort delete. Failures are logged, never raised."""
        paths = [p for p in paths if p]
        if not paths:
            return
        try:
            await self._delete(bucket, paths)
            logger.info(f"Removed {len(paths)} object(s) from {self.name}:{bucket}")
        except Exception as e:
            logger.error(f"Failed to remove {paths} from {self.name}:{bucket}: {type(e).__name__}: {e}")


class SupabaseFileStorage(FileStorageGateway):
    """Supabase Storage buckets (public URLs)"""

    name = "supabase"

    def __init__(self, client=None):
        if client is None:
            from supabase import create_client

            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set for supabase storage")
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
        self.client = client

    @_upload_retry
    def _upload_sync(self, content: bytes, mime_type: str, path: str, bucket: str) -> str:
        store = self.client.storage.from_(bucket)
        store.upload(
            path=path,
            file=content,
            file_options={"content-type": mime_type, "upsert": "true"},
        )
        return store.get_public_url(path)

    async def upload(self, content: bytes, mime_type: str, path: str, *, bucket: str) -> str:
        try:
            url = await asyncio.to_thread(self._upload_sync, content, mime_type, path, bucket)
        except Exception as e:
            logger.error(f"Error uploading {bucket}/{path} to Supabase Storage: {e}")
            raise StorageError() from e
        logger.info(f"Uploaded {bucket}/{path} ({len(content)} bytes)")
        return url

    async def _delete(self, bucket: str, paths: List[str]) -> None:
        await asyncio.to_thread(self.client.storage.from_(bucket).remove, paths)


class S3FileStorage(FileStorageGateway):
    """
    S3 storage. A single S3 bucket holds every logical bucket as a key
    prefix: ``{logical bucket}/{path}``.
    """

    name = "s3"

    def __init__(self, client=None, bucket_name: Optional[str] = None):
        if client is None:
            import boto3

            client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION,
            )
        self.client = client
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME

    def _url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    @_upload_retry
    def _put_sync(self, content: bytes, mime_type: str, key: str) -> None:
        self.client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=content,
            ContentType=mime_type,
        )

    async def upload(self, content: bytes, mime_type: str, path: str, *, bucket: str) -> str:
        key = f"{bucket}/{path}"
        try:
            await asyncio.to_thread(self._put_sync, content, mime_type, key)
        except Exception as e:
            logger.error(f"Error uploading {key} to S3: {e}")
            raise StorageError() from e
        logger.info(f"Uploaded s3://{self.bucket_name}/{key} ({len(content)} bytes)")
        return self._url(key)

    async def _delete(self, bucket: str, paths: List[str]) -> None:
        await asyncio.to_thread(
            self.client.delete_objects,
            Bucket=self.bucket_name,
            Delete={"Objects": [{"Key": f"{bucket}/{p}"} for p in paths]},
        )


class LocalFileStorage(FileStorageGateway):
    """Filesystem storage for development and tests"""

    name = "local"

    def __init__(self, base_dir: Optional[str] = None, base_url: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.LOCAL_STORAGE_DIR)
        self.base_url = (base_url if base_url is not None else settings.LOCAL_STORAGE_BASE_URL).rstrip("/")

    def _target(self, bucket: str, path: str) -> Path:
        root = (self.base_dir / bucket).resolve()
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Path escapes storage root: {path}")
        return target

    def _write_sync(self, content: bytes, bucket: str, path: str) -> None:
        target = self._target(bucket, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    async def upload(self, content: bytes, mime_type: str, path: str, *, bucket: str) -> str:
        try:
            await asyncio.to_thread(self._write_sync, content, bucket, path)
        except Exception as e:
            logger.error(f"Error writing {bucket}/{path} to local storage: {e}")
            raise StorageError() from e
        return f"{self.base_url}/{bucket}/{path}"

    def _delete_sync(self, bucket: str, paths: List[str]) -> None:
        for path in paths:
            target = self._target(bucket, path)
            target.unlink(missing_ok=True)
            try:
                if target.parent.exists() and not any(target.parent.iterdir()):
                    target.parent.rmdir()
            except OSError:
                pass  # directory not empty

    async def _delete(self, bucket: str, paths: List[str]) -> None:
        await asyncio.to_thread(self._delete_sync, bucket, paths)


_storage: Optional[FileStorageGateway] = None


def get_file_storage() -> FileStorageGateway:
    """
    Storage backend selected by STORAGE_TYPE

    Returns:
        SupabaseFileStorage ("supabase", default)
        S3FileStorage ("s3")
        LocalFileStorage ("local")
    """
    global _storage
    if _storage is not None:
        return _storage

    storage_type = settings.STORAGE_TYPE.lower()
    if storage_type == "s3":
        if not settings.S3_BUCKET_NAME:
            raise ValueError("S3_BUCKET_NAME must be set for s3 storage")
        _storage = S3FileStorage()
    elif storage_type == "local":
        _storage = LocalFileStorage()
    elif storage_type == "supabase":
        _storage = SupabaseFileStorage()
    else:
        raise ValueError(f"Unknown STORAGE_TYPE: {settings.STORAGE_TYPE}. Available: supabase, s3, local")

    logger.info(f"Using {_storage.name} file storage")
    return _storage
