"""
Object Storage
Uploaded course files live outside the database behind a two-call
interface: ``put(path, data) -> url`` and ``remove(path)``.

Two backends exist: a local directory (development and tests) and an
S3-compatible bucket (AWS S3 or MinIO) accessed through boto3.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from coursereview.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend cannot complete an operation."""


def _validate_key(path: str) -> str:
    key = PurePosixPath(path)
    if not path or key.is_absolute() or ".." in key.parts:
        raise StorageError(f"Invalid storage path: {path!r}")
    return str(key)


class ObjectStorage(ABC):
    """Base interface for storage backends."""

    @abstractmethod
    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store `data` under `path` and return its public URL."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete the object at `path`. A missing object is not an error."""


class LocalStorage(ObjectStorage):
    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _full_path(self, path: str) -> Path:
        return self.root / _validate_key(path)

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._full_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to store {path}: {exc}") from exc
        return f"{self.public_base_url}/{_validate_key(path)}"

    def remove(self, path: str) -> None:
        target = self._full_path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("Object %s already absent", path)
        except OSError as exc:
            raise StorageError(f"Failed to remove {path}: {exc}") from exc


class S3Storage(ObjectStorage):
    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._client = None

    def _get_client(self):
        """Lazy initialization of the S3/MinIO client"""
        if self._client is None:
            kwargs = {"region_name": self.region_name}
            if self.endpoint_url:
                # MinIO needs path-style addressing
                kwargs["endpoint_url"] = self.endpoint_url
                kwargs["config"] = Config(signature_version="s3v4", s3={"addressing_style": "path"})
            if self._access_key_id and self._secret_access_key:
                kwargs["aws_access_key_id"] = self._access_key_id
                kwargs["aws_secret_access_key"] = self._secret_access_key
            self._client = boto3.client("s3", **kwargs)
        return self._client

    def public_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region_name}.amazonaws.com/{key}"

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        key = _validate_key(path)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self._get_client().put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key}: {exc}") from exc
        return self.public_url(key)

    def remove(self, path: str) -> None:
        key = _validate_key(path)
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc


_storage: Optional[ObjectStorage] = None


def build_storage() -> ObjectStorage:
    backend = (settings.STORAGE_BACKEND or "local").strip().lower()
    if backend == "s3":
        logger.info("Using S3 storage bucket %s", settings.STORAGE_BUCKET)
        return S3Storage(
            bucket=settings.STORAGE_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.AWS_REGION,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
    if backend != "local":
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
    logger.info("Using local storage at %s", settings.STORAGE_LOCAL_ROOT)
    return LocalStorage(settings.STORAGE_LOCAL_ROOT, settings.STORAGE_PUBLIC_BASE_URL)


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the process-wide storage backend."""
    global _storage
    if _storage is None:
        _storage = build_storage()
    return _storage
