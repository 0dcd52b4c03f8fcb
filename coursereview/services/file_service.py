# coursereview/services/file_service.py
"""
Course file uploads.

Bytes go to object storage first; the metadata row is written second and
starts unverified, so nothing is listed until a moderator approves it.
"""

import logging
import secrets
import time
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import FileType
from coursereview.crud import catalog as catalog_crud
from coursereview.crud import file as file_crud
from coursereview.models.file import CourseFile
from coursereview.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

EXTENSIONS_BY_TYPE = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "image/jpeg": "jpg",
    "image/png": "png",
}


def build_storage_path(course_id: int, file_name: str, content_type: Optional[str] = None) -> str:
    """``<course_id>/<unix timestamp>-<random>.<ext>``"""
    ext = PurePosixPath(file_name or "").suffix.lstrip(".").lower()
    if not ext:
        ext = EXTENSIONS_BY_TYPE.get(content_type or "", "bin")
    return f"{course_id}/{int(time.time())}-{secrets.token_hex(4)}.{ext}"


def serialize_file(record: CourseFile) -> Dict[str, Any]:
    return {
        "id": record.id,
        "course_id": record.course_id,
        "user_id": record.user_id,
        "type": record.type,
        "file_name": record.file_name,
        "file_url": record.file_url,
        "content_type": record.content_type,
        "size": record.size,
        "is_verified": bool(record.is_verified),
        "report_count": record.report_count or 0,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


def upload_file(
    db: Session,
    storage: ObjectStorage,
    course_id: int,
    user_id: int,
    file_type: str,
    file_name: str,
    data: bytes,
    content_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Store an uploaded file and queue it for moderation.

    Raises:
        LookupError: If the course does not exist
        ValueError: If the file is empty, too large or of a disallowed type
        StorageError: If the storage backend rejects the upload
    """
    if not catalog_crud.get_course(db, course_id):
        raise LookupError("Course not found")

    if file_type not in {t.value for t in FileType}:
        raise ValueError(f"type must be one of: {', '.join(t.value for t in FileType)}")
    if not data:
        raise ValueError("File is empty")
    if len(data) > settings.MAX_FILE_SIZE:
        raise ValueError(f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB limit")
    if content_type not in settings.ALLOWED_FILE_TYPES:
        raise ValueError("File type not allowed")

    path = build_storage_path(course_id, file_name, content_type)
    url = storage.put(path, data, content_type=content_type)

    try:
        record = file_crud.create_file(
            db,
            course_id=course_id,
            user_id=user_id,
            type=file_type,
            file_name=file_name,
            file_path=path,
            file_url=url,
            content_type=content_type,
            size=len(data),
        )
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        logger.exception("Failed to save metadata for %s; removing stored object", path)
        try:
            storage.remove(path)
        except StorageError:
            logger.exception("Failed to remove orphaned object %s", path)
        raise

    logger.info("File %s uploaded to course %s by user %s", record.id, course_id, user_id)
    return serialize_file(record)


def list_course_files(db: Session, course_id: int) -> List[Dict[str, Any]]:
    return [serialize_file(f) for f in file_crud.get_files_by_course(db, course_id)]


def delete_file(
    db: Session,
    storage: ObjectStorage,
    file_id: int,
    user_id: int,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """
    Delete a file. Uploaders may delete their own; admins may delete any.

    The stored object goes first; if that fails the metadata row is kept.
    """
    record = file_crud.get_file(db, file_id)
    if not record:
        raise LookupError("File not found")
    if not is_admin and record.user_id != user_id:
        raise ValueError("You can only delete your own files")

    storage.remove(record.file_path)

    try:
        file_crud.delete_file(db, file_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("File %s deleted by user %s", file_id, user_id)
    return {"file_id": file_id, "message": "File deleted successfully"}


def report_file(db: Session, file_id: int, reporter_id: int, reason: Optional[str] = None) -> Dict[str, Any]:
    record = file_crud.get_file(db, file_id)
    if not record:
        raise LookupError("File not found")

    try:
        report = file_crud.create_file_report(db, file_id, reporter_id, (reason or "").strip() or None)
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    return {
        "report_id": report.id,
        "file_id": file_id,
        "report_count": record.report_count,
        "message": "Report submitted",
    }
