# coursereview/crud/file.py
from typing import List, Optional

from sqlalchemy.orm import Session

from coursereview.models.file import CourseFile, FileReport


def create_file(
    db: Session,
    course_id: int,
    user_id: int,
    type: str,
    file_name: str,
    file_path: str,
    file_url: str,
    content_type: Optional[str] = None,
    size: Optional[int] = None,
) -> CourseFile:
    record = CourseFile(
        course_id=course_id,
        user_id=user_id,
        type=type,
        file_name=file_name,
        file_path=file_path,
        file_url=file_url,
        content_type=content_type,
        size=size,
        is_verified=False,
    )
    db.add(record)
    db.flush()
    return record


def get_file(db: Session, file_id: int) -> Optional[CourseFile]:
    return db.query(CourseFile).filter(CourseFile.id == file_id).first()


def get_files_by_course(db: Session, course_id: int) -> List[CourseFile]:
    """Publicly visible files: verified and not hidden, newest first."""
    return (
        db.query(CourseFile)
        .filter(
            CourseFile.course_id == course_id,
            CourseFile.is_hidden.is_(False),
            CourseFile.is_verified.is_(True),
        )
        .order_by(CourseFile.created_at.desc(), CourseFile.id.desc())
        .all()
    )


def get_pending_files(db: Session) -> List[CourseFile]:
    return (
        db.query(CourseFile)
        .filter(CourseFile.is_verified.is_(False))
        .order_by(CourseFile.created_at.desc(), CourseFile.id.desc())
        .all()
    )


def delete_file(db: Session, file_id: int) -> bool:
    record = get_file(db, file_id)
    if not record:
        return False
    db.delete(record)
    db.flush()
    return True


def create_file_report(
    db: Session,
    file_id: int,
    reporter_id: int,
    reason: Optional[str] = None,
) -> FileReport:
    report = FileReport(file_id=file_id, reporter_id=reporter_id, reason=reason)
    db.add(report)
    record = get_file(db, file_id)
    if record is not None:
        record.report_count = (record.report_count or 0) + 1
    db.flush()
    return report


def get_file_reports(db: Session, limit: int = 100, offset: int = 0) -> List[FileReport]:
    return (
        db.query(FileReport)
        .order_by(FileReport.created_at.desc(), FileReport.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
