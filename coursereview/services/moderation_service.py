# coursereview/services/moderation_service.py
"""
Moderation Service Layer
Pending tags, survival guides and files move from "pending" to either
"approved" or "rejected" exactly once. Also hosts the admin tools for tags,
abusive reviews, reports and faculty requests.
"""

import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import ModerationStatus, TagType, VoteType
from coursereview.crud import catalog as catalog_crud
from coursereview.crud import file as file_crud
from coursereview.crud import review as review_crud
from coursereview.crud import survival_guide as guide_crud
from coursereview.crud import tag as tag_crud
from coursereview.models.catalog import Course
from coursereview.models.file import CourseFile, FileReport
from coursereview.models.review import Review, ReviewReport, ReviewVote
from coursereview.models.survival_guide import PendingSurvivalGuide
from coursereview.models.tag import PendingTag, Tag
from coursereview.models.user import User
from coursereview.services.file_service import serialize_file
from coursereview.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

TAG_TYPES = tuple(t.value for t in TagType)
STATUSES = tuple(s.value for s in ModerationStatus)


def _ensure_pending(item: Any, kind: str) -> None:
    if item.status != ModerationStatus.PENDING.value:
        raise ValueError(f"{kind} has already been {item.status}")


def _check_tag_type(tag_type: str) -> None:
    if tag_type not in TAG_TYPES:
        raise ValueError(f"type must be one of: {', '.join(TAG_TYPES)}")


def _check_status(status: str) -> None:
    if status not in STATUSES:
        raise ValueError(f"status must be one of: {', '.join(STATUSES)}")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_tag(tag: Tag) -> Dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "name_tr": tag.name_tr,
        "type": tag.type,
        "is_verified": bool(tag.is_verified),
    }


def serialize_pending_tag(pending: PendingTag) -> Dict[str, Any]:
    return {
        "id": pending.id,
        "name": pending.name,
        "suggested_type": pending.suggested_type,
        "submitted_by": pending.submitted_by,
        "course_id": pending.course_id,
        "status": pending.status,
        "created_at": _iso(pending.created_at),
        "reviewed_at": _iso(pending.reviewed_at),
        "reviewed_by": pending.reviewed_by,
    }


def serialize_guide(guide: PendingSurvivalGuide) -> Dict[str, Any]:
    return {
        "id": guide.id,
        "course_id": guide.course_id,
        "course_code": guide.course.code if guide.course else None,
        "survival_guide": guide.survival_guide,
        "submitted_by": guide.submitted_by,
        "status": guide.status,
        "created_at": _iso(guide.created_at),
        "reviewed_at": _iso(guide.reviewed_at),
        "reviewed_by": guide.reviewed_by,
    }


# ======================
# TAG SUGGESTIONS
# ======================

def suggest_tag(
    db: Session,
    user_id: int,
    name: str,
    suggested_type: str,
    course_id: Optional[int] = None,
) -> Dict[str, Any]:
    name = (name or "").strip()
    if not name:
        raise ValueError("Tag name cannot be empty")
    _check_tag_type(suggested_type)

    try:
        pending = tag_crud.create_pending_tag(db, name, suggested_type, user_id, course_id)
        db.commit()
        db.refresh(pending)
    except Exception:
        db.rollback()
        raise
    return serialize_pending_tag(pending)


def list_pending_tags(db: Session, status: str = "pending") -> List[Dict[str, Any]]:
    _check_status(status)
    return [serialize_pending_tag(p) for p in tag_crud.get_pending_tags(db, status)]


def approve_pending_tag(
    db: Session,
    pending_id: int,
    admin_id: int,
    name: Optional[str] = None,
    tag_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Approve a tag suggestion, optionally renaming or retyping it.

    When a tag with the same name already exists (ignoring case) no new tag
    is created, but the suggestion is still marked approved.

    Raises:
        LookupError: If the suggestion does not exist
        ValueError: If it was already moderated or the type is invalid
    """
    pending = tag_crud.get_pending_tag(db, pending_id)
    if not pending:
        raise LookupError("Pending tag not found")
    _ensure_pending(pending, "Tag suggestion")

    final_name = (name or pending.name).strip()
    final_type = tag_type or pending.suggested_type
    if not final_name:
        raise ValueError("Tag name cannot be empty")
    _check_tag_type(final_type)

    try:
        existing = tag_crud.get_tag_by_name(db, final_name)
        if existing:
            tag = existing
            created = False
            logger.info("Tag %r already exists; approving suggestion %s without a new tag", final_name, pending_id)
        else:
            tag = tag_crud.create_tag(db, final_name, final_type, created_by=pending.submitted_by, is_verified=True)
            created = True

        pending.status = ModerationStatus.APPROVED.value
        pending.reviewed_at = datetime.now(UTC)
        pending.reviewed_by = admin_id
        db.commit()
        db.refresh(pending)
    except Exception:
        db.rollback()
        logger.exception("Failed to approve pending tag %s", pending_id)
        raise

    return {
        "pending": serialize_pending_tag(pending),
        "tag": serialize_tag(tag),
        "created": created,
    }


def reject_pending_tag(db: Session, pending_id: int, admin_id: int) -> Dict[str, Any]:
    pending = tag_crud.get_pending_tag(db, pending_id)
    if not pending:
        raise LookupError("Pending tag not found")
    _ensure_pending(pending, "Tag suggestion")

    try:
        pending.status = ModerationStatus.REJECTED.value
        pending.reviewed_at = datetime.now(UTC)
        pending.reviewed_by = admin_id
        db.commit()
        db.refresh(pending)
    except Exception:
        db.rollback()
        raise
    return serialize_pending_tag(pending)


# ======================
# SURVIVAL GUIDES
# ======================

def list_pending_guides(db: Session, status: str = "pending") -> List[Dict[str, Any]]:
    _check_status(status)
    return [serialize_guide(g) for g in guide_crud.get_guides_by_status(db, status)]


def approve_survival_guide(db: Session, guide_id: int, admin_id: int) -> Dict[str, Any]:
    """
    Approve a survival guide and copy it onto the author's review.

    The approval is committed first. Copying onto the review is a separate
    step: when the author has no review for the course, or the copy fails,
    it is logged and the approval still stands.
    """
    guide = guide_crud.get_guide(db, guide_id)
    if not guide:
        raise LookupError("Survival guide not found")
    _ensure_pending(guide, "Survival guide")

    try:
        guide.status = ModerationStatus.APPROVED.value
        guide.reviewed_at = datetime.now(UTC)
        guide.reviewed_by = admin_id
        db.commit()
        db.refresh(guide)
    except Exception:
        db.rollback()
        raise

    applied = False
    try:
        review = review_crud.set_survival_guide(db, guide.submitted_by, guide.course_id, guide.survival_guide)
        if review is None:
            logger.warning(
                "Survival guide %s approved but user %s has no review for course %s",
                guide_id,
                guide.submitted_by,
                guide.course_id,
            )
        else:
            db.commit()
            applied = True
    except Exception:
        db.rollback()
        logger.exception("Survival guide %s approved but could not be copied to the review", guide_id)

    result = serialize_guide(guide)
    result["applied_to_review"] = applied
    return result


def reject_survival_guide(db: Session, guide_id: int, admin_id: int) -> Dict[str, Any]:
    guide = guide_crud.get_guide(db, guide_id)
    if not guide:
        raise LookupError("Survival guide not found")
    _ensure_pending(guide, "Survival guide")

    try:
        guide.status = ModerationStatus.REJECTED.value
        guide.reviewed_at = datetime.now(UTC)
        guide.reviewed_by = admin_id
        db.commit()
        db.refresh(guide)
    except Exception:
        db.rollback()
        raise
    return serialize_guide(guide)


# ======================
# FILES
# ======================

def list_pending_files(db: Session) -> List[Dict[str, Any]]:
    return [serialize_file(f) for f in file_crud.get_pending_files(db)]


def approve_file(db: Session, file_id: int) -> Dict[str, Any]:
    record = file_crud.get_file(db, file_id)
    if not record:
        raise LookupError("File not found")
    if record.is_verified:
        raise ValueError("File has already been approved")

    try:
        record.is_verified = True
        db.commit()
        db.refresh(record)
    except Exception:
        db.rollback()
        raise

    logger.info("File %s approved", file_id)
    return serialize_file(record)


def reject_file(db: Session, storage: ObjectStorage, file_id: int) -> Dict[str, Any]:
    """
    Reject a pending file: remove the stored object, then the metadata row.

    A storage failure is logged and does not keep the row alive.
    """
    record = file_crud.get_file(db, file_id)
    if not record:
        raise LookupError("File not found")
    if record.is_verified:
        raise ValueError("File has already been approved")

    try:
        storage.remove(record.file_path)
    except StorageError:
        logger.exception("Failed to remove stored object %s for rejected file %s", record.file_path, file_id)

    try:
        file_crud.delete_file(db, file_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("File %s rejected", file_id)
    return {"file_id": file_id, "status": ModerationStatus.REJECTED.value}


# ======================
# TAG MANAGEMENT
# ======================

def list_tags(db: Session, verified_only: bool = False) -> List[Dict[str, Any]]:
    return [serialize_tag(t) for t in tag_crud.get_tags(db, verified_only)]


def create_tag(db: Session, admin_id: int, name: str, tag_type: str) -> Dict[str, Any]:
    name = (name or "").strip()
    if not name:
        raise ValueError("Tag name cannot be empty")
    _check_tag_type(tag_type)
    if tag_crud.get_tag_by_name(db, name):
        raise ValueError("A tag with this name already exists")

    try:
        tag = tag_crud.create_tag(db, name, tag_type, created_by=admin_id, is_verified=True)
        db.commit()
        db.refresh(tag)
    except Exception:
        db.rollback()
        raise
    return serialize_tag(tag)


def update_tag(db: Session, tag_id: int, name: str, tag_type: str) -> Dict[str, Any]:
    name = (name or "").strip()
    if not name:
        raise ValueError("Tag name cannot be empty")
    _check_tag_type(tag_type)
    clash = tag_crud.get_tag_by_name(db, name)
    if clash and clash.id != tag_id:
        raise ValueError("A tag with this name already exists")

    try:
        tag = tag_crud.update_tag(db, tag_id, name, tag_type)
        if not tag:
            raise LookupError("Tag not found")
        db.commit()
        db.refresh(tag)
    except Exception:
        db.rollback()
        raise
    return serialize_tag(tag)


def delete_tag(db: Session, tag_id: int) -> Dict[str, Any]:
    try:
        if not tag_crud.delete_tag(db, tag_id):
            raise LookupError("Tag not found")
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"tag_id": tag_id, "message": "Tag deleted"}


# ======================
# REVIEWS & REPORTS
# ======================

def _admin_review_row(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "course_id": review.course_id,
        "course_code": review.course.code if review.course else None,
        "user_id": review.user_id,
        "comment": review.comment,
        "survival_guide": review.survival_guide,
        "report_count": review.report_count or 0,
        "is_hidden": bool(review.is_hidden),
        "vote_counts": review_crud.vote_counts(review.votes or []),
        "created_at": _iso(review.created_at),
    }


def list_all_reviews(db: Session, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
    return [_admin_review_row(r) for r in review_crud.get_all_reviews(db, limit, offset)]


def list_troll_reviews(db: Session, threshold: Optional[int] = None) -> List[Dict[str, Any]]:
    """Reviews with at least ``threshold`` rage-bait votes, most flagged first."""
    threshold = settings.TROLL_VOTE_THRESHOLD if threshold is None else threshold
    rage_count = func.count(ReviewVote.id).label("rage_bait_count")
    rows = (
        db.query(Review, rage_count)
        .join(ReviewVote, ReviewVote.review_id == Review.id)
        .filter(ReviewVote.vote_type == VoteType.RAGE_BAIT.value)
        .group_by(Review.id)
        .having(func.count(ReviewVote.id) >= threshold)
        .order_by(rage_count.desc(), Review.id)
        .all()
    )
    result = []
    for review, count in rows:
        row = _admin_review_row(review)
        row["rage_bait_count"] = count
        result.append(row)
    return result


def list_review_reports(db: Session, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
    return [
        {
            "id": r.id,
            "review_id": r.review_id,
            "reporter_id": r.reporter_id,
            "reason": r.reason,
            "created_at": _iso(r.created_at),
        }
        for r in review_crud.get_review_reports(db, limit, offset)
    ]


def list_file_reports(db: Session, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
    return [
        {
            "id": r.id,
            "file_id": r.file_id,
            "reporter_id": r.reporter_id,
            "reason": r.reason,
            "created_at": _iso(r.created_at),
        }
        for r in file_crud.get_file_reports(db, limit, offset)
    ]


# ======================
# FACULTY REQUESTS
# ======================

def submit_faculty_request(
    db: Session,
    faculty_name: str,
    major_name: Optional[str] = None,
    email: Optional[str] = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    if not (faculty_name or "").strip():
        raise ValueError("Faculty name is required")
    try:
        request = catalog_crud.create_faculty_request(db, faculty_name, major_name, email, message)
        db.commit()
        db.refresh(request)
    except Exception:
        db.rollback()
        raise
    logger.info("Faculty request %s received for %r", request.id, request.faculty_name)
    return {"id": request.id, "message": "Request received"}


def list_faculty_requests(db: Session) -> List[Dict[str, Any]]:
    return [
        {
            "id": r.id,
            "faculty_name": r.faculty_name,
            "major_name": r.major_name,
            "email": r.email,
            "message": r.message,
            "created_at": _iso(r.created_at),
        }
        for r in catalog_crud.get_faculty_requests(db)
    ]


# ======================
# DASHBOARD
# ======================

def get_dashboard_stats(db: Session) -> Dict[str, Any]:
    pending = ModerationStatus.PENDING.value
    return {
        "users": db.query(User).count(),
        "courses": db.query(Course).count(),
        "reviews": {
            "total": db.query(Review).count(),
            "hidden": db.query(Review).filter(Review.is_hidden.is_(True)).count(),
            "reports": db.query(ReviewReport).count(),
        },
        "files": {
            "total": db.query(CourseFile).count(),
            "pending": db.query(CourseFile).filter(CourseFile.is_verified.is_(False)).count(),
            "reports": db.query(FileReport).count(),
        },
        "pending": {
            "tags": db.query(PendingTag).filter(PendingTag.status == pending).count(),
            "survival_guides": db.query(PendingSurvivalGuide)
            .filter(PendingSurvivalGuide.status == pending)
            .count(),
        },
        "tags": db.query(Tag).count(),
    }
