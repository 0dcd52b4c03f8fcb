# coursereview/services/review_service.py
"""
Review Service Layer
Business logic for review submission, listing and reporting
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import (
    ATTENDANCE_NOT_REQUIRED,
    ATTENDANCE_REQUIRED,
    DifficultyValueAlignment,
    ExamFormat,
    ExtraAssessment,
    MAX_RATING,
    MIN_RATING,
)
from coursereview.crud import catalog as catalog_crud
from coursereview.crud import review as review_crud
from coursereview.crud import survival_guide as guide_crud
from coursereview.crud import tag as tag_crud
from coursereview.models.review import Review

logger = logging.getLogger(__name__)

REQUIRED_RATINGS = (
    "difficulty",
    "usefulness",
    "workload",
    "material_relevance",
    "exam_predictability",
    "attendance",
)
OPTIONAL_RATINGS = ("grading_fairness",)

CHOICE_FIELDS = {
    "difficulty_value_alignment": tuple(o.value for o in DifficultyValueAlignment),
    "midterm_format": tuple(o.value for o in ExamFormat),
    "final_format": tuple(o.value for o in ExamFormat),
}


# ======================
# VALIDATION
# ======================

def _check_rating(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not (MIN_RATING <= value <= MAX_RATING):
        raise ValueError(f"{name} must be between {MIN_RATING} and {MAX_RATING}")


def validate_review_fields(fields: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Check review input and return the cleaned field mapping.

    With ``partial`` only the keys present are checked (used for updates);
    otherwise every required rating and categorical answer must be given.

    Raises:
        ValueError: On the first invalid or missing field
    """
    cleaned = {name: value for name, value in fields.items() if name in review_crud.REVIEW_FIELDS}

    for name in REQUIRED_RATINGS:
        if name not in cleaned or cleaned[name] is None:
            if not partial:
                raise ValueError(f"{name} is required")
            cleaned.pop(name, None)
            continue
        _check_rating(name, cleaned[name])

    if cleaned.get("attendance") is not None and cleaned["attendance"] not in (
        ATTENDANCE_NOT_REQUIRED,
        ATTENDANCE_REQUIRED,
    ):
        raise ValueError(
            f"attendance must be {ATTENDANCE_NOT_REQUIRED} (not required) or {ATTENDANCE_REQUIRED} (required)"
        )

    for name in OPTIONAL_RATINGS:
        if cleaned.get(name) is not None:
            _check_rating(name, cleaned[name])

    for name, options in CHOICE_FIELDS.items():
        value = cleaned.get(name)
        if value is None:
            if not partial:
                raise ValueError(f"{name} is required")
            cleaned.pop(name, None)
            continue
        if value not in options:
            raise ValueError(f"{name} must be one of: {', '.join(options)}")

    if "extra_assessments" in cleaned:
        extras = list(dict.fromkeys(cleaned["extra_assessments"] or []))
        allowed = tuple(o.value for o in ExtraAssessment)
        unknown = [e for e in extras if e not in allowed]
        if unknown:
            raise ValueError(f"Unknown extra assessment: {', '.join(map(str, unknown))}")
        cleaned["extra_assessments"] = extras

    comment = cleaned.get("comment")
    if comment is not None:
        comment = comment.strip()
        if len(comment) > settings.MAX_COMMENT_LENGTH:
            raise ValueError(f"Comment must be {settings.MAX_COMMENT_LENGTH} characters or less")
        cleaned["comment"] = comment or None

    return cleaned


def _clean_survival_guide(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    if len(text) > settings.MAX_SURVIVAL_GUIDE_LENGTH:
        raise ValueError(
            f"Survival guide must be {settings.MAX_SURVIVAL_GUIDE_LENGTH} characters or less"
        )
    return text


def _link_tags(db: Session, review_id: int, tag_ids: Iterable[int]) -> bool:
    """
    Write the review's tag links as a step of their own.

    The review is already committed; a failure here is logged and the
    review keeps whatever links it had.
    """
    try:
        valid_ids = tag_crud.existing_tag_ids(db, list(tag_ids))
        review_crud.replace_review_tags(db, review_id, valid_ids)
        db.commit()
        return True
    except Exception:
        db.rollback()
        logger.exception("Failed to link tags to review %s", review_id)
        return False


# ======================
# SERIALIZATION
# ======================

def serialize_review(review: Review, current_user_id: Optional[int] = None) -> Dict[str, Any]:
    votes = list(review.votes or [])
    user_vote = None
    if current_user_id is not None:
        user_vote = next((v.vote_type for v in votes if v.user_id == current_user_id), None)

    return {
        "id": review.id,
        "course_id": review.course_id,
        "user_id": review.user_id,
        "instructor_id": review.instructor_id,
        "instructor_name": review.instructor.name if review.instructor else None,
        "difficulty": review.difficulty,
        "usefulness": review.usefulness,
        "workload": review.workload,
        "material_relevance": review.material_relevance,
        "exam_predictability": review.exam_predictability,
        "attendance": review.attendance,
        "grading_fairness": review.grading_fairness,
        "difficulty_value_alignment": review.difficulty_value_alignment,
        "midterm_format": review.midterm_format,
        "final_format": review.final_format,
        "extra_assessments": list(review.extra_assessments or []),
        "comment": review.comment,
        "survival_guide": review.survival_guide,
        "tags": [
            {"id": link.tag.id, "name": link.tag.name, "type": link.tag.type}
            for link in (review.review_tags or [])
            if link.tag is not None
        ],
        "vote_counts": review_crud.vote_counts(votes),
        "user_vote": user_vote,
        "report_count": review.report_count or 0,
        "is_hidden": bool(review.is_hidden),
        "created_at": review.created_at.isoformat() if review.created_at else None,
        "updated_at": review.updated_at.isoformat() if review.updated_at else None,
    }


# ======================
# REVIEW SUBMISSION
# ======================

def submit_review(
    db: Session,
    user_id: int,
    course_id: int,
    fields: Dict[str, Any],
    survival_guide: Optional[str] = None,
    tag_ids: Optional[List[int]] = None,
) -> Dict[str, Any]:
    """
    Submit a review for a course.

    One review per user and course. A survival guide is never written to the
    review directly: it is queued for moderation instead.

    Args:
        db: Database session
        user_id: Author user ID
        course_id: Reviewed course
        fields: Ratings and categorical answers
        survival_guide: Optional survival guide text to queue
        tag_ids: Optional tags to attach

    Returns:
        Dictionary with the created review and queueing status

    Raises:
        LookupError: If the course does not exist
        ValueError: If validation fails or the user already reviewed the course
    """
    if not catalog_crud.get_course(db, course_id):
        raise LookupError("Course not found")

    cleaned = validate_review_fields(fields)
    guide_text = _clean_survival_guide(survival_guide)

    if review_crud.get_user_review_for_course(db, user_id, course_id):
        raise ValueError("You have already reviewed this course")

    try:
        review = review_crud.create_review(db, user_id=user_id, course_id=course_id, fields=cleaned)
        if guide_text:
            guide_crud.upsert_pending_guide(db, user_id, course_id, guide_text)
        db.commit()
        db.refresh(review)
    except Exception:
        db.rollback()
        logger.exception("Failed to submit review for course %s by user %s", course_id, user_id)
        raise

    logger.info("Review %s submitted for course %s", review.id, course_id)

    if tag_ids:
        _link_tags(db, review.id, tag_ids)
        db.refresh(review)

    return {
        "review": serialize_review(review, user_id),
        "survival_guide_pending": bool(guide_text),
        "message": "Review submitted successfully",
    }


def update_review(
    db: Session,
    review_id: int,
    user_id: int,
    patch: Dict[str, Any],
    survival_guide: Optional[str] = None,
    tag_ids: Optional[List[int]] = None,
) -> Dict[str, Any]:
    """
    Update the caller's own review.

    Raises:
        LookupError: If the review does not exist
        ValueError: If the caller is not the author or validation fails
    """
    review = review_crud.get_review_by_id(db, review_id)
    if not review:
        raise LookupError("Review not found")

    if review.user_id != user_id:
        raise ValueError("You can only update your own reviews")

    cleaned = validate_review_fields(patch, partial=True)
    guide_text = _clean_survival_guide(survival_guide)

    try:
        review_crud.update_review(db, review_id, cleaned)
        if guide_text:
            guide_crud.upsert_pending_guide(db, user_id, review.course_id, guide_text)
        db.commit()
        db.refresh(review)
    except Exception:
        db.rollback()
        logger.exception("Failed to update review %s", review_id)
        raise

    if tag_ids is not None:
        _link_tags(db, review.id, tag_ids)
        db.refresh(review)

    return {
        "review": serialize_review(review, user_id),
        "survival_guide_pending": bool(guide_text),
        "message": "Review updated successfully",
    }


def delete_review(
    db: Session,
    review_id: int,
    user_id: int,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """
    Delete a review. Authors may delete their own; admins may delete any.

    Raises:
        LookupError: If the review does not exist
        ValueError: If the caller may not delete it
    """
    review = review_crud.get_review_by_id(db, review_id)
    if not review:
        raise LookupError("Review not found")

    if not is_admin and review.user_id != user_id:
        raise ValueError("You can only delete your own reviews")

    try:
        review_crud.delete_review(db, review_id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to delete review %s", review_id)
        raise

    logger.info("Review %s deleted by user %s", review_id, user_id)
    return {"review_id": review_id, "message": "Review deleted successfully"}


def submit_survival_guide(db: Session, user_id: int, course_id: int, text: str) -> Dict[str, Any]:
    """Queue a survival guide for moderation without touching the review."""
    if not catalog_crud.get_course(db, course_id):
        raise LookupError("Course not found")

    guide_text = _clean_survival_guide(text)
    if not guide_text:
        raise ValueError("Survival guide cannot be empty")

    try:
        guide = guide_crud.upsert_pending_guide(db, user_id, course_id, guide_text)
        db.commit()
        db.refresh(guide)
    except Exception:
        db.rollback()
        raise

    return {
        "id": guide.id,
        "course_id": guide.course_id,
        "survival_guide": guide.survival_guide,
        "status": guide.status,
        "created_at": guide.created_at.isoformat() if guide.created_at else None,
    }


# ======================
# REVIEW RETRIEVAL
# ======================

def list_course_reviews(
    db: Session,
    course_id: int,
    current_user_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Visible reviews for a course, newest first, with tags and vote counts."""
    reviews = review_crud.get_reviews_by_course(db, course_id)
    return [serialize_review(r, current_user_id) for r in reviews]


def get_user_review(db: Session, user_id: int, course_id: int) -> Optional[Dict[str, Any]]:
    review = review_crud.get_user_review_for_course(db, user_id, course_id)
    if not review:
        return None
    return serialize_review(review, user_id)


def get_my_pending_guides(db: Session, user_id: int, course_id: int) -> List[Dict[str, Any]]:
    guides = guide_crud.get_user_pending_guides(db, user_id, course_id)
    return [
        {
            "id": g.id,
            "course_id": g.course_id,
            "survival_guide": g.survival_guide,
            "status": g.status,
            "created_at": g.created_at.isoformat() if g.created_at else None,
        }
        for g in guides
    ]


# ======================
# REPORTS
# ======================

def report_review(
    db: Session,
    review_id: int,
    reporter_id: int,
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Report a review for moderation and bump its report count.

    Raises:
        LookupError: If the review does not exist
        ValueError: If the reporter already reported it
    """
    review = review_crud.get_review_by_id(db, review_id)
    if not review:
        raise LookupError("Review not found")

    if review_crud.has_reported(db, review_id, reporter_id):
        raise ValueError("You have already reported this review")

    try:
        report = review_crud.create_review_report(db, review_id, reporter_id, (reason or "").strip() or None)
        db.commit()
        db.refresh(review)
    except Exception:
        db.rollback()
        raise

    logger.info("Review %s reported by user %s", review_id, reporter_id)
    return {
        "report_id": report.id,
        "review_id": review_id,
        "report_count": review.report_count,
        "message": "Report submitted",
    }
