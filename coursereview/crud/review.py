# coursereview/crud/review.py
"""
Review CRUD Operations
Core database operations for course reviews, votes and reports
"""

from sqlalchemy.orm import Session, selectinload
from typing import Any, Dict, Iterable, List, Optional

from coursereview.constants import VoteType
from coursereview.models.review import Review, ReviewVote, ReviewReport
from coursereview.models.tag import ReviewTag


# Columns a review's author may set
REVIEW_FIELDS = (
    "instructor_id",
    "difficulty",
    "usefulness",
    "workload",
    "material_relevance",
    "exam_predictability",
    "attendance",
    "grading_fairness",
    "difficulty_value_alignment",
    "midterm_format",
    "final_format",
    "extra_assessments",
    "comment",
)


# ======================
# REVIEW CRUD
# ======================

def create_review(
    db: Session,
    user_id: int,
    course_id: int,
    fields: Dict[str, Any],
) -> Review:
    """
    Create a new review.

    Args:
        db: Database session
        user_id: Author user ID
        course_id: Reviewed course
        fields: Review attributes (see REVIEW_FIELDS)

    Returns:
        Created Review object
    """
    review = Review(
        user_id=user_id,
        course_id=course_id,
        **{name: fields.get(name) for name in REVIEW_FIELDS if name in fields},
    )
    if review.extra_assessments is None:
        review.extra_assessments = []

    db.add(review)
    db.flush()
    return review


def get_review_by_id(db: Session, review_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.id == review_id).first()


def get_user_review_for_course(db: Session, user_id: int, course_id: int) -> Optional[Review]:
    """
    Get a user's review for a course.

    Returns:
        Review object or None if the user has not reviewed the course
    """
    return db.query(Review).filter(
        Review.user_id == user_id,
        Review.course_id == course_id,
    ).first()


def get_reviews_by_course(
    db: Session,
    course_id: int,
    include_hidden: bool = False,
) -> List[Review]:
    """
    Get a course's reviews, newest first, with tags and votes loaded.
    """
    query = (
        db.query(Review)
        .options(
            selectinload(Review.review_tags).selectinload(ReviewTag.tag),
            selectinload(Review.votes),
            selectinload(Review.instructor),
        )
        .filter(Review.course_id == course_id)
    )
    if not include_hidden:
        query = query.filter(Review.is_hidden.is_(False))
    return query.order_by(Review.created_at.desc(), Review.id.desc()).all()


def get_all_reviews(db: Session, limit: int = 100, offset: int = 0) -> List[Review]:
    return (
        db.query(Review)
        .options(selectinload(Review.votes), selectinload(Review.course))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def update_review(db: Session, review_id: int, patch: Dict[str, Any]) -> Optional[Review]:
    """
    Apply a partial update to a review.

    Returns:
        Updated Review object or None if not found
    """
    review = get_review_by_id(db, review_id)
    if not review:
        return None

    for name, value in patch.items():
        if name in REVIEW_FIELDS:
            setattr(review, name, value)

    db.flush()
    return review


def set_survival_guide(db: Session, user_id: int, course_id: int, text: str) -> Optional[Review]:
    review = get_user_review_for_course(db, user_id, course_id)
    if not review:
        return None
    review.survival_guide = text
    db.flush()
    return review


def delete_review(db: Session, review_id: int) -> bool:
    """
    Delete a review.

    Returns:
        True if deleted, False if not found
    """
    review = get_review_by_id(db, review_id)
    if not review:
        return False

    db.delete(review)
    db.flush()
    return True


def replace_review_tags(db: Session, review_id: int, tag_ids: Iterable[int]) -> List[ReviewTag]:
    """Drop a review's tag links and write the given ones."""
    db.query(ReviewTag).filter(ReviewTag.review_id == review_id).delete(synchronize_session=False)
    links = [ReviewTag(review_id=review_id, tag_id=tag_id) for tag_id in dict.fromkeys(tag_ids)]
    db.add_all(links)
    db.flush()
    return links


# ======================
# VOTES
# ======================

def get_user_vote(db: Session, review_id: int, user_id: int) -> Optional[ReviewVote]:
    return db.query(ReviewVote).filter(
        ReviewVote.review_id == review_id,
        ReviewVote.user_id == user_id,
    ).first()


def create_vote(db: Session, review_id: int, user_id: int, vote_type: str) -> ReviewVote:
    vote = ReviewVote(review_id=review_id, user_id=user_id, vote_type=vote_type)
    db.add(vote)
    db.flush()
    return vote


def vote_counts(votes: Iterable[ReviewVote]) -> Dict[str, int]:
    """Count of each vote type among the given votes."""
    counts = {vote_type.value: 0 for vote_type in VoteType}
    for vote in votes:
        if vote.vote_type in counts:
            counts[vote.vote_type] += 1
    return counts


def get_vote_counts(db: Session, review_id: int) -> Dict[str, int]:
    votes = db.query(ReviewVote).filter(ReviewVote.review_id == review_id).all()
    return vote_counts(votes)


# ======================
# REPORTS
# ======================

def create_review_report(
    db: Session,
    review_id: int,
    reporter_id: int,
    reason: Optional[str] = None,
) -> ReviewReport:
    report = ReviewReport(review_id=review_id, reporter_id=reporter_id, reason=reason)
    db.add(report)
    review = get_review_by_id(db, review_id)
    if review is not None:
        review.report_count = (review.report_count or 0) + 1
    db.flush()
    return report


def get_review_reports(db: Session, limit: int = 100, offset: int = 0) -> List[ReviewReport]:
    return (
        db.query(ReviewReport)
        .order_by(ReviewReport.created_at.desc(), ReviewReport.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def has_reported(db: Session, review_id: int, reporter_id: int) -> bool:
    return db.query(ReviewReport).filter(
        ReviewReport.review_id == review_id,
        ReviewReport.reporter_id == reporter_id,
    ).first() is not None
