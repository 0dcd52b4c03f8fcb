# coursereview/services/vote_service.py
"""
Review voting.

A user holds at most one vote per review. Voting the same type again
withdraws it; voting a different type replaces it.
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from coursereview.constants import VoteType
from coursereview.crud import review as review_crud

logger = logging.getLogger(__name__)

ACTION_ADDED = "added"
ACTION_CHANGED = "changed"
ACTION_REMOVED = "removed"


def toggle_vote(db: Session, review_id: int, user_id: int, vote_type: str) -> Dict[str, Any]:
    """
    Toggle the caller's vote on a review.

    Returns:
        ``{"action", "vote_type", "counts"}`` where ``vote_type`` is the
        caller's vote after the toggle (``None`` once removed)

    Raises:
        LookupError: If the review does not exist
        ValueError: If the vote type is unknown
    """
    allowed = {v.value for v in VoteType}
    if vote_type not in allowed:
        raise ValueError(f"vote_type must be one of: {', '.join(sorted(allowed))}")

    if not review_crud.get_review_by_id(db, review_id):
        raise LookupError("Review not found")

    existing = review_crud.get_user_vote(db, review_id, user_id)

    try:
        if existing is None:
            review_crud.create_vote(db, review_id, user_id, vote_type)
            action, current = ACTION_ADDED, vote_type
        elif existing.vote_type == vote_type:
            db.delete(existing)
            db.flush()
            action, current = ACTION_REMOVED, None
        else:
            existing.vote_type = vote_type
            db.flush()
            action, current = ACTION_CHANGED, vote_type
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to toggle vote on review %s", review_id)
        raise

    logger.debug("Vote %s on review %s by user %s", action, review_id, user_id)
    return {
        "review_id": review_id,
        "action": action,
        "vote_type": current,
        "counts": review_crud.get_vote_counts(db, review_id),
    }
