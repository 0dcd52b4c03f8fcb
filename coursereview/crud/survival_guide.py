from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy.orm import Session

from coursereview.models.survival_guide import PendingSurvivalGuide


def get_guide(db: Session, guide_id: int) -> Optional[PendingSurvivalGuide]:
    return db.query(PendingSurvivalGuide).filter(PendingSurvivalGuide.id == guide_id).first()


def get_user_pending_guide(db: Session, user_id: int, course_id: int) -> Optional[PendingSurvivalGuide]:
    return db.query(PendingSurvivalGuide).filter(
        PendingSurvivalGuide.course_id == course_id,
        PendingSurvivalGuide.submitted_by == user_id,
        PendingSurvivalGuide.status == "pending",
    ).first()


def upsert_pending_guide(db: Session, user_id: int, course_id: int, text: str) -> PendingSurvivalGuide:
    """
    Queue a survival guide for moderation.

    A user has at most one pending guide per course; resubmitting replaces
    its text and bumps its timestamp.
    """
    guide = get_user_pending_guide(db, user_id, course_id)
    if guide:
        guide.survival_guide = text
        guide.created_at = datetime.now(UTC)
    else:
        guide = PendingSurvivalGuide(
            course_id=course_id,
            submitted_by=user_id,
            survival_guide=text,
            status="pending",
        )
        db.add(guide)
    db.flush()
    return guide


def get_guides_by_status(db: Session, status: str = "pending") -> List[PendingSurvivalGuide]:
    return (
        db.query(PendingSurvivalGuide)
        .filter(PendingSurvivalGuide.status == status)
        .order_by(PendingSurvivalGuide.created_at.desc(), PendingSurvivalGuide.id.desc())
        .all()
    )


def get_user_pending_guides(db: Session, user_id: int, course_id: int) -> List[PendingSurvivalGuide]:
    return (
        db.query(PendingSurvivalGuide)
        .filter(
            PendingSurvivalGuide.course_id == course_id,
            PendingSurvivalGuide.submitted_by == user_id,
            PendingSurvivalGuide.status == "pending",
        )
        .order_by(PendingSurvivalGuide.created_at.desc())
        .all()
    )
