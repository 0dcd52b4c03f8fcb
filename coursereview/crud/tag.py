# coursereview/crud/tag.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coursereview.models.tag import Tag, PendingTag, ReviewTag


def get_tags(db: Session, verified_only: bool = False) -> List[Tag]:
    query = db.query(Tag)
    if verified_only:
        query = query.filter(Tag.is_verified.is_(True))
    return query.order_by(Tag.name).all()


def get_tag(db: Session, tag_id: int) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.id == tag_id).first()


def get_tag_by_name(db: Session, name: str) -> Optional[Tag]:
    """Case-insensitive exact match on tag name."""
    normalized = (name or "").strip().lower()
    return db.query(Tag).filter(func.lower(Tag.name) == normalized).first()


def create_tag(
    db: Session,
    name: str,
    type: str,
    created_by: Optional[int] = None,
    is_verified: bool = True,
) -> Tag:
    tag = Tag(name=name.strip(), type=type, created_by=created_by, is_verified=is_verified)
    db.add(tag)
    db.flush()
    return tag


def update_tag(db: Session, tag_id: int, name: str, type: str) -> Optional[Tag]:
    tag = get_tag(db, tag_id)
    if not tag:
        return None
    tag.name = name.strip()
    tag.type = type
    db.flush()
    return tag


def delete_tag(db: Session, tag_id: int) -> bool:
    """Delete a tag along with every review link pointing at it."""
    tag = get_tag(db, tag_id)
    if not tag:
        return False
    db.query(ReviewTag).filter(ReviewTag.tag_id == tag_id).delete(synchronize_session=False)
    db.delete(tag)
    db.flush()
    return True


def existing_tag_ids(db: Session, tag_ids: List[int]) -> List[int]:
    if not tag_ids:
        return []
    rows = db.query(Tag.id).filter(Tag.id.in_(tag_ids)).all()
    return [row[0] for row in rows]


# ======================
# PENDING TAGS
# ======================

def create_pending_tag(
    db: Session,
    name: str,
    suggested_type: str,
    submitted_by: int,
    course_id: Optional[int] = None,
) -> PendingTag:
    pending = PendingTag(
        name=name.strip(),
        suggested_type=suggested_type,
        submitted_by=submitted_by,
        course_id=course_id,
        status="pending",
    )
    db.add(pending)
    db.flush()
    return pending


def get_pending_tag(db: Session, pending_id: int) -> Optional[PendingTag]:
    return db.query(PendingTag).filter(PendingTag.id == pending_id).first()


def get_pending_tags(db: Session, status: str = "pending") -> List[PendingTag]:
    return (
        db.query(PendingTag)
        .filter(PendingTag.status == status)
        .order_by(PendingTag.created_at.desc(), PendingTag.id.desc())
        .all()
    )
