# coursereview/api/admin.py
"""
Moderation panel endpoints.
Every route requires an admin-scoped token from /auth/admin/login.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.moderation import DashboardStats, TagApproval, TagCreate
from coursereview.services import file_service, moderation_service, review_service
from coursereview.services.storage import ObjectStorage, StorageError, get_storage
from coursereview.utils.security import require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


def _not_found(e: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ─────────────────────────────────────────
# GET /admin/stats: dashboard overview
# ─────────────────────────────────────────
@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.get_dashboard_stats(db)


# ─────────────────────────────────────────
# Pending tags
# ─────────────────────────────────────────
@router.get("/pending/tags")
def list_pending_tags(
    status_filter: str = Query("pending", alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.list_pending_tags(db, status_filter)
    except ValueError as e:
        raise _bad_request(e)


@router.post("/pending/tags/{pending_id}/approve")
def approve_pending_tag(
    pending_id: int,
    overrides: Optional[TagApproval] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Approve a suggestion; name and type may be corrected on the way"""
    overrides = overrides or TagApproval()
    try:
        return moderation_service.approve_pending_tag(
            db,
            pending_id,
            admin.id,
            name=overrides.name,
            tag_type=overrides.type.value if overrides.type else None,
        )
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


@router.post("/pending/tags/{pending_id}/reject")
def reject_pending_tag(
    pending_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.reject_pending_tag(db, pending_id, admin.id)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


# ─────────────────────────────────────────
# Pending survival guides
# ─────────────────────────────────────────
@router.get("/pending/survival-guides")
def list_pending_guides(
    status_filter: str = Query("pending", alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.list_pending_guides(db, status_filter)
    except ValueError as e:
        raise _bad_request(e)


@router.post("/pending/survival-guides/{guide_id}/approve")
def approve_survival_guide(
    guide_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.approve_survival_guide(db, guide_id, admin.id)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


@router.post("/pending/survival-guides/{guide_id}/reject")
def reject_survival_guide(
    guide_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.reject_survival_guide(db, guide_id, admin.id)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


# ─────────────────────────────────────────
# Pending files
# ─────────────────────────────────────────
@router.get("/pending/files")
def list_pending_files(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_pending_files(db)


@router.post("/pending/files/{file_id}/approve")
def approve_file(
    file_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.approve_file(db, file_id)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


@router.post("/pending/files/{file_id}/reject")
def reject_file(
    file_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    try:
        return moderation_service.reject_file(db, storage, file_id)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


@router.delete("/files/{file_id}")
def delete_file(
    file_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    try:
        return file_service.delete_file(db, storage, file_id, admin.id, is_admin=True)
    except LookupError as e:
        raise _not_found(e)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


# ─────────────────────────────────────────
# Tags
# ─────────────────────────────────────────
@router.get("/tags")
def list_tags(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_tags(db)


@router.post("/tags", status_code=status.HTTP_201_CREATED)
def create_tag(
    payload: TagCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.create_tag(db, admin.id, payload.name, payload.type.value)
    except ValueError as e:
        raise _bad_request(e)


@router.put("/tags/{tag_id}")
def update_tag(
    tag_id: int,
    payload: TagCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.update_tag(db, tag_id, payload.name, payload.type.value)
    except LookupError as e:
        raise _not_found(e)
    except ValueError as e:
        raise _bad_request(e)


@router.delete("/tags/{tag_id}")
def delete_tag(
    tag_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return moderation_service.delete_tag(db, tag_id)
    except LookupError as e:
        raise _not_found(e)


# ─────────────────────────────────────────
# Reviews & reports
# ─────────────────────────────────────────
@router.get("/reviews")
def list_reviews(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_all_reviews(db, limit=limit, offset=skip)


@router.get("/reviews/troll")
def list_troll_reviews(
    threshold: Optional[int] = Query(None, ge=1),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Reviews flagged as rage bait by at least `threshold` voters"""
    return moderation_service.list_troll_reviews(db, threshold)


@router.delete("/reviews/{review_id}")
def delete_review(
    review_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return review_service.delete_review(db, review_id, admin.id, is_admin=True)
    except LookupError as e:
        raise _not_found(e)


@router.get("/reports/reviews")
def list_review_reports(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_review_reports(db, limit=limit, offset=skip)


@router.get("/reports/files")
def list_file_reports(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_file_reports(db, limit=limit, offset=skip)


@router.get("/faculty-requests")
def list_faculty_requests(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return moderation_service.list_faculty_requests(db)
