# coursereview/api/review.py
"""
Review API Router
REST endpoints for course reviews, votes, reports and survival guides

Endpoints:
- POST /reviews/ - Submit a review
- GET /reviews/course/{course_id} - Reviews of a course
- GET /reviews/course/{course_id}/mine - Current user's review of a course
- PATCH /reviews/{review_id} - Update own review
- DELETE /reviews/{review_id} - Delete own review
- POST /reviews/{review_id}/vote - Toggle a vote
- POST /reviews/{review_id}/report - Report a review
- POST /reviews/survival-guides - Queue a survival guide
- GET /reviews/survival-guides/mine/{course_id} - Own pending guides
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.review import (
    PendingGuideResponse,
    ReportRequest,
    ReportResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewSubmitResponse,
    ReviewUpdate,
    SurvivalGuideSubmit,
    VoteRequest,
    VoteResponse,
)
from coursereview.services import review_service, vote_service
from coursereview.utils.security import get_current_user, get_current_user_optional

router = APIRouter(prefix="/reviews", tags=["reviews"])


# ======================
# SUBMIT REVIEW
# ======================
@router.post("/", response_model=ReviewSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit a review for a course.

    Requirements:
    - One review per course per user
    - All six ratings 1-5; attendance is 1 or 5
    - Exam formats and difficulty/value answer required
    - Comment max 300 characters
    - A survival guide is queued for moderation, not published directly
    """
    try:
        return review_service.submit_review(
            db=db,
            user_id=current_user.id,
            course_id=review.course_id,
            fields=review.review_fields(),
            survival_guide=review.survival_guide,
            tag_ids=review.tag_ids,
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to submit review: {str(e)}"
        )


# ======================
# COURSE REVIEWS
# ======================
@router.get("/course/{course_id}", response_model=List[ReviewResponse])
def get_course_reviews(
    course_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """Visible reviews of a course, newest first. Signed-in users see their own votes."""
    return review_service.list_course_reviews(
        db,
        course_id,
        current_user_id=current_user.id if current_user else None,
    )


@router.get("/course/{course_id}/mine", response_model=Optional[ReviewResponse])
def get_my_course_review(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return review_service.get_user_review(db, current_user.id, course_id)


# ======================
# UPDATE / DELETE REVIEW
# ======================
@router.patch("/{review_id}", response_model=ReviewSubmitResponse)
def update_review(
    review_id: int,
    review_update: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return review_service.update_review(
            db=db,
            review_id=review_id,
            user_id=current_user.id,
            patch=review_update.review_fields(),
            survival_guide=review_update.survival_guide,
            tag_ids=review_update.tag_ids,
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{review_id}", status_code=status.HTTP_200_OK)
def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete own review. Moderators use the admin endpoint instead."""
    try:
        return review_service.delete_review(
            db=db,
            review_id=review_id,
            user_id=current_user.id,
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


# ======================
# VOTES & REPORTS
# ======================
@router.post("/{review_id}/vote", response_model=VoteResponse)
def vote_review(
    review_id: int,
    vote: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Toggle a vote on a review.

    Same type again removes the vote; a different type replaces it.
    """
    try:
        return vote_service.toggle_vote(db, review_id, current_user.id, vote.vote_type.value)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{review_id}/report", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def report_review(
    review_id: int,
    report: ReportRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return review_service.report_review(db, review_id, current_user.id, report.reason)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ======================
# SURVIVAL GUIDES
# ======================
@router.post("/survival-guides", response_model=PendingGuideResponse, status_code=status.HTTP_201_CREATED)
def submit_survival_guide(
    payload: SurvivalGuideSubmit,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return review_service.submit_survival_guide(db, current_user.id, payload.course_id, payload.survival_guide)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/survival-guides/mine/{course_id}", response_model=List[PendingGuideResponse])
def get_my_pending_guides(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return review_service.get_my_pending_guides(db, current_user.id, course_id)
