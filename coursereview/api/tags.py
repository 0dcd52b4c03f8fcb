from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.moderation import TagResponse, TagSuggestion
from coursereview.services import moderation_service
from coursereview.utils.security import get_current_user

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=List[TagResponse])
def list_tags(db: Session = Depends(get_db)):
    """Verified tags available for reviews"""
    return moderation_service.list_tags(db, verified_only=True)


@router.post("/suggest", status_code=status.HTTP_201_CREATED)
def suggest_tag(
    payload: TagSuggestion,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Suggest a new tag; it becomes usable once a moderator approves it"""
    try:
        return moderation_service.suggest_tag(
            db,
            user_id=current_user.id,
            name=payload.name,
            suggested_type=payload.type.value,
            course_id=payload.course_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
