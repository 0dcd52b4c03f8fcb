from typing import Dict, Optional

from pydantic import BaseModel, Field

from coursereview.constants import FileType, TagType


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    type: TagType


class TagSuggestion(TagCreate):
    course_id: Optional[int] = None


class TagApproval(BaseModel):
    """Optional overrides applied when approving a suggestion"""
    name: Optional[str] = Field(None, min_length=1, max_length=60)
    type: Optional[TagType] = None


class TagResponse(BaseModel):
    id: int
    name: str
    name_tr: Optional[str] = None
    type: str
    is_verified: bool


class FileResponse(BaseModel):
    id: int
    course_id: int
    user_id: Optional[int] = None
    type: FileType
    file_name: str
    file_url: str
    content_type: Optional[str] = None
    size: Optional[int] = None
    is_verified: bool
    report_count: int = 0
    created_at: Optional[str] = None


class DashboardStats(BaseModel):
    users: int
    courses: int
    reviews: Dict[str, int]
    files: Dict[str, int]
    pending: Dict[str, int]
    tags: int
