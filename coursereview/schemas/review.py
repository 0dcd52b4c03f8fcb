# coursereview/schemas/review.py
"""
Review, vote and report Pydantic schemas
Request/response models with validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from coursereview.constants import DifficultyValueAlignment, ExamFormat, ExtraAssessment, VoteType


# ======================
# REVIEW SCHEMAS
# ======================

class ReviewUpdate(BaseModel):
    """Partial review update; every field optional"""
    instructor_id: Optional[int] = None
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    usefulness: Optional[int] = Field(None, ge=1, le=5)
    workload: Optional[int] = Field(None, ge=1, le=5)
    material_relevance: Optional[int] = Field(None, ge=1, le=5)
    exam_predictability: Optional[int] = Field(None, ge=1, le=5)
    attendance: Optional[int] = Field(None, description="1 = not required, 5 = required")
    grading_fairness: Optional[int] = Field(None, ge=1, le=5)
    difficulty_value_alignment: Optional[DifficultyValueAlignment] = None
    midterm_format: Optional[ExamFormat] = None
    final_format: Optional[ExamFormat] = None
    extra_assessments: Optional[List[ExtraAssessment]] = None
    comment: Optional[str] = Field(None, max_length=300)
    survival_guide: Optional[str] = Field(None, max_length=280, description="Queued for moderation")
    tag_ids: Optional[List[int]] = None

    @field_validator("attendance")
    @classmethod
    def validate_attendance(cls, v):
        if v is not None and v not in (1, 5):
            raise ValueError("attendance must be 1 (not required) or 5 (required)")
        return v

    def review_fields(self) -> Dict:
        """Review columns that were sent, with enums flattened to strings"""
        data = self.model_dump(exclude_unset=True, exclude={"survival_guide", "tag_ids"}, mode="json")
        return data


class ReviewCreate(ReviewUpdate):
    """Full review; ratings and exam formats are required"""
    course_id: int
    difficulty: int = Field(..., ge=1, le=5)
    usefulness: int = Field(..., ge=1, le=5)
    workload: int = Field(..., ge=1, le=5)
    material_relevance: int = Field(..., ge=1, le=5)
    exam_predictability: int = Field(..., ge=1, le=5)
    attendance: int = Field(..., description="1 = not required, 5 = required")
    difficulty_value_alignment: DifficultyValueAlignment
    midterm_format: ExamFormat
    final_format: ExamFormat

    def review_fields(self) -> Dict:
        return self.model_dump(exclude={"course_id", "survival_guide", "tag_ids"}, mode="json")


class TagBrief(BaseModel):
    id: int
    name: str
    type: str


class ReviewResponse(BaseModel):
    """Review as shown on a course page"""
    id: int
    course_id: int
    user_id: int
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = None
    difficulty: int
    usefulness: int
    workload: int
    material_relevance: Optional[int] = None
    exam_predictability: Optional[int] = None
    attendance: Optional[int] = None
    grading_fairness: Optional[int] = None
    difficulty_value_alignment: Optional[str] = None
    midterm_format: Optional[str] = None
    final_format: Optional[str] = None
    extra_assessments: List[str] = []
    comment: Optional[str] = None
    survival_guide: Optional[str] = None
    tags: List[TagBrief] = []
    vote_counts: Dict[str, int]
    user_vote: Optional[str] = None
    report_count: int = 0
    is_hidden: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ReviewSubmitResponse(BaseModel):
    review: ReviewResponse
    survival_guide_pending: bool = False
    message: str


class SurvivalGuideSubmit(BaseModel):
    course_id: int
    survival_guide: str = Field(..., min_length=1, max_length=280)


class PendingGuideResponse(BaseModel):
    id: int
    course_id: int
    survival_guide: str
    status: str
    created_at: Optional[str] = None


# ======================
# VOTES & REPORTS
# ======================

class VoteRequest(BaseModel):
    vote_type: VoteType


class VoteResponse(BaseModel):
    review_id: int
    action: str = Field(..., description="added, changed or removed")
    vote_type: Optional[str] = Field(None, description="Caller's vote after the toggle")
    counts: Dict[str, int]


class ReportRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReportResponse(BaseModel):
    report_id: int
    report_count: int
    message: str
