# coursereview/schemas/__init__.py

# User schemas
from .user import User

# Auth schemas
from .auth import Token, TokenData, LoginRequest, UserRegister

# Review schemas
from .review import (
    ReviewCreate,
    ReviewUpdate,
    ReviewResponse,
    ReviewSubmitResponse,
    VoteRequest,
    VoteResponse,
    ReportRequest,
    ReportResponse,
)

# Catalog schemas
from .catalog import (
    FacultySummary,
    CourseSummary,
    CourseDetail,
    InstructorBrief,
    FacultyRequestCreate,
)

# Grade schemas
from .grade import GradeBoundaries, GradeYear, GradeDistributionCreate

# Moderation schemas
from .moderation import TagCreate, TagSuggestion, TagApproval, TagResponse, FileResponse, DashboardStats

__all__ = [
    "User",
    "Token",
    "TokenData",
    "LoginRequest",
    "UserRegister",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewSubmitResponse",
    "VoteRequest",
    "VoteResponse",
    "ReportRequest",
    "ReportResponse",
    "FacultySummary",
    "CourseSummary",
    "CourseDetail",
    "InstructorBrief",
    "FacultyRequestCreate",
    "GradeBoundaries",
    "GradeYear",
    "GradeDistributionCreate",
    "TagCreate",
    "TagSuggestion",
    "TagApproval",
    "TagResponse",
    "FileResponse",
    "DashboardStats",
]
