# coursereview/models/__init__.py
# Import models in dependency order
from .user import User
from .catalog import Faculty, Course, Instructor, CourseInstructor, FacultyRequest
from .review import Review, ReviewVote, ReviewReport
from .tag import Tag, ReviewTag, PendingTag
from .survival_guide import PendingSurvivalGuide
from .file import CourseFile, FileReport
from .grade import GradeDistribution

__all__ = [
    "User",
    "Faculty",
    "Course",
    "Instructor",
    "CourseInstructor",
    "FacultyRequest",
    "Review",
    "ReviewVote",
    "ReviewReport",
    "Tag",
    "ReviewTag",
    "PendingTag",
    "PendingSurvivalGuide",
    "CourseFile",
    "FileReport",
    "GradeDistribution",
]
