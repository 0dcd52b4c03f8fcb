from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class FacultySummary(BaseModel):
    id: int
    name: str
    name_tr: Optional[str] = None
    parent_id: Optional[int] = None
    course_count: int = 0
    child_count: int = 0


class FacultyDetail(BaseModel):
    id: int
    name: str
    name_tr: Optional[str] = None
    parent: Optional[FacultySummary] = None
    children: List[FacultySummary] = []


class InstructorBrief(BaseModel):
    id: int
    name: str
    title: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CourseSummary(BaseModel):
    id: int
    code: str
    name: str
    faculty_id: int
    course_type: Optional[str] = None
    semester: Optional[int] = None
    credit_theory: Optional[int] = None
    review_count: int = 0
    file_count: int = 0
    overall_score: Optional[float] = None


class CourseDetail(CourseSummary):
    faculty_name: Optional[str] = None
    instructors: List[InstructorBrief] = []


class InstructorWithCount(InstructorBrief):
    course_count: int = 0


class InstructorDetail(InstructorBrief):
    courses: List[CourseSummary] = []
    rollup: Optional[dict] = None


class SearchResults(BaseModel):
    courses: List[CourseSummary] = []
    instructors: List[InstructorBrief] = []


class FacultyRequestCreate(BaseModel):
    faculty_name: str = Field(..., min_length=1, max_length=200)
    major_name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    message: Optional[str] = Field(None, max_length=1000)
