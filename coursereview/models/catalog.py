# coursereview/models/catalog.py
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship
from coursereview.database import Base


class Faculty(Base):
    __tablename__ = "faculties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    name_tr = Column(String(200))
    # Departments point at their parent faculty; top-level faculties have no parent
    parent_id = Column(Integer, ForeignKey("faculties.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    parent = relationship("Faculty", remote_side=[id], back_populates="children")
    children = relationship("Faculty", back_populates="parent")
    courses = relationship("Course", back_populates="faculty")


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(Integer, ForeignKey("faculties.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(30), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    course_type = Column(String(30))
    semester = Column(Integer)
    credit_theory = Column(Integer)
    created_at = Column(TIMESTAMP, server_default=func.now())

    faculty = relationship("Faculty", back_populates="courses")
    course_instructors = relationship("CourseInstructor", back_populates="course", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="course", cascade="all, delete-orphan")
    files = relationship("CourseFile", back_populates="course", cascade="all, delete-orphan")
    grade_distributions = relationship("GradeDistribution", back_populates="course", cascade="all, delete-orphan")


class Instructor(Base):
    __tablename__ = "instructors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    title = Column(String(50))
    created_at = Column(TIMESTAMP, server_default=func.now())

    course_instructors = relationship("CourseInstructor", back_populates="instructor", cascade="all, delete-orphan")


class CourseInstructor(Base):
    __tablename__ = "course_instructors"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("course_id", "instructor_id", name="uq_course_instructor"),
    )

    course = relationship("Course", back_populates="course_instructors")
    instructor = relationship("Instructor", back_populates="course_instructors")


class FacultyRequest(Base):
    __tablename__ = "faculty_requests"

    id = Column(Integer, primary_key=True, index=True)
    faculty_name = Column(String(200), nullable=False)
    major_name = Column(String(200))
    email = Column(String(255))
    message = Column(String(1000))
    created_at = Column(TIMESTAMP, server_default=func.now())
