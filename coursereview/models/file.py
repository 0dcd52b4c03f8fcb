# coursereview/models/file.py
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from coursereview.database import Base


class CourseFile(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(String(20), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False, unique=True)
    file_url = Column(String(1000), nullable=False)
    content_type = Column(String(120))
    size = Column(Integer)
    # Unverified files are waiting for moderation
    is_verified = Column(Boolean, default=False, nullable=False, index=True)
    is_hidden = Column(Boolean, default=False, nullable=False)
    report_count = Column(Integer, default=0, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    course = relationship("Course", back_populates="files")
    uploader = relationship("User", back_populates="files")
    reports = relationship("FileReport", back_populates="file", cascade="all, delete-orphan")


class FileReport(Base):
    __tablename__ = "file_reports"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)

    file = relationship("CourseFile", back_populates="reports")
    reporter = relationship("User")
