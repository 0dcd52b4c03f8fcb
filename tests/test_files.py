# tests/test_files.py
"""
Object storage backends and the course file upload flow.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coursereview.crud import file as file_crud
from coursereview.database import Base
from coursereview.models.catalog import Course, Faculty
from coursereview.models.file import CourseFile
from coursereview.models.user import User
from coursereview.services import file_service
from coursereview.services.storage import LocalStorage, ObjectStorage, StorageError

PDF = "application/pdf"


@pytest.fixture
def db_session():
    """Create test database session"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path), "http://testserver/files/raw/")


@pytest.fixture
def setup_data(db_session):
    uploader = User(name="Uploader", email="uploader@ogr.iuc.edu.tr", password_hash="hash")
    other = User(name="Other", email="other@ogr.iuc.edu.tr", password_hash="hash")
    faculty = Faculty(name="Engineering")
    db_session.add_all([uploader, other, faculty])
    db_session.flush()
    course = Course(faculty_id=faculty.id, code="CENG202", name="Algorithms")
    db_session.add(course)
    db_session.commit()
    return {"uploader": uploader, "other": other, "course": course}


# ======================
# LOCAL STORAGE
# ======================

def test_local_storage_put_and_remove(storage, tmp_path):
    url = storage.put("7/notes.pdf", b"%PDF-1.4")

    assert url == "http://testserver/files/raw/7/notes.pdf"
    assert (tmp_path / "7" / "notes.pdf").read_bytes() == b"%PDF-1.4"

    storage.remove("7/notes.pdf")
    assert not (tmp_path / "7" / "notes.pdf").exists()


def test_local_storage_remove_missing_object_is_a_no_op(storage, tmp_path):
    storage.remove("7/missing.pdf")

    assert not (tmp_path / "7" / "missing.pdf").exists()


def test_storage_base_class_is_abstract():
    with pytest.raises(TypeError):
        ObjectStorage()


@pytest.mark.parametrize("path", ["", "/etc/passwd", "../outside.pdf", "7/../../outside.pdf"])
def test_local_storage_rejects_unsafe_paths(storage, path):
    with pytest.raises(StorageError):
        storage.put(path, b"data")


def test_storage_path_layout():
    path = file_service.build_storage_path(12, "Lecture Notes.PDF")
    course_dir, name = path.split("/")

    assert course_dir == "12"
    assert name.endswith(".pdf")
    assert name.split("-")[0].isdigit()

    assert file_service.build_storage_path(12, "scan", "image/png").endswith(".png")


# ======================
# UPLOAD
# ======================

def test_upload_is_stored_and_pending(db_session, storage, setup_data, tmp_path):
    course, uploader = setup_data["course"], setup_data["uploader"]

    result = file_service.upload_file(
        db_session, storage, course.id, uploader.id, "notes", "week1.pdf", b"%PDF-1.4", PDF
    )

    assert result["is_verified"] is False
    assert result["size"] == 8
    record = db_session.query(CourseFile).one()
    assert (tmp_path / record.file_path).exists()
    # pending files are not listed publicly
    assert file_service.list_course_files(db_session, course.id) == []


@pytest.mark.parametrize(
    "file_type, data, content_type, message",
    [
        ("lecture", b"data", PDF, "type must be one of"),
        ("notes", b"", PDF, "empty"),
        ("notes", b"data", "application/zip", "not allowed"),
    ],
)
def test_upload_validation(db_session, storage, setup_data, file_type, data, content_type, message):
    with pytest.raises(ValueError, match=message):
        file_service.upload_file(
            db_session, storage, setup_data["course"].id, setup_data["uploader"].id,
            file_type, "file.bin", data, content_type,
        )


def test_upload_size_limit(db_session, storage, setup_data, monkeypatch):
    monkeypatch.setattr(file_service.settings, "MAX_FILE_SIZE", 4)

    with pytest.raises(ValueError, match="limit"):
        file_service.upload_file(
            db_session, storage, setup_data["course"].id, setup_data["uploader"].id,
            "notes", "big.pdf", b"12345", PDF,
        )


def test_upload_unknown_course(db_session, storage, setup_data):
    with pytest.raises(LookupError):
        file_service.upload_file(db_session, storage, 999, setup_data["uploader"].id, "notes", "a.pdf", b"x", PDF)


def test_failed_metadata_insert_removes_stored_object(db_session, storage, setup_data, tmp_path, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(file_crud, "create_file", explode)

    with pytest.raises(RuntimeError):
        file_service.upload_file(
            db_session, storage, setup_data["course"].id, setup_data["uploader"].id,
            "notes", "week1.pdf", b"%PDF-1.4", PDF,
        )

    assert list((tmp_path / str(setup_data["course"].id)).iterdir()) == []


# ======================
# DELETE & REPORT
# ======================

def test_only_uploader_or_admin_can_delete(db_session, storage, setup_data, tmp_path):
    course, uploader, other = setup_data["course"], setup_data["uploader"], setup_data["other"]
    uploaded = file_service.upload_file(
        db_session, storage, course.id, uploader.id, "notes", "week1.pdf", b"%PDF-1.4", PDF
    )

    with pytest.raises(ValueError):
        file_service.delete_file(db_session, storage, uploaded["id"], other.id)

    file_service.delete_file(db_session, storage, uploaded["id"], uploader.id)

    assert db_session.query(CourseFile).count() == 0
    assert list((tmp_path / str(course.id)).iterdir()) == []


def test_owner_can_delete_file_whose_object_is_already_gone(db_session, storage, setup_data, tmp_path):
    course, uploader = setup_data["course"], setup_data["uploader"]
    uploaded = file_service.upload_file(
        db_session, storage, course.id, uploader.id, "notes", "week1.pdf", b"%PDF-1.4", PDF
    )
    record = db_session.get(CourseFile, uploaded["id"])
    (tmp_path / record.file_path).unlink()

    result = file_service.delete_file(db_session, storage, uploaded["id"], uploader.id)

    assert result["message"] == "File deleted successfully"
    assert db_session.query(CourseFile).count() == 0


def test_admin_can_delete_any_file(db_session, storage, setup_data):
    uploaded = file_service.upload_file(
        db_session, storage, setup_data["course"].id, setup_data["uploader"].id,
        "notes", "week1.pdf", b"%PDF-1.4", PDF,
    )

    file_service.delete_file(db_session, storage, uploaded["id"], setup_data["other"].id, is_admin=True)

    assert db_session.query(CourseFile).count() == 0


def test_report_file(db_session, storage, setup_data):
    uploaded = file_service.upload_file(
        db_session, storage, setup_data["course"].id, setup_data["uploader"].id,
        "notes", "week1.pdf", b"%PDF-1.4", PDF,
    )

    result = file_service.report_file(db_session, uploaded["id"], setup_data["other"].id, "Wrong course")

    assert result["report_count"] == 1
    with pytest.raises(LookupError):
        file_service.report_file(db_session, 999, setup_data["other"].id)
