# tests/test_moderation_service.py
"""
Moderation workflow: pending tags, survival guides and files, plus the
admin tag and review tools.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coursereview.database import Base
from coursereview.models.catalog import Course, Faculty
from coursereview.models.file import CourseFile
from coursereview.models.review import Review, ReviewVote
from coursereview.models.tag import PendingTag, ReviewTag, Tag
from coursereview.models.user import User
from coursereview.services import moderation_service
from coursereview.services.storage import ObjectStorage, StorageError


class FailingStorage(ObjectStorage):
    def __init__(self):
        self.removed = []

    def put(self, path, data, content_type=None):
        raise StorageError("bucket unavailable")

    def remove(self, path):
        self.removed.append(path)
        raise StorageError("bucket unavailable")


# ======================
# TEST DATABASE SETUP
# ======================

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
def setup_data(db_session):
    admin = User(name="Admin", email="admin@ogr.iuc.edu.tr", password_hash="hash", role="admin")
    student = User(name="Student", email="student@ogr.iuc.edu.tr", password_hash="hash")
    faculty = Faculty(name="Engineering")
    db_session.add_all([admin, student, faculty])
    db_session.flush()
    course = Course(faculty_id=faculty.id, code="CENG301", name="Operating Systems")
    db_session.add(course)
    db_session.commit()
    return {"admin": admin, "student": student, "course": course}


# ======================
# PENDING TAGS
# ======================

def test_approve_tag_creates_verified_tag(db_session, setup_data):
    pending = moderation_service.suggest_tag(db_session, setup_data["student"].id, "Great labs", "positive")

    result = moderation_service.approve_pending_tag(db_session, pending["id"], setup_data["admin"].id)

    assert result["created"] is True
    assert result["tag"]["name"] == "Great labs"
    assert result["tag"]["is_verified"] is True
    assert result["pending"]["status"] == "approved"
    assert result["pending"]["reviewed_by"] == setup_data["admin"].id


def test_approve_duplicate_tag_marks_approved_without_new_tag(db_session, setup_data):
    db_session.add(Tag(name="Heavy Workload", type="negative", is_verified=True))
    db_session.commit()
    pending = moderation_service.suggest_tag(db_session, setup_data["student"].id, "heavy workload", "negative")

    result = moderation_service.approve_pending_tag(db_session, pending["id"], setup_data["admin"].id)

    assert result["created"] is False
    assert result["pending"]["status"] == "approved"
    assert db_session.query(Tag).count() == 1


def test_approve_tag_with_rename_and_retype(db_session, setup_data):
    pending = moderation_service.suggest_tag(db_session, setup_data["student"].id, "gud prof", "negative")

    result = moderation_service.approve_pending_tag(
        db_session, pending["id"], setup_data["admin"].id, name="Good professor", tag_type="positive"
    )

    assert result["tag"]["name"] == "Good professor"
    assert result["tag"]["type"] == "positive"


def test_moderated_tag_cannot_transition_again(db_session, setup_data):
    pending = moderation_service.suggest_tag(db_session, setup_data["student"].id, "Boring", "negative")
    moderation_service.reject_pending_tag(db_session, pending["id"], setup_data["admin"].id)

    with pytest.raises(ValueError, match="already been rejected"):
        moderation_service.approve_pending_tag(db_session, pending["id"], setup_data["admin"].id)
    with pytest.raises(ValueError):
        moderation_service.reject_pending_tag(db_session, pending["id"], setup_data["admin"].id)

    assert db_session.query(PendingTag).one().status == "rejected"


def test_list_pending_tags_by_status(db_session, setup_data):
    first = moderation_service.suggest_tag(db_session, setup_data["student"].id, "One", "positive")
    moderation_service.suggest_tag(db_session, setup_data["student"].id, "Two", "positive")
    moderation_service.reject_pending_tag(db_session, first["id"], setup_data["admin"].id)

    assert [t["name"] for t in moderation_service.list_pending_tags(db_session, "pending")] == ["Two"]
    assert [t["name"] for t in moderation_service.list_pending_tags(db_session, "rejected")] == ["One"]
    with pytest.raises(ValueError):
        moderation_service.list_pending_tags(db_session, "archived")


# ======================
# SURVIVAL GUIDES
# ======================

def _queue_guide(db, user_id, course_id, text="Do every past exam"):
    from coursereview.crud import survival_guide as guide_crud

    guide = guide_crud.upsert_pending_guide(db, user_id, course_id, text)
    db.commit()
    return guide


def test_approved_guide_is_copied_to_review(db_session, setup_data):
    student, course = setup_data["student"], setup_data["course"]
    review = Review(user_id=student.id, course_id=course.id, difficulty=3, usefulness=3, workload=3)
    db_session.add(review)
    db_session.commit()
    guide = _queue_guide(db_session, student.id, course.id)

    result = moderation_service.approve_survival_guide(db_session, guide.id, setup_data["admin"].id)

    assert result["status"] == "approved"
    assert result["applied_to_review"] is True
    db_session.refresh(review)
    assert review.survival_guide == "Do every past exam"


def test_approved_guide_without_review_still_approved(db_session, setup_data):
    guide = _queue_guide(db_session, setup_data["student"].id, setup_data["course"].id)

    result = moderation_service.approve_survival_guide(db_session, guide.id, setup_data["admin"].id)

    assert result["status"] == "approved"
    assert result["applied_to_review"] is False


def test_rejected_guide_is_not_copied(db_session, setup_data):
    student, course = setup_data["student"], setup_data["course"]
    review = Review(user_id=student.id, course_id=course.id, difficulty=3, usefulness=3, workload=3)
    db_session.add(review)
    db_session.commit()
    guide = _queue_guide(db_session, student.id, course.id)

    moderation_service.reject_survival_guide(db_session, guide.id, setup_data["admin"].id)

    db_session.refresh(review)
    assert review.survival_guide is None
    with pytest.raises(ValueError):
        moderation_service.approve_survival_guide(db_session, guide.id, setup_data["admin"].id)


# ======================
# FILES
# ======================

def _pending_file(db, course_id, user_id):
    record = CourseFile(
        course_id=course_id,
        user_id=user_id,
        type="notes",
        file_name="notes.pdf",
        file_path=f"{course_id}/1700000000-abcd.pdf",
        file_url="http://localhost/files/raw/notes.pdf",
        is_verified=False,
    )
    db.add(record)
    db.commit()
    return record


def test_approve_file(db_session, setup_data):
    record = _pending_file(db_session, setup_data["course"].id, setup_data["student"].id)

    result = moderation_service.approve_file(db_session, record.id)

    assert result["is_verified"] is True
    assert moderation_service.list_pending_files(db_session) == []
    with pytest.raises(ValueError):
        moderation_service.approve_file(db_session, record.id)


def test_reject_file_deletes_row_even_when_storage_fails(db_session, setup_data):
    record = _pending_file(db_session, setup_data["course"].id, setup_data["student"].id)
    storage = FailingStorage()

    result = moderation_service.reject_file(db_session, storage, record.id)

    assert result["status"] == "rejected"
    assert storage.removed == [f"{setup_data['course'].id}/1700000000-abcd.pdf"]
    assert db_session.query(CourseFile).count() == 0


# ======================
# TAG MANAGEMENT
# ======================

def test_create_tag_rejects_duplicate_name(db_session, setup_data):
    moderation_service.create_tag(db_session, setup_data["admin"].id, "Fair grading", "positive")

    with pytest.raises(ValueError, match="already exists"):
        moderation_service.create_tag(db_session, setup_data["admin"].id, "FAIR GRADING", "positive")


def test_delete_tag_removes_review_links(db_session, setup_data):
    student, course = setup_data["student"], setup_data["course"]
    tag = moderation_service.create_tag(db_session, setup_data["admin"].id, "Fun", "positive")
    review = Review(user_id=student.id, course_id=course.id, difficulty=3, usefulness=3, workload=3)
    db_session.add(review)
    db_session.flush()
    db_session.add(ReviewTag(review_id=review.id, tag_id=tag["id"]))
    db_session.commit()

    moderation_service.delete_tag(db_session, tag["id"])

    assert db_session.query(Tag).count() == 0
    assert db_session.query(ReviewTag).count() == 0
    with pytest.raises(LookupError):
        moderation_service.delete_tag(db_session, tag["id"])


# ======================
# REVIEWS & DASHBOARD
# ======================

def test_troll_reviews_need_threshold_rage_bait_votes(db_session, setup_data):
    course = setup_data["course"]
    voters = [User(name=f"V{i}", email=f"v{i}@ogr.iuc.edu.tr", password_hash="hash") for i in range(3)]
    db_session.add_all(voters)
    db_session.flush()
    troll = Review(user_id=voters[0].id, course_id=course.id, difficulty=5, usefulness=1, workload=5)
    fine = Review(user_id=voters[1].id, course_id=course.id, difficulty=3, usefulness=3, workload=3)
    db_session.add_all([troll, fine])
    db_session.flush()
    for voter in voters:
        db_session.add(ReviewVote(review_id=troll.id, user_id=voter.id, vote_type="rage_bait"))
    db_session.add(ReviewVote(review_id=fine.id, user_id=voters[2].id, vote_type="rage_bait"))
    db_session.commit()

    trolls = moderation_service.list_troll_reviews(db_session)

    assert [r["id"] for r in trolls] == [troll.id]
    assert trolls[0]["rage_bait_count"] == 3
    assert len(moderation_service.list_troll_reviews(db_session, threshold=1)) == 2


def test_dashboard_counts(db_session, setup_data):
    moderation_service.suggest_tag(db_session, setup_data["student"].id, "New", "positive")
    _pending_file(db_session, setup_data["course"].id, setup_data["student"].id)

    stats = moderation_service.get_dashboard_stats(db_session)

    assert stats["users"] == 2
    assert stats["courses"] == 1
    assert stats["pending"]["tags"] == 1
    assert stats["files"]["pending"] == 1


def test_faculty_requests_round_trip(db_session, setup_data):
    moderation_service.submit_faculty_request(db_session, "Faculty of Law", major_name="Law")

    requests = moderation_service.list_faculty_requests(db_session)

    assert requests[0]["faculty_name"] == "Faculty of Law"
    with pytest.raises(ValueError):
        moderation_service.submit_faculty_request(db_session, "   ")
