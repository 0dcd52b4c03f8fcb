# tests/test_api_workflow.py
"""
End-to-end HTTP workflow against the FastAPI app with an in-memory
database and a temporary storage directory.

Covers:
1) Registration domain check and login
2) Review submission, voting and the stats threshold
3) Admin-scoped tokens on moderation endpoints
4) File upload and moderation
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coursereview.config import settings
from coursereview.database import Base, get_db
from coursereview.main import app
from coursereview.models.catalog import Course, Faculty
from coursereview.models.user import User
from coursereview.services.storage import LocalStorage, get_storage

PASSWORD = "Password@123"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def client(session_factory, tmp_path):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    storage = LocalStorage(str(tmp_path), "http://testserver/files/raw")
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def course_id(session_factory):
    db = session_factory()
    try:
        faculty = Faculty(name="Engineering")
        db.add(faculty)
        db.flush()
        course = Course(faculty_id=faculty.id, code="CENG101", name="Intro to Programming")
        db.add(course)
        db.commit()
        return course.id
    finally:
        db.close()


def register(client, email, name="Student"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": PASSWORD})


def login(client, email, path="/auth/login"):
    response = client.post(path, json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def make_admin(session_factory, email):
    db = session_factory()
    try:
        user = db.query(User).filter(User.email == email).one()
        user.role = "admin"
        db.commit()
    finally:
        db.close()


def review_payload(course_id, **overrides):
    payload = {
        "course_id": course_id,
        "difficulty": 3,
        "usefulness": 4,
        "workload": 2,
        "material_relevance": 4,
        "exam_predictability": 3,
        "attendance": 1,
        "difficulty_value_alignment": "well_balanced",
        "midterm_format": "classical",
        "final_format": "test",
        "extra_assessments": ["lab"],
        "comment": "Good intro course",
    }
    payload.update(overrides)
    return payload


# ======================
# AUTH
# ======================

def test_registration_requires_university_email(client):
    rejected = register(client, "someone@gmail.com")
    assert rejected.status_code == 400
    assert "ogr.iuc.edu.tr" in rejected.json()["detail"]

    accepted = register(client, "Ayse@OGR.IUC.EDU.TR")
    assert accepted.status_code == 201

    duplicate = register(client, "ayse@ogr.iuc.edu.tr")
    assert duplicate.status_code == 400


def test_login_and_me(client):
    register(client, "ayse@ogr.iuc.edu.tr", name="Ayse")
    token = login(client, "ayse@ogr.iuc.edu.tr")

    me = client.get("/auth/me", headers=auth(token))

    assert me.status_code == 200
    assert me.json()["email"] == "ayse@ogr.iuc.edu.tr"

    bad = client.post("/auth/login", json={"email": "ayse@ogr.iuc.edu.tr", "password": "wrong-password"})
    assert bad.status_code == 401


# ======================
# REVIEWS & STATS
# ======================

def test_review_vote_and_stats_flow(client, course_id):
    register(client, "author@ogr.iuc.edu.tr")
    register(client, "voter@ogr.iuc.edu.tr")
    author = login(client, "author@ogr.iuc.edu.tr")
    voter = login(client, "voter@ogr.iuc.edu.tr")

    unauthenticated = client.post("/reviews/", json=review_payload(course_id))
    assert unauthenticated.status_code == 401

    created = client.post("/reviews/", json=review_payload(course_id), headers=auth(author))
    assert created.status_code == 201, created.text
    review_id = created.json()["review"]["id"]

    again = client.post("/reviews/", json=review_payload(course_id), headers=auth(author))
    assert again.status_code == 400

    invalid = client.post("/reviews/", json=review_payload(course_id, attendance=3), headers=auth(voter))
    assert invalid.status_code == 422

    vote = client.post(f"/reviews/{review_id}/vote", json={"vote_type": "helpful"}, headers=auth(voter))
    assert vote.status_code == 200
    assert vote.json()["action"] == "added"

    listing = client.get(f"/reviews/course/{course_id}", headers=auth(voter))
    assert listing.status_code == 200
    assert listing.json()[0]["user_vote"] == "helpful"

    stats = client.get(f"/courses/{course_id}/stats")
    assert stats.status_code == 200
    assert stats.json()["available"] is False
    assert stats.json()["total_reviews"] == 1

    grades = client.get(f"/courses/{course_id}/grades")
    assert grades.status_code == 200
    assert grades.json()["mode"] == "default"


def test_unknown_course_is_404(client):
    assert client.get("/courses/999/stats").status_code == 404
    assert client.get("/catalog/courses/999").status_code == 404
    assert client.get("/courses/999/grades").status_code == 404
    assert client.get("/courses/999/grades/years").status_code == 404


# ======================
# ADMIN
# ======================

def test_admin_endpoints_require_admin_scope(client, session_factory):
    register(client, "student@ogr.iuc.edu.tr")
    register(client, "admin@ogr.iuc.edu.tr", name="Admin")
    make_admin(session_factory, "admin@ogr.iuc.edu.tr")

    student = login(client, "student@ogr.iuc.edu.tr")
    assert client.get("/admin/stats", headers=auth(student)).status_code == 403

    # an admin account with an ordinary session token is still refused
    session_token = login(client, "admin@ogr.iuc.edu.tr")
    assert client.get("/admin/stats", headers=auth(session_token)).status_code == 403

    denied = client.post("/auth/admin/login", json={"email": "student@ogr.iuc.edu.tr", "password": PASSWORD})
    assert denied.status_code == 403

    admin = login(client, "admin@ogr.iuc.edu.tr", path="/auth/admin/login")
    stats = client.get("/admin/stats", headers=auth(admin))
    assert stats.status_code == 200
    assert stats.json()["users"] == 2


def test_tag_suggestion_moderation(client, session_factory):
    register(client, "student@ogr.iuc.edu.tr")
    register(client, "admin@ogr.iuc.edu.tr", name="Admin")
    make_admin(session_factory, "admin@ogr.iuc.edu.tr")
    student = login(client, "student@ogr.iuc.edu.tr")
    admin = login(client, "admin@ogr.iuc.edu.tr", path="/auth/admin/login")

    suggested = client.post("/tags/suggest", json={"name": "Great labs", "type": "positive"}, headers=auth(student))
    assert suggested.status_code == 201, suggested.text
    pending_id = suggested.json()["id"]

    assert client.get("/tags/").json() == []

    approved = client.post(f"/admin/pending/tags/{pending_id}/approve", headers=auth(admin))
    assert approved.status_code == 200
    assert [t["name"] for t in client.get("/tags/").json()] == ["Great labs"]

    twice = client.post(f"/admin/pending/tags/{pending_id}/reject", headers=auth(admin))
    assert twice.status_code == 400


def test_file_upload_and_approval(client, session_factory, course_id):
    register(client, "student@ogr.iuc.edu.tr")
    register(client, "admin@ogr.iuc.edu.tr", name="Admin")
    make_admin(session_factory, "admin@ogr.iuc.edu.tr")
    student = login(client, "student@ogr.iuc.edu.tr")
    admin = login(client, "admin@ogr.iuc.edu.tr", path="/auth/admin/login")

    uploaded = client.post(
        "/files/",
        data={"course_id": str(course_id), "type": "exam"},
        files={"file": ("midterm.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=auth(student),
    )
    assert uploaded.status_code == 201, uploaded.text
    file_id = uploaded.json()["id"]

    assert client.get(f"/files/course/{course_id}").json() == []

    approved = client.post(f"/admin/pending/files/{file_id}/approve", headers=auth(admin))
    assert approved.status_code == 200

    listed = client.get(f"/files/course/{course_id}").json()
    assert [f["id"] for f in listed] == [file_id]


def test_admin_can_delete_any_file(client, session_factory, course_id):
    register(client, "student@ogr.iuc.edu.tr")
    register(client, "admin@ogr.iuc.edu.tr", name="Admin")
    make_admin(session_factory, "admin@ogr.iuc.edu.tr")
    student = login(client, "student@ogr.iuc.edu.tr")
    admin = login(client, "admin@ogr.iuc.edu.tr", path="/auth/admin/login")

    uploaded = client.post(
        "/files/",
        data={"course_id": str(course_id), "type": "notes"},
        files={"file": ("week1.pdf", b"%PDF-1.4 notes", "application/pdf")},
        headers=auth(student),
    )
    file_id = uploaded.json()["id"]
    client.post(f"/admin/pending/files/{file_id}/approve", headers=auth(admin))

    assert client.delete(f"/admin/files/{file_id}", headers=auth(student)).status_code == 403

    deleted = client.delete(f"/admin/files/{file_id}", headers=auth(admin))
    assert deleted.status_code == 200, deleted.text
    assert client.get(f"/files/course/{course_id}").json() == []
    assert client.delete(f"/admin/files/{file_id}", headers=auth(admin)).status_code == 404


def test_oversized_upload_rejected(client, course_id, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 4)
    register(client, "student@ogr.iuc.edu.tr")
    student = login(client, "student@ogr.iuc.edu.tr")

    response = client.post(
        "/files/",
        data={"course_id": str(course_id), "type": "exam"},
        files={"file": ("midterm.pdf", b"%PDF-1.4 too large", "application/pdf")},
        headers=auth(student),
    )

    assert response.status_code == 400
    assert "limit" in response.json()["detail"]
