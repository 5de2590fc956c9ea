import pytest

from classes.progress_manager import ProgressManager
from classes.certificate_manager import CertificateManager
from models.users import User
from tests.utils import create_user, create_mentor, create_course, create_chapters, enroll, auth_headers


@pytest.fixture()
def admin(db):
    return create_user(email="admin@example.com", role="admin", full_name="Admin")


def test_admin_routes_reject_other_roles(client, admin):
    student = create_user()
    assert client.get("/api/users", headers=auth_headers(student)).status_code == 403
    assert client.get("/api/users/analytics", headers=auth_headers(create_mentor())).status_code == 403


def test_approve_mentor_rules(client, admin):
    headers = auth_headers(admin)
    student = create_user()
    pending = create_mentor(email="pending@example.com", is_approved=False)

    assert client.put(f"/api/users/{student.id}/approve-mentor", headers=headers).status_code == 400
    assert client.put("/api/users/999/approve-mentor", headers=headers).status_code == 404

    response = client.put(f"/api/users/{pending.id}/approve-mentor", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["user"]["is_approved"] is True

    assert client.put(f"/api/users/{pending.id}/approve-mentor", headers=headers).status_code == 409


def test_reject_mentor_removes_account(client, admin, db):
    pending = create_mentor(email="pending@example.com", is_approved=False)
    pending_id = pending.id

    response = client.put(f"/api/users/{pending_id}/reject-mentor", headers=auth_headers(admin))

    assert response.status_code == 200
    assert db.session.get(User, pending_id) is None


def test_delete_user_cascades_courses(client, admin, db):
    mentor = create_mentor()
    course = create_course(mentor)
    create_chapters(course, ["A"])

    response = client.delete(f"/api/users/{mentor.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    courses = client.get("/api/users/analytics", headers=auth_headers(admin)).get_json()["analytics"]["courses"]
    assert courses["total_courses"] == 0


def test_analytics(client, admin):
    mentor = create_mentor()
    create_mentor(email="pending@example.com", is_approved=False)
    student = create_user()
    course = create_course(mentor, "Popular")
    create_course(mentor, "Empty")
    (chapter,) = create_chapters(course, ["Only"])
    enroll(course, student)
    ProgressManager.complete_chapter(student.id, chapter.id)
    CertificateManager.issue_or_fetch(student.id, course.id)

    response = client.get("/api/users/analytics", headers=auth_headers(admin))
    analytics = response.get_json()["analytics"]

    assert analytics["users"] == {"total_students": 1, "total_mentors": 1, "pending_mentors": 1}
    assert analytics["courses"]["total_courses"] == 2
    assert analytics["certificates"]["total_certificates"] == 1
    assert analytics["top_courses"][0] == {
        "id": course.id, "title": "Popular", "enrolled_students": 1, "completed_students": 1,
    }


def test_list_and_get_users(client, admin):
    student = create_user()
    headers = auth_headers(admin)

    users = client.get("/api/users", headers=headers).get_json()["users"]
    assert {u["email"] for u in users} == {"admin@example.com", "student@example.com"}

    response = client.get(f"/api/users/{student.id}", headers=headers)
    assert response.get_json()["user"]["role"] == "student"
    assert "password_hash" not in response.get_json()["user"]
