import pytest

from tests.utils import create_user, create_mentor, auth_headers


@pytest.fixture()
def mentor(db):
    return create_mentor()


def _create_course(client, mentor, title="Intro to Flask"):
    response = client.post(
        "/api/courses",
        json={"title": title, "description": "Routing and blueprints"},
        headers=auth_headers(mentor),
    )
    assert response.status_code == 201
    return response.get_json()["course"]["id"]


def test_unapproved_mentor_cannot_create_course(client, db):
    pending = create_mentor(email="pending@example.com", is_approved=False)

    response = client.post(
        "/api/courses", json={"title": "T", "description": "D"}, headers=auth_headers(pending),
    )

    assert response.status_code == 403


def test_students_cannot_author(client, mentor):
    student = create_user()
    response = client.post(
        "/api/courses", json={"title": "T", "description": "D"}, headers=auth_headers(student),
    )
    assert response.status_code == 403


def test_chapter_lifecycle(client, mentor):
    headers = auth_headers(mentor)
    course_id = _create_course(client, mentor)

    ids = []
    for title in ("One", "Two", "Three", "Four"):
        response = client.post(f"/api/courses/{course_id}/chapters", json={"title": title}, headers=headers)
        assert response.status_code == 201
        ids.append(response.get_json()["chapter"]["id"])
    assert response.get_json()["chapter"]["sequence_order"] == 4

    response = client.put(
        f"/api/courses/{course_id}/chapters/{ids[3]}",
        json={"title": "Four (revised)", "sequence_order": 1},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.get_json()["chapter"]["sequence_order"] == 4

    response = client.delete(f"/api/courses/{course_id}/chapters/{ids[1]}", headers=headers)
    assert response.status_code == 200

    chapters = client.get(f"/api/courses/{course_id}/chapters", headers=headers).get_json()["chapters"]
    assert [(c["title"], c["sequence_order"]) for c in chapters] == [
        ("One", 1), ("Three", 2), ("Four (revised)", 3),
    ]


def test_foreign_course_is_hidden(client, mentor):
    course_id = _create_course(client, mentor)
    other = create_mentor(email="other@example.com")

    response = client.post(
        f"/api/courses/{course_id}/chapters", json={"title": "X"}, headers=auth_headers(other),
    )
    assert response.status_code == 404
    assert response.get_json()["error"] == "Course not found or unauthorized"

    response = client.delete(f"/api/courses/{course_id}", headers=auth_headers(other))
    assert response.status_code == 404


def test_assign_and_student_views(client, mentor):
    headers = auth_headers(mentor)
    course_id = _create_course(client, mentor)
    client.post(f"/api/courses/{course_id}/chapters", json={"title": "One"}, headers=headers)
    client.post(f"/api/courses/{course_id}/chapters", json={"title": "Two"}, headers=headers)
    student = create_user()

    response = client.post(
        f"/api/courses/{course_id}/assign", json={"student_ids": [student.id, 777]}, headers=headers,
    )
    body = response.get_json()
    assert response.status_code == 200
    assert body["successful"] == 1
    assert body["failed"] == 1

    student_headers = auth_headers(student)
    courses = client.get("/api/courses/my", headers=student_headers).get_json()["courses"]
    assert courses[0]["id"] == course_id
    assert courses[0]["total_chapters"] == 2
    assert courses[0]["completed_chapters"] == 0
    assert courses[0]["mentor_name"] == "Grace Mentor"

    chapters = client.get(f"/api/courses/{course_id}/chapters", headers=student_headers).get_json()["chapters"]
    assert [c["is_unlocked"] for c in chapters] == [True, False]

    response = client.get(f"/api/courses/{course_id}/chapters/{chapters[1]['id']}", headers=student_headers)
    assert response.status_code == 403
    assert response.get_json()["error"] == "Chapter locked"

    mentor_courses = client.get("/api/courses/my", headers=headers).get_json()["courses"]
    assert mentor_courses[0]["enrolled_students"] == 1
    assert mentor_courses[0]["total_chapters"] == 2

    students = client.get(f"/api/courses/{course_id}/students", headers=headers).get_json()["students"]
    assert students[0]["id"] == student.id
    assert students[0]["completion_percentage"] == 0.0


def test_assign_requires_a_list(client, mentor):
    course_id = _create_course(client, mentor)
    response = client.post(
        f"/api/courses/{course_id}/assign", json={"student_ids": []}, headers=auth_headers(mentor),
    )
    assert response.status_code == 400


def test_student_cannot_view_unassigned_course(client, mentor):
    course_id = _create_course(client, mentor)
    student = create_user()

    response = client.get(f"/api/courses/{course_id}", headers=auth_headers(student))

    assert response.status_code == 403


def test_update_and_delete_course(client, mentor):
    headers = auth_headers(mentor)
    course_id = _create_course(client, mentor)

    response = client.put(f"/api/courses/{course_id}", json={"title": "Renamed"}, headers=headers)
    assert response.get_json()["course"]["title"] == "Renamed"
    assert response.get_json()["course"]["description"] == "Routing and blueprints"

    assert client.delete(f"/api/courses/{course_id}", headers=headers).status_code == 200
    assert client.get(f"/api/courses/{course_id}", headers=headers).status_code == 404


def test_foreign_mentor_chapter_reads_look_missing(client, mentor):
    course_id = _create_course(client, mentor)
    chapter = client.post(
        f"/api/courses/{course_id}/chapters", json={"title": "Routing"}, headers=auth_headers(mentor),
    ).get_json()["chapter"]
    other = auth_headers(create_mentor(email="other@example.com"))

    responses = [
        client.get(f"/api/courses/{course_id}/chapters", headers=other),
        client.get(f"/api/courses/{course_id}/chapters/{chapter['id']}", headers=other),
        client.get(f"/api/courses/{course_id + 1000}/chapters", headers=other),
    ]

    assert [r.status_code for r in responses] == [404, 404, 404]
    assert {r.get_json()["error"] for r in responses} == {"Course not found or unauthorized"}
