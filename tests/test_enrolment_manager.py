import pytest

from classes.enrolment_manager import EnrolmentManager
from classes.errors import ValidationError
from classes.progress_manager import ProgressManager
from models.course_assignments import CourseAssignment
from tests.utils import create_user, create_mentor, create_course, create_chapters, enroll


def test_batch_assignment_collects_per_student_errors(db):
    mentor = create_mentor()
    course = create_course(mentor)
    first = create_user(email="first@example.com")
    second = create_user(email="second@example.com")
    already = create_user(email="already@example.com")
    enroll(course, already)

    result = EnrolmentManager.assign_students(
        course, [first.id, 9999, mentor.id, already.id, second.id, first.id, "abc"]
    )

    assert result["successful"] == 2
    assert result["failed"] == 5
    assert sorted(a["student_id"] for a in result["assignments"]) == sorted([first.id, second.id])
    assert [e["error"] for e in result["errors"]] == [
        "Student not found",
        "Student not found",
        "Already assigned",
        "Already assigned",
        "Student not found",
    ]
    assert CourseAssignment.query.filter_by(course_id=course.id).count() == 3


@pytest.mark.parametrize("student_ids", [None, [], "1,2", {"id": 1}])
def test_batch_assignment_needs_a_list(db, student_ids):
    mentor = create_mentor()
    course = create_course(mentor)

    with pytest.raises(ValidationError):
        EnrolmentManager.assign_students(course, student_ids)


def test_enrolled_students_report_completion(db):
    mentor = create_mentor()
    course = create_course(mentor)
    a, _, _ = create_chapters(course, ["A", "B", "C"])
    keen = create_user(email="keen@example.com", full_name="Keen")
    idle = create_user(email="idle@example.com", full_name="Idle")
    enroll(course, keen)
    enroll(course, idle)
    ProgressManager.complete_chapter(keen.id, a.id)

    students = {s["full_name"]: s for s in EnrolmentManager.get_enrolled_students(course.id)}

    assert students["Keen"]["completed_chapters"] == 1
    assert students["Keen"]["total_chapters"] == 3
    assert students["Keen"]["completion_percentage"] == 33.33
    assert students["Idle"]["completion_percentage"] == 0.0


def test_is_enrolled(db):
    mentor = create_mentor()
    course = create_course(mentor)
    student = create_user()

    assert not EnrolmentManager.is_enrolled(course.id, student.id)
    enroll(course, student)
    assert EnrolmentManager.is_enrolled(course.id, student.id)


def test_batch_assignment_is_undone_when_the_commit_fails(db, monkeypatch):
    mentor = create_mentor()
    course = create_course(mentor)
    first = create_user(email="first@example.com")
    second = create_user(email="second@example.com")

    def failing_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(db.session, "commit", failing_commit)

    with pytest.raises(RuntimeError):
        EnrolmentManager.assign_students(course, [first.id, second.id])

    monkeypatch.undo()
    db.session.rollback()
    assert CourseAssignment.query.filter_by(course_id=course.id).count() == 0
