import pytest

from classes.certificate_manager import CertificateManager
from classes.errors import ForbiddenError
from classes.progress_manager import ProgressManager
from models.certificates import Certificate
from tests.utils import create_user, create_mentor, create_course, create_chapters, enroll


@pytest.fixture()
def enrolled(db):
    mentor = create_mentor()
    student = create_user(full_name="Ada Student")
    course = create_course(mentor, "Data Structures")
    enroll(course, student)
    return student, course


def test_not_eligible_without_enrollment(db):
    mentor = create_mentor()
    course = create_course(mentor)
    create_chapters(course, ["A"])
    outsider = create_user(email="outsider@example.com")

    eligibility = CertificateManager.check_eligibility(outsider.id, course.id)

    assert eligibility["eligible"] is False
    assert eligibility["message"] == "Not enrolled in this course"


def test_empty_course_is_never_eligible(enrolled):
    student, course = enrolled

    eligibility = CertificateManager.check_eligibility(student.id, course.id)

    assert eligibility == {"eligible": False, "percentage": 0.0, "message": "Course has no chapters"}


def test_partial_completion_reports_percentage(enrolled):
    student, course = enrolled
    a, _, _ = create_chapters(course, ["A", "B", "C"])
    ProgressManager.complete_chapter(student.id, a.id)

    eligibility = CertificateManager.check_eligibility(student.id, course.id)

    assert eligibility["eligible"] is False
    assert eligibility["percentage"] == 33.33

    with pytest.raises(ForbiddenError) as excinfo:
        CertificateManager.get_certificate(student.id, course.id)
    assert excinfo.value.extra["completion_percentage"] == 33.33


def test_issue_or_fetch_is_idempotent(enrolled):
    student, course = enrolled
    for chapter in create_chapters(course, ["A", "B"]):
        ProgressManager.complete_chapter(student.id, chapter.id)

    assert CertificateManager.check_eligibility(student.id, course.id)["eligible"] is True

    first = CertificateManager.issue_or_fetch(student.id, course.id)
    second = CertificateManager.issue_or_fetch(student.id, course.id)

    assert first.id == second.id
    assert Certificate.query.filter_by(student_id=student.id, course_id=course.id).count() == 1


def test_get_certificate_and_listing(enrolled):
    student, course = enrolled
    for chapter in create_chapters(course, ["A"]):
        ProgressManager.complete_chapter(student.id, chapter.id)

    certificate = CertificateManager.get_certificate(student.id, course.id)
    status = CertificateManager.get_status(student.id, course.id)
    listing = CertificateManager.get_my_certificates(student.id)

    assert certificate["student_name"] == "Ada Student"
    assert certificate["course_title"] == "Data Structures"
    assert status["has_certificate"] is True
    assert status["certificate"]["id"] == certificate["id"]
    assert [c["id"] for c in listing] == [certificate["id"]]
    assert listing[0]["mentor_name"] == "Grace Mentor"


def test_issue_race_returns_the_existing_certificate(enrolled, db, monkeypatch):
    student, course = enrolled
    for chapter in create_chapters(course, ["A"]):
        ProgressManager.complete_chapter(student.id, chapter.id)
    winner = Certificate(student_id=student.id, course_id=course.id)
    db.session.add(winner)
    db.session.commit()

    lookup = CertificateManager.find_certificate
    calls = []

    def find_after_concurrent_issue(student_id, course_id):
        calls.append(course_id)
        if len(calls) == 1:
            return None
        return lookup(student_id, course_id)

    monkeypatch.setattr(CertificateManager, "find_certificate", find_after_concurrent_issue)

    certificate = CertificateManager.issue_or_fetch(student.id, course.id)

    assert certificate.id == winner.id
    assert len(calls) == 2
    assert Certificate.query.filter_by(student_id=student.id, course_id=course.id).count() == 1
