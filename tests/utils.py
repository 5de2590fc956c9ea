"""Factories shared by the test modules."""

from models import db
from models.chapters import Chapter
from models.courses import Course
from models.course_assignments import CourseAssignment
from models.users import User, ROLE_STUDENT, ROLE_MENTOR
from utils.tokens import get_jwt_token

PASSWORD = "Secret123"


def create_user(email="student@example.com", role=ROLE_STUDENT, full_name="Test User", is_approved=True):
    user = User(email=email, full_name=full_name, role=role, is_approved=is_approved)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


def create_mentor(email="mentor@example.com", **kwargs):
    return create_user(email=email, role=ROLE_MENTOR, full_name=kwargs.pop("full_name", "Grace Mentor"), **kwargs)


def create_course(mentor, title="Intro to Python", description="Basics"):
    course = Course(title=title, description=description, mentor_id=mentor.id)
    db.session.add(course)
    db.session.commit()
    return course


def create_chapters(course, titles):
    chapters = []
    for index, title in enumerate(titles, start=1):
        chapter = Chapter(course_id=course.id, title=title, sequence_order=index)
        db.session.add(chapter)
        chapters.append(chapter)
    db.session.commit()
    return chapters


def enroll(course, student):
    assignment = CourseAssignment(course_id=course.id, student_id=student.id)
    db.session.add(assignment)
    db.session.commit()
    return assignment


def auth_headers(user):
    token = get_jwt_token({"user_id": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
