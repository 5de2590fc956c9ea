import logging

from sqlalchemy import func, distinct, case

from classes.access_policy import is_allowed
from classes.enrolment_manager import EnrolmentManager
from classes.errors import ValidationError, NotFoundError, ForbiddenError
from classes.validators import sanitize_input, validate_length
from models import db
from models.chapters import Chapter
from models.courses import Course
from models.course_assignments import CourseAssignment
from models.progress import Progress
from models.users import User, ROLE_MENTOR, ROLE_STUDENT

logger = logging.getLogger(__name__)


class CourseManager:
    @staticmethod
    def get_owned_course(course_id, mentor_id, action="course:update"):
        """Missing and foreign courses look the same to the caller."""
        course = db.session.get(Course, course_id)
        owns = course is not None and course.mentor_id == mentor_id
        if not is_allowed(ROLE_MENTOR, action, owns_resource=owns):
            raise NotFoundError("Course not found or unauthorized")
        return course

    @staticmethod
    def create_course(mentor_id, title, description):
        if not title or not description:
            raise ValidationError("Title and description are required")

        mentor = User.query.filter_by(id=mentor_id, role=ROLE_MENTOR).first()
        if not mentor or not mentor.is_approved:
            raise ForbiddenError("Only approved mentors can create courses")

        title = sanitize_input(title)
        validate_length("Title", title, 255)

        course = Course(title=title, description=sanitize_input(description), mentor_id=mentor_id)
        db.session.add(course)
        db.session.commit()

        logger.info("Mentor %s created course %s", mentor_id, course.id)
        return course

    @staticmethod
    def update_course(course_id, mentor_id, title=None, description=None):
        course = CourseManager.get_owned_course(course_id, mentor_id, "course:update")

        if title:
            title = sanitize_input(title)
            validate_length("Title", title, 255)
            course.title = title
        if description:
            course.description = sanitize_input(description)

        db.session.commit()
        return course

    @staticmethod
    def delete_course(course_id, mentor_id):
        course = CourseManager.get_owned_course(course_id, mentor_id, "course:delete")
        db.session.delete(course)
        db.session.commit()
        logger.info("Mentor %s deleted course %s", mentor_id, course_id)

    @staticmethod
    def get_course(course_id, user_id, role):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        if role == ROLE_STUDENT:
            if not is_allowed(role, "course:view", EnrolmentManager.is_enrolled(course_id, user_id)):
                raise ForbiddenError("You are not enrolled in this course")
        elif not is_allowed(role, "course:view", course.mentor_id == user_id):
            raise ForbiddenError("You can only access your own courses")

        return {**course.to_dict(), "mentor_name": course.mentor.full_name}

    @staticmethod
    def get_my_courses(user_id, role):
        if role == ROLE_MENTOR:
            rows = (
                db.session.query(
                    Course,
                    func.count(distinct(CourseAssignment.student_id)).label("enrolled_students"),
                    func.count(distinct(Chapter.id)).label("total_chapters"),
                )
                .outerjoin(CourseAssignment, CourseAssignment.course_id == Course.id)
                .outerjoin(Chapter, Chapter.course_id == Course.id)
                .filter(Course.mentor_id == user_id)
                .group_by(Course.id)
                .order_by(Course.created_at.desc(), Course.id.desc())
                .all()
            )
            return [
                {**course.to_dict(), "enrolled_students": enrolled, "total_chapters": total}
                for course, enrolled, total in rows
            ]

        if role == ROLE_STUDENT:
            rows = (
                db.session.query(
                    Course,
                    User.full_name.label("mentor_name"),
                    func.count(distinct(Chapter.id)).label("total_chapters"),
                    func.count(distinct(case((Progress.completed.is_(True), Progress.id)))).label("completed_chapters"),
                )
                .join(CourseAssignment, CourseAssignment.course_id == Course.id)
                .join(User, User.id == Course.mentor_id)
                .outerjoin(Chapter, Chapter.course_id == Course.id)
                .outerjoin(
                    Progress,
                    (Progress.chapter_id == Chapter.id) & (Progress.student_id == CourseAssignment.student_id),
                )
                .filter(CourseAssignment.student_id == user_id)
                .group_by(Course.id, User.full_name, CourseAssignment.assigned_at, CourseAssignment.id)
                .order_by(CourseAssignment.assigned_at.desc(), CourseAssignment.id.desc())
                .all()
            )
            return [
                {
                    **course.to_dict(),
                    "mentor_name": mentor_name,
                    "total_chapters": total,
                    "completed_chapters": completed,
                }
                for course, mentor_name, total, completed in rows
            ]

        raise ForbiddenError("Invalid role for this operation")
