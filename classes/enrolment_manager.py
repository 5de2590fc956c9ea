import logging

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from classes.errors import ValidationError
from models import db
from models.chapters import Chapter
from models.course_assignments import CourseAssignment
from models.progress import Progress
from models.users import User, ROLE_STUDENT

logger = logging.getLogger(__name__)


class EnrolmentManager:
    @staticmethod
    def is_enrolled(course_id, student_id):
        return db.session.query(
            CourseAssignment.query.filter_by(course_id=course_id, student_id=student_id).exists()
        ).scalar()

    @staticmethod
    def assign_students(course, student_ids):
        """
        Enrolls a batch of students in `course`.

        Every candidate is checked on its own and failures are collected per item;
        all successful enrollments are committed together, or none are if the
        commit itself fails.
        """
        if not isinstance(student_ids, list) or not student_ids:
            raise ValidationError("student_ids must be a non-empty array")

        assignments = []
        errors = []

        try:
            for student_id in student_ids:
                student = None
                if isinstance(student_id, int) and not isinstance(student_id, bool):
                    student = User.query.filter_by(id=student_id, role=ROLE_STUDENT).first()
                if not student:
                    errors.append({"student_id": student_id, "error": "Student not found"})
                    continue

                if EnrolmentManager.is_enrolled(course.id, student.id):
                    errors.append({"student_id": student_id, "error": "Already assigned"})
                    continue

                assignment = CourseAssignment(course_id=course.id, student_id=student.id)
                try:
                    with db.session.begin_nested():
                        db.session.add(assignment)
                except IntegrityError:
                    # duplicate in the same batch, or a concurrent assignment
                    errors.append({"student_id": student_id, "error": "Already assigned"})
                    continue

                assignments.append(assignment)

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            "Course %s assignment: %s enrolled, %s failed",
            course.id, len(assignments), len(errors),
        )

        return {
            "successful": len(assignments),
            "failed": len(errors),
            "assignments": [a.to_dict() for a in assignments],
            "errors": errors,
        }

    @staticmethod
    def get_enrolled_students(course_id):
        """Students enrolled in a course with their completion, most recent enrollment first."""
        completed_count = func.count(case((Progress.completed.is_(True), 1)))
        chapter_count = func.count(Chapter.id)

        rows = (
            db.session.query(
                User.id,
                User.email,
                User.full_name,
                CourseAssignment.assigned_at,
                chapter_count.label("total_chapters"),
                completed_count.label("completed_chapters"),
            )
            .join(CourseAssignment, CourseAssignment.student_id == User.id)
            .outerjoin(Chapter, Chapter.course_id == CourseAssignment.course_id)
            .outerjoin(
                Progress,
                (Progress.chapter_id == Chapter.id) & (Progress.student_id == User.id),
            )
            .filter(CourseAssignment.course_id == course_id)
            .group_by(User.id, User.email, User.full_name, CourseAssignment.assigned_at, CourseAssignment.id)
            .order_by(CourseAssignment.assigned_at.desc(), CourseAssignment.id.desc())
            .all()
        )

        # imported here to avoid a cycle with progress_manager
        from classes.progress_manager import completion_percentage

        return [
            {
                "id": row.id,
                "email": row.email,
                "full_name": row.full_name,
                "assigned_at": row.assigned_at,
                "total_chapters": row.total_chapters,
                "completed_chapters": row.completed_chapters,
                "completion_percentage": completion_percentage(row.completed_chapters, row.total_chapters),
            }
            for row in rows
        ]
