import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from classes.access_policy import is_allowed
from classes.enrolment_manager import EnrolmentManager
from classes.errors import NotFoundError, ForbiddenError, ConflictError
from models import db
from models.chapters import Chapter
from models.courses import Course
from models.course_assignments import CourseAssignment
from models.progress import Progress
from models.users import ROLE_STUDENT

logger = logging.getLogger(__name__)

STATE_LOCKED = "locked"
STATE_UNLOCKED = "unlocked-incomplete"
STATE_COMPLETED = "completed"


def completion_percentage(completed, total):
    """completed / total * 100, rounded half-up to 2 places. A course without chapters is 0%."""
    if not total:
        return 0.0
    value = Decimal(completed) * 100 / Decimal(total)
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def derive_chapter_state(sequence_order, completed, previous_completed):
    if completed:
        return STATE_COMPLETED
    if sequence_order == 1 or previous_completed:
        return STATE_UNLOCKED
    return STATE_LOCKED


def derive_unlock_flags(chapters, completed_orders):
    """
    Computes the per-chapter view for one student.

    `chapters` is any iterable of objects with a `sequence_order`;
    `completed_orders` is the set of sequence orders the student has completed.
    Returns (chapter, completed, is_unlocked) tuples in sequence order.
    """
    rows = []
    for chapter in sorted(chapters, key=lambda c: c.sequence_order):
        order = chapter.sequence_order
        completed = order in completed_orders
        is_unlocked = order == 1 or (order - 1) in completed_orders
        rows.append((chapter, completed, is_unlocked))
    return rows


class ProgressManager:
    @staticmethod
    def course_completion(student_id, course_id):
        """Aggregate completion for one (student, course) pair."""
        total_chapters = Chapter.query.filter_by(course_id=course_id).count()
        completed_chapters = (
            db.session.query(func.count(Progress.id))
            .join(Chapter, Chapter.id == Progress.chapter_id)
            .filter(
                Chapter.course_id == course_id,
                Progress.student_id == student_id,
                Progress.completed.is_(True),
            )
            .scalar()
        ) or 0

        return {
            "total_chapters": total_chapters,
            "completed_chapters": completed_chapters,
            "percentage": completion_percentage(completed_chapters, total_chapters),
        }

    @staticmethod
    def _require_enrollment(student_id, course_id, action):
        enrolled = EnrolmentManager.is_enrolled(course_id, student_id)
        if not is_allowed(ROLE_STUDENT, action, owns_resource=enrolled):
            raise ForbiddenError("You are not enrolled in this course")

    @staticmethod
    def _previous_chapter_completed(student_id, chapter):
        if chapter.sequence_order == 1:
            return True

        previous = (
            db.session.query(Progress.completed)
            .join(Chapter, Chapter.id == Progress.chapter_id)
            .filter(
                Chapter.course_id == chapter.course_id,
                Chapter.sequence_order == chapter.sequence_order - 1,
                Progress.student_id == student_id,
            )
            .first()
        )
        return bool(previous and previous.completed)

    @staticmethod
    def chapter_state(student_id, chapter):
        record = Progress.query.filter_by(student_id=student_id, chapter_id=chapter.id).first()
        return derive_chapter_state(
            chapter.sequence_order,
            bool(record and record.completed),
            ProgressManager._previous_chapter_completed(student_id, chapter),
        )

    @staticmethod
    def complete_chapter(student_id, chapter_id):
        """Moves a chapter from unlocked-incomplete to completed for the student."""
        chapter = db.session.get(Chapter, chapter_id)
        if not chapter:
            raise NotFoundError("Chapter not found")

        ProgressManager._require_enrollment(student_id, chapter.course_id, "progress:complete")

        if not ProgressManager._previous_chapter_completed(student_id, chapter):
            raise ForbiddenError(
                "Cannot complete chapter",
                message="You must complete the previous chapter first",
            )

        now = datetime.now(timezone.utc)
        existing = Progress.query.filter_by(student_id=student_id, chapter_id=chapter.id).first()

        if existing and existing.completed:
            raise ConflictError("Chapter already completed")

        if existing:
            # only the request that flips completed=false wins
            result = db.session.execute(
                update(Progress)
                .where(Progress.id == existing.id, Progress.completed.is_(False))
                .values(completed=True, completed_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.session.rollback()
                raise ConflictError("Chapter already completed")
            db.session.commit()
            db.session.refresh(existing)
            progress = existing
        else:
            progress = Progress(
                student_id=student_id,
                chapter_id=chapter.id,
                course_id=chapter.course_id,
                completed=True,
                completed_at=now,
            )
            db.session.add(progress)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                raise ConflictError("Chapter already completed")

        logger.info("Student %s completed chapter %s of course %s", student_id, chapter.id, chapter.course_id)

        return {
            "progress": progress.to_dict(),
            "completion": ProgressManager.course_completion(student_id, chapter.course_id),
        }

    @staticmethod
    def chapters_with_progress(student_id, course_id):
        """Ordered chapters of a course with the student's completion and derived unlock flag."""
        chapters = Chapter.query.filter_by(course_id=course_id).order_by(Chapter.sequence_order.asc()).all()
        records = {
            p.chapter_id: p
            for p in Progress.query.filter_by(student_id=student_id, course_id=course_id).all()
        }
        completed_orders = {
            c.sequence_order for c in chapters
            if c.id in records and records[c.id].completed
        }

        rows = []
        for chapter, completed, is_unlocked in derive_unlock_flags(chapters, completed_orders):
            record = records.get(chapter.id)
            rows.append({
                **chapter.to_dict(),
                "completed": completed,
                "completed_at": record.completed_at if record else None,
                "is_unlocked": is_unlocked,
            })
        return rows

    @staticmethod
    def get_course_progress(student_id, course_id):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        ProgressManager._require_enrollment(student_id, course_id, "progress:view")

        chapters = ProgressManager.chapters_with_progress(student_id, course_id)
        completed_chapters = sum(1 for c in chapters if c["completed"])

        return {
            "course_id": course.id,
            "course_title": course.title,
            "total_chapters": len(chapters),
            "completed_chapters": completed_chapters,
            "percentage": completion_percentage(completed_chapters, len(chapters)),
            "chapters": chapters,
        }

    @staticmethod
    def get_my_progress(student_id, course_id=None):
        """One course's progress, or a summary for every enrolled course, most recent enrollment first."""
        if course_id is not None:
            return ProgressManager.get_course_progress(student_id, course_id)

        enrolled = (
            db.session.query(Course, CourseAssignment.assigned_at)
            .join(CourseAssignment, CourseAssignment.course_id == Course.id)
            .filter(CourseAssignment.student_id == student_id)
            .order_by(CourseAssignment.assigned_at.desc(), CourseAssignment.id.desc())
            .all()
        )

        return [
            {
                "course_id": course.id,
                "course_title": course.title,
                "assigned_at": assigned_at,
                **ProgressManager.course_completion(student_id, course.id),
            }
            for course, assigned_at in enrolled
        ]

    @staticmethod
    def reset_progress(student_id, course_id):
        """Deletes every progress row for the pair. Enrollment is left untouched."""
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        ProgressManager._require_enrollment(student_id, course_id, "progress:reset")

        deleted = (
            Progress.query
            .filter_by(student_id=student_id, course_id=course_id)
            .delete(synchronize_session=False)
        )
        db.session.commit()

        logger.info("Student %s reset progress on course %s (%s rows)", student_id, course_id, deleted)
        return deleted
