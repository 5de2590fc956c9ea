import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from classes.access_policy import is_allowed
from classes.course_manager import CourseManager
from classes.enrolment_manager import EnrolmentManager
from classes.errors import ValidationError, NotFoundError, ForbiddenError, ConflictError
from classes.progress_manager import ProgressManager, STATE_LOCKED
from classes.validators import sanitize_input, validate_url, validate_length
from models import db
from models.chapters import Chapter
from models.progress import Progress
from models.users import ROLE_STUDENT, ROLE_MENTOR

logger = logging.getLogger(__name__)


def _check_media_urls(image_url, video_url):
    if image_url and not validate_url(image_url):
        raise ValidationError("Invalid image URL")
    if video_url and not validate_url(video_url):
        raise ValidationError("Invalid video URL")


class ChapterManager:
    @staticmethod
    def _owned_chapter(course_id, chapter_id, mentor_id, action):
        CourseManager.get_owned_course(course_id, mentor_id, action)
        chapter = Chapter.query.filter_by(id=chapter_id, course_id=course_id).first()
        if not chapter:
            raise NotFoundError("Chapter not found or unauthorized")
        return chapter

    @staticmethod
    def create_chapter(course_id, mentor_id, title, description=None, image_url=None, video_url=None):
        """Appends a chapter at the end of the course's ordering."""
        if not title:
            raise ValidationError("Title is required")
        _check_media_urls(image_url, video_url)

        CourseManager.get_owned_course(course_id, mentor_id, "chapter:create")

        title = sanitize_input(title)
        validate_length("Title", title, 255)

        chapter = Chapter(
            course_id=course_id,
            title=title,
            description=sanitize_input(description) if description else None,
            image_url=image_url or None,
            video_url=video_url or None,
            sequence_order=Chapter.get_next_order(course_id),
        )
        db.session.add(chapter)
        try:
            db.session.commit()
        except IntegrityError:
            # another chapter took the same slot first
            db.session.rollback()
            raise ConflictError("Chapter ordering changed, please retry")

        logger.info("Chapter %s created in course %s at position %s", chapter.id, course_id, chapter.sequence_order)
        return chapter

    @staticmethod
    def update_chapter(course_id, chapter_id, mentor_id, title=None, description=None, image_url=None, video_url=None):
        """Edits content fields only; sequence_order is never touched here."""
        _check_media_urls(image_url, video_url)
        chapter = ChapterManager._owned_chapter(course_id, chapter_id, mentor_id, "chapter:update")

        if title:
            title = sanitize_input(title)
            validate_length("Title", title, 255)
            chapter.title = title
        if description:
            chapter.description = sanitize_input(description)
        if image_url:
            chapter.image_url = image_url
        if video_url:
            chapter.video_url = video_url

        db.session.commit()
        return chapter

    @staticmethod
    def delete_chapter(course_id, chapter_id, mentor_id):
        """
        Removes a chapter and closes the gap it leaves in the ordering.

        The delete and the renumbering are flushed in one transaction, so no
        reader ever sees a course with a missing position.
        """
        chapter = ChapterManager._owned_chapter(course_id, chapter_id, mentor_id, "chapter:delete")
        deleted_order = chapter.sequence_order

        try:
            db.session.delete(chapter)
            db.session.flush()

            # Two passes keep (course_id, sequence_order) unique at every row update:
            # park the shifted rows on negative numbers, then flip them back.
            db.session.execute(
                update(Chapter)
                .where(Chapter.course_id == course_id, Chapter.sequence_order > deleted_order)
                .values(sequence_order=-(Chapter.sequence_order - 1))
                .execution_options(synchronize_session=False)
            )
            db.session.execute(
                update(Chapter)
                .where(Chapter.course_id == course_id, Chapter.sequence_order < 0)
                .values(sequence_order=-Chapter.sequence_order)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        db.session.expire_all()
        logger.info("Chapter %s deleted from course %s, later chapters renumbered", chapter_id, course_id)

    @staticmethod
    def get_chapters(course_id, user_id, role):
        if role == ROLE_STUDENT:
            enrolled = EnrolmentManager.is_enrolled(course_id, user_id)
            if not is_allowed(role, "chapter:view", enrolled):
                raise ForbiddenError("You are not enrolled in this course")
            return ProgressManager.chapters_with_progress(user_id, course_id)

        if role == ROLE_MENTOR:
            CourseManager.get_owned_course(course_id, user_id, "chapter:view")
            chapters = Chapter.query.filter_by(course_id=course_id).order_by(Chapter.sequence_order.asc()).all()
            return [c.to_dict() for c in chapters]

        raise ForbiddenError("Invalid role for this operation")

    @staticmethod
    def get_chapter(course_id, chapter_id, user_id, role):
        chapter = Chapter.query.filter_by(id=chapter_id, course_id=course_id).first()
        if not chapter:
            raise NotFoundError("Chapter not found")

        if role == ROLE_STUDENT:
            enrolled = EnrolmentManager.is_enrolled(course_id, user_id)
            if not is_allowed(role, "chapter:view", enrolled):
                raise ForbiddenError("You are not enrolled in this course")

            if ProgressManager.chapter_state(user_id, chapter) == STATE_LOCKED:
                raise ForbiddenError("Chapter locked", message="You must complete the previous chapter first")

            record = Progress.query.filter_by(chapter_id=chapter.id, student_id=user_id).first()
            progress = {"completed": record.completed, "completed_at": record.completed_at} if record else None
            return {**chapter.to_dict(), "progress": progress}

        if role == ROLE_MENTOR:
            CourseManager.get_owned_course(course_id, user_id, "chapter:view")
            return chapter.to_dict()

        raise ForbiddenError("Invalid role for this operation")
