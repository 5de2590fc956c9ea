import logging

from sqlalchemy import func, distinct

from classes.errors import ValidationError, NotFoundError, ConflictError
from classes.validators import validate_email, validate_password, sanitize_input
from models import db
from models.certificates import Certificate
from models.courses import Course
from models.course_assignments import CourseAssignment
from models.users import User, ROLE_STUDENT, ROLE_MENTOR, ROLE_ADMIN

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (ROLE_STUDENT, ROLE_MENTOR)


class UserManager:
    @staticmethod
    def register(email, password, full_name, role=ROLE_STUDENT, password_min_length=8):
        """Students are approved on sign-up; mentors wait for an admin."""
        if not email or not password or not full_name:
            raise ValidationError("All fields are required")

        if not validate_email(email):
            raise ValidationError("Invalid email format")

        valid, message = validate_password(password, password_min_length)
        if not valid:
            raise ValidationError(message)

        role = role or ROLE_STUDENT
        if role not in SELF_REGISTER_ROLES:
            raise ValidationError("Invalid role. Must be 'student' or 'mentor'")

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            full_name=sanitize_input(full_name),
            role=role,
            is_approved=(role == ROLE_STUDENT),
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        logger.info("Registered %s %s", role, user.id)
        return user

    @staticmethod
    def authenticate(email, password):
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError("Email and password are required")
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user or not user.check_password(password):
            return None
        return user

    @staticmethod
    def get_user(user_id):
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def list_users():
        return User.query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def approve_mentor(user_id):
        user = UserManager.get_user(user_id)
        if user.role != ROLE_MENTOR:
            raise ValidationError("User is not a mentor")
        if user.is_approved:
            raise ConflictError("Mentor is already approved")

        user.is_approved = True
        db.session.commit()
        logger.info("Mentor %s approved", user_id)
        return user

    @staticmethod
    def reject_mentor(user_id):
        user = UserManager.get_user(user_id)
        if user.role != ROLE_MENTOR:
            raise ValidationError("User is not a mentor")

        db.session.delete(user)
        db.session.commit()
        logger.info("Mentor %s rejected and removed", user_id)

    @staticmethod
    def delete_user(user_id):
        user = UserManager.get_user(user_id)
        db.session.delete(user)
        db.session.commit()
        logger.info("User %s deleted", user_id)

    @staticmethod
    def create_admin(email, full_name, password):
        """Creates an admin account, or promotes the existing account with that email."""
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, full_name=full_name)
            db.session.add(user)
        user.role = ROLE_ADMIN
        user.is_approved = True
        user.set_password(password)
        db.session.commit()
        return user

    @staticmethod
    def platform_analytics():
        def count_users(role, approved=None):
            q = User.query.filter_by(role=role)
            if approved is not None:
                q = q.filter_by(is_approved=approved)
            return q.count()

        top_courses = (
            db.session.query(
                Course.id,
                Course.title,
                func.count(distinct(CourseAssignment.student_id)).label("enrolled_students"),
                func.count(distinct(Certificate.student_id)).label("completed_students"),
            )
            .outerjoin(CourseAssignment, CourseAssignment.course_id == Course.id)
            .outerjoin(Certificate, Certificate.course_id == Course.id)
            .group_by(Course.id, Course.title)
            .order_by(func.count(distinct(CourseAssignment.student_id)).desc(), Course.id.asc())
            .limit(10)
            .all()
        )

        return {
            "users": {
                "total_students": count_users(ROLE_STUDENT),
                "total_mentors": count_users(ROLE_MENTOR, approved=True),
                "pending_mentors": count_users(ROLE_MENTOR, approved=False),
            },
            "courses": {"total_courses": Course.query.count()},
            "certificates": {"total_certificates": Certificate.query.count()},
            "top_courses": [
                {
                    "id": row.id,
                    "title": row.title,
                    "enrolled_students": row.enrolled_students,
                    "completed_students": row.completed_students,
                }
                for row in top_courses
            ],
        }
