import logging

from sqlalchemy.exc import IntegrityError

from classes.enrolment_manager import EnrolmentManager
from classes.errors import ForbiddenError, NotFoundError
from classes.progress_manager import ProgressManager
from models import db
from models.certificates import Certificate
from models.courses import Course
from models.users import User

logger = logging.getLogger(__name__)


class CertificateManager:
    @staticmethod
    def check_eligibility(student_id, course_id):
        """Eligible only when enrolled and every chapter of a non-empty course is completed."""
        if not EnrolmentManager.is_enrolled(course_id, student_id):
            return {"eligible": False, "percentage": 0.0, "message": "Not enrolled in this course"}

        completion = ProgressManager.course_completion(student_id, course_id)

        if completion["total_chapters"] == 0:
            return {"eligible": False, "percentage": 0.0, "message": "Course has no chapters"}

        if completion["percentage"] < 100:
            return {
                "eligible": False,
                "percentage": completion["percentage"],
                "message": "Course not fully completed",
            }

        return {"eligible": True, "percentage": 100.0, "message": "Course completed"}

    @staticmethod
    def find_certificate(student_id, course_id):
        return Certificate.query.filter_by(student_id=student_id, course_id=course_id).first()

    @staticmethod
    def issue_or_fetch(student_id, course_id):
        """Returns the student's certificate for the course, minting it on first request."""
        certificate = CertificateManager.find_certificate(student_id, course_id)
        if certificate:
            return certificate

        certificate = Certificate(student_id=student_id, course_id=course_id)
        db.session.add(certificate)
        try:
            db.session.commit()
        except IntegrityError:
            # a concurrent request issued it first
            db.session.rollback()
            return CertificateManager.find_certificate(student_id, course_id)

        logger.info("Issued certificate %s to student %s for course %s", certificate.id, student_id, course_id)
        return certificate

    @staticmethod
    def get_certificate(student_id, course_id):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        eligibility = CertificateManager.check_eligibility(student_id, course_id)
        if not eligibility["eligible"]:
            raise ForbiddenError(
                "Certificate not available",
                message=eligibility["message"],
                completion_percentage=eligibility["percentage"],
            )

        certificate = CertificateManager.issue_or_fetch(student_id, course_id)
        student = db.session.get(User, student_id)

        return {
            **certificate.to_dict(),
            "student_name": student.full_name,
            "course_title": course.title,
        }

    @staticmethod
    def get_status(student_id, course_id):
        eligibility = CertificateManager.check_eligibility(student_id, course_id)
        certificate = CertificateManager.find_certificate(student_id, course_id)

        return {
            "eligible": eligibility["eligible"],
            "has_certificate": certificate is not None,
            "completion_percentage": eligibility["percentage"],
            "certificate": certificate.to_dict() if certificate else None,
            "message": eligibility["message"],
        }

    @staticmethod
    def get_my_certificates(student_id):
        rows = (
            db.session.query(Certificate, Course, User.full_name.label("mentor_name"))
            .join(Course, Course.id == Certificate.course_id)
            .join(User, User.id == Course.mentor_id)
            .filter(Certificate.student_id == student_id)
            .order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .all()
        )

        return [
            {
                "id": certificate.id,
                "issued_at": certificate.issued_at,
                "course_id": course.id,
                "course_title": course.title,
                "course_description": course.description,
                "mentor_name": mentor_name,
            }
            for certificate, course, mentor_name in rows
        ]
