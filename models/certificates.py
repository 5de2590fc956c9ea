from models import db


class Certificate(db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    issued_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    certificate_url = db.Column(db.String(500), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="unique_student_certificate"),
    )

    course = db.relationship("Course", back_populates="certificates")
    student = db.relationship("User")

    def __repr__(self):
        return f"<Certificate {self.id} Student {self.student_id} Course {self.course_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "issued_at": self.issued_at,
            "certificate_url": self.certificate_url,
        }
