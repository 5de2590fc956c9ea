from models import db


class CourseAssignment(db.Model):
    __tablename__ = 'course_assignments'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete="CASCADE"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    assigned_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("course_id", "student_id", name="unique_course_student"),
    )

    course = db.relationship("Course", back_populates="assignments")
    student = db.relationship("User")

    def __repr__(self):
        return f"<CourseAssignment Student {self.student_id} Course {self.course_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "student_id": self.student_id,
            "assigned_at": self.assigned_at,
        }
