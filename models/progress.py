from models import db


class Progress(db.Model):
    __tablename__ = "progress"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    chapter_id = db.Column(db.Integer, db.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now(), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("student_id", "chapter_id", name="unique_student_chapter"),
        db.Index("ix_progress_student_course", "student_id", "course_id"),
    )

    chapter = db.relationship("Chapter", back_populates="progress")

    def __repr__(self):
        return f"<Progress Student {self.student_id} Chapter {self.chapter_id} completed={self.completed}>"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "chapter_id": self.chapter_id,
            "course_id": self.course_id,
            "completed": self.completed,
            "completed_at": self.completed_at,
        }
