from models import db
from sqlalchemy.orm import relationship


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    mentor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now(), nullable=False)

    mentor = relationship("User", back_populates="courses")
    chapters = relationship(
        "Chapter",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Chapter.sequence_order",
    )
    assignments = relationship("CourseAssignment", back_populates="course", cascade="all, delete-orphan", passive_deletes=True)
    certificates = relationship("Certificate", back_populates="course", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Course {self.title} (Mentor ID {self.mentor_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "mentor_id": self.mentor_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
