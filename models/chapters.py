from sqlalchemy.orm import relationship
from models import db


class Chapter(db.Model):
    __tablename__ = "chapters"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    video_url = db.Column(db.String(500), nullable=True)
    sequence_order = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now(), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("course_id", "sequence_order", name="unique_course_sequence"),
    )

    course = relationship("Course", back_populates="chapters")
    progress = relationship("Progress", back_populates="chapter", cascade="all, delete-orphan", passive_deletes=True)

    @staticmethod
    def get_next_order(course_id):
        last_chapter = Chapter.query.filter_by(course_id=course_id).order_by(Chapter.sequence_order.desc()).first()
        return (last_chapter.sequence_order + 1) if last_chapter else 1

    def __repr__(self):
        return f"<Chapter {self.sequence_order}. {self.title} (Course ID {self.course_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "sequence_order": self.sequence_order,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
