from models import db
from werkzeug.security import generate_password_hash, check_password_hash

ROLE_STUDENT = "student"
ROLE_MENTOR = "mentor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_MENTOR, ROLE_ADMIN)


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False)  # 'student', 'mentor', 'admin'
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now(), nullable=False)

    courses = db.relationship("Course", back_populates="mentor", cascade="all, delete-orphan", passive_deletes=True)

    def set_password(self, password):
        """Hashes the password before storing."""
        self.password_hash = generate_password_hash(password, method="pbkdf2:sha256")

    def check_password(self, password):
        """Checks if a given password matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "is_approved": self.is_approved,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
