from sqlalchemy import Column, Integer, String, DateTime, Enum, Sequence
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from ssrportal.extension.extensions import db
import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MENTOR = "MENTOR"
    STUDENT = "STUDENT"


class User(db.Model):
    __tablename__ = 'users'

    id = Column(Integer, Sequence('user_id_seq', start=2000), primary_key=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False, default='')
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.STUDENT, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __str__(self):
        return f"User(id={self.id}, email={self.email}, role={self.role.value})"

    def __repr__(self):
        return self.__str__()
