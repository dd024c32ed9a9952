"""
User model for patients, doctors and admins
"""

import enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, JSON, String
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from app.database import Base


class UserRole(str, enum.Enum):
    PATIENT = "Patient"
    DOCTOR = "Doctor"
    ADMIN = "Admin"


class User(Base):
    """Registered user; the password is only ever stored as a bcrypt hash"""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role != 'Doctor' OR (doctor_department IS NOT NULL AND doc_avatar IS NOT NULL)",
            name="ck_users_doctor_profile",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=False)
    national_id = Column(String(20), nullable=True)
    dob = Column(Date, nullable=True)
    gender = Column(String(20), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # Patient, Doctor, Admin
    doctor_department = Column(String(100), nullable=True)
    doc_avatar = Column(JSON(none_as_null=True), nullable=True)  # {"public_id": ..., "url": ...}
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @validates("role")
    def validate_role(self, key, value):
        value = UserRole(value).value
        if self.role is not None and self.role != value:
            raise ValueError("User role cannot be changed once set")
        return value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
