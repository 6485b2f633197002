# sixkul/models/user.py
from sqlalchemy import Column, String, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base
import enum


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    PEMBINA = "PEMBINA"
    SISWA = "SISWA"


class User(Base):
    __tablename__ = "users"

    username = Column(String(100), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(150), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    avatar_url = Column(String(500))
    password_hash = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    student_profile = relationship("StudentProfile", back_populates="user", uselist=False, lazy="selectin")
    pembina_profile = relationship("PembinaProfile", back_populates="user", uselist=False, lazy="selectin")


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    user_id = Column(Uuid, ForeignKey("users.id"), unique=True, nullable=False)
    nis = Column(String(30), unique=True, nullable=False, index=True)
    class_name = Column(String(50), nullable=False)
    major = Column(String(100), nullable=False)
    phone_number = Column(String(20))

    user = relationship("User", back_populates="student_profile", lazy="selectin")
    enrollments = relationship("Enrollment", back_populates="student")
    preferences = relationship("StudentPreferences", back_populates="student", uselist=False)


class PembinaProfile(Base):
    __tablename__ = "pembina_profiles"

    user_id = Column(Uuid, ForeignKey("users.id"), unique=True, nullable=False)
    nip = Column(String(30), unique=True, nullable=False, index=True)
    expertise = Column(String(255))
    phone_number = Column(String(20))

    user = relationship("User", back_populates="pembina_profile", lazy="selectin")
    extracurriculars = relationship("Extracurricular", back_populates="pembina")
