"""
Database models for the Setlone backend.
Only the user table is owned here; the rest of the social schema lives elsewhere.
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """A registered account. `uid` is the public 7-digit identifier."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # The unique index is the source of truth for UID uniqueness
    uid = Column(String(7), unique=True, nullable=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    real_name = Column(String(100), nullable=True)
    birth_date = Column(String(10), nullable=True)
    phone_number = Column(String(30), unique=True, nullable=True)
    profile_image = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_code = Column(String(10), nullable=True)
    email_verification_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_users_created_at", "created_at"),
        Index("ix_users_is_active", "is_active"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, uid={self.uid}, username={self.username})>"
