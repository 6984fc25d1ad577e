"""
models.py — SQLAlchemy ORM model for the account (User) table.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from database import Base

DEFAULT_USER_SETTINGS = {"cursor": "default", "theme": "dark"}


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    settings = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_USER_SETTINGS))
    email_templates = Column(JSON, nullable=True)

    # SHA-256 hex of the outstanding reset token, never the token itself
    reset_token_hash = Column(String(64), nullable=True, index=True)
    reset_token_expires = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<User {self.username}>"
