"""
User model with hashed password storage.

Username and email are unique case-insensitively (functional indexes on lower()).
"""

from sqlalchemy import Boolean, Column, Index, Integer, String, func

from eventify.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    is_organizer = Column(Boolean, nullable=False, default=False)
    avatar_url = Column(String(500), nullable=True)

    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
        Index("uq_users_email_lower", func.lower(email), unique=True),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
