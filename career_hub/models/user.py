"""
User model - platform account as seen by the learning API
"""
from sqlalchemy import Column, String, Boolean, TIMESTAMP, Uuid, func
from career_hub.database import Base
import uuid


class User(Base):
    """
    Users table - accounts are registered by the platform auth service
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default="user")  # user, admin
    is_active = Column(Boolean, nullable=False, default=True)
    notify_new_courses = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
