"""
Course model and the enrollment association table
"""
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Text, TIMESTAMP, ForeignKey, Table, Uuid, func
)
from sqlalchemy.orm import relationship
from career_hub.database import Base
from career_hub.models.types import JSONType, utcnow
import uuid


COURSE_CATEGORIES = ("technology", "business", "design", "marketing", "personal-development", "other")
COURSE_LEVELS = ("beginner", "intermediate", "advanced")
COURSE_STATUSES = ("draft", "published", "archived")


# Enrolled-user list; the composite primary key makes a second enrollment fail
course_enrollments = Table(
    "course_enrollments",
    Base.metadata,
    Column("course_id", Uuid, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("enrolled_at", TIMESTAMP, default=utcnow),
)


class Course(Base):
    """
    Courses table - created as draft by an admin, later published
    """
    __tablename__ = "courses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(30), nullable=False)
    level = Column(String(20), nullable=False)
    thumbnail = Column(String, default="")
    instructor_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    duration = Column(Float, nullable=False)  # hours
    price = Column(Float, default=0)
    is_paid = Column(Boolean, default=False)
    tags = Column(JSONType, default=list)
    prerequisites = Column(JSONType, default=list)
    learning_outcomes = Column(JSONType, default=list)
    status = Column(String(20), nullable=False, default="draft", index=True)
    total_enrollments = Column(Integer, nullable=False, default=0)
    rating = Column(Float, default=0)
    total_ratings = Column(Integer, default=0)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    instructor = relationship("User", lazy="joined")

    def __repr__(self):
        return f"<Course(id={self.id}, title={self.title}, status={self.status})>"
