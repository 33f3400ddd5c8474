"""
Lesson model - ordered unit of a course
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
)
from career_hub.database import Base
from career_hub.models.types import JSONType
import uuid


LESSON_TYPES = ("video", "text", "mixed")
LESSON_STATUSES = ("draft", "published")


class Lesson(Base):
    """
    Lessons table - only published lessons count towards course progress
    """
    __tablename__ = "lessons"
    __table_args__ = (
        UniqueConstraint("course_id", "order", name="uq_lesson_course_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500))
    order = Column(Integer, nullable=False)
    type = Column(String(10), nullable=False)
    content = Column(JSONType, default=dict)  # {"text", "video_url", "video_duration"}
    resources = Column(JSONType, default=list)  # [{"title", "url", "type"}]
    duration = Column(Integer, nullable=False)  # minutes
    is_free = Column(Boolean, default=False)
    status = Column(String(20), nullable=False, default="draft")
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Lesson(id={self.id}, course_id={self.course_id}, order={self.order})>"
