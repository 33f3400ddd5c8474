"""
Quiz model - authored questions attached to a lesson
"""
from sqlalchemy import Column, String, Integer, Float, Text, TIMESTAMP, ForeignKey, Uuid, func
from career_hub.database import Base
from career_hub.models.types import JSONType
import uuid


QUESTION_TYPES = ("multiple-choice", "true-false", "short-answer")


class Quiz(Base):
    """
    Quizzes table - one quiz per lesson, questions kept in authored order
    """
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    lesson_id = Column(Uuid, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, unique=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    questions = Column(JSONType, nullable=False)  # Full question data with answer key
    passing_score = Column(Float, nullable=False, default=70)  # percentage
    time_limit = Column(Integer)  # minutes
    attempts = Column(Integer, nullable=False, default=3)  # maximum attempts allowed
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    @property
    def total_points(self) -> float:
        return sum(q.get("points", 1) for q in self.questions or [])

    def __repr__(self):
        return f"<Quiz(id={self.id}, lesson_id={self.lesson_id}, attempts={self.attempts})>"
