"""
QuizAttempt model - stores quiz submissions and grading
"""
from sqlalchemy import (
    Column, Integer, Float, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
)
from career_hub.database import Base
from career_hub.models.types import JSONType, utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - immutable once written, numbered per (user, quiz)
    """
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_attempt_user_quiz_number"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(Uuid, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    answers = Column(JSONType)  # Graded per-question breakdown
    score = Column(Float, nullable=False)
    total_points = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    passed = Column(Boolean, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    time_spent = Column(Integer, default=0)  # seconds
    started_at = Column(TIMESTAMP, default=utcnow)
    completed_at = Column(TIMESTAMP, default=utcnow)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return (
            f"<QuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, "
            f"attempt={self.attempt_number}, percentage={self.percentage})>"
        )
